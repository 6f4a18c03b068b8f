"""
System Metrics Collector

Collects host metrics for the device status endpoint:
- CPU usage (overall and per core)
- Memory and swap usage
- Disk usage
- Host uptime
- Load average

Sampling runs on a worker thread and is abandoned after a timeout, so a
stuck filesystem query fails the request instead of hanging it.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import psutil

from mobile_api.common.exceptions import StatusTimeoutError, StatusUnavailableError
from mobile_api.common.logging_setup import get_service_logger

logger = get_service_logger("system.metrics")


@dataclass
class DiskStatus:
    """Usage of one mounted filesystem"""
    device: str
    mount_point: str
    file_system: str
    total_bytes: int
    used_bytes: int
    available_bytes: int
    usage_percent: float


@dataclass
class SystemMetrics:
    """System metrics data"""
    cpu_usage_percent: float
    cpu_usage_per_core: list[float]
    memory_total_bytes: int
    memory_used_bytes: int
    memory_available_bytes: int
    swap_total_bytes: int | None
    swap_used_bytes: int | None
    disk_total_bytes: int
    disk_used_bytes: int
    uptime_seconds: int
    load_average_1: float
    load_average_5: float
    load_average_15: float
    timestamp: str
    disks: list[DiskStatus] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class MetricsCollector:
    """Collects system metrics from the host"""

    def __init__(
        self,
        disk_path: Path = Path("/"),
        timeout_seconds: float = 2.0,
        cpu_interval: float = 0.1,
    ):
        self.disk_path = disk_path
        self.timeout_seconds = timeout_seconds
        self.cpu_interval = cpu_interval
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="metrics")

    def snapshot(self) -> SystemMetrics:
        """
        Sample current system metrics.

        Raises:
            StatusTimeoutError: If sampling takes longer than timeout_seconds
            StatusUnavailableError: If the host refuses a query (e.g. disk_path is gone)
        """
        future = self._executor.submit(self.collect)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            logger.error(
                f"Metrics sampling exceeded {self.timeout_seconds}s",
                extra={"timeout_seconds": self.timeout_seconds},
            )
            raise StatusTimeoutError(self.timeout_seconds) from None
        except (OSError, psutil.Error) as e:
            logger.error(f"Metrics sampling failed: {e}", extra={"error_type": type(e).__name__})
            raise StatusUnavailableError(str(e)) from e

    def close(self) -> None:
        """Stop the sampling worker"""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def collect(self) -> SystemMetrics:
        """Collect current system metrics on the calling thread"""
        per_core = self._get_cpu_usage_per_core()
        memory = psutil.virtual_memory()
        swap_total, swap_used = self._get_swap_usage()
        disk = psutil.disk_usage(str(self.disk_path))
        load_1, load_5, load_15 = psutil.getloadavg()

        return SystemMetrics(
            cpu_usage_percent=round(sum(per_core) / len(per_core), 1) if per_core else 0.0,
            cpu_usage_per_core=per_core,
            memory_total_bytes=memory.total,
            memory_used_bytes=memory.total - memory.available,
            memory_available_bytes=memory.available,
            swap_total_bytes=swap_total,
            swap_used_bytes=swap_used,
            disk_total_bytes=disk.total,
            disk_used_bytes=disk.used,
            uptime_seconds=self.get_uptime_seconds(),
            load_average_1=round(load_1, 2),
            load_average_5=round(load_5, 2),
            load_average_15=round(load_15, 2),
            timestamp=datetime.now(timezone.utc).isoformat(),
            disks=self._get_disks(),
        )

    def _get_cpu_usage_per_core(self) -> list[float]:
        """Get CPU usage percentage for each core"""
        return [round(value, 1) for value in psutil.cpu_percent(interval=self.cpu_interval, percpu=True)]

    def _get_swap_usage(self) -> tuple[int | None, int | None]:
        """Get swap total/used, or (None, None) on systems without swap"""
        swap = psutil.swap_memory()
        if swap.total <= 0:
            return None, None
        return swap.total, swap.used

    def _get_disks(self) -> list[DiskStatus]:
        """Get usage for every mounted physical filesystem, sorted by device"""
        disks: list[DiskStatus] = []
        seen: set[str] = set()

        for partition in sorted(psutil.disk_partitions(all=False), key=lambda p: p.device):
            if partition.device in seen:
                continue
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as e:
                logger.debug(f"Skipping {partition.mountpoint}: {e}")
                continue
            seen.add(partition.device)
            disks.append(DiskStatus(
                device=partition.device,
                mount_point=partition.mountpoint,
                file_system=partition.fstype,
                total_bytes=usage.total,
                used_bytes=usage.used,
                available_bytes=usage.free,
                usage_percent=round(usage.percent, 1),
            ))

        return disks

    def get_uptime_seconds(self) -> int:
        """Get host uptime in seconds"""
        return max(0, int(time.time() - psutil.boot_time()))
