"""
System Services

Responsibilities:
- Report system metrics (CPU, memory, disk, uptime, load average)
"""

from .metrics_collector import MetricsCollector, SystemMetrics

__all__ = ["MetricsCollector", "SystemMetrics"]
