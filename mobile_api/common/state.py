"""
File-Based State

The presence of config.json is state shared with the boot sequence, which
decides between provisioned and access-point mode by looking at the file.
Writers therefore never touch the target in place: content goes to a temp
file in the same directory, is fsynced, and is renamed over the target.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def fsync_directory(directory: Path) -> None:
    """Persist a rename or unlink in the directory entry"""
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write_text(path: Path, text: str, mode: int = 0o600) -> None:
    """
    Replace path with text so readers see either the old or the new file.

    Args:
        path: Target file
        text: Complete new content
        mode: Permission bits for the new file

    Raises:
        OSError: On any failure; the temp file is removed and the old
            file is left untouched
    """
    directory = path.parent
    fd, temp_name = tempfile.mkstemp(
        dir=directory, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_name, mode)
        os.replace(temp_name, path)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise

    fsync_directory(directory)


def read_json(path: Path) -> Any:
    """
    Read a JSON state file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the content is not JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def remove_state_file(path: Path) -> bool:
    """
    Delete a state file.

    Returns:
        True if deleted, False if it was already absent
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    fsync_directory(path.parent)
    return True
