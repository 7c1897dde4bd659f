"""
File utilities - Stored video housekeeping
"""

from pathlib import Path
from typing import Optional

from .logging import get_logger

logger = get_logger(__name__, component="files")


def ensure_directory(dir_path: Path) -> Path:
    """Ensure directory exists, creating if necessary

    Args:
        dir_path: Directory path

    Returns:
        The directory path
    """
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def remove_file(file_path: Optional[Path]) -> bool:
    """Delete a stored file if it is still there.

    Failures are logged rather than raised; a leftover file never blocks a
    session transition.

    Returns:
        True if a file was removed
    """
    if file_path is None or not file_path.exists():
        return False
    try:
        file_path.unlink()
    except OSError as exc:
        logger.warning(f"Could not remove {file_path}: {exc}")
        return False
    logger.debug(f"Removed {file_path}")
    return True
