"""Raw EEPROM backup files.

A backup is the exact byte content of a region with no header: 256 bytes
for the internal EEPROM, 8192 for the external EEPROM and 0x48 for a
signature block.
"""

from __future__ import annotations

from pathlib import Path

from i1d3tool.exceptions import BackupFileError
from i1d3tool.utils.logging import get_logger

logger = get_logger(__name__)


def load_image(path: str | Path, size: int) -> bytearray:
    """Read a backup file that must be exactly ``size`` bytes long."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise BackupFileError(f"Failed to open file {path} for reading: {exc}") from exc

    if len(data) != size:
        raise BackupFileError(
            f"Failed to read file {path}: expected {size} bytes, found {len(data)}"
        )
    logger.debug("backup_loaded", path=str(path), size=size)
    return bytearray(data)


def save_image(path: str | Path, data: bytes | bytearray, overwrite: bool = False) -> None:
    """Write a backup file; refuse to replace an existing file unless ``overwrite``."""
    path = Path(path)
    mode = "wb" if overwrite else "xb"
    try:
        with path.open(mode) as fh:
            fh.write(data)
    except FileExistsError as exc:
        raise BackupFileError(
            f"File {path} already exists, use --force to overwrite"
        ) from exc
    except OSError as exc:
        raise BackupFileError(f"Failed to write file {path}: {exc}") from exc
    logger.debug("backup_saved", path=str(path), size=len(data))


def ensure_writable(path: str | Path, overwrite: bool = False) -> None:
    """Fail early if ``path`` exists and may not be overwritten."""
    path = Path(path)
    if path.exists() and not overwrite:
        raise BackupFileError(f"File {path} already exists, use --force to overwrite")
