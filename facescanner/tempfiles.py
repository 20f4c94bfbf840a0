"""Scoped temporary files used to hand byte payloads to the engine.

The engine and the image codec only accept file paths, so uploaded bytes
go through a short-lived file that is deleted when its scope exits.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from facescanner.errors import ExchangeFileError
from facescanner.logging_config import get_logger

logger = get_logger(__name__)


def write_temp_file(
    data: bytes,
    prefix: str,
    suffix: str,
    directory: Optional[Path] = None,
) -> Path:
    """Write bytes into a fresh temporary file.

    Args:
        data: Payload to write
        prefix: File name prefix
        suffix: File name suffix (extension)
        directory: Parent directory (system temp dir if None)

    Returns:
        Path of the new file. The caller is responsible for deleting it.

    Raises:
        ExchangeFileError: If the file cannot be created or written. No file
            is left behind in that case.
    """
    try:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    except OSError as e:
        raise ExchangeFileError(f"Could not create temporary file: {e}") from e

    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except OSError as e:
        delete_file(path)
        raise ExchangeFileError(f"Could not write temporary file {path}: {e}") from e

    return path


def delete_file(path: Optional[Path]) -> None:
    """Delete a file if it exists. Failures are logged, not raised."""
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete temporary file {path}: {e}")


class TempExchangeFile:
    """Context manager holding a payload on disk for the duration of one call.

    Example:
        >>> with TempExchangeFile(photo_bytes) as path:
        ...     image = codec.decode_file(str(path))
        >>> path.exists()
        False
    """

    def __init__(
        self,
        data: bytes,
        prefix: str = "face",
        suffix: str = ".jpg",
        directory: Optional[Path] = None,
    ):
        self.data = data
        self.prefix = prefix
        self.suffix = suffix
        self.directory = directory
        self.path: Optional[Path] = None

    def __enter__(self) -> Path:
        self.path = write_temp_file(self.data, self.prefix, self.suffix, self.directory)
        logger.debug(f"Wrote {len(self.data)} bytes to {self.path}")
        return self.path

    def __exit__(self, exc_type, exc, tb) -> None:
        delete_file(self.path)
        self.path = None
