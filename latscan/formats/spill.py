"""
Sample spill file.

The collection layer does not know the total sample count until every log
file has been read, and the estimator needs that count before it starts.
Samples are therefore spilled to a temporary file first and replayed.

Format:
    No header. Each sample is an unsigned 64-bit big-endian integer
    (struct format '>Q', 8 bytes). A trailing partial record is ignored.
"""

import logging
import os
import struct
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Union

logger = logging.getLogger(__name__)

SAMPLE_FORMAT = '>Q'
SAMPLE_SIZE = 8

# Number of samples fetched per read
BATCH_READ_SIZE = 512

# Default prefix for spill files
SPILL_PREFIX = 'tmp'

# Verify struct size at import
_computed = struct.calcsize(SAMPLE_FORMAT)
assert _computed == SAMPLE_SIZE, \
    f"Sample size mismatch: {_computed} != {SAMPLE_SIZE}"

_packer = struct.Struct(SAMPLE_FORMAT)


class SpillWriter:
    """
    Write samples to a new temporary spill file.

    Usage:
        with SpillWriter(directory='.') as writer:
            for value in samples:
                writer.write(value)
        total = writer.count
        path = writer.path
    """

    def __init__(
        self,
        directory: Union[str, Path, None] = None,
        prefix: str = SPILL_PREFIX,
        path: Union[str, Path, None] = None,
    ):
        """
        Args:
            directory: Where to create the temporary file (default: system temp dir)
            prefix: Temporary file name prefix
            path: Write to this exact path instead of a new temporary file
        """
        self.directory = directory
        self.prefix = prefix
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.count = 0
        self._file = None

    def open(self) -> 'SpillWriter':
        if self.path is None:
            fd, name = tempfile.mkstemp(prefix=self.prefix, dir=self.directory)
            self.path = Path(name)
            self._file = os.fdopen(fd, 'wb')
        else:
            self._file = open(self.path, 'wb')
        logger.debug(f"Spill file opened: {self.path}")
        return self

    def write(self, value: int) -> None:
        """Append one sample. Raises struct.error outside the u64 range."""
        self._file.write(_packer.pack(value))
        self.count += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug(f"Spill file closed: {self.path} ({self.count} samples)")

    def __enter__(self) -> 'SpillWriter':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class SpillReader:
    """
    Read samples back from a spill file.

    Usage:
        for value in SpillReader.read(path):
            estimator.add(value)
    """

    @classmethod
    def read(cls, path: Union[str, Path], batch_size: int = BATCH_READ_SIZE) -> Iterator[int]:
        """
        Yield samples in file order.

        Args:
            path: Spill file path
            batch_size: Samples per read call

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If batch_size < 1
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        chunk = batch_size * SAMPLE_SIZE
        with open(path, 'rb') as f:
            while True:
                raw = f.read(chunk)
                if not raw:
                    break
                usable = len(raw) - len(raw) % SAMPLE_SIZE
                for (value,) in _packer.iter_unpack(raw[:usable]):
                    yield value
                if len(raw) < chunk:
                    break

    @classmethod
    def count(cls, path: Union[str, Path]) -> int:
        """Number of complete samples in a spill file."""
        return Path(path).stat().st_size // SAMPLE_SIZE

    @classmethod
    def remove(cls, path: Union[str, Path]) -> None:
        """Delete a spill file if it still exists."""
        path = Path(path)
        if path.exists():
            path.unlink()
            logger.debug(f"Spill file removed: {path}")
