"""On-disk sample formats."""

from .spill import (
    SpillWriter,
    SpillReader,
    SAMPLE_FORMAT,
    SAMPLE_SIZE,
    BATCH_READ_SIZE,
    SPILL_PREFIX,
)

__all__ = [
    'SpillWriter',
    'SpillReader',
    'SAMPLE_FORMAT',
    'SAMPLE_SIZE',
    'BATCH_READ_SIZE',
    'SPILL_PREFIX',
]
