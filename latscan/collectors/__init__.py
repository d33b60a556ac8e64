"""Log collection: line parsing and concurrent per-file readers."""

from .access_log import (
    LogLineFormat,
    DEFAULT_FORMAT,
    ScanStats,
    is_line_valid,
    parse_latency,
    scan_file,
    find_log_files,
)
from .fan_in import SourceFanIn, SourceResult, SourceDone, DEFAULT_QUEUE_SIZE

__all__ = [
    'LogLineFormat',
    'DEFAULT_FORMAT',
    'ScanStats',
    'is_line_valid',
    'parse_latency',
    'scan_file',
    'find_log_files',
    'SourceFanIn',
    'SourceResult',
    'SourceDone',
    'DEFAULT_QUEUE_SIZE',
]
