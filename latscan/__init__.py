"""
latscan - Response-time percentiles for large access logs.

This package provides:
- heap: Counting heap that coalesces duplicate latencies
- streaming: Bounded two-phase percentile estimator
- collectors: Access log parsing and concurrent per-file readers
- formats: Sample spill file
- config: YAML configuration with environment variable support
- core: Analysis pipeline, reports and error codes
- cli: Command-line interface
"""

__version__ = "0.3.0"

from .heap import CountingHeap, HeapKind, Node
from .streaming import (
    BoundedPercentileEstimator,
    PercentileEstimate,
    estimate_percentiles,
    rates_from_percentiles,
)
from .collectors import LogLineFormat, SourceFanIn, parse_latency, scan_file, find_log_files
from .config import LatscanConfig, load_config
from .core import LatencyAnalyzer, PercentileReport, ReportStatus, ErrorCode, ScanError

__all__ = [
    # Version
    '__version__',
    # Heap
    'CountingHeap',
    'HeapKind',
    'Node',
    # Streaming
    'BoundedPercentileEstimator',
    'PercentileEstimate',
    'estimate_percentiles',
    'rates_from_percentiles',
    # Collectors
    'LogLineFormat',
    'SourceFanIn',
    'parse_latency',
    'scan_file',
    'find_log_files',
    # Config
    'LatscanConfig',
    'load_config',
    # Core
    'LatencyAnalyzer',
    'PercentileReport',
    'ReportStatus',
    'ErrorCode',
    'ScanError',
]
