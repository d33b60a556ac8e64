"""Core analysis engine for latscan."""

from .errors import ErrorCode, ScanError, ERROR_METADATA
from .report import ReportStatus, PercentileReport
from .analysis import LatencyAnalyzer

__all__ = [
    # Errors
    'ErrorCode',
    'ScanError',
    'ERROR_METADATA',
    # Report
    'ReportStatus',
    'PercentileReport',
    # Analysis
    'LatencyAnalyzer',
]
