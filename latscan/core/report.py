"""
Report schema for latscan results.

Reports are structured JSON documents containing:
- Metadata (version, timestamp, source directory)
- Collection counters (files, samples, rejected lines)
- One estimate per requested percentile
- Errors met while collecting
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .. import __version__
from .errors import ScanError
from ..streaming.estimator import PercentileEstimate


class ReportStatus(Enum):
    """Overall report status."""
    OK = 'ok'
    WARNING = 'warning'
    ERROR = 'error'


@dataclass
class PercentileReport:
    """
    Complete analysis report.

    Example:
        report = PercentileReport(source_dir='/var/log/httpd')
        report.total_samples = 120000
        report.estimates = estimator.estimates()
        print(report.to_json())
    """
    # Metadata
    version: int = 1
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    latscan_version: str = __version__

    # Source information
    source_dir: Optional[str] = None
    files_scanned: int = 0
    files_failed: int = 0

    # Collection counters
    total_samples: int = 0
    lines_rejected: int = 0
    duration_seconds: float = 0.0
    unit: str = 'ms'

    estimates: List[PercentileEstimate] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)

    def add_error(self, error: ScanError) -> None:
        """Add an error to the report."""
        self.errors.append(error)

    @property
    def status(self) -> ReportStatus:
        """ERROR if any error-severity entry, WARNING if any warning, else OK."""
        severities = {e.severity for e in self.errors}
        if 'error' in severities:
            return ReportStatus.ERROR
        if 'warning' in severities:
            return ReportStatus.WARNING
        return ReportStatus.OK

    def sorted_estimates(self) -> List[PercentileEstimate]:
        """Estimates from the loosest to the strictest percentile."""
        return sorted(self.estimates, key=lambda e: e.percentile)

    def format_lines(self) -> List[str]:
        """One human-readable line per percentile."""
        return [
            f"{int(est.percentile)}% of requests return a response in {est.latency} {self.unit}"
            for est in self.sorted_estimates()
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'version': self.version,
            'created_at': self.created_at,
            'latscan_version': self.latscan_version,
            'source': {
                'directory': self.source_dir,
                'files_scanned': self.files_scanned,
                'files_failed': self.files_failed,
            },
            'status': self.status.value,
            'samples': {
                'total': self.total_samples,
                'lines_rejected': self.lines_rejected,
            },
            'duration_seconds': round(self.duration_seconds, 4),
            'unit': self.unit,
            'percentiles': [est.to_dict() for est in self.sorted_estimates()],
            'errors': [e.to_dict() for e in self.errors],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def summary(self) -> str:
        """Get human-readable summary."""
        lines = [
            "latscan Analysis Report",
            f"Status: {self.status.value.upper()}",
            "",
            f"Files:   {self.files_scanned} scanned, {self.files_failed} failed",
            f"Samples: {self.total_samples:,} ({self.lines_rejected:,} lines rejected)",
            "",
        ]
        lines.extend(self.format_lines())
        for error in self.errors:
            lines.append(f"[{error.code.value}] {error.message}")
        return '\n'.join(lines)
