"""
End-to-end latency analysis.

Pipeline:
    1. find *.log files in the configured directory
    2. read them concurrently (one thread per file) and fan the valid
       response times into a single spill file, counting them
    3. replay the spill file through a BoundedPercentileEstimator sized
       from the total count
    4. remove the spill file and return a PercentileReport
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import ErrorCode, ScanError
from .report import PercentileReport
from ..collectors.access_log import find_log_files
from ..collectors.fan_in import SourceFanIn
from ..config.schema import LatscanConfig
from ..formats.spill import SpillReader, SpillWriter
from ..streaming.estimator import (
    BoundedPercentileEstimator,
    PercentileEstimate,
    rates_from_percentiles,
)

logger = logging.getLogger(__name__)


class LatencyAnalyzer:
    """
    High-level analyzer that processes a directory of access logs.

    Example:
        analyzer = LatencyAnalyzer(load_config())
        report = analyzer.analyze_directory('/var/log/httpd', [90, 99])
        print('\\n'.join(report.format_lines()))
    """

    def __init__(self, config: LatscanConfig = None):
        self.config = config or LatscanConfig()

    def analyze_directory(
        self,
        directory: Union[str, Path, None] = None,
        percentiles: Optional[Sequence[int]] = None,
    ) -> PercentileReport:
        """
        Analyze every log file in a directory.

        A spill file that can't be written is reported as E1004 and the
        report comes back without estimates.

        Args:
            directory: Log directory (default: config scan.path)
            percentiles: Percentiles 0-100 (default: config analysis.percentiles)

        Raises:
            ValueError: On an invalid percentile list
            FileNotFoundError: If the directory doesn't exist
        """
        cfg = self.config
        directory = Path(directory if directory is not None else cfg.scan.path)
        if percentiles is None:
            percentiles = cfg.analysis.percentiles

        rates = rates_from_percentiles(percentiles)
        start = time.time()

        report = PercentileReport(source_dir=str(directory))
        files = find_log_files(directory, cfg.scan.suffix)
        report.files_scanned = len(files)

        if not files:
            report.add_error(ScanError(
                code=ErrorCode.E1002_NO_LOG_FILES,
                context={'directory': str(directory), 'suffix': cfg.scan.suffix},
            ))
            report.duration_seconds = time.time() - start
            return report

        try:
            spill_path, total = self._collect(files, report)
        except OSError as e:
            report.add_error(ScanError(
                code=ErrorCode.E1004_SPILL_WRITE_FAILED,
                context={'spill_dir': str(cfg.analysis.spill_dir), 'reason': str(e)},
            ))
            report.duration_seconds = time.time() - start
            return report

        try:
            if total == 0:
                report.add_error(ScanError(
                    code=ErrorCode.E1003_NO_VALID_SAMPLES,
                    context={'directory': str(directory)},
                ))
            report.total_samples = total
            report.estimates = self.analyze_spill(spill_path, total, rates)
        finally:
            SpillReader.remove(spill_path)

        report.duration_seconds = time.time() - start
        return report

    def _collect(self, files: List[Path], report: PercentileReport):
        """
        Fan all files into a spill file. Returns (spill path, sample count).

        Raises:
            OSError: If the spill file can't be created or written; the
                readers are stopped and the partial file removed.
        """
        cfg = self.config
        fan_in = SourceFanIn(files, cfg.log_format.to_format(), cfg.scan.queue_size)
        writer = SpillWriter(directory=cfg.analysis.spill_dir, prefix=cfg.analysis.spill_prefix)

        try:
            with writer:
                for value in fan_in:
                    writer.write(value)
        except OSError as e:
            logger.error(f"Spill write failed: {e}")
            fan_in.stop()
            if writer.path is not None:
                SpillReader.remove(writer.path)
            raise

        for result in fan_in.results:
            report.lines_rejected += result.stats.rejected
            if not result.ok:
                report.files_failed += 1
                report.add_error(ScanError(
                    code=ErrorCode.E1001_SOURCE_UNREADABLE,
                    context={'path': str(result.path), 'reason': result.error},
                ))

        logger.info(
            f"Collected {writer.count} samples from {len(files)} file(s), "
            f"{report.lines_rejected} lines rejected"
        )
        return writer.path, writer.count

    def analyze_spill(
        self,
        path: Union[str, Path],
        total_count: int,
        rates: Sequence[float],
    ) -> List[PercentileEstimate]:
        """Run the estimator over an existing spill file."""
        estimator = BoundedPercentileEstimator(
            total_count,
            rates,
            capacity=self.config.analysis.heap_capacity,
        )
        estimator.ingest(SpillReader.read(path, self.config.analysis.batch_read_size))
        logger.debug(
            f"Retained {estimator.heap.total_weight()} samples "
            f"({estimator.heap.distinct_count()} distinct) for cache size {estimator.cache_size}"
        )

        estimates = estimator.estimates()
        for est in estimates:
            logger.info(f"P{est.percentile:g}: {est.latency} (retained {est.retained})")
        return estimates
