"""Streaming percentile estimation."""

from .estimator import (
    HEAP_INIT_CAPACITY,
    PercentileEstimate,
    BoundedPercentileEstimator,
    bounded_ingest,
    progressive_shrink,
    estimate_percentiles,
    rates_from_percentiles,
    rate_to_percentile,
    sample_target,
)

__all__ = [
    'HEAP_INIT_CAPACITY',
    'PercentileEstimate',
    'BoundedPercentileEstimator',
    'bounded_ingest',
    'progressive_shrink',
    'estimate_percentiles',
    'rates_from_percentiles',
    'rate_to_percentile',
    'sample_target',
]
