"""
Bounded percentile estimation.

Answers several tail-percentile queries from one pass over a latency stream
while keeping only the largest `N * r_max` samples in memory.

Phase 1 (bounded ingestion):
    A MIN counting heap keeps roughly the `cache_size` largest samples seen.
    Once the heap is full, a sample only gets in if it beats the root, and
    the root group is evicted while the rest still covers `cache_size`.

Phase 2 (progressive shrink):
    For each rate in descending order, pop roots until at most
    `rate * N` samples remain; the root is then the estimate for the
    `(1 - rate) * 100`-th percentile. The heap only shrinks, so stricter
    percentiles never report a smaller latency than looser ones.

Retained weight is approximate: evicting a group of duplicates can
overshoot the target by up to the group's count minus one.

Example:
    rates = rates_from_percentiles([90, 95, 99])   # [0.1, 0.05, 0.01]
    estimator = BoundedPercentileEstimator(total_count=len(samples), rates=rates)
    estimator.ingest(samples)
    for est in estimator.estimates():
        print(f"P{est.percentile:g}: {est.latency} ms")
"""

from dataclasses import dataclass, asdict
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence

from ..heap import CountingHeap, HeapKind

# Initial capacity hint for the retained-sample heap
HEAP_INIT_CAPACITY = 1024


@dataclass
class PercentileEstimate:
    """One percentile answer."""
    rate: float
    percentile: float
    latency: int
    # Samples still represented when the estimate was read; 0 means the
    # heap was empty and latency is a placeholder.
    retained: int

    def to_dict(self) -> dict:
        return asdict(self)


def rate_to_percentile(rate: float) -> float:
    """Rate 0.01 -> percentile 99.0."""
    return round((1.0 - rate) * 100, 6)


def rates_from_percentiles(percentiles: Iterable[int]) -> List[float]:
    """
    Convert percentiles (0-100) to rates, sorted descending.

    Raises:
        ValueError: On an empty list or a percentile outside [0, 100].
    """
    rates = []
    for p in percentiles:
        if not 0 <= p <= 100:
            raise ValueError(f"Percentile must be in [0, 100], got {p}")
        rates.append((100 - p) / 100.0)

    if not rates:
        raise ValueError("At least one percentile is required")

    rates.sort(reverse=True)
    return rates


def sample_target(rate: float, total_count: int) -> int:
    """
    floor(rate * total_count), computed on the decimal value of the rate.

    Binary floats would turn 0.29 * 100 into 28.999999999999996.
    """
    return int(Fraction(str(rate)) * total_count)


def _check_rates(rates: Sequence[float]) -> None:
    if not rates:
        raise ValueError("At least one rate is required")
    for rate in rates:
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"Rate must be in [0, 1], got {rate}")
    for prev, cur in zip(rates, rates[1:]):
        if cur > prev:
            raise ValueError(f"Rates must be sorted descending: {list(rates)}")


def bounded_ingest(heap: CountingHeap, samples: Iterable[int], cache_size: int) -> None:
    """
    Feed samples into a MIN heap, keeping about `cache_size` of the largest.

    Args:
        heap: Heap to fill (HeapKind.MIN)
        samples: Latency values
        cache_size: Target retained weight
    """
    for value in samples:
        if heap.total_weight() < cache_size:
            heap.insert(value)
        elif value > heap.top_value():
            heap.insert(value)
            # With cache_size 0 this drains the heap, so stop once empty
            while len(heap) and heap.total_weight() - heap.top_count() >= cache_size:
                heap.pop()


def progressive_shrink(
    heap: CountingHeap,
    total_count: int,
    rates: Sequence[float],
) -> List[PercentileEstimate]:
    """
    Shrink the heap rate by rate and read each percentile off the root.

    Rates must be sorted descending. Results come back in the same order.
    """
    results = []
    for rate in rates:
        target = sample_target(rate, total_count)
        while heap.total_weight() > target:
            heap.pop()
        results.append(PercentileEstimate(
            rate=rate,
            percentile=rate_to_percentile(rate),
            latency=heap.top_value(),
            retained=heap.total_weight(),
        ))
    return results


class BoundedPercentileEstimator:
    """
    Two-phase percentile estimator over a single latency stream.

    The caller must know the total number of samples up front (the
    collection layer counts them while spilling to disk).

    Example:
        estimator = BoundedPercentileEstimator(total_count=10_000, rates=[0.1, 0.01])
        estimator.ingest(read_samples())
        p90, p99 = estimator.estimates()
    """

    def __init__(
        self,
        total_count: int,
        rates: Sequence[float],
        capacity: int = HEAP_INIT_CAPACITY,
    ):
        """
        Initialize estimator.

        Args:
            total_count: Number of samples that will be fed in
            rates: Descending rates in [0, 1]; rate r answers percentile (1 - r) * 100
            capacity: Initial capacity hint for the heap

        Raises:
            ValueError: On a negative count or invalid rates
        """
        if total_count < 0:
            raise ValueError(f"total_count must be >= 0, got {total_count}")
        _check_rates(rates)

        self.total_count = total_count
        self.rates = list(rates)
        self.heap = CountingHeap(capacity, HeapKind.MIN)
        self._results: Optional[List[PercentileEstimate]] = None

    @property
    def cache_size(self) -> int:
        """Retained weight target for phase 1: floor(N * r_max)."""
        return sample_target(self.rates[0], self.total_count)

    def add(self, value: int) -> None:
        """Ingest one sample."""
        self.ingest((value,))

    def ingest(self, samples: Iterable[int]) -> None:
        """Ingest a batch of samples."""
        if self._results is not None:
            raise RuntimeError("Estimator already produced its estimates")
        bounded_ingest(self.heap, samples, self.cache_size)

    def estimates(self) -> List[PercentileEstimate]:
        """
        Run the progressive shrink and return one estimate per rate.

        Ends ingestion. Later calls return the cached answers.
        """
        if self._results is None:
            self._results = progressive_shrink(self.heap, self.total_count, self.rates)
        return list(self._results)


def estimate_percentiles(
    samples: Iterable[int],
    total_count: int,
    rates: Sequence[float],
) -> List[PercentileEstimate]:
    """Ingest samples and return estimates in one call."""
    estimator = BoundedPercentileEstimator(total_count, rates)
    estimator.ingest(samples)
    return estimator.estimates()
