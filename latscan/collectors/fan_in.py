"""
Fan-in of concurrent log readers.

One reader thread per source pushes messages onto a shared bounded queue:

    (index, value)            one latency sample
    (index, SourceDone)       end of source, always sent last, even on error

The consumer iterates the fan-in and receives every sample from every
source in arrival order. A source leaves the active set when its
SourceDone arrives; iteration ends once the active set is empty.

If the consumer stops early (an exception in its loop, or closing the
iterator), the fan-in is stopped: readers drop what they hold and exit.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Set, Union

from .access_log import DEFAULT_FORMAT, LogLineFormat, ScanStats, scan_file

logger = logging.getLogger(__name__)

# Per-source buffering between reader threads and the consumer
DEFAULT_QUEUE_SIZE = 10

# Seconds a reader waits on a full queue before rechecking for stop
PUT_TIMEOUT = 0.1

# Seconds stop() waits for each reader thread
JOIN_TIMEOUT = 2.0


@dataclass
class SourceDone:
    """Completion message sent by a reader thread."""
    stats: ScanStats
    error: Optional[str] = None


@dataclass
class SourceResult:
    """What a finished source produced."""
    path: Path
    stats: ScanStats
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceFanIn:
    """
    Read many log files concurrently into one ordered stream.

    Example:
        fan_in = SourceFanIn(find_log_files('/var/log/httpd'))
        for latency in fan_in:
            writer.write(latency)
        for result in fan_in.results:
            print(result.path, result.stats.samples, result.error)
    """

    def __init__(
        self,
        paths: Sequence[Union[str, Path]],
        fmt: LogLineFormat = DEFAULT_FORMAT,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ):
        """
        Args:
            paths: Log files, one reader thread each
            fmt: Line format shared by all sources
            queue_size: Buffered messages per source
        """
        if queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {queue_size}")

        self.paths = [Path(p) for p in paths]
        self.fmt = fmt
        self.queue_size = queue_size

        self.results: List[Optional[SourceResult]] = [None] * len(self.paths)
        self.samples_received = 0

        self._queue: queue.Queue = queue.Queue(maxsize=queue_size * max(1, len(self.paths)))
        self._threads: List[threading.Thread] = []
        self._started = False
        self._running = False

    def _read_source(self, index: int) -> None:
        """Reader thread body."""
        path = self.paths[index]
        stats = ScanStats()
        error = None
        try:
            for value in scan_file(path, self.fmt, stats):
                if not self._put((index, value)):
                    logger.debug(f"Reader stopped early: {path}")
                    return
        except OSError as e:
            error = str(e)
            logger.error(f"Failed to read {path}: {e}")
        finally:
            self._put((index, SourceDone(stats=stats, error=error)))

    def _put(self, message) -> bool:
        """Queue a message, giving up once the fan-in is stopped."""
        while self._running:
            try:
                self._queue.put(message, timeout=PUT_TIMEOUT)
                return True
            except queue.Full:
                continue
        return False

    def start(self) -> None:
        """Start one reader thread per source."""
        if self._started:
            raise RuntimeError("Fan-in already started")
        self._started = True
        self._running = True

        for index, path in enumerate(self.paths):
            thread = threading.Thread(
                target=self._read_source,
                args=(index,),
                name=f"latscan-reader-{index}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()

    def stop(self) -> None:
        """Stop the readers and wait for them to exit."""
        self._running = False
        for thread in self._threads:
            thread.join(timeout=JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning(f"Reader thread did not stop: {thread.name}")

    def __iter__(self) -> Iterator[int]:
        if not self._started:
            self.start()

        active: Set[int] = set(range(len(self.paths)))
        try:
            while active:
                index, message = self._queue.get()
                if isinstance(message, SourceDone):
                    active.discard(index)
                    self.results[index] = SourceResult(
                        path=self.paths[index],
                        stats=message.stats,
                        error=message.error,
                    )
                    logger.debug(
                        f"Source finished: {self.paths[index]} "
                        f"({message.stats.samples} samples, {len(active)} still active)"
                    )
                    continue
                self.samples_received += 1
                yield message
        finally:
            self.stop()

    @property
    def running(self) -> bool:
        """True while any reader thread is alive."""
        return any(thread.is_alive() for thread in self._threads)

    @property
    def failed(self) -> List[SourceResult]:
        """Sources that ended with an error."""
        return [r for r in self.results if r is not None and not r.ok]
