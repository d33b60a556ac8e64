"""
Access log parsing.

Extracts response times of successful read requests from space-separated
access log lines. With the default format, a line such as

    10.0.0.7 - "GET /api/items" 200 35

is split on single spaces and checked field by field:

    Field  Example   Rule
    2      "GET      quote + verb, i.e. text after the first character == GET
    4      200       status must equal "200"
    5      35        response time, base-10 non-negative integer

Anything else is rejected and counted, never raised.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from ..heap import U64_MAX

logger = logging.getLogger(__name__)


@dataclass
class LogLineFormat:
    """Where to find the fields of interest in a split log line."""
    verb_field: int = 2
    status_field: int = 4
    time_field: int = 5
    verb: str = 'GET'
    status: str = '200'

    @property
    def min_fields(self) -> int:
        return max(self.verb_field, self.status_field, self.time_field) + 1


DEFAULT_FORMAT = LogLineFormat()


@dataclass
class ScanStats:
    """Per-source line counters."""
    lines_read: int = 0
    samples: int = 0
    rejected: int = 0


def is_line_valid(words: Sequence[str], fmt: LogLineFormat = DEFAULT_FORMAT) -> bool:
    """Check that a split line is a successful request with the wanted verb."""
    if len(words) < fmt.min_fields:
        return False

    verb = words[fmt.verb_field]
    if len(verb) < len(fmt.verb) + 1 or verb[1:] != fmt.verb:
        return False

    return words[fmt.status_field] == fmt.status


def parse_latency(line: str, fmt: LogLineFormat = DEFAULT_FORMAT) -> Optional[int]:
    """
    Extract the response time from one log line.

    Returns:
        Latency as a u64-range int, or None if the line is not a valid
        request line or the time field is not a usable integer.
    """
    words = line.strip().split(' ')
    if not is_line_valid(words, fmt):
        return None

    text = words[fmt.time_field]
    if not text.isascii() or not text.lstrip('+-').isdigit():
        return None
    try:
        value = int(text, 10)
    except ValueError:
        return None

    if value < 0 or value > U64_MAX:
        return None
    return value


def scan_file(
    path: Union[str, Path],
    fmt: LogLineFormat = DEFAULT_FORMAT,
    stats: Optional[ScanStats] = None,
) -> Iterator[int]:
    """
    Yield latencies from every valid line of a log file.

    Args:
        path: Log file path
        fmt: Line format
        stats: Counters updated while scanning

    Raises:
        OSError: If the file can't be opened or read
    """
    if stats is None:
        stats = ScanStats()

    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            stats.lines_read += 1
            value = parse_latency(line, fmt)
            if value is None:
                stats.rejected += 1
                continue
            stats.samples += 1
            yield value


def find_log_files(directory: Union[str, Path], suffix: str = '.log') -> List[Path]:
    """
    List log files directly inside a directory.

    Subdirectories are not descended into.

    Raises:
        FileNotFoundError: If the directory doesn't exist
        NotADirectoryError: If the path is not a directory
    """
    directory = Path(directory)

    if not directory.exists():
        raise FileNotFoundError(f"Log directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    files = sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.name.endswith(suffix)
    )
    logger.info(f"Found {len(files)} log file(s) in {directory}")
    return files
