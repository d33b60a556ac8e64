"""Pytest fixtures shared by the latscan tests."""

import random
from pathlib import Path
from typing import Iterable, List

import pytest


def log_line(latency, verb: str = 'GET', status: str = '200', client: str = '10.0.0.1') -> str:
    """Build one access log line in the default format."""
    return f'{client} - "{verb} /api/items" {status} {latency}'


def write_log(path: Path, latencies: Iterable, noise: int = 0, seed: int = 0) -> Path:
    """
    Write an access log with one valid GET line per latency.

    Args:
        path: File to create
        latencies: Response times to log
        noise: Number of invalid lines (POST, 404, garbage) to mix in
        seed: Seed for noise placement
    """
    lines: List[str] = [log_line(v) for v in latencies]
    rng = random.Random(seed)
    bad = [
        log_line(7, verb='POST'),
        log_line(7, status='404'),
        'not an access log line',
        log_line('slow'),
    ]
    for i in range(noise):
        lines.insert(rng.randint(0, len(lines)), bad[i % len(bad)])
    path.write_text('\n'.join(lines) + '\n')
    return path


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch) -> Path:
    """Run in an empty directory with HOME pointing inside it."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return work


@pytest.fixture
def log_dir(tmp_path) -> Path:
    """
    Directory with two log files holding latencies 1..100 once each,
    plus noise lines and files that must be ignored.
    """
    logs = tmp_path / "logs"
    logs.mkdir()
    write_log(logs / "a.log", range(1, 51), noise=6, seed=1)
    write_log(logs / "b.log", range(51, 101), noise=4, seed=2)
    write_log(logs / "ignored.txt", [100000] * 5)
    (logs / "nested.log").mkdir()
    return logs
