"""
Configuration schema for latscan.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (latscan.yml):
    version: 1

    scan:
      path: ${LATSCAN_LOG_DIR}
      suffix: .log

    analysis:
      percentiles: [90, 95, 99]
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field, fields, asdict
from typing import Optional, List, Any

import yaml

from ..collectors.access_log import LogLineFormat


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${LATSCAN_LOG_DIR} → os.environ.get('LATSCAN_LOG_DIR')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


def _to_int(value: Any) -> Any:
    if isinstance(value, str) and re.fullmatch(r'\s*[+-]?\d+\s*', value):
        return int(value)
    return value


def _coerce_ints(section: type, data: Optional[dict]) -> dict:
    """
    Convert integer strings for a section's int and List[int] fields.

    Substituted environment variables always arrive as strings.
    """
    result = dict(data or {})
    for f in fields(section):
        if f.name not in result:
            continue
        if f.type is int:
            result[f.name] = _to_int(result[f.name])
        elif f.type == List[int] and isinstance(result[f.name], list):
            result[f.name] = [_to_int(v) for v in result[f.name]]
    return result


def _check_int(errors: List[str], name: str, value: Any, minimum: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        errors.append(f"{name} must be an integer, got {value!r}")
    elif value < minimum:
        errors.append(f"Invalid {name}: {value}")


@dataclass
class ScanConfig:
    """Where to find log files."""
    path: str = '/var/log/httpd/'
    suffix: str = '.log'
    queue_size: int = 10


@dataclass
class LogFormatConfig:
    """Access log line layout."""
    verb_field: int = 2
    status_field: int = 4
    time_field: int = 5
    verb: str = 'GET'
    status: str = '200'

    def to_format(self) -> LogLineFormat:
        return LogLineFormat(
            verb_field=self.verb_field,
            status_field=self.status_field,
            time_field=self.time_field,
            verb=self.verb,
            status=str(self.status),
        )


@dataclass
class AnalysisConfig:
    """Estimation settings."""
    percentiles: List[int] = field(default_factory=lambda: [90, 95, 99])
    heap_capacity: int = 1024
    batch_read_size: int = 512
    spill_dir: str = '.'
    spill_prefix: str = 'tmp'


@dataclass
class LatscanConfig:
    """Root configuration."""

    version: int = 1
    scan: ScanConfig = field(default_factory=ScanConfig)
    log_format: LogFormatConfig = field(default_factory=LogFormatConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)

    @classmethod
    def load(cls, path: Path) -> 'LatscanConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'LatscanConfig':
        """Create from dictionary."""
        return cls(
            version=data.get('version', 1),
            scan=ScanConfig(**_coerce_ints(ScanConfig, data.get('scan'))),
            log_format=LogFormatConfig(**_coerce_ints(LogFormatConfig, data.get('log_format'))),
            analysis=AnalysisConfig(**_coerce_ints(AnalysisConfig, data.get('analysis'))),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if not self.scan.path:
            errors.append("scan.path is empty")

        _check_int(errors, 'queue_size', self.scan.queue_size, 1)

        fmt = self.log_format
        positions = [fmt.verb_field, fmt.status_field, fmt.time_field]
        for name, value in zip(('verb_field', 'status_field', 'time_field'), positions):
            _check_int(errors, name, value, 0)
        if all(isinstance(v, int) for v in positions) and len(set(positions)) < 3:
            errors.append("verb_field, status_field and time_field must differ")
        if not fmt.verb:
            errors.append("log_format.verb is empty")

        percentiles = self.analysis.percentiles
        if not isinstance(percentiles, list):
            errors.append(f"percentiles must be a list, got {percentiles!r}")
        else:
            if not percentiles:
                errors.append("At least one percentile is required")
            for p in percentiles:
                if not isinstance(p, int) or isinstance(p, bool) or not 0 <= p <= 100:
                    errors.append(f"Invalid percentile: {p}")

        _check_int(errors, 'heap_capacity', self.analysis.heap_capacity, 0)
        _check_int(errors, 'batch_read_size', self.analysis.batch_read_size, 1)

        return errors


def load_config(path: Optional[Path] = None) -> LatscanConfig:
    """
    Load config from an explicit file, the search path, or defaults.

    Raises:
        FileNotFoundError: If an explicit path doesn't exist
    """
    if path:
        return LatscanConfig.load(path)

    search_paths = [
        Path('./latscan.yml'),
        Path('./latscan.yaml'),
        Path.home() / '.latscan' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return LatscanConfig.load(p)

    return LatscanConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# latscan Configuration
version: 1

scan:
  path: /var/log/httpd/
  suffix: .log
  queue_size: 10

log_format:
  verb_field: 2
  status_field: 4
  time_field: 5
  verb: GET
  status: "200"

analysis:
  percentiles: [90, 95, 99]
  heap_capacity: 1024
  batch_read_size: 512
  spill_dir: .
  spill_prefix: tmp
"""
