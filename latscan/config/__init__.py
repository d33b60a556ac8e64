"""Configuration management for latscan."""

from .schema import (
    LatscanConfig,
    ScanConfig,
    LogFormatConfig,
    AnalysisConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'LatscanConfig',
    'ScanConfig',
    'LogFormatConfig',
    'AnalysisConfig',
    'load_config',
    'generate_default_config',
]
