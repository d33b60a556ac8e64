"""Command-line interface."""

from .main import app, main, parse_percentile_list

__all__ = ['app', 'main', 'parse_percentile_list']
