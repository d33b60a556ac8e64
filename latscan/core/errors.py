"""
Error codes for latscan.

Structured error codes for machine-parseable reports.

Format: E{category}{number}
- E1xxx: Input errors
- E3xxx: Configuration errors
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Input errors
    E1001_SOURCE_UNREADABLE = "E1001"
    E1002_NO_LOG_FILES = "E1002"
    E1003_NO_VALID_SAMPLES = "E1003"
    E1004_SPILL_WRITE_FAILED = "E1004"

    # E3xxx: Configuration errors
    E3001_INVALID_CONFIG = "E3001"
    E3002_INVALID_PERCENTILE = "E3002"


ERROR_METADATA = {
    ErrorCode.E1001_SOURCE_UNREADABLE: {
        'severity': 'error',
        'message': 'Log file could not be read',
        'recoverable': True,
    },
    ErrorCode.E1002_NO_LOG_FILES: {
        'severity': 'warning',
        'message': 'No log files found',
        'recoverable': True,
    },
    ErrorCode.E1003_NO_VALID_SAMPLES: {
        'severity': 'warning',
        'message': 'No valid response times found',
        'recoverable': True,
    },
    ErrorCode.E1004_SPILL_WRITE_FAILED: {
        'severity': 'error',
        'message': 'Failed to write sample spill file',
        'recoverable': False,
    },
    ErrorCode.E3001_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
    ErrorCode.E3002_INVALID_PERCENTILE: {
        'severity': 'error',
        'message': 'Invalid percentile list',
        'recoverable': False,
    },
}


@dataclass
class ScanError:
    """
    Structured error with context.

    Example:
        error = ScanError(
            code=ErrorCode.E1001_SOURCE_UNREADABLE,
            context={'path': '/var/log/httpd/a.log', 'reason': 'Permission denied'},
        )
    """
    code: ErrorCode
    context: Optional[dict] = None

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }
