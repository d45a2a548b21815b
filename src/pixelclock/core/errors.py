"""Exception hierarchy for the pixel clock.

Errors carry a severity and optional context so they can be logged
consistently by whichever thread observes them.
"""

from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels for logging."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class PixelClockError(Exception):
    """Base exception for all pixel clock errors.

    Attributes:
        message: Human-readable error message
        details: Additional context as key-value pairs
        severity: Error severity level
    """

    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details,
        }


class ConfigurationError(PixelClockError):
    """Configuration or construction error.

    Raised when:
    - Config file is malformed
    - A refresh or frame interval is not strictly positive
    - A required collaborator setting is missing (e.g. no sensor IDs)
    """

    pass


class HardwareError(PixelClockError):
    """LED matrix initialization or output failure.

    Always logged at CRITICAL level as it requires a restart.
    """

    severity = ErrorSeverity.CRITICAL


class APIError(PixelClockError):
    """External data provider errors (forecast, Home Assistant).

    Raised when:
    - Request fails at the transport level
    - Provider answers with a non-success status
    - Response body cannot be decoded
    """

    pass


class ValidationError(PixelClockError):
    """Input data failed validation (e.g. malformed event timestamp)."""

    severity = ErrorSeverity.WARNING
