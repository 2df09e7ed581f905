# ============================================================================
# PageVital - Error Classes
#
# Purpose: Exception hierarchy for adapters at the pipeline boundary
# Inputs: Error messages and context
# Outputs: Structured exceptions
# Dependencies: None
# Usage: raise PersistenceError("Failed to read key", details=str(e))
#
# Changelog:
#   2026-09-02: Initial error classes
#   2026-09-20: Added AlertDeliveryError for webhook channel failures
# ============================================================================

from typing import Optional


class PageVitalError(Exception):
    """Base exception for all PageVital errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """
        Initialize error.

        Args:
            message: Error message
            details: Optional detailed error information
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        """String representation."""
        if self.details:
            return f"{self.message}\nDetails: {self.details}"
        return self.message


class ConfigurationError(PageVitalError):
    """Raised when configuration is invalid or missing."""

    pass


class InstrumentationUnavailable(PageVitalError):
    """Raised when a required host API (window, performance, navigator) is missing."""

    pass


class PersistenceError(PageVitalError):
    """Raised when a key-value store read, write, or parse fails."""

    pass


class AlertDeliveryError(PageVitalError):
    """Raised when an alert channel cannot deliver (network, HTTP status)."""

    pass
