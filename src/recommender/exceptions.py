"""Exceptions raised by the recommendation core.

The core only raises for bad rating values and for failures of the rating
store; insufficient rating data is never an error. Each exception carries
the HTTP status and details the API layer renders, so the API can handle
them like its own errors.
"""

from typing import Any, Dict, Optional


class CoRateException(Exception):
    """Base exception for CoRate errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class StoreAccessError(CoRateException):
    """Raised when a rating store lookup or write fails."""

    def __init__(self, operation: str, error: Exception):
        message = f"Rating store operation '{operation}' failed: {str(error)}"
        super().__init__(
            message=message,
            status_code=503,
            details={
                "operation": operation,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )


class InvalidRatingError(CoRateException):
    """Raised when a rating value is not a number in [1, 5]."""

    def __init__(self, value: Any):
        message = f"Rating must be a number between 1 and 5, got {value!r}"
        super().__init__(
            message=message,
            status_code=400,
            details={"rating": repr(value)},
        )
