"""Custom exceptions for the CoRate service.

Defines specific exception types for better error handling and reporting.
The base class and the errors the recommendation core raises live in
``src.recommender.exceptions`` and are re-exported here; this module adds
the ones only the API raises.
"""

from typing import Any, Dict, Optional

from src.recommender.exceptions import CoRateException, InvalidRatingError, StoreAccessError

__all__ = [
    "CoRateException",
    "InvalidRatingError",
    "RatingNotFoundError",
    "RecommendationError",
    "StoreAccessError",
    "StoreUnavailableError",
]


class StoreUnavailableError(CoRateException):
    """Raised when the rating data cannot be loaded at all."""

    def __init__(self, path: str, details: Optional[Dict[str, Any]] = None):
        message = f"Rating data not found at '{path}'. Generate or import ratings first."
        super().__init__(
            message=message,
            status_code=503,
            details=details or {"path": path},
        )


class RatingNotFoundError(CoRateException):
    """Raised when a rating id does not exist."""

    def __init__(self, rating_id: str):
        super().__init__(
            message=f"Rating {rating_id} not found",
            status_code=404,
            details={"rating_id": rating_id},
        )


class RecommendationError(CoRateException):
    """Raised when recommendation generation fails."""

    def __init__(self, subject: str, error: Exception):
        message = f"Failed to generate results for {subject}: {str(error)}"
        super().__init__(
            message=message,
            status_code=500,
            details={
                "subject": subject,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
