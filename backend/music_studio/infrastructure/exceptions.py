"""
Custom Exceptions for AI Music Studio

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class MusicStudioError(Exception):
    """Base exception for all AI Music Studio errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(MusicStudioError):
    """Raised when input validation fails."""
    pass


class DatabaseError(MusicStudioError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class InvalidTransitionError(MusicStudioError):
    """Raised when a subscription status change is not allowed."""

    def __init__(
        self,
        current: str,
        target: str,
        subscription_id: Optional[str] = None,
    ):
        details = {"current_status": current, "target_status": target}
        if subscription_id:
            details["subscription_id"] = subscription_id
        super().__init__(
            f"Cannot move subscription from {current} to {target}",
            details,
        )


class PaymentServiceError(MusicStudioError):
    """Raised when the payment gateway rejects or fails a request."""

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if order_id:
            details["order_id"] = order_id
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details, original_error)


class InvalidSignatureError(PaymentServiceError):
    """Raised when a payment signature does not match."""
    pass


class AIServiceError(MusicStudioError):
    """Raised when AI (Gemini) operations fail."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if model:
            details["model"] = model
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class RateLimitError(AIServiceError):
    """Raised when API rate limits are exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, original_error=original_error)
        self.retry_after = retry_after
        if retry_after:
            self.details["retry_after_seconds"] = retry_after


class ConfigurationError(MusicStudioError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
