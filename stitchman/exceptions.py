"""
Stitchman Exceptions.

All stitchman errors are StitchError subclasses for consistent handling.
Callers can catch the base class and branch on ``code``, or catch the
specific subclass.
"""

from typing import Any


class StitchError(Exception):
    """
    Base exception for all Stitchman errors.

    Usage:
        raise StitchError('INVALID_TRANSITION', current='void', operation='claim')

    Attributes:
        code: Error code (INVALID_TRANSITION, STALE_STATE, etc.)
        details: Additional context as keyword arguments
    """

    retryable = False

    def __init__(self, code: str, **details: Any):
        self.code = code
        self.details = details
        message = f"{code}: {details}" if details else code
        super().__init__(message)

    def as_dict(self) -> dict:
        """Return error as dictionary for API responses."""
        return {"code": self.code, **self.details}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"StitchError({self.code}: {details_str})"
        return f"StitchError({self.code})"


class _CodedError(StitchError):
    """StitchError with a fixed code per subclass."""

    default_code = ""

    def __init__(self, **details: Any):
        super().__init__(self.default_code, **details)


class InvalidTransition(_CodedError):
    """The observed order status does not allow the requested transition."""

    default_code = "INVALID_TRANSITION"


class StaleState(_CodedError):
    """
    Optimistic-concurrency conflict.

    The order changed between read and write. Re-fetch and retry, or
    surface the conflict to the user.
    """

    default_code = "STALE_STATE"
    retryable = True


class InactiveWorker(_CodedError):
    default_code = "INACTIVE_WORKER"


class WorkerNotFound(_CodedError):
    default_code = "WORKER_NOT_FOUND"


class OrderNotFound(_CodedError):
    default_code = "ORDER_NOT_FOUND"


class InvalidDateRange(_CodedError):
    """Malformed date range (start after end, unknown preset, missing bound)."""

    default_code = "VALIDATION_ERROR"


class InvalidSewerName(_CodedError):
    default_code = "INVALID_NAME"


class DuplicateSewer(_CodedError):
    default_code = "SEWER_ALREADY_ACTIVE"


# Error codes
# INVALID_TRANSITION: Status transition not allowed from the observed status
# STALE_STATE: Conditional update lost against a concurrent writer
# INACTIVE_WORKER: Target sewer is deactivated
# WORKER_NOT_FOUND: Target sewer does not exist
# ORDER_NOT_FOUND: Order does not exist
# VALIDATION_ERROR: Malformed date range
# INVALID_NAME: Empty sewer name
# SEWER_ALREADY_ACTIVE: An active sewer already uses that name
# INVALID_POINTS: Missing, non-numeric or negative point value on ingestion
# DUPLICATE_ORDER: An order with that order_number already exists
