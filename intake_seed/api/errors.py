"""HTTP error mapping for the intake-seed API.

Services report failures as Result values tagged with an ``error_type``.
This module maps those tags (and the domain exceptions behind them) to HTTP
status codes and the ``{error, details}`` body every error response uses.
"""

from typing import Optional, TypeVar

from intake_seed.domain.ports import UNIQUE_VIOLATION, IntakeSeedError, Result

T = TypeVar('T')

ERROR_STATUS = {
    "ValidationError": 400,
    "NotFoundError": 404,
    "DuplicateRecordError": 409,
    "RetryExhaustedError": 409,
    UNIQUE_VIOLATION: 409,
    "ConfigurationError": 500,
    "StorageError": 500,
    "VerificationError": 500,
    "ExternalApiError": 500,
}


def error_status(error_type: Optional[str]) -> int:
    return ERROR_STATUS.get(error_type or "", 500)


class ApiError(Exception):
    """Error rendered as ``{error, details?}`` with a status code.

    Attributes:
        status_code: HTTP status
        error: Human-readable message
        details: Underlying detail (driver message, offending names, ...)
    """

    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body

    @classmethod
    def from_exception(cls, exc: IntakeSeedError) -> "ApiError":
        return cls(error_status(type(exc).__name__), str(exc), exc.details)


def unwrap(result: Result[T]) -> T:
    """Return a successful value or raise the matching ApiError."""
    if result.is_success():
        return result.value

    details = (result.error_details or {}).get("details")
    raise ApiError(error_status(result.error_type), result.error or "Unknown error", details)
