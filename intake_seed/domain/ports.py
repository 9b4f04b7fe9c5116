"""Domain Ports - Result Type, Error Hierarchy and Storage Contracts.

This module defines the contracts the services depend on. Following Hexagonal
Architecture, the domain states what it needs from storage, not how the Oracle
driver provides it.

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - The Oracle adapter implements StoragePort and SessionPort
    - Services receive a SessionPort and never touch driver objects
    - Failures travel as Result values so callers can classify them
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar, Union

from intake_seed.domain.models import ColumnMetadata, IntakeCandidate

T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    The retry loop in the intake creator relies on ``error_type`` to tell a
    uniqueness violation (retryable) from every other failure (fatal).

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error message (only present if success=False)
        error_type: Classification of the error (StorageError, ValidationError, ...)
        error_details: Additional error context (driver message, attempts, ...)

    Example:
        ```python
        result = session.persist_intake_set(candidate)
        if result.is_failure() and result.error_type == UNIQUE_VIOLATION:
            candidate = regenerate()
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (e.g., "StorageError", "ValidationError")
            error_details: Additional context (driver detail, attempts, ...)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        details = dict(error_details or {})
        if isinstance(error, IntakeSeedError) and error.details and "details" not in details:
            details["details"] = error.details

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=details
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# Error type tag for ORA-00001; the only failure class the intake creator retries.
UNIQUE_VIOLATION = "UniqueConstraintViolation"


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class IntakeSeedError(Exception):
    """Base exception for all intake-seed errors.

    Attributes:
        details: Underlying detail (driver message, downstream body, ...)
    """

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


class ValidationError(IntakeSeedError):
    """Raised when a request is missing required fields or names unknown identifiers."""
    pass


class NotFoundError(IntakeSeedError):
    """Raised when a named table or record does not exist in the catalog."""
    pass


class ConfigurationError(IntakeSeedError):
    """Raised when an environment or the external API is not configured."""
    pass


class StorageError(IntakeSeedError):
    """Raised when a database operation fails.

    Attributes:
        operation: The storage operation that failed
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details=details)
        self.operation = operation


class DuplicateRecordError(IntakeSeedError):
    """Raised when caller-fixed key values collide with an existing record."""
    pass


class RetryExhaustedError(IntakeSeedError):
    """Raised when the creation loop used every attempt without committing.

    Attributes:
        attempts: Number of attempts that were made
    """

    def __init__(self, attempts: int, details: Optional[str] = None):
        super().__init__(f"Failed to create intake data after {attempts} attempts", details=details)
        self.attempts = attempts


class VerificationError(IntakeSeedError):
    """Raised when a committed record set cannot be read back."""
    pass


class ExternalApiError(IntakeSeedError):
    """Raised when the external case-management API cannot be reached."""
    pass


# ============================================================================
# Storage Ports
# ============================================================================

class SessionPort(ABC):
    """One database session (connection) scoped to a single API call.

    Every method returns a Result; none of them raise driver exceptions.
    """

    @abstractmethod
    def ping(self) -> Result[float]:
        """Run a trivial query and return the round trip in milliseconds."""
        pass

    @abstractmethod
    def fetch_table_columns(self, table_names: Sequence[str]) -> Result[list[ColumnMetadata]]:
        """List catalog columns of the given tables, ordered by table then column id."""
        pass

    @abstractmethod
    def fetch_column_precision(self, table_name: str, column_name: str) -> Result[Optional[int]]:
        """Return the numeric precision of a column (None when unconstrained)."""
        pass

    @abstractmethod
    def query_one(self, sql: str, params: dict[str, Any]) -> Result[Optional[dict[str, Any]]]:
        """Execute a SELECT and return the first row as a mapping, or None."""
        pass

    @abstractmethod
    def persist_intake_set(self, candidate: IntakeCandidate) -> Result[None]:
        """Insert patient, intake plan and intake rows in one transaction and commit.

        A failure rolls the transaction back. Uniqueness violations are
        reported with ``error_type == UNIQUE_VIOLATION``.
        """
        pass

    @abstractmethod
    def fetch_intake(self, patient_number: str, intake_id: int) -> Result[Optional[dict[str, Any]]]:
        """Read back a committed patient/intake record set."""
        pass


class StoragePort(ABC):
    """Owner of the connections for one environment."""

    @abstractmethod
    def session(self) -> AbstractContextManager[SessionPort]:
        """Acquire a session; the connection is released when the block exits."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release all pooled connections."""
        pass
