"""
DataProvider Exceptions

This module defines the exception classes raised by the data provider layer.
Normal outcomes (found, not found, invalid request, store failure) travel as
DPResult values; exceptions are reserved for programming mistakes and for the
store collaborator's internal signalling.
"""

from typing import Optional


class DPException(Exception):
    """
    Base exception class for all DataProvider errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
    ):
        """
        Initialize DPException.

        Args:
            message: Human-readable error message
            details: Additional error details (optional)
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert exception to dict for structured logging."""
        result = {
            "error": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(DPException):
    """
    Raised when a caller passes something that is not a record type, or a
    record type whose metadata is inconsistent (e.g. pkey not among fields).

    This is never turned into a DPResult: it aborts the call path.
    """

    def __init__(
        self,
        message: str = "Invalid record configuration",
        details: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)


class StoreError(DPException):
    """
    Raised by a Store when a statement fails to execute.

    The provider converts it into DPResult(err=ErrCode.STORE_ERROR).
    """

    def __init__(
        self,
        message: str = "Statement execution failed",
        details: Optional[str] = None,
        sql: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)
        self.sql = sql


class RecordNotFoundError(DPException):
    """Raised by handle_dp_result for a NOT_FOUND result."""

    def __init__(
        self,
        message: str = "Record not found",
        details: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)


class InvalidRequestError(DPException):
    """Raised by handle_dp_result for an INVALID_REQUEST result."""

    def __init__(
        self,
        message: str = "Invalid request for current record state",
        details: Optional[str] = None,
    ):
        super().__init__(message=message, details=details)
