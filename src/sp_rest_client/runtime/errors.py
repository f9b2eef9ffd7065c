"""
SharePoint REST Client Error Model

This module provides the error handling framework for the client. Every error
raised by the library derives from SPClientError and carries a structured
error code, optional details and the underlying cause.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Client error codes."""

    # General errors (1-99)
    UNKNOWN = 1
    INVALID_URL = 2
    URL_RESOLUTION_FAILED = 3

    # Encoding errors (100-199)
    PARSE_ERROR = 100
    INVALID_JSON = 101

    # Network errors (200-299)
    NETWORK_ERROR = 200
    CONNECTION_FAILED = 201
    TIMEOUT = 202
    RATE_LIMITED = 203
    SERVICE_UNAVAILABLE = 204
    HTTP_ERROR = 205

    # Batch errors (300-399)
    BATCH_ERROR = 300
    ALREADY_IN_BATCH = 301
    BATCH_TIMEOUT = 302

    # Pipeline errors (400-499)
    PIPELINE_ERROR = 400


class SPClientError(Exception):
    """
    Base class for all client errors.

    Provides structured error information: a message, an error code, a
    details dictionary and the exception that caused it, if any.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a client error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


class NetworkError(SPClientError):
    """Network-related errors."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.NETWORK_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class HttpRequestError(SPClientError):
    """The service answered with a non-success status."""

    def __init__(self, message: str, status: int, status_text: str = "",
                 response: Any = None, details: Optional[Dict[str, Any]] = None):
        if status == 429:
            code = ErrorCode.RATE_LIMITED
        elif status == 503:
            code = ErrorCode.SERVICE_UNAVAILABLE
        else:
            code = ErrorCode.HTTP_ERROR
        super().__init__(message, code, details)
        self.status = status
        self.status_text = status_text
        self.response = response


class UrlResolutionError(SPClientError):
    """A relative request url could not be made absolute."""

    def __init__(self, message: str = "Unable to resolve absolute url",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.URL_RESOLUTION_FAILED, details, cause)


class ParseError(SPClientError):
    """Response body could not be parsed."""

    def __init__(self, message: str = "Unable to parse response",
                 code: ErrorCode = ErrorCode.PARSE_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class BatchError(SPClientError):
    """Base batch error."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.BATCH_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class AlreadyInBatchError(BatchError):
    """Queryable is already part of a batch."""

    def __init__(self, message: str = "This query is already part of a batch.",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.ALREADY_IN_BATCH, details)


class BatchTimeout(BatchError):
    """Waiting for batch dependencies timed out."""

    def __init__(self, message: str = "Timed out waiting for batch dependencies",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.BATCH_TIMEOUT, details, cause)


class PipelineError(SPClientError):
    """Request pipeline could not be run."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.PIPELINE_ERROR, details, cause)


class ErrorHandler:
    """
    Utility class for handling and categorizing errors.
    """

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """
        Check if an error is retryable.

        Args:
            error: Exception to check

        Returns:
            True if the error should be retried
        """
        if isinstance(error, SPClientError):
            # Throttling and transient service failures
            return error.code in (ErrorCode.NETWORK_ERROR, ErrorCode.CONNECTION_FAILED,
                                  ErrorCode.TIMEOUT, ErrorCode.SERVICE_UNAVAILABLE,
                                  ErrorCode.RATE_LIMITED)
        return False


__all__ = [
    "ErrorCode",
    "SPClientError",
    "NetworkError",
    "HttpRequestError",
    "UrlResolutionError",
    "ParseError",
    "BatchError",
    "AlreadyInBatchError",
    "BatchTimeout",
    "PipelineError",
    "ErrorHandler",
]
