"""
Custom exceptions for GitMaster.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List


class ErrorKind(Enum):
    """Failure categories surfaced to the presentation layer."""
    VALIDATION_ERROR = "validation_error"
    PROCESS_ERROR = "process_error"
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    TRANSIENT_ERROR = "transient_error"
    PERSISTENCE_ERROR = "persistence_error"
    CONFIGURATION_ERROR = "configuration_error"


class GitMasterError(Exception):
    """
    Base exception for all GitMaster errors.

    Every subclass carries a fixed ``kind`` so callers can react to the
    category of a failure without inspecting the message text.
    """

    kind: ErrorKind = ErrorKind.TRANSIENT_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize GitMaster error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(GitMasterError):
    """
    Raised when user input is missing or malformed.

    Validation happens before any external call is made.
    """

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        invalid_fields: Optional[List[str]] = None,
        **kwargs
    ):
        """
        Initialize validation error.

        Args:
            message: Error message
            invalid_fields: Names of the fields that failed validation
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if invalid_fields:
            context['invalid_fields'] = invalid_fields

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.invalid_fields = invalid_fields or []


class ProcessError(GitMasterError):
    """Raised when an external executable is missing or exits non-zero."""

    kind = ErrorKind.PROCESS_ERROR

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if command:
            context['command'] = command
        if exit_code is not None:
            context['exit_code'] = exit_code

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.command = command or []
        self.exit_code = exit_code


class AuthError(GitMasterError):
    """Base class for authentication failures."""

    kind = ErrorKind.INVALID_CREDENTIAL


class MissingCredentialError(AuthError):
    """Raised when a remote call is attempted without a credential."""

    kind = ErrorKind.MISSING_CREDENTIAL


class InvalidCredentialError(AuthError):
    """Raised when the remote service rejects the credential (HTTP 401)."""

    kind = ErrorKind.INVALID_CREDENTIAL


class RateLimitedError(AuthError):
    """
    Raised when the remote service refuses requests because of rate limits.

    ``retry_after`` holds the UTC time after which requests may succeed again,
    when the service reports one.
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, retry_after: Optional[datetime] = None, **kwargs):
        context = kwargs.get('context', {})
        if retry_after:
            context['retry_after'] = retry_after.isoformat()

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.retry_after = retry_after


class GatewayError(GitMasterError):
    """
    Base class for remote API failures other than authentication.

    Carries the HTTP status code of the failed response when there was one.
    """

    kind = ErrorKind.TRANSIENT_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if status_code is not None:
            context['status_code'] = status_code

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.status_code = status_code
        self.response_data = response_data


class NotFoundError(GatewayError):
    """Raised when a repository or path does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(GatewayError):
    """Raised when a create request collides with existing content."""

    kind = ErrorKind.CONFLICT


class ForbiddenError(GatewayError):
    """Raised when the credential lacks permission for the operation."""

    kind = ErrorKind.FORBIDDEN


class TransientError(GatewayError):
    """Raised for network failures, timeouts and server errors."""

    kind = ErrorKind.TRANSIENT_ERROR


class PersistenceError(GitMasterError):
    """Raised when the credential store cannot be read or written."""

    kind = ErrorKind.PERSISTENCE_ERROR

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.path = path


class ConfigurationError(GitMasterError):
    """
    Exception for configuration errors.

    This exception is raised when there are issues with
    configuration loading or validation.
    """

    kind = ErrorKind.CONFIGURATION_ERROR

    def __init__(
        self,
        message: str,
        config_section: Optional[str] = None,
        config_key: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_section: Configuration section with error
            config_key: Specific configuration key with error
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if config_section:
            context['config_section'] = config_section
        if config_key:
            context['config_key'] = config_key

        kwargs['context'] = context
        super().__init__(message, **kwargs)

        self.config_section = config_section
        self.config_key = config_key
