"""
Error taxonomy for GitMaster.
"""

from .exceptions import (
    ErrorKind, GitMasterError, ValidationError, ProcessError, AuthError,
    MissingCredentialError, InvalidCredentialError, RateLimitedError,
    GatewayError, NotFoundError, ConflictError, ForbiddenError,
    TransientError, PersistenceError, ConfigurationError
)

__all__ = [
    "ErrorKind",
    "GitMasterError",
    "ValidationError",
    "ProcessError",
    "AuthError",
    "MissingCredentialError",
    "InvalidCredentialError",
    "RateLimitedError",
    "GatewayError",
    "NotFoundError",
    "ConflictError",
    "ForbiddenError",
    "TransientError",
    "PersistenceError",
    "ConfigurationError"
]
