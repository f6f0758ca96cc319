"""
Exception handling utilities.

Defines categorized exception types raised by the engine. A transport layer
maps them to its own status codes via ``status_code``.
"""


class EngineError(Exception):
    """Base class for all engine errors."""

    status_code: int = 500
    error_code: str = "engine_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(EngineError):
    """Raised for unknown referral codes, users, trades or claims."""

    status_code = 404
    error_code = "not_found"


class InvalidInputError(EngineError):
    """Raised for rejected input (amounts, identifiers, depth limit)."""

    status_code = 400
    error_code = "invalid_input"


class ConflictError(EngineError):
    """Raised when referral code generation exhausts its retry budget."""

    status_code = 409
    error_code = "conflict"


# Exception categories based on handling strategy

# Caller mistakes - surfaced as-is, never retried
CLIENT_ERRORS = (
    NotFoundError,
    InvalidInputError,
)

# Retryable by the caller (a fresh attempt draws new codes)
RETRYABLE_ERRORS = (
    ConflictError,
)


def is_client_error(exc: Exception) -> bool:
    """
    Check if exception was caused by caller input.

    Args:
        exc: Exception to check

    Returns:
        True if exception is a client error
    """
    return isinstance(exc, CLIENT_ERRORS)


def is_retryable(exc: Exception) -> bool:
    """
    Check if the caller may retry the operation unchanged.

    Args:
        exc: Exception to check

    Returns:
        True if exception is retryable
    """
    return isinstance(exc, RETRYABLE_ERRORS)
