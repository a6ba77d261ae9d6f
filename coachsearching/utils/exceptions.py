"""Custom exceptions and error normalization for the CoachSearching frontend.

This module defines a hierarchy of exceptions for better error handling
and more informative error messages, plus helpers that turn any failure
(REST API, Supabase, network, plain strings) into one normalized shape
the UI can display.

Exception Hierarchy:
    CoachSearchingError (base)
    ├── APIError
    │   ├── NetworkError
    │   ├── AuthenticationError
    │   ├── ValidationError
    │   ├── NotFoundError
    │   ├── RateLimitError
    │   └── ServerError
    ├── DatabaseError
    └── ClientNotReadyError
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorType(str, Enum):
    NETWORK = "network"
    AUTH = "auth"
    VALIDATION = "validation"
    SERVER = "server"
    PAYMENT = "payment"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    UNKNOWN = "unknown"


class CoachSearchingError(Exception):
    """Base exception for CoachSearching.

    All custom exceptions in this application should inherit from this class.
    This allows catching all application-specific errors with a single except clause.

    Example:
        >>> try:
        ...     risky_operation()
        ... except CoachSearchingError as e:
        ...     handle_error(e)
    """

    def __init__(self, message: str = "An error occurred in CoachSearching"):
        self.message = message
        super().__init__(self.message)


class APIError(CoachSearchingError):
    """Raised when a REST API call fails.

    Carries the normalized error body returned (or synthesized) for a
    non-2xx response.

    Attributes:
        status: HTTP status code (None for transport failures)
        error: Short machine-readable error name
        details: Extra payload returned by the server (optional)

    Example:
        >>> raise APIError("Coach not found", status=404, error="NotFound")
    """

    def __init__(
        self,
        message: str = "API call failed",
        status: Optional[int] = None,
        error: str = "RequestError",
        details: Any = None,
    ):
        self.status = status
        self.error = error
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        """Return the structured ``{status, error, message}`` form."""
        return {"status": self.status, "error": self.error, "message": self.message}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status={self.status!r}, "
            f"error={self.error!r}, message={self.message!r})"
        )


class NetworkError(APIError):
    """Raised when the request never produced a response (DNS, refused, timeout)."""

    def __init__(self, message: str = "Network error. Please check your connection."):
        super().__init__(message, status=None, error="NetworkError")


class AuthenticationError(APIError):
    """Raised on 401/403 responses."""


class ValidationError(APIError):
    """Raised on 400/422 responses."""


class NotFoundError(APIError):
    """Raised on 404 responses."""


class RateLimitError(APIError):
    """Raised when the API rate limit is exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying (if known)
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        status: int = 429,
        error: str = "RateLimitExceeded",
        details: Any = None,
        retry_after: Optional[int] = None,
    ):
        self.retry_after = retry_after
        super().__init__(message, status=status, error=error, details=details)


class ServerError(APIError):
    """Raised on 5xx responses."""


class DatabaseError(CoachSearchingError):
    """Raised when a Supabase query, auth or storage call fails.

    Attributes:
        code: Backend error code (PostgREST code such as ``PGRST116``,
            Postgres SQLSTATE such as ``23505``, or a GoTrue error name)
        details: Extra detail string from the backend
    """

    def __init__(self, message: str = "Database error", code: Optional[str] = None, details: Any = None):
        self.code = code
        self.details = details
        super().__init__(message)


class ClientNotReadyError(CoachSearchingError):
    """Raised when the database client is used before it finished initializing."""

    def __init__(self, message: str = "Database client is not initialized"):
        super().__init__(message)


# ==============================================================================
# Normalization
# ==============================================================================

HTTP_ERROR_MESSAGES = {
    400: "Invalid request. Please check your input.",
    401: "Please sign in to continue.",
    403: "You don't have permission to do this.",
    404: "The requested resource was not found.",
    422: "Please check your input and try again.",
    429: "Too many requests. Please wait a moment.",
    500: "Server error. Please try again later.",
    502: "Server is temporarily unavailable.",
    503: "Service unavailable. Please try again later.",
}

SUPABASE_ERROR_TYPES = {
    # Auth
    'invalid_credentials': ErrorType.AUTH,
    'email_not_confirmed': ErrorType.AUTH,
    'user_not_found': ErrorType.AUTH,
    'invalid_token': ErrorType.AUTH,
    'expired_token': ErrorType.AUTH,
    # Rate limiting
    'rate_limit_exceeded': ErrorType.RATE_LIMIT,
    'over_request_limit': ErrorType.RATE_LIMIT,
    # Not found (no rows for .single())
    'PGRST116': ErrorType.NOT_FOUND,
    # Validation: unique and foreign key violations
    'validation_error': ErrorType.VALIDATION,
    '23505': ErrorType.VALIDATION,
    '23503': ErrorType.VALIDATION,
}

UNKNOWN_ERROR_MESSAGE = "An unexpected error occurred."


@dataclass(frozen=True)
class ParsedError:
    """Normalized error ready for display."""
    type: ErrorType
    message: str
    code: str
    details: Any = None


def error_type_for_status(status: Optional[int]) -> ErrorType:
    """Map an HTTP status code to an error type."""
    if status is None:
        return ErrorType.NETWORK
    if status >= 500:
        return ErrorType.SERVER
    if status == 429:
        return ErrorType.RATE_LIMIT
    if status == 404:
        return ErrorType.NOT_FOUND
    if status in (401, 403):
        return ErrorType.AUTH
    if status in (400, 422):
        return ErrorType.VALIDATION
    return ErrorType.UNKNOWN


def error_type_for_code(code: Optional[str]) -> ErrorType:
    """Map a Supabase error code to an error type (server when unknown)."""
    return SUPABASE_ERROR_TYPES.get(code, ErrorType.SERVER)


def http_error_message(status: Optional[int]) -> str:
    """Get a user-friendly message for an HTTP status code."""
    return HTTP_ERROR_MESSAGES.get(status, "An error occurred.")


_STATUS_EXCEPTIONS = {
    ErrorType.AUTH: AuthenticationError,
    ErrorType.VALIDATION: ValidationError,
    ErrorType.NOT_FOUND: NotFoundError,
    ErrorType.SERVER: ServerError,
}


def api_error_from_response(
    status: int,
    body: Optional[dict] = None,
    reason: str = "",
    retry_after: Optional[int] = None,
) -> APIError:
    """Build the APIError subclass matching a non-2xx response.

    Args:
        status: HTTP status code
        body: Decoded JSON error body, or None when the body was not JSON
        reason: HTTP reason phrase, used when the body is missing
        retry_after: Parsed Retry-After header for 429 responses

    Returns:
        APIError carrying ``{status, error, message}``
    """
    if not isinstance(body, dict):
        body = {
            'error': 'RequestError',
            'message': f"HTTP {status}: {reason}".rstrip(': ').rstrip(),
        }

    # The PHP API nests its error: {"success": false, "error": {"message", "code", ...}}
    nested = body.get('error')
    if isinstance(nested, dict):
        error = nested.get('code') or 'RequestError'
        message = nested.get('message') or http_error_message(status)
    else:
        error = nested or body.get('code') or 'RequestError'
        message = body.get('message') or body.get('detail') or http_error_message(status)
    if not isinstance(error, str):
        error = str(error)
    if not isinstance(message, str):
        message = str(message)

    error_type = error_type_for_status(status)
    if error_type == ErrorType.RATE_LIMIT:
        return RateLimitError(message, status=status, error=error, details=body, retry_after=retry_after)

    exc_class = _STATUS_EXCEPTIONS.get(error_type, APIError)
    return exc_class(message, status=status, error=error, details=body)


def parse_error(error: Any) -> ParsedError:
    """Parse an error from any source into a normalized ParsedError.

    Handles Supabase errors (anything with ``code`` and ``message``),
    transport failures, HTTP errors, plain exceptions and strings.
    Never raises.
    """
    if isinstance(error, NetworkError):
        return ParsedError(ErrorType.NETWORK, error.message, 'NETWORK_ERROR')

    if isinstance(error, APIError):
        return ParsedError(
            type=error_type_for_status(error.status),
            message=error.message or http_error_message(error.status),
            code=f"HTTP_{error.status}",
            details=error.details,
        )

    if isinstance(error, DatabaseError):
        return ParsedError(
            type=error_type_for_code(error.code),
            message=error.message,
            code=error.code or 'DATABASE_ERROR',
            details=error.details,
        )

    code = getattr(error, 'code', None)
    message = getattr(error, 'message', None)
    if code and message:
        return ParsedError(
            type=error_type_for_code(str(code)),
            message=str(message),
            code=str(code),
            details=getattr(error, 'details', None),
        )

    if isinstance(error, (ConnectionError, TimeoutError)):
        return ParsedError(ErrorType.NETWORK, "Network error. Please check your connection.", 'NETWORK_ERROR')

    if isinstance(error, BaseException):
        return ParsedError(ErrorType.UNKNOWN, str(error) or UNKNOWN_ERROR_MESSAGE, 'UNKNOWN_ERROR')

    if isinstance(error, str):
        return ParsedError(ErrorType.UNKNOWN, error, 'STRING_ERROR')

    return ParsedError(ErrorType.UNKNOWN, UNKNOWN_ERROR_MESSAGE, 'UNKNOWN_ERROR')


def handle_error(
    error: Any,
    context: str = "",
    notify: Optional[Callable[[str, str], None]] = None,
    rethrow: bool = False,
) -> ParsedError:
    """Log an error and optionally surface it to the user.

    Args:
        error: The caught error
        context: Where the error occurred, for the log line
        notify: Optional callback(message, type) such as
            ``AppContext.show_notification``
        rethrow: Re-raise the error after handling

    Returns:
        The parsed error
    """
    parsed = parse_error(error)
    where = f" in {context}" if context else ""
    logger.error(f"Error{where}: [{parsed.code}] {parsed.message}")

    if notify is not None:
        notify(parsed.message, 'error')

    if rethrow and isinstance(error, BaseException):
        raise error
    return parsed


def with_error_handling(
    func: Callable[..., T],
    *args,
    fallback: Optional[T] = None,
    context: str = "",
    notify: Optional[Callable[[str, str], None]] = None,
    **kwargs,
) -> Optional[T]:
    """Call ``func`` and return ``fallback`` instead of raising.

    Example:
        >>> coaches = with_error_handling(client.coaches.get, "123", fallback=None)
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        handle_error(e, context=context or getattr(func, '__name__', ''), notify=notify)
        return fallback
