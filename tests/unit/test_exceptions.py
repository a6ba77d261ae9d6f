"""
Unit tests for the exception hierarchy and error normalization.
"""
import pytest
from unittest.mock import MagicMock

from coachsearching.utils.exceptions import (
    APIError,
    ClientNotReadyError,
    CoachSearchingError,
    DatabaseError,
    ErrorType,
    NetworkError,
    NotFoundError,
    ParsedError,
    RateLimitError,
    ServerError,
    api_error_from_response,
    error_type_for_status,
    handle_error,
    http_error_message,
    parse_error,
    with_error_handling,
)


class TestHierarchy:
    """Tests for the exception classes."""

    def test_all_derive_from_base(self):
        """Test every custom error can be caught with the base class."""
        for error in (APIError(), NetworkError(), DatabaseError(), ClientNotReadyError(), RateLimitError()):
            assert isinstance(error, CoachSearchingError)

    def test_network_error_has_no_status(self):
        """Test network errors carry no HTTP status."""
        error = NetworkError("down")
        assert error.status is None
        assert error.error == "NetworkError"
        assert str(error) == "down"

    def test_rate_limit_defaults(self):
        """Test rate limit errors default to 429."""
        error = RateLimitError(retry_after=30)
        assert error.status == 429
        assert error.retry_after == 30

    def test_repr(self):
        """Test repr shows the structured fields."""
        assert repr(APIError("x", status=400, error="Bad")) == "APIError(status=400, error='Bad', message='x')"


class TestStatusMapping:
    """Tests for status code helpers."""

    @pytest.mark.parametrize("status,expected", [
        (None, ErrorType.NETWORK),
        (500, ErrorType.SERVER),
        (503, ErrorType.SERVER),
        (429, ErrorType.RATE_LIMIT),
        (404, ErrorType.NOT_FOUND),
        (401, ErrorType.AUTH),
        (403, ErrorType.AUTH),
        (400, ErrorType.VALIDATION),
        (422, ErrorType.VALIDATION),
        (409, ErrorType.UNKNOWN),
    ])
    def test_error_type_for_status(self, status, expected):
        """Test HTTP statuses map to error types."""
        assert error_type_for_status(status) == expected

    def test_http_error_message_fallback(self):
        """Test unknown statuses get a generic message."""
        assert http_error_message(418) == "An error occurred."
        assert http_error_message(401) == "Please sign in to continue."


class TestApiErrorFromResponse:
    """Tests for building APIErrors from response bodies."""

    def test_message_falls_back_to_detail(self):
        """Test 'detail' is used when there is no 'message'."""
        error = api_error_from_response(500, {"detail": "db down"})
        assert isinstance(error, ServerError)
        assert error.message == "db down"

    def test_message_falls_back_to_status_text(self):
        """Test the status text is used when the body has no message."""
        error = api_error_from_response(404, {})
        assert isinstance(error, NotFoundError)
        assert error.message == "The requested resource was not found."
        assert error.error == "RequestError"

    def test_code_used_as_error_name(self):
        """Test 'code' fills in for a missing 'error'."""
        assert api_error_from_response(400, {"code": "E_INPUT"}).error == "E_INPUT"

    def test_missing_reason(self):
        """Test a non-JSON body without reason phrase."""
        error = api_error_from_response(502, None)
        assert error.message == "HTTP 502"


class TestParseError:
    """Tests for parse_error."""

    def test_network_error(self):
        """Test network errors parse to NETWORK_ERROR."""
        parsed = parse_error(NetworkError("offline"))
        assert parsed == ParsedError(ErrorType.NETWORK, "offline", "NETWORK_ERROR")

    def test_api_error(self):
        """Test API errors carry an HTTP_<status> code."""
        parsed = parse_error(APIError("Coach not found", status=404, error="NotFound"))
        assert parsed.type == ErrorType.NOT_FOUND
        assert parsed.code == "HTTP_404"
        assert parsed.message == "Coach not found"

    @pytest.mark.parametrize("code,expected", [
        ("PGRST116", ErrorType.NOT_FOUND),
        ("23505", ErrorType.VALIDATION),
        ("23503", ErrorType.VALIDATION),
        ("invalid_credentials", ErrorType.AUTH),
        ("over_request_limit", ErrorType.RATE_LIMIT),
        ("XX000", ErrorType.SERVER),
    ])
    def test_database_codes(self, code, expected):
        """Test Supabase codes map to error types."""
        parsed = parse_error(DatabaseError("failed", code=code))
        assert parsed.type == expected
        assert parsed.code == code

    def test_database_error_without_code(self):
        """Test a code-less database error."""
        assert parse_error(DatabaseError("failed")).code == "DATABASE_ERROR"

    def test_duck_typed_supabase_error(self):
        """Test any object with code and message is treated as a Supabase error."""
        error = MagicMock(code="23505", message="duplicate key", details="email")
        parsed = parse_error(error)
        assert parsed.type == ErrorType.VALIDATION
        assert parsed.details == "email"

    def test_builtin_connection_error(self):
        """Test builtin connection errors are network errors."""
        assert parse_error(ConnectionError("reset")).type == ErrorType.NETWORK

    def test_plain_exception(self):
        """Test other exceptions keep their message."""
        parsed = parse_error(ValueError("bad value"))
        assert parsed == ParsedError(ErrorType.UNKNOWN, "bad value", "UNKNOWN_ERROR")

    def test_string(self):
        """Test plain strings."""
        assert parse_error("oops").code == "STRING_ERROR"

    def test_anything_else(self):
        """Test parse_error never raises."""
        assert parse_error(None).code == "UNKNOWN_ERROR"
        assert parse_error(42).type == ErrorType.UNKNOWN


class TestHandleError:
    """Tests for handle_error and with_error_handling."""

    def test_notifies(self):
        """Test the notify callback receives the message."""
        notify = MagicMock()
        parsed = handle_error(NetworkError("offline"), context="search", notify=notify)

        notify.assert_called_once_with("offline", "error")
        assert parsed.code == "NETWORK_ERROR"

    def test_rethrow(self):
        """Test rethrow re-raises the original error."""
        with pytest.raises(ValueError):
            handle_error(ValueError("x"), rethrow=True)

    def test_with_error_handling_fallback(self):
        """Test failures return the fallback."""
        def failing(coach_id):
            raise APIError("nope", status=500)

        assert with_error_handling(failing, "1", fallback={}) == {}

    def test_with_error_handling_passes_result(self):
        """Test successful calls return their result and receive kwargs."""
        def fetch(coach_id, page=1):
            return (coach_id, page)

        assert with_error_handling(fetch, "1", page=3, fallback=None) == ("1", 3)
