"""
REST API Client for the CoachSearching Frontend.

Provides access to the PHP REST API with retry logic and error handling.
Every call goes through ``request``: bearer token from the persisted
session, 30s timeout, up to 3 attempts with linear backoff, and non-2xx
responses normalized into APIError subclasses.
"""

import json
import time
import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from coachsearching.config.settings import config, STORAGE_KEY_AUTH_SESSION
from coachsearching.utils.exceptions import APIError, NetworkError, api_error_from_response
from coachsearching.utils.storage import LocalStorage, read_json

logger = logging.getLogger(__name__)


class StoredSessionTokenProvider:
    """Reads the access token of the persisted auth session.

    The session is stored under ``supabase.auth.token`` as
    ``{"currentSession": {"access_token": ...}}``.
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def __call__(self) -> Optional[str]:
        session = read_json(self.storage, STORAGE_KEY_AUTH_SESSION, default={})
        if not isinstance(session, dict):
            return None
        current = session.get('currentSession')
        if not isinstance(current, dict):
            return None
        token = current.get('access_token')
        return token if isinstance(token, str) and token else None


def response_data(payload: Any) -> Any:
    """Unwrap the API's ``{"success": true, "data": ...}`` envelope."""
    if isinstance(payload, dict) and 'success' in payload and 'data' in payload:
        return payload['data']
    return payload


def _retry_after(response: requests.Response) -> Optional[int]:
    value = response.headers.get('Retry-After')
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class _Endpoints:
    """Base for a group of endpoints sharing the client's request helper."""

    def __init__(self, client: "CoachSearchingAPIClient"):
        self._client = client

    def _get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return self._client.request('GET', endpoint, params=params)

    def _post(self, endpoint: str, body: Optional[dict] = None) -> Any:
        return self._client.request('POST', endpoint, json_body=body)

    def _patch(self, endpoint: str, body: Optional[dict] = None) -> Any:
        return self._client.request('PATCH', endpoint, json_body=body)

    def _put(self, endpoint: str, body: Optional[dict] = None) -> Any:
        return self._client.request('PUT', endpoint, json_body=body)

    def _delete(self, endpoint: str, body: Optional[dict] = None) -> Any:
        return self._client.request('DELETE', endpoint, json_body=body)


def _seg(value: Any) -> str:
    """Quote a value used as a path segment."""
    return quote(str(value), safe='')


class AuthEndpoints(_Endpoints):
    def me(self):
        return self._get('/auth/me')

    def update_profile(self, data: dict):
        return self._patch('/auth/me', data)

    def change_password(self, current_password: str, new_password: str):
        return self._post('/auth/change-password', {
            'currentPassword': current_password,
            'newPassword': new_password,
        })

    def delete_account(self, reason: str = ""):
        return self._delete('/auth/me', {'reason': reason})

    def export_data(self):
        return self._post('/auth/export-data')


class CoachEndpoints(_Endpoints):
    def search(self, params: Optional[dict] = None):
        return self._get('/search/coaches', params)

    def get(self, coach_id):
        return self._get(f'/coaches/{_seg(coach_id)}')

    def update(self, coach_id, data: dict):
        return self._patch(f'/coaches/{_seg(coach_id)}', data)

    def get_availability(self, coach_id):
        return self._get(f'/coaches/{_seg(coach_id)}/availability')

    def set_availability(self, coach_id, slots: list):
        return self._post(f'/coaches/{_seg(coach_id)}/availability', {'slots': slots})

    def get_services(self, coach_id):
        return self._get(f'/coaches/{_seg(coach_id)}/services')

    def create_service(self, coach_id, service: dict):
        return self._post(f'/coaches/{_seg(coach_id)}/services', service)

    def get_reviews(self, coach_id, page: int = 1):
        return self._get(f'/coaches/{_seg(coach_id)}/reviews', {'page': page})


class BookingEndpoints(_Endpoints):
    def list(self, params: Optional[dict] = None):
        return self._get('/bookings', params)

    def get(self, booking_id):
        return self._get(f'/bookings/{_seg(booking_id)}')

    def create(self, data: dict):
        return self._post('/bookings/create', data)

    def cancel(self, booking_id, reason: str = ""):
        return self._post(f'/bookings/{_seg(booking_id)}/cancel', {'reason': reason})

    def complete(self, booking_id):
        return self._post(f'/bookings/{_seg(booking_id)}/complete')

    def reschedule(self, booking_id, new_date: str):
        return self._post(f'/bookings/{_seg(booking_id)}/reschedule', {'scheduled_at': new_date})


class ReviewEndpoints(_Endpoints):
    def create(self, data: dict):
        return self._post('/reviews/create', data)

    def list(self, params: Optional[dict] = None):
        return self._get('/reviews', params)


class MessageEndpoints(_Endpoints):
    def conversations(self):
        return self._get('/messages/conversations')

    def get(self, conversation_id):
        return self._get(f'/messages/{_seg(conversation_id)}')

    def send(self, conversation_id, message: str):
        return self._post('/messages/send', {
            'conversation_id': conversation_id,
            'message': message,
        })


class ReferralEndpoints(_Endpoints):
    def get_code(self):
        return self._get('/referrals/code')

    def get_stats(self):
        return self._get('/referrals/stats')

    def list(self, page: int = 1):
        return self._get('/referrals/list', {'page': page})

    def apply(self, code: str):
        return self._post('/referrals/apply', {'referral_code': code})

    def validate(self, code: str):
        return self._post('/referrals/validate', {'code': code})


class PromoCodeEndpoints(_Endpoints):
    def get_active(self):
        return self._get('/promo-codes/active')

    def validate(self, code: str, amount: float):
        return self._post('/promo-codes/validate', {'code': code, 'booking_amount': amount})

    def apply(self, code: str, booking_id, amount: float):
        return self._post('/promo-codes/apply', {
            'code': code,
            'booking_id': booking_id,
            'booking_amount': amount,
        })


class SessionNoteEndpoints(_Endpoints):
    def list(self, client_id):
        return self._get('/session-notes', {'client_id': client_id})

    def get(self, note_id):
        return self._get(f'/session-notes/{_seg(note_id)}')

    def create(self, data: dict):
        return self._post('/session-notes/create', data)

    def update(self, note_id, data: dict):
        return self._patch(f'/session-notes/{_seg(note_id)}', data)


class AdminUserEndpoints(_Endpoints):
    def list(self, params: Optional[dict] = None):
        return self._get('/admin/users', params)

    def update(self, user_id, data: dict):
        return self._patch(f'/admin/users/{_seg(user_id)}', data)

    def suspend(self, user_id):
        return self._post(f'/admin/users/{_seg(user_id)}/suspend')

    def unsuspend(self, user_id):
        return self._post(f'/admin/users/{_seg(user_id)}/unsuspend')


class AdminCoachEndpoints(_Endpoints):
    def pending(self):
        return self._get('/admin/coaches/pending')

    def verify(self, coach_id):
        return self._post(f'/admin/coaches/{_seg(coach_id)}/verify')

    def reject(self, coach_id, reason: str = ""):
        return self._post(f'/admin/coaches/{_seg(coach_id)}/reject', {'reason': reason})


class AdminSettingsEndpoints(_Endpoints):
    def get(self):
        return self._get('/admin/settings')

    def update(self, data: dict):
        return self._put('/admin/settings', data)


class AdminPromoCodeEndpoints(_Endpoints):
    def list(self):
        return self._get('/admin/promo-codes')

    def create(self, data: dict):
        return self._post('/admin/promo-codes', data)

    def update(self, promo_id, data: dict):
        return self._patch(f'/admin/promo-codes/{_seg(promo_id)}', data)

    def delete(self, promo_id):
        return self._delete(f'/admin/promo-codes/{_seg(promo_id)}')

    def usage(self, promo_id):
        return self._get(f'/admin/promo-codes/{_seg(promo_id)}/usage')


class AdminEndpoints:
    def __init__(self, client: "CoachSearchingAPIClient"):
        self.users = AdminUserEndpoints(client)
        self.coaches = AdminCoachEndpoints(client)
        self.settings = AdminSettingsEndpoints(client)
        self.promo_codes = AdminPromoCodeEndpoints(client)


class AnalyticsEndpoints(_Endpoints):
    def overview(self):
        return self._get('/analytics/overview')

    def users(self, period: str = '30d'):
        return self._get('/analytics/users', {'period': period})

    def revenue(self, period: str = '30d'):
        return self._get('/analytics/revenue', {'period': period})

    def bookings(self, period: str = '30d'):
        return self._get('/analytics/bookings', {'period': period})

    def coaches(self, period: str = '30d'):
        return self._get('/analytics/coaches', {'period': period})


class PaymentEndpoints(_Endpoints):
    def create_intent(self, booking_id, amount: float):
        return self._post('/payments/create-intent', {'booking_id': booking_id, 'amount': amount})

    def confirm(self, payment_intent_id: str):
        return self._post('/payments/confirm', {'payment_intent_id': payment_intent_id})

    def get_status(self, payment_id):
        return self._get(f'/payments/{_seg(payment_id)}/status')


class SearchEndpoints(_Endpoints):
    def coaches(self, query: str, filters: Optional[dict] = None):
        return self._post('/search/coaches', {'query': query, **(filters or {})})

    def suggestions(self, query: str):
        return self._get('/search/suggestions', {'q': query})


class LookupEndpoints(_Endpoints):
    def all(self, lang: Optional[str] = None):
        return self._get('/lookup', {'lang': lang} if lang else None)

    def by_type(self, option_type: str, lang: Optional[str] = None):
        return self._get(f'/lookup/{_seg(option_type)}', {'lang': lang} if lang else None)


class CoachSearchingAPIClient:
    """Client for the CoachSearching REST API with retry logic."""

    def __init__(
        self,
        base_url: str = None,
        timeout: int = None,
        max_retries: int = None,
        backoff_ms: int = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize API client.

        Args:
            base_url: API base URL (default from config)
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per request
            backoff_ms: Linear backoff unit; waits backoff_ms * attempt
            token_provider: Callable returning the bearer token or None
            session: requests session to use (a pooled one by default)
            sleep: Sleep function between attempts
        """
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.timeout = timeout or config.API_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries or config.MAX_RETRY_ATTEMPTS)
        self.backoff_ms = config.RETRY_BACKOFF_MS if backoff_ms is None else backoff_ms
        self.token_provider = token_provider
        self._sleep = sleep

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=10, pool_maxsize=10)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

        self.auth = AuthEndpoints(self)
        self.coaches = CoachEndpoints(self)
        self.bookings = BookingEndpoints(self)
        self.reviews = ReviewEndpoints(self)
        self.messages = MessageEndpoints(self)
        self.referrals = ReferralEndpoints(self)
        self.promo_codes = PromoCodeEndpoints(self)
        self.session_notes = SessionNoteEndpoints(self)
        self.admin = AdminEndpoints(self)
        self.analytics = AnalyticsEndpoints(self)
        self.payments = PaymentEndpoints(self)
        self.search = SearchEndpoints(self)
        self.lookup = LookupEndpoints(self)

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including the bearer token if present."""
        headers = {'Content-Type': 'application/json'}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    def _decode(self, response: requests.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid JSON in success response: {e}")
            raise APIError(
                "Invalid response from server",
                status=response.status_code,
                error="InvalidResponse",
            )

    def _error_from_response(self, response: requests.Response) -> APIError:
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError):
            body = None
        return api_error_from_response(
            response.status_code,
            body,
            reason=response.reason or "",
            retry_after=_retry_after(response),
        )

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make an HTTP request with retries and error normalization.

        Returns:
            Decoded JSON body (None for empty responses)

        Raises:
            APIError: Non-2xx response or invalid JSON (subclass by status)
            NetworkError: No response after all attempts
        """
        url = f"{self.base_url}{endpoint}"
        request_headers = self._get_headers()
        if headers:
            request_headers.update(headers)

        last_error: Optional[APIError] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=request_headers,
                    timeout=self.timeout,
                )
            except requests.exceptions.Timeout:
                last_error = NetworkError(f"Request timed out after {self.timeout}s")
            except requests.exceptions.RequestException as e:
                last_error = NetworkError(f"Network error: {e}")
            else:
                if 200 <= response.status_code < 300:
                    return self._decode(response)
                last_error = self._error_from_response(response)

            if attempt < self.max_retries:
                delay = self.backoff_ms * attempt / 1000.0
                logger.warning(
                    f"{method} {url} attempt {attempt}/{self.max_retries} failed "
                    f"({last_error.message}); retrying in {delay:.1f}s"
                )
                self._sleep(delay)

        logger.error(f"API request failed after {self.max_retries} attempts: {method} {url} - {last_error.message}")
        raise last_error

    # Health check
    def health_check(self) -> bool:
        """Check if the API is healthy."""
        try:
            self.request('GET', '/health')
            return True
        except APIError:
            return False
