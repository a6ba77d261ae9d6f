"""
Shared test fixtures for CoachSearching tests.
"""
import os
import sys

import pytest
from unittest.mock import MagicMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from coachsearching.utils.storage import MemoryStorage


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    created = []

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fn()

    @classmethod
    def live(cls):
        return [t for t in cls.created if t.started and not t.cancelled]


@pytest.fixture
def storage():
    """Empty in-memory local storage."""
    return MemoryStorage()


@pytest.fixture
def clock():
    """Controllable clock in epoch milliseconds."""
    return FakeClock()


@pytest.fixture
def fake_timer():
    """Timer factory whose timers fire only on demand."""
    FakeTimer.created = []
    yield FakeTimer
    FakeTimer.created = []


@pytest.fixture
def lookup_rows():
    """Active rows as stored in cs_lookup_options."""
    return [
        {"id": 1, "type": "specialty", "code": "career", "name_en": "Career", "name_de": "Karriere", "sort_order": 1, "is_active": True},
        {"id": 2, "type": "specialty", "code": "life", "name_en": "Life", "sort_order": 2, "is_active": True},
        {"id": 3, "type": "language", "code": "en", "name_en": "English", "name_de": "Englisch", "sort_order": 1, "is_active": True},
        {"id": 4, "type": "session_format", "code": "online", "name_en": "Online", "sort_order": 1, "is_active": True},
    ]


@pytest.fixture
def mock_database(lookup_rows):
    """Ready SupabaseService double returning lookup rows."""
    database = MagicMock()
    database.wait_until_ready.return_value = True
    database.fetch_lookup_rows.side_effect = lambda table: {
        "cs_lookup_options": lookup_rows,
        "cs_cities": [{"id": 10, "code": "berlin", "name_en": "Berlin", "name_de": "Berlin", "country_code": "DE"}],
        "cs_certifications": [{"id": 20, "code": "icf", "name_en": "ICF", "issuer": "International Coaching Federation"}],
    }[table]
    return database
