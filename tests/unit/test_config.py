"""
Unit tests for the CoachSearching configuration.

Tests settings loading including:
- Default values
- Environment variable overrides
- Immutability
"""
import dataclasses
import os

import pytest
from unittest.mock import patch

from coachsearching.config.settings import CoachSearchingConfig, CURRENCIES, ROUTES


class TestConfigDefaults:
    """Tests for default configuration values."""

    def test_network_defaults(self):
        """Test timeout and retry defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = CoachSearchingConfig()

        assert settings.API_TIMEOUT_SECONDS == 30
        assert settings.MAX_RETRY_ATTEMPTS == 3
        assert settings.RETRY_BACKOFF_MS == 1000

    def test_lookup_cache_ttl(self):
        """Test the lookup cache TTL is 24 hours."""
        with patch.dict(os.environ, {}, clear=True):
            settings = CoachSearchingConfig()

        assert settings.LOOKUP_CACHE_TTL_SECONDS == 86400
        assert settings.LOOKUP_CACHE_TTL_MS == 86400 * 1000

    def test_client_ready_budget(self):
        """Test the readiness wait is 50 polls of 100ms."""
        settings = CoachSearchingConfig()
        assert settings.CLIENT_READY_MAX_ATTEMPTS == 50
        assert settings.CLIENT_READY_INTERVAL_SECONDS == pytest.approx(0.1)

    def test_search_debounce(self):
        """Test the debounce delay defaults to 300ms."""
        with patch.dict(os.environ, {}, clear=True):
            settings = CoachSearchingConfig()

        assert settings.SEARCH_DEBOUNCE_SECONDS == pytest.approx(0.3)

    def test_locale_defaults(self):
        """Test default currency and language."""
        settings = CoachSearchingConfig()
        assert settings.DEFAULT_CURRENCY == "EUR"
        assert settings.DEFAULT_LANGUAGE == "en"
        assert settings.SUPPORTED_LANGUAGES == ("en", "de", "fr", "es", "it")

    def test_currencies(self):
        """Test the supported currencies and EUR base rate."""
        assert set(CURRENCIES) == {"EUR", "USD", "GBP", "CHF"}
        assert CURRENCIES["EUR"].rate == 1.0
        assert CoachSearchingConfig().CURRENCIES is CURRENCIES

    def test_routes(self):
        """Test route constants are hashes."""
        assert ROUTES["COACHES"] == "#coaches"
        assert all(route.startswith("#") for route in ROUTES.values())


class TestConfigOverrides:
    """Tests for environment overrides."""

    def test_int_override(self):
        """Test integer settings read from the environment."""
        with patch.dict(os.environ, {"API_TIMEOUT_SECONDS": "10", "SEARCH_DEBOUNCE_MS": "500"}):
            settings = CoachSearchingConfig()

        assert settings.API_TIMEOUT_SECONDS == 10
        assert settings.SEARCH_DEBOUNCE_SECONDS == pytest.approx(0.5)

    def test_invalid_int_falls_back(self):
        """Test unparsable integers keep the default."""
        with patch.dict(os.environ, {"MAX_RETRY_ATTEMPTS": "many"}):
            settings = CoachSearchingConfig()

        assert settings.MAX_RETRY_ATTEMPTS == 3

    def test_string_override(self):
        """Test string settings read from the environment."""
        with patch.dict(os.environ, {"API_BASE_URL": "http://localhost:8080/api"}):
            settings = CoachSearchingConfig()

        assert settings.API_BASE_URL == "http://localhost:8080/api"

    @pytest.mark.parametrize("value,expected", [("true", True), ("1", True), ("yes", True), ("no", False)])
    def test_bool_override(self, value, expected):
        """Test boolean parsing."""
        with patch.dict(os.environ, {"DEBUG": value}):
            assert CoachSearchingConfig().DEBUG is expected


class TestConfigImmutability:
    """Tests for frozen configuration."""

    def test_cannot_modify(self):
        """Test config values cannot be reassigned."""
        settings = CoachSearchingConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.API_TIMEOUT_SECONDS = 1
