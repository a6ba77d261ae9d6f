"""
Unit tests for the pure helpers behind the Streamlit pages.
"""
import json

import pytest
from unittest.mock import MagicMock, patch

from coachsearching.routing import MemoryLocation, Router, parse_hash
from coachsearching.ui.components.navbar import navbar_links, render_navbar
from coachsearching.ui.pages.auth import validate_signup
from coachsearching.ui.pages.coach_profile import current_tab
from coachsearching.utils.storage import MemoryStorage


class TestValidateSignup:
    """Tests for sign-up form validation."""

    def test_valid(self):
        """Test a complete form passes."""
        assert validate_signup("Ada", "ada@example.com", "longpassword", "longpassword") == ""

    @pytest.mark.parametrize("name,email,password,confirm,fragment", [
        ("", "a@b.c", "longpassword", "longpassword", "name"),
        ("Ada", "not-an-email", "longpassword", "longpassword", "email"),
        ("Ada", "a@b.c", "short", "short", "at least 8"),
        ("Ada", "a@b.c", "longpassword", "different1", "do not match"),
    ])
    def test_problems(self, name, email, password, confirm, fragment):
        """Test each problem is reported."""
        assert fragment in validate_signup(name, email, password, confirm)


class TestCurrentTab:
    """Tests for profile tab selection."""

    @pytest.mark.parametrize("hash_value,expected", [
        ("#coach/1", "about"),
        ("#coach/1?tab=reviews", "reviews"),
        ("#coach/1?tab=availability", "availability"),
        ("#coach/1?tab=secret", "about"),
    ])
    def test_tab_from_route(self, hash_value, expected):
        """Test the tab comes from the route and unknown tabs fall back."""
        assert current_tab(parse_hash(hash_value)) == expected


class TestNavbarLinks:
    """Tests for auth-dependent navigation."""

    def test_guest_links(self):
        """Test guests see sign in and sign up."""
        services = MagicMock(storage=MemoryStorage())
        targets = [link.target_path for link in navbar_links(services)]
        assert targets == ["home", "coaches", "login", "signup"]

    def test_member_links(self):
        """Test signed-in users see sign out."""
        storage = MemoryStorage({"supabase.auth.token": json.dumps({"currentSession": {"access_token": "t"}})})
        services = MagicMock(storage=storage)
        targets = [link.target_path for link in navbar_links(services)]
        assert targets == ["home", "coaches", "signout"]


class TestNavbarRender:
    """Tests for drawing the navbar buttons."""

    def test_buttons_stretch_and_mark_active(self):
        """Test every link is a full-width button and the current page is primary."""
        services = MagicMock(storage=MemoryStorage(), router=Router(MemoryLocation("#coaches")))

        with patch("streamlit.columns", side_effect=lambda n: [MagicMock() for _ in range(n)]), \
                patch("streamlit.button") as button:
            render_navbar(services)

        assert button.call_count == 4
        for call in button.call_args_list:
            assert call.kwargs["width"] == 'stretch'
            assert "use_container_width" not in call.kwargs

        types = {call.args[0]: call.kwargs["type"] for call in button.call_args_list}
        assert types["Find a Coach"] == "primary"
        assert types["Home"] == "secondary"
