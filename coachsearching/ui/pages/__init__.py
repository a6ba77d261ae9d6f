"""Page components for CoachSearching."""
from coachsearching.ui.pages.home import render_home_page
from coachsearching.ui.pages.coaches import render_coaches_page
from coachsearching.ui.pages.coach_profile import render_coach_profile_page
from coachsearching.ui.pages.auth import (
    render_login_page,
    render_signup_page,
    render_signout_page,
    validate_signup,
)
from coachsearching.ui.pages.not_found import render_not_found_page

__all__ = [
    "render_home_page",
    "render_coaches_page",
    "render_coach_profile_page",
    "render_login_page",
    "render_signup_page",
    "render_signout_page",
    "validate_signup",
    "render_not_found_page",
]
