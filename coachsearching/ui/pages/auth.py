"""Sign in, sign up and sign out pages for CoachSearching.

All three talk to Supabase auth through the session's SupabaseService.
The signed-in session is persisted by the service itself, which is what
the REST client reads its bearer token from.
"""

import logging

import streamlit as st

from coachsearching.config.settings import ROUTES
from coachsearching.routing import Redirect
from coachsearching.utils import ClientNotReadyError, SessionState, handle_error
from coachsearching.ui.components import is_signed_in

logger = logging.getLogger(__name__)

_MIN_PASSWORD_LENGTH = 8


def _database_ready(services) -> bool:
    """Wait (bounded) for the Supabase client and report when it never came up."""
    if services.database.wait_until_ready():
        return True
    st.error("The sign-in service is not available right now. Please try again shortly.")
    return False


def render_login_page(services, route) -> None:
    """Email and password sign in, plus a password reset request."""
    if is_signed_in(services):
        if Redirect(ROUTES['HOME']).apply(services.router):
            st.rerun()
        return

    st.title("Sign In")

    with st.form("login_form"):
        email = st.text_input("Email", value=SessionState.get('auth_email', ''))
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary", width='stretch')

    if submitted:
        SessionState.set('auth_email', email)
        if not email or not password:
            st.warning("Please enter your email and password.")
        elif _database_ready(services):
            try:
                services.database.sign_in_with_email(email, password)
            except Exception as e:
                parsed = handle_error(e, context="login")
                st.error(parsed.message)
            else:
                services.context.show_notification("Welcome back!", 'success')
                SessionState.clear_page('login')
                services.router.navigate(ROUTES['HOME'])
                st.rerun()

    with st.expander("Forgot your password?"):
        render_password_reset(services)


def render_password_reset(services) -> None:
    reset_email = st.text_input("Account email", key="reset_email")
    if st.button("Send reset link", key="reset_submit"):
        if not reset_email:
            st.warning("Please enter your email.")
            return
        if not _database_ready(services):
            return
        try:
            services.database.reset_password(reset_email)
        except Exception as e:
            st.error(handle_error(e, context="reset_password").message)
        else:
            st.success("If an account exists for this email, a reset link is on its way.")


def validate_signup(full_name: str, email: str, password: str, confirm: str) -> str:
    """Return an error message, or an empty string when the form is valid."""
    if not full_name.strip():
        return "Please enter your name."
    if "@" not in email:
        return "Please enter a valid email address."
    if len(password) < _MIN_PASSWORD_LENGTH:
        return f"Password must be at least {_MIN_PASSWORD_LENGTH} characters."
    if password != confirm:
        return "Passwords do not match."
    return ""


def render_signup_page(services, route) -> None:
    """Create an account with email and password."""
    if is_signed_in(services):
        if Redirect(ROUTES['HOME']).apply(services.router):
            st.rerun()
        return

    st.title("Create your account")

    with st.form("signup_form"):
        full_name = st.text_input("Full name")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Sign Up", type="primary", width='stretch')

    if not submitted:
        return

    problem = validate_signup(full_name, email, password, confirm)
    if problem:
        st.warning(problem)
        return
    if not _database_ready(services):
        return

    try:
        result = services.database.sign_up_with_email(email, password, {'full_name': full_name.strip()})
    except Exception as e:
        st.error(handle_error(e, context="signup").message)
        return

    if getattr(result, 'session', None) is None:
        st.success("Check your inbox to confirm your email address.")
        return

    services.context.show_notification("Your account is ready.", 'success')
    services.router.navigate(ROUTES['HOME'])
    st.rerun()


def render_signout_page(services, route) -> None:
    """Sign out and go home. The stored session is removed even on failure."""
    try:
        services.database.sign_out()
    except ClientNotReadyError:
        logger.info("Signed out before the database client was ready")
    except Exception as e:
        handle_error(e, context="signout")
    else:
        services.context.show_notification("You have been signed out.", 'info')

    if Redirect(ROUTES['HOME']).apply(services.router):
        st.rerun()
