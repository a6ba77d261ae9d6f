"""Sidebar component for CoachSearching.

Holds the locale preferences (currency and language), the lookup table
status with refresh actions, and the current notification.

Lookup polling:
- Lookup tables load in background threads on the first run
- While any table is still loading, a fragment polls its status
- Once everything is loaded the app reruns so pages see the options
"""

import logging

import streamlit as st

from coachsearching.config.settings import config

logger = logging.getLogger(__name__)

LANGUAGE_LABELS = {
    'en': "English",
    'de': "Deutsch",
    'fr': "Français",
    'es': "Español",
    'it': "Italiano",
}

_NOTIFICATION_RENDERERS = {
    'success': st.success,
    'error': st.error,
    'warning': st.warning,
    'info': st.info,
}

_LOOKUP_POLL_SECONDS = 1.0


def render_sidebar(services) -> None:
    """Render the sidebar for one session."""
    context = services.context

    with st.sidebar:
        st.markdown(f"## {config.APP_ICON} {config.APP_NAME}")
        st.caption("Find the right coach")

        st.divider()

        render_locale_selectors(context)

        st.divider()

        if all(resource.loaded for resource in context.resources):
            render_lookup_status(context)
        else:
            render_lookup_status_polling(context)

        st.divider()

        render_backend_status(services)


def render_notification(context) -> None:
    """Show the current notification, if it has not expired."""
    notification = context.notification
    if notification is None:
        return
    show = _NOTIFICATION_RENDERERS.get(notification.type, st.info)
    col1, col2 = st.columns([12, 1])
    with col1:
        show(notification.message)
    with col2:
        st.button("✕", key=f"dismiss_{notification.id}", on_click=context.clear_notification)


def render_locale_selectors(context) -> None:
    """Currency and language selectboxes bound to the app context."""
    codes = list(context.currencies.keys())
    st.selectbox(
        "Currency",
        codes,
        index=codes.index(context.currency) if context.currency in codes else 0,
        format_func=lambda code: f"{context.currencies[code].symbol.strip()} {code}",
        key="sidebar_currency",
        on_change=_on_currency_change,
        args=(context,),
    )

    languages = list(config.SUPPORTED_LANGUAGES)
    st.selectbox(
        "Language",
        languages,
        index=languages.index(context.language) if context.language in languages else 0,
        format_func=lambda code: LANGUAGE_LABELS.get(code, code),
        key="sidebar_language",
        on_change=_on_language_change,
        args=(context,),
    )


def _on_currency_change(context) -> None:
    context.set_currency(st.session_state["sidebar_currency"])


def _on_language_change(context) -> None:
    context.set_language(st.session_state["sidebar_language"])


def render_lookup_status(context) -> None:
    """Lookup table counts with refresh buttons."""
    st.markdown("### Lookup data")

    grouped = context.lookup_options
    option_count = sum(len(options) for options in grouped.values())
    rows = [
        ("Options", option_count, context.lookup_options_loaded, context.refresh_lookup_options, "refresh_lookup_options"),
        ("Cities", len(context.cities), context.cities_loaded, context.refresh_cities, "refresh_cities"),
        ("Certifications", len(context.certifications), context.certifications_loaded, context.refresh_certifications, "refresh_certifications"),
    ]

    for label, count, loaded, refresh, key in rows:
        col1, col2 = st.columns([3, 1])
        with col1:
            st.caption(f"{label}: {count}" if loaded else f"{label}: not loaded")
        with col2:
            st.button("🔄", key=key, help=f"Refresh {label.lower()}", on_click=_refresh, args=(context, refresh))


def _refresh(context, refresh) -> None:
    refresh()
    context.load_lookups_in_background()


@st.fragment(run_every=_LOOKUP_POLL_SECONDS)
def render_lookup_status_polling(context) -> None:
    """Lookup status that polls until every table is loaded.

    Only this fragment reruns on the interval; the full app reruns once
    all tables are available.
    """
    st.markdown("### Lookup data")

    pending = [resource.name for resource in context.resources if not resource.loaded]
    if not pending:
        logger.debug("All lookup tables loaded")
        st.rerun()

    # A failed load leaves the latch free; kick it again
    if not any(resource.loading for resource in context.resources):
        context.load_lookups_in_background()

    st.caption(f"Loading: {', '.join(pending)}")


def render_backend_status(services) -> None:
    """On-demand API health check."""
    if st.button("Check API", key="check_api", width='stretch'):
        if services.api_client.health_check():
            st.caption("✅ API reachable")
        else:
            st.caption("⚠️ API unavailable")

    st.caption(f"v{config.APP_VERSION}")
