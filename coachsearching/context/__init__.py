"""Shared application context."""
from coachsearching.context.app_context import (
    AppContext,
    LookupResource,
    Notification,
    LOOKUP_GROUPS,
)

__all__ = [
    "AppContext",
    "LookupResource",
    "Notification",
    "LOOKUP_GROUPS",
]
