"""Configuration for the CoachSearching frontend."""
from coachsearching.config.settings import (
    config,
    CoachSearchingConfig,
    Currency,
    CURRENCIES,
    ROUTES,
)

__all__ = [
    "config",
    "CoachSearchingConfig",
    "Currency",
    "CURRENCIES",
    "ROUTES",
]
