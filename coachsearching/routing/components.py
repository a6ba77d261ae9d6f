"""Declarative route matching: Route, Switch, Link and Redirect.

Routes match against the router's current route. A Switch renders only
the first matching Route in declaration order; a Route without a path is
a catch-all.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from coachsearching.routing.hash import Route as RouteState, normalize_hash
from coachsearching.routing.router import Router

logger = logging.getLogger(__name__)

Renderer = Callable[[RouteState], Any]


def path_matches(route: RouteState, path: str, exact: bool = False) -> bool:
    """Exact: same first segment. Otherwise also a prefix of the full path."""
    if exact:
        return route.path == path
    return route.path == path or route.full_path.startswith(path)


@dataclass(frozen=True)
class Route:
    """A renderer bound to a path.

    Args:
        path: Path to match (``"coach"``); None makes a catch-all
        render: Callable receiving the current route state
        exact: Require ``route.path == path`` instead of prefix matching
    """
    path: Optional[str] = None
    render: Optional[Renderer] = None
    exact: bool = False

    @property
    def is_fallback(self) -> bool:
        return not self.path

    def matches(self, route: RouteState) -> bool:
        if self.is_fallback:
            return True
        return path_matches(route, self.path, self.exact)

    def render_for(self, route: RouteState) -> Any:
        """Call the renderer when the route matches; otherwise return None."""
        if not self.matches(route) or self.render is None:
            return None
        return self.render(route)


class Switch:
    """Render only the first matching Route.

    Example:
        >>> switch = Switch(
        ...     Route("home", render_home, exact=True),
        ...     Route("coach", render_coach),
        ...     Route(render=render_not_found),
        ... )
        >>> switch.render(router)
    """

    def __init__(self, *routes: Route):
        self.routes: Sequence[Route] = tuple(r for r in routes if r is not None)

    def select(self, route: RouteState) -> Optional[Route]:
        for candidate in self.routes:
            if candidate.matches(route):
                return candidate
        return None

    def render(self, router: Router) -> Any:
        current = router.route
        selected = self.select(current)
        if selected is None:
            logger.debug(f"No route matched {current.full_path}")
            return None
        if selected.render is None:
            return None
        return selected.render(current)


@dataclass(frozen=True)
class Link:
    """Navigation link to a hash path.

    Args:
        to: Target path, with or without ``#``
        label: Text shown on the link
    """
    to: str
    label: str = ""

    @property
    def href(self) -> str:
        return normalize_hash(self.to)

    @property
    def target_path(self) -> str:
        return self.to.replace('#', '')

    def is_active(self, route: RouteState) -> bool:
        return route.path == self.target_path

    def activate(self, router: Router) -> None:
        """Navigate through the router instead of following the href."""
        router.navigate(self.to)

    def render(self, router: Router, key: Optional[str] = None, **button_kwargs) -> bool:
        """Draw the link as a Streamlit button, primary while active."""
        import streamlit as st

        active = self.is_active(router.route)
        return st.button(
            self.label or self.target_path,
            key=key or f"link_{self.href}",
            type="primary" if active else "secondary",
            on_click=self.activate,
            args=(router,),
            **button_kwargs,
        )


@dataclass(frozen=True)
class Redirect:
    """Navigate to ``to`` as soon as it is applied."""
    to: str

    def apply(self, router: Router) -> bool:
        """Returns False when the router is already at the target."""
        target = normalize_hash(self.to)
        if router.location.hash == target:
            return False
        router.navigate(target)
        return True
