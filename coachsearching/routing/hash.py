"""Hash fragment parsing.

Maps a URL fragment such as ``#coach/123?tab=reviews`` to a Route and
back. Parsing is total: any input, including None and garbage, yields a
route (``home`` when nothing usable is present).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlencode

DEFAULT_PATH = "home"


@dataclass(frozen=True)
class Route:
    """Parsed navigation state.

    Attributes:
        path: First path segment (``"home"`` when empty)
        full_path: Whole path part without the query (``"home"`` when empty)
        segments: Non-empty path segments
        id: Second path segment, if any
        params: Query parameters, last duplicate wins
        hash: Cleaned fragment without the leading ``#``
    """
    path: str = DEFAULT_PATH
    full_path: str = DEFAULT_PATH
    segments: Tuple[str, ...] = ()
    id: Optional[str] = None
    params: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    hash: str = ""

    def param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.params.get(name, default)


def _parse_query(query: str) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if not query:
        return params
    try:
        pairs = parse_qsl(query, keep_blank_values=True)
    except ValueError:
        return params
    for key, value in pairs:
        params[key] = value
    return params


def parse_hash(hash_value: Any) -> Route:
    """Parse a hash string into a Route.

    Strips one leading ``#``, splits on the first ``?`` into path and
    query, takes the first path segment as ``path`` and the second as
    ``id``.

    Args:
        hash_value: Raw fragment, e.g. ``"#coach/123?tab=reviews"``

    Returns:
        Route; never raises

    Example:
        >>> route = parse_hash("#coach/123?tab=reviews")
        >>> route.path, route.id, dict(route.params)
        ('coach', '123', {'tab': 'reviews'})
    """
    if not isinstance(hash_value, str):
        hash_value = ""

    clean = hash_value[1:] if hash_value.startswith('#') else hash_value
    path_part, _, query = clean.partition('?')

    segments = tuple(s for s in path_part.split('/') if s)
    path = segments[0] if segments else DEFAULT_PATH
    route_id = segments[1] if len(segments) > 1 else None

    return Route(
        path=path,
        full_path=path_part or DEFAULT_PATH,
        segments=segments,
        id=route_id,
        params=MappingProxyType(_parse_query(query)),
        hash=clean,
    )


def normalize_hash(path: str) -> str:
    """Return ``path`` with exactly one leading ``#``."""
    path = path or ""
    return path if path.startswith('#') else f"#{path}"


def build_hash(path: str, id: Optional[Any] = None, params: Optional[Mapping[str, Any]] = None) -> str:
    """Compose a hash fragment from its parts.

    Example:
        >>> build_hash("coach", 123, {"tab": "reviews"})
        '#coach/123?tab=reviews'
    """
    fragment = (path or DEFAULT_PATH).lstrip('#')
    if id is not None and id != "":
        fragment = f"{fragment}/{quote(str(id), safe='')}"
    if params:
        query = urlencode({k: v for k, v in params.items() if v is not None})
        if query:
            fragment = f"{fragment}?{query}"
    return f"#{fragment}"
