"""Hash routing for the CoachSearching frontend."""
from coachsearching.routing.hash import (
    DEFAULT_PATH,
    Route as RouteState,
    parse_hash,
    normalize_hash,
    build_hash,
)
from coachsearching.routing.location import (
    Location,
    MemoryLocation,
    QueryParamLocation,
)
from coachsearching.routing.router import Router
from coachsearching.routing.components import (
    Route,
    Switch,
    Link,
    Redirect,
    path_matches,
)

__all__ = [
    # Parsing
    "DEFAULT_PATH",
    "RouteState",
    "parse_hash",
    "normalize_hash",
    "build_hash",
    # Locations
    "Location",
    "MemoryLocation",
    "QueryParamLocation",
    # Router
    "Router",
    # Components
    "Route",
    "Switch",
    "Link",
    "Redirect",
    "path_matches",
]
