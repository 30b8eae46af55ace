"""Routing of files to upload destinations.

Usage:
    from tdlr.routing import Router, ErrorPolicy

    # Compile once at startup; LexError/ParseError abort here
    router = Router('if(size > 100 * MB, "@large_files", "@small_files")')

    # One fresh context and one evaluation per file
    plan = router.plan(files)
"""

from tdlr.routing.context import (
    VARIABLE_KINDS,
    FileContext,
    TimestampSource,
    format_size,
)
from tdlr.routing.router import (
    DEFAULT_DESTINATION,
    ErrorPolicy,
    RouteDecision,
    Router,
    RoutingError,
    RoutingPlan,
    route,
)

__all__ = [
    "DEFAULT_DESTINATION",
    "VARIABLE_KINDS",
    "ErrorPolicy",
    "FileContext",
    "RouteDecision",
    "Router",
    "RoutingError",
    "RoutingPlan",
    "TimestampSource",
    "format_size",
    "route",
]
