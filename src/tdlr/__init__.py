"""tdlr: route local files to messaging-service destinations.

The routing expression engine lives in tdlr.routing.expressions; the
per-file context builder and Router in tdlr.routing.
"""

__version__ = "0.1.0"
