"""
YourTales Backend - Path Normalization Middleware
==================================================

What:  Collapses repeated slashes in the request path before routing,
       so "/api//manuscripts///3" reaches the same route as "/api/manuscripts/3".
How:   Plain ASGI middleware rewriting scope["path"] (and raw_path). It must
       sit outside the router, which matches on the scope it receives.
"""

import logging
import re

from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    return _REPEATED_SLASHES.sub("/", path)


class PathNormalizationMiddleware:

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket") and "//" in scope.get("path", ""):
            original = scope["path"]
            scope = dict(scope)
            scope["path"] = normalize_path(original)
            if scope.get("raw_path"):
                raw = scope["raw_path"].decode("latin-1")
                scope["raw_path"] = normalize_path(raw).encode("latin-1")
            logger.debug("Normalized path %s -> %s", original, scope["path"])
        await self.app(scope, receive, send)
