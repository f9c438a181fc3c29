"""ASGI middleware checking the tenant routing headers on operation routes."""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from push2tweet.context import build_context
from push2tweet.errors import MissingHeaderError
from push2tweet.server.kpis import ServerKPIs

logger = logging.getLogger(__name__)

SERVICE_HEADER = "fiware-service"
SERVICE_PATH_HEADER = "fiware-servicepath"

REQUIRED_HEADERS = (SERVICE_HEADER, SERVICE_PATH_HEADER)


class TenantHeaderMiddleware:
    """Rejects operation requests lacking Fiware-Service or Fiware-ServicePath.

    Every request matching a protected route counts as attended, whether
    or not it passes the check.
    """

    def __init__(
        self,
        app: ASGIApp,
        kpis: ServerKPIs,
        protected_paths: frozenset[str] = frozenset(),
        protected_methods: frozenset[str] = frozenset({"POST"}),
    ) -> None:
        self.app = app
        self._kpis = kpis
        self._protected_paths = protected_paths
        self._protected_methods = protected_methods

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        if (
            request.url.path not in self._protected_paths
            or request.method not in self._protected_methods
        ):
            await self.app(scope, receive, send)
            return

        self._kpis.increment()

        for header in REQUIRED_HEADERS:
            if not request.headers.get(header):
                error = MissingHeaderError(header)
                logger.warning("%s", error.message, extra=build_context(request).log_extra())
                response = JSONResponse(
                    {
                        "statusCode": 400,
                        "error": "Bad Request",
                        "message": error.message,
                        "validation": {"source": "headers", "keys": [header]},
                    },
                    status_code=400,
                )
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)
