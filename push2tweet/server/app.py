"""FastAPI application exposing the operation relay."""

from __future__ import annotations

import logging
from collections.abc import Callable
from http import HTTPStatus

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from push2tweet import __version__
from push2tweet.context import build_context
from push2tweet.logging_config import configure_logging
from push2tweet.models import Settings
from push2tweet.server.header_middleware import (
    SERVICE_HEADER,
    SERVICE_PATH_HEADER,
    TenantHeaderMiddleware,
)
from push2tweet.server.kpis import ServerKPIs
from push2tweet.settings import resolve
from push2tweet.webhook.relay import OperationRelayPipeline, RelayDispatcher
from push2tweet.webhook.responder import Responder
from push2tweet.webhook.twitter import TwitterClient

logger = logging.getLogger(__name__)

OPERATION_ROUTES = ("/async/create", "/sync/request")


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from the environment."""
    settings = resolve()
    configure_logging(settings.log_level)
    return create_app(settings)


def create_app(
    settings: Settings,
    kpis: ServerKPIs | None = None,
    twitter: TwitterClient | None = None,
    responder: Responder | None = None,
    on_fault: Callable[[BaseException], None] | None = None,
) -> FastAPI:
    """Create the relay FastAPI app with the tenant header check."""
    kpis = kpis if kpis is not None else ServerKPIs()
    twitter = twitter or TwitterClient.from_settings(settings)
    responder = responder or Responder(settings.response_timeout)
    pipeline = OperationRelayPipeline(RelayDispatcher(twitter), responder)

    app = FastAPI(
        docs_url=None, redoc_url=None, openapi_url=None, redirect_slashes=False,
    )
    app.state.kpis = kpis
    app.state.responder = responder

    @app.get("/version")
    async def version() -> dict[str, str]:
        return {"version": __version__}

    async def operation(request: Request) -> Response:
        context = build_context(request)
        tenant_headers = {
            "Fiware-Service": request.headers[SERVICE_HEADER],
            "Fiware-ServicePath": request.headers[SERVICE_PATH_HEADER],
        }
        body = await request.body()
        result = await pipeline.relay(body, context, tenant_headers)
        if result.body is None:
            return Response(status_code=result.status_code)
        return JSONResponse(result.body, status_code=result.status_code)

    prefix = settings.path.rstrip("/")
    operation_paths = frozenset(prefix + route for route in OPERATION_ROUTES)
    for path in sorted(operation_paths):
        app.add_api_route(path, operation, methods=["POST"])

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unsupported methods on known paths are reported as unknown routes
        status = 404 if exc.status_code == 405 else exc.status_code
        return JSONResponse(
            {"statusCode": status, "error": HTTPStatus(status).phrase},
            status_code=status,
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s %s: %r", request.method, request.url.path, exc,
            extra=build_context(request).log_extra(),
        )
        if on_fault is not None:
            on_fault(exc)
        return JSONResponse(
            {"statusCode": 500, "error": "Internal Server Error"}, status_code=500,
        )

    app.add_middleware(
        TenantHeaderMiddleware, kpis=kpis, protected_paths=operation_paths,
    )

    return app
