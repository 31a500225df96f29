"""FastAPI application factory for the payments gateway.

FastAPI only hosts the ASGI plumbing: `/metrics` plus one catch-all route that
hands every other request to the `Dispatcher`, which owns REST routing and the
RPC fallback.
"""

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request

from paygate.common.config import GatewaySettings, settings
from paygate.common.logging import logger, trace_id_ctx
from paygate.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paygate.common.tracing import instrument_app, setup_tracing
from paygate.services.gateway.capabilities import Capabilities
from paygate.services.gateway.dispatcher import Dispatcher
from paygate.services.gateway.resources import build_routes
from paygate.services.gateway.rpc import FallbackAdapter
from paygate.services.gateway.webhooks import WebhookVerifier


HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    app_settings: GatewaySettings | None = None,
    capabilities: Capabilities | None = None,
    verifier: WebhookVerifier | None = None,
) -> FastAPI:
    """Build the gateway app; collaborators default to environment-backed ones."""

    app_settings = app_settings or settings
    capabilities = capabilities or Capabilities(app_settings)
    verifier = verifier or WebhookVerifier(tolerance=app_settings.webhook_tolerance_seconds)

    routes = build_routes(capabilities, verifier, app_settings)
    dispatcher = Dispatcher(routes, FallbackAdapter(capabilities.fallback), service_name=app_settings.service_name)
    logger.info("routes_registered count=%s routes=%s", len(routes), routes.describe())

    # Built-in docs routes would shadow the fallback handler.
    app = FastAPI(title="Paygate", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.dispatcher = dispatcher
    app.state.capabilities = capabilities
    if setup_tracing(app_settings.service_name, app_settings.otel_exporter_otlp_endpoint):
        instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency; propagate the correlation id."""

        start = perf_counter()
        method = request.method
        status_code = 500
        trace_id = request.headers.get("x-correlation-id") or str(uuid4())
        token = trace_id_ctx.set(trace_id)
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-correlation-id"] = trace_id
            return response
        finally:
            route = getattr(request.state, "route", None) or request.url.path
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=app_settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=app_settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()
            trace_id_ctx.reset(token)

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    @app.api_route("/{path:path}", methods=HTTP_METHODS, include_in_schema=False)
    async def dispatch(request: Request):
        return await dispatcher.dispatch(request)

    return app
