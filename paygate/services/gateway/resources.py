"""REST resources re-exposing Stripe operations.

Handlers are thin: parse, call the provider capability, render the result.
Provider `Failure` values and webhook rejections are raised to the dispatcher,
which reports every failure in one place.
"""

from starlette.requests import Request
from starlette.responses import Response

from paygate.common.config import GatewaySettings
from paygate.common.errors import NotConfiguredError
from paygate.common.logging import event_id_ctx, logger
from paygate.common.metrics import webhook_events_total
from paygate.services.gateway.capabilities import Capabilities
from paygate.services.gateway.responses import json_response, parse_body, render, validate_body
from paygate.services.gateway.routing import Route, RouteTable
from paygate.services.gateway.schemas import ChargeCreate, CustomerCreate, PassThrough, SubscriptionCreate
from paygate.services.gateway.webhooks import (
    SIGNATURE_HEADER,
    MissingSignatureError,
    VerificationFailedError,
    WebhookVerifier,
)


ENDPOINTS = {
    "customers": {"create": "POST /customers", "retrieve": "GET /customers/:id"},
    "subscriptions": {
        "create": "POST /subscriptions",
        "retrieve": "GET /subscriptions/:id",
        "cancel": "DELETE /subscriptions/:id",
    },
    "charges": {"create": "POST /charges", "retrieve": "GET /charges/:id"},
    "invoices": {"create": "POST /invoices", "retrieve": "GET /invoices/:id"},
    "products": {"create": "POST /products", "retrieve": "GET /products/:id"},
    "prices": {"create": "POST /prices", "retrieve": "GET /prices/:id"},
    "webhooks": "POST /webhooks",
}

CREATE_SCHEMAS = {
    "customers": CustomerCreate,
    "subscriptions": SubscriptionCreate,
    "charges": ChargeCreate,
    "invoices": PassThrough,
    "products": PassThrough,
    "prices": PassThrough,
}


def build_routes(capabilities: Capabilities, verifier: WebhookVerifier, settings: GatewaySettings) -> RouteTable:
    """Assemble the gateway's route table; called once at startup."""

    async def discovery(request: Request, params: dict[str, str]) -> Response:
        return json_response(
            {
                "api": settings.api_name,
                "version": settings.api_version,
                "status": "ready" if capabilities.configured else "unconfigured",
                "endpoints": ENDPOINTS,
            }
        )

    def create(resource: str):
        schema = CREATE_SCHEMAS[resource]

        async def handler(request: Request, params: dict[str, str]) -> Response:
            body = validate_body(schema, await parse_body(request))
            return render(await capabilities.provider().create(resource, body), 201)

        return handler

    def retrieve(resource: str):
        async def handler(request: Request, params: dict[str, str]) -> Response:
            return render(await capabilities.provider().retrieve(resource, params["id"]))

        return handler

    async def cancel_subscription(request: Request, params: dict[str, str]) -> Response:
        return render(await capabilities.provider().cancel_subscription(params["id"]))

    def count_webhook(outcome: str) -> None:
        webhook_events_total.labels(service=settings.service_name, outcome=outcome).inc()

    async def receive_webhook(request: Request, params: dict[str, str]) -> Response:
        payload = await request.body()
        try:
            event = verifier.verify(payload, request.headers.get(SIGNATURE_HEADER), capabilities.webhook_secret())
        except MissingSignatureError:
            count_webhook("missing_signature")
            raise
        except NotConfiguredError:
            count_webhook("unconfigured")
            raise
        except VerificationFailedError:
            count_webhook("invalid_signature")
            raise

        token = event_id_ctx.set(event.id)
        try:
            count_webhook("verified")
            logger.info("webhook_received type=%s id=%s", event.type, event.id)
        finally:
            event_id_ctx.reset(token)
        return json_response({"received": True, "type": event.type})

    routes = [Route.compile("GET", "/", discovery)]
    for resource in ("customers", "subscriptions", "charges", "invoices", "products", "prices"):
        routes.append(Route.compile("POST", f"/{resource}", create(resource)))
        routes.append(Route.compile("GET", f"/{resource}/:id", retrieve(resource)))
        if resource == "subscriptions":
            routes.append(Route.compile("DELETE", "/subscriptions/:id", cancel_subscription))
    routes.append(Route.compile("POST", "/webhooks", receive_webhook))
    return RouteTable(routes)
