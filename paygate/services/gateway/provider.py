"""Stripe client wrapper exposing named operations as `Ok`/`Failure` results."""

from time import perf_counter
from typing import Any

import stripe

from paygate.common.errors import Failure, FailureKind, Ok, Result, failure_from_exception
from paygate.common.logging import logger
from paygate.common.metrics import provider_calls_total, provider_latency_seconds


# Everything reachable through REST routes or the RPC fallback.
OPERATIONS: frozenset[str] = frozenset(
    {
        "customers.create",
        "customers.retrieve",
        "subscriptions.create",
        "subscriptions.retrieve",
        "subscriptions.cancel",
        "charges.create",
        "charges.retrieve",
        "invoices.create",
        "invoices.retrieve",
        "products.create",
        "products.retrieve",
        "prices.create",
        "prices.retrieve",
    }
)


def to_plain(obj: Any) -> Any:
    """Convert SDK objects to JSON-serializable dicts."""

    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return obj


def build_stripe_client(api_key: str, api_version: str | None = None) -> stripe.StripeClient:
    """Create an async-capable Stripe client with retries disabled."""

    return stripe.StripeClient(
        api_key,
        stripe_version=api_version,
        http_client=stripe.HTTPXClient(),
        max_network_retries=0,
    )


class StripeProvider:
    """Capability object over one Stripe client.

    Every SDK exception is converted into a `Failure` here, so nothing past
    this class has to know about Stripe's exception hierarchy.
    """

    def __init__(self, client: Any, service_name: str = "paygate") -> None:
        # Newer SDKs namespace resources under `client.v1`.
        self.client = client
        self._resources = getattr(client, "v1", client)
        self.service_name = service_name

    def supports(self, operation: str) -> bool:
        return operation in OPERATIONS

    async def call(self, operation: str, /, *args: Any, **kwargs: Any) -> Result:
        """Invoke `<resource>.<action>` through the SDK's async methods."""

        if not self.supports(operation):
            return Failure(FailureKind.VALIDATION, f"Unsupported operation: {operation}")
        resource, action = operation.split(".", 1)
        method = getattr(getattr(self._resources, resource), f"{action}_async")

        start = perf_counter()
        try:
            value = await method(*args, **kwargs)
        except Exception as exc:
            failure = failure_from_exception(exc)
            provider_calls_total.labels(
                service=self.service_name,
                operation=operation,
                outcome=failure.kind.value,
            ).inc()
            logger.warning(
                "provider_call_failed operation=%s kind=%s error_type=%s",
                operation,
                failure.kind.value,
                type(exc).__name__,
            )
            return failure
        finally:
            provider_latency_seconds.labels(service=self.service_name, operation=operation).observe(
                max(0.0, perf_counter() - start)
            )
        provider_calls_total.labels(service=self.service_name, operation=operation, outcome="ok").inc()
        return Ok(to_plain(value))

    async def create(self, resource: str, params: dict[str, Any]) -> Result:
        return await self.call(f"{resource}.create", params=params)

    async def retrieve(self, resource: str, object_id: str) -> Result:
        return await self.call(f"{resource}.retrieve", object_id)

    async def cancel_subscription(self, subscription_id: str) -> Result:
        return await self.call("subscriptions.cancel", subscription_id)
