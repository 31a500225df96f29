"""Shared fixtures: an in-memory Stripe client and a wired gateway app."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from paygate.common.config import GatewaySettings
from paygate.services.gateway.app import create_app
from paygate.services.gateway.capabilities import Capabilities
from paygate.services.gateway.webhooks import WebhookVerifier


class StubResource:
    """Records SDK calls and replays canned responses (or raises them)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.responses: dict[str, Any] = {}

    def respond(self, action: str, value: Any) -> None:
        self.responses[action] = value

    def _invoke(self, action: str, args: tuple, kwargs: dict) -> Any:
        self.calls.append((action, args, kwargs))
        value = self.responses.get(action)
        if isinstance(value, BaseException):
            raise value
        return value

    async def create_async(self, *args, **kwargs):
        return self._invoke("create", args, kwargs)

    async def retrieve_async(self, *args, **kwargs):
        return self._invoke("retrieve", args, kwargs)

    async def cancel_async(self, *args, **kwargs):
        return self._invoke("cancel", args, kwargs)


class StubStripeClient:
    def __init__(self) -> None:
        self.customers = StubResource()
        self.subscriptions = StubResource()
        self.charges = StubResource()
        self.invoices = StubResource()
        self.products = StubResource()
        self.prices = StubResource()


class StubConstructEvent:
    """Stands in for `stripe.Webhook.construct_event`."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, str, str, int]] = []
        self.result: Any = None
        self.error: BaseException | None = None

    def __call__(self, payload: bytes, signature: str, secret: str, tolerance: int) -> Any:
        self.calls.append((payload, signature, secret, tolerance))
        if self.error is not None:
            raise self.error
        return self.result


def _make_settings(**overrides: Any) -> GatewaySettings:
    values: dict[str, Any] = {
        "stripe_secret_key": "sk_test_mock",
        "stripe_webhook_secret": "whsec_test_mock",
        "stripe_api_version": None,
        "otel_exporter_otlp_endpoint": None,
    }
    values.update(overrides)
    return GatewaySettings(_env_file=None, **values)


@pytest.fixture
def stripe_client() -> StubStripeClient:
    return StubStripeClient()


@pytest.fixture
def construct_event() -> StubConstructEvent:
    return StubConstructEvent()


@pytest.fixture
def settings_factory():
    return _make_settings


@pytest.fixture
def gateway_settings() -> GatewaySettings:
    return _make_settings()


@pytest.fixture
def capabilities(gateway_settings, stripe_client) -> Capabilities:
    return Capabilities(gateway_settings, client_factory=lambda api_key, api_version: stripe_client)


@pytest.fixture
def client(gateway_settings, capabilities, construct_event) -> TestClient:
    app = create_app(gateway_settings, capabilities, WebhookVerifier(construct_event=construct_event))
    return TestClient(app)
