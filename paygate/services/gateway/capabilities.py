"""Lazily constructed, process-lifetime provider client and fallback handler.

Construction happens on first use and only when the Stripe secret key is
configured. Each handle lives in a `OnceCell` whose check-and-set runs under a
lock, so concurrent first calls from worker threads build it at most once. A
failed construction leaves the cell empty and the next call checks the
configuration again.
"""

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from paygate.common.config import GatewaySettings
from paygate.common.errors import NotConfiguredError
from paygate.common.logging import logger
from paygate.services.gateway.provider import StripeProvider, build_stripe_client
from paygate.services.gateway.rpc import FallbackHandler, ProviderRpcHandler


T = TypeVar("T")

SECRET_KEY_HINT = "Set the STRIPE_SECRET_KEY environment variable (or add it to .env) and restart the service."

_UNSET: Any = object()


class OnceCell(Generic[T]):
    """Holds a value initialized at most once."""

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T = _UNSET

    @property
    def initialized(self) -> bool:
        return self._value is not _UNSET

    def get_or_init(self, factory: Callable[[], T]) -> T:
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is _UNSET:
                self._value = factory()
            return self._value


class Capabilities:
    """Facade handing out the provider client and the fallback handler."""

    def __init__(
        self,
        settings: GatewaySettings,
        client_factory: Callable[[str, str | None], Any] = build_stripe_client,
        fallback_factory: Callable[[StripeProvider], FallbackHandler] = ProviderRpcHandler,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory
        self._fallback_factory = fallback_factory
        self._provider: OnceCell[StripeProvider] = OnceCell()
        self._fallback: OnceCell[FallbackHandler] = OnceCell()

    @property
    def configured(self) -> bool:
        """Whether the provider credential is present; constructs nothing."""

        return self.settings.provider_configured

    def provider(self) -> StripeProvider:
        """Return the shared provider, building it on first use.

        Raises `NotConfiguredError` when `STRIPE_SECRET_KEY` is missing.
        """

        return self._provider.get_or_init(self._build_provider)

    def fallback(self) -> FallbackHandler:
        return self._fallback.get_or_init(lambda: self._fallback_factory(self.provider()))

    def webhook_secret(self) -> str | None:
        secret = self.settings.stripe_webhook_secret
        return secret.get_secret_value() if secret is not None else None

    def _build_provider(self) -> StripeProvider:
        if not self.configured:
            raise NotConfiguredError("STRIPE_SECRET_KEY", SECRET_KEY_HINT)
        client = self._client_factory(
            self.settings.stripe_secret_key.get_secret_value(),
            self.settings.stripe_api_version or None,
        )
        logger.info("provider_client_created api_version=%s", self.settings.stripe_api_version or "default")
        return StripeProvider(client, service_name=self.settings.service_name)
