"""Stripe webhook signature verification.

Verification runs over the exact bytes received on the wire. Re-serializing a
parsed body changes its byte layout and breaks the HMAC, so the webhook route
reads the raw body once and never parses it before this check.
"""

import hashlib
import hmac
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import stripe

from paygate.common.errors import NotConfiguredError, RejectedRequestError, redact
from paygate.services.gateway.provider import to_plain


SIGNATURE_HEADER = "Stripe-Signature"
WEBHOOK_SECRET_HINT = "Set the STRIPE_WEBHOOK_SECRET environment variable to the endpoint's signing secret."


class MissingSignatureError(RejectedRequestError):
    def __init__(self) -> None:
        super().__init__(f"Missing {SIGNATURE_HEADER} header")


class VerificationFailedError(RejectedRequestError):
    """Signature check failed; `reason` is already redacted."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Webhook verification failed: {reason}")


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


ConstructEvent = Callable[[bytes, str, str, int], Any]


class WebhookVerifier:
    """Turns a signed payload into a `WebhookEvent` or a typed failure."""

    def __init__(self, construct_event: ConstructEvent = stripe.Webhook.construct_event, tolerance: int = 300) -> None:
        self._construct_event = construct_event
        self.tolerance = tolerance

    def verify(self, payload: bytes, signature: str | None, secret: str | None) -> WebhookEvent:
        if not signature:
            raise MissingSignatureError()
        if not secret:
            raise NotConfiguredError("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET_HINT)

        try:
            event = self._construct_event(payload, signature, secret, self.tolerance)
        except Exception as exc:
            # SignatureVerificationError for bad signatures, ValueError for bad JSON.
            raise VerificationFailedError(redact(str(exc) or type(exc).__name__)) from exc

        data = to_plain(event)
        event_id, event_type = data.get("id"), data.get("type")
        if not isinstance(event_id, str) or not isinstance(event_type, str):
            raise VerificationFailedError("event is missing id or type")
        return WebhookEvent(id=event_id, type=event_type, payload=data)


def sign_payload(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build a `Stripe-Signature` header value for `payload`.

    Uses Stripe's v1 scheme: HMAC-SHA256 over `"<timestamp>.<payload>"`.
    Meant for local testing against a running gateway.
    """

    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"
