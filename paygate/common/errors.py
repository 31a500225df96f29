"""Failure taxonomy, redaction and HTTP status classification.

Provider calls never raise across the gateway boundary; they return `Ok` or
`Failure`. Anything that still escapes a handler as an exception is mapped onto
the same closed set of failure kinds by `classify`, so every error body the
gateway emits goes through one redaction path.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import stripe


REDACTED = "[REDACTED]"
MAX_MESSAGE_LENGTH = 200
INVALID_BODY_MESSAGE = "Invalid JSON in request body"

# Stripe secret keys, restricted keys and webhook signing secrets, matched
# anywhere in the text (also inside URL-encoded or concatenated values).
_SECRET_PATTERN = re.compile(r"(?:sk|rk|whsec)_\S+", re.IGNORECASE)

T = TypeVar("T")


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    UNKNOWN = "unknown"


STATUS_BY_KIND: dict[FailureKind, int] = {
    FailureKind.VALIDATION: 400,
    FailureKind.AUTHENTICATION: 401,
    FailureKind.RATE_LIMIT: 429,
    FailureKind.CONFIGURATION: 503,
    FailureKind.UNKNOWN: 500,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    """Typed provider failure carried as a value instead of an exception."""

    kind: FailureKind
    message: str


Result = Ok[Any] | Failure


@dataclass(frozen=True)
class ClassifiedError:
    """Client-safe message plus the HTTP status it should be returned with."""

    message: str
    status: int


class GatewayError(Exception):
    """Base class for failures raised inside the gateway itself."""


class NotConfiguredError(GatewayError):
    """A required secret is missing from the environment."""

    def __init__(self, setting: str, hint: str) -> None:
        self.setting = setting
        self.hint = hint
        super().__init__(f"{setting} is not configured. {hint}")


class InvalidBodyError(GatewayError, ValueError):
    """The request body could not be parsed as a JSON object."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(INVALID_BODY_MESSAGE)


class RejectedRequestError(GatewayError):
    """The gateway refused the request before it reached the provider."""


class SchemaError(RejectedRequestError):
    """A parsed body does not have the shape an operation expects."""


class ProviderFailure(GatewayError):
    """Carries a provider `Failure` value up to the dispatcher boundary."""

    def __init__(self, failure: Failure) -> None:
        self.failure = failure
        super().__init__(failure.message)


def scrub(message: str) -> str:
    return _SECRET_PATTERN.sub(REDACTED, message)


def redact(message: str) -> str:
    """Replace secret-shaped tokens and cap the message length."""

    return scrub(message)[:MAX_MESSAGE_LENGTH]


def failure_kind_for(exc: BaseException) -> FailureKind:
    """Map a Stripe SDK exception (or anything else) to a failure kind."""

    if isinstance(exc, (stripe.CardError, stripe.InvalidRequestError)):
        return FailureKind.VALIDATION
    if isinstance(exc, stripe.AuthenticationError):
        return FailureKind.AUTHENTICATION
    if isinstance(exc, stripe.RateLimitError):
        return FailureKind.RATE_LIMIT
    if isinstance(exc, ProviderFailure):
        return exc.failure.kind
    if isinstance(exc, RejectedRequestError):
        return FailureKind.VALIDATION
    if isinstance(exc, NotConfiguredError):
        return FailureKind.CONFIGURATION
    return FailureKind.UNKNOWN


def failure_from_exception(exc: BaseException) -> Failure:
    return Failure(kind=failure_kind_for(exc), message=_message_of(exc))


def _message_of(error: Any) -> str:
    try:
        if isinstance(error, stripe.StripeError):
            # str() on SDK errors prefixes the request id.
            return error.user_message or str(error)
        if isinstance(error, BaseException):
            return str(error) or type(error).__name__
        return str(error)
    except Exception:
        return "Unknown error"


def classify(error: Any) -> ClassifiedError:
    """Turn any failure into a redacted message and HTTP status.

    Accepts `Failure` values, arbitrary exceptions and unstructured objects.
    Never raises.
    """

    try:
        if isinstance(error, Failure):
            return ClassifiedError(redact(error.message), STATUS_BY_KIND[error.kind])
        if isinstance(error, BaseException):
            return ClassifiedError(redact(_message_of(error)), STATUS_BY_KIND[failure_kind_for(error)])
        return ClassifiedError(redact(_message_of(error)), 500)
    except Exception:
        return ClassifiedError("Internal error", 500)


def find_in_chain(exc: BaseException, exc_type: type[BaseException]) -> BaseException | None:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, exc_type):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None
