"""Request body schemas for REST resources.

Models accept unknown keys so the provider receives every parameter the client
sent; they only pin down the fields the gateway documents.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PassThrough(BaseModel):
    model_config = ConfigDict(extra="allow")


class CustomerCreate(PassThrough):
    """Payload accepted by `POST /customers`."""

    email: str | None = None
    name: str | None = None
    metadata: dict[str, Any] | None = None


class SubscriptionItem(PassThrough):
    price: str | None = None


class SubscriptionCreate(PassThrough):
    """Payload accepted by `POST /subscriptions`."""

    customer: str = Field(min_length=1)
    items: list[SubscriptionItem] = Field(min_length=1)
    metadata: dict[str, Any] | None = None


class ChargeCreate(PassThrough):
    """Payload accepted by `POST /charges`."""

    amount: int = Field(gt=0)
    currency: str = Field(min_length=3, max_length=3)
    customer: str | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
