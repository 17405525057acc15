"""
Pydantic models for request/response validation.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional

from domain.enums import OrderStatus, WebhookEventType


# ── Webhook Event ───────────────────────────────────────────────────

class EventData(BaseModel):
    """The provider object an event refers to (payment, source, checkout session)."""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class WebhookEvent(BaseModel):
    """
    A verified PayMongo event in flat form: {type, data}.

    `id` and `created_at` are only present when the provider's nested
    envelope was unwrapped.
    """
    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., min_length=1)
    data: EventData = Field(default_factory=EventData)
    id: Optional[str] = None
    created_at: Optional[int] = None

    @property
    def kind(self) -> WebhookEventType:
        return WebhookEventType.parse(self.type)


# ── Order Models ────────────────────────────────────────────────────

class OrderStatusUpdateRequest(BaseModel):
    """Admin fulfilment update."""
    status: OrderStatus = Field(..., description="Target order status")
