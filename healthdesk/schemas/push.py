"""Request/response schemas for web push endpoints."""

from pydantic import BaseModel, ConfigDict


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionInfo(BaseModel):
    """Browser PushSubscription as serialized by ``subscription.toJSON()``."""

    model_config = ConfigDict(extra="allow")

    endpoint: str
    keys: PushKeys


class SubscribeRequest(BaseModel):
    subscription: PushSubscriptionInfo


class SendRemindersResponse(BaseModel):
    success: bool
    sent: int
