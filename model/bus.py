# model/bus.py
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


class BusEnvelope(BaseModel):
    # Field names mirror the JSON the bus POSTs; unknown fields are ignored.
    model_config = ConfigDict(extra="ignore")

    Type: str
    MessageId: str | None = None
    TopicArn: str | None = None
    SubscribeURL: str | None = None
    Message: str | None = None
    UnsubscribeURL: str | None = None
    Timestamp: str | None = None


class BusNotification(BaseModel):
    payload: Dict[str, Any]
    unsubscribeUrl: str | None = None
    messageId: str | None = None
