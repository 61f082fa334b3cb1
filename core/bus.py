# core/bus.py
import json
from typing import Any
from pydantic import ValidationError as PydanticValidationError
from model.bus import BusEnvelope, BusNotification
from util.enums import BusMessageType
from util.errors import MalformedEnvelope, UnsupportedMessageType


def classify(message_type: str | None) -> BusMessageType:
    try:
        return BusMessageType(message_type)
    except ValueError:
        raise UnsupportedMessageType(message_type) from None


def _loads_object(raw: Any) -> dict:
    """json.loads that only accepts a top-level JSON object."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    obj = json.loads(raw)
    if not isinstance(obj, dict):
        raise ValueError("expected a JSON object")
    return obj


def decode_envelope(body: bytes) -> BusEnvelope:
    """
    The bus posts JSON with a text/plain content type, so the raw body is
    decoded here instead of relying on request.json().
    """
    if not body or not body.strip():
        raise MalformedEnvelope()
    try:
        return BusEnvelope.model_validate(_loads_object(body))
    except (ValueError, UnicodeDecodeError, PydanticValidationError):
        raise MalformedEnvelope() from None


def decode_notification(envelope: BusEnvelope) -> BusNotification:
    # Message is itself a JSON document serialized into a string field.
    if not envelope.Message:
        raise MalformedEnvelope("SNS notification carries no Message.")
    try:
        payload = _loads_object(envelope.Message)
    except ValueError:
        raise MalformedEnvelope("Could not decode SNS notification Message.") from None
    return BusNotification(
        payload=payload,
        unsubscribeUrl=envelope.UnsubscribeURL,
        messageId=envelope.MessageId,
    )


def subscribe_url(envelope: BusEnvelope) -> str:
    if not envelope.SubscribeURL:
        raise MalformedEnvelope("SNS subscription confirmation carries no SubscribeURL.")
    return envelope.SubscribeURL
