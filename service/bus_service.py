# service/bus_service.py
import logging
from typing import Mapping, Union
from core import bus
from core.origin import OriginVerifier
from model.api import SuccessResponse
from model.bus import BusNotification
from service.subscription_service import SubscriptionService
from util.constants import BusHeaders
from util.enums import BusMessageType

logger = logging.getLogger(__name__)


class BusMessageAdapter:
    """
    Validates and classifies every inbound bus callback before business logic runs.

    Order matters: message type, then origin, then body. Each failure is final for
    the request. Handshakes are confirmed here and answered; notifications are
    decoded and handed back for the next handler, payload untouched.
    """

    def __init__(self, verifier: OriginVerifier, subscriptions: SubscriptionService) -> None:
        self._verifier = verifier
        self._subscriptions = subscriptions

    async def handle(
        self, headers: Mapping[str, str], body: bytes
    ) -> Union[SuccessResponse, BusNotification]:
        header_type = headers.get(BusHeaders.MESSAGE_TYPE)
        bus.classify(header_type)

        topic = headers.get(BusHeaders.TOPIC_ARN)
        self._verifier.verify(topic)

        envelope = bus.decode_envelope(body)
        message_type = bus.classify(envelope.Type)

        if message_type is BusMessageType.HANDSHAKE:
            url = bus.subscribe_url(envelope)
            await self._subscriptions.confirm(url)
            logger.info("bus.handshake.confirmed topic=%s", topic)
            return SuccessResponse(code=200)

        notification = bus.decode_notification(envelope)
        logger.info(
            "bus.notification.accepted topic=%s message=%s",
            topic,
            notification.messageId or "-",
        )
        return notification
