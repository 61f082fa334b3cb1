# service/subscription_service.py
import httpx
from fastapi import status
from util.errors import HandshakeConfirmationFailed
import logging

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Confirms a bus subscription by visiting the one-time SubscribeURL.

    A single GET, no retry: if confirmation is not observed the bus
    redelivers the handshake on its own schedule.
    """

    def __init__(
        self,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds))
        self._transport = transport

    async def confirm(self, subscribe_url: str) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                res = await client.get(subscribe_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(
                "bus.handshake.request_error url=%s err=%s", subscribe_url, type(e).__name__
            )
            raise HandshakeConfirmationFailed(
                f"Failed to confirm SNS subscription. Request to {subscribe_url} failed."
            ) from e

        if res.status_code == status.HTTP_200_OK:
            logger.debug("bus.handshake.ok url=%s", subscribe_url)
            return

        logger.error("bus.handshake.bad_status status=%d url=%s", res.status_code, subscribe_url)
        raise HandshakeConfirmationFailed(
            "Failed to confirm SNS subscription. "
            f"Received response {res.status_code} from: {subscribe_url}"
        )
