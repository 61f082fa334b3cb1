# core/origin.py
import hmac
from typing import Protocol, runtime_checkable
from util.errors import UntrustedTopic


@runtime_checkable
class OriginVerifier(Protocol):
    """Decides whether an inbound bus message comes from a topic we trust."""

    def verify(self, topic: str | None) -> None:
        """Return normally for a trusted origin, raise UntrustedTopic otherwise."""
        ...


class TrustedTopicVerifier:
    """
    Shared-identifier check: the topic header must equal the one configured topic.

    This is the only authentication on the bus channel, so the endpoint must
    not be reachable from outside the deployment's network.
    """

    def __init__(self, trusted_topic: str) -> None:
        if not trusted_topic:
            raise ValueError("trusted_topic must be configured")
        self._trusted = trusted_topic

    def verify(self, topic: str | None) -> None:
        if not topic or not hmac.compare_digest(
            topic.encode("utf-8"), self._trusted.encode("utf-8")
        ):
            raise UntrustedTopic(topic)
