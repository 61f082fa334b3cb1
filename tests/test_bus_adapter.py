import asyncio
import json

import httpx
import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from conftest import TRUSTED_TOPIC
from controller import controller_dependencies as deps
from core.origin import OriginVerifier, TrustedTopicVerifier
from model.api import SuccessResponse
from model.bus import BusNotification
from service.bus_service import BusMessageAdapter
from service.subscription_service import SubscriptionService
from util.constants import InternalURIs
from util.errors import (
    HandshakeConfirmationFailed,
    MalformedEnvelope,
    UnsupportedMessageType,
    UntrustedTopic,
)

SUBSCRIBE_URL = "https://sns.us-east-1.amazonaws.com/?Action=ConfirmSubscription&Token=abc"


def _headers(message_type="Notification", topic=TRUSTED_TOPIC):
    headers = {}
    if message_type is not None:
        headers["x-amz-sns-message-type"] = message_type
    if topic is not None:
        headers["x-amz-sns-topic-arn"] = topic
    return headers


def _handshake_body() -> bytes:
    return json.dumps(
        {"Type": "SubscriptionConfirmation", "SubscribeURL": SUBSCRIBE_URL, "Token": "abc"}
    ).encode()


def _notification_body(message='{"tenant":"t1"}') -> bytes:
    return json.dumps(
        {
            "Type": "Notification",
            "MessageId": "m-1",
            "Message": message,
            "UnsubscribeURL": "https://x",
        }
    ).encode()


class _Recorder:
    def __init__(self, status_code=200, exc=None):
        self.calls = []
        self._status = status_code
        self._exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(str(request.url))
        if self._exc is not None:
            raise self._exc
        return httpx.Response(self._status)


def _adapter(recorder: _Recorder) -> BusMessageAdapter:
    return BusMessageAdapter(
        TrustedTopicVerifier(TRUSTED_TOPIC),
        SubscriptionService(timeout_seconds=2.0, transport=httpx.MockTransport(recorder)),
    )


@pytest.mark.parametrize("message_type", ["Notification", "SubscriptionConfirmation", "Bogus"])
@pytest.mark.parametrize("topic", [None, "", "arn:aws:sns:us-east-1:000000000000:other"])
@pytest.mark.parametrize("body", [b"", b"not json", _notification_body(), _handshake_body()])
def test_untrusted_topic_is_rejected_whatever_the_rest(message_type, topic, body):
    recorder = _Recorder()
    with pytest.raises((UntrustedTopic, UnsupportedMessageType)) as info:
        asyncio.run(_adapter(recorder).handle(_headers(message_type, topic), body))
    if message_type != "Bogus":
        assert isinstance(info.value, UntrustedTopic)
    assert info.value.status_code == 400
    assert recorder.calls == []


@pytest.mark.parametrize("message_type", [None, "UnsubscribeConfirmation", "notification"])
def test_unsupported_message_type(message_type):
    with pytest.raises(UnsupportedMessageType):
        asyncio.run(_adapter(_Recorder()).handle(_headers(message_type), _notification_body()))


@pytest.mark.parametrize("body", [b"", b"   ", b"{not json", b"[1, 2]", b'{"Message": "x"}'])
def test_malformed_body(body):
    with pytest.raises(MalformedEnvelope):
        asyncio.run(_adapter(_Recorder()).handle(_headers(), body))


def test_origin_verifier_is_pluggable():
    class AllowAll:
        def verify(self, topic):
            return None

    assert isinstance(AllowAll(), OriginVerifier)
    adapter = BusMessageAdapter(AllowAll(), SubscriptionService(timeout_seconds=1.0))
    result = asyncio.run(adapter.handle(_headers(topic="anything"), _notification_body()))
    assert result.payload == {"tenant": "t1"}


def test_handshake_confirms_once_and_acknowledges():
    recorder = _Recorder(200)
    result = asyncio.run(
        _adapter(recorder).handle(_headers("SubscriptionConfirmation"), _handshake_body())
    )
    assert isinstance(result, SuccessResponse)
    assert result.model_dump() == {"code": 200, "data": {"success": True}}
    assert recorder.calls == [SUBSCRIBE_URL]


@pytest.mark.parametrize("status_code", [201, 302, 403, 500])
def test_handshake_non_200_fails_without_retry(status_code):
    recorder = _Recorder(status_code)
    with pytest.raises(HandshakeConfirmationFailed) as info:
        asyncio.run(
            _adapter(recorder).handle(_headers("SubscriptionConfirmation"), _handshake_body())
        )
    assert info.value.status_code == 500
    assert str(status_code) in info.value.message
    assert len(recorder.calls) == 1


def test_handshake_network_error_fails():
    recorder = _Recorder(exc=httpx.ConnectError("refused"))
    with pytest.raises(HandshakeConfirmationFailed):
        asyncio.run(
            _adapter(recorder).handle(_headers("SubscriptionConfirmation"), _handshake_body())
        )


def test_handshake_without_subscribe_url_is_malformed():
    body = json.dumps({"Type": "SubscriptionConfirmation"}).encode()
    with pytest.raises(MalformedEnvelope):
        asyncio.run(_adapter(_Recorder()).handle(_headers("SubscriptionConfirmation"), body))


def test_notification_is_decoded_not_answered():
    result = asyncio.run(_adapter(_Recorder()).handle(_headers(), _notification_body()))
    assert isinstance(result, BusNotification)
    assert result.payload == {"tenant": "t1"}
    assert result.unsubscribeUrl == "https://x"
    assert result.messageId == "m-1"


@pytest.mark.parametrize("message", ["not json", "[1]", ""])
def test_notification_with_undecodable_message(message):
    with pytest.raises(MalformedEnvelope):
        asyncio.run(_adapter(_Recorder()).handle(_headers(), _notification_body(message)))


# ---------------- HTTP surface ----------------


class _StubOrchestrator:
    def __init__(self):
        self.payloads = []

    async def run(self, payload):
        self.payloads.append(payload)


@pytest.fixture
def bus_client(app, client):
    recorder = _Recorder(200)
    orchestrator = _StubOrchestrator()
    app.dependency_overrides[deps.get_bus_adapter] = lambda: _adapter(recorder)
    app.dependency_overrides[deps.get_wipe_orchestrator] = lambda: orchestrator
    return client, recorder, orchestrator


def test_http_handshake(bus_client):
    client, recorder, orchestrator = bus_client
    res = client.post(
        InternalURIs.SUBSCRIBE,
        content=_handshake_body(),
        headers={**_headers("SubscriptionConfirmation"), "content-type": "text/plain"},
    )
    assert res.status_code == 200
    assert res.json() == {"code": 200, "data": {"success": True}}
    assert recorder.calls == [SUBSCRIBE_URL]
    assert orchestrator.payloads == []


def test_http_failed_handshake_is_500_and_not_forwarded(app, bus_client):
    client, _, orchestrator = bus_client
    failing = _Recorder(404)
    app.dependency_overrides[deps.get_bus_adapter] = lambda: _adapter(failing)
    res = client.post(
        InternalURIs.SUBSCRIBE,
        content=_handshake_body(),
        headers=_headers("SubscriptionConfirmation"),
    )
    assert res.status_code == 500
    assert res.json()["error"] == "handshake_failed"
    assert orchestrator.payloads == []


def test_http_untrusted_topic_is_400(bus_client):
    client, _, orchestrator = bus_client
    res = client.post(
        InternalURIs.SUBSCRIBE,
        content=_notification_body(),
        headers=_headers(topic="arn:aws:sns:us-east-1:1:evil"),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "untrusted_topic"
    assert orchestrator.payloads == []


def test_http_notification_dispatches_payload(bus_client):
    client, recorder, orchestrator = bus_client
    res = client.post(
        InternalURIs.SUBSCRIBE,
        content=_notification_body(),
        headers={**_headers(), "content-type": "text/plain; charset=UTF-8"},
    )
    assert res.status_code == 200
    assert orchestrator.payloads == [{"tenant": "t1"}]
    assert recorder.calls == []


def test_notification_is_left_on_request_state_for_next_handler():
    app = FastAPI()
    adapter = _adapter(_Recorder())
    app.dependency_overrides[deps.get_bus_adapter] = lambda: adapter

    @app.post("/next")
    async def next_handler(request: Request, ack=Depends(deps.handle_bus_message)):
        assert ack is None
        message = request.state.bus_message
        return {"handledBy": "next", "payload": message.payload, "unsub": message.unsubscribeUrl}

    res = TestClient(app).post("/next", content=_notification_body(), headers=_headers())
    assert res.status_code == 200
    assert res.json() == {"handledBy": "next", "payload": {"tenant": "t1"}, "unsub": "https://x"}
