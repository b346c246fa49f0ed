import pytest
from pydantic import ValidationError

from app.models.schemas import Message
from app.utils.channel import ChannelConsumer, MessageChannel
from app.utils.errors import ChannelFullError, ConnectorError


def test_send_and_receive_in_order():
    channel = MessageChannel(capacity=5)
    channel.send(Message.build("a"))
    channel.send(Message.build("b"))

    assert len(channel) == 2
    assert channel.receive(timeout=1).payload == "a"
    assert channel.receive(timeout=1).payload == "b"


def test_receive_times_out():
    assert MessageChannel().receive(timeout=0.05) is None


def test_full_channel_raises():
    channel = MessageChannel(capacity=1)
    channel.send(Message.build("a"))

    with pytest.raises(ChannelFullError):
        channel.send(Message.build("b"), timeout=0.05)


def test_consumer_contains_connector_errors():
    seen = []

    def handler(message):
        if message.payload == "bad":
            raise ConnectorError("boom")
        seen.append(message.payload)

    consumer = ChannelConsumer(MessageChannel(), handler)
    for payload in ("ok", "bad", "ok2"):
        consumer.dispatch(Message.build(payload))

    assert seen == ["ok", "ok2"]
    assert consumer.handled == 2
    assert consumer.failed == 1


def test_message_is_immutable():
    message = Message.build("x", {"k": "v"})
    copy = message.with_payload("y", extra=1)

    assert message.payload == "x"
    assert "extra" not in message.headers
    assert copy.headers["k"] == "v"
    assert copy.headers["id"] == message.headers["id"]
    with pytest.raises(ValidationError):
        message.payload = "z"


def test_consumer_contains_unexpected_errors():
    seen = []

    def handler(message):
        if message.payload == "bad":
            raise ValueError("embedded null byte")
        seen.append(message.payload)

    consumer = ChannelConsumer(MessageChannel(), handler)
    for payload in ("bad", "ok"):
        consumer.dispatch(Message.build(payload))

    assert seen == ["ok"]
    assert consumer.handled == 1
    assert consumer.failed == 1
