"""Publishing and subscribing to game messages over AMQP."""

from __future__ import annotations

import json
import struct
from enum import Enum, IntEnum
from typing import Any, Callable

import pika

DEAD_LETTER_EXCHANGE = "peril_dlx"
PREFETCH_COUNT = 10


class SimpleQueueType(str, Enum):
    TRANSIENT = "transient"
    DURABLE = "durable"


class AckType(IntEnum):
    ACK = 0
    NACK_REQUEUE = 1
    NACK_DISCARD = 2


def _to_payload(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value


# Compact tagged binary encoding for None, bools, ints, floats, strings,
# bytes, lists and string-keyed dicts.
_INT, _FLOAT, _LEN = struct.Struct(">q"), struct.Struct(">d"), struct.Struct(">I")


def _encode_binary(value: Any) -> bytes:
    if value is None:
        return b"N"
    if isinstance(value, bool):
        return b"T" if value else b"F"
    if isinstance(value, int):
        try:
            return b"i" + _INT.pack(value)
        except struct.error as exc:
            raise ValueError(f"integer out of range: {value}") from exc
    if isinstance(value, float):
        return b"f" + _FLOAT.pack(value)
    if isinstance(value, str):
        data = value.encode("utf-8")
        return b"s" + _LEN.pack(len(data)) + data
    if isinstance(value, (bytes, bytearray)):
        return b"b" + _LEN.pack(len(value)) + bytes(value)
    if isinstance(value, (list, tuple)):
        return b"l" + _LEN.pack(len(value)) + b"".join(map(_encode_binary, value))
    if isinstance(value, dict):
        parts = [b"d" + _LEN.pack(len(value))]
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"dictionary keys must be strings, not {type(key).__name__}")
            parts += [_encode_binary(key), _encode_binary(item)]
        return b"".join(parts)
    raise TypeError(f"cannot encode value of type {type(value).__name__}")


def _decode_binary(data: bytes) -> Any:
    data = bytes(data)
    pos = 0

    def take(count: int) -> bytes:
        nonlocal pos
        if pos + count > len(data):
            raise ValueError("truncated data")
        pos += count
        return data[pos - count:pos]

    def read() -> Any:
        tag = take(1)
        if tag in (b"N", b"T", b"F"):
            return {b"N": None, b"T": True, b"F": False}[tag]
        if tag == b"i":
            return _INT.unpack(take(_INT.size))[0]
        if tag == b"f":
            return _FLOAT.unpack(take(_FLOAT.size))[0]
        if tag not in (b"s", b"b", b"l", b"d"):
            raise ValueError(f"unknown tag {tag!r}")
        length = _LEN.unpack(take(_LEN.size))[0]
        if tag == b"s":
            return take(length).decode("utf-8")
        if tag == b"b":
            return take(length)
        if tag == b"l":
            return [read() for _ in range(length)]
        result = {}
        for _ in range(length):
            key = read()
            if not isinstance(key, str):
                raise ValueError("dictionary key is not a string")
            result[key] = read()
        return result

    value = read()
    if pos != len(data):
        raise ValueError("trailing data")
    return value


def _publish(channel: Any, exchange: str, key: str, body: bytes, content_type: str) -> None:
    channel.basic_publish(
        exchange=exchange,
        routing_key=key,
        body=body,
        properties=pika.BasicProperties(content_type=content_type),
    )


def publish_json(channel: Any, exchange: str, key: str, value: Any) -> None:
    """Publish ``value`` as JSON to ``exchange`` under routing ``key``."""
    body = json.dumps(_to_payload(value)).encode("utf-8")
    _publish(channel, exchange, key, body, "application/json")


def publish_gob(channel: Any, exchange: str, key: str, value: Any) -> None:
    """Publish ``value`` in the compact binary encoding."""
    _publish(channel, exchange, key, _encode_binary(_to_payload(value)), "application/gob")


def declare_and_bind(
    connection: Any, exchange: str, queue_name: str, key: str, queue_type: SimpleQueueType
) -> tuple[Any, str]:
    """Open a channel, declare a queue and bind it; return the channel and queue name."""
    durable = SimpleQueueType(queue_type) is SimpleQueueType.DURABLE
    channel = connection.channel()
    result = channel.queue_declare(
        queue=queue_name,
        durable=durable,
        auto_delete=not durable,
        exclusive=not durable,
        arguments={"x-dead-letter-exchange": DEAD_LETTER_EXCHANGE},
    )
    channel.queue_bind(queue=queue_name, exchange=exchange, routing_key=key)
    return channel, result.method.queue


def _subscribe(
    connection: Any,
    exchange: str,
    queue_name: str,
    key: str,
    queue_type: SimpleQueueType,
    handler: Callable[[Any], AckType],
    decode: Callable[[Any], Any] | None,
    unmarshal: Callable[[bytes], Any],
    prefetch: int | None,
) -> Any:
    channel, queue = declare_and_bind(connection, exchange, queue_name, key, queue_type)
    if prefetch is not None:
        channel.basic_qos(prefetch_count=prefetch)

    def on_message(ch: Any, method: Any, properties: Any, body: bytes) -> None:
        try:
            payload = unmarshal(body)
            message = decode(payload) if decode is not None else payload
        except (ValueError, KeyError, TypeError, UnicodeDecodeError):
            return
        outcome = handler(message)
        tag = method.delivery_tag
        if outcome == AckType.ACK:
            ch.basic_ack(delivery_tag=tag)
        elif outcome in (AckType.NACK_REQUEUE, AckType.NACK_DISCARD):
            ch.basic_nack(delivery_tag=tag, requeue=outcome == AckType.NACK_REQUEUE)

    channel.basic_consume(queue=queue, on_message_callback=on_message, auto_ack=False)
    return channel


def subscribe_json(
    connection: Any,
    exchange: str,
    queue_name: str,
    key: str,
    queue_type: SimpleQueueType,
    handler: Callable[[Any], AckType],
    decode: Callable[[Any], Any] | None = None,
) -> Any:
    """Consume JSON messages from a bound queue; return the consuming channel.

    ``decode`` turns the parsed JSON into the handler's message type.
    Messages that cannot be decoded are left unacknowledged.
    """
    return _subscribe(
        connection, exchange, queue_name, key, queue_type, handler, decode, json.loads, None
    )


def subscribe_gob(
    connection: Any,
    exchange: str,
    queue_name: str,
    key: str,
    queue_type: SimpleQueueType,
    handler: Callable[[Any], AckType],
    decode: Callable[[Any], Any] | None = None,
) -> Any:
    """Consume binary-encoded messages with a limited prefetch; return the channel."""
    return _subscribe(
        connection, exchange, queue_name, key, queue_type, handler, decode,
        _decode_binary, PREFETCH_COUNT,
    )