import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from peril.gamedata import ArmyMove, Player, Unit, UnitRank
from peril.pubsub import (
    AckType,
    SimpleQueueType,
    declare_and_bind,
    publish_gob,
    publish_json,
    subscribe_gob,
    subscribe_json,
)
from peril.routing import GameLog, PlayingState


class FakeChannel:
    def __init__(self):
        self.published = []
        self.declared = []
        self.bound = []
        self.qos = []
        self.consumers = []
        self.acks = []
        self.nacks = []

    def basic_publish(self, exchange, routing_key, body, properties=None, mandatory=False):
        self.published.append((exchange, routing_key, body, properties))

    def queue_declare(self, queue, passive=False, durable=False, exclusive=False,
                      auto_delete=False, arguments=None):
        self.declared.append(dict(queue=queue, durable=durable, exclusive=exclusive,
                                  auto_delete=auto_delete, arguments=arguments))
        return SimpleNamespace(method=SimpleNamespace(queue=queue))

    def queue_bind(self, queue, exchange, routing_key=None, arguments=None):
        self.bound.append((queue, exchange, routing_key))

    def basic_qos(self, prefetch_size=0, prefetch_count=0, global_qos=False):
        self.qos.append(prefetch_count)

    def basic_consume(self, queue, on_message_callback, auto_ack=False, **kwargs):
        self.consumers.append((queue, on_message_callback, auto_ack))

    def basic_ack(self, delivery_tag=0, multiple=False):
        self.acks.append(delivery_tag)

    def basic_nack(self, delivery_tag=None, multiple=False, requeue=True):
        self.nacks.append((delivery_tag, requeue))

    def deliver(self, body, tag=1):
        _, callback, _ = self.consumers[-1]
        callback(self, SimpleNamespace(delivery_tag=tag), None, body)


class FakeConnection:
    def __init__(self):
        self.channels = []

    def channel(self):
        ch = FakeChannel()
        self.channels.append(ch)
        return ch


def test_declare_durable_queue():
    conn = FakeConnection()
    ch, queue = declare_and_bind(conn, "peril_topic", "q1", "k.*", SimpleQueueType.DURABLE)
    assert queue == "q1"
    assert ch is conn.channels[0]
    declared = ch.declared[0]
    assert declared["durable"] is True
    assert declared["auto_delete"] is False
    assert declared["exclusive"] is False
    assert declared["arguments"] == {"x-dead-letter-exchange": "peril_dlx"}
    assert ch.bound == [("q1", "peril_topic", "k.*")]


def test_declare_transient_queue():
    conn = FakeConnection()
    ch, _ = declare_and_bind(conn, "peril_direct", "q2", "pause", SimpleQueueType.TRANSIENT)
    declared = ch.declared[0]
    assert declared["durable"] is False
    assert declared["auto_delete"] is True
    assert declared["exclusive"] is True


def test_publish_json_body_and_content_type():
    ch = FakeChannel()
    publish_json(ch, "peril_direct", "pause", PlayingState(is_paused=True))
    exchange, key, body, props = ch.published[0]
    assert (exchange, key) == ("peril_direct", "pause")
    assert json.loads(body) == {"IsPaused": True}
    assert props.content_type == "application/json"


def test_subscribe_json_acks_and_decodes():
    conn = FakeConnection()
    received = []

    def handler(state):
        received.append(state)
        return AckType.ACK

    ch = subscribe_json(conn, "peril_direct", "pause.bob", "pause",
                        SimpleQueueType.TRANSIENT, handler, PlayingState.from_dict)
    assert ch.consumers[0][0] == "pause.bob"
    assert ch.consumers[0][2] is False
    assert ch.qos == []
    publisher = FakeChannel()
    publish_json(publisher, "peril_direct", "pause", PlayingState(is_paused=False))
    ch.deliver(publisher.published[0][2], tag=4)
    assert received == [PlayingState(is_paused=False)]
    assert ch.acks == [4]
    assert ch.nacks == []


@pytest.mark.parametrize(
    "outcome, requeue",
    [(AckType.NACK_REQUEUE, True), (AckType.NACK_DISCARD, False)],
)
def test_subscribe_json_nacks(outcome, requeue):
    conn = FakeConnection()
    ch = subscribe_json(conn, "x", "q", "k", SimpleQueueType.DURABLE, lambda m: outcome)
    ch.deliver(b'{"a": 1}', tag=9)
    assert ch.nacks == [(9, requeue)]
    assert ch.acks == []


def test_subscribe_json_skips_malformed():
    conn = FakeConnection()
    calls = []
    ch = subscribe_json(conn, "x", "q", "k", SimpleQueueType.DURABLE,
                        lambda m: calls.append(m) or AckType.ACK, PlayingState.from_dict)
    ch.deliver(b"not json")
    assert calls == []
    assert ch.acks == [] and ch.nacks == []


def test_army_move_json_round_trip():
    player = Player("alice", {1: Unit(1, UnitRank.CAVALRY, "asia")})
    move = ArmyMove(player=player, units=[Unit(1, UnitRank.CAVALRY, "asia")], to_location="asia")
    publisher = FakeChannel()
    publish_json(publisher, "peril_topic", "army_moves.alice", move)
    conn = FakeConnection()
    got = []
    ch = subscribe_json(conn, "peril_topic", "q", "army_moves.*", SimpleQueueType.TRANSIENT,
                        lambda m: got.append(m) or AckType.ACK, ArmyMove.from_dict)
    ch.deliver(publisher.published[0][2])
    assert got == [move]


def test_gob_round_trip_game_log():
    log = GameLog(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc), "hello", "bob")
    publisher = FakeChannel()
    publish_gob(publisher, "peril_topic", "game_logs.bob", log)
    _, key, body, props = publisher.published[0]
    assert key == "game_logs.bob"
    assert props.content_type == "application/gob"
    conn = FakeConnection()
    got = []
    ch = subscribe_gob(conn, "peril_topic", "game_logs", "game_logs.*",
                       SimpleQueueType.DURABLE, lambda m: got.append(m) or AckType.ACK,
                       GameLog.from_dict)
    assert ch.qos == [10]
    ch.deliver(body, tag=2)
    assert got == [log]
    assert ch.acks == [2]


def test_gob_round_trip_plain_values():
    value = {"a": [1, -2, 3.5, None, True, False], "b": {"c": "ünïcode"}}
    publisher = FakeChannel()
    publish_gob(publisher, "x", "k", value)
    conn = FakeConnection()
    got = []
    ch = subscribe_gob(conn, "x", "q", "k", SimpleQueueType.DURABLE,
                       lambda m: got.append(m) or AckType.ACK)
    ch.deliver(publisher.published[0][2])
    assert got == [value]


def test_gob_skips_truncated_body():
    publisher = FakeChannel()
    publish_gob(publisher, "x", "k", {"key": "value"})
    body = publisher.published[0][2]
    conn = FakeConnection()
    got = []
    ch = subscribe_gob(conn, "x", "q", "k", SimpleQueueType.DURABLE,
                       lambda m: got.append(m) or AckType.ACK)
    ch.deliver(body[:-2])
    ch.deliver(body + b"N")
    assert got == []
    assert ch.acks == []


def test_publish_gob_rejects_unencodable():
    with pytest.raises(TypeError):
        publish_gob(FakeChannel(), "x", "k", {"key": object()})
    with pytest.raises(TypeError):
        publish_gob(FakeChannel(), "x", "k", {1: "value"})


def test_publish_json_rejects_unencodable():
    ch = FakeChannel()
    with pytest.raises(TypeError):
        publish_json(ch, "x", "k", {"key": object()})
    assert ch.published == []