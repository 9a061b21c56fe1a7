import threading

import pytest

from quizgen.services.connection_registry import (
    Connection,
    ConnectionClosed,
    ConnectionRegistry,
    QueueConnection,
)
from quizgen.services.heartbeat import HeartbeatService


class ExplodingConnection(Connection):
    def send(self, payload):
        raise BrokenPipeError("peer went away")


@pytest.fixture
def reg():
    return ConnectionRegistry()


def test_broadcast_reaches_every_subscriber_of_the_lecture(reg):
    first, second, other = QueueConnection(), QueueConnection(), QueueConnection()
    reg.subscribe(1, "alice", first)
    reg.subscribe(1, "bob", second)
    reg.subscribe(2, "carol", other)

    delivered = reg.broadcast(1, {"type": "new_quiz", "quiz": {"id": 7}})

    assert delivered == 2
    assert first.receive(timeout=0) == {"type": "new_quiz", "quiz": {"id": 7}}
    assert second.receive(timeout=0) == {"type": "new_quiz", "quiz": {"id": 7}}
    assert other.receive(timeout=0) is None


def test_closed_connection_is_pruned_by_the_next_broadcast(reg):
    alive, closing = QueueConnection(), QueueConnection()
    reg.subscribe(1, "alice", alive)
    reg.subscribe(1, "bob", closing)
    assert reg.broadcast(1, {"type": "new_quiz"}) == 2

    closing.close()

    assert reg.broadcast(1, {"type": "new_quiz"}) == 1
    assert reg.connection_count(1) == 1


def test_failing_send_does_not_stop_delivery_to_others(reg):
    reg.subscribe(1, "mallory", ExplodingConnection())
    healthy = QueueConnection()
    reg.subscribe(1, "alice", healthy)

    assert reg.broadcast(1, {"type": "new_quiz"}) == 1
    assert healthy.receive(timeout=0) == {"type": "new_quiz"}
    assert reg.connection_count(1) == 1


def test_full_queue_counts_as_dead_consumer(reg):
    slow = QueueConnection(maxsize=1)
    reg.subscribe(1, "slowpoke", slow)

    assert reg.broadcast(1, {"n": 1}) == 1
    assert reg.broadcast(1, {"n": 2}) == 0
    assert reg.connection_count(1) == 0
    assert slow.closed


def test_unsubscribe_is_idempotent(reg):
    connection = QueueConnection()
    handle = reg.subscribe(3, "alice", connection)

    assert reg.unsubscribe(handle) is True
    assert reg.unsubscribe(handle) is False
    assert reg.connection_count(3) == 0
    assert connection.closed
    with pytest.raises(ConnectionClosed):
        connection.send({"type": "heartbeat"})


def test_broadcast_to_lecture_without_subscribers(reg):
    assert reg.broadcast(42, {"type": "new_quiz"}) == 0


def test_heartbeat_goes_to_all_lectures(reg):
    a, b = QueueConnection(), QueueConnection()
    reg.subscribe(1, "alice", a)
    reg.subscribe(2, "bob", b)
    reg.subscribe(2, "mallory", ExplodingConnection())

    assert reg.heartbeat() == 2
    assert a.receive(timeout=0) == {"type": "heartbeat"}
    assert b.receive(timeout=0) == {"type": "heartbeat"}
    assert reg.connection_count() == 2


def test_heartbeat_service_beat_uses_registry(reg):
    reg.subscribe(1, "alice", QueueConnection())
    service = HeartbeatService(reg, socketio=None, interval=30)

    assert service.beat() == 1
    assert not service.running


def test_concurrent_subscribe_and_broadcast_keep_counts_consistent(reg):
    handles = []
    lock = threading.Lock()

    def subscriber(i):
        handle = reg.subscribe(9, f"user-{i}", QueueConnection(maxsize=1000))
        with lock:
            handles.append(handle)

    def broadcaster():
        for _ in range(50):
            reg.broadcast(9, {"type": "heartbeat"})

    threads = [threading.Thread(target=subscriber, args=(i,)) for i in range(20)]
    threads.append(threading.Thread(target=broadcaster))
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert reg.connection_count(9) == 20
    for handle in handles:
        reg.unsubscribe(handle)
    assert reg.connection_count(9) == 0
