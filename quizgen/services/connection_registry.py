"""
Live subscriber connections, grouped per lecture.

A connection only needs a ``send(payload)`` that raises when the subscriber is
gone. Dead connections are pruned lazily: whichever broadcast or heartbeat
first fails to reach one removes it.

The registry lives in process memory, so a broadcast only reaches subscribers
connected to this server process. It is stored on the Flask app
(``app.extensions["quizgen.registry"]``) so a message-bus backed registry with
the same methods can be swapped in for multi-instance deployments.
"""
import logging
import queue
import threading
from dataclasses import dataclass, field
from uuid import uuid4

from flask import current_app

logger = logging.getLogger(__name__)

HEARTBEAT_MESSAGE = {"type": "heartbeat"}
CONNECTED_MESSAGE = {"type": "connected"}


class ConnectionClosed(Exception):
    """Raised by ``Connection.send`` when the subscriber can no longer be reached."""


class Connection:
    def send(self, payload):
        raise NotImplementedError

    def close(self):
        pass


class QueueConnection(Connection):
    """Bounded in-process mailbox drained by a streaming response.

    A full mailbox means the consumer stopped reading; it is treated as dead
    rather than letting it hold up delivery to everyone else.
    """

    def __init__(self, maxsize=100):
        self._queue = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self):
        return self._closed.is_set()

    def send(self, payload):
        if self.closed:
            raise ConnectionClosed("connection closed")
        try:
            self._queue.put_nowait(payload)
        except queue.Full:
            raise ConnectionClosed("subscriber is not draining its queue")

    def receive(self, timeout=None):
        """Next payload, or None if nothing arrived within ``timeout`` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self):
        self._closed.set()


class SocketIOConnection(Connection):
    EVENT = "quiz_event"

    def __init__(self, socketio, sid, namespace="/"):
        self.socketio = socketio
        self.sid = sid
        self.namespace = namespace

    def send(self, payload):
        if not self.socketio.server.manager.is_connected(self.sid, self.namespace):
            raise ConnectionClosed(f"socket {self.sid} is disconnected")
        self.socketio.emit(self.EVENT, payload, to=self.sid, namespace=self.namespace)


@dataclass(frozen=True)
class ConnectionHandle:
    lecture_id: int
    participant: str
    id: str = field(default_factory=lambda: uuid4().hex)


class ConnectionRegistry:

    def __init__(self):
        self._lock = threading.Lock()
        self._lectures = {}  # lecture_id -> {handle.id: (handle, connection)}

    def subscribe(self, lecture_id, participant, connection):
        handle = ConnectionHandle(lecture_id=lecture_id, participant=participant)
        with self._lock:
            self._lectures.setdefault(lecture_id, {})[handle.id] = (handle, connection)
        logger.debug("Subscribed %s to lecture %s (%s)", participant, lecture_id, handle.id)
        return handle

    def unsubscribe(self, handle):
        """Remove and close the connection. Returns False if it was already gone."""
        with self._lock:
            entries = self._lectures.get(handle.lecture_id)
            entry = entries.pop(handle.id, None) if entries is not None else None
            if entries is not None and not entries:
                del self._lectures[handle.lecture_id]
        if entry is None:
            return False
        entry[1].close()
        logger.debug("Unsubscribed %s from lecture %s", handle.participant, handle.lecture_id)
        return True

    def broadcast(self, lecture_id, payload):
        with self._lock:
            entries = list(self._lectures.get(lecture_id, {}).values())
        return self._deliver(entries, payload)

    def heartbeat(self):
        with self._lock:
            entries = [entry for lecture in self._lectures.values() for entry in lecture.values()]
        return self._deliver(entries, HEARTBEAT_MESSAGE)

    def connection_count(self, lecture_id=None):
        with self._lock:
            if lecture_id is not None:
                return len(self._lectures.get(lecture_id, {}))
            return sum(len(lecture) for lecture in self._lectures.values())

    def _deliver(self, entries, payload):
        delivered = 0
        dead = []
        for handle, connection in entries:
            try:
                connection.send(payload)
                delivered += 1
            except Exception as exc:
                logger.debug("Dropping connection %s of lecture %s: %s", handle.id, handle.lecture_id, exc)
                dead.append(handle)
        for handle in dead:
            self.unsubscribe(handle)
        return delivered


def get_registry():
    return current_app.extensions["quizgen.registry"]
