import logging

logger = logging.getLogger(__name__)


class HeartbeatService:
    """Keeps idle live connections open across proxies that time out quiet streams."""

    def __init__(self, registry, socketio, interval=30.0):
        self.registry = registry
        self.socketio = socketio
        self.interval = interval
        self._running = False
        self._task = None

    @property
    def running(self):
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self._task = self.socketio.start_background_task(self._run)
        logger.info("Heartbeat started (every %ss)", self.interval)

    def stop(self):
        self._running = False

    def beat(self):
        delivered = self.registry.heartbeat()
        logger.debug("Heartbeat delivered to %s connections", delivered)
        return delivered

    def _run(self):
        while self._running:
            self.socketio.sleep(self.interval)
            if not self._running:
                break
            self.beat()
