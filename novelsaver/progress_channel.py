"""
Duplex channel between the orchestrator and at most one observer.

Outbound: ProgressSnapshot messages. Inbound: {"action": "togglePause"} and
{"action": "stop"}. The session never depends on an observer being attached.
"""
import dataclasses
import queue
import threading

from .logging import logger
from .models import SnapshotKind

TOGGLE_PAUSE = "togglePause"
STOP = "stop"


class ProgressChannel:
    def __init__(self, session):
        self._session = session
        # Serializes publish against connect so replay is never stale or torn
        self._lock = threading.RLock()
        self._observer = None

    @property
    def connected(self):
        return self._observer is not None

    def connect(self, observer):
        """Attach observer (replacing any previous one) and replay the last snapshot."""
        with self._lock:
            if self._observer is not None and self._observer is not observer:
                logger.debug("[CHANNEL] Replacing existing observer")
            self._observer = observer
            snapshot = self._session.last_snapshot()
            logger.debug(f"[CHANNEL] Observer connected, replaying {snapshot.kind.value if snapshot else 'nothing'}")
            if snapshot is not None:
                self._deliver(snapshot)

    def disconnect(self, observer=None):
        """Detach observer (or whichever is attached). The session keeps running."""
        with self._lock:
            if observer is None or self._observer is observer:
                self._observer = None
                logger.debug("[CHANNEL] Observer disconnected")

    def publish(self, snapshot):
        """Retain snapshot as the latest and forward it to the observer."""
        with self._lock:
            self._session.set_snapshot(snapshot)
            if self._observer is not None:
                self._deliver(snapshot)

    def receive(self, message):
        """Handle a control message from the observer."""
        action = (message or {}).get("action")
        if action == TOGGLE_PAUSE:
            # Held across read and republish so a concurrent publish is never overwritten
            with self._lock:
                paused = self._session.toggle_pause()
                snapshot = self._session.last_snapshot()
                if snapshot is not None and snapshot.kind is SnapshotKind.PROGRESS and snapshot.paused != paused:
                    self.publish(dataclasses.replace(snapshot, paused=paused))
        elif action == STOP:
            self._session.request_stop()
        else:
            logger.warning(f"[CHANNEL] Unknown control message: {message!r}")

    def _deliver(self, snapshot):
        try:
            self._observer.send(snapshot.to_message())
        except Exception as e:
            # A dead observer must not take the session down with it
            logger.warning(f"[CHANNEL] Failed to send {snapshot.kind.value} message, dropping observer: {e}")
            self._observer = None


class QueueObserver:
    """Observer that buffers messages for pull-based consumers (CLI, dashboard)."""

    def __init__(self):
        self.messages = queue.Queue()

    def send(self, message):
        self.messages.put(message)

    def get(self, timeout=None):
        """Next message, or None when nothing arrives within timeout."""
        try:
            return self.messages.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        drained = []
        while True:
            try:
                drained.append(self.messages.get_nowait())
            except queue.Empty:
                return drained
