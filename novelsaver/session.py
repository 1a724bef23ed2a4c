"""
Scrape session state shared by the orchestrator and the progress channel.

All flags live behind one condition variable: pause/stop commands notify it,
and worker threads block on it at their checkpoints instead of polling.
"""
import threading
import time
from enum import Enum

from .exceptions import ScrapeStopped
from .logging import logger

# Upper bound on how long a waiter sleeps before rechecking its deadline
CHECK_INTERVAL_SECONDS = 0.1


class ScrapeState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    PAUSED = "paused"
    COMPLETING = "completing"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


TERMINAL_STATES = {ScrapeState.COMPLETED, ScrapeState.STOPPED, ScrapeState.FAILED}


class ScrapeSession:
    """Process-wide session flags: running, paused, stop_requested, last snapshot."""

    def __init__(self):
        self._condition = threading.Condition()
        self.running = False
        self.paused = False
        self.stop_requested = False
        self.state = ScrapeState.IDLE
        self.task = None
        self.progress_snapshot = None
        # Bumped on every claim and reset; workers holding an older value are abandoned
        self.generation = 0

    # --- lifecycle -------------------------------------------------------

    def try_begin(self, task):
        """Claim the session for a new request. False when one is already active."""
        with self._condition:
            if self.running:
                return False
            self.running = True
            self.paused = False
            self.stop_requested = False
            self.generation += 1
            self.task = task
            self.state = ScrapeState.RESOLVING
            logger.component(f"[SESSION] Accepted '{task}' request")
            return True

    def transition(self, state):
        with self._condition:
            if self.state != state:
                logger.component(f"[SESSION] {self.state.value} -> {state.value}")
            self.state = state
            self._condition.notify_all()

    def reset(self):
        """Return to IDLE so a new request can be accepted. The last snapshot is kept."""
        with self._condition:
            self.running = False
            self.paused = False
            self.stop_requested = False
            self.task = None
            self.generation += 1
            self.state = ScrapeState.IDLE
            self._condition.notify_all()

    # --- control commands ------------------------------------------------

    def toggle_pause(self):
        with self._condition:
            if not self.running:
                logger.debug("[SESSION] Ignoring pause toggle, no active session")
                return self.paused
            self.paused = not self.paused
            if self.state in (ScrapeState.FETCHING, ScrapeState.PAUSED):
                self.state = ScrapeState.PAUSED if self.paused else ScrapeState.FETCHING
            logger.info(f"[SESSION] Paused: {self.paused}")
            self._condition.notify_all()
            return self.paused

    def request_stop(self):
        with self._condition:
            if not self.running:
                logger.debug("[SESSION] Ignoring stop, no active session")
                return
            self.stop_requested = True
            logger.info("[SESSION] Stop requested")
            self._condition.notify_all()

    # --- checkpoints -----------------------------------------------------
    #
    # Pool workers pass the generation they were started under; once the
    # session resets, their next checkpoint raises ScrapeStopped.

    def _halted(self, generation):
        return self.stop_requested or (generation is not None and generation != self.generation)

    def check_stop(self, generation=None):
        """Raise ScrapeStopped when a stop has been requested."""
        if self._halted(generation):
            raise ScrapeStopped()

    def wait_if_paused(self, generation=None):
        """Block while paused; a stop request ends the wait with ScrapeStopped."""
        with self._condition:
            while True:
                if self._halted(generation):
                    raise ScrapeStopped()
                if not self.paused:
                    return
                self._condition.wait(CHECK_INTERVAL_SECONDS)

    def wait_with_control(self, milliseconds, generation=None):
        """Sleep for milliseconds of unpaused time, honoring pause and stop.

        Time spent paused does not count toward the delay.
        """
        remaining = max(0.0, milliseconds / 1000.0)
        with self._condition:
            while True:
                if self._halted(generation):
                    raise ScrapeStopped()
                if self.paused:
                    self._condition.wait(CHECK_INTERVAL_SECONDS)
                    continue
                if remaining <= 0:
                    return
                started = time.monotonic()
                self._condition.wait(min(remaining, CHECK_INTERVAL_SECONDS))
                remaining -= time.monotonic() - started

    # --- snapshot --------------------------------------------------------

    def set_snapshot(self, snapshot):
        with self._condition:
            self.progress_snapshot = snapshot

    def last_snapshot(self):
        with self._condition:
            return self.progress_snapshot
