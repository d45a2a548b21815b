"""Network reachability probe.

Periodically opens a TCP connection to a well-known host and records how
long it took. The result is shown on the diagnostics page.
"""

import logging
import socket
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from ..core.errors import ConfigurationError
from ..core.threading import ReadWriteLock, StoppableThread

logger = logging.getLogger(__name__)

STALE_AFTER = timedelta(minutes=5)

PING_GREEN_MAX = timedelta(milliseconds=50)
PING_YELLOW_MAX = timedelta(milliseconds=100)
PING_ORANGE_MAX = timedelta(milliseconds=200)

Dialer = Callable[[tuple[str, int], float], Any]


class PingLevel(Enum):
    """Latency bands, best to worst."""

    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


@dataclass(frozen=True)
class DiagnosticsStatus:
    """Snapshot of the most recent probe."""

    last_healthy_at: datetime | None = None
    last_ping: timedelta = timedelta(0)
    last_ping_ok: bool = False
    last_checked_at: datetime | None = None

    def ping_level(self) -> PingLevel:
        """Classify the last round trip; a zero or failed ping is RED."""
        if self.last_ping <= timedelta(0):
            return PingLevel.RED
        if self.last_ping <= PING_GREEN_MAX:
            return PingLevel.GREEN
        if self.last_ping <= PING_YELLOW_MAX:
            return PingLevel.YELLOW
        if self.last_ping <= PING_ORANGE_MAX:
            return PingLevel.ORANGE
        return PingLevel.RED

    def is_stale(self, now: datetime) -> bool:
        """True if never healthy or healthy too long ago."""
        if self.last_healthy_at is None:
            return True
        return now - self.last_healthy_at > STALE_AFTER


class DiagnosticsAgent:
    """Probes ``host:port`` over TCP every ``interval`` seconds.

    The first probe runs during construction so the page has something to
    show immediately.

    Args:
        host: Probe host
        port: Probe TCP port
        interval: Seconds between probes
        timeout: Connect timeout in seconds
        dialer: ``dialer((host, port), timeout)`` returning a closable
            connection; defaults to ``socket.create_connection``
        clock: Returns the current aware time
        shutdown: Shared stop event
    """

    def __init__(
        self,
        host: str = "8.8.8.8",
        port: int = 53,
        interval: float = 120.0,
        timeout: float = 2.0,
        dialer: Dialer | None = None,
        clock: Callable[[], datetime] | None = None,
        shutdown: threading.Event | None = None,
    ) -> None:
        if interval <= 0:
            raise ConfigurationError(
                "Diagnostics interval must be positive",
                details={"interval": interval},
            )
        if timeout <= 0:
            raise ConfigurationError(
                "Diagnostics timeout must be positive",
                details={"timeout": timeout},
            )

        self._address = (host, port)
        self._interval = interval
        self._timeout = timeout
        self._dialer = dialer or socket.create_connection
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = ReadWriteLock()
        self._status = DiagnosticsStatus()

        self.check_once()

        self._thread = StoppableThread(
            target=self._probe_loop,
            name="DiagnosticsAgent",
            stop_event=shutdown,
        )
        self._thread.start()

    def get_status(self) -> DiagnosticsStatus:
        """Latest probe snapshot."""
        with self._lock.read_locked():
            return self._status

    def check_once(self) -> DiagnosticsStatus:
        """Run one probe and record the result."""
        started = time.monotonic()
        error: Exception | None = None
        try:
            conn = self._dialer(self._address, self._timeout)
        except OSError as e:
            error = e
        else:
            conn.close()
        elapsed = timedelta(seconds=time.monotonic() - started)
        checked_at = self._clock()

        with self._lock.write_locked():
            if error is not None:
                self._status = DiagnosticsStatus(
                    last_healthy_at=self._status.last_healthy_at,
                    last_ping=timedelta(0),
                    last_ping_ok=False,
                    last_checked_at=checked_at,
                )
            else:
                self._status = DiagnosticsStatus(
                    last_healthy_at=checked_at,
                    last_ping=elapsed,
                    last_ping_ok=True,
                    last_checked_at=checked_at,
                )
            status = self._status

        if error is not None:
            logger.warning("Diagnostics ping to %s:%d failed: %s", *self._address, error)
        else:
            logger.debug("Diagnostics ping %.0fms", elapsed.total_seconds() * 1000)
        return status

    def stop(self) -> None:
        """Stop the probe thread."""
        self._thread.stop()

    def _probe_loop(self, thread: StoppableThread) -> None:
        while not thread.wait(self._interval):
            try:
                self.check_once()
            except Exception:
                logger.exception("Diagnostics probe failed")
