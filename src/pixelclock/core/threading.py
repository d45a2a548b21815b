"""Thread-safe primitives for the frame pipeline and background agents.

Provides building blocks for safe multi-threaded access to shared state
and for handing frames from one thread to another.
"""

import logging
import queue
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReadWriteLock:
    """Reader/writer lock with writer preference.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so a refresh is never starved
    by a busy render loop.

    Usage:
        lock = ReadWriteLock()
        with lock.read_locked():
            snapshot = self._cache
        with lock.write_locked():
            self._cache = fresh
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class StoppableThread(threading.Thread):
    """Daemon thread with a cooperative stop signal.

    The target receives the thread as its first argument and is expected
    to poll ``should_stop()`` or sleep through ``wait()``. Several threads
    may share one ``stop_event`` so that a single shutdown request stops
    all of them.

    Usage:
        def worker(thread: StoppableThread):
            while not thread.wait(60.0):
                refresh()

        thread = StoppableThread(target=worker, name="Worker")
        thread.start()
        # Later:
        thread.stop()
    """

    def __init__(
        self,
        target: Callable[..., Any] | None = None,
        name: str | None = None,
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        daemon: bool = True,
        stop_event: threading.Event | None = None,
    ) -> None:
        if target is not None:
            original_target = target

            def wrapped_target(*a: Any, **kw: Any) -> Any:
                return original_target(self, *a, **kw)

            super().__init__(target=wrapped_target, name=name, args=args, kwargs=kwargs or {})
        else:
            super().__init__(name=name)

        self.daemon = daemon
        self._stop_event = stop_event if stop_event is not None else threading.Event()

    @property
    def stop_event(self) -> threading.Event:
        """The event this thread watches for a stop request."""
        return self._stop_event

    def stop(self, timeout: float = 5.0) -> bool:
        """Request stop and wait for the thread to finish.

        Args:
            timeout: Maximum time to wait for the thread to finish

        Returns:
            True if the thread stopped, False if still running
        """
        logger.debug("Stopping thread: %s", self.name)
        self._stop_event.set()
        if self is threading.current_thread() or not self.is_alive():
            return not self.is_alive()
        self.join(timeout=timeout)
        stopped = not self.is_alive()
        if not stopped:
            logger.warning("Thread %s did not stop within timeout", self.name)
        return stopped

    def should_stop(self) -> bool:
        """Check if stop was requested."""
        return self._stop_event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep for ``timeout`` seconds unless a stop is requested first.

        Returns:
            True if stop was requested, False if the timeout elapsed
        """
        return self._stop_event.wait(timeout)


class AtomicCounter:
    """Thread-safe counter with atomic increment.

    Usage:
        counter = AtomicCounter()
        counter.increment()
        value = counter.value
    """

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        """Get current counter value."""
        with self._lock:
            return self._value

    def increment(self, delta: int = 1) -> int:
        """Atomically increment the counter and return the new value."""
        with self._lock:
            self._value += delta
            return self._value


class ChannelClosed(Exception):
    """Raised when receiving from a closed and drained channel."""


class Channel(Generic[T]):
    """Bounded hand-off queue that can be closed.

    ``send`` blocks while the channel is full. Once closed, sends are
    refused and receivers drain what is left before ``ChannelClosed`` is
    raised. Iterating a channel yields items until it is closed.
    """

    POLL_INTERVAL = 0.05

    def __init__(self, capacity: int = 1) -> None:
        self._queue: queue.Queue[T] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        """True once ``close()`` has been called."""
        return self._closed.is_set()

    def send(self, item: T, cancel: threading.Event | None = None) -> bool:
        """Block until ``item`` is queued.

        Args:
            item: Value to hand off
            cancel: Optional event that aborts a blocked send

        Returns:
            True if queued, False if the channel closed or ``cancel`` fired
        """
        while not self._closed.is_set():
            if cancel is not None and cancel.is_set():
                return False
            try:
                self._queue.put(item, timeout=self.POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def receive(self, timeout: float | None = None) -> T:
        """Take the next item.

        Raises:
            ChannelClosed: Channel is closed and empty
            TimeoutError: Nothing arrived within ``timeout`` seconds
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            wait = self.POLL_INTERVAL
            if deadline is not None:
                wait = max(0.0, min(wait, deadline - time.monotonic()))
            try:
                return self._queue.get(timeout=wait) if wait > 0 else self._queue.get_nowait()
            except queue.Empty:
                if self._closed.is_set():
                    raise ChannelClosed()
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError("no item received")

    def close(self) -> None:
        """Close the channel; queued items stay readable."""
        self._closed.set()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
