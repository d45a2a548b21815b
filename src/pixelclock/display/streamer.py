"""Paced frame production.

The streamer owns a pool of three frame buffers and, once started, asks a
renderer to fill the next buffer every frame interval. Finished buffers are
published on a single-slot channel for the display thread to consume.
"""

import logging
import threading
import time
from typing import Protocol

from PIL import Image

from ..core.errors import ConfigurationError
from ..core.threading import AtomicCounter, Channel, StoppableThread

logger = logging.getLogger(__name__)

# Frame times in milliseconds
ONE_FPS = 1000
TEN_FPS = 100
FIFTEEN_FPS = 1000 // 15
TWENTY_FOUR_FPS = 1000 // 24
THIRTY_FPS = 1000 // 30
SIXTY_FPS = 1000 // 60

BUFFER_COUNT = 3


class Renderer(Protocol):
    """Anything that can paint a frame into a buffer."""

    def draw_frame(self, target: Image.Image) -> None:
        ...


class FrameStreamer:
    """Drives a renderer at a fixed cadence and publishes the frames.

    Buffers are reused round-robin, so a consumer must be done with a frame
    before the streamer comes back around to it. With a channel of capacity
    one and three buffers, the buffer being drawn is never the one on the
    channel or the one the consumer most recently took.

    When the consumer falls behind, the publish blocks and the ticks that
    pass meanwhile are skipped rather than queued. Skipped ticks are added
    to ``dropped_frames``.

    Usage:
        streamer = FrameStreamer(64, 32, controller, ONE_FPS)
        streamer.start()
        for frame in streamer.frames:
            display.render_image(frame)
    """

    def __init__(
        self,
        width: int,
        height: int,
        renderer: Renderer,
        frame_interval_ms: int,
        background: tuple[int, int, int] = (0, 0, 0),
        shutdown: threading.Event | None = None,
    ) -> None:
        if frame_interval_ms <= 0:
            raise ConfigurationError(
                "Frame interval must be positive",
                details={"frame_interval_ms": frame_interval_ms},
            )
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                "Frame size must be positive",
                details={"width": width, "height": height},
            )

        self._width = width
        self._height = height
        self._renderer = renderer
        self._interval = frame_interval_ms / 1000.0
        self._background = background
        self._shutdown = shutdown if shutdown is not None else threading.Event()

        self._buffers = tuple(
            Image.new("RGB", (width, height), background) for _ in range(BUFFER_COUNT)
        )
        self._current = 0

        self.frames: Channel[Image.Image] = Channel(capacity=1)
        self.errors: Channel[Exception] = Channel(capacity=1)
        self.dropped_frames = AtomicCounter()

        self._thread: StoppableThread | None = None
        self._lock = threading.Lock()
        self._started = False

    @property
    def buffers(self) -> tuple[Image.Image, ...]:
        """The buffer pool, in rotation order."""
        return self._buffers

    @property
    def is_running(self) -> bool:
        """Check if the streaming thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start streaming. Calling it again has no effect."""
        with self._lock:
            if self._started:
                return
            self._started = True
            self._thread = StoppableThread(
                target=self._run,
                name="FrameStreamer",
                stop_event=self._shutdown,
            )
            self._thread.start()
        logger.info(
            "Frame streamer started: %dx%d every %.0fms",
            self._width,
            self._height,
            self._interval * 1000,
        )

    def stop(self) -> None:
        """Stop streaming and close both channels."""
        with self._lock:
            # A stop before start still prevents a later start
            self._started = True
            thread = self._thread
        if thread is not None:
            thread.stop()
        else:
            self._shutdown.set()
        self.frames.close()
        self.errors.close()
        logger.info(
            "Frame streamer stopped (%d frames dropped)", self.dropped_frames.value
        )

    def _next_buffer(self) -> Image.Image:
        self._current = (self._current + 1) % BUFFER_COUNT
        return self._buffers[self._current]

    def _run(self, thread: StoppableThread) -> None:
        next_tick = time.monotonic()
        try:
            while not thread.should_stop():
                buffer = self._next_buffer()
                buffer.paste(self._background, (0, 0, self._width, self._height))

                try:
                    self._renderer.draw_frame(buffer)
                except Exception as e:
                    logger.exception("Renderer failed, stopping stream")
                    self.errors.send(e, cancel=thread.stop_event)
                    return

                if not self.frames.send(buffer, cancel=thread.stop_event):
                    break

                next_tick += self._interval
                now = time.monotonic()
                if now >= next_tick:
                    skipped = int((now - next_tick) // self._interval) + 1
                    next_tick += skipped * self._interval
                    self.dropped_frames.increment(skipped)
                    logger.debug("Dropped %d frame(s), consumer behind", skipped)

                if thread.wait(next_tick - time.monotonic()):
                    break
        finally:
            if thread.should_stop():
                self.frames.close()
                self.errors.close()
