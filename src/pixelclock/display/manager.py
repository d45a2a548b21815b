"""LED Matrix Display Manager.

Pushes finished frames to an rpi-rgb-led-matrix panel, or to a mock sink
(optionally writing a PNG preview) when the library is missing or mock mode
is requested.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Iterable

from PIL import Image

from ..core.config import DisplayConfig
from ..core.errors import HardwareError

logger = logging.getLogger(__name__)

# Try to import the RGB matrix library
try:
    from rgbmatrix import RGBMatrix, RGBMatrixOptions

    RGB_MATRIX_AVAILABLE = True
except ImportError:
    RGBMatrix = None
    RGBMatrixOptions = None
    RGB_MATRIX_AVAILABLE = False
    logger.info("rgbmatrix not available, will use mock mode")


class DisplayManager:
    """Manages the LED matrix display with thread-safe rendering.

    Usage:
        manager = DisplayManager(config.display)
        manager.start()
        manager.consume(streamer.frames)
        manager.stop()
    """

    def __init__(self, config: DisplayConfig) -> None:
        self._config = config
        self._matrix: Any = None
        self._canvas: Any = None
        self._lock = threading.RLock()
        self._running = False
        self._mock_mode = config.mock or not RGB_MATRIX_AVAILABLE
        self._preview_path = Path(config.preview_path) if config.preview_path else None
        self._frames_rendered = 0

    @property
    def width(self) -> int:
        """Display width in pixels."""
        return self._config.cols

    @property
    def height(self) -> int:
        """Display height in pixels."""
        return self._config.rows

    @property
    def is_mock(self) -> bool:
        """Check if running in mock mode."""
        return self._mock_mode

    @property
    def is_running(self) -> bool:
        """Check if display is running."""
        return self._running

    @property
    def frames_rendered(self) -> int:
        """Number of frames pushed since start."""
        return self._frames_rendered

    def start(self) -> None:
        """Initialize and start the LED matrix.

        Raises:
            HardwareError: If matrix initialization fails
        """
        if self._running:
            logger.warning("Display already running")
            return

        if self._mock_mode:
            logger.info("Starting display in mock mode (%dx%d)", self.width, self.height)
            if self._preview_path is not None:
                self._preview_path.parent.mkdir(parents=True, exist_ok=True)
            self._running = True
            return

        display = self._config
        logger.info(
            "Starting LED matrix: %dx%d, mapping=%s",
            display.cols,
            display.rows,
            display.hardware_mapping,
        )

        try:
            options = RGBMatrixOptions()
            options.rows = display.rows
            options.cols = display.cols
            options.hardware_mapping = display.hardware_mapping
            options.gpio_slowdown = display.gpio_slowdown
            options.brightness = display.brightness
            options.pwm_bits = display.pwm_bits
            options.pwm_lsb_nanoseconds = display.pwm_lsb_nanoseconds

            self._matrix = RGBMatrix(options=options)
            self._canvas = self._matrix.CreateFrameCanvas()
            self._running = True

            logger.info("LED matrix started successfully")

        except Exception as e:
            logger.exception("Failed to initialize LED matrix")
            raise HardwareError(
                "Failed to initialize LED matrix",
                details={"error": str(e)},
                cause=e,
            ) from e

    def stop(self) -> None:
        """Stop the display and clean up."""
        if not self._running:
            return

        logger.info("Stopping display after %d frames", self._frames_rendered)
        self._running = False

        with self._lock:
            if self._matrix:
                try:
                    self._matrix.Clear()
                except Exception as e:
                    logger.warning("Error clearing matrix: %s", e)
                self._matrix = None
                self._canvas = None

    def render_image(self, image: Image.Image) -> None:
        """Render a PIL Image to the display.

        The image will be resized if dimensions don't match.

        Args:
            image: PIL Image to render (RGB mode)
        """
        if not self._running:
            return

        if image.size != (self.width, self.height):
            image = image.resize((self.width, self.height), Image.Resampling.NEAREST)

        if image.mode != "RGB":
            image = image.convert("RGB")

        with self._lock:
            self._frames_rendered += 1

            if self._mock_mode:
                if self._preview_path is not None:
                    image.save(self._preview_path, format="PNG")
                else:
                    logger.debug("Mock render: %dx%d image", image.width, image.height)
                return

            if not self._canvas:
                return

            self._canvas.SetImage(image)
            self._canvas = self._matrix.SwapOnVSync(self._canvas)

    def clear(self) -> None:
        """Clear the display to black."""
        if not self._running:
            return

        if self._mock_mode:
            if self._preview_path is not None:
                self.render_image(Image.new("RGB", (self.width, self.height)))
            return

        with self._lock:
            if self._canvas:
                self._canvas.Clear()
                self._canvas = self._matrix.SwapOnVSync(self._canvas)

    def consume(self, frames: Iterable[Image.Image]) -> None:
        """Render frames until the source is exhausted or closed."""
        for frame in frames:
            try:
                self.render_image(frame)
            except Exception:
                logger.exception("Failed to render frame")
        logger.debug("Frame source closed")
