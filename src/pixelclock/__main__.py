"""Pixel clock entry point.

Usage:
    python -m pixelclock [options]

Options:
    --config PATH     Path to config file (default: config/config.yaml)
    --mock            Force mock mode (no hardware required)
    --debug           Enable debug logging and disable overnight blanking
"""

import argparse
import signal
import sys
import threading
from pathlib import Path

from . import __version__
from .agents import DiagnosticsAgent, SensorAgent, WeatherAgent, WeatherOptions
from .calendar import EventCalendar
from .clients import HomeAssistantClient, TomorrowIOClient
from .core.config import Config, load_config
from .core.logging import get_logger, setup_logging
from .core.threading import ChannelClosed, StoppableThread
from .display import DisplayManager, FrameStreamer, TextPainter
from .pages import PageController

logger = get_logger(__name__)


class PixelClockSystem:
    """Main application coordinator.

    Builds every component from the config and owns their lifecycle. All
    periodic components share one shutdown event, so a signal, a renderer
    failure or ``stop()`` winds everything down together.
    """

    def __init__(self, config_path: Path, mock_mode: bool = False, debug: bool = False) -> None:
        self._config_path = config_path
        self._mock_mode = mock_mode
        self._debug = debug
        self._running = False
        self._stopped = False
        self._shutdown_event = threading.Event()

        # Component references (initialized in start)
        self._config: Config | None = None
        self._display_manager: DisplayManager | None = None
        self._weather_client: TomorrowIOClient | None = None
        self._ha_client: HomeAssistantClient | None = None
        self._weather: WeatherAgent | None = None
        self._diagnostics: DiagnosticsAgent | None = None
        self._sensors: SensorAgent | None = None
        self._controller: PageController | None = None
        self._streamer: FrameStreamer | None = None
        self._consumer: StoppableThread | None = None
        self._error_watcher: StoppableThread | None = None

    @property
    def shutdown_event(self) -> threading.Event:
        return self._shutdown_event

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start all system components."""
        logger.info("Starting pixel clock")

        try:
            self._config = self._load_config()

            setup_logging(
                level="DEBUG" if self._debug else self._config.logging.level,
                log_format=self._config.logging.format,
                log_file=self._config.logging.file,
                max_size_mb=self._config.logging.max_size_mb,
                backup_count=self._config.logging.backup_count,
            )

            self._start_display()
            self._start_agents()
            self._start_pages()
            self._start_streamer()

            self._running = True
            logger.info("Pixel clock started successfully")

        except Exception as e:
            logger.exception("Failed to start system: %s", e)
            self.stop()
            raise

    def _load_config(self) -> Config:
        config = load_config(self._config_path)
        if self._mock_mode:
            config.display = config.display.model_copy(update={"mock": True})
        if self._debug:
            config.clock = config.clock.model_copy(update={"debug": True})
        return config

    def _start_display(self) -> None:
        """Initialize and start the display manager."""
        self._display_manager = DisplayManager(self._config.display)
        self._display_manager.start()

        logger.info(
            "Display started: %dx%d (mock=%s)",
            self._display_manager.width,
            self._display_manager.height,
            self._display_manager.is_mock,
        )

    def _start_agents(self) -> None:
        """Create the clients and the agents that poll them."""
        config = self._config

        self._weather_client = TomorrowIOClient(config.weather.api_key.get_secret_value())
        self._weather = WeatherAgent(
            self._weather_client,
            WeatherOptions(
                latitude=config.weather.latitude,
                longitude=config.weather.longitude,
                refresh=config.weather.refresh,
            ),
            shutdown=self._shutdown_event,
        )

        self._diagnostics = DiagnosticsAgent(
            host=config.diagnostics.host,
            port=config.diagnostics.port,
            interval=config.diagnostics.interval,
            timeout=config.diagnostics.timeout,
            shutdown=self._shutdown_event,
        )

        if config.homeassistant.enabled:
            self._ha_client = HomeAssistantClient(
                config.homeassistant.base_url,
                config.homeassistant.token.get_secret_value(),
            )
            self._sensors = SensorAgent(
                self._ha_client,
                config.homeassistant.entity_ids,
                refresh=config.homeassistant.refresh,
                shutdown=self._shutdown_event,
            )
        else:
            logger.info("Home Assistant not configured, sensor pages disabled")

    def _start_pages(self) -> None:
        """Build the calendar and the page controller."""
        config = self._config

        self._controller = PageController(
            text=TextPainter.from_path(config.clock.font_path, config.clock.font_size),
            weather=self._weather,
            diagnostics=self._diagnostics,
            calendar=EventCalendar.from_config(config.calendar),
            sensors=self._sensors,
            timezone=config.clock.timezone,
            rotation_interval=config.clock.rotation_interval,
            debug=config.clock.debug,
            shutdown=self._shutdown_event,
        )
        self._controller.start()

    def _start_streamer(self) -> None:
        """Start frame production and the threads that consume it."""
        display = self._display_manager
        self._streamer = FrameStreamer(
            display.width,
            display.height,
            self._controller,
            self._config.display.frame_interval_ms,
            shutdown=self._shutdown_event,
        )

        # Not tied to the shutdown event; they end when the channels close
        self._consumer = StoppableThread(
            target=lambda _thread: display.consume(self._streamer.frames),
            name="DisplayConsumer",
        )
        self._error_watcher = StoppableThread(
            target=self._watch_errors,
            name="RenderErrorWatcher",
        )
        self._consumer.start()
        self._error_watcher.start()
        self._streamer.start()

    def _watch_errors(self, thread: StoppableThread) -> None:
        try:
            error = self._streamer.errors.receive()
        except ChannelClosed:
            return
        logger.critical("Rendering failed, shutting down: %s", error)
        self._shutdown_event.set()

    def stop(self) -> None:
        """Stop all system components."""
        if self._stopped:
            return

        logger.info("Stopping pixel clock")
        self._stopped = True
        self._running = False
        self._shutdown_event.set()

        # Stop components in reverse order
        if self._streamer:
            self._streamer.stop()

        for thread in (self._consumer, self._error_watcher):
            if thread:
                thread.stop()

        for component in (self._controller, self._sensors, self._diagnostics, self._weather):
            if component:
                component.stop()

        for client in (self._ha_client, self._weather_client):
            if client:
                client.close()

        if self._display_manager:
            self._display_manager.clear()
            self._display_manager.stop()

        logger.info("Pixel clock stopped")

    def wait_for_shutdown(self) -> None:
        """Wait for shutdown signal."""
        self._shutdown_event.wait()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Pixel clock for LED matrices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config/config.yaml"),
        help="Path to config file",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Force mock mode (no hardware required)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging and show pages overnight",
    )

    args = parser.parse_args()

    # Setup initial logging
    setup_logging(level="DEBUG" if args.debug else "INFO")

    logger.info("Pixel clock v%s", __version__)

    system = PixelClockSystem(args.config, mock_mode=args.mock, debug=args.debug)

    # Setup signal handlers
    def signal_handler(sig, frame):
        logger.info("Received signal %s, shutting down...", sig)
        system.shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        system.start()
        system.wait_for_shutdown()
        return 0

    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    finally:
        system.stop()


if __name__ == "__main__":
    sys.exit(main())
