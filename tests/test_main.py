from __future__ import annotations

import time
from pathlib import Path
from unittest.mock import patch

import pytest

from pixelclock.__main__ import PixelClockSystem
from pixelclock.agents.weather import DayWeather, TwoDayWeather
from pixelclock.core.errors import APIError

CONFIG = """
display:
  frame_interval_ms: 20
  preview_path: {preview}
clock:
  timezone: UTC
  rotation_interval: 0.05
diagnostics:
  host: 127.0.0.1
  port: 1
  timeout: 0.2
"""


def _config(tmp_path: Path) -> tuple[Path, Path]:
    preview = tmp_path / "frame.png"
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG.format(preview=preview), encoding="utf-8")
    return path, preview


def test_system_streams_frames_and_stops(tmp_path: Path) -> None:
    path, preview = _config(tmp_path)
    system = PixelClockSystem(path, mock_mode=True, debug=True)

    with patch("pixelclock.__main__.TomorrowIOClient") as client_cls:
        client_cls.return_value.get_two_day_weather.return_value = TwoDayWeather(
            DayWeather(temperature_high=10), DayWeather(temperature_high=11)
        )
        system.start()
        try:
            deadline = time.time() + 3
            while time.time() < deadline and not preview.exists():
                time.sleep(0.02)
            assert system.is_running
            assert preview.exists()
        finally:
            system.stop()

    assert system.shutdown_event.is_set()
    assert not system.is_running
    client_cls.return_value.close.assert_called_once()


def test_startup_fails_when_first_forecast_fails(tmp_path: Path) -> None:
    path, _ = _config(tmp_path)
    system = PixelClockSystem(path, mock_mode=True)

    with patch("pixelclock.__main__.TomorrowIOClient") as client_cls:
        client_cls.return_value.get_two_day_weather.side_effect = APIError("no key")
        with pytest.raises(APIError):
            system.start()

    assert system.shutdown_event.is_set()
    assert not system.is_running
