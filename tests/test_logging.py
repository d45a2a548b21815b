from __future__ import annotations

import json
import logging
from pathlib import Path

from pixelclock.core.errors import APIError
from pixelclock.core.logging import JSONFormatter, SimpleFormatter, setup_logging


def _record(msg: str = "hello %s", args: tuple = ("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord("pixelclock.agents.weather", logging.WARNING, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields() -> None:
    line = JSONFormatter().format(_record(entity_id="sensor.kitchen_temp"))

    data = json.loads(line)
    assert data["message"] == "hello world"
    assert data["level"] == "WARNING"
    assert data["logger"] == "pixelclock.agents.weather"
    assert data["entity_id"] == "sensor.kitchen_temp"
    assert "msg" not in data


def test_simple_formatter_without_colors() -> None:
    line = SimpleFormatter(use_colors=False).format(_record())

    assert "WARNING" in line
    assert "[weather/" in line
    assert line.endswith("hello world")
    assert "\033[" not in line


def test_setup_logging_writes_json_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "pixelclock.log"
    setup_logging(level="DEBUG", log_file=log_file)
    try:
        logging.getLogger("pixelclock.test").info("started", extra={"frames": 3})
        for handler in logging.getLogger().handlers:
            handler.flush()

        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["message"] == "started"
        assert data["frames"] == 3
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in logging.getLogger().handlers:
            handler.close()
        setup_logging()


def test_error_to_dict() -> None:
    error = APIError("Forecast API error", details={"status": 503})

    assert str(error) == "Forecast API error (status=503)"
    assert error.to_dict() == {
        "error_type": "APIError",
        "message": "Forecast API error",
        "severity": "error",
        "details": {"status": 503},
    }
