"""Network health page."""

from datetime import datetime, timedelta

from PIL import Image

from ..agents.diagnostics import DiagnosticsStatus, PingLevel
from ..display.graphics import Color, Colors
from ..display.renderer import TextDrawer
from .formatting import format_short_duration

PING_COLORS = {
    PingLevel.GREEN: Colors.STATUS_GREEN,
    PingLevel.YELLOW: Colors.STATUS_YELLOW,
    PingLevel.ORANGE: Colors.STATUS_ORANGE,
    PingLevel.RED: Colors.STATUS_RED,
}


def since_line(status: DiagnosticsStatus, now: datetime) -> tuple[str, Color]:
    """Age of the last healthy probe, red when never healthy or stale."""
    if status.last_healthy_at is None:
        return "Last ok never", Colors.STATUS_RED

    label = f"Last ok {format_short_duration(now - status.last_healthy_at)}"
    if status.is_stale(now):
        return label, Colors.STATUS_RED
    return label, Colors.STATUS_GREEN


def ping_line(status: DiagnosticsStatus) -> tuple[str, Color]:
    """Last round trip, colored by latency band."""
    if not status.last_ping_ok:
        return "Ping n/a", Colors.STATUS_RED

    ms = status.last_ping // timedelta(milliseconds=1)
    return f"Ping {ms}ms", PING_COLORS[status.ping_level()]


def render_diagnostics(
    target: Image.Image, text: TextDrawer, status: DiagnosticsStatus, now: datetime
) -> None:
    label, color = since_line(status, now)
    text.draw(target, 0, 10, label, color)
    label, color = ping_line(status)
    text.draw(target, 0, 18, label, color)
