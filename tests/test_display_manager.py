from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import patch

from PIL import Image

from pixelclock.core.config import DisplayConfig
from pixelclock.core.threading import Channel
from pixelclock.display.manager import DisplayManager


def _manager(tmp_path: Path | None = None) -> DisplayManager:
    preview = str(tmp_path / "preview" / "frame.png") if tmp_path else None
    return DisplayManager(DisplayConfig(mock=True, preview_path=preview))


def test_mock_mode_when_forced() -> None:
    manager = _manager()

    assert manager.is_mock
    assert (manager.width, manager.height) == (64, 32)


def test_render_before_start_is_ignored(tmp_path: Path) -> None:
    manager = _manager(tmp_path)

    manager.render_image(Image.new("RGB", (64, 32)))

    assert manager.frames_rendered == 0
    assert not (tmp_path / "preview" / "frame.png").exists()


def test_preview_png_written(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.start()
    frame = Image.new("RGB", (64, 32))
    frame.putpixel((3, 4), (10, 20, 30))

    manager.render_image(frame)
    manager.stop()

    with Image.open(tmp_path / "preview" / "frame.png") as saved:
        assert saved.size == (64, 32)
        assert saved.getpixel((3, 4)) == (10, 20, 30)
    assert manager.frames_rendered == 1
    assert not manager.is_running


def test_mismatched_frames_are_resized(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.start()

    manager.render_image(Image.new("RGBA", (128, 64), (255, 0, 0, 255)))

    with Image.open(tmp_path / "preview" / "frame.png") as saved:
        assert saved.size == (64, 32)
        assert saved.getpixel((0, 0)) == (255, 0, 0)
    manager.stop()


def test_clear_writes_black_preview(tmp_path: Path) -> None:
    manager = _manager(tmp_path)
    manager.start()
    manager.render_image(Image.new("RGB", (64, 32), (255, 255, 255)))

    manager.clear()

    with Image.open(tmp_path / "preview" / "frame.png") as saved:
        assert saved.convert("RGB").getbbox() is None
    manager.stop()


def test_consume_until_channel_closed() -> None:
    manager = _manager()
    manager.start()
    frames: Channel[Image.Image] = Channel(capacity=1)

    consumer = threading.Thread(target=manager.consume, args=(frames,))
    consumer.start()
    for _ in range(3):
        assert frames.send(Image.new("RGB", (64, 32)))
    frames.close()
    consumer.join(2)

    assert not consumer.is_alive()
    assert manager.frames_rendered == 3
    manager.stop()


def test_consume_keeps_going_after_failed_frame() -> None:
    manager = _manager()
    manager.start()
    frames: Channel[Image.Image] = Channel(capacity=1)

    with patch.object(
        manager, "render_image", side_effect=[OSError("disk full"), None, None]
    ) as render:
        consumer = threading.Thread(target=manager.consume, args=(frames,))
        consumer.start()
        for _ in range(3):
            assert frames.send(Image.new("RGB", (64, 32)))
        frames.close()
        consumer.join(2)

    assert not consumer.is_alive()
    assert render.call_count == 3
    manager.stop()
