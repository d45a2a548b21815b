"""Text formatting for countdowns and ages."""

from datetime import timedelta

_SECOND_US = 1_000_000
_MINUTE_US = 60 * _SECOND_US
_DAY_SECONDS = 24 * 60 * 60


def _round_half_up(us: int, unit_us: int) -> int:
    return (us + unit_us // 2) // unit_us


def format_duration(duration: timedelta) -> str:
    """Countdown text.

    Durations of a day or more round to the minute and read
    ``DDd HHh MMm``; shorter ones round to the second and read
    ``HHh MMm SSs``. Negative durations count as zero.

    >>> format_duration(timedelta(seconds=0))
    '00h 00m 00s'
    >>> format_duration(timedelta(days=1))
    '01d 00h 00m'
    """
    us = max(0, duration // timedelta(microseconds=1))
    seconds = _round_half_up(us, _SECOND_US)

    if seconds >= _DAY_SECONDS:
        minutes = _round_half_up(us, _MINUTE_US)
        days, minutes = divmod(minutes, 24 * 60)
        hours, minutes = divmod(minutes, 60)
        return f"{days:02d}d {hours:02d}h {minutes:02d}m"

    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"


def format_short_duration(duration: timedelta) -> str:
    """Compact age text: ``7m``, ``3h12m`` or ``2d5h``.

    Rounds down to whole minutes; negative durations read ``0m``.
    """
    minutes = max(0, duration // timedelta(minutes=1))
    if minutes < 60:
        return f"{minutes}m"
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h{minutes}m"
    days, hours = divmod(hours, 24)
    return f"{days}d{hours}h"
