"""Display formatting shared by the HTML themes and the PNG card."""

from __future__ import annotations

_DAY_MS = 24 * 60 * 60 * 1000
_HOUR_MS = 60 * 60 * 1000
_MINUTE_MS = 60 * 1000

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_duration(ms: int) -> str:
    """``93784000`` -> ``"1d 2h 3m"``."""
    ms = max(0, int(ms))
    days, rest = divmod(ms, _DAY_MS)
    hours, rest = divmod(rest, _HOUR_MS)
    minutes = rest // _MINUTE_MS
    return f"{days}d {hours}h {minutes}m"


def format_bytes(n: float) -> str:
    if not n or n < 0:
        return "0 B"
    value = float(n)
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if value.is_integer():
        return f"{value:.0f} {_BYTE_UNITS[unit]}"
    return f"{value:.1f} {_BYTE_UNITS[unit]}"


def format_percentage(fraction: float | None) -> str:
    """Rounded percent, ``"--"`` while a metric has no value yet."""
    if fraction is None:
        return "--"
    return f"{round(fraction * 100)}%"


def format_usage(used: int, total: int) -> str:
    return f"{format_bytes(used)} / {format_bytes(total)}"
