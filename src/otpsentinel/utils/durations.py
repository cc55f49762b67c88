"""Parse and format compact duration strings such as ``5m`` or ``1h30m``."""

from __future__ import annotations

import re
from datetime import timedelta

__all__ = ["parse_duration", "format_duration", "to_seconds"]

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_RX_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_RX_FULL = re.compile(r"^(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+$")


def parse_duration(source: str) -> timedelta:
    """Parse ``source`` into a :class:`timedelta`.

    Accepted forms are sequences of decimal numbers with a unit suffix
    (``300ms``, ``1.5h``, ``2h45m``), an optional leading sign, and the bare
    string ``0``.  Anything else raises :class:`ValueError`.
    """

    text = source.strip()
    sign = 1.0
    if text and text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text or not _RX_FULL.fullmatch(text):
        raise ValueError(f"invalid duration: {source!r}")
    seconds = 0.0
    for value, unit in _RX_COMPONENT.findall(text):
        seconds += float(value) * _UNITS[unit]
    return timedelta(seconds=sign * seconds)


def format_duration(value: timedelta) -> str:
    """Format ``value`` in the compact form accepted by :func:`parse_duration`.

    Whole hours, minutes and seconds are emitted as ``1h30m`` style strings;
    sub-second remainders fall back to milliseconds.
    """

    total_us = round(value.total_seconds() * 1_000_000)
    if total_us == 0:
        return "0s"
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    if total_us % 1_000_000:
        if total_us % 1000 == 0:
            return f"{sign}{total_us // 1000}ms"
        return f"{sign}{total_us}us"

    seconds = total_us // 1_000_000
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs:
        parts.append(f"{secs}s")
    return sign + "".join(parts)


def to_seconds(value: timedelta | float | int) -> float:
    """Return ``value`` expressed in seconds."""

    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)
