"""Parsing and printing of compact durations such as ``2h30m``."""

from __future__ import annotations

import re
from datetime import timedelta

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60 * 1_000_000,
    "h": 3600 * 1_000_000,
}

_COMPONENT = r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([-+]?)((?:{_COMPONENT})+)")
_COMPONENT_RE = re.compile(_COMPONENT)

# Longest representable span: 2**63 - 1 nanoseconds, about 2562047h47m16s.
MAX_DURATION = timedelta(microseconds=(2**63 - 1) // 1_000)


class ValidationError(ValueError):
    """Raised when user input is not a valid duration."""

    def __init__(self, value: str):
        super().__init__(f"{value} is not a valid duration")
        self.value = value


def parse_duration(text: str) -> timedelta:
    """Parse ``300ms``, ``1.5h``, ``2h30m`` or ``-1h`` into a timedelta."""
    raw = text.strip()
    if raw in ("0", "+0", "-0"):
        return timedelta(0)

    match = _DURATION_RE.fullmatch(raw)
    if not match:
        raise ValidationError(text)

    sign, body = match.group(1), match.group(2)
    total = 0.0
    for number, unit in _COMPONENT_RE.findall(body):
        total += float(number) * _UNIT_MICROSECONDS[unit]
    if total > MAX_DURATION / timedelta(microseconds=1):
        raise ValidationError(text)
    value = timedelta(microseconds=round(total))
    return -value if sign == "-" else value


def format_duration(value: timedelta) -> str:
    """Inverse of :func:`parse_duration`, e.g. ``timedelta(hours=2.5)`` -> ``2h30m0s``."""
    micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_trim(micros / 1_000)}ms"

    hours, rest = divmod(micros, 3600 * 1_000_000)
    minutes, rest = divmod(rest, 60 * 1_000_000)
    seconds = _trim(rest / 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _trim(number: float) -> str:
    return f"{number:.6f}".rstrip("0").rstrip(".")
