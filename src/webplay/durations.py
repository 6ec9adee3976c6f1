"""Duration strings such as ``60s``, ``1m30s`` or ``250ms``."""

from __future__ import annotations

import re

from webplay.errors import DurationError

# Seconds per unit. "µs" and "μs" are the micro sign and the greek mu.
_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Parse a duration string into seconds.

    A duration is an optionally signed sequence of decimal numbers, each
    with a unit suffix: ``300ms``, ``-1.5h``, ``2h45m``. A bare ``0`` is
    accepted. Anything else raises DurationError.
    """
    s = text
    sign = 1.0
    if s[:1] in ("+", "-"):
        if s[0] == "-":
            sign = -1.0
        s = s[1:]
    if s == "0":
        return 0.0
    if not s:
        raise DurationError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _PART.match(s, pos)
        if m is None:
            if re.match(r"\d+\.?\d*|\.\d+", s[pos:]):
                raise DurationError(f"missing unit in duration {text!r}")
            raise DurationError(f"invalid duration {text!r}")
        total += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()
    return sign * total
