from __future__ import annotations

import re
from typing import Iterable

EMPTY_DURATION = "00:00:00"
DURATION_RE = re.compile(r"(\d+):(\d+):(\d+)", re.ASCII)
RAW_MAX_LENGTH = 8

MODE_CARRY = "carry"
MODE_RAW = "raw"
MODES = (MODE_CARRY, MODE_RAW)


def _parse_digit(digit: str) -> int:
    if not isinstance(digit, str) or len(digit) != 1 or digit not in "0123456789":
        raise ValueError(f"digit must be a single character 0-9, got {digit!r}")
    return int(digit)


def parse_duration(value: str) -> tuple[int, int, int]:
    """Split ``HH:MM:SS`` into (hours, minutes, seconds); fields must be non-negative integers."""
    m = DURATION_RE.fullmatch(value) if isinstance(value, str) else None
    if m is None:
        raise ValueError(f"duration must look like HH:MM:SS, got {value!r}")
    hours, minutes, seconds = (int(g) for g in m.groups())
    return hours, minutes, seconds


def format_duration(hours: int, minutes: int, seconds: int) -> str:
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def accumulate(current: str, digit: str) -> str:
    """
    Shift one keypad digit into an ``HH:MM:SS`` value.

    The last seconds digit moves to the tens place and the new digit fills the
    ones place. Carries are gated on the pre-wrap values, in order:
    - seconds >= 60 adds one minute
    - minutes >= 60 (after that carry) adds one hour
    Display then wraps seconds and minutes at 60 and hours at 24.

    accumulate("00:00:09", "0") -> "00:01:30"
    accumulate("23:59:59", "9") -> "00:00:39"
    """
    hours, minutes, seconds = parse_duration(current)
    d = _parse_digit(digit)

    new_seconds = (seconds % 10) * 10 + d
    new_minutes = minutes + 1 if new_seconds >= 60 else minutes
    new_hours = hours + 1 if new_minutes >= 60 else hours

    return format_duration(new_hours % 24, new_minutes % 60, new_seconds % 60)


def accumulate_raw(current: str, digit: str, max_length: int = RAW_MAX_LENGTH) -> str:
    """Legacy keypad mode: append the digit to a plain digit string, ignoring input once full."""
    _parse_digit(digit)
    current = current or ""
    if not isinstance(current, str):
        raise ValueError(f"raw value must be a string, got {current!r}")
    if len(current) >= max_length:
        return current
    return current + digit


def accumulate_digits(digits: Iterable[str], start: str | None = None, mode: str = MODE_CARRY) -> str:
    if mode == MODE_CARRY:
        value = EMPTY_DURATION if start is None else start
        step = accumulate
    elif mode == MODE_RAW:
        value = "" if start is None else start
        step = accumulate_raw
    else:
        raise ValueError(f"unknown keypad mode: {mode}")
    for d in digits:
        value = step(value, d)
    return value
