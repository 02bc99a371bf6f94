"""String parsing, normalisation and value-type detection helpers."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Sequence

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MAX = (1 << 64) - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|()]+')

_D2 = r"([0-9]{2})"
_DATE_PART = r"([0-9]{4})-" + _D2 + "-" + _D2
_TIME_PART = _D2 + ":" + _D2 + ":" + _D2 + r"(?:\.([0-9]+))?"
_RFC3339_RE = re.compile(_DATE_PART + "T" + _TIME_PART + r"(Z|[+-][0-9]{2}:[0-9]{2})")
_DATE_RE = re.compile(_DATE_PART)
_DATETIME_RE = re.compile(_DATE_PART + " " + _TIME_PART)
_DATETIME_ZONE_RE = re.compile(_DATE_PART + " " + _TIME_PART + r" ([+-][0-9]{4}) ([A-Z]{3,5})")

_BOOL_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_BOOL_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class ValueType(str, Enum):
    """Kinds of value recognised by :func:`detect_type`."""

    NUMBER = "number"
    TIME = "time"
    STRING = "string"
    BOOLEAN = "boolean"


def _parse_int(text: str) -> Optional[int]:
    if not isinstance(text, str) or not _INT_RE.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def truncate_string(s: str, length: int) -> str:
    """Return at most ``length`` characters of ``s``."""
    if len(s) <= length:
        return s
    return s[:length]


def to_int(s: str, default: Any = 0) -> Any:
    """Parse a signed 64-bit decimal integer, or return ``default``."""
    number = _parse_int(s)
    return default if number is None else number


def to_uint(s: str) -> int:
    """Parse an unsigned 64-bit decimal integer, or return 0."""
    if not isinstance(s, str) or not _UINT_RE.fullmatch(s):
        return 0
    number = int(s)
    return number if number <= _UINT64_MAX else 0


def to_int_list(ids: str) -> list[int]:
    """Parse a comma-separated list of integers, skipping invalid entries."""
    return [n for part in ids.split(",") if (n := _parse_int(part.strip())) is not None]


def is_text_file(data: bytes) -> bool:
    """Guess whether ``data`` is text by inspecting its first 1024 bytes."""
    head = bytes(data[:1024])
    try:
        head.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return b"\x00" not in head


def sanitize_file_name(filename: str) -> str:
    """Replace runs of characters illegal in file names with ``_``."""
    return _ILLEGAL_FILENAME_CHARS.sub("_", filename)


def normalize_newlines(text: str) -> str:
    """Convert Windows line endings to Unix ones."""
    return text.replace("\r\n", "\n")


def normalize_to_windows(text: str) -> str:
    """Convert all line endings to Windows style."""
    return normalize_newlines(text).replace("\n", "\r\n")


def trim_quotes(text: str) -> str:
    """Strip one layer of backticks and then one layer of single quotes."""
    for quote in ("`", "'"):
        text = text.removeprefix(quote).removesuffix(quote)
    return text


def _microseconds(fraction: Optional[str]) -> int:
    if not fraction:
        return 0
    return int((fraction + "000000")[:6])


def _offset(text: str) -> timezone:
    if text == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if hours >= 24 or minutes >= 60:
        raise ValueError(f"time zone offset out of range: {text}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _build(groups: Sequence[Optional[str]], tz: timezone) -> datetime:
    year, month, day, hour, minute, second = (int(g) for g in groups[:6])
    return datetime(year, month, day, hour, minute, second, _microseconds(groups[6]), tzinfo=tz)


def parse_time(value: str) -> datetime:
    """Parse a timestamp in one of the supported layouts.

    Supported: RFC 3339, ``YYYY-MM-DD``, ``YYYY-MM-DD hh:mm:ss`` and
    ``YYYY-MM-DD hh:mm:ss -hhmm ZONE``. Times without an offset are UTC.
    """
    if match := _RFC3339_RE.fullmatch(value):
        return _build(match.groups()[:7], _offset(match.group(8)))
    if match := _DATE_RE.fullmatch(value):
        year, month, day = (int(g) for g in match.groups())
        return datetime(year, month, day, tzinfo=timezone.utc)
    if match := _DATETIME_RE.fullmatch(value):
        return _build(match.groups(), timezone.utc)
    if match := _DATETIME_ZONE_RE.fullmatch(value):
        return _build(match.groups()[:7], _offset(match.group(8)))
    raise ValueError(f"cannot parse {value!r} as a time")


def string_list_to_sql_in(items: Sequence[str]) -> str:
    """Render strings as an SQL ``IN`` list such as ``('x', 'xx')``."""
    if not items:
        return "()"
    return "(" + ", ".join(f"'{item}'" for item in items) + ")"


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    return str(value)


def _parse_float(text: str) -> Optional[float]:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isinf(number) and "inf" not in text.lower():
        return None
    return number


def detect_type(value: Any) -> tuple[ValueType, Any]:
    """Classify ``value`` as boolean, number, time or string and convert it."""
    text = _as_text(value)
    if text in _BOOL_TRUE:
        return ValueType.BOOLEAN, True
    if text in _BOOL_FALSE:
        return ValueType.BOOLEAN, False
    number = _parse_float(text)
    if number is not None:
        return ValueType.NUMBER, number
    try:
        return ValueType.TIME, parse_time(text)
    except ValueError:
        return ValueType.STRING, value