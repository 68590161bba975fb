"""Tolerant scalar coercion for loosely-typed document fields."""
import math
import re
from typing import Any, Optional

_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def is_record(value: Any) -> bool:
    """True for JSON objects (dicts)."""
    return isinstance(value, dict)


def is_number(value: Any) -> bool:
    """True for finite ints/floats. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def to_number(value: Any, fallback: float = 0):
    """Coerce to a finite number, reading a leading numeric prefix from strings."""
    if is_number(value):
        return value
    if value is None or isinstance(value, bool):
        return fallback
    match = _FLOAT_PREFIX_RE.match(str(value))
    if not match:
        return fallback
    n = float(match.group(1))
    return n if math.isfinite(n) else fallback


def to_integer(value: Any, fallback: int = 0) -> int:
    """Coerce to a number and round half up."""
    return int(math.floor(to_number(value, fallback) + 0.5))


def to_string_value(value: Any) -> Optional[str]:
    """Return the string unchanged if it has non-blank content, else None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def to_boolean(value: Any, fallback: bool = False) -> bool:
    """Coerce booleans and their common string/number spellings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback
    s = str(value).strip().lower()
    if s in ("true", "1"):
        return True
    if s in ("false", "0"):
        return False
    return fallback


def fmt_num(v) -> str:
    """Format a number for a shape-line field.

    Integral values are written without decimals, everything else uses the
    shortest round-tripping representation.
    """
    if isinstance(v, bool):
        return "1" if v else "0"
    if isinstance(v, int):
        return str(v)
    if v == int(v) and abs(v) < 1e15:
        return str(int(v))
    return repr(v)


def fmt_flag(v: bool) -> str:
    return "1" if v else "0"
