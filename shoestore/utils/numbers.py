import math
from typing import Any


def parse_num(value: Any, fallback: Any = 0):
    """Best-effort numeric parse used when reading stored or user-entered values.

    Returns ``fallback`` for anything that is not a finite number or a numeric string.
    Booleans are rejected so that ``True`` never becomes a quantity of 1.
    """
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, (int, float)):
        n = value
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return fallback
    else:
        return fallback
    if isinstance(n, float):
        if not math.isfinite(n):
            return fallback
        if n.is_integer():
            return int(n)
    return n


def clamp_num(n, lo, hi):
    return max(lo, min(hi, n))
