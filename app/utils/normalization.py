"""
Value Normalization
===================

Pure helpers that turn raw form values into comparable canonical forms.

- ``numeric_of``: tolerant number parsing (locale decimal comma, trailing units)
- ``scalar_key``: canonical comparison key for scalar equality
- ``same_scalar``: key equality that keeps booleans apart from text

None of these raise; all are safe on arbitrary input.
"""

from __future__ import annotations

import math
import re
from typing import Any

# Leading floating point literal, the part a lenient parser would consume
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_of(raw: Any) -> float | None:
    """
    Convert a raw field value into a finite float.

    Accepts native numbers and strings using either ``.`` or ``,`` as the
    decimal separator (``"20,5"`` -> 20.5). Text after the numeric prefix is
    ignored (``"20.5 C"`` -> 20.5).

    Returns:
        The parsed value, or None for empty, non-numeric or non-finite input
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return None
    if _is_number(raw):
        try:
            value = float(raw)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None

    text = str(raw).replace(",", ".", 1)
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return None
    try:
        value = float(match.group(1))
    except (ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def _number_text(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def scalar_key(raw: Any) -> str:
    """
    Canonical comparison key for a scalar value.

    Numbers and their string forms collapse to the same key (``1``, ``1.0``
    and ``"1"``), booleans map to ``"true"``/``"false"``. The key is used for
    equality only, never for display.
    """
    if raw is None:
        return ""
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if _is_number(raw):
        if isinstance(raw, float) and not math.isfinite(raw):
            return ""
        return _number_text(raw)
    return str(raw).strip()


def same_scalar(a: Any, b: Any) -> bool:
    """
    Scalar equality on canonical keys.

    A boolean never equals a non-boolean, even when both render as
    ``"true"``/``"false"``; numbers and numeric strings do compare equal.
    """
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return scalar_key(a) == scalar_key(b)
