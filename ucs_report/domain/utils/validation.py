"""
Validation utilities for weakly-typed record attributes.

Every attribute the management API returns is a string. These helpers turn
them into numbers without raising, so a dangling or malformed value degrades
to a placeholder instead of failing a section builder.
"""

import logging
import math
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]


def is_valid_float(value: float) -> bool:
    """
    Check if a float value is finite and JSON-serializable.

    Examples
    --------
    >>> is_valid_float(42.5)
    True
    >>> is_valid_float(float('nan'))
    False
    """
    return math.isfinite(value)


def to_number(value: Any) -> Optional[Number]:
    """
    Parse an attribute value into ``int`` or ``float``.

    Returns ``None`` for ``None``, empty strings, booleans, non-finite values
    and text such as ``"unspecified"`` or ``"N/A"``.

    Examples
    --------
    >>> to_number("42")
    42
    >>> to_number("3.5")
    3.5
    >>> to_number("unspecified") is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if is_valid_float(value) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        parsed = float(text)
    except ValueError:
        return None
    return parsed if is_valid_float(parsed) else None


def to_int(value: Any, default: int = 0) -> int:
    """
    Parse an attribute value into ``int``, falling back to ``default``.

    Examples
    --------
    >>> to_int("1283")
    1283
    >>> to_int("2.0")
    2
    >>> to_int(None)
    0
    """
    number = to_number(value)
    if number is None:
        return default
    return int(number)


def number_or_zero(value: Any) -> Number:
    """Counter attribute value with absent/malformed values read as ``0``."""
    number = to_number(value)
    return 0 if number is None else number
