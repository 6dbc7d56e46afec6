"""
Unit conversion utilities for capacity measurements.

UCS Manager reports memory in megabytes, local disk sizes in megabytes and a
few catalog attributes in kilobytes. Builders convert to gigabytes before the
value enters the report so the emitter never has to know the raw unit.
"""

import logging
from enum import Enum
from typing import Any, Optional

from .validation import to_number

logger = logging.getLogger(__name__)


class DataUnit(Enum):
    """Data units for conversion."""

    BYTES = "B"
    KILOBYTES = "KB"
    MEGABYTES = "MB"
    GIGABYTES = "GB"
    TERABYTES = "TB"


# Data conversion factors to bytes
_DATA_TO_BYTES = {
    DataUnit.BYTES: 1.0,
    DataUnit.KILOBYTES: 1024.0,
    DataUnit.MEGABYTES: 1024.0**2,
    DataUnit.GIGABYTES: 1024.0**3,
    DataUnit.TERABYTES: 1024.0**4,
}


def convert_data(
    value: float, from_unit: DataUnit, to_unit: DataUnit
) -> Optional[float]:
    """
    Convert data value between different units.

    Parameters
    ----------
    value : float
        The data value to convert
    from_unit : DataUnit
        The source unit
    to_unit : DataUnit
        The target unit

    Returns
    -------
    float or None
        Converted value, or None if conversion fails

    Examples
    --------
    >>> convert_data(1024.0, DataUnit.BYTES, DataUnit.KILOBYTES)
    1.0
    >>> convert_data(1.0, DataUnit.GIGABYTES, DataUnit.MEGABYTES)
    1024.0
    """
    if value < 0:
        logger.warning(
            "units.convert_data.negative_value",
            extra={"value": value, "from_unit": from_unit.value},
        )
        return None

    try:
        bytes_value = value * _DATA_TO_BYTES[from_unit]
        return bytes_value / _DATA_TO_BYTES[to_unit]
    except (ValueError, KeyError, ZeroDivisionError) as e:
        logger.warning(
            "units.convert_data.failed",
            extra={
                "error": str(e),
                "value": value,
                "from_unit": from_unit.value,
                "to_unit": to_unit.value,
            },
        )
        return None


def to_gb(
    value: Any, from_unit: DataUnit = DataUnit.MEGABYTES, precision: int = 2
) -> Optional[float]:
    """
    Convert a raw API capacity attribute to gigabytes.

    Whole values are returned as ``int``-valued floats (``16.0``), fractional
    values are rounded to ``precision`` places. Non-numeric inputs such as
    ``"unspecified"`` yield ``None``.

    Examples
    --------
    >>> to_gb("16384")
    16.0
    >>> to_gb("1143455", precision=1)
    1116.7
    >>> to_gb("unspecified") is None
    True
    """
    number = to_number(value)
    if number is None:
        return None
    converted = convert_data(number, from_unit, DataUnit.GIGABYTES)
    if converted is None:
        return None
    return round(converted, precision)
