"""
Tests for unit conversion and attribute validation utilities.
"""

import math

from ucs_report.domain.utils.units import DataUnit, convert_data, to_gb
from ucs_report.domain.utils.validation import (
    is_valid_float,
    number_or_zero,
    to_int,
    to_number,
)

# ============================================================================
# DataUnit conversion tests
# ============================================================================


def test_convert_data_bytes_to_kb():
    """Test bytes to kilobytes conversion."""
    assert convert_data(1024.0, DataUnit.BYTES, DataUnit.KILOBYTES) == 1.0


def test_convert_data_gb_to_mb():
    """Test gigabytes to megabytes conversion."""
    assert convert_data(1.0, DataUnit.GIGABYTES, DataUnit.MEGABYTES) == 1024.0


def test_convert_data_negative_is_rejected():
    """Negative capacities cannot be converted."""
    assert convert_data(-1.0, DataUnit.MEGABYTES, DataUnit.GIGABYTES) is None


def test_to_gb_from_megabytes():
    """Memory and disk sizes in MB become GB."""
    assert to_gb("16384") == 16.0
    assert to_gb("1143455", precision=1) == 1116.7
    assert to_gb("2097152", from_unit=DataUnit.KILOBYTES) == 2.0


def test_to_gb_non_numeric():
    """Text placeholders yield None."""
    assert to_gb("unspecified") is None
    assert to_gb(None) is None


# ============================================================================
# Validation tests
# ============================================================================


def test_is_valid_float():
    """Finite values are valid, NaN and infinity are not."""
    assert is_valid_float(42.5) is True
    assert is_valid_float(float("nan")) is False
    assert is_valid_float(math.inf) is False


def test_to_number():
    """Attribute strings parse to int or float, placeholders to None."""
    assert to_number("42") == 42
    assert isinstance(to_number("42"), int)
    assert to_number("3.5") == 3.5
    assert to_number(" 7 ") == 7
    assert to_number("N/A") is None
    assert to_number("") is None
    assert to_number(True) is None
    assert to_number("inf") is None


def test_to_int_and_number_or_zero():
    """Integer parsing falls back to a default; counters read as zero."""
    assert to_int("1283") == 1283
    assert to_int("2.0") == 2
    assert to_int("unknown", default=-1) == -1
    assert number_or_zero(None) == 0
    assert number_or_zero("812.5") == 812.5
