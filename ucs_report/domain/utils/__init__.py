"""
Shared utilities for section builders.

Modules
-------
validation
    Coercion of weakly-typed API attribute values (numeric strings,
    "unspecified", "N/A") to numbers with explicit defaults
units
    Data unit conversion (KB, MB, GB, TB) used to report capacities in
    gigabytes at the builder boundary
"""

__all__ = []
