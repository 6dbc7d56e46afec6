"""Capability catalog lookups.

UCS Manager ships a capability catalog describing every component model it
knows: manufacturing definitions (marketing name, PID, SKU), physical
definitions (dimensions) and local disk definitions. Inventory records only
carry a model number; builders resolve it here to a human-readable name.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, Optional

from ..utils.cache import Cache
from .dn import RawRecord, parent_of, record_dn
from .models import NOT_AVAILABLE

logger = logging.getLogger(__name__)

# Catalog common names are prefixed with the vendor; the report drops it
VENDOR_PREFIX = re.compile(r"^Cisco\s+(?:Systems\s+)?(?:UCS\s+)?")


def strip_vendor(name: Optional[str]) -> str:
    """Drop the vendor prefix from a catalog common name.

    >>> strip_vendor("Cisco UCS B200 M5")
    'B200 M5'
    """
    if not name:
        return NOT_AVAILABLE
    return VENDOR_PREFIX.sub("", str(name)).strip() or str(name)


class CatalogLookup:
    """Model-keyed lookups over the capability catalog tables.

    Parameters
    ----------
    manufacturing: Iterable[RawRecord]
        ``equipmentManufacturingDef`` records (``Pid``, ``Sku``, ``Name``).
    physical: Iterable[RawRecord]
        ``equipmentPhysicalDef`` records, siblings of the manufacturing
        definition of the same component (``Width``, ``Depth``, ...).
    local_disks: Iterable[RawRecord]
        ``equipmentLocalDiskDef`` records (``Vendor``, ``Model``,
        ``RotationalSpeed``).
    """

    def __init__(
        self,
        manufacturing: Iterable[RawRecord] = (),
        physical: Iterable[RawRecord] = (),
        local_disks: Iterable[RawRecord] = (),
    ) -> None:
        self._manufacturing: Dict[str, RawRecord] = {}
        for record in manufacturing:
            for key in ("Pid", "Sku"):
                value = record.get(key)
                if value and value not in self._manufacturing:
                    self._manufacturing[str(value)] = record
        self._physical: Dict[str, RawRecord] = {
            parent_of(record_dn(r)): r for r in physical if record_dn(r)
        }
        self._disks: Dict[str, RawRecord] = {}
        for record in local_disks:
            model = str(record.get("Model") or "").strip()
            if model:
                self._disks[model] = record
        self._names: Cache[str, str] = Cache(maxsize=512)

    def _definition(self, model: Optional[str]) -> Optional[RawRecord]:
        if not model:
            return None
        return self._manufacturing.get(str(model))

    def model_name(self, model: Optional[str]) -> str:
        """Human-readable model name; the raw model number when uncatalogued."""
        if not model:
            return NOT_AVAILABLE
        return self._names.get_or_compute(str(model), lambda: self._name_of(str(model)))

    def _name_of(self, model: str) -> str:
        definition = self._definition(model)
        if definition is None or not definition.get("Name"):
            logger.debug("catalog.model_not_found", extra={"model": model})
            return model
        return strip_vendor(definition.get("Name"))

    def width(self, model: Optional[str]) -> str:
        """Physical width of the component, ``N/A`` when uncatalogued."""
        definition = self._definition(model)
        if definition is None:
            return NOT_AVAILABLE
        physical = self._physical.get(parent_of(record_dn(definition)))
        if physical is None or not physical.get("Width"):
            return NOT_AVAILABLE
        return str(physical.get("Width"))

    def disk_speed(self, model: Optional[str]) -> str:
        """Rotational speed of a local disk model (``N/A`` for SSDs/unknown)."""
        record = self._disks.get(str(model or "").strip())
        if record is None:
            return NOT_AVAILABLE
        speed = record.get("RotationalSpeed")
        if not speed or str(speed) in ("0", "unspecified"):
            return NOT_AVAILABLE
        return str(speed)
