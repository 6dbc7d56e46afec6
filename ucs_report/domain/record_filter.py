"""Counter extraction from the bulk statistics snapshot.

A collection pass pulls every statistics object of the domain in one bulk
query instead of asking for the counters of each device separately. Section
builders then carve out the records they need with compound DN/RN regular
expressions through :class:`RecordFilter`.

When a pass runs without telemetry the snapshot is empty. The filter then
synthesizes one zero-valued record per real device (chassis or server) so
that every builder can index counters by device DN exactly as it would with
real data. This placeholder mode only guarantees shape compatibility; the
zeros are not measurements.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..utils.cache import Cache
from .dn import RawRecord, parent_of, record_dn, rn_of
from .utils.validation import number_or_zero

logger = logging.getLogger(__name__)

# Field carrying the device identity in projected counter records
IDENTITY_FIELDS = frozenset({"Dn"})


class DeviceClass(Enum):
    """Device classes whose identifiers placeholder mode can enumerate."""

    CHASSIS = "chassis"
    SERVER = "server"


def _project(record: RawRecord, fields: Sequence[str]) -> Dict[str, Any]:
    projected: Dict[str, Any] = {}
    for name in fields:
        value = record.get(name)
        if name in IDENTITY_FIELDS:
            projected[name] = "" if value is None else str(value)
        elif name == "Suspect":
            projected[name] = value if value is not None else "no"
        else:
            projected[name] = number_or_zero(value)
    return projected


def zero_record(fields: Sequence[str], dn: str = "") -> Dict[str, Any]:
    """A counter record with every field zeroed and ``Dn`` set to ``dn``."""
    record: Dict[str, Any] = {}
    for name in fields:
        if name in IDENTITY_FIELDS:
            record[name] = dn
        elif name == "Suspect":
            record[name] = "no"
        else:
            record[name] = 0
    return record


class RecordFilter:
    """Pattern filter over one pass's statistics snapshot.

    Parameters
    ----------
    records: Iterable[RawRecord]
        The bulk statistics dump (may be empty).
    telemetry_enabled: bool
        ``False`` switches every query to placeholder mode.
    chassis_dns: Iterable[str]
        Real chassis DNs, used to shape placeholders for chassis counters.
    server_dns: Iterable[str]
        Real blade and rack-unit DNs, used for server counters.
    """

    def __init__(
        self,
        records: Iterable[RawRecord],
        *,
        telemetry_enabled: bool = True,
        chassis_dns: Iterable[str] = (),
        server_dns: Iterable[str] = (),
        cache_size: int = 256,
    ) -> None:
        self.telemetry_enabled = telemetry_enabled
        self._devices: Dict[DeviceClass, List[str]] = {
            DeviceClass.CHASSIS: list(chassis_dns),
            DeviceClass.SERVER: list(server_dns),
        }
        # Statistics objects share a handful of RNs (rx-stats, temp-stats,
        # ...); bucketing by RN narrows every query before the DN regex runs.
        self._by_rn: Dict[str, List[RawRecord]] = defaultdict(list)
        count = 0
        for record in records:
            rn = str(record.get("Rn") or rn_of(record_dn(record)))
            self._by_rn[rn].append(record)
            count += 1
        self._cache: Cache[Tuple[Any, ...], List[Dict[str, Any]]] = Cache(
            maxsize=cache_size
        )
        self._indexes: Cache[Tuple[Any, ...], CounterIndex] = Cache(maxsize=cache_size)
        logger.debug(
            "record_filter.indexed",
            extra={
                "records": count,
                "rn_buckets": len(self._by_rn),
                "telemetry_enabled": telemetry_enabled,
            },
        )

    def filter(
        self,
        dn_pattern: str,
        rn_pattern: str,
        fields: Sequence[str],
        device: Optional[DeviceClass] = None,
    ) -> List[Dict[str, Any]]:
        """Return counter records matching both patterns, projected to ``fields``.

        Parameters
        ----------
        dn_pattern: str
            Case-sensitive regular expression searched in each record's DN.
        rn_pattern: str
            Case-sensitive regular expression searched in each record's RN.
        fields: Sequence[str]
            Attributes to keep. Absent attributes read as ``0``.
        device: Optional[DeviceClass]
            Device class the counters belong to; only consulted when
            telemetry is disabled.

        Returns
        -------
        List[Dict[str, Any]]
            Projected records. Never raises on absent data.
        """
        key = (dn_pattern, rn_pattern, tuple(fields), device)
        return [
            dict(r)
            for r in self._cache.get_or_compute(
                key, lambda: self._compute(dn_pattern, rn_pattern, fields, device)
            )
        ]

    def index(
        self,
        dn_pattern: str,
        rn_pattern: str,
        fields: Sequence[str],
        device: Optional[DeviceClass] = None,
    ) -> "CounterIndex":
        """Like :meth:`filter`, keyed by owner DN for per-object lookups."""
        key = (dn_pattern, rn_pattern, tuple(fields), device)
        return self._indexes.get_or_compute(
            key,
            lambda: CounterIndex(
                self.filter(dn_pattern, rn_pattern, fields, device), fields
            ),
        )

    def _compute(
        self,
        dn_pattern: str,
        rn_pattern: str,
        fields: Sequence[str],
        device: Optional[DeviceClass],
    ) -> List[Dict[str, Any]]:
        if not self.telemetry_enabled:
            return self._placeholders(fields, device)
        try:
            dn_re = re.compile(dn_pattern)
            rn_re = re.compile(rn_pattern)
        except re.error as exc:
            logger.warning(
                "record_filter.bad_pattern",
                extra={"dn_pattern": dn_pattern, "rn_pattern": rn_pattern, "error": str(exc)},
            )
            return []
        matched: List[Dict[str, Any]] = []
        for rn, bucket in self._by_rn.items():
            if not rn_re.search(rn):
                continue
            for record in bucket:
                if dn_re.search(record_dn(record)):
                    matched.append(_project(record, fields))
        return matched

    def _placeholders(
        self, fields: Sequence[str], device: Optional[DeviceClass]
    ) -> List[Dict[str, Any]]:
        if device is None:
            return [zero_record(fields)]
        return [zero_record(fields, dn) for dn in self._devices[device]]


def filter_records(
    records: Iterable[RawRecord],
    dn_pattern: str,
    rn_pattern: str,
    fields: Sequence[str],
    *,
    telemetry_enabled: bool = True,
    device_dns: Iterable[str] = (),
    device: Optional[DeviceClass] = None,
) -> List[Dict[str, Any]]:
    """One-shot form of :meth:`RecordFilter.filter` for a single query."""
    dns = list(device_dns)
    rf = RecordFilter(
        records,
        telemetry_enabled=telemetry_enabled,
        chassis_dns=dns if device is DeviceClass.CHASSIS else (),
        server_dns=dns if device is DeviceClass.SERVER else (),
    )
    return rf.filter(dn_pattern, rn_pattern, fields, device)


class CounterIndex:
    """Owner lookup over one filtered counter list.

    Each counter record is registered under its own DN and every ancestor
    DN, first record winning, so :meth:`lookup` answers "the counters of the
    object at ``dn``" with one dictionary access instead of a scan.

    Parameters
    ----------
    records: Sequence[Dict[str, Any]]
        Projected records as returned by :meth:`RecordFilter.filter`.
    fields: Sequence[str]
        Fields of the returned counter records.
    """

    def __init__(
        self, records: Sequence[Dict[str, Any]], fields: Sequence[str]
    ) -> None:
        self._fields = tuple(fields)
        self._by_owner: Dict[str, Dict[str, Any]] = {}
        for record in records:
            ancestor = str(record.get("Dn") or "")
            while ancestor:
                self._by_owner.setdefault(ancestor, record)
                ancestor = parent_of(ancestor)
        # A lone device-less placeholder stands in for every object
        self._placeholder: Optional[Dict[str, Any]] = (
            records[0] if len(records) == 1 and not records[0].get("Dn") else None
        )

    def __len__(self) -> int:
        return len(self._by_owner)

    def lookup(self, dn: str) -> Dict[str, Any]:
        """Counters of the object at ``dn``; a zero record when it has none."""
        record = self._by_owner.get(dn) if dn else None
        if record is not None:
            return {name: record.get(name, 0) for name in self._fields}
        if self._placeholder is not None:
            found = {name: self._placeholder.get(name, 0) for name in self._fields}
            if "Dn" in self._fields:
                found["Dn"] = dn
            return found
        return zero_record(self._fields, dn)


def counters_for(
    records: Sequence[Dict[str, Any]], dn: str, fields: Sequence[str]
) -> Dict[str, Any]:
    """Pick the counter record belonging to the object at ``dn``.

    Matches a record whose ``Dn`` equals ``dn`` or lies below it. A lone
    device-less placeholder (``Dn == ""``) stands in for every object.
    Otherwise a zero record carrying ``dn`` is returned, so callers never
    branch on a missing statistic. Builders looking up many objects in the
    same list use :meth:`RecordFilter.index` instead.
    """
    return CounterIndex(records, fields).lookup(dn)
