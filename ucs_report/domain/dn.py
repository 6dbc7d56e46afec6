"""Distinguished-name helpers and the per-pass DN index.

UCS Manager identifies every managed object by a distinguished name (DN), a
slash-separated containment path such as ``sys/chassis-1/blade-3/board``.
Records pulled from different object classes carry no foreign keys; DNs are
the only join key. :class:`DnIndex` is built once per collection pass so that
containment joins (children, descendants) are dictionary lookups instead of a
full scan of the collection per server, chassis or policy.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

RawRecord = Dict[str, Any]


def rn_of(dn: str) -> str:
    """Return the relative name (last DN segment) of ``dn``."""
    if not dn:
        return ""
    return dn.rsplit("/", 1)[-1]


def parent_of(dn: str) -> str:
    """Return the parent DN of ``dn`` or ``""`` for a root-level DN."""
    if not dn or "/" not in dn:
        return ""
    return dn.rsplit("/", 1)[0]


def strip_segments(dn: str, count: int) -> str:
    """Drop the last ``count`` segments from ``dn``.

    >>> strip_segments("sys/chassis-1/blade-2/fabric-A/path-1", 2)
    'sys/chassis-1/blade-2'
    """
    parts = dn.split("/") if dn else []
    if count <= 0:
        return dn
    return "/".join(parts[:-count]) if len(parts) > count else ""


def is_under(dn: str, prefix: str) -> bool:
    """True when ``dn`` equals ``prefix`` or lies in its containment subtree."""
    if not dn or not prefix:
        return False
    return dn == prefix or dn.startswith(prefix + "/")


def record_dn(record: RawRecord) -> str:
    return str(record.get("Dn") or "")


class DnIndex:
    """Containment index over one record collection.

    Parameters
    ----------
    records: Iterable[RawRecord]
        Records carrying a ``Dn`` attribute. Records without one are kept in
        :attr:`records` but are not reachable through DN lookups.
    """

    def __init__(self, records: Iterable[RawRecord]) -> None:
        self.records: List[RawRecord] = list(records)
        self._by_dn: Dict[str, RawRecord] = {}
        self._children: Dict[str, List[RawRecord]] = defaultdict(list)
        self._descendants: Dict[str, List[RawRecord]] = defaultdict(list)
        for record in self.records:
            dn = record_dn(record)
            if not dn:
                continue
            self._by_dn[dn] = record
            self._children[parent_of(dn)].append(record)
            ancestor = parent_of(dn)
            while ancestor:
                self._descendants[ancestor].append(record)
                ancestor = parent_of(ancestor)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, dn: object) -> bool:
        return dn in self._by_dn

    def get(self, dn: str) -> Optional[RawRecord]:
        """Return the record whose DN is exactly ``dn``."""
        return self._by_dn.get(dn)

    def children(self, dn: str) -> List[RawRecord]:
        """Records exactly one containment level below ``dn``."""
        return list(self._children.get(dn, ()))

    def descendants(self, dn: str) -> List[RawRecord]:
        """All records strictly below ``dn`` in collection order."""
        return list(self._descendants.get(dn, ()))
