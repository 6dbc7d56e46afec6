"""Boot policy tree assembly.

UCS Manager returns a boot policy's devices as flat records contained below
the policy DN (``org-root/boot-policy-default/lan``,
``.../lan/path-primary``, ...). Each top-level device carries a ``Type`` tag
and an ``Order``; its nested records are found through DN containment. This
module rebuilds the ordered, typed tree the report shows:

- ``storage``: grandchildren only, as ``{Type, Order}`` leaves
- ``virtual-media``: single level, media kind derived from ``Access``
- ``lan``: ``{VnicName, Type}`` paths
- ``san``: per-vHBA groups, each with ordered ``{Lun, Type, Wwn}`` targets
- ``iscsi``: ``{ISCSIVnicName, Type}`` paths

Unknown device types are kept as ``unclassified`` entries and logged rather
than dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .dn import DnIndex, RawRecord, parent_of, record_dn
from .utils.validation import to_number

logger = logging.getLogger(__name__)

UNCLASSIFIED = "unclassified"

BootEntry = Dict[str, Any]


def _order(record: RawRecord) -> Any:
    number = to_number(record.get("Order"))
    return int(number) if number is not None else record.get("Order")


def _record_key(record: RawRecord) -> Tuple[Any, ...]:
    # Numeric orders first; ties fall back to Type, Dn and the attributes
    number = to_number(record.get("Order"))
    if number is not None:
        rank: Tuple[Any, ...] = (0, number, "")
    else:
        rank = (1, 0, str(record.get("Order") or ""))
    attributes = sorted((str(k), str(v)) for k, v in record.items())
    return rank + (str(record.get("Type") or ""), record_dn(record), attributes)


def _by_order(records: Iterable[RawRecord]) -> List[RawRecord]:
    return sorted(records, key=_record_key)


def _children(index: DnIndex, record: RawRecord) -> List[RawRecord]:
    dn = record_dn(record)
    return index.children(dn) if dn else []


def _level1(record: RawRecord, *extra: str) -> Dict[str, Any]:
    level1: Dict[str, Any] = {"Type": record.get("Type"), "Order": _order(record)}
    for name in extra:
        level1[name] = record.get(name)
    return level1


def _storage(record: RawRecord, index: DnIndex) -> BootEntry:
    leaves: List[Dict[str, Any]] = []
    for child in _by_order(_children(index, record)):
        for grandchild in _by_order(_children(index, child)):
            leaves.append(
                {"Type": grandchild.get("Type"), "Order": _order(grandchild)}
            )
    return {"Level1": _level1(record), "Level2": leaves}


def _virtual_media(record: RawRecord, index: DnIndex) -> BootEntry:
    _ = index
    level1 = _level1(record, "Access")
    # The API reports the access mode, not the media kind
    level1["Type"] = "CD/DVD" if record.get("Access") == "read-only" else "Floppy"
    return {"Level1": level1}


def _lan(record: RawRecord, index: DnIndex) -> BootEntry:
    paths = _children(index, record)
    if not paths and record.get("VnicName"):
        paths = [record]
    return {
        "Level1": _level1(record),
        "Level2": [
            {"VnicName": p.get("VnicName"), "Type": p.get("Type")}
            for p in _by_order(paths)
        ],
    }


def _san(record: RawRecord, index: DnIndex) -> BootEntry:
    groups: List[Dict[str, Any]] = []
    for vhba in _by_order(_children(index, record)):
        targets = [
            {"Lun": t.get("Lun"), "Type": t.get("Type"), "Wwn": t.get("Wwn")}
            for t in _by_order(_children(index, vhba))
        ]
        groups.append(
            {"VnicName": vhba.get("VnicName"), "Type": vhba.get("Type"), "Level3": targets}
        )
    return {"Level1": _level1(record), "Level2": groups}


def _iscsi(record: RawRecord, index: DnIndex) -> BootEntry:
    return {
        "Level1": _level1(record),
        "Level2": [
            {"ISCSIVnicName": p.get("ISCSIVnicName"), "Type": p.get("Type")}
            for p in _by_order(_children(index, record))
        ],
    }


_BUILDERS: Dict[str, Callable[[RawRecord, DnIndex], BootEntry]] = {
    "storage": _storage,
    "virtual-media": _virtual_media,
    "lan": _lan,
    "san": _san,
    "iscsi": _iscsi,
}


def _entry(record: RawRecord, index: DnIndex) -> BootEntry:
    raw_type = record.get("Type")
    builder = _BUILDERS.get(str(raw_type))
    if builder is not None:
        return builder(record, index)
    logger.warning(
        "boot_order.unclassified_entry",
        extra={"dn": record_dn(record), "type": raw_type},
    )
    return {
        "Level1": {"Type": UNCLASSIFIED, "RawType": raw_type, "Order": _order(record)}
    }


def _roots(records: Sequence[RawRecord], index: DnIndex) -> List[RawRecord]:
    return [r for r in records if not record_dn(r) or parent_of(record_dn(r)) not in index]


def assemble_entries(
    child_records: Iterable[RawRecord], index: Optional[DnIndex] = None
) -> List[BootEntry]:
    """Assemble one policy's boot devices into ordered, typed entries.

    Parameters
    ----------
    child_records: Iterable[RawRecord]
        Every record contained below one boot policy, in any order. Top-level
        devices are the records whose parent DN is not itself in the set.
    index: Optional[DnIndex]
        Prebuilt index over ``child_records``; built on demand when omitted.

    Returns
    -------
    List[BootEntry]
        Entries sorted ascending by ``Level1.Order``. Ties are broken on the
        device record itself, so the result does not depend on input order.
    """
    records = list(child_records)
    if index is None:
        index = DnIndex(records)
    return [_entry(root, index) for root in _by_order(_roots(records, index))]


def assemble_boot_order(
    policy_records: Iterable[RawRecord], child_records: Iterable[RawRecord]
) -> List[Dict[str, Any]]:
    """Build one node per boot policy with its assembled ``Entries``.

    Children are joined to their policy by DN containment through a single
    index over ``child_records``.
    """
    index = DnIndex(child_records)
    nodes: List[Dict[str, Any]] = []
    for policy in policy_records:
        dn = record_dn(policy)
        below = index.descendants(dn) if dn else []
        nodes.append(
            {
                "Name": policy.get("Name"),
                "Dn": dn,
                "Description": policy.get("Descr") or "",
                "BootMode": policy.get("BootMode") or "legacy",
                "RebootOnUpdate": policy.get("RebootOnUpdate"),
                "EnforceVnicName": policy.get("EnforceVnicName"),
                "Entries": assemble_entries(below, DnIndex(below)),
            }
        )
    logger.debug("boot_order.assembled", extra={"policies": len(nodes)})
    return nodes
