"""Policies section: global policies, boot policies and identity pools."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..boot_order import assemble_boot_order
from ..dn import RawRecord, record_dn
from ..raw import BOOT_CHILD_CLASSES, RawSnapshot
from ..utils.validation import to_int
from .common import text

logger = logging.getLogger(__name__)


def _named(record: RawRecord, *fields: str) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"Name": text(record, "Name"), "Dn": record_dn(record)}
    for name in fields:
        entry[name] = text(record, name)
    return entry


def _pool(record: RawRecord, *fields: str) -> Dict[str, Any]:
    entry = _named(record, *fields)
    entry["Size"] = to_int(record.get("Size"))
    entry["Assigned"] = to_int(record.get("Assigned"))
    return entry


def _server_pools(raw: RawSnapshot) -> List[Dict[str, Any]]:
    members = raw.index("computePooledSlot", "computePooledRackUnit")
    pools = []
    for record in raw.records("computePool"):
        entry = _named(record)
        slots = members.children(record_dn(record))
        # Server pools do not report a size; it is the member count
        entry["Size"] = to_int(record.get("Size"), default=len(slots))
        entry["Assigned"] = to_int(record.get("Assigned"))
        entry["Members"] = [
            record_dn(m) if not m.get("PoolableDn") else str(m.get("PoolableDn"))
            for m in slots
        ]
        pools.append(entry)
    return pools


def build_policies(raw: RawSnapshot) -> Dict[str, Any]:
    """Build the ``Policies`` section.

    ``BootPolicies`` are assembled from the flat ``lsboot*`` records through
    :func:`~ucs_report.domain.boot_order.assemble_boot_order`. Pools carry
    ``Size`` and ``Assigned`` counts.
    """
    discovery = raw.first("computeChassisDiscPolicy")
    psu = raw.first("computePsuPolicy")
    lan_cloud = raw.first("fabricLanCloud")

    section = {
        "System": {
            "ChassisDiscoveryAction": text(discovery, "Action"),
            "LinkAggregation": text(discovery, "LinkAggregationPref"),
            "PowerRedundancy": text(psu, "Redundancy"),
            "MacAging": text(lan_cloud, "MacAging"),
            "EthernetMode": text(lan_cloud, "Mode"),
        },
        "Maintenance": [
            _named(r, "UptimeDisr", "Descr") for r in raw.records("lsmaintMaintPolicy")
        ],
        "BootPolicies": assemble_boot_order(
            raw.records("lsbootPolicy"), raw.records(*BOOT_CHILD_CLASSES)
        ),
        "HostFirmware": [
            _named(r, "BladeBundleVersion", "RackBundleVersion", "Mode")
            for r in raw.records("firmwareComputeHostPack")
        ],
        "LocalDisk": [
            _named(r, "Mode", "ProtectConfig")
            for r in raw.records("storageLocalDiskConfigPolicy")
        ],
        "Pools": {
            "Mac": [_pool(r, "AssignmentOrder") for r in raw.records("macpoolPool")],
            "Ip": [_pool(r, "AssignmentOrder") for r in raw.records("ippoolPool")],
            "Uuid": [_pool(r, "Prefix") for r in raw.records("uuidpoolPool")],
            "Wwn": [_pool(r, "Purpose") for r in raw.records("fcpoolInitiators")],
            "Server": _server_pools(raw),
        },
    }
    logger.debug(
        "sections.policies.built",
        extra={"boot_policies": len(section["BootPolicies"])},
    )
    return section
