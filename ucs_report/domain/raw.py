"""Raw record snapshot pulled once per collection pass.

The collector pulls every object class the section builders need exactly
once, up front, and hands the resulting read-only snapshot to the builders.
The class lists below are the single source of truth for what a pass pulls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

from .dn import DnIndex, RawRecord

SYSTEM_CLASSES: Tuple[str, ...] = (
    "topSystem",
    "mgmtEntity",
    "commNtpProvider",
    "commDnsProvider",
    "commDateTime",
    "mgmtBackupPolicy",
    "mgmtCfgExportPolicy",
    "callhomeEp",
    "firmwareRunning",
)

INVENTORY_CLASSES: Tuple[str, ...] = (
    "networkElement",
    "etherPIo",
    "fcPIo",
    "equipmentChassis",
    "equipmentPsu",
    "equipmentIOCard",
    "etherSwitchIntFIo",
    "computeBlade",
    "computeRackUnit",
    "processorUnit",
    "memoryUnit",
    "adaptorUnit",
    "storageLocalDisk",
    "fabricPathEp",
    "dcxVc",
)

BOOT_CHILD_CLASSES: Tuple[str, ...] = (
    "lsbootStorage",
    "lsbootLocalStorage",
    "lsbootDefaultLocalImage",
    "lsbootLocalHddImage",
    "lsbootUsbFlashStorageImage",
    "lsbootVirtualMedia",
    "lsbootLan",
    "lsbootLanImagePath",
    "lsbootSan",
    "lsbootSanCatSanImage",
    "lsbootSanCatSanImagePath",
    "lsbootIScsi",
    "lsbootIScsiImagePath",
)

POLICY_CLASSES: Tuple[str, ...] = (
    "computeChassisDiscPolicy",
    "computePsuPolicy",
    "fabricLanCloud",
    "lsmaintMaintPolicy",
    "lsbootPolicy",
    "firmwareComputeHostPack",
    "storageLocalDiskConfigPolicy",
    "macpoolPool",
    "ippoolPool",
    "uuidpoolPool",
    "fcpoolInitiators",
    "computePool",
    "computePooledSlot",
    "computePooledRackUnit",
) + BOOT_CHILD_CLASSES

PROFILE_CLASSES: Tuple[str, ...] = (
    "lsServer",
    "vnicEther",
    "vnicEtherIf",
    "vnicFc",
    "vnicFcIf",
)

LAN_CLASSES: Tuple[str, ...] = (
    "fabricEthLanPc",
    "fabricEthLanPcEp",
    "fabricVlan",
    "vnicLanConnTemp",
    "qosclassEthClassified",
    "qosclassEthBE",
    "nwctrlDefinition",
)

SAN_CLASSES: Tuple[str, ...] = (
    "fabricVsan",
    "fabricFcSanPc",
    "fabricFcSanPcEp",
    "vnicSanConnTemp",
)

FAULT_CLASSES: Tuple[str, ...] = ("faultInst",)

CATALOG_CLASSES: Tuple[str, ...] = (
    "equipmentManufacturingDef",
    "equipmentPhysicalDef",
    "equipmentLocalDiskDef",
)


def pull_classes() -> List[str]:
    """Every object class one collection pass pulls, without duplicates."""
    ordered: Dict[str, None] = {}
    for group in (
        SYSTEM_CLASSES,
        INVENTORY_CLASSES,
        POLICY_CLASSES,
        PROFILE_CLASSES,
        LAN_CLASSES,
        SAN_CLASSES,
        FAULT_CLASSES,
        CATALOG_CLASSES,
    ):
        for class_id in group:
            ordered.setdefault(class_id, None)
    return list(ordered)


@dataclass(frozen=True)
class RawSnapshot:
    """Read-only view over one pass's raw record collections.

    Attributes
    ----------
    classes: Mapping[str, Sequence[RawRecord]]
        Records per object class id. Missing classes read as empty.
    statistics: Sequence[RawRecord]
        The bulk statistics dump (empty when telemetry was skipped).
    """

    classes: Mapping[str, Sequence[RawRecord]] = field(default_factory=dict)
    statistics: Sequence[RawRecord] = ()
    _indexes: Dict[Tuple[str, ...], DnIndex] = field(
        default_factory=dict, compare=False, repr=False
    )

    def records(self, *class_ids: str) -> List[RawRecord]:
        """Concatenated records of ``class_ids`` in the given order."""
        out: List[RawRecord] = []
        for class_id in class_ids:
            out.extend(self.classes.get(class_id, ()))
        return out

    def index(self, *class_ids: str) -> DnIndex:
        """DN index over ``class_ids``, built on first use and reused."""
        key = tuple(class_ids)
        if key not in self._indexes:
            self._indexes[key] = DnIndex(self.records(*class_ids))
        return self._indexes[key]

    def first(self, class_id: str) -> RawRecord:
        """First record of ``class_id`` or an empty record."""
        found = self.classes.get(class_id, ())
        return dict(found[0]) if found else {}
