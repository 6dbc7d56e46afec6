"""Inventory sections: fabric interconnects, chassis, IOMs and servers.

Each builder walks one device collection and joins the component records
(ports, PSUs, DIMMs, adapters, disks, firmware) through DN containment
indexes built once on the snapshot. Counters come from the pass's
:class:`~ucs_report.domain.record_filter.RecordFilter`; server connectivity
comes from the :class:`~ucs_report.domain.topology.TopologyResolver`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..catalog import CatalogLookup
from ..dn import RawRecord, record_dn, rn_of
from ..raw import RawSnapshot
from ..record_filter import CounterIndex, DeviceClass, RecordFilter
from ..topology import TopologyResolver, render_port
from ..utils.units import to_gb
from ..utils.validation import to_int, to_number
from .common import (
    CHASSIS_POWER_FIELDS,
    EMPTY_SLOT,
    FC_PORT_FIELDS,
    PORT_RX_FIELDS,
    PORT_TX_FIELDS,
    SERVER_POWER_FIELDS,
    SERVER_TEMP_FIELDS,
    firmware_map,
    strip_counter,
    text,
)

logger = logging.getLogger(__name__)

FI_SYSTEM_FIELDS = ("Dn", "Load", "MemAvailable", "MemCached", "Suspect")

_FI_DN = r"^sys/switch-[AB]/"
_SERVER_DN = r"^sys/(?:chassis-\d+/blade-\d+|rack-unit-\d+)/"


# ---------------- Fabric interconnects ----------------


def _port(record: RawRecord, transport: str, stats: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "Dn": record_dn(record),
        "SwitchId": text(record, "SwitchId"),
        "SlotId": to_int(record.get("SlotId")),
        "PortId": to_int(record.get("PortId")),
        "Name": render_port(
            record.get("SlotId"), record.get("PortId"), record.get("SwitchId")
        ),
        "Role": text(record, "IfRole", "unknown"),
        "Transport": transport,
        "OperState": text(record, "OperState"),
        "Speed": text(record, "OperSpeed"),
        "Transceiver": text(record, "XcvrType"),
        "PeerDn": text(record, "PeerDn", ""),
        "Wwn": text(record, "Wwn", ""),
        "Stats": stats,
    }


def build_fi_inventory(
    raw: RawSnapshot, catalog: CatalogLookup, counters: RecordFilter
) -> List[Dict[str, Any]]:
    """Build the fabric-interconnect inventory with per-port counters.

    The port list of each FI (Ethernet and FC) is reused by the LAN and SAN
    builders, which read uplink/server/storage ports from here instead of
    re-joining the raw port collections.
    """
    firmware = raw.index("firmwareRunning")
    eth_ports = raw.index("etherPIo")
    fc_ports = raw.index("fcPIo")
    rx = counters.index(_FI_DN, r"^rx-stats$", PORT_RX_FIELDS)
    tx = counters.index(_FI_DN, r"^tx-stats$", PORT_TX_FIELDS)
    fc = counters.index(_FI_DN + r"slot-\d+/switch-fc/", r"^stats$", FC_PORT_FIELDS)
    system = counters.index(r"^sys/switch-[AB]/sysstats$", r"^sysstats$", FI_SYSTEM_FIELDS)

    fis: List[Dict[str, Any]] = []
    for fi in raw.records("networkElement"):
        dn = record_dn(fi)
        ports = [
            _port(
                p,
                "ether",
                {
                    "Rx": strip_counter(rx.lookup(record_dn(p))),
                    "Tx": strip_counter(tx.lookup(record_dn(p))),
                },
            )
            for p in eth_ports.descendants(dn)
        ] + [
            _port(p, "fc", strip_counter(fc.lookup(record_dn(p))))
            for p in fc_ports.descendants(dn)
        ]
        fis.append(
            {
                "Id": text(fi, "Id"),
                "Dn": dn,
                "Model": catalog.model_name(fi.get("Model")),
                "Serial": text(fi, "Serial"),
                "Ip": text(fi, "OobIfIp"),
                "Mask": text(fi, "OobIfMask"),
                "Gateway": text(fi, "OobIfGw"),
                "MemoryGb": to_gb(fi.get("TotalMemory")),
                "Firmware": firmware_map(firmware, dn),
                "Ports": ports,
                "Stats": strip_counter(system.lookup(dn)),
            }
        )
    logger.debug("sections.inventory.fi", extra={"count": len(fis)})
    return fis


# ---------------- Chassis and IOMs ----------------


def build_chassis_inventory(
    raw: RawSnapshot, catalog: CatalogLookup, counters: RecordFilter
) -> List[Dict[str, Any]]:
    """Build the chassis inventory with PSUs, blade slots and power counters."""
    psus = raw.index("equipmentPsu")
    blades = raw.index("computeBlade")
    power = counters.index(
        r"^sys/chassis-\d+/stats$", r"^stats$", CHASSIS_POWER_FIELDS, DeviceClass.CHASSIS
    )
    chassis_list: List[Dict[str, Any]] = []
    for chassis in raw.records("equipmentChassis"):
        dn = record_dn(chassis)
        chassis_list.append(
            {
                "Id": text(chassis, "Id"),
                "Dn": dn,
                "Model": catalog.model_name(chassis.get("Model")),
                "Serial": text(chassis, "Serial"),
                "OperState": text(chassis, "OperState"),
                "Power": text(chassis, "Power"),
                "Thermal": text(chassis, "Thermal"),
                "Psus": [
                    {
                        "Id": text(p, "Id"),
                        "Model": catalog.model_name(p.get("Model")),
                        "Serial": text(p, "Serial"),
                        "OperState": text(p, "OperState"),
                        "Power": text(p, "Power"),
                    }
                    for p in psus.children(dn)
                ],
                "Blades": [
                    {
                        "SlotId": to_int(b.get("SlotId")),
                        "Dn": record_dn(b),
                        "Model": catalog.model_name(b.get("Model")),
                        "Width": catalog.width(b.get("Model")),
                    }
                    for b in sorted(blades.children(dn), key=lambda b: to_int(b.get("SlotId")))
                ],
                "Stats": strip_counter(power.lookup(dn)),
            }
        )
    logger.debug("sections.inventory.chassis", extra={"count": len(chassis_list)})
    return chassis_list


def build_iom_inventory(raw: RawSnapshot, catalog: CatalogLookup) -> List[Dict[str, Any]]:
    """Build the IOM (fabric extender) inventory with fabric-facing ports."""
    firmware = raw.index("firmwareRunning")
    fabric_ports = raw.index("etherSwitchIntFIo")
    ioms: List[Dict[str, Any]] = []
    for iom in raw.records("equipmentIOCard"):
        dn = record_dn(iom)
        ioms.append(
            {
                "ChassisId": text(iom, "ChassisId"),
                "Id": text(iom, "Id"),
                "Dn": dn,
                "Side": text(iom, "Side"),
                "Fabric": text(iom, "SwitchId"),
                "Model": catalog.model_name(iom.get("Model")),
                "Serial": text(iom, "Serial"),
                "OperState": text(iom, "OperState"),
                "Firmware": firmware_map(firmware, dn),
                "FabricPorts": [
                    {
                        "PortId": to_int(p.get("PortId")),
                        "OperState": text(p, "OperState"),
                        "Peer": render_port(
                            p.get("PeerSlotId"), p.get("PeerPortId"), p.get("SwitchId")
                        ),
                    }
                    for p in fabric_ports.descendants(dn)
                ],
            }
        )
    return ioms


# ---------------- Servers ----------------


def _memory(record: RawRecord) -> Dict[str, Any]:
    capacity = to_number(record.get("Capacity"))
    populated = capacity is not None and capacity > 0 and record.get("Presence") != "missing"
    return {
        "Location": text(record, "Location", rn_of(record_dn(record))),
        "CapacityGb": to_gb(capacity) if populated else EMPTY_SLOT,
        "Clock": text(record, "Clock"),
        "Type": text(record, "Type"),
    }


def _disk(record: RawRecord, catalog: CatalogLookup) -> Dict[str, Any]:
    size = to_gb(record.get("Size"))
    return {
        "Id": text(record, "Id"),
        "Vendor": text(record, "Vendor"),
        "Model": text(record, "Model"),
        "Serial": text(record, "Serial"),
        "SizeGb": size if size else EMPTY_SLOT,
        "Speed": catalog.disk_speed(record.get("Model")),
        "OperState": text(record, "DiskState", text(record, "OperState")),
    }


def _profile_name(raw: RawSnapshot, assigned_dn: str) -> str:
    if not assigned_dn:
        return ""
    profile = raw.index("lsServer").get(assigned_dn)
    if profile and profile.get("Name"):
        return str(profile.get("Name"))
    rn = rn_of(assigned_dn)
    return rn[3:] if rn.startswith("ls-") else rn


def _server(
    record: RawRecord,
    kind: str,
    raw: RawSnapshot,
    catalog: CatalogLookup,
    power: CounterIndex,
    temperature: CounterIndex,
    topology: TopologyResolver,
) -> Dict[str, Any]:
    dn = record_dn(record)
    processors = raw.index("processorUnit").descendants(dn)
    memory = raw.index("memoryUnit").descendants(dn)
    adapters = raw.index("adaptorUnit").descendants(dn)
    disks = raw.index("storageLocalDisk").descendants(dn)
    return {
        "Dn": dn,
        "Kind": kind,
        "ChassisId": text(record, "ChassisId", ""),
        "SlotId": to_int(record.get("SlotId") or record.get("Id")),
        "Model": catalog.model_name(record.get("Model")),
        "Pid": text(record, "Model"),
        "Width": catalog.width(record.get("Model")),
        "Serial": text(record, "Serial"),
        "Uuid": text(record, "Uuid"),
        "OperState": text(record, "OperState"),
        "Power": text(record, "OperPower"),
        "Association": text(record, "Association", "none"),
        "Profile": _profile_name(raw, str(record.get("AssignedToDn") or "")),
        "CpuCount": to_int(record.get("NumOfCpus")),
        "CoreCount": to_int(record.get("NumOfCores")),
        "Processors": [
            {
                "Id": text(p, "Id"),
                "Model": text(p, "Model"),
                "Speed": text(p, "Speed"),
                "Cores": to_int(p.get("Cores")),
                "Threads": to_int(p.get("Threads")),
            }
            for p in processors
        ],
        "MemoryGb": to_gb(record.get("TotalMemory")) or 0,
        "Memory": [_memory(m) for m in memory],
        "Adapters": [
            {
                "Id": text(a, "Id"),
                "Model": catalog.model_name(a.get("Model")),
                "Serial": text(a, "Serial"),
                "OperState": text(a, "OperState"),
            }
            for a in adapters
        ],
        "Disks": [_disk(d, catalog) for d in disks],
        "Firmware": firmware_map(raw.index("firmwareRunning"), dn),
        "VifPaths": [p.model_dump() for p in topology.resolve(dn)],
        "Stats": {
            "Power": strip_counter(power.lookup(dn)),
            "Temperature": strip_counter(temperature.lookup(dn)),
        },
    }


def build_server_inventory(
    raw: RawSnapshot,
    catalog: CatalogLookup,
    counters: RecordFilter,
    topology: TopologyResolver,
) -> Dict[str, List[Dict[str, Any]]]:
    """Build blade and rack-unit inventory including VIF paths and counters."""
    power = counters.index(
        _SERVER_DN, r"^power-stats$", SERVER_POWER_FIELDS, DeviceClass.SERVER
    )
    temperature = counters.index(
        _SERVER_DN, r"^temp-stats$", SERVER_TEMP_FIELDS, DeviceClass.SERVER
    )
    blades = [
        _server(b, "blade", raw, catalog, power, temperature, topology)
        for b in raw.records("computeBlade")
    ]
    racks = [
        _server(r, "rack", raw, catalog, power, temperature, topology)
        for r in raw.records("computeRackUnit")
    ]
    blades.sort(key=lambda s: (to_int(s["ChassisId"]), s["SlotId"]))
    racks.sort(key=lambda s: s["SlotId"])
    logger.debug(
        "sections.inventory.servers",
        extra={"blades": len(blades), "rack_units": len(racks)},
    )
    return {"Blades": blades, "RackUnits": racks}


__all__ = [
    "build_chassis_inventory",
    "build_fi_inventory",
    "build_iom_inventory",
    "build_server_inventory",
]
