"""SAN section: FC uplinks, storage ports, VSANs and vHBA templates."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..dn import record_dn
from ..raw import RawSnapshot
from ..topology import render_port
from ..utils.validation import to_int
from .common import text

UPLINK_ROLE = "network"
STORAGE_ROLE = "storage"


def _fc_ports(fi_inventory: Sequence[Dict[str, Any]], role: str) -> List[Dict[str, Any]]:
    return [
        dict(port, Fabric=fi.get("Id"))
        for fi in fi_inventory
        for port in fi.get("Ports", [])
        if port.get("Transport") == "fc" and port.get("Role") == role
    ]


def build_san(raw: RawSnapshot, fi_inventory: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Build the ``San`` section; FC port lists come from ``fi_inventory``."""
    members = raw.index("fabricFcSanPcEp")
    return {
        "Uplinks": _fc_ports(fi_inventory, UPLINK_ROLE),
        "StoragePorts": _fc_ports(fi_inventory, STORAGE_ROLE),
        "Vsans": sorted(
            (
                {
                    "Name": text(v, "Name"),
                    "Id": to_int(v.get("Id")),
                    "FcoeVlan": to_int(v.get("FcoeVlan")),
                    "Fabric": text(v, "SwitchId", "dual"),
                    "ZoningState": text(v, "ZoningState", "disabled"),
                }
                for v in raw.records("fabricVsan")
            ),
            key=lambda v: (v["Id"], v["Name"]),
        ),
        "PortChannels": [
            {
                "Name": text(pc, "Name", ""),
                "Dn": record_dn(pc),
                "Fabric": text(pc, "SwitchId"),
                "PortId": to_int(pc.get("PortId")),
                "OperState": text(pc, "OperState"),
                "Members": [
                    render_port(m.get("SlotId"), m.get("PortId"), pc.get("SwitchId"))
                    for m in members.children(record_dn(pc))
                ],
            }
            for pc in raw.records("fabricFcSanPc")
        ],
        "VhbaTemplates": [
            {
                "Name": text(t, "Name"),
                "Dn": record_dn(t),
                "Fabric": text(t, "SwitchId"),
                "Type": text(t, "TemplType"),
                "WwpnPool": text(t, "IdentPoolName", ""),
                "QosPolicy": text(t, "QosPolicyName", ""),
            }
            for t in raw.records("vnicSanConnTemp")
        ],
    }
