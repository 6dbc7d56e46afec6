"""LAN section: uplinks, server ports, port channels, VLANs and QoS."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from ..dn import record_dn
from ..raw import RawSnapshot
from ..record_filter import RecordFilter
from ..topology import render_port
from ..utils.validation import to_int
from .common import PORT_RX_FIELDS, PORT_TX_FIELDS, strip_counter, text

logger = logging.getLogger(__name__)

UPLINK_ROLE = "network"
SERVER_ROLE = "server"


def _ports(fi_inventory: Sequence[Dict[str, Any]], role: str) -> List[Dict[str, Any]]:
    ports = []
    for fi in fi_inventory:
        for port in fi.get("Ports", []):
            if port.get("Transport") == "ether" and port.get("Role") == role:
                ports.append(dict(port, Fabric=fi.get("Id")))
    return ports


def _port_channels(raw: RawSnapshot, counters: RecordFilter) -> List[Dict[str, Any]]:
    members = raw.index("fabricEthLanPcEp")
    rx = counters.index(r"^fabric/lan/[AB]/pc-\d+", r"^rx-stats$", PORT_RX_FIELDS)
    tx = counters.index(r"^fabric/lan/[AB]/pc-\d+", r"^tx-stats$", PORT_TX_FIELDS)
    channels = []
    for pc in raw.records("fabricEthLanPc"):
        dn = record_dn(pc)
        channels.append(
            {
                "Name": text(pc, "Name", ""),
                "Dn": dn,
                "Fabric": text(pc, "SwitchId"),
                "PortId": to_int(pc.get("PortId")),
                "OperState": text(pc, "OperState"),
                "Speed": text(pc, "OperSpeed"),
                "Members": [
                    render_port(m.get("SlotId"), m.get("PortId"), pc.get("SwitchId"))
                    for m in members.children(dn)
                ],
                "Stats": {
                    "Rx": strip_counter(rx.lookup(dn)),
                    "Tx": strip_counter(tx.lookup(dn)),
                },
            }
        )
    return channels


def build_lan(
    raw: RawSnapshot,
    fi_inventory: Sequence[Dict[str, Any]],
    counters: RecordFilter,
) -> Dict[str, Any]:
    """Build the ``Lan`` section.

    Uplink and server port lists are selected from ``fi_inventory`` by port
    role so that they carry the same counters as the inventory entries.
    """
    section = {
        "Uplinks": _ports(fi_inventory, UPLINK_ROLE),
        "ServerPorts": _ports(fi_inventory, SERVER_ROLE),
        "PortChannels": _port_channels(raw, counters),
        "Vlans": sorted(
            (
                {
                    "Name": text(v, "Name"),
                    "Id": to_int(v.get("Id")),
                    "Fabric": text(v, "SwitchId", "dual"),
                    "Sharing": text(v, "Sharing", "none"),
                    "Native": text(v, "DefaultNet", "no"),
                }
                for v in raw.records("fabricVlan")
            ),
            key=lambda v: (v["Id"], v["Name"]),
        ),
        "VnicTemplates": [
            {
                "Name": text(t, "Name"),
                "Dn": record_dn(t),
                "Fabric": text(t, "SwitchId"),
                "Type": text(t, "TemplType"),
                "Mtu": to_int(t.get("Mtu")),
                "QosPolicy": text(t, "QosPolicyName", ""),
                "ControlPolicy": text(t, "NwCtrlPolicyName", ""),
                "MacPool": text(t, "IdentPoolName", ""),
            }
            for t in raw.records("vnicLanConnTemp")
        ],
        "Qos": [
            {
                "Priority": text(q, "Priority"),
                "AdminState": text(q, "AdminState", "enabled"),
                "Cos": text(q, "Cos"),
                "Weight": text(q, "Weight"),
                "Mtu": text(q, "Mtu"),
                "Drop": text(q, "Drop"),
            }
            for q in raw.records("qosclassEthBE", "qosclassEthClassified")
        ],
        "ControlPolicies": [
            {
                "Name": text(c, "Name"),
                "Dn": record_dn(c),
                "Cdp": text(c, "Cdp"),
                "UplinkFailAction": text(c, "UplinkFailAction"),
                "MacRegisterMode": text(c, "MacRegisterMode"),
            }
            for c in raw.records("nwctrlDefinition")
        ],
    }
    logger.debug(
        "sections.lan.built",
        extra={
            "uplinks": len(section["Uplinks"]),
            "vlans": len(section["Vlans"]),
        },
    )
    return section
