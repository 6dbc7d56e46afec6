"""Profiles section: service profiles and service profile templates."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from ..dn import DnIndex, RawRecord, record_dn
from ..raw import RawSnapshot
from ..utils.validation import to_int
from .common import text

logger = logging.getLogger(__name__)

TEMPLATE_TYPES = ("initial-template", "updating-template")

# Report key -> (configured name attribute, operational name attribute)
POLICY_BINDINGS = {
    "BootPolicy": ("BootPolicyName", "OperBootPolicyName"),
    "HostFirmwarePolicy": ("HostFwPolicyName", "OperHostFwPolicyName"),
    "MaintenancePolicy": ("MaintPolicyName", "OperMaintPolicyName"),
    "LocalDiskPolicy": ("LocalDiskPolicyName", "OperLocalDiskPolicyName"),
    "BiosPolicy": ("BiosProfileName", "OperBiosProfileName"),
}


def _bindings(record: RawRecord) -> Dict[str, str]:
    bound: Dict[str, str] = {}
    for key, (configured, operational) in POLICY_BINDINGS.items():
        bound[key] = text(record, configured, "") or text(record, operational, "")
    return bound


def _vnics(index: DnIndex, ifaces: DnIndex, profile_dn: str) -> List[Dict[str, Any]]:
    vnics = []
    for vnic in index.children(profile_dn):
        vnics.append(
            {
                "Name": text(vnic, "Name"),
                "Mac": text(vnic, "Addr"),
                "Fabric": text(vnic, "SwitchId"),
                "Template": text(vnic, "NwTemplName", ""),
                "AdapterPolicy": text(vnic, "AdaptorProfileName", ""),
                "Mtu": to_int(vnic.get("Mtu")),
                "Order": to_int(vnic.get("Order")),
                "Vlans": [text(i, "Name") for i in ifaces.children(record_dn(vnic))],
            }
        )
    return sorted(vnics, key=lambda v: (v["Order"], v["Name"]))


def _vhbas(index: DnIndex, ifaces: DnIndex, profile_dn: str) -> List[Dict[str, Any]]:
    vhbas = []
    for vhba in index.children(profile_dn):
        vsans = [text(i, "Name") for i in ifaces.children(record_dn(vhba))]
        vhbas.append(
            {
                "Name": text(vhba, "Name"),
                "Wwpn": text(vhba, "Addr"),
                "Fabric": text(vhba, "SwitchId"),
                "Template": text(vhba, "NwTemplName", ""),
                "Order": to_int(vhba.get("Order")),
                "Vsan": vsans[0] if vsans else "",
            }
        )
    return sorted(vhbas, key=lambda v: (v["Order"], v["Name"]))


def _servers_by_dn(inventory: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    servers = inventory.get("Servers") or {}
    found: Dict[str, Dict[str, Any]] = {}
    for group in ("Blades", "RackUnits"):
        for server in servers.get(group, []):
            found[server.get("Dn", "")] = server
    return found


def build_profiles(raw: RawSnapshot, inventory: Mapping[str, Any]) -> Dict[str, Any]:
    """Build the ``Profiles`` section.

    Parameters
    ----------
    raw: RawSnapshot
        The pass's raw records.
    inventory: Mapping[str, Any]
        The already built ``Inventory`` section; associated servers are
        described from it rather than re-joined from raw records.
    """
    vnic_index = raw.index("vnicEther")
    vnic_ifaces = raw.index("vnicEtherIf")
    vhba_index = raw.index("vnicFc")
    vhba_ifaces = raw.index("vnicFcIf")
    servers = _servers_by_dn(inventory)

    templates: List[Dict[str, Any]] = []
    profiles: List[Dict[str, Any]] = []
    for record in raw.records("lsServer"):
        dn = record_dn(record)
        server_dn = text(record, "PnDn", "")
        server = servers.get(server_dn, {})
        node: Dict[str, Any] = {
            "Name": text(record, "Name"),
            "Dn": dn,
            "Type": text(record, "Type"),
            "AssocState": text(record, "AssocState", "unassociated"),
            "ConfigState": text(record, "ConfigState"),
            "Server": server_dn,
            "ServerModel": server.get("Model", ""),
            "Template": text(record, "OperSrcTemplName", "")
            or text(record, "SrcTemplName", ""),
            "Uuid": text(record, "Uuid"),
            "Policies": _bindings(record),
            "Vnics": _vnics(vnic_index, vnic_ifaces, dn),
            "Vhbas": _vhbas(vhba_index, vhba_ifaces, dn),
        }
        if node["Type"] in TEMPLATE_TYPES:
            templates.append(node)
        else:
            profiles.append(node)

    templates.sort(key=lambda n: n["Name"])
    profiles.sort(key=lambda n: n["Name"])
    logger.debug(
        "sections.profiles.built",
        extra={"templates": len(templates), "profiles": len(profiles)},
    )
    return {"Templates": templates, "Profiles": profiles}
