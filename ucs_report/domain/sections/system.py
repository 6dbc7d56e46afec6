"""System section: domain identity, management cluster and base services."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..raw import RawSnapshot
from .common import text

logger = logging.getLogger(__name__)

UCSM_FIRMWARE_DN = "sys/mgmt/fw-system"


def domain_name(raw: RawSnapshot) -> str:
    """The domain's self-reported system name, ``""`` when unknown."""
    return str(raw.first("topSystem").get("Name") or "")


def build_system(raw: RawSnapshot) -> Dict[str, Any]:
    """Build the ``System`` section.

    Combines ``topSystem`` identity with the UCS Manager firmware version,
    the management cluster state (``mgmtEntity``), time and name services and
    backup/export policies.
    """
    top = raw.first("topSystem")
    firmware = raw.index("firmwareRunning").get(UCSM_FIRMWARE_DN) or {}

    members = [
        {
            "Id": text(m, "Id"),
            "Leadership": text(m, "Leadership"),
            "State": text(m, "State"),
            "HaReady": text(m, "HaReady"),
            "Chassis1": text(m, "Chassis1"),
            "Chassis2": text(m, "Chassis2"),
            "Chassis3": text(m, "Chassis3"),
        }
        for m in raw.records("mgmtEntity")
    ]
    ha_ready = bool(members) and all(m["HaReady"] == "yes" for m in members)

    date_time = raw.first("commDateTime")
    backups = [
        {
            "Name": text(p, "Name"),
            "Type": "backup",
            "AdminState": text(p, "AdminState"),
            "Schedule": text(p, "Schedule"),
            "Host": text(p, "Host"),
            "Protocol": text(p, "Proto"),
        }
        for p in raw.records("mgmtBackupPolicy")
    ] + [
        {
            "Name": text(p, "Name"),
            "Type": "config-export",
            "AdminState": text(p, "AdminState"),
            "Schedule": text(p, "Schedule"),
            "Host": text(p, "Host"),
            "Protocol": text(p, "Proto"),
        }
        for p in raw.records("mgmtCfgExportPolicy")
    ]

    section = {
        "Name": text(top, "Name"),
        "Address": text(top, "Address"),
        "Mode": text(top, "Mode"),
        "Uptime": text(top, "SystemUpTime"),
        "CurrentTime": text(top, "CurrentTime"),
        "Version": text(firmware, "Version"),
        "HaReady": "yes" if ha_ready else "no",
        "Management": members,
        "Timezone": text(date_time, "Timezone"),
        "Ntp": [text(p, "Name") for p in raw.records("commNtpProvider")],
        "Dns": [text(p, "Name") for p in raw.records("commDnsProvider")],
        "BackupPolicies": backups,
        "CallHome": text(raw.first("callhomeEp"), "AdminState"),
    }
    logger.debug("sections.system.built", extra={"domain_name": section["Name"]})
    return section
