"""Helpers shared by the section builders."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..dn import DnIndex, RawRecord
from ..models import NOT_AVAILABLE

# Sentinel for an unpopulated slot (memory DIMM, disk bay); never a number
EMPTY_SLOT = "empty"

# Counter field lists requested from the statistics snapshot
PORT_RX_FIELDS = ("Dn", "TotalBytes", "TotalPackets", "Suspect")
PORT_TX_FIELDS = ("Dn", "TotalBytes", "TotalPackets", "Suspect")
FC_PORT_FIELDS = ("Dn", "BytesRx", "BytesTx", "PacketsRx", "PacketsTx", "Suspect")
CHASSIS_POWER_FIELDS = ("Dn", "InputPower", "OutputPower", "Suspect")
SERVER_POWER_FIELDS = ("Dn", "ConsumedPower", "InputCurrent", "InputVoltage", "Suspect")
SERVER_TEMP_FIELDS = ("Dn", "FmTempSenIo", "FmTempSenRear", "Suspect")


def text(record: RawRecord, key: str, default: str = NOT_AVAILABLE) -> str:
    """Attribute as text, ``default`` when absent or blank."""
    value = record.get(key)
    if value is None or str(value).strip() == "":
        return default
    return str(value)


def firmware_map(index: DnIndex, dn: str) -> Dict[str, str]:
    """Running firmware below ``dn`` keyed by firmware ``Type``."""
    versions: Dict[str, str] = {}
    for record in index.descendants(dn) if dn else []:
        fw_type = record.get("Type") or record.get("Rn") or "unknown"
        versions.setdefault(str(fw_type), text(record, "Version"))
    return versions


def strip_counter(record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Counter record without its ``Dn``, for embedding under its owner."""
    if not record:
        return {}
    return {k: v for k, v in record.items() if k != "Dn"}
