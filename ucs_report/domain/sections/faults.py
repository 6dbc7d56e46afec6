"""Faults section: active fault instances grouped and ordered by severity."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..dn import record_dn
from ..raw import RawSnapshot
from .common import text

logger = logging.getLogger(__name__)

# Most severe first; anything else sorts after "info"
SEVERITIES = ("critical", "major", "minor", "warning", "condition", "info")
_RANK = {name: rank for rank, name in enumerate(SEVERITIES)}


def _rank(severity: str) -> int:
    return _RANK.get(severity, len(SEVERITIES))


def build_faults(raw: RawSnapshot) -> Dict[str, Any]:
    """Build the ``Faults`` section.

    ``Counts`` holds one entry per known severity (zero when absent) plus any
    other severity seen. ``Items`` are ordered by severity, then by creation
    time, oldest first.
    """
    counts: Dict[str, int] = {name: 0 for name in SEVERITIES}
    items: List[Dict[str, Any]] = []
    for fault in raw.records("faultInst"):
        severity = text(fault, "Severity", "info")
        counts[severity] = counts.get(severity, 0) + 1
        items.append(
            {
                "Severity": severity,
                "Code": text(fault, "Code"),
                "Created": text(fault, "Created", ""),
                "Dn": record_dn(fault),
                "Cause": text(fault, "Cause"),
                "Description": text(fault, "Descr", ""),
                "Acknowledged": text(fault, "Ack", "no"),
                "Occurrences": fault.get("Occur") or "1",
            }
        )
    items.sort(key=lambda f: (_rank(f["Severity"]), f["Created"]))
    if counts.get("critical"):
        logger.info("sections.faults.critical", extra={"count": counts["critical"]})
    return {"Counts": counts, "Items": items}
