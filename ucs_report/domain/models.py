"""Canonical report model produced by the normalization layer.

These Pydantic models describe the stable outer shape of a domain report.
Section payloads below the top-level keys are JSON-ready dictionaries built
by :mod:`ucs_report.domain.sections`; the model guarantees that every
top-level key exists, defaulting to an empty collection, so that the emitter
and any downstream template can rely on it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..__version__ import __report_model_version__

NOT_AVAILABLE = "N/A"


class VirtualCircuitView(BaseModel):
    """One virtual circuit (VIF) riding a server's fabric path.

    Attributes
    ----------
    Name: str
        vNIC/vHBA name the circuit serves (last segment of ``VnicDn``).
    Vif: str
        Virtual interface identifier.
    Uplink: str
        Fabric-interconnect uplink pinning: ``A/1/25``, ``A/PC-1`` or
        ``unpinned``.
    """

    model_config = ConfigDict(frozen=True)

    Name: str = NOT_AVAILABLE
    Vif: str = NOT_AVAILABLE
    VnicDn: str = NOT_AVAILABLE
    State: str = NOT_AVAILABLE
    Link: str = NOT_AVAILABLE
    Uplink: str = NOT_AVAILABLE


class VifPath(BaseModel):
    """Multi-hop virtual interface path from a server adapter to an FI port.

    Attributes
    ----------
    Name: str
        Path name, ``<fabric>-<path rn>`` (e.g. ``A-path-1``).
    Fabric: str
        Switch side (``A``/``B``).
    Adapter: str
        Adapter port, ``slot/port`` or ``PC-<id>``.
    Fex: str
        Fabric-extender host port, ``chassis/slot/port``, ``PC-<id>`` or
        ``N/A`` for directly attached servers.
    FiServerPort: str
        Fabric-interconnect server port, ``switch/slot/port`` or ``PC-<id>``.
    Hops: int
        Number of intermediate hops found for the path.
    """

    model_config = ConfigDict(frozen=True)

    Name: str
    Fabric: str = NOT_AVAILABLE
    Adapter: str = NOT_AVAILABLE
    Fex: str = NOT_AVAILABLE
    FiServerPort: str = NOT_AVAILABLE
    Hops: int = 0
    Circuits: List[VirtualCircuitView] = Field(default_factory=list)


class CollectionInfo(BaseModel):
    """Metadata about the collection pass that produced a report."""

    model_config = ConfigDict(frozen=True)

    Domain: str = ""
    ConfiguredAs: str = ""
    TelemetryCollected: bool = True
    StartedAt: Optional[datetime] = None
    DurationSeconds: float = 0.0
    ReportModelVersion: str = Field(__report_model_version__)


class DomainReport(BaseModel):
    """Assembled, immutable report for one managed domain.

    Every section is present even when the domain has nothing to report for
    it (``{}``). Sections are composed by the collector from the independent
    results of the section builders and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    System: Dict[str, Any] = Field(default_factory=dict)
    Inventory: Dict[str, Any] = Field(default_factory=dict)
    Policies: Dict[str, Any] = Field(default_factory=dict)
    Profiles: Dict[str, Any] = Field(default_factory=dict)
    Lan: Dict[str, Any] = Field(default_factory=dict)
    San: Dict[str, Any] = Field(default_factory=dict)
    Faults: Dict[str, Any] = Field(default_factory=dict)
    Collection: CollectionInfo = Field(default_factory=CollectionInfo)

    @property
    def domain_name(self) -> str:
        return self.Collection.Domain
