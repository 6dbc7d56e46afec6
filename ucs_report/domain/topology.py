"""Virtual-interface path reconstruction.

The management API exposes a server's fabric connectivity as an unordered,
flat list of path endpoints plus the virtual circuits riding them. For a
chassis blade one path looks like::

    sys/chassis-1/blade-1/fabric-A/path-1/mux/ep-fabric      CType=mux-fabric
    sys/chassis-1/blade-1/fabric-A/path-1/fabricA-to-hostpc  (IOM host port)
    sys/chassis-1/blade-1/fabric-A/path-1/hostpc-to-adaptorpc (adapter port)
    sys/chassis-1/blade-1/fabric-A/path-1/vc-745              (circuit)

The ``mux-fabric`` endpoint is the fabric interconnect's server port. Its
peer-chain prefix (the DN with the last two segments removed) groups the
adjacent hops and circuits. Directly attached rack servers have no adjacent
hops; the endpoint's own peer fields then describe the adapter port.

Port or slot identifiers above :data:`PORT_CHANNEL_THRESHOLD` denote port
channels and render as ``PC-<id>``.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from .dn import DnIndex, RawRecord, record_dn, rn_of, strip_segments
from .models import NOT_AVAILABLE, VifPath, VirtualCircuitView
from .utils.validation import to_int

logger = logging.getLogger(__name__)

PORT_CHANNEL_THRESHOLD = 1000
HOST_FACING_CTYPE = "mux-fabric"
UNPINNED = "unpinned"

_FEX_HOP_RN = re.compile(r"^fabric.*-to-hostpc$")
_ADAPTER_HOP_RN = re.compile(r"^hostpc-to-adaptorpc$")
_CIRCUIT_RN = re.compile(r"^vc-")


def _present(value) -> bool:
    return value is not None and str(value).strip() not in ("", NOT_AVAILABLE)


def render_port(slot, port, *prefix) -> str:
    """Render a hop's port as ``PC-<id>`` or ``[prefix/]slot/port``.

    A port (or slot) identifier greater than 1000 is a port-channel id.
    Missing identifiers render as ``N/A``.

    >>> render_port(1, 1000, "A")
    'A/1/1000'
    >>> render_port(1, 1001, "A")
    'PC-1001'
    """
    if not _present(slot) or not _present(port):
        return NOT_AVAILABLE
    port_id = to_int(port)
    slot_id = to_int(slot)
    if port_id > PORT_CHANNEL_THRESHOLD:
        return f"PC-{port_id}"
    if slot_id > PORT_CHANNEL_THRESHOLD:
        return f"PC-{slot_id}"
    parts = [str(p) for p in prefix if _present(p)]
    if len(parts) != len(prefix):
        return NOT_AVAILABLE
    return "/".join(parts + [str(slot), str(port)])


def classify_pinning(circuit: RawRecord) -> str:
    """Classify a circuit's uplink pinning on the fabric interconnect.

    - port-channel: ``OperBorderPortId > 0`` and ``OperBorderSlotId == 0``
    - unpinned: both zero
    - otherwise a physical uplink ``switch/slot/port``
    """
    switch = circuit.get("SwitchId") or NOT_AVAILABLE
    port_id = to_int(circuit.get("OperBorderPortId"))
    slot_id = to_int(circuit.get("OperBorderSlotId"))
    if port_id > 0 and slot_id == 0:
        return f"{switch}/PC-{port_id}"
    if port_id == 0 and slot_id == 0:
        return UNPINNED
    return f"{switch}/{slot_id}/{port_id}"


def _circuit_view(circuit: RawRecord) -> VirtualCircuitView:
    vnic_dn = str(circuit.get("VnicDn") or "")
    return VirtualCircuitView(
        Name=rn_of(vnic_dn) or NOT_AVAILABLE,
        Vif=str(circuit.get("Id") or NOT_AVAILABLE),
        VnicDn=vnic_dn or NOT_AVAILABLE,
        State=str(circuit.get("OperState") or NOT_AVAILABLE),
        Link=str(circuit.get("LinkState") or NOT_AVAILABLE),
        Uplink=classify_pinning(circuit),
    )


class TopologyResolver:
    """Resolve VIF paths for servers of one domain.

    Parameters
    ----------
    endpoints: Iterable[RawRecord]
        Every fabric path endpoint of the domain.
    circuits: Iterable[RawRecord]
        Every virtual circuit of the domain.

    Both collections are indexed once; :meth:`resolve` is then a set of
    dictionary lookups per server.
    """

    def __init__(
        self, endpoints: Iterable[RawRecord], circuits: Iterable[RawRecord]
    ) -> None:
        self._endpoints = DnIndex(endpoints)
        self._circuits = DnIndex(circuits)

    def resolve(self, server_dn: str) -> List[VifPath]:
        """Return the VIF paths of the server at ``server_dn``."""
        paths: List[VifPath] = []
        if not server_dn:
            return paths
        for endpoint in self._endpoints.descendants(server_dn):
            if endpoint.get("CType") != HOST_FACING_CTYPE:
                continue
            paths.append(self._path(endpoint))
        return paths

    def _hops(self, endpoint: RawRecord, prefix: str) -> List[RawRecord]:
        # Sorted by DN so the first hop of each kind is the same for any input order
        if not prefix:
            return []
        own_dn = record_dn(endpoint)
        hops = [
            hop
            for hop in self._endpoints.descendants(prefix)
            if record_dn(hop) != own_dn
        ]
        return sorted(hops, key=record_dn)

    def _path(self, endpoint: RawRecord) -> VifPath:
        dn = record_dn(endpoint)
        prefix = strip_segments(dn, 2)
        hops = self._hops(endpoint, prefix)
        fex_hop = _first(hops, _FEX_HOP_RN)
        adapter_hop = _first(hops, _ADAPTER_HOP_RN)
        if len(hops) > 2:
            logger.debug(
                "topology.extra_hops", extra={"dn": dn, "hops": len(hops)}
            )

        switch = endpoint.get("SwitchId") or _fabric_of(prefix)
        if hops:
            adapter = (
                render_port(adapter_hop.get("SlotId"), adapter_hop.get("PortId"))
                if adapter_hop
                else NOT_AVAILABLE
            )
            fex = (
                render_port(
                    fex_hop.get("SlotId"),
                    fex_hop.get("PortId"),
                    fex_hop.get("ChassisId"),
                )
                if fex_hop
                else NOT_AVAILABLE
            )
        else:
            # Direct attach: the endpoint's peer is the adapter port itself
            adapter = render_port(endpoint.get("PeerSlotId"), endpoint.get("PeerPortId"))
            fex = NOT_AVAILABLE

        circuits = [
            _circuit_view(vc)
            for vc in (self._circuits.descendants(prefix) if prefix else [])
            if _CIRCUIT_RN.search(rn_of(record_dn(vc)))
        ]
        return VifPath(
            Name=f"{switch}-{rn_of(prefix)}" if prefix else NOT_AVAILABLE,
            Fabric=str(switch or NOT_AVAILABLE),
            Adapter=adapter,
            Fex=fex,
            FiServerPort=render_port(
                endpoint.get("SlotId"), endpoint.get("PortId"), switch
            ),
            Hops=len(hops),
            Circuits=circuits,
        )


def _first(hops: List[RawRecord], pattern: re.Pattern) -> Optional[RawRecord]:
    for hop in hops:
        if pattern.search(str(hop.get("Rn") or rn_of(record_dn(hop)))):
            return hop
    return None


def _fabric_of(prefix: str) -> str:
    match = re.search(r"/fabric-([AB])(?:/|$)", prefix)
    return match.group(1) if match else NOT_AVAILABLE


def resolve_paths(
    server_dn: str,
    endpoints: Iterable[RawRecord],
    circuits: Iterable[RawRecord],
) -> List[VifPath]:
    """One-shot form of :meth:`TopologyResolver.resolve`."""
    return TopologyResolver(endpoints, circuits).resolve(server_dn)


__all__ = [
    "PORT_CHANNEL_THRESHOLD",
    "TopologyResolver",
    "classify_pinning",
    "render_port",
    "resolve_paths",
]
