"""
Tests for VIF path reconstruction.
"""

import logging

from ucs_report.domain.models import NOT_AVAILABLE
from ucs_report.domain.topology import (
    UNPINNED,
    TopologyResolver,
    classify_pinning,
    render_port,
    resolve_paths,
)

BLADE = "sys/chassis-1/blade-1"
PREFIX = BLADE + "/fabric-A/path-1"


def _blade_endpoints():
    return [
        {"Dn": PREFIX + "/mux/ep-fabric", "CType": "mux-fabric", "SwitchId": "A", "SlotId": "1", "PortId": "17"},
        {"Dn": PREFIX + "/fabricA-to-hostpc", "CType": "mux-fabric-host", "ChassisId": "1", "SlotId": "1", "PortId": "3"},
        {"Dn": PREFIX + "/hostpc-to-adaptorpc", "CType": "mux-host-adaptor", "SlotId": "1", "PortId": "2"},
    ]


# ============================================================================
# Port rendering
# ============================================================================


def test_render_port_channel_boundary():
    """1000 is a physical port, 1001 is a port channel."""
    assert render_port(1, 1000, "A") == "A/1/1000"
    assert render_port(1, 1001, "A") == "PC-1001"


def test_render_port_slot_above_threshold_is_port_channel():
    """A slot id above the threshold also denotes a port channel."""
    assert render_port("1290", "0") == "PC-1290"


def test_render_port_missing_data_is_not_available():
    """Missing slot, port or prefix renders as N/A."""
    assert render_port(None, 1) == NOT_AVAILABLE
    assert render_port(1, "") == NOT_AVAILABLE
    assert render_port(1, 2, None) == NOT_AVAILABLE


# ============================================================================
# Pinning
# ============================================================================


def test_classify_pinning_variants():
    """Port channel, unpinned and physical uplink pinning."""
    assert classify_pinning({"SwitchId": "A", "OperBorderPortId": "1025", "OperBorderSlotId": "0"}) == "A/PC-1025"
    assert classify_pinning({"SwitchId": "B", "OperBorderPortId": "0", "OperBorderSlotId": "0"}) == UNPINNED
    assert classify_pinning({"SwitchId": "B", "OperBorderPortId": "49", "OperBorderSlotId": "1"}) == "B/1/49"


# ============================================================================
# Path resolution
# ============================================================================


def test_resolve_blade_path_through_iom():
    """A blade path reports FEX, adapter and FI server port hops."""
    circuits = [
        {"Dn": PREFIX + "/vc-745", "Id": "745", "VnicDn": "org-root/ls-esx01/ether-eth0", "OperState": "active", "LinkState": "up", "SwitchId": "A", "OperBorderPortId": "49", "OperBorderSlotId": "1"},
    ]
    (path,) = resolve_paths(BLADE, _blade_endpoints(), circuits)
    assert path.Name == "A-path-1"
    assert path.Fabric == "A"
    assert path.Adapter == "1/2"
    assert path.Fex == "1/1/3"
    assert path.FiServerPort == "A/1/17"
    assert path.Hops == 2
    (vc,) = path.Circuits
    assert vc.Name == "ether-eth0"
    assert vc.Vif == "745"
    assert vc.Uplink == "A/1/49"


def test_direct_attach_falls_back_to_endpoint_peer():
    """Without adjacent hops the adapter port comes from the endpoint's peer."""
    endpoints = [
        {"Dn": "sys/rack-unit-1/fabric-B/path-1/mux/ep-fabric", "CType": "mux-fabric", "SwitchId": "B", "SlotId": "1", "PortId": "5", "PeerSlotId": "1", "PeerPortId": "2"},
    ]
    (path,) = resolve_paths("sys/rack-unit-1", endpoints, [])
    assert path.Adapter == "1/2"
    assert path.Fex == NOT_AVAILABLE
    assert path.FiServerPort == "B/1/5"
    assert path.Hops == 0
    assert path.Circuits == []


def test_resolve_never_fails_on_partial_data():
    """Endpoints with no peer data resolve to N/A fields, not errors."""
    endpoints = [{"Dn": "sys/rack-unit-2/fabric-A/path-1/mux/ep-fabric", "CType": "mux-fabric"}]
    (path,) = resolve_paths("sys/rack-unit-2", endpoints, [])
    assert path.Fabric == "A"
    assert path.Adapter == NOT_AVAILABLE
    assert path.FiServerPort == NOT_AVAILABLE


def test_only_host_facing_endpoints_start_paths():
    """Non mux-fabric endpoints and other servers' endpoints are ignored."""
    endpoints = _blade_endpoints() + [
        {"Dn": "sys/chassis-1/blade-2/fabric-A/path-1/mux/ep-fabric", "CType": "mux-fabric", "SwitchId": "A", "SlotId": "1", "PortId": "18"},
    ]
    resolver = TopologyResolver(endpoints, [])
    assert len(resolver.resolve(BLADE)) == 1
    assert resolver.resolve("") == []


def test_port_channel_hops_render_as_pc():
    """Hop ports above the threshold render as port channels."""
    endpoints = _blade_endpoints()
    endpoints[0]["PortId"] = "1283"
    (path,) = resolve_paths(BLADE, endpoints, [])
    assert path.FiServerPort == "PC-1283"


def test_single_fex_hop_leaves_adapter_unresolved():
    """With only the FEX hop present the FEX renders and the adapter is N/A."""
    endpoints = _blade_endpoints()[:2]
    (path,) = resolve_paths(BLADE, endpoints, [])
    assert path.Hops == 1
    assert path.Fex == "1/1/3"
    assert path.Adapter == NOT_AVAILABLE
    assert path.FiServerPort == "A/1/17"


def test_extra_hops_use_first_of_each_kind(caplog):
    """More than two hops: the first FEX and adapter hop by DN win, and it is logged."""
    extra_fex = {
        "Dn": PREFIX + "/fabricA2-to-hostpc",
        "CType": "mux-fabric-host",
        "ChassisId": "1",
        "SlotId": "1",
        "PortId": "9",
    }
    with caplog.at_level(logging.DEBUG, logger="ucs_report.domain.topology"):
        (path,) = resolve_paths(BLADE, [extra_fex] + _blade_endpoints(), [])
    assert path.Hops == 3
    assert path.Fex == "1/1/3"
    assert path.Adapter == "1/2"
    assert any("topology.extra_hops" in r.getMessage() for r in caplog.records)
