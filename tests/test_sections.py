"""
Tests for the section builders over a small synthetic domain.
"""

import pytest

from ucs_report.domain.catalog import CatalogLookup, strip_vendor
from ucs_report.domain.raw import RawSnapshot
from ucs_report.domain.record_filter import RecordFilter
from ucs_report.domain.sections import (
    build_chassis_inventory,
    build_faults,
    build_fi_inventory,
    build_iom_inventory,
    build_lan,
    build_policies,
    build_profiles,
    build_san,
    build_server_inventory,
    build_system,
)
from ucs_report.domain.sections.common import EMPTY_SLOT
from ucs_report.domain.topology import TopologyResolver


@pytest.fixture
def raw(domain_data):
    return RawSnapshot(
        classes=domain_data["classes"], statistics=domain_data["statistics"]
    )


@pytest.fixture
def catalog(raw):
    return CatalogLookup(
        raw.records("equipmentManufacturingDef"),
        raw.records("equipmentPhysicalDef"),
        raw.records("equipmentLocalDiskDef"),
    )


@pytest.fixture
def counters(raw):
    return RecordFilter(raw.statistics)


@pytest.fixture
def topology(raw):
    return TopologyResolver(raw.records("fabricPathEp"), raw.records("dcxVc"))


# ============================================================================
# Catalog
# ============================================================================


def test_strip_vendor_prefix():
    """Catalog names drop the vendor prefix."""
    assert strip_vendor("Cisco UCS B200 M5") == "B200 M5"
    assert strip_vendor("Cisco 6454 Fabric Interconnect") == "6454 Fabric Interconnect"
    assert strip_vendor(None) == "N/A"


def test_catalog_lookups(catalog):
    """Model names, widths and disk speeds come from the catalog."""
    assert catalog.model_name("UCSB-B200-M5") == "B200 M5"
    assert catalog.model_name("UNKNOWN-PID") == "UNKNOWN-PID"
    assert catalog.width("UCSB-B200-M5") == "8.0"
    assert catalog.width("UNKNOWN-PID") == "N/A"
    assert catalog.disk_speed("ST1200MM0099") == "10000"


# ============================================================================
# System and inventory
# ============================================================================


def test_build_system(raw):
    """System identity, firmware and services."""
    system = build_system(raw)
    assert system["Name"] == "ucs-lab-01"
    assert system["Version"] == "4.2(3d)"
    assert system["HaReady"] == "yes"
    assert [m["Leadership"] for m in system["Management"]] == ["primary", "subordinate"]
    assert system["Ntp"] == ["10.0.0.1"]
    assert system["Timezone"] == "Europe/Berlin"


def test_build_fi_inventory(raw, catalog, counters):
    """FIs carry ethernet and FC ports with per-port counters."""
    fis = build_fi_inventory(raw, catalog, counters)
    assert [fi["Id"] for fi in fis] == ["A", "B"]
    fi_a = fis[0]
    assert fi_a["MemoryGb"] == 64.0
    assert fi_a["Firmware"] == {"switch-software": "9.3(5)I42(3d)"}
    assert len(fi_a["Ports"]) == 3
    uplink = next(p for p in fi_a["Ports"] if p["PortId"] == 49)
    assert uplink["Role"] == "network"
    assert uplink["Name"] == "A/1/49"
    assert uplink["Stats"]["Rx"]["TotalBytes"] == 1000
    assert uplink["Stats"]["Tx"]["TotalBytes"] == 0
    fc = next(p for p in fi_a["Ports"] if p["Transport"] == "fc")
    assert fc["Wwn"] == "20:01:00:de:fb:00:00:01"


def test_build_chassis_inventory(raw, catalog, counters):
    """Chassis list PSUs, blade slots and power counters."""
    (chassis,) = build_chassis_inventory(raw, catalog, counters)
    assert chassis["Id"] == "1"
    assert len(chassis["Psus"]) == 1
    assert chassis["Blades"] == [
        {"SlotId": 1, "Dn": "sys/chassis-1/blade-1", "Model": "B200 M5", "Width": "8.0"}
    ]
    assert chassis["Stats"] == {"InputPower": 812.5, "OutputPower": 700, "Suspect": "no"}


def test_build_iom_inventory(raw, catalog):
    """IOMs list fabric ports with the FI port they connect to."""
    (iom,) = build_iom_inventory(raw, catalog)
    assert iom["Side"] == "left"
    assert iom["FabricPorts"] == [{"PortId": 1, "OperState": "up", "Peer": "A/1/1"}]


def test_build_server_inventory(raw, catalog, counters, topology):
    """Blades and rack units with memory, disks, profile and VIF paths."""
    servers = build_server_inventory(raw, catalog, counters, topology)
    (blade,) = servers["Blades"]
    (rack,) = servers["RackUnits"]

    assert blade["Model"] == "B200 M5"
    assert blade["Width"] == "8.0"
    assert blade["Profile"] == "esx01"
    assert blade["MemoryGb"] == 32.0
    assert [m["CapacityGb"] for m in blade["Memory"]] == [32.0, EMPTY_SLOT]
    assert blade["Stats"]["Power"]["ConsumedPower"] == 210
    (path,) = blade["VifPaths"]
    assert path["Fex"] == "1/1/1"
    assert path["FiServerPort"] == "A/1/1"
    assert path["Circuits"][0]["Uplink"] == "A/PC-1"

    assert rack["Kind"] == "rack"
    assert rack["Profile"] == ""
    assert rack["Disks"][0]["SizeGb"] == 1116.66
    assert rack["Disks"][0]["Speed"] == "10000"
    assert rack["VifPaths"][0]["Fex"] == "N/A"
    assert rack["VifPaths"][0]["Adapter"] == "1/1"
    assert rack["Stats"]["Power"]["ConsumedPower"] == 0


def test_server_counters_in_placeholder_mode(raw, catalog, topology):
    """Without telemetry every server still gets zeroed counters."""
    counters = RecordFilter(
        [],
        telemetry_enabled=False,
        server_dns=["sys/chassis-1/blade-1", "sys/rack-unit-1"],
    )
    servers = build_server_inventory(raw, catalog, counters, topology)
    for server in servers["Blades"] + servers["RackUnits"]:
        assert server["Stats"]["Power"]["ConsumedPower"] == 0
        assert server["Stats"]["Temperature"]["FmTempSenIo"] == 0


# ============================================================================
# Policies, profiles, LAN, SAN, faults
# ============================================================================


def test_build_policies(raw):
    """Boot policies are assembled and pools carry size/assigned."""
    policies = build_policies(raw)
    (boot,) = policies["BootPolicies"]
    assert [e["Level1"]["Type"] for e in boot["Entries"]] == ["CD/DVD", "lan"]
    (mac,) = policies["Pools"]["Mac"]
    assert (mac["Size"], mac["Assigned"]) == (256, 2)
    assert policies["Pools"]["Server"] == []


def test_build_profiles(raw, catalog, counters, topology):
    """Templates and profiles are split; servers described from inventory."""
    inventory = {"Servers": build_server_inventory(raw, catalog, counters, topology)}
    profiles = build_profiles(raw, inventory)
    assert [t["Name"] for t in profiles["Templates"]] == ["esx-tmpl"]
    (profile,) = profiles["Profiles"]
    assert profile["Server"] == "sys/chassis-1/blade-1"
    assert profile["ServerModel"] == "B200 M5"
    assert profile["Template"] == "esx-tmpl"
    assert profile["Policies"]["BootPolicy"] == "esx"
    assert profile["Vnics"][0]["Vlans"] == ["vlan10"]
    assert profile["Vhbas"] == []


def test_build_lan_uses_fi_inventory(raw, catalog, counters):
    """Uplink and server ports come from the FI inventory."""
    fis = build_fi_inventory(raw, catalog, counters)
    lan = build_lan(raw, fis, counters)
    assert [(p["Fabric"], p["PortId"]) for p in lan["Uplinks"]] == [("A", 49), ("B", 49)]
    assert len(lan["ServerPorts"]) == 1
    assert [v["Id"] for v in lan["Vlans"]] == [1, 10]
    assert lan["PortChannels"] == []


def test_build_san_uses_fi_inventory(raw, catalog, counters):
    """FC uplinks come from the FI inventory."""
    fis = build_fi_inventory(raw, catalog, counters)
    san = build_san(raw, fis)
    assert len(san["Uplinks"]) == 1
    assert san["StoragePorts"] == []
    assert san["Vsans"][0]["Id"] == 100


def test_build_faults_orders_by_severity_then_created(raw):
    """Faults are counted per severity and ordered most severe, oldest first."""
    faults = build_faults(raw)
    assert faults["Counts"]["critical"] == 2
    assert faults["Counts"]["minor"] == 1
    assert faults["Counts"]["major"] == 0
    assert [f["Dn"] for f in faults["Items"]] == [
        "sys/switch-B/fault-F0276",
        "sys/switch-A/fault-F0276",
        "sys/chassis-1/psu-1/fault-F0369",
    ]


def test_builders_on_empty_snapshot_return_empty_shapes():
    """An empty domain yields empty collections, never None or errors."""
    raw = RawSnapshot()
    catalog = CatalogLookup()
    counters = RecordFilter([], telemetry_enabled=False)
    topology = TopologyResolver([], [])
    assert build_fi_inventory(raw, catalog, counters) == []
    assert build_chassis_inventory(raw, catalog, counters) == []
    assert build_server_inventory(raw, catalog, counters, topology) == {
        "Blades": [],
        "RackUnits": [],
    }
    assert build_policies(raw)["BootPolicies"] == []
    assert build_profiles(raw, {}) == {"Templates": [], "Profiles": []}
    assert build_lan(raw, [], counters)["Uplinks"] == []
    assert build_san(raw, [])["Vsans"] == []
    assert build_faults(raw)["Items"] == []
