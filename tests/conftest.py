"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so imports like
``import ucs_report`` resolve correctly regardless of the working directory
pytest chooses, and provides a small synthetic UCS domain dump shared by the
section, collector and orchestrator tests.
"""

from __future__ import annotations

import copy
import sys
from pathlib import Path
from typing import Any, Dict

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()


# One chassis with one blade behind an IOM, one directly attached rack unit,
# two fabric interconnects, one boot policy and a couple of faults.
SAMPLE_DOMAIN: Dict[str, Any] = {
    "classes": {
        "topSystem": [
            {
                "Dn": "sys",
                "Name": "ucs-lab-01",
                "Address": "10.0.0.10",
                "Mode": "cluster",
                "SystemUpTime": "120:01:02:03",
            }
        ],
        "mgmtEntity": [
            {"Dn": "sys/mgmt-entity-A", "Id": "A", "Leadership": "primary", "State": "up", "HaReady": "yes"},
            {"Dn": "sys/mgmt-entity-B", "Id": "B", "Leadership": "subordinate", "State": "up", "HaReady": "yes"},
        ],
        "commNtpProvider": [{"Dn": "sys/svc-ext/datetime-svc/ntp-10.0.0.1", "Name": "10.0.0.1"}],
        "commDnsProvider": [{"Dn": "sys/svc-ext/dns-svc/dns-10.0.0.2", "Name": "10.0.0.2"}],
        "commDateTime": [{"Dn": "sys/svc-ext/datetime-svc", "Timezone": "Europe/Berlin"}],
        "firmwareRunning": [
            {"Dn": "sys/mgmt/fw-system", "Type": "system", "Version": "4.2(3d)"},
            {"Dn": "sys/switch-A/mgmt/fw-system", "Type": "switch-software", "Version": "9.3(5)I42(3d)"},
            {"Dn": "sys/chassis-1/blade-1/mgmt/fw-system", "Type": "blade-controller", "Version": "4.2(3d)"},
        ],
        "networkElement": [
            {"Dn": "sys/switch-A", "Id": "A", "Model": "UCS-FI-6454", "Serial": "FDO1", "OobIfIp": "10.0.0.11", "TotalMemory": "65536"},
            {"Dn": "sys/switch-B", "Id": "B", "Model": "UCS-FI-6454", "Serial": "FDO2", "OobIfIp": "10.0.0.12", "TotalMemory": "65536"},
        ],
        "etherPIo": [
            {"Dn": "sys/switch-A/slot-1/switch-ether/port-1", "SwitchId": "A", "SlotId": "1", "PortId": "1", "IfRole": "server", "OperState": "up", "OperSpeed": "25gbps"},
            {"Dn": "sys/switch-A/slot-1/switch-ether/port-49", "SwitchId": "A", "SlotId": "1", "PortId": "49", "IfRole": "network", "OperState": "up", "OperSpeed": "100gbps"},
            {"Dn": "sys/switch-B/slot-1/switch-ether/port-49", "SwitchId": "B", "SlotId": "1", "PortId": "49", "IfRole": "network", "OperState": "up", "OperSpeed": "100gbps"},
        ],
        "fcPIo": [
            {"Dn": "sys/switch-A/slot-1/switch-fc/port-1", "SwitchId": "A", "SlotId": "1", "PortId": "1", "IfRole": "network", "OperState": "up", "Wwn": "20:01:00:de:fb:00:00:01"},
        ],
        "equipmentChassis": [
            {"Dn": "sys/chassis-1", "Id": "1", "Model": "UCSB-5108-AC2", "Serial": "FOX1", "OperState": "operable", "Power": "ok"},
        ],
        "equipmentPsu": [
            {"Dn": "sys/chassis-1/psu-1", "Id": "1", "Model": "UCSB-PSU-2500ACDV", "OperState": "operable"},
        ],
        "equipmentIOCard": [
            {"Dn": "sys/chassis-1/slot-1", "ChassisId": "1", "Id": "1", "Side": "left", "SwitchId": "A", "Model": "UCS-IOM-2408"},
        ],
        "etherSwitchIntFIo": [
            {"Dn": "sys/chassis-1/slot-1/fabric/port-1", "PortId": "1", "PeerSlotId": "1", "PeerPortId": "1", "SwitchId": "A", "OperState": "up"},
        ],
        "computeBlade": [
            {
                "Dn": "sys/chassis-1/blade-1",
                "ChassisId": "1",
                "SlotId": "1",
                "Model": "UCSB-B200-M5",
                "Serial": "FCH1",
                "TotalMemory": "32768",
                "NumOfCpus": "2",
                "NumOfCores": "40",
                "AssignedToDn": "org-root/ls-esx01",
                "Association": "associated",
            }
        ],
        "computeRackUnit": [
            {"Dn": "sys/rack-unit-1", "Id": "1", "Model": "UCSC-C220-M5SX", "Serial": "WZP1", "TotalMemory": "16384"},
        ],
        "processorUnit": [
            {"Dn": "sys/chassis-1/blade-1/board/cpu-1", "Id": "1", "Model": "Intel Xeon Gold 6248", "Cores": "20"},
        ],
        "memoryUnit": [
            {"Dn": "sys/chassis-1/blade-1/board/memarray-1/mem-1", "Location": "DIMM_A1", "Capacity": "32768", "Presence": "equipped"},
            {"Dn": "sys/chassis-1/blade-1/board/memarray-1/mem-2", "Location": "DIMM_A2", "Capacity": "unspecified", "Presence": "missing"},
        ],
        "adaptorUnit": [
            {"Dn": "sys/chassis-1/blade-1/adaptor-1", "Id": "1", "Model": "UCSB-MLOM-40G-04"},
        ],
        "storageLocalDisk": [
            {"Dn": "sys/rack-unit-1/board/storage-SAS-1/disk-1", "Id": "1", "Model": "ST1200MM0099", "Size": "1143455"},
        ],
        "fabricPathEp": [
            {"Dn": "sys/chassis-1/blade-1/fabric-A/path-1/mux/ep-fabric", "CType": "mux-fabric", "SwitchId": "A", "SlotId": "1", "PortId": "1"},
            {"Dn": "sys/chassis-1/blade-1/fabric-A/path-1/fabricA-to-hostpc", "Rn": "fabricA-to-hostpc", "CType": "mux-fabric-host", "ChassisId": "1", "SlotId": "1", "PortId": "1"},
            {"Dn": "sys/chassis-1/blade-1/fabric-A/path-1/hostpc-to-adaptorpc", "Rn": "hostpc-to-adaptorpc", "CType": "mux-host-adaptor", "SlotId": "1", "PortId": "1"},
            {"Dn": "sys/rack-unit-1/fabric-A/path-1/mux/ep-fabric", "CType": "mux-fabric", "SwitchId": "A", "SlotId": "1", "PortId": "2", "PeerSlotId": "1", "PeerPortId": "1"},
        ],
        "dcxVc": [
            {"Dn": "sys/chassis-1/blade-1/fabric-A/path-1/vc-745", "Id": "745", "VnicDn": "org-root/ls-esx01/ether-eth0", "SwitchId": "A", "OperState": "active", "LinkState": "up", "OperBorderPortId": "1", "OperBorderSlotId": "0"},
        ],
        "lsbootPolicy": [
            {"Dn": "org-root/boot-policy-esx", "Name": "esx", "BootMode": "legacy", "RebootOnUpdate": "no"},
        ],
        "lsbootVirtualMedia": [
            {"Dn": "org-root/boot-policy-esx/read-only-vm", "Type": "virtual-media", "Order": "1", "Access": "read-only"},
        ],
        "lsbootLan": [
            {"Dn": "org-root/boot-policy-esx/lan", "Type": "lan", "Order": "2"},
        ],
        "lsbootLanImagePath": [
            {"Dn": "org-root/boot-policy-esx/lan/path-primary", "Type": "primary", "VnicName": "eth0"},
        ],
        "macpoolPool": [
            {"Dn": "org-root/mac-pool-default", "Name": "default", "Size": "256", "Assigned": "2"},
        ],
        "lsServer": [
            {"Dn": "org-root/ls-esx01", "Name": "esx01", "Type": "instance", "AssocState": "associated", "PnDn": "sys/chassis-1/blade-1", "BootPolicyName": "esx", "SrcTemplName": "esx-tmpl"},
            {"Dn": "org-root/ls-esx-tmpl", "Name": "esx-tmpl", "Type": "updating-template"},
        ],
        "vnicEther": [
            {"Dn": "org-root/ls-esx01/ether-eth0", "Name": "eth0", "Addr": "00:25:B5:00:00:01", "SwitchId": "A", "Order": "1"},
        ],
        "vnicEtherIf": [
            {"Dn": "org-root/ls-esx01/ether-eth0/if-vlan10", "Name": "vlan10"},
        ],
        "fabricVlan": [
            {"Dn": "fabric/lan/net-vlan10", "Name": "vlan10", "Id": "10"},
            {"Dn": "fabric/lan/net-default", "Name": "default", "Id": "1", "DefaultNet": "yes"},
        ],
        "fabricVsan": [
            {"Dn": "fabric/san/A/net-vsan100", "Name": "vsan100", "Id": "100", "SwitchId": "A"},
        ],
        "faultInst": [
            {"Dn": "sys/chassis-1/psu-1/fault-F0369", "Severity": "minor", "Code": "F0369", "Created": "2026-01-02T10:00:00"},
            {"Dn": "sys/switch-A/fault-F0276", "Severity": "critical", "Code": "F0276", "Created": "2026-01-03T10:00:00"},
            {"Dn": "sys/switch-B/fault-F0276", "Severity": "critical", "Code": "F0276", "Created": "2026-01-01T10:00:00"},
        ],
        "equipmentManufacturingDef": [
            {"Dn": "capabilities/blade-UCSB-B200-M5/manuf", "Pid": "UCSB-B200-M5", "Name": "Cisco UCS B200 M5"},
        ],
        "equipmentPhysicalDef": [
            {"Dn": "capabilities/blade-UCSB-B200-M5/physical", "Width": "8.0"},
        ],
        "equipmentLocalDiskDef": [
            {"Dn": "capabilities/disk-ST1200MM0099", "Model": "ST1200MM0099", "RotationalSpeed": "10000"},
        ],
    },
    "statistics": [
        {"Dn": "sys/chassis-1/stats", "Rn": "stats", "InputPower": "812.5", "OutputPower": "700"},
        {"Dn": "sys/chassis-1/blade-1/board/power-stats", "Rn": "power-stats", "ConsumedPower": "210"},
        {"Dn": "sys/switch-A/slot-1/switch-ether/port-49/rx-stats", "Rn": "rx-stats", "TotalBytes": "1000"},
    ],
}


@pytest.fixture
def domain_data() -> Dict[str, Any]:
    """A fresh deep copy of the sample domain dump."""
    return copy.deepcopy(SAMPLE_DOMAIN)
