"""
Tests for the JSON snapshot session.
"""

import json

import pytest

from ucs_report.adapters.snapshot import SnapshotSession


@pytest.mark.asyncio
async def test_snapshot_normalizes_keys_and_rn(tmp_path):
    """camelCase keys become PascalCase and Rn is derived from Dn."""
    path = tmp_path / "dump.json"
    path.write_text(
        json.dumps(
            {
                "classes": {"computeBlade": [{"dn": "sys/chassis-1/blade-1", "operState": "ok"}]},
                "statistics": [{"dn": "sys/chassis-1/stats", "inputPower": "10"}],
            }
        )
    )
    session = SnapshotSession.load(path)
    blades = await session.query_class("computeBlade")
    assert blades == [{"Dn": "sys/chassis-1/blade-1", "OperState": "ok", "Rn": "blade-1"}]
    stats = await session.query_statistics()
    assert stats[0]["Rn"] == "stats"
    assert stats[0]["InputPower"] == "10"


@pytest.mark.asyncio
async def test_snapshot_unknown_classes_are_empty(domain_data):
    """Classes absent from the dump read as empty lists."""
    session = SnapshotSession(domain_data)
    found = await session.query_classes(["topSystem", "equipmentFex"])
    assert found["equipmentFex"] == []
    assert found["topSystem"][0]["Name"] == "ucs-lab-01"
    await session.close()
    assert session.closed


def test_snapshot_rejects_bad_layout(tmp_path):
    """A dump whose classes are not an object is rejected."""
    with pytest.raises(ValueError):
        SnapshotSession({"classes": ["computeBlade"]})
    path = tmp_path / "list.json"
    path.write_text("[]")
    with pytest.raises(ValueError):
        SnapshotSession.load(path)
