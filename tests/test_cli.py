"""
Tests for the command-line entry point.
"""

import json
import logging

from ucs_report import cli


def _config(tmp_path, domains):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"poll_interval_seconds": 0.01, "domains": domains}))
    return path


def test_cli_writes_report_document(tmp_path, domain_data):
    """A snapshot domain is collected and written as one JSON document."""
    dump = tmp_path / "dump.json"
    dump.write_text(json.dumps(domain_data))
    output = tmp_path / "out" / "report.json"
    code = cli.main(
        [
            "--config",
            str(_config(tmp_path, {"lab": {"endpoint": str(dump), "type": "snapshot"}})),
            "--output",
            str(output),
            "--skip-telemetry",
        ]
    )
    assert code == 0
    document = json.loads(output.read_text())
    assert document["failures"] == []
    report = document["domains"]["ucs-lab-01"]
    assert report["Collection"]["ConfiguredAs"] == "lab"
    assert report["Collection"]["TelemetryCollected"] is False
    assert set(report) >= {"System", "Inventory", "Policies", "Profiles", "Lan", "San", "Faults"}


def test_cli_reports_partial_failure(tmp_path, domain_data):
    """A missing dump fails only its own domain; exit code flags it."""
    dump = tmp_path / "dump.json"
    dump.write_text(json.dumps(domain_data))
    output = tmp_path / "report.json"
    code = cli.main(
        [
            "--config",
            str(
                _config(
                    tmp_path,
                    {
                        "good": {"endpoint": str(dump), "type": "snapshot"},
                        "missing": {"endpoint": str(tmp_path / "nope.json"), "type": "snapshot"},
                    },
                )
            ),
            "--output",
            str(output),
        ]
    )
    assert code == 3
    document = json.loads(output.read_text())
    assert list(document["domains"]) == ["ucs-lab-01"]
    assert document["failures"][0]["domain_id"] == "missing"


def test_cli_rejects_bad_config(tmp_path):
    """Unreadable or empty configurations exit with code 2."""
    assert cli.main(["--config", str(tmp_path / "absent.json")]) == 2
    assert cli.main(["--config", str(_config(tmp_path, {}))]) == 2


def test_logging_progress_sink_logs_changes_only(caplog):
    """The logging sink skips repeated percentages while running."""
    sink = cli.LoggingProgressSink()
    with caplog.at_level(logging.INFO, logger="ucs_report.cli"):
        sink(10, True)
        sink(10, True)
        sink(50, True)
        sink(100, False)
    assert len([r for r in caplog.records if r.getMessage() == "collection.progress"]) == 3
