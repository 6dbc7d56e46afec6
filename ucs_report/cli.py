"""Command-line interface to collect UCS domain reports.

This CLI loads application configuration, resolves the configured domains
into collection targets, runs the concurrent orchestrator with a logging
progress sink and writes the reports as one JSON document.

Usage
-----
    ucs-report --config config.json --output report.json
    python -m ucs_report.cli --config config.json --skip-telemetry
"""

from __future__ import annotations

import argparse
import asyncio
import json as _json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import orjson as _orjson_mod  # type: ignore[assignment]
except ImportError:  # pragma: no cover - optional dependency
    _orjson_mod = None  # type: ignore[assignment]

from .collector import CollectionOrchestrator
from .config import AppConfig, EnvSettings, build_targets
from .observability import setup_logging
from .utils.partial_results import CollectionResult

logger = logging.getLogger(__name__)


class LoggingProgressSink:
    """Progress sink logging overall percent whenever it changes."""

    def __init__(self) -> None:
        self._last: Optional[int] = None

    def __call__(self, percent: int, running: bool) -> None:
        if percent == self._last and running:
            return
        self._last = percent
        logger.info(
            "collection.progress",
            extra={"percent": percent, "running": running},
        )


def result_document(result: CollectionResult) -> Dict[str, Any]:
    """JSON-ready ``{"domains": ..., "failures": ...}`` document for a run."""
    return {
        "domains": {
            name: report.model_dump(mode="json")
            for name, report in sorted(result.reports.items())
        },
        "failures": [f.as_dict() for f in result.failures],
    }


def write_document(document: Dict[str, Any], output: Optional[Path]) -> None:
    """Write ``document`` to ``output`` (stdout when ``None``)."""
    if _orjson_mod is not None:
        payload = _orjson_mod.dumps(document, option=_orjson_mod.OPT_INDENT_2).decode(
            "utf-8"
        )
    else:
        payload = _json.dumps(document, indent=2)
    if output is None:
        sys.stdout.write(payload + "\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding="utf-8")
    logger.info("report.written", extra={"path": str(output)})


async def _run(config: AppConfig, output: Optional[Path]) -> CollectionResult:
    """Collect every configured domain and write the result document."""
    orchestrator = CollectionOrchestrator(
        max_workers=config.max_workers,
        poll_interval=config.poll_interval_seconds,
        domain_timeout=config.domain_timeout_seconds,
        progress_sink=LoggingProgressSink(),
        skip_telemetry=config.skip_telemetry,
        call_timeout=config.call_timeout_seconds,
    )
    result = await orchestrator.run_all(build_targets(config))
    write_document(result_document(result), output)
    return result


def _apply_overrides(
    config: AppConfig, env: EnvSettings, args: argparse.Namespace
) -> AppConfig:
    updates: Dict[str, Any] = {}
    if env.skip_telemetry is not None:
        updates["skip_telemetry"] = env.skip_telemetry
    if env.max_workers is not None:
        updates["max_workers"] = env.max_workers
    if args.skip_telemetry:
        updates["skip_telemetry"] = True
    if args.max_workers is not None:
        updates["max_workers"] = args.max_workers
    return config.model_copy(update=updates) if updates else config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect UCS domain reports")
    parser.add_argument("--config", help="Path to JSON app config")
    parser.add_argument(
        "--output", "-o", help="Write the JSON report here (default: stdout)"
    )
    parser.add_argument(
        "--skip-telemetry",
        dest="skip_telemetry",
        action="store_true",
        help="Do not pull performance counters (zero placeholders instead)",
    )
    parser.add_argument(
        "--max-workers",
        dest="max_workers",
        type=int,
        help="Maximum number of domains collected concurrently",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[
            "CRITICAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
        ],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    """CLI entrypoint; returns the process exit code.

    Exit codes: ``0`` every domain collected, ``1`` no domain collected,
    ``3`` some domains failed, ``2`` usage or configuration error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    env = EnvSettings()

    # Determine effective log level
    effective_level = args.log_level or (
        "DEBUG" if args.verbose > 0 else env.log_level.upper()
    )
    setup_logging(effective_level)

    config_path = args.config or env.config
    if not config_path:
        parser.error("--config is required (or set UCS_REPORT_CONFIG)")
    try:
        config = _apply_overrides(AppConfig.load(Path(config_path)), env, args)
    except (OSError, ValueError) as exc:
        logger.error("config.load.failed", extra={"path": config_path, "error": str(exc)})
        return 2
    if not config.domains:
        logger.error("config.no_domains", extra={"path": config_path})
        return 2

    output = Path(args.output) if args.output else None
    try:
        result = asyncio.run(_run(config, output))
    except ValueError as exc:
        logger.error("collection.setup.failed", extra={"error": str(exc)})
        return 2

    if result.all_failed:
        return 1
    if result.has_failures:
        return 3
    return 0


if __name__ == "__main__":
    sys.exit(main())
