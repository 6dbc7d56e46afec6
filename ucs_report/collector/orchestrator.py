"""Concurrent multi-domain collection.

The orchestrator runs one :class:`~ucs_report.collector.DomainCollector` per
target as an asyncio task, at most ``max_workers`` at a time, and polls the
shared :class:`~ucs_report.collector.progress.ProgressMap` to report overall
progress until every task has finished. A failing or hanging domain is
isolated: it becomes a :class:`~ucs_report.utils.partial_results.DomainFailure`
and never prevents its siblings from completing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, Iterable, List, Optional

import psutil

from ..adapters import CollectionTarget
from ..domain.models import DomainReport
from ..utils.correlation import set_domain_id
from ..utils.partial_results import (
    CollectionResult,
    failure_from_exception,
    format_failure_summary,
)
from .domain_collector import DomainCollector
from .progress import ProgressMap

logger = logging.getLogger(__name__)

# Called with (overall percent 0..100, whether any domain is still running)
ProgressSink = Callable[[int, bool], None]


class CollectionOrchestrator:
    """Collect many domains concurrently.

    Parameters
    ----------
    max_workers: int
        Maximum number of domains collected at the same time.
    poll_interval: float
        Seconds between progress polls.
    domain_timeout: Optional[float]
        Upper bound in seconds for one domain's whole pass.
    progress_sink: Optional[ProgressSink]
        Receives ``(percent, running)`` after every poll and a final
        ``(100, False)``.
    skip_telemetry: bool
        Passed to every collector.
    call_timeout: Optional[float]
        Per external call bound, passed to every collector.
    """

    def __init__(
        self,
        max_workers: int = 10,
        poll_interval: float = 1.0,
        domain_timeout: Optional[float] = None,
        progress_sink: Optional[ProgressSink] = None,
        skip_telemetry: bool = False,
        call_timeout: Optional[float] = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.max_workers = max_workers
        self.poll_interval = poll_interval
        self.domain_timeout = domain_timeout
        self.progress_sink = progress_sink
        self.skip_telemetry = skip_telemetry
        self.call_timeout = call_timeout

    def _emit(self, percent: float, running: bool) -> None:
        if self.progress_sink is None:
            return
        try:
            self.progress_sink(int(round(percent)), running)
        except Exception as exc:  # a broken sink must not stop the run
            logger.warning("orchestrator.progress_sink.failed", extra={"error": str(exc)})

    async def _collect_one(
        self,
        target: CollectionTarget,
        progress: ProgressMap,
        semaphore: asyncio.Semaphore,
    ) -> DomainReport:
        async with semaphore:
            set_domain_id(target.domain_id)
            collector = DomainCollector(
                target,
                progress,
                skip_telemetry=self.skip_telemetry,
                call_timeout=self.call_timeout,
            )
            if self.domain_timeout is None:
                return await collector.collect()
            return await asyncio.wait_for(collector.collect(), self.domain_timeout)

    async def run_all(self, targets: Iterable[CollectionTarget]) -> CollectionResult:
        """Collect every target and return reports plus per-domain failures.

        Reports are keyed by the domain's self-reported name. A name already
        taken by another domain of the same run is stored as
        ``"<name> (<domain_id>)"``.
        """
        targets = list(targets)
        ids = [t.domain_id for t in targets]
        if len(set(ids)) != len(ids):
            raise ValueError("domain ids must be unique within a run")

        started = time.perf_counter()
        progress = ProgressMap(ids)
        semaphore = asyncio.Semaphore(self.max_workers)
        logger.info(
            "orchestrator.run.start",
            extra={"domains": len(targets), "max_workers": self.max_workers},
        )

        tasks: Dict["asyncio.Task[DomainReport]", CollectionTarget] = {
            asyncio.create_task(
                self._collect_one(t, progress, semaphore), name=f"collect:{t.domain_id}"
            ): t
            for t in targets
        }
        pending = set(tasks)
        try:
            while pending:
                self._emit(progress.mean(), True)
                _, pending = await asyncio.wait(pending, timeout=self.poll_interval)
        finally:
            for task in pending:
                task.cancel()
        self._emit(100, False)

        result = CollectionResult(progress=progress.snapshot())
        for task, target in tasks.items():
            try:
                report = task.result()
            except Exception as exc:
                failure = failure_from_exception(
                    target.domain_id, exc, phase=progress.get(target.domain_id)
                )
                result.failures.append(failure)
                logger.warning(
                    "orchestrator.domain.failed",
                    extra={
                        "domain_id": target.domain_id,
                        "error_type": failure.error_type,
                        "retryable": failure.retryable,
                        "phase": failure.phase,
                        "error": failure.error,
                    },
                )
                continue
            self._store(result, target, report)

        result.duration = round(time.perf_counter() - started, 3)
        memory_mb = None
        try:
            memory_mb = round(psutil.Process().memory_info().rss / 1024 / 1024, 1)
        except (psutil.Error, RuntimeError):  # pragma: no cover
            pass
        logger.info(
            "orchestrator.run.complete",
            extra={
                "reports": len(result.reports),
                "failures": len(result.failures),
                "duration_sec": result.duration,
                "memory_mb": memory_mb,
            },
        )
        if result.has_failures:
            logger.warning("orchestrator.run.partial\n%s", format_failure_summary(result))
        return result

    @staticmethod
    def _store(
        result: CollectionResult, target: CollectionTarget, report: DomainReport
    ) -> None:
        name = report.domain_name or target.domain_id
        if name in result.reports:
            key = f"{name} ({target.domain_id})"
            logger.warning(
                "orchestrator.domain.duplicate_name",
                extra={"domain_name": name, "domain_id": target.domain_id, "stored_as": key},
            )
            name = key
        result.reports[name] = report


def run_collection(
    targets: List[CollectionTarget], **options
) -> CollectionResult:
    """Synchronous entry point: run :meth:`CollectionOrchestrator.run_all`."""
    return asyncio.run(CollectionOrchestrator(**options).run_all(targets))
