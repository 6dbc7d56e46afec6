"""Per-domain collection pass.

One :class:`DomainCollector` drives one domain from connection to an
assembled :class:`~ucs_report.domain.models.DomainReport`:

1. open a management session (checkpoint 1)
2. pull every raw class once, plus the statistics dump (checkpoint 12)
3. build the sections in a worker thread, advancing checkpoints 24 to 96
4. close the session, whatever happened

Every external call is bounded by ``call_timeout``. Failures are raised as
:class:`DomainCollectionError` carrying the last checkpoint reached.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, Optional, TypeVar

from ..adapters import CollectionTarget, ManagementSession
from ..domain.catalog import CatalogLookup
from ..domain.dn import record_dn
from ..domain.models import CollectionInfo, DomainReport
from ..domain.raw import RawSnapshot, pull_classes
from ..domain.record_filter import RecordFilter
from ..domain.sections import (
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
    domain_name,
)
from ..domain.topology import TopologyResolver
from ..utils.correlation import set_domain_id
from . import progress as checkpoints
from .progress import ProgressMap

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DomainCollectionError(Exception):
    """A domain's collection pass failed.

    Attributes
    ----------
    domain_id: str
        Configured identifier of the domain.
    phase: int
        Last checkpoint the domain reached.
    cause: BaseException
        The underlying error (also chained as ``__cause__``).
    """

    def __init__(self, domain_id: str, phase: int, cause: BaseException) -> None:
        super().__init__(
            f"{domain_id}: collection failed after checkpoint {phase}: "
            f"{cause or type(cause).__name__}"
        )
        self.domain_id = domain_id
        self.phase = phase
        self.cause = cause


class CollectionCancelled(Exception):
    """Raised inside the build thread once its collector has been cancelled."""


class DomainCollector:
    """Collect one domain into a :class:`DomainReport`.

    Parameters
    ----------
    target: CollectionTarget
        Domain id and the factory opening its management session.
    progress: ProgressMap
        Shared progress map; this collector only writes its own entry.
    skip_telemetry: bool
        Do not pull statistics; counters become zero placeholders.
    call_timeout: Optional[float]
        Upper bound in seconds for each external call (``None`` = unbounded).
    """

    def __init__(
        self,
        target: CollectionTarget,
        progress: ProgressMap,
        *,
        skip_telemetry: bool = False,
        call_timeout: Optional[float] = None,
    ) -> None:
        self._target = target
        self._progress = progress
        self._skip_telemetry = skip_telemetry
        self._call_timeout = call_timeout
        self._phase = checkpoints.START
        # Guards progress writes against a cancellation arriving mid-build
        self._cancelled = threading.Event()
        self._mark_lock = threading.Lock()

    @property
    def domain_id(self) -> str:
        return self._target.domain_id

    @property
    def phase(self) -> int:
        return self._phase

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop further progress writes and abort the build at its next phase."""
        with self._mark_lock:
            self._cancelled.set()

    def _mark(self, checkpoint: int) -> None:
        with self._mark_lock:
            if self._cancelled.is_set():
                raise CollectionCancelled(self.domain_id)
            self._phase = checkpoint
            self._progress.set(self.domain_id, checkpoint)
        logger.debug(
            "collector.phase.complete",
            extra={"domain_id": self.domain_id, "checkpoint": checkpoint},
        )

    async def _bounded(self, call: Awaitable[T]) -> T:
        if self._call_timeout is None:
            return await call
        return await asyncio.wait_for(call, self._call_timeout)

    async def collect(self) -> DomainReport:
        """Run the collection pass and return the assembled report.

        Raises
        ------
        DomainCollectionError
            On any failure; the session is closed before it propagates.
        """
        set_domain_id(self.domain_id)
        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        self._mark(checkpoints.START)
        logger.info("collector.domain.start", extra={"domain_id": self.domain_id})

        session: Optional[ManagementSession] = None
        try:
            session = await self._bounded(self._target.open_session())
            self._mark(checkpoints.CONNECTED)
            raw = await self._pull(session)
            self._mark(checkpoints.RAW_PULLED)
            report = await asyncio.to_thread(self._build, raw, started_at, started)
        except asyncio.CancelledError:
            self.cancel()
            logger.warning(
                "collector.domain.cancelled",
                extra={"domain_id": self.domain_id, "checkpoint": self._phase},
            )
            raise
        except Exception as exc:
            logger.warning(
                "collector.domain.failed",
                extra={
                    "domain_id": self.domain_id,
                    "checkpoint": self._phase,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise DomainCollectionError(self.domain_id, self._phase, exc) from exc
        finally:
            if session is not None:
                await self._close(session)

        logger.info(
            "collector.domain.complete",
            extra={
                "domain_id": self.domain_id,
                "domain_name": report.domain_name,
                "duration_sec": report.Collection.DurationSeconds,
            },
        )
        return report

    async def _close(self, session: ManagementSession) -> None:
        try:
            await self._bounded(session.close())
        except Exception as exc:
            logger.warning(
                "collector.session.close_failed",
                extra={"domain_id": self.domain_id, "error": str(exc)},
            )

    async def _pull(self, session: ManagementSession) -> RawSnapshot:
        classes = await self._bounded(session.query_classes(pull_classes()))
        statistics = []
        if not self._skip_telemetry:
            statistics = await self._bounded(session.query_statistics())
        logger.info(
            "collector.raw.pulled",
            extra={
                "domain_id": self.domain_id,
                "records": sum(len(v) for v in classes.values()),
                "statistics": len(statistics),
            },
        )
        return RawSnapshot(classes=classes, statistics=statistics)

    def _build(self, raw: RawSnapshot, started_at: datetime, started: float) -> DomainReport:
        """Build every section and assemble the report (runs in a worker thread)."""
        catalog = CatalogLookup(
            raw.records("equipmentManufacturingDef"),
            raw.records("equipmentPhysicalDef"),
            raw.records("equipmentLocalDiskDef"),
        )
        counters = RecordFilter(
            raw.statistics,
            telemetry_enabled=not self._skip_telemetry,
            chassis_dns=[record_dn(r) for r in raw.records("equipmentChassis")],
            server_dns=[
                record_dn(r) for r in raw.records("computeBlade", "computeRackUnit")
            ],
        )
        topology = TopologyResolver(raw.records("fabricPathEp"), raw.records("dcxVc"))

        system = build_system(raw)
        fis = build_fi_inventory(raw, catalog, counters)
        self._mark(checkpoints.SYSTEM_BUILT)

        inventory: Dict[str, Any] = {
            "FabricInterconnects": fis,
            "Chassis": build_chassis_inventory(raw, catalog, counters),
            "Ioms": build_iom_inventory(raw, catalog),
            "Servers": build_server_inventory(raw, catalog, counters, topology),
        }
        self._mark(checkpoints.INVENTORY_BUILT)

        policies = build_policies(raw)
        self._mark(checkpoints.POLICIES_BUILT)

        profiles = build_profiles(raw, inventory)
        self._mark(checkpoints.PROFILES_BUILT)

        lan = build_lan(raw, fis, counters)
        self._mark(checkpoints.LAN_BUILT)

        san = build_san(raw, fis)
        self._mark(checkpoints.SAN_BUILT)

        faults = build_faults(raw)
        name = domain_name(raw)
        if not name:
            logger.warning(
                "collector.domain.unnamed",
                extra={"domain_id": self.domain_id},
            )
            name = self.domain_id
        report = DomainReport(
            System=system,
            Inventory=inventory,
            Policies=policies,
            Profiles=profiles,
            Lan=lan,
            San=san,
            Faults=faults,
            Collection=CollectionInfo(
                Domain=name,
                ConfiguredAs=self.domain_id,
                TelemetryCollected=not self._skip_telemetry,
                StartedAt=started_at,
                DurationSeconds=round(time.perf_counter() - started, 3),
            ),
        )
        self._mark(checkpoints.COMPLETE)
        return report
