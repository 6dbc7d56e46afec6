"""
Partial results handling for multi-domain collection runs.

A run keeps every report it could build while tracking the domains that
failed, so one unreachable or misbehaving domain never costs the operator
the reports of its siblings.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class DomainFailure:
    """
    Information about a domain whose collection failed.

    Attributes
    ----------
    domain_id : str
        Configured identifier of the domain
    error : str
        Error message
    error_type : str
        Type of error (e.g., "auth_error", "timeout", "parse_error")
    retryable : bool
        Whether the collection might succeed if retried
    phase : int
        Last progress checkpoint the domain reached before failing
    """

    domain_id: str
    error: str
    error_type: str
    retryable: bool = False
    phase: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "domain_id": self.domain_id,
            "error": self.error,
            "error_type": self.error_type,
            "retryable": self.retryable,
            "phase": self.phase,
        }


@dataclass
class CollectionResult:
    """
    Result container for a collection run that may partially fail.

    Attributes
    ----------
    reports : Dict[str, Any]
        Successful reports keyed by the domain's self-reported name
    failures : List[DomainFailure]
        One entry per failed domain
    progress : Dict[str, int]
        Final checkpoint reached by every domain
    duration : float
        Wall-clock duration of the run in seconds
    """

    reports: Dict[str, Any] = field(default_factory=dict)
    failures: List[DomainFailure] = field(default_factory=list)
    progress: Dict[str, int] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def success_rate(self) -> float:
        """Calculate success rate (0.0-1.0)."""
        total = len(self.reports) + len(self.failures)
        if total == 0:
            return 0.0
        return len(self.reports) / total

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0

    @property
    def all_succeeded(self) -> bool:
        return len(self.failures) == 0 and len(self.reports) > 0

    @property
    def all_failed(self) -> bool:
        return len(self.reports) == 0 and len(self.failures) > 0


def _classify_one(exc: BaseException) -> str:
    # Imported lazily: the adapters package imports domain modules
    from ..adapters import ManagementApiError

    error_type = "unknown_error"
    if isinstance(exc, ManagementApiError):
        error_type = "auth_error" if exc.is_auth_error else "api_error"
    elif isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status >= 500:
            error_type = "server_error"
        elif status in (401, 403):
            error_type = "auth_error"
        else:
            error_type = "http_error"
    elif isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        error_type = "timeout"
    elif isinstance(exc, (httpx.ConnectError, ConnectionError)):
        error_type = "connection_error"
    elif isinstance(exc, (ValueError, KeyError)):
        error_type = "parse_error"

    return error_type


def classify_error(exc: BaseException) -> str:
    """Classify exception into error type.

    Wrapping errors (``raise ... from exc``) are looked through: the first
    exception of the cause chain with a known type decides.
    """
    current: Optional[BaseException] = exc
    while current is not None:
        error_type = _classify_one(current)
        if error_type != "unknown_error":
            return error_type
        current = current.__cause__
    return "unknown_error"


def is_retryable(error_type: str) -> bool:
    """Determine if an error type is retryable."""
    retryable_types = {
        "timeout",
        "connection_error",
        "server_error",
    }
    return error_type in retryable_types


def failure_from_exception(
    domain_id: str, exc: BaseException, phase: Optional[int] = None
) -> DomainFailure:
    """Build a :class:`DomainFailure`, taking ``phase`` from ``exc`` if present."""
    error_type = classify_error(exc)
    if phase is None:
        phase = int(getattr(exc, "phase", 0) or 0)
    return DomainFailure(
        domain_id=domain_id,
        error=str(exc) or type(exc).__name__,
        error_type=error_type,
        retryable=is_retryable(error_type),
        phase=phase,
    )


def format_failure_summary(result: CollectionResult) -> str:
    """
    Format a human-readable summary of a run's failures.

    Parameters
    ----------
    result : CollectionResult
        The run result to summarize

    Returns
    -------
    str
        Formatted summary string
    """
    if not result.has_failures:
        return f"All {len(result.reports)} domain(s) collected."

    lines = [
        f"Partial results: {len(result.reports)} succeeded, "
        f"{len(result.failures)} failed ({result.success_rate:.1%} success rate)",
    ]

    # Group failures by type
    failures_by_type: Dict[str, List[DomainFailure]] = {}
    for failure in result.failures:
        failures_by_type.setdefault(failure.error_type, []).append(failure)

    for error_type, failures in failures_by_type.items():
        retry_note = " (retryable)" if failures[0].retryable else " (not retryable)"
        lines.append(f"  - {len(failures)} {error_type}{retry_note}")

        identifiers = [f.domain_id for f in failures[:3]]
        if len(failures) > 3:
            identifiers.append(f"... and {len(failures) - 3} more")
        lines.append(f"    Affected: {', '.join(identifiers)}")

    return "\n".join(lines)
