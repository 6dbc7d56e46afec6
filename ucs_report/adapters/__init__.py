"""Management-API session interfaces and registry.

A collection pass talks to a domain through a :class:`ManagementSession`.
Sessions are opened by a per-domain factory so that the collector owns the
session lifecycle (open, query, close) and the orchestrator only deals with
``(domain_id, factory)`` targets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from ..domain.dn import RawRecord

logger = logging.getLogger(__name__)


class ManagementApiError(Exception):
    """Error reported by the management API itself (not the transport).

    Attributes
    ----------
    code: Optional[str]
        API error code (``errorCode`` attribute of an XML API response).
    method: Optional[str]
        API method that failed (``aaaLogin``, ``configResolveClass``, ...).
    """

    def __init__(
        self, message: str, *, code: Optional[str] = None, method: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.method = method

    @property
    def is_auth_error(self) -> bool:
        return self.method == "aaaLogin" or self.code in ("551", "552", "572")


class ManagementSession(Protocol):
    """Protocol for an open, authenticated management-API session."""

    async def query_class(self, class_id: str) -> List[RawRecord]:
        """Return every record of ``class_id`` (empty when none exist)."""
        raise NotImplementedError

    async def query_classes(
        self, class_ids: Sequence[str]
    ) -> Dict[str, List[RawRecord]]:
        """Return records of several classes keyed by class id."""
        raise NotImplementedError

    async def query_statistics(self) -> List[RawRecord]:
        """Return the bulk statistics dump of the domain."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release the session. Safe to call more than once."""
        raise NotImplementedError


SessionFactory = Callable[[], Awaitable[ManagementSession]]


@dataclass(frozen=True)
class CollectionTarget:
    """One domain to collect: its configured id and a session factory."""

    domain_id: str
    open_session: SessionFactory


_session_types: Dict[str, Callable[..., SessionFactory]] = {}


def register_session_type(
    type_ids: Sequence[str], builder: Callable[..., SessionFactory]
) -> None:
    """Register ``builder`` to create session factories for ``type_ids``.

    ``builder`` is called with the domain's configuration model and returns
    a zero-argument coroutine function that opens a session.
    """
    for type_id in type_ids:
        _session_types[type_id] = builder


def get_session_builder(type_id: str) -> Callable[..., SessionFactory]:
    """Retrieve the factory builder registered for ``type_id``."""
    try:
        return _session_types[type_id]
    except KeyError:
        raise ValueError(
            f"Unsupported domain type '{type_id}'. "
            f"Known types: {', '.join(get_available_session_types()) or 'none'}"
        ) from None


def get_available_session_types() -> List[str]:
    """Registered session type ids, sorted."""
    return sorted(_session_types)


__all__ = [
    "CollectionTarget",
    "ManagementApiError",
    "ManagementSession",
    "SessionFactory",
    "get_available_session_types",
    "get_session_builder",
    "register_session_type",
]
