"""Snapshot session: replay a JSON dump of a domain's records.

Used for offline reports and for tests. The dump layout is::

    {
      "classes": {"computeBlade": [{"Dn": "sys/chassis-1/blade-1", ...}]},
      "statistics": [{"Dn": "sys/chassis-1/stats", "InputPower": "812.0"}]
    }

Keys may use the API's camelCase (``operState``); they are normalized to
PascalCase like the live adapter does.
"""

from __future__ import annotations

import json as _json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

try:
    import orjson as _orjson_mod  # type: ignore[assignment]
except ImportError:  # pragma: no cover - optional dependency
    _orjson_mod = None  # type: ignore[assignment]

from ..domain.dn import RawRecord, rn_of
from . import SessionFactory, register_session_type
from .ucsm import pascal_case

logger = logging.getLogger(__name__)


def _normalize(record: Mapping[str, Any]) -> RawRecord:
    normalized: RawRecord = {pascal_case(str(k)): v for k, v in record.items()}
    if not normalized.get("Rn"):
        normalized["Rn"] = rn_of(str(normalized.get("Dn") or ""))
    return normalized


class SnapshotSession:
    """In-memory session over a previously captured dump.

    Parameters
    ----------
    data: Mapping[str, Any]
        Parsed dump with ``classes`` and optional ``statistics``.
    source: Optional[str]
        Where the dump came from, for logs.
    """

    def __init__(self, data: Mapping[str, Any], source: Optional[str] = None) -> None:
        classes = data.get("classes") or {}
        if not isinstance(classes, Mapping):
            raise ValueError("snapshot 'classes' must be an object keyed by class id")
        self._classes: Dict[str, List[RawRecord]] = {
            str(class_id): [_normalize(r) for r in records or []]
            for class_id, records in classes.items()
        }
        self._statistics: List[RawRecord] = [
            _normalize(r) for r in data.get("statistics") or []
        ]
        self._source = source or "<memory>"
        self.closed = False

    @classmethod
    def load(cls, path: Path) -> "SnapshotSession":
        """Load a dump from a JSON file."""
        raw = path.read_bytes()
        if _orjson_mod is not None:
            data = _orjson_mod.loads(raw)
        else:
            data = _json.loads(raw.decode("utf-8"))
        if not isinstance(data, Mapping):
            raise ValueError(f"snapshot {path} is not a JSON object")
        return cls(data, source=str(path))

    async def query_class(self, class_id: str) -> List[RawRecord]:
        return [dict(r) for r in self._classes.get(class_id, [])]

    async def query_classes(
        self, class_ids: Sequence[str]
    ) -> Dict[str, List[RawRecord]]:
        return {class_id: await self.query_class(class_id) for class_id in class_ids}

    async def query_statistics(self) -> List[RawRecord]:
        return [dict(r) for r in self._statistics]

    async def close(self) -> None:
        self.closed = True
        logger.debug("snapshot.session.closed", extra={"source": self._source})


def session_factory(config: Any) -> SessionFactory:
    """Build a factory loading the dump named by ``config.endpoint``."""
    path = Path(config.endpoint).expanduser()

    async def _open() -> SnapshotSession:
        return SnapshotSession.load(path)

    return _open


register_session_type(("snapshot", "file"), session_factory)
