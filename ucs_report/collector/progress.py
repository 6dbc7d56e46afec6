"""Per-domain progress checkpoints shared between collectors and the poller."""

from __future__ import annotations

import threading
from typing import Dict, Iterable

# Checkpoints a domain passes through, in order
START = 0
CONNECTED = 1
RAW_PULLED = 12
SYSTEM_BUILT = 24
INVENTORY_BUILT = 36
POLICIES_BUILT = 48
PROFILES_BUILT = 60
LAN_BUILT = 72
SAN_BUILT = 84
COMPLETE = 96

CHECKPOINTS = (
    START,
    CONNECTED,
    RAW_PULLED,
    SYSTEM_BUILT,
    INVENTORY_BUILT,
    POLICIES_BUILT,
    PROFILES_BUILT,
    LAN_BUILT,
    SAN_BUILT,
    COMPLETE,
)


class ProgressMap:
    """Thread-safe ``domain id -> checkpoint`` map.

    Collectors write from the event loop and from the worker threads that
    build sections; the orchestrator reads a consistent snapshot while
    polling.
    """

    def __init__(self, domain_ids: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, int] = {domain_id: START for domain_id in domain_ids}

    def set(self, domain_id: str, checkpoint: int) -> None:
        if checkpoint not in CHECKPOINTS:
            raise ValueError(f"unknown progress checkpoint: {checkpoint}")
        with self._lock:
            self._values[domain_id] = checkpoint

    def get(self, domain_id: str) -> int:
        with self._lock:
            return self._values.get(domain_id, START)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._values)

    def mean(self) -> float:
        """Arithmetic mean of all checkpoints, ``0.0`` when empty."""
        with self._lock:
            if not self._values:
                return 0.0
            return sum(self._values.values()) / len(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
