"""Collection layer: per-domain collectors and the concurrent orchestrator."""

from .domain_collector import CollectionCancelled, DomainCollectionError, DomainCollector
from .orchestrator import CollectionOrchestrator, ProgressSink
from .progress import ProgressMap

__all__ = [
    "CollectionCancelled",
    "CollectionOrchestrator",
    "DomainCollectionError",
    "DomainCollector",
    "ProgressMap",
    "ProgressSink",
]
