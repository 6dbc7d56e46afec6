"""Resolve configured domains into collection targets."""

from __future__ import annotations

import logging
from typing import List

from ..adapters import CollectionTarget, get_session_builder
from ..adapters import snapshot as _snapshot  # noqa: F401  registers "snapshot"
from ..adapters import ucsm as _ucsm  # noqa: F401  registers "ucsm-xml"
from .models import AppConfig

logger = logging.getLogger(__name__)


def build_targets(config: AppConfig) -> List[CollectionTarget]:
    """Return one :class:`CollectionTarget` per configured domain.

    Raises
    ------
    ValueError
        If a domain names an unknown session type.
    """
    targets: List[CollectionTarget] = []
    for domain_id, domain in config.domains.items():
        builder = get_session_builder(domain.type)
        targets.append(CollectionTarget(domain_id, builder(domain)))
    logger.info(
        "config.targets.built",
        extra={"domains": [t.domain_id for t in targets]},
    )
    return targets
