"""Observability utilities: logging setup.

This module configures standard logging and, if available, integrates
`structlog` for structured logs. The dependency on `structlog` is optional to
keep the base runtime lightweight.

Every record passes through :class:`DomainContextFilter`, which stamps the
domain currently being collected (see :mod:`ucs_report.utils.correlation`)
onto the record so that interleaved output from concurrent collectors stays
attributable.
"""

from __future__ import annotations

import importlib
import logging

from ..utils.correlation import get_domain_id


class DomainContextFilter(logging.Filter):
    """Attach the active ``domain_id`` to each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "domain_id", None):
            record.domain_id = get_domain_id() or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Parameters
    ----------
    level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".

    Behavior
    --------
    - Initializes Python's logging with the requested level.
    - Installs the domain context filter on the root handlers.
    - Quiets httpx/httpcore request logging below WARNING unless DEBUG.
    - If `structlog` is installed, configures it with a filtering bound logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=("%(asctime)s %(levelname)s %(name)s [%(domain_id)s] - %(message)s"),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, DomainContextFilter) for f in handler.filters):
            handler.addFilter(DomainContextFilter())

    # One line per XML API round trip is noise at INFO
    transport_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(transport_level)

    try:  # optional structlog
        structlog = importlib.import_module("structlog")
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        )
    except ModuleNotFoundError:  # pragma: no cover
        pass
