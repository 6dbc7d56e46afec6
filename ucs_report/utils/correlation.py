"""Lightweight correlation ID utilities for structured logging.

Provides the identifier of the domain being collected via a ContextVar so
that log records emitted from concurrent collector tasks (and the worker
threads they hand section building to) include the same ``domain_id``.
``asyncio`` tasks and ``asyncio.to_thread`` both copy the current context,
so setting the value once at task start is enough.
"""

from __future__ import annotations

from contextvars import ContextVar

_domain_id_var: ContextVar[str] = ContextVar("domain_id", default="")


def set_domain_id(domain_id: str) -> None:
    """Set the current domain correlation id in a context variable."""

    _domain_id_var.set(domain_id)


def get_domain_id() -> str:
    """Return the current domain correlation id, or empty string."""

    return _domain_id_var.get()
