# src/logging/context.py
"""Contextual logging support: attach tenant and request_id to log records."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_tenant: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tenant", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    tenant: str | None = None
    request_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(tenant=_tenant.get(), request_id=_request_id.get())


def set_request_context(request_id: str, tenant: str | None = None) -> None:
    """Set request-level context for the current task."""
    _request_id.set(request_id)
    _tenant.set(tenant)


def clear_context() -> None:
    """Reset all context variables."""
    _tenant.set(None)
    _request_id.set(None)


@contextmanager
def request_context(request_id: str, tenant: str | None = None) -> Iterator[LogContext]:
    """Scope a request context, restoring the previous values on exit."""
    tenant_token = _tenant.set(tenant)
    request_token = _request_id.set(request_id)
    try:
        yield get_context()
    finally:
        _request_id.reset(request_token)
        _tenant.reset(tenant_token)
