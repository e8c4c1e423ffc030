# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Per-call ambient context.

This module provides a ContextVar-backed RequestContext carrying a caller
deadline and a correlation id. `Request.send` reads it when explicit arguments
are omitted, so a caller can bound a whole block of calls at once.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    deadline: float | None = None
    correlation_id: str | None = None

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0


_current_request_context: ContextVar[RequestContext | None] = ContextVar("fetchkit_request_context", default=None)


def get_request_context() -> RequestContext:
    """Return the current ambient request context."""
    return _current_request_context.get() or RequestContext()


@contextmanager
def request_context(*, timeout: float | None = None, correlation_id: str | None = None) -> Iterator[RequestContext]:
    """
    Context manager that layers a deadline and/or correlation id onto the ambient context.

    A nested timeout can only shorten the outer deadline. None-valued overrides are
    ignored to preserve outer context values.
    """
    current = get_request_context()
    overrides: dict[str, object] = {}
    if timeout is not None:
        deadline = time.monotonic() + max(0.0, timeout)
        if current.deadline is not None:
            deadline = min(deadline, current.deadline)
        overrides["deadline"] = deadline
    if correlation_id is not None:
        overrides["correlation_id"] = correlation_id
    new_context = replace(current, **overrides) if overrides else current
    token = _current_request_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_request_context.reset(token)


__all__ = [
    "RequestContext",
    "get_request_context",
    "request_context",
]
