"""Request context attached to every change log entry.

The context lives in a ContextVar so concurrent requests never see each
other's values. HTTP requests populate it through ChangeLogContextMiddleware;
jobs, scripts and tests use `request_context()` directly.

Usage:
    with request_context(actor_id=str(user.id), ip_address="10.0.0.1"):
        await observer.updated(post)
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextvars import ContextVar
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    """Who triggered a change and from which request."""

    actor_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    method: str | None = None
    path: str | None = None


_EMPTY = RequestContext()

_current: ContextVar[RequestContext] = ContextVar("change_log_request_context", default=_EMPTY)


def current_context() -> RequestContext:
    """The context bound to the running task (empty when none was bound)."""
    return _current.get()


@contextlib.contextmanager
def request_context(
    actor_id: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    method: str | None = None,
    path: str | None = None,
) -> Iterator[RequestContext]:
    """Bind a request context for the duration of the block."""
    ctx = RequestContext(
        actor_id=actor_id,
        ip_address=ip_address,
        user_agent=user_agent,
        method=method,
        path=path,
    )
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


def set_actor(actor_id: str | None) -> None:
    """Set the acting principal on the current context.

    Meant for authentication dependencies that resolve the user after the
    middleware already bound the request context.
    """
    _current.set(replace(_current.get(), actor_id=actor_id))


def normalize_method(method: str | None) -> str | None:
    return method.upper() if method else None


def normalize_path(path: str | None) -> str | None:
    """Store the path only, always with a single leading slash."""
    if path is None:
        return None
    trimmed = path.strip("/")
    return f"/{trimmed}" if trimmed else "/"
