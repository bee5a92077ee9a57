"""Binds the HTTP request to the change log context.

Every entry captured while a request is being handled gets the caller's IP,
user agent, method and path, plus the actor resolved from the request.

    app.add_middleware(ChangeLogContextMiddleware)

By default the actor is read from ``request.state.user_id``, which an
authentication middleware registered *after* this one (so it runs first)
is expected to set. Pass ``actor_resolver`` to read it from elsewhere.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from changelogs.context import request_context

logger = logging.getLogger(__name__)

ActorResolver = Callable[[Request], "str | None"]


def default_actor_resolver(request: Request) -> str | None:
    actor = getattr(request.state, "user_id", None)
    return str(actor) if actor is not None else None


class ChangeLogContextMiddleware(BaseHTTPMiddleware):
    """Populates `changelogs.context` for the duration of each request."""

    def __init__(self, app: ASGIApp, actor_resolver: ActorResolver | None = None) -> None:
        super().__init__(app)
        self.actor_resolver = actor_resolver or default_actor_resolver

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        client = request.client
        with request_context(
            actor_id=self.actor_resolver(request),
            ip_address=client.host if client else None,
            user_agent=request.headers.get("user-agent"),
            method=request.method,
            path=request.url.path,
        ):
            return await call_next(request)
