"""Blame context middleware.

Records the client IP, the firewall (security zone) and the authenticated
user of each HTTP request in the blame context, so flushes made while
handling the request are attributed to it. Uses raw ASGI (no
BaseHTTPMiddleware) so the context variables reach the endpoint's task.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from flushaudit.shared.context import (
    reset_current_actor,
    reset_operation_context,
    set_current_actor,
    set_operation_context,
)


def client_ip_from_scope(scope: Scope) -> str | None:
    """X-Forwarded-For first hop, else the peer address."""
    forwarded = Headers(scope=scope).get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    client = scope.get("client")
    return client[0] if client else None


def firewall_for_path(
    path: str,
    firewalls: Mapping[str, str],
    default: str | None = None,
) -> str | None:
    """Name of the firewall with the longest path prefix matching ``path``."""
    best: str | None = None
    best_length = -1
    for prefix, name in firewalls.items():
        if path.startswith(prefix) and len(prefix) > best_length:
            best, best_length = name, len(prefix)
    return best if best is not None else default


def actor_from_scope(scope: Scope) -> Any:
    """Authenticated user set by Starlette's AuthenticationMiddleware, or None."""
    if "user" not in scope:
        return None
    user = scope["user"]
    if not getattr(user, "is_authenticated", True):
        return None
    return user


def BlameContextMiddleware(
    app: ASGIApp,
    firewalls: Mapping[str, str] | None = None,
    default_firewall: str | None = None,
    actor_resolver: Callable[[Scope], Any] = actor_from_scope,
) -> ASGIApp:
    """Set the blame context for each HTTP request and reset it afterwards. Raw ASGI.

    Install it inside the authentication middleware so ``scope["user"]`` is
    populated when it runs.
    """
    firewalls = dict(firewalls or {})

    async def asgi_app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        operation_token = set_operation_context(
            client_ip=client_ip_from_scope(scope),
            firewall=firewall_for_path(scope.get("path", ""), firewalls, default_firewall),
        )
        actor_token = set_current_actor(actor_resolver(scope))
        try:
            await app(scope, receive, send)
        finally:
            reset_current_actor(actor_token)
            reset_operation_context(operation_token)

    return asgi_app
