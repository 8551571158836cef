"""Operation context for blame attribution using contextvars.

Provides thread-safe, async-safe storage for the data the blame resolver
needs at flush time: the current actor and the current operation context
(client network origin, security-zone label). The host sets these in
middleware or after authentication; the audit manager reads a snapshot
when it processes a transaction.

Usage:
    set_operation_context(client_ip="10.0.0.1", firewall="main")
    set_current_actor(user)
    context = get_blame_context()
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OperationContext:
    """Request-level data used for blame: client IP and firewall (zone) label."""

    client_ip: str | None = None
    firewall: str | None = None


@dataclass(frozen=True)
class BlameContext:
    """Immutable snapshot of what the blame resolver may read."""

    operation: OperationContext | None
    actor: Any = None


_current_actor: ContextVar[Any] = ContextVar("current_actor", default=None)
_current_operation: ContextVar[OperationContext | None] = ContextVar(
    "current_operation", default=None
)


def set_current_actor(actor: Any) -> Token:
    """Set the acting user for this task/thread. Returns a token for reset."""
    return _current_actor.set(actor)


def get_current_actor() -> Any:
    """Return the current actor, or None if nobody is authenticated."""
    return _current_actor.get()


def set_operation_context(
    client_ip: str | None = None,
    firewall: str | None = None,
) -> Token:
    """Set the current operation context (client IP and firewall label).

    Args:
        client_ip: Client network origin, if known.
        firewall: Name of the security zone that handled the operation.

    Returns:
        Token usable with reset_operation_context.
    """
    return _current_operation.set(
        OperationContext(client_ip=client_ip, firewall=firewall)
    )


def get_operation_context() -> OperationContext | None:
    """Return the current operation context, or None outside a request."""
    return _current_operation.get()


def reset_operation_context(token: Token) -> None:
    _current_operation.reset(token)


def reset_current_actor(token: Token) -> None:
    _current_actor.reset(token)


def clear_blame_context() -> None:
    """Clear both actor and operation context."""
    _current_actor.set(None)
    _current_operation.set(None)


def get_blame_context() -> BlameContext:
    """Return a snapshot of the current blame context."""
    return BlameContext(operation=_current_operation.get(), actor=_current_actor.get())
