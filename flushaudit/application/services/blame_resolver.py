"""Blame resolver: actor and network attribution for an operation."""

from __future__ import annotations

from typing import Any

from flushaudit.application.interfaces.services import AuditActor
from flushaudit.domain.records import Blame
from flushaudit.shared.context import OperationContext
from flushaudit.shared.utils.naming import qualified_name


class BlameResolver:
    """Builds a Blame from an explicit operation context and actor.

    Missing context or an actor without an id and a username is not an
    error: the corresponding fields are simply null.
    """

    def blame(
        self,
        context: OperationContext | None = None,
        actor: Any = None,
    ) -> Blame:
        client_ip = None
        user_firewall = None
        if context is not None:
            client_ip = context.client_ip
            user_firewall = context.firewall

        user_id = None
        username = None
        user_fqdn = None
        if actor is not None and isinstance(actor, AuditActor):
            user_id = None if actor.id is None else str(actor.id)
            username = actor.username
            user_fqdn = qualified_name(actor)

        return Blame(
            user_id=user_id,
            username=username,
            client_ip=client_ip,
            user_fqdn=user_fqdn,
            user_firewall=user_firewall,
        )
