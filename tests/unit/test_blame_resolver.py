"""Tests for BlameResolver and the blame context variables."""

from dataclasses import dataclass

from flushaudit.application.services import BlameResolver
from flushaudit.domain.records import Blame
from flushaudit.shared.context import (
    OperationContext,
    get_blame_context,
    reset_current_actor,
    set_current_actor,
    set_operation_context,
)


@dataclass
class User:
    id: int
    username: str


class Anonymous:
    """No id/username: not a blameable actor."""


class TestBlame:
    def test_no_context_no_actor_is_all_null(self) -> None:
        assert BlameResolver().blame() == Blame()

    def test_actor_and_context(self) -> None:
        blame = BlameResolver().blame(
            OperationContext(client_ip="10.0.0.1", firewall="admin"), User(7, "ada")
        )
        assert blame.user_id == "7"
        assert blame.username == "ada"
        assert blame.user_fqdn == f"{User.__module__}.User"
        assert blame.client_ip == "10.0.0.1"
        assert blame.user_firewall == "admin"

    def test_actor_without_capability_is_ignored(self) -> None:
        blame = BlameResolver().blame(OperationContext(client_ip="::1"), Anonymous())
        assert blame.user_id is None
        assert blame.username is None
        assert blame.user_fqdn is None
        assert blame.client_ip == "::1"


class TestBlameContext:
    def test_snapshot_reflects_context_variables(self) -> None:
        set_operation_context(client_ip="127.0.0.1", firewall="main")
        token = set_current_actor(User(1, "grace"))
        context = get_blame_context()
        assert context.operation == OperationContext("127.0.0.1", "main")
        assert context.actor.username == "grace"

        reset_current_actor(token)
        assert get_blame_context().actor is None

    def test_empty_by_default(self) -> None:
        context = get_blame_context()
        assert context.operation is None
        assert context.actor is None
