"""Tests for role checks on privileged mutations."""

from uuid import UUID

import pytest

from cupi.app.session import SessionState
from cupi.identity import authorization
from cupi.identity.resolver import resolve_identity
from cupi.models.identity import AnonymousIdentity

MISSING_ID = UUID("99999999-9999-9999-9999-999999999999")


def identity_of(user_id):
    return resolve_identity(SessionState(user_id=user_id))


@pytest.fixture
def team(record_store):
    """An owner (first user, Admin) with a workspace that a Member has joined."""
    owner = record_store.create_user("1", "owner@example.com", "Olive Owner", None)
    workspace = record_store.create_workspace_with_owner(
        "Robotics Club", "ABC234", owner.id, owner.name
    )
    member = record_store.create_user("2", "member@example.com", "Max Member", None)
    record_store.create_membership(member.id, workspace.id, "Member", member.name)
    record_store.set_primary_workspace(member.id, workspace.id, "Member")
    return owner, member, workspace


class TestDeleteWorkspace:
    def test_member_cannot_delete(self, record_store, team):
        _, member, workspace = team

        result = authorization.delete_workspace(
            identity_of(member.id), workspace.id, "Robotics Club"
        )

        assert result.success is False
        assert result.error == "forbidden"
        assert record_store.workspaces[workspace.id] == workspace
        assert len(record_store.members) == 2
        assert "delete_workspace" not in record_store.calls

    def test_owner_can_delete(self, record_store, team):
        owner, member, workspace = team

        result = authorization.delete_workspace(
            identity_of(owner.id), workspace.id, "Robotics Club"
        )

        assert result.success is True
        assert workspace.id not in record_store.workspaces
        assert record_store.members == {}
        assert record_store.users[member.id].workspace_id is None

    def test_confirmation_must_match_exactly(self, record_store, team):
        owner, _, workspace = team

        result = authorization.delete_workspace(
            identity_of(owner.id), workspace.id, "robotics club"
        )

        assert result.success is False
        assert result.error == "invalid_input"
        assert workspace.id in record_store.workspaces

    def test_membership_admin_can_delete(self, record_store, team):
        _, member, workspace = team
        record_store.members[(member.id, workspace.id)].role = "Admin"

        result = authorization.delete_workspace(
            identity_of(member.id), workspace.id, "Robotics Club"
        )

        assert result.success is True

    def test_membership_admin_blocked_when_policy_off(
        self, record_store, team, monkeypatch
    ):
        _, member, workspace = team
        record_store.members[(member.id, workspace.id)].role = "Admin"
        monkeypatch.setenv("WORKSPACE_ADMINS_CAN_DELETE", "false")

        result = authorization.delete_workspace(
            identity_of(member.id), workspace.id, "Robotics Club"
        )

        assert result.error == "forbidden"
        assert workspace.id in record_store.workspaces

    def test_global_admin_without_membership_cannot_delete(self, record_store, team):
        owner, _, workspace = team
        other = record_store.create_user("3", "admin@example.com", "Ada Admin", None)
        record_store.update_user_role(other.id, "Admin")

        result = authorization.delete_workspace(
            identity_of(other.id), workspace.id, "Robotics Club"
        )

        assert result.error == "forbidden"

    def test_missing_workspace(self, record_store, team):
        owner, _, _ = team
        result = authorization.delete_workspace(
            identity_of(owner.id), MISSING_ID, "Robotics Club"
        )
        assert result.error == "not_found"

    def test_requires_registered_user(self, record_store, team):
        _, _, workspace = team
        result = authorization.delete_workspace(
            AnonymousIdentity(), workspace.id, "Robotics Club"
        )
        assert result.error == "unauthenticated"

    def test_store_failure(self, record_store, team):
        owner, _, workspace = team
        record_store.fail("delete_workspace")

        result = authorization.delete_workspace(
            identity_of(owner.id), workspace.id, "Robotics Club"
        )

        assert result.error == "persistence_failure"


class TestChangeUserRole:
    def test_admin_promotes_member(self, record_store, team):
        owner, member, _ = team

        result = authorization.change_user_role(
            identity_of(owner.id), member.id, "Team Lead"
        )

        assert result.success is True
        assert record_store.users[member.id].role == "Team Lead"

    def test_non_admin_is_forbidden(self, record_store, team):
        owner, member, _ = team

        result = authorization.change_user_role(
            identity_of(member.id), owner.id, "Member"
        )

        assert result.error == "forbidden"
        assert record_store.users[owner.id].role == "Admin"

    def test_role_comparison_is_case_sensitive(self, record_store, team):
        owner, member, _ = team

        result = authorization.change_user_role(identity_of(owner.id), member.id, "admin")

        assert result.error == "invalid_input"
        assert record_store.users[member.id].role == "Member"

    def test_missing_target(self, record_store, team):
        owner, _, _ = team
        result = authorization.change_user_role(identity_of(owner.id), MISSING_ID, "Member")
        assert result.error == "not_found"

    def test_last_admin_cannot_demote_self(self, record_store, team):
        owner, _, _ = team

        result = authorization.change_user_role(identity_of(owner.id), owner.id, "Member")

        assert result.error == "forbidden"
        assert record_store.users[owner.id].role == "Admin"

    def test_admin_can_demote_self_when_another_admin_exists(self, record_store, team):
        owner, member, _ = team
        record_store.update_user_role(member.id, "Admin")

        result = authorization.change_user_role(identity_of(owner.id), owner.id, "Member")

        assert result.success is True
        assert record_store.users[owner.id].role == "Member"


class TestUpdateDiscordChannel:
    def test_admin_sets_channel(self, record_store, team):
        owner, _, workspace = team

        result = authorization.update_discord_channel(identity_of(owner.id), " 12345 ")

        assert result.success is True
        assert record_store.workspaces[workspace.id].discord_channel_id == "12345"

    def test_blank_channel_clears_it(self, record_store, team):
        owner, _, workspace = team
        record_store.workspaces[workspace.id].discord_channel_id = "12345"

        authorization.update_discord_channel(identity_of(owner.id), "  ")

        assert record_store.workspaces[workspace.id].discord_channel_id is None

    def test_member_is_forbidden(self, record_store, team):
        _, member, workspace = team

        result = authorization.update_discord_channel(identity_of(member.id), "12345")

        assert result.error == "forbidden"
        assert record_store.workspaces[workspace.id].discord_channel_id is None
