"""
Unit tests for PermissionSet composition.
"""

import threading

import pytest

from access_rules.app.permissions import PermissionSet
from shared.errors import PermissionsFrozenError, RuleDefinitionError


class Project:
    pass


@pytest.fixture
def viewers():
    permissions = PermissionSet("viewers")
    with permissions.role("viewer") as role:
        role.can("view", Project)
    with permissions.role("commenter") as role:
        role.can("comment", Project)
    return permissions


class TestPermissionSet:
    """Test cases for PermissionSet."""

    def test_role_context_manager_merges_on_exit(self):
        permissions = PermissionSet("editors")

        with permissions.role("editor") as role:
            role.can("edit", Project)
            assert permissions.frozen is False

        assert len(permissions.rule_index.rules_for_role("editor")) == 1

    def test_role_context_manager_discards_on_error(self):
        """Test a failing definition block leaves the set untouched."""
        permissions = PermissionSet("editors")

        with pytest.raises(ValueError):
            with permissions.role("editor") as role:
                role.can("edit", Project)
                raise ValueError("boom")

        assert len(permissions.rule_index) == 0

    def test_role_defaults_to_placeholder(self):
        permissions = PermissionSet("anonymous")

        with permissions.role() as role:
            role.can("view", Project)

        assert permissions.rule_index.roles() == ["inherited"]

    def test_placeholder_role_from_settings(self, monkeypatch):
        """Test the placeholder role is configurable."""
        monkeypatch.setenv("ACCESS_RULES_INHERITED_ROLE", "base")

        permissions = PermissionSet("anonymous").define_role_permissions(
            block=lambda role: role.can("view", Project)
        )

        assert permissions.rule_index.roles() == ["base"]

    def test_inherit_flattens_source_roles(self, viewers):
        """Test inheriting mixes every source role under the placeholder role."""
        permissions = PermissionSet("reviewers").inherit(viewers)

        rules = permissions.rule_index.rules_for_role("inherited")
        assert [(r.action, r.subject) for r in rules] == [("view", Project), ("comment", Project)]

    def test_define_with_template_and_block(self, viewers):
        """Test a template copy and a builder block apply in one call."""
        permissions = PermissionSet("users").define_role_permissions(
            "reviewer",
            viewers,
            lambda role: role.cannot("comment", Project)
        )

        index = permissions.rule_index
        assert index.roles() == ["reviewer"]
        assert len(index.rules_for_role("reviewer")) == 3
        assert index.rules_for("reviewer", "comment", Project()) == []
        assert len(index.rules_for("reviewer", "view", Project())) == 1

    def test_template_must_be_permission_set(self):
        with pytest.raises(RuleDefinitionError) as exc_info:
            PermissionSet("users").define_role_permissions("reviewer", template=object())

        assert exc_info.value.code == "RULE_DEFINITION_ERROR"
        assert exc_info.value.details["permission_set"] == "users"

    def test_reading_index_freezes(self, viewers):
        """Test definitions after the first read are rejected."""
        assert viewers.frozen is False
        viewers.rule_index

        assert viewers.frozen is True
        with pytest.raises(PermissionsFrozenError):
            with viewers.role("viewer") as role:
                role.can("delete", Project)
        with pytest.raises(PermissionsFrozenError):
            viewers.inherit(PermissionSet("other"))

    def test_inheriting_freezes_source(self, viewers):
        PermissionSet("reviewers").inherit(viewers)

        assert viewers.frozen is True

    def test_freeze_is_idempotent(self, viewers):
        assert viewers.freeze() is viewers
        assert viewers.freeze() is viewers
        assert len(viewers.rule_index) == 2


class TestDeferredDefinition:
    """Test cases for deferred definition."""

    def test_definer_runs_on_first_read(self):
        calls = []

        def definer(permissions):
            calls.append(permissions)
            with permissions.role("viewer") as role:
                role.can("view", Project)

        permissions = PermissionSet("lazy", definer=definer)
        assert calls == []

        assert len(permissions.rule_index) == 1
        assert calls == [permissions]

    def test_definer_runs_once_under_concurrent_reads(self):
        """Test racing first readers all see the fully built index."""
        calls = []
        started = threading.Event()

        def definer(permissions):
            calls.append(1)
            started.wait(timeout=1)
            for action in ("view", "comment", "share"):
                permissions.define_role_permissions(
                    "viewer", block=lambda role, action=action: role.can(action, Project)
                )

        permissions = PermissionSet("lazy", definer=definer)
        sizes = []

        def reader():
            sizes.append(len(permissions.rule_index))

        threads = [threading.Thread(target=reader) for _ in range(8)]
        for thread in threads:
            thread.start()
        started.set()
        for thread in threads:
            thread.join(timeout=5)

        assert calls == [1]
        assert sizes == [3] * 8

    def test_failed_definer_leaves_no_partial_rules(self):
        """Test a raising definer is retried instead of freezing half its rules."""
        attempts = []

        def definer(permissions):
            attempts.append(1)
            with permissions.role("member") as role:
                role.can("read", "report")
            if len(attempts) == 1:
                raise RuntimeError("rule source unavailable")
            with permissions.role("member") as role:
                role.cannot("read", "report")

        permissions = PermissionSet("lazy", definer=definer)
        with permissions.role("auditor") as role:
            role.can("audit", "report")

        with pytest.raises(RuntimeError):
            permissions.rule_index

        assert permissions.frozen is False
        assert repr(permissions) == "PermissionSet('lazy', rules=1, frozen=False)"

        index = permissions.rule_index

        assert attempts == [1, 1]
        assert permissions.frozen is True
        assert len(index.rules_for_role("member")) == 2
        assert index.rules_for("member", "read", "report") == []
        assert len(index.rules_for_role("auditor")) == 1
