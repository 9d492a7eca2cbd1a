from __future__ import annotations

import pytest

from rbac.permissions.errors import ForbiddenError, UnauthorizedError
from rbac.permissions.gate import PermissionGate
from rbac.permissions.models import (
    Permission,
    PermissionRequirement,
    Policy,
    Role,
    RolePermission,
    UserRole,
)
from rbac.permissions.provider import InMemoryRbacStore


def _req(matcher: str, action: str) -> PermissionRequirement:
    return PermissionRequirement(matcher=matcher, action=action)


def _scenario() -> tuple[InMemoryRbacStore, Role, Permission]:
    store = InMemoryRbacStore()
    role = store.create(Role, name="R1")
    permission = store.create(
        Permission,
        name="P1",
        key="p1",
        matcher="/x",
        action="read",
    )
    store.create(RolePermission, role_id=role.id, permission_id=permission.id)
    return store, role, permission


def test_uninitialized_system_allows_everything() -> None:
    store, _, _ = _scenario()
    gate = PermissionGate(store)

    assert gate.is_initialized() is False
    assert gate.authorize("anyone", [_req("/admin/secret", "delete")]).allowed


def test_first_assignment_closes_the_escape_hatch() -> None:
    store, role, _ = _scenario()
    gate = PermissionGate(store)
    required = [_req("/admin/secret", "delete")]
    assert gate.authorize("user-a", required).allowed

    store.create(UserRole, user_id="user-a", role_id=role.id)

    assert gate.is_initialized() is True
    assert not gate.authorize("user-a", required).allowed


def test_scoped_actor_allowed_for_granted_and_denied_otherwise() -> None:
    store, role, _ = _scenario()
    store.create(UserRole, user_id="A", role_id=role.id)
    gate = PermissionGate(store)

    assert gate.authorize("A", [_req("/x", "read")]).allowed

    denied = gate.authorize("A", [_req("/x", "write")])
    assert denied.allowed is False
    assert denied.rejection_code == "PERMISSION_DENIED"
    assert denied.required_permissions == (_req("/x", "write"),)


def test_requirements_are_and_of_ors() -> None:
    store, role, _ = _scenario()
    store.create(UserRole, user_id="A", role_id=role.id)
    gate = PermissionGate(store)

    result = gate.authorize("A", [_req("/x/1", "read"), _req("/y", "read")])

    assert result.allowed is False
    assert result.required_permissions == (_req("/x/1", "read"), _req("/y", "read"))


def test_actor_without_roles_is_denied_once_initialized() -> None:
    store, role, _ = _scenario()
    store.create(UserRole, user_id="A", role_id=role.id)
    gate = PermissionGate(store)

    assert not gate.authorize("stranger", [_req("/x", "read")]).allowed
    assert gate.authorize("stranger", []).allowed


def test_super_admin_allowed_despite_deny_policy() -> None:
    store, _, permission = _scenario()
    admin = store.create(Role, name="Admin", is_super=True)
    store.create(Policy, role_id=admin.id, permission_id=permission.id, type="deny")
    store.create(UserRole, user_id="root", role_id=admin.id)
    gate = PermissionGate(store)

    assert gate.authorize("root", [_req("/x", "read"), _req("/anything", "delete")]).allowed
    assert gate.is_super_admin("root") is True


def test_mapping_requirements_are_accepted() -> None:
    store, role, _ = _scenario()
    store.create(UserRole, user_id="A", role_id=role.id)

    result = PermissionGate(store).authorize("A", [{"matcher": "/x", "action": "read"}])

    assert result.allowed


def test_missing_actor_is_unauthorized() -> None:
    store, _, _ = _scenario()

    with pytest.raises(UnauthorizedError):
        PermissionGate(store).authorize("", [_req("/x", "read")])

    with pytest.raises(UnauthorizedError):
        PermissionGate(store).authorize(None, [_req("/x", "read")])


def test_raise_for_denial_carries_required_list_only() -> None:
    store, role, _ = _scenario()
    store.create(UserRole, user_id="A", role_id=role.id)
    result = PermissionGate(store).authorize("A", [_req("/x", "delete")])

    with pytest.raises(ForbiddenError) as excinfo:
        result.raise_for_denial()

    assert excinfo.value.required_permissions == (_req("/x", "delete"),)
