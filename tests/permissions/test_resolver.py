from __future__ import annotations

from rbac.permissions.models import (
    Permission,
    Policy,
    Role,
    RolePermission,
    ScopedAccess,
    SuperAdminAccess,
    UserRole,
)
from rbac.permissions.provider import InMemoryRbacStore
from rbac.permissions.resolver import PermissionResolver


def _store_with_permissions() -> tuple[InMemoryRbacStore, dict[str, Permission]]:
    store = InMemoryRbacStore()
    permissions = {
        key: store.create(
            Permission,
            id=f"perm_{key}",
            name=key,
            key=key,
            matcher=f"/{key}",
            action="read",
        )
        for key in ("a", "b", "c")
    }
    return store, permissions


def _role(store: InMemoryRbacStore, name: str, *, is_super: bool = False) -> Role:
    return store.create(Role, name=name, is_super=is_super)


def test_actor_without_roles_resolves_to_empty_scoped_set() -> None:
    store, _ = _store_with_permissions()

    effective = PermissionResolver(store).resolve("nobody")

    assert isinstance(effective, ScopedAccess)
    assert effective.to_dict() == {
        "is_super_admin": False,
        "role_ids": [],
        "permissions": [],
    }


def test_blank_actor_resolves_to_empty_scoped_set() -> None:
    store, _ = _store_with_permissions()

    assert PermissionResolver(store).resolve("   ") == ScopedAccess()


def test_direct_grants_are_effective() -> None:
    store, permissions = _store_with_permissions()
    role = _role(store, "Viewer")
    store.create(RolePermission, role_id=role.id, permission_id=permissions["a"].id)
    store.create(UserRole, user_id="user-1", role_id=role.id)

    effective = PermissionResolver(store).resolve("user-1")

    assert effective.is_super_admin is False
    assert effective.role_ids == (role.id,)
    assert effective.permissions == (permissions["a"],)


def test_allow_policy_adds_permission_without_grant() -> None:
    store, permissions = _store_with_permissions()
    role = _role(store, "Viewer")
    store.create(Policy, role_id=role.id, permission_id=permissions["b"].id, type="allow")
    store.create(UserRole, user_id="user-1", role_id=role.id)

    effective = PermissionResolver(store).resolve("user-1")

    assert [p.key for p in effective.permissions] == ["b"]


def test_deny_policy_removes_granted_permission_on_same_role() -> None:
    store, permissions = _store_with_permissions()
    role = _role(store, "Viewer")
    store.create(RolePermission, role_id=role.id, permission_id=permissions["a"].id)
    store.create(RolePermission, role_id=role.id, permission_id=permissions["b"].id)
    store.create(Policy, role_id=role.id, permission_id=permissions["a"].id, type="deny")
    store.create(UserRole, user_id="user-1", role_id=role.id)

    effective = PermissionResolver(store).resolve("user-1")

    assert [p.key for p in effective.permissions] == ["b"]


def test_deny_from_one_role_overrides_grant_from_another() -> None:
    store, permissions = _store_with_permissions()
    granting = _role(store, "Granting")
    denying = _role(store, "Denying")
    store.create(RolePermission, role_id=granting.id, permission_id=permissions["c"].id)
    store.create(Policy, role_id=granting.id, permission_id=permissions["c"].id, type="allow")
    store.create(Policy, role_id=denying.id, permission_id=permissions["c"].id, type="deny")
    store.create(UserRole, user_id="user-1", role_id=granting.id)
    store.create(UserRole, user_id="user-1", role_id=denying.id)

    effective = PermissionResolver(store).resolve("user-1")

    assert effective.permissions == tuple()
    assert set(effective.role_ids) == {granting.id, denying.id}


def test_super_role_short_circuits_to_wildcards() -> None:
    store, permissions = _store_with_permissions()
    admin = _role(store, "Admin", is_super=True)
    viewer = _role(store, "Viewer")
    store.create(Policy, role_id=admin.id, permission_id=permissions["a"].id, type="deny")
    store.create(UserRole, user_id="user-1", role_id=admin.id)
    store.create(UserRole, user_id="user-1", role_id=viewer.id)

    effective = PermissionResolver(store).resolve("user-1")

    assert isinstance(effective, SuperAdminAccess)
    assert effective.is_super_admin is True
    assert set(effective.role_ids) == {admin.id, viewer.id}
    assert [(p.matcher, p.action) for p in effective.permissions] == [
        ("*", "read"),
        ("*", "write"),
        ("*", "delete"),
    ]


def test_user_roles_and_super_admin_helpers() -> None:
    store, _ = _store_with_permissions()
    admin = _role(store, "Admin", is_super=True)
    viewer = _role(store, "Viewer")
    store.create(UserRole, user_id="root", role_id=admin.id)
    store.create(UserRole, user_id="user-1", role_id=viewer.id)
    resolver = PermissionResolver(store)

    assert resolver.user_roles("user-1") == (viewer,)
    assert resolver.is_super_admin("root") is True
    assert resolver.is_super_admin("user-1") is False
    assert resolver.is_super_admin("nobody") is False
