from __future__ import annotations

import pytest

from rbac.permissions.errors import ConstraintViolationError, RecordNotFoundError
from rbac.permissions.models import (
    Permission,
    PermissionCategory,
    Policy,
    Role,
    RolePermission,
    UserRole,
)
from rbac.permissions.provider import InMemoryRbacStore


def _permission(store: InMemoryRbacStore, key: str, **overrides) -> Permission:
    fields = {
        "name": key,
        "key": key,
        "matcher": f"/{key}",
        "action": "read",
    }
    fields.update(overrides)
    return store.create(Permission, **fields)


def test_create_generates_prefixed_ids_and_retrieve_round_trips() -> None:
    store = InMemoryRbacStore()
    role = store.create(Role, name="Editor")

    assert role.id.startswith("role_")
    assert store.retrieve(Role, role.id) == role
    assert role.is_super is False


def test_retrieve_missing_raises_not_found() -> None:
    store = InMemoryRbacStore()

    with pytest.raises(RecordNotFoundError) as excinfo:
        store.retrieve(Role, "role_missing")

    assert excinfo.value.kind == "Role"
    assert excinfo.value.record_id == "role_missing"


def test_list_filters_in_values_and_paginates_by_id() -> None:
    store = InMemoryRbacStore()
    for index in range(5):
        store.create(Role, id=f"role_{index}", name=f"R{index}")

    assert [r.id for r in store.list(Role, skip=1, take=2)] == ["role_1", "role_2"]
    assert [r.id for r in store.list(Role, {"name": ["R0", "R4"]})] == [
        "role_0",
        "role_4",
    ]
    assert store.count(Role) == 5
    assert store.count(Role, {"name": "R3"}) == 1
    assert store.list(Role, {"name": []}) == tuple()


def test_unknown_filter_field_is_rejected() -> None:
    store = InMemoryRbacStore()

    with pytest.raises(ValueError):
        store.list(Role, {"colour": "red"})


def test_exists_reflects_any_row() -> None:
    store = InMemoryRbacStore()
    assert store.exists(UserRole) is False

    role = store.create(Role, name="Viewer")
    store.create(UserRole, user_id="user-1", role_id=role.id)

    assert store.exists(UserRole) is True
    assert store.exists(UserRole, {"user_id": "user-2"}) is False


def test_join_rows_require_existing_parents() -> None:
    store = InMemoryRbacStore()
    role = store.create(Role, name="Viewer")

    with pytest.raises(ConstraintViolationError):
        store.create(RolePermission, role_id=role.id, permission_id="perm_missing")

    with pytest.raises(ConstraintViolationError):
        store.create(UserRole, user_id="user-1", role_id="role_missing")


def test_duplicate_assignment_is_a_constraint_violation() -> None:
    store = InMemoryRbacStore()
    role = store.create(Role, name="Viewer")
    store.create(UserRole, user_id="user-1", role_id=role.id)

    with pytest.raises(ConstraintViolationError):
        store.create(UserRole, user_id="user-1", role_id=role.id)


def test_update_keeps_indices_consistent() -> None:
    store = InMemoryRbacStore()
    role = store.create(Role, name="Viewer")

    updated = store.update(Role, role.id, name="Auditor")

    assert updated.name == "Auditor"
    assert store.list(Role, {"name": "Viewer"}) == tuple()
    assert store.list(Role, {"name": "Auditor"}) == (updated,)

    with pytest.raises(ValueError):
        store.update(Role, role.id, id="role_other")


def test_deleting_role_cascades_to_join_rows() -> None:
    store = InMemoryRbacStore()
    role = store.create(Role, name="Viewer")
    permission = _permission(store, "orders.read")
    store.create(RolePermission, role_id=role.id, permission_id=permission.id)
    store.create(UserRole, user_id="user-1", role_id=role.id)
    store.create(Policy, role_id=role.id, permission_id=permission.id, type="deny")

    assert store.delete(Role, role.id) == 1

    assert store.count(RolePermission) == 0
    assert store.count(UserRole) == 0
    assert store.count(Policy) == 0
    assert store.count(Permission) == 1


def test_category_with_permissions_is_protected() -> None:
    store = InMemoryRbacStore()
    category = store.create(PermissionCategory, name="RBAC")
    _permission(store, "rbac.roles.read", category_id=category.id)

    with pytest.raises(ConstraintViolationError):
        store.delete(PermissionCategory, category.id)

    assert store.count(PermissionCategory) == 1


def test_delete_ignores_unknown_ids() -> None:
    store = InMemoryRbacStore()

    assert store.delete(Role, ["role_missing"]) == 0


def test_blank_permission_matcher_is_rejected() -> None:
    store = InMemoryRbacStore()
    permission = _permission(store, "orders.read")

    with pytest.raises(ValueError, match="blank"):
        _permission(store, "orders.delete", matcher="   ", action="delete")
    with pytest.raises(ValueError, match="blank"):
        store.update(Permission, permission.id, matcher=" ")
    assert store.count(Permission) == 1
    assert store.retrieve(Permission, permission.id).matcher == "/orders.read"
