from __future__ import annotations

import pytest

from rbac.permissions.catalog import BASE_PERMISSIONS, CatalogBootstrapper
from rbac.permissions.errors import InvalidStateError, UnauthorizedError
from rbac.permissions.models import Permission, PermissionCategory, Role, UserRole
from rbac.permissions.provider import InMemoryRbacStore


def test_base_catalog_covers_five_resources_and_three_actions() -> None:
    keys = [entry.key for entry in BASE_PERMISSIONS]

    assert len(keys) == 15
    assert len(set(keys)) == 15
    assert "rbac.roles.read" in keys
    assert "rbac.permission-categories.delete" in keys
    roles_write = next(e for e in BASE_PERMISSIONS if e.key == "rbac.roles.write")
    assert roles_write.matcher == "/admin/rbac/roles"
    assert roles_write.action == "write"
    assert roles_write.name == "Write roles"


def test_bootstrap_seeds_category_and_permissions() -> None:
    store = InMemoryRbacStore()

    result = CatalogBootstrapper(store, category_name="RBAC").bootstrap("first-user")

    assert result.initialized is True
    assert result.permission_count == 15
    assert result.created_count == 15
    categories = store.list(PermissionCategory)
    assert [(c.name, c.kind) for c in categories] == [("RBAC", "custom")]
    roles_read = store.list(Permission, {"key": "rbac.roles.read"})[0]
    assert roles_read.category_id == categories[0].id
    assert roles_read.path == "/admin/rbac/roles"
    assert roles_read.description == "Read roles"
    assert roles_read.method == ""


def test_bootstrap_twice_is_idempotent() -> None:
    store = InMemoryRbacStore()
    bootstrapper = CatalogBootstrapper(store, category_name="RBAC")

    first = bootstrapper.bootstrap("first-user")
    second = bootstrapper.bootstrap("first-user")

    assert second.permission_count == first.permission_count
    assert second.created_count == 0
    assert store.count(PermissionCategory) == 1
    assert store.count(Permission) == 15


def test_bootstrap_converges_after_partial_run() -> None:
    store = InMemoryRbacStore()
    category = store.create(PermissionCategory, name="RBAC")
    entry = BASE_PERMISSIONS[0]
    store.create(
        Permission,
        name=entry.name,
        key=entry.key,
        matcher=entry.matcher,
        action=entry.action,
        category_id=category.id,
    )

    result = CatalogBootstrapper(store, category_name="RBAC").bootstrap("first-user")

    assert result.permission_count == 15
    assert result.created_count == 14
    assert store.count(PermissionCategory) == 1
    assert store.count(Permission, {"key": entry.key}) == 1


def test_bootstrap_counts_every_existing_catalog_row() -> None:
    store = InMemoryRbacStore()
    entry = BASE_PERMISSIONS[0]
    for _ in range(2):
        store.create(
            Permission,
            name=entry.name,
            key=entry.key,
            matcher=entry.matcher,
            action=entry.action,
        )

    result = CatalogBootstrapper(store, category_name="RBAC").bootstrap("first-user")

    assert result.created_count == 14
    assert result.permission_count == 16
    assert store.count(Permission, {"key": entry.key}) == 2


def test_bootstrap_after_initialization_requires_super_admin() -> None:
    store = InMemoryRbacStore()
    admin = store.create(Role, name="Admin", is_super=True)
    viewer = store.create(Role, name="Viewer")
    store.create(UserRole, user_id="root", role_id=admin.id)
    store.create(UserRole, user_id="user-1", role_id=viewer.id)
    bootstrapper = CatalogBootstrapper(store, category_name="RBAC")

    with pytest.raises(InvalidStateError) as excinfo:
        bootstrapper.bootstrap("user-1")
    assert excinfo.value.code == "BOOTSTRAP_FORBIDDEN"
    assert store.count(Permission) == 0

    assert bootstrapper.bootstrap("root").permission_count == 15


def test_bootstrap_requires_actor() -> None:
    with pytest.raises(UnauthorizedError):
        CatalogBootstrapper(InMemoryRbacStore()).bootstrap("")


def test_category_name_defaults_to_settings() -> None:
    assert CatalogBootstrapper(InMemoryRbacStore()).category_name == "RBAC"
