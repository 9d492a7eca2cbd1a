"""
RBAC Permissions - Permission and Category Mutations
====================================================
Store-level helpers behind the permission and permission-category
admin handlers. Deleting a permission cascades to its grants and
policies; deleting a category that still owns permissions is refused
by the store.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from rbac.permissions.constants import KIND_CUSTOM, MATCHER_TYPE_API
from rbac.permissions.models import Permission, PermissionCategory
from rbac.permissions.provider import RbacStore

logger = logging.getLogger("rbac.records")

_PERMISSION_FIELDS = frozenset(
    {
        "name",
        "description",
        "kind",
        "matcher_type",
        "matcher",
        "action",
        "category_id",
        "key",
        "method",
        "path",
    }
)

_CATEGORY_FIELDS = frozenset({"name", "kind"})


def _check_fields(changes: dict[str, Any], allowed: frozenset[str], label: str) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValueError(f"Unknown {label} field(s) {unknown}.")


# ══════════════════════════════════════════════════════════════
# PERMISSIONS
# ══════════════════════════════════════════════════════════════

def create_permission(
    store: RbacStore,
    *,
    name: str,
    matcher: str,
    action: str,
    key: str,
    category_id: Optional[str] = None,
    description: Optional[str] = None,
    kind: str = KIND_CUSTOM,
    matcher_type: str = MATCHER_TYPE_API,
    method: str = "",
    path: str = "",
) -> Permission:
    permission = store.create(
        Permission,
        name=name,
        matcher=matcher,
        action=action,
        key=key,
        category_id=category_id,
        description=description,
        kind=kind,
        matcher_type=matcher_type,
        method=method,
        path=path,
    )
    logger.info(
        f"Created permission '{permission.key}' "
        f"({permission.action} {permission.matcher})"
    )
    return permission


def update_permission(store: RbacStore, permission_id: str, **changes: Any) -> Permission:
    _check_fields(changes, _PERMISSION_FIELDS, "permission")
    permission = store.update(Permission, permission_id, **changes)
    logger.info(f"Updated permission {permission_id}: {sorted(changes)}")
    return permission


def delete_permission(store: RbacStore, permission_id: str) -> str:
    store.retrieve(Permission, permission_id)
    store.delete(Permission, permission_id)
    logger.info(f"Deleted permission {permission_id}")
    return permission_id


# ══════════════════════════════════════════════════════════════
# CATEGORIES
# ══════════════════════════════════════════════════════════════

def create_category(
    store: RbacStore,
    *,
    name: str,
    kind: str = KIND_CUSTOM,
) -> PermissionCategory:
    category = store.create(PermissionCategory, name=name, kind=kind)
    logger.info(f"Created permission category '{category.name}' ({category.id})")
    return category


def update_category(
    store: RbacStore,
    category_id: str,
    **changes: Any,
) -> PermissionCategory:
    _check_fields(changes, _CATEGORY_FIELDS, "category")
    return store.update(PermissionCategory, category_id, **changes)


def delete_category(store: RbacStore, category_id: str) -> str:
    store.retrieve(PermissionCategory, category_id)
    store.delete(PermissionCategory, category_id)
    logger.info(f"Deleted permission category {category_id}")
    return category_id


def category_permissions(store: RbacStore, category_id: str) -> tuple[Permission, ...]:
    store.retrieve(PermissionCategory, category_id)
    return store.list(Permission, {"category_id": category_id})
