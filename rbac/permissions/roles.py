"""
RBAC Permissions - Role and Assignment Mutations
================================================
Store-level helpers used by admin handlers to manage roles, grants,
assignments and policies. Super roles are immutable here.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from rbac.permissions.constants import SUPER_ROLE_IMMUTABLE, VALID_POLICY_TYPES
from rbac.permissions.errors import InvalidStateError
from rbac.permissions.models import (
    Permission,
    Policy,
    Role,
    RolePermission,
    UserRole,
)
from rbac.permissions.provider import RbacStore

logger = logging.getLogger("rbac.roles")

_ROLE_FIELDS = frozenset({"name", "description", "is_super"})


def _clean_string(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a non-empty string.")
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} must be a non-empty string.")
    return cleaned


def _clean_values(values: Iterable[str] | None, *, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise ValueError(f"{field_name} must be a list of strings.")
    return list(
        dict.fromkeys(_clean_string(value, field_name=field_name) for value in values)
    )


def _mutable_role(store: RbacStore, role_id: str, verb: str) -> Role:
    role = store.retrieve(Role, role_id)
    if role.is_super:
        raise InvalidStateError(
            SUPER_ROLE_IMMUTABLE,
            f"Super roles cannot be {verb}.",
        )
    return role


def create_role(
    store: RbacStore,
    *,
    name: str,
    description: Optional[str] = None,
    is_super: bool = False,
) -> Role:
    role = store.create(
        Role,
        name=_clean_string(name, field_name="name"),
        description=description,
        is_super=is_super,
    )
    logger.info(f"Created role '{role.name}' ({role.id}, super={role.is_super})")
    return role


def update_role(store: RbacStore, role_id: str, **changes: Any) -> Role:
    unknown = sorted(set(changes) - _ROLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown role field(s) {unknown}.")
    _mutable_role(store, role_id, "updated")
    if "name" in changes:
        changes["name"] = _clean_string(changes["name"], field_name="name")
    return store.update(Role, role_id, **changes)


def delete_role(store: RbacStore, role_id: str) -> str:
    _mutable_role(store, role_id, "deleted")
    store.delete(Role, role_id)
    logger.info(f"Deleted role {role_id}")
    return role_id


def _resolve_permission_ids(
    store: RbacStore,
    permission_ids: Iterable[str] | None,
    permission_keys: Iterable[str] | None,
) -> list[str]:
    resolved = _clean_values(permission_ids, field_name="permission_ids")
    keys = _clean_values(permission_keys, field_name="permission_keys")
    if keys:
        for permission in store.list(Permission, {"key": keys}):
            if permission.id not in resolved:
                resolved.append(permission.id)
    if not resolved:
        raise ValueError("No permissions provided.")
    return resolved


def _resolve_role_ids(
    store: RbacStore,
    role_ids: Iterable[str] | None,
    role_names: Iterable[str] | None,
) -> list[str]:
    resolved = _clean_values(role_ids, field_name="role_ids")
    names = _clean_values(role_names, field_name="role_names")
    if names:
        for role in store.list(Role, {"name": names}):
            if role.id not in resolved:
                resolved.append(role.id)
    if not resolved:
        raise ValueError("No roles provided.")
    return resolved


def list_role_permissions(store: RbacStore, role_id: str) -> tuple[Permission, ...]:
    store.retrieve(Role, role_id)
    rows = store.list(RolePermission, {"role_id": role_id})
    if not rows:
        return tuple()
    return store.list(Permission, {"id": [row.permission_id for row in rows]})


def grant_permissions(
    store: RbacStore,
    role_id: str,
    *,
    permission_ids: Iterable[str] | None = None,
    permission_keys: Iterable[str] | None = None,
) -> tuple[RolePermission, ...]:
    """Grant permissions to a role; already-granted ones are skipped."""
    resolved = _resolve_permission_ids(store, permission_ids, permission_keys)
    existing = {
        row.permission_id for row in store.list(RolePermission, {"role_id": role_id})
    }
    created = tuple(
        store.create(RolePermission, role_id=role_id, permission_id=permission_id)
        for permission_id in resolved
        if permission_id not in existing
    )
    logger.info(f"Granted {len(created)} permission(s) to role {role_id}")
    return created


def revoke_permissions(
    store: RbacStore,
    role_id: str,
    *,
    permission_ids: Iterable[str] | None = None,
    permission_keys: Iterable[str] | None = None,
) -> tuple[str, ...]:
    resolved = _resolve_permission_ids(store, permission_ids, permission_keys)
    rows = store.list(
        RolePermission,
        {"role_id": role_id, "permission_id": resolved},
    )
    ids = tuple(row.id for row in rows)
    if ids:
        store.delete(RolePermission, ids)
    logger.info(f"Revoked {len(ids)} permission(s) from role {role_id}")
    return ids


def assign_roles(
    store: RbacStore,
    user_id: str,
    *,
    role_ids: Iterable[str] | None = None,
    role_names: Iterable[str] | None = None,
) -> tuple[UserRole, ...]:
    user_id = _clean_string(user_id, field_name="user_id")
    resolved = _resolve_role_ids(store, role_ids, role_names)
    existing = {row.role_id for row in store.list(UserRole, {"user_id": user_id})}
    created = tuple(
        store.create(UserRole, user_id=user_id, role_id=role_id)
        for role_id in resolved
        if role_id not in existing
    )
    logger.info(f"Assigned {len(created)} role(s) to user '{user_id}'")
    return created


def unassign_roles(
    store: RbacStore,
    user_id: str,
    *,
    role_ids: Iterable[str] | None = None,
    role_names: Iterable[str] | None = None,
) -> tuple[str, ...]:
    user_id = _clean_string(user_id, field_name="user_id")
    resolved = _resolve_role_ids(store, role_ids, role_names)
    rows = store.list(UserRole, {"user_id": user_id, "role_id": resolved})
    ids = tuple(row.id for row in rows)
    if ids:
        store.delete(UserRole, ids)
    logger.info(f"Unassigned {len(ids)} role(s) from user '{user_id}'")
    return ids


def set_policy(
    store: RbacStore,
    *,
    role_id: str,
    permission_id: str,
    type: str,
) -> Policy:
    if type not in VALID_POLICY_TYPES:
        raise ValueError(
            f"type '{type}' not valid. Must be one of: {sorted(VALID_POLICY_TYPES)}"
        )
    policy = store.create(
        Policy,
        role_id=_clean_string(role_id, field_name="role_id"),
        permission_id=_clean_string(permission_id, field_name="permission_id"),
        type=type,
    )
    logger.info(f"Created {type} policy on permission {permission_id} for role {role_id}")
    return policy


def update_policy(store: RbacStore, policy_id: str, *, type: str) -> Policy:
    if type not in VALID_POLICY_TYPES:
        raise ValueError(
            f"type '{type}' not valid. Must be one of: {sorted(VALID_POLICY_TYPES)}"
        )
    policy = store.update(Policy, policy_id, type=type)
    logger.info(f"Policy {policy_id} set to {type}")
    return policy


def delete_policy(store: RbacStore, policy_id: str) -> str:
    store.retrieve(Policy, policy_id)
    store.delete(Policy, policy_id)
    logger.info(f"Deleted policy {policy_id}")
    return policy_id


def describe_role(
    store: RbacStore,
    role_id: str,
    *,
    include_permissions: bool = True,
    include_policies: bool = True,
    include_users: bool = False,
) -> dict[str, Any]:
    """Role record plus the requested related rows."""
    role = store.retrieve(Role, role_id)
    detail = role.to_dict()
    if include_permissions:
        detail["permissions"] = [
            permission.to_dict()
            for permission in list_role_permissions(store, role_id)
        ]
    if include_policies:
        detail["policies"] = [
            policy.to_dict() for policy in store.list(Policy, {"role_id": role_id})
        ]
    if include_users:
        detail["user_ids"] = [
            row.user_id for row in store.list(UserRole, {"role_id": role_id})
        ]
    return detail
