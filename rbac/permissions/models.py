"""
RBAC Permissions - Immutable Records
====================================
Six record kinds plus the requirement and effective-permission views.

Records reference each other only by id. Joins live in the store's
secondary indices, never in object graphs.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union

from rbac.permissions.constants import (
    KIND_CUSTOM,
    MATCHER_TYPE_API,
    POLICY_ALLOW,
    VALID_ACTIONS,
    VALID_KINDS,
    VALID_MATCHER_TYPES,
    VALID_POLICY_TYPES,
    WILDCARD_MATCHER,
)


def _require_string(value: Any, field_name: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{field_name} must be a non-empty string.")


def _require_optional_string(value: Any, field_name: str) -> None:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string or None.")


def _require_choice(value: Any, choices, field_name: str) -> None:
    if value not in choices:
        raise ValueError(
            f"{field_name} '{value}' not valid. "
            f"Must be one of: {sorted(choices)}"
        )


@dataclass(frozen=True)
class PermissionRequirement:
    matcher: str
    action: str

    def __post_init__(self):
        if not isinstance(self.matcher, str):
            raise ValueError("matcher must be a string.")
        _require_choice(self.action, VALID_ACTIONS, "action")

    def to_dict(self) -> dict[str, str]:
        return {"matcher": self.matcher, "action": self.action}


@dataclass(frozen=True)
class PermissionCategory:
    id: str
    name: str
    kind: str = KIND_CUSTOM

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.name, "name")
        _require_choice(self.kind, VALID_KINDS, "kind")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Permission:
    id: str
    name: str
    matcher: str
    action: str
    key: str
    category_id: Optional[str] = None
    description: Optional[str] = None
    kind: str = KIND_CUSTOM
    matcher_type: str = MATCHER_TYPE_API
    method: str = ""
    path: str = ""

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.name, "name")
        _require_string(self.matcher, "matcher")
        if not self.matcher.strip():
            raise ValueError("matcher must not be blank.")
        _require_string(self.key, "key")
        _require_choice(self.action, VALID_ACTIONS, "action")
        _require_choice(self.kind, VALID_KINDS, "kind")
        _require_choice(self.matcher_type, VALID_MATCHER_TYPES, "matcher_type")
        _require_optional_string(self.category_id, "category_id")
        _require_optional_string(self.description, "description")
        if not isinstance(self.method, str):
            raise ValueError("method must be a string.")
        if not isinstance(self.path, str):
            raise ValueError("path must be a string.")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Role:
    id: str
    name: str
    description: Optional[str] = None
    is_super: bool = False

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.name, "name")
        _require_optional_string(self.description, "description")
        if not isinstance(self.is_super, bool):
            raise ValueError("is_super must be a bool.")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RolePermission:
    id: str
    role_id: str
    permission_id: str

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.role_id, "role_id")
        _require_string(self.permission_id, "permission_id")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserRole:
    id: str
    user_id: str
    role_id: str

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.user_id, "user_id")
        _require_string(self.role_id, "role_id")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Policy:
    id: str
    role_id: str
    permission_id: str
    type: str = POLICY_ALLOW

    def __post_init__(self):
        _require_string(self.id, "id")
        _require_string(self.role_id, "role_id")
        _require_string(self.permission_id, "permission_id")
        _require_choice(self.type, VALID_POLICY_TYPES, "type")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


RECORD_KINDS = (
    PermissionCategory,
    Permission,
    Role,
    RolePermission,
    UserRole,
    Policy,
)

ID_PREFIXES = {
    PermissionCategory: "pcat",
    Permission: "perm",
    Role: "role",
    RolePermission: "rperm",
    UserRole: "urole",
    Policy: "pol",
}


def new_record_id(kind: type) -> str:
    return f"{ID_PREFIXES[kind]}_{uuid.uuid4().hex}"


# ══════════════════════════════════════════════════════════════
# EFFECTIVE PERMISSIONS (SuperAdmin | Scoped)
# ══════════════════════════════════════════════════════════════

WILDCARD_PERMISSIONS = tuple(
    Permission(
        id=WILDCARD_MATCHER,
        name=WILDCARD_MATCHER,
        matcher=WILDCARD_MATCHER,
        action=action,
        key=WILDCARD_MATCHER,
        path=WILDCARD_MATCHER,
    )
    for action in VALID_ACTIONS
)


@dataclass(frozen=True)
class SuperAdminAccess:
    """Holder of a super role: every action on every resource."""

    role_ids: tuple[str, ...] = field(default_factory=tuple)
    is_super_admin = True

    @property
    def permissions(self) -> tuple[Permission, ...]:
        return WILDCARD_PERMISSIONS

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_super_admin": True,
            "role_ids": list(self.role_ids),
            "permissions": [p.to_dict() for p in self.permissions],
        }


@dataclass(frozen=True)
class ScopedAccess:
    """Post-precedence permission set of a non-super actor."""

    role_ids: tuple[str, ...] = field(default_factory=tuple)
    permissions: tuple[Permission, ...] = field(default_factory=tuple)
    is_super_admin = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_super_admin": False,
            "role_ids": list(self.role_ids),
            "permissions": [p.to_dict() for p in self.permissions],
        }


EffectivePermissions = Union[SuperAdminAccess, ScopedAccess]
