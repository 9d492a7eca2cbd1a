"""
RBAC Permissions - Effective Permission Resolver
================================================
Aggregates an actor's roles, direct grants and allow/deny policies
into one effective permission set. Read-only; nothing is cached.

Precedence:
    1. Any held super role  -> SuperAdminAccess (grants/policies ignored)
    2. effective ids = (granted ∪ allowed) \\ denied
       A deny from any held role removes the permission for the actor.
"""

from __future__ import annotations

import logging

from rbac.permissions.constants import POLICY_DENY
from rbac.permissions.models import (
    EffectivePermissions,
    Permission,
    Policy,
    Role,
    RolePermission,
    ScopedAccess,
    SuperAdminAccess,
    UserRole,
)
from rbac.permissions.provider import RbacStore

logger = logging.getLogger("rbac.resolver")


def _clean_actor_id(actor_id) -> str:
    if not isinstance(actor_id, str):
        return ""
    return actor_id.strip()


class PermissionResolver:
    def __init__(self, store: RbacStore):
        self._store = store

    @property
    def store(self) -> RbacStore:
        return self._store

    def user_role_rows(self, actor_id: str) -> tuple[UserRole, ...]:
        actor_id = _clean_actor_id(actor_id)
        if not actor_id:
            return tuple()
        return self._store.list(UserRole, {"user_id": actor_id})

    def user_roles(self, actor_id: str) -> tuple[Role, ...]:
        """Roles assigned to the actor, in assignment-id order."""
        rows = self.user_role_rows(actor_id)
        if not rows:
            return tuple()
        roles_by_id = {
            role.id: role
            for role in self._store.list(Role, {"id": [row.role_id for row in rows]})
        }
        return tuple(
            roles_by_id[row.role_id] for row in rows if row.role_id in roles_by_id
        )

    def is_super_admin(self, actor_id: str) -> bool:
        return any(role.is_super for role in self.user_roles(actor_id))

    def resolve(self, actor_id: str) -> EffectivePermissions:
        rows = self.user_role_rows(actor_id)
        role_ids = tuple(row.role_id for row in rows)
        if not role_ids:
            return ScopedAccess()

        roles = self._store.list(Role, {"id": list(role_ids)})
        if any(role.is_super for role in roles):
            logger.debug(f"Actor '{actor_id}' resolved as super admin")
            return SuperAdminAccess(role_ids=role_ids)

        granted = {
            row.permission_id
            for row in self._store.list(RolePermission, {"role_id": list(role_ids)})
        }

        allowed: set[str] = set()
        denied: set[str] = set()
        for policy in self._store.list(Policy, {"role_id": list(role_ids)}):
            if policy.type == POLICY_DENY:
                denied.add(policy.permission_id)
            else:
                allowed.add(policy.permission_id)

        effective_ids = (granted | allowed) - denied
        permissions = (
            self._store.list(Permission, {"id": sorted(effective_ids)})
            if effective_ids
            else tuple()
        )

        logger.debug(
            f"Actor '{actor_id}' resolved {len(permissions)} permission(s) "
            f"from {len(role_ids)} role(s), {len(denied)} denied"
        )
        return ScopedAccess(role_ids=role_ids, permissions=permissions)
