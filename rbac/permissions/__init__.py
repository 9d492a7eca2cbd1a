"""
RBAC Permissions - Public API
=============================
"""

from rbac.permissions.constants import (
    ACTION_DELETE,
    ACTION_READ,
    ACTION_WRITE,
    POLICY_ALLOW,
    POLICY_DENY,
    WILDCARD_MATCHER,
)
from rbac.permissions.db_provider import DbRbacStore
from rbac.permissions.errors import (
    ConstraintViolationError,
    ForbiddenError,
    InvalidStateError,
    RbacError,
    RecordNotFoundError,
    UnauthorizedError,
)
from rbac.permissions.matcher import matches, matches_any
from rbac.permissions.models import (
    EffectivePermissions,
    Permission,
    PermissionCategory,
    PermissionRequirement,
    Policy,
    Role,
    RolePermission,
    ScopedAccess,
    SuperAdminAccess,
    UserRole,
)
from rbac.permissions.provider import InMemoryRbacStore, RbacStore
from rbac.permissions.resolver import PermissionResolver


def __getattr__(name: str):
    if name in {"PermissionGate", "AuthorizationResult"}:
        from rbac.permissions.gate import AuthorizationResult, PermissionGate

        if name == "PermissionGate":
            return PermissionGate
        return AuthorizationResult
    if name in {"CatalogBootstrapper", "BootstrapResult", "BASE_PERMISSIONS"}:
        from rbac.permissions import catalog

        return getattr(catalog, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "ACTION_READ",
    "ACTION_WRITE",
    "ACTION_DELETE",
    "POLICY_ALLOW",
    "POLICY_DENY",
    "WILDCARD_MATCHER",
    "Permission",
    "PermissionCategory",
    "PermissionRequirement",
    "Policy",
    "Role",
    "RolePermission",
    "UserRole",
    "EffectivePermissions",
    "ScopedAccess",
    "SuperAdminAccess",
    "RbacStore",
    "InMemoryRbacStore",
    "DbRbacStore",
    "PermissionResolver",
    "PermissionGate",
    "AuthorizationResult",
    "CatalogBootstrapper",
    "BootstrapResult",
    "BASE_PERMISSIONS",
    "matches",
    "matches_any",
    "RbacError",
    "UnauthorizedError",
    "ForbiddenError",
    "InvalidStateError",
    "RecordNotFoundError",
    "ConstraintViolationError",
]
