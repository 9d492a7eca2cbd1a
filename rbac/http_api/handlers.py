"""
RBAC HTTP API - Framework-Agnostic Handlers
===========================================
Pure handler functions over an injected store. Each privileged handler
is guarded by the permission gate using the resource's route matcher
and the verb's action (read/write/delete).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from rbac.http_api.errors import (
    exception_response,
    forbidden_response,
    success_response,
    unauthorized_response,
)
from rbac.permissions.catalog import CatalogBootstrapper
from rbac.permissions.constants import (
    ACTION_DELETE,
    ACTION_READ,
    ACTION_WRITE,
    KIND_CUSTOM,
    MATCHER_TYPE_API,
)
from rbac.permissions.errors import RbacError, UnauthorizedError
from rbac.permissions.gate import PermissionGate
from rbac.permissions.models import (
    Permission,
    PermissionCategory,
    PermissionRequirement,
    Policy,
    Role,
    UserRole,
)
from rbac.permissions.provider import RbacStore, field_names
from rbac.permissions.records import (
    category_permissions,
    create_category,
    create_permission,
    delete_category as delete_store_category,
    delete_permission as delete_store_permission,
    update_category,
    update_permission,
)
from rbac.permissions.roles import (
    assign_roles,
    create_role,
    delete_policy as delete_store_policy,
    delete_role as delete_store_role,
    describe_role,
    grant_permissions,
    list_role_permissions,
    revoke_permissions,
    set_policy,
    unassign_roles,
    update_policy,
    update_role,
)

RESOURCE_KINDS: dict[str, type] = {
    "roles": Role,
    "permissions": Permission,
    "permission-categories": PermissionCategory,
    "policies": Policy,
    "users": UserRole,
}

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200


@dataclass(frozen=True)
class RbacDependencies:
    store: RbacStore


def _requirement(resource: str, action: str) -> PermissionRequirement:
    return PermissionRequirement(matcher=f"/admin/rbac/{resource}", action=action)


def require_permissions(
    dependencies,
    actor_id: Optional[str],
    required,
) -> dict[str, Any] | None:
    """Return an error response when the actor may not proceed, else None."""
    gate = PermissionGate(dependencies.store)
    try:
        result = gate.authorize(actor_id, required)
    except UnauthorizedError:
        return unauthorized_response()
    if result.allowed:
        return None
    return forbidden_response(result.required_permissions)


def _guarded(
    dependencies,
    actor_id: Optional[str],
    resource: str,
    action: str,
) -> dict[str, Any] | None:
    return require_permissions(
        dependencies,
        actor_id,
        (_requirement(resource, action),),
    )


def _body(body: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise ValueError("request body must be an object.")
    return dict(body)


def _positive_int(
    value: Any,
    *,
    field_name: str,
    default: int,
    maximum: int | None = None,
) -> int:
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer.") from exc
    if number < 1:
        raise ValueError(f"{field_name} must be >= 1.")
    if maximum is not None and number > maximum:
        raise ValueError(f"{field_name} must be <= {maximum}.")
    return number


def _flag(value: Any, *, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0"}:
        return False
    raise ValueError(f"{field_name} must be a boolean.")


# ══════════════════════════════════════════════════════════════
# SELF / BOOTSTRAP
# ══════════════════════════════════════════════════════════════

def get_me(dependencies, actor_id: Optional[str]) -> dict[str, Any]:
    if not isinstance(actor_id, str) or not actor_id.strip():
        return unauthorized_response()

    gate = PermissionGate(dependencies.store)
    effective = gate.resolver.resolve(actor_id)
    roles = gate.resolver.user_roles(actor_id)
    return success_response(
        {
            "user_id": actor_id,
            **effective.to_dict(),
            "roles": [role.to_dict() for role in roles],
        }
    )


def post_bootstrap(dependencies, actor_id: Optional[str]) -> dict[str, Any]:
    try:
        result = CatalogBootstrapper(dependencies.store).bootstrap(actor_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="bootstrap RBAC")
    return success_response(result.to_dict())


# ══════════════════════════════════════════════════════════════
# LISTING
# ══════════════════════════════════════════════════════════════

def list_records(
    dependencies,
    actor_id: Optional[str],
    resource: str,
    query: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    kind = RESOURCE_KINDS.get(resource)
    if kind is None:
        return exception_response(
            ValueError(f"Unknown resource '{resource}'."),
            action="list records",
        )

    rejection = _guarded(dependencies, actor_id, resource, ACTION_READ)
    if rejection is not None:
        return rejection

    try:
        params = _body(query)
        page = _positive_int(params.pop("page", None), field_name="page", default=1)
        limit = _positive_int(
            params.pop("limit", None),
            field_name="limit",
            default=DEFAULT_PAGE_LIMIT,
            maximum=MAX_PAGE_LIMIT,
        )
        allowed = field_names(kind)
        filters = {name: value for name, value in params.items() if name in allowed}
        store = dependencies.store
        records = store.list(kind, filters, skip=(page - 1) * limit, take=limit)
        count = store.count(kind, filters)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action=f"list {resource}")

    return success_response(
        {
            "items": [record.to_dict() for record in records],
            "count": count,
            "page": page,
            "limit": limit,
            "last_page": math.ceil(count / limit),
        }
    )


# ══════════════════════════════════════════════════════════════
# ROLES
# ══════════════════════════════════════════════════════════════

def post_role_create(dependencies, actor_id, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        role = create_role(
            dependencies.store,
            name=payload.get("name"),
            description=payload.get("description"),
            is_super=payload.get("is_super", False),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="create role")
    return success_response(role.to_dict(), status=201)


def get_role(dependencies, actor_id, role_id: str, query=None) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_READ)
    if rejection is not None:
        return rejection
    try:
        params = _body(query)
        detail = describe_role(
            dependencies.store,
            role_id,
            include_permissions=_flag(
                params.get("include_permissions"),
                field_name="include_permissions",
                default=True,
            ),
            include_policies=_flag(
                params.get("include_policies"),
                field_name="include_policies",
                default=True,
            ),
            include_users=_flag(
                params.get("include_users"),
                field_name="include_users",
                default=False,
            ),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="read role")
    return success_response(detail)


def post_role_update(dependencies, actor_id, role_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        role = update_role(dependencies.store, role_id, **_body(body))
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="update role")
    return success_response(role.to_dict())


def delete_role(dependencies, actor_id, role_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        deleted_id = delete_store_role(dependencies.store, role_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="delete role")
    return success_response({"id": deleted_id, "deleted": True})


def get_role_permissions(dependencies, actor_id, role_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_READ)
    if rejection is not None:
        return rejection
    try:
        permissions = list_role_permissions(dependencies.store, role_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="read role permissions")
    return success_response(
        {
            "role_id": role_id,
            "permissions": [permission.to_dict() for permission in permissions],
        }
    )


def post_role_permissions(dependencies, actor_id, role_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        dependencies.store.retrieve(Role, role_id)
        created = grant_permissions(
            dependencies.store,
            role_id,
            permission_ids=payload.get("permission_ids"),
            permission_keys=payload.get("permission_keys"),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="grant permissions")
    return success_response(
        {"role_id": role_id, "created": [row.to_dict() for row in created]}
    )


def delete_role_permissions(dependencies, actor_id, role_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "roles", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        deleted = revoke_permissions(
            dependencies.store,
            role_id,
            permission_ids=payload.get("permission_ids"),
            permission_keys=payload.get("permission_keys"),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="revoke permissions")
    return success_response({"role_id": role_id, "deleted": list(deleted)})


# ══════════════════════════════════════════════════════════════
# PERMISSIONS
# ══════════════════════════════════════════════════════════════

def get_permission(dependencies, actor_id, permission_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permissions", ACTION_READ)
    if rejection is not None:
        return rejection
    try:
        permission = dependencies.store.retrieve(Permission, permission_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="read permission")
    return success_response(permission.to_dict())


def post_permission_create(dependencies, actor_id, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permissions", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        permission = create_permission(
            dependencies.store,
            name=payload.get("name"),
            matcher=payload.get("matcher"),
            action=payload.get("action"),
            key=payload.get("key"),
            category_id=payload.get("category_id"),
            description=payload.get("description"),
            kind=payload.get("kind", KIND_CUSTOM),
            matcher_type=payload.get("matcher_type", MATCHER_TYPE_API),
            method=payload.get("method", ""),
            path=payload.get("path", ""),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="create permission")
    return success_response(permission.to_dict(), status=201)


def post_permission_update(
    dependencies,
    actor_id,
    permission_id: str,
    body,
) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permissions", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        permission = update_permission(dependencies.store, permission_id, **_body(body))
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="update permission")
    return success_response(permission.to_dict())


def delete_permission(dependencies, actor_id, permission_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permissions", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        deleted_id = delete_store_permission(dependencies.store, permission_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="delete permission")
    return success_response({"id": deleted_id, "deleted": True})


# ══════════════════════════════════════════════════════════════
# PERMISSION CATEGORIES
# ══════════════════════════════════════════════════════════════

def get_permission_category(dependencies, actor_id, category_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permission-categories", ACTION_READ)
    if rejection is not None:
        return rejection
    try:
        category = dependencies.store.retrieve(PermissionCategory, category_id)
        permissions = category_permissions(dependencies.store, category_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="read permission category")
    return success_response(
        {
            **category.to_dict(),
            "permissions": [permission.to_dict() for permission in permissions],
        }
    )


def post_permission_category_create(dependencies, actor_id, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permission-categories", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        category = create_category(
            dependencies.store,
            name=payload.get("name"),
            kind=payload.get("kind", KIND_CUSTOM),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="create permission category")
    return success_response(category.to_dict(), status=201)


def post_permission_category_update(
    dependencies,
    actor_id,
    category_id: str,
    body,
) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permission-categories", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        category = update_category(dependencies.store, category_id, **_body(body))
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="update permission category")
    return success_response(category.to_dict())


def delete_permission_category(dependencies, actor_id, category_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "permission-categories", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        deleted_id = delete_store_category(dependencies.store, category_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="delete permission category")
    return success_response({"id": deleted_id, "deleted": True})


# ══════════════════════════════════════════════════════════════
# USER ROLE ASSIGNMENTS
# ══════════════════════════════════════════════════════════════

def get_user_roles(dependencies, actor_id, user_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "users", ACTION_READ)
    if rejection is not None:
        return rejection
    gate = PermissionGate(dependencies.store)
    rows = gate.resolver.user_role_rows(user_id)
    roles = gate.resolver.user_roles(user_id)
    return success_response(
        {
            "user_id": user_id,
            "roles": [role.to_dict() for role in roles],
            "role_ids": [row.role_id for row in rows],
        }
    )


def get_user_effective_permissions(dependencies, actor_id, user_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "users", ACTION_READ)
    if rejection is not None:
        return rejection
    effective = PermissionGate(dependencies.store).resolver.resolve(user_id)
    return success_response({"user_id": user_id, **effective.to_dict()})


def post_user_roles(dependencies, actor_id, user_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "users", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        created = assign_roles(
            dependencies.store,
            user_id,
            role_ids=payload.get("role_ids"),
            role_names=payload.get("role_names"),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="assign roles")
    return success_response(
        {"user_id": user_id, "created": [row.to_dict() for row in created]}
    )


def delete_user_roles(dependencies, actor_id, user_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "users", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        deleted = unassign_roles(
            dependencies.store,
            user_id,
            role_ids=payload.get("role_ids"),
            role_names=payload.get("role_names"),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="unassign roles")
    return success_response({"user_id": user_id, "deleted": list(deleted)})


# ══════════════════════════════════════════════════════════════
# POLICIES
# ══════════════════════════════════════════════════════════════

def post_policy(dependencies, actor_id, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "policies", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        policy = set_policy(
            dependencies.store,
            role_id=payload.get("role_id"),
            permission_id=payload.get("permission_id"),
            type=payload.get("type"),
        )
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="create policy")
    return success_response(policy.to_dict(), status=201)


def get_policy(dependencies, actor_id, policy_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "policies", ACTION_READ)
    if rejection is not None:
        return rejection
    try:
        store = dependencies.store
        policy = store.retrieve(Policy, policy_id)
        role = store.retrieve(Role, policy.role_id)
        permission = store.retrieve(Permission, policy.permission_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="read policy")
    return success_response(
        {**policy.to_dict(), "role": role.to_dict(), "permission": permission.to_dict()}
    )


def post_policy_update(dependencies, actor_id, policy_id: str, body) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "policies", ACTION_WRITE)
    if rejection is not None:
        return rejection
    try:
        payload = _body(body)
        policy = update_policy(dependencies.store, policy_id, type=payload.get("type"))
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="update policy")
    return success_response(policy.to_dict())


def delete_policy(dependencies, actor_id, policy_id: str) -> dict[str, Any]:
    rejection = _guarded(dependencies, actor_id, "policies", ACTION_DELETE)
    if rejection is not None:
        return rejection
    try:
        deleted_id = delete_store_policy(dependencies.store, policy_id)
    except (RbacError, ValueError) as exc:
        return exception_response(exc, action="delete policy")
    return success_response({"id": deleted_id, "deleted": True})
