"""
RBAC Permissions - Authorization Gate
=====================================
Boundary guard: may this actor perform all of the required operations?

Per request:
    no actor          -> UnauthorizedError
    uninitialized     -> allow (no UserRole exists yet)
    super admin       -> allow
    otherwise         -> every requirement must match some effective
                         permission (AND of ORs)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from rbac.permissions.constants import PERMISSION_DENIED
from rbac.permissions.errors import ForbiddenError, UnauthorizedError
from rbac.permissions.matcher import matches_any
from rbac.permissions.models import PermissionRequirement, UserRole
from rbac.permissions.provider import RbacStore
from rbac.permissions.resolver import PermissionResolver

logger = logging.getLogger("rbac.gate")


@dataclass(frozen=True)
class AuthorizationResult:
    allowed: bool
    rejection_code: Optional[str] = None
    required_permissions: tuple[PermissionRequirement, ...] = field(
        default_factory=tuple
    )
    message: str = ""

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise ForbiddenError(self.required_permissions)


def to_requirement(value: Any) -> PermissionRequirement:
    if isinstance(value, PermissionRequirement):
        return value
    if isinstance(value, Mapping):
        return PermissionRequirement(
            matcher=value.get("matcher"),
            action=value.get("action"),
        )
    raise ValueError("required permissions must be PermissionRequirement or mappings.")


class PermissionGate:
    def __init__(
        self,
        store: RbacStore,
        resolver: PermissionResolver | None = None,
    ):
        self._store = store
        self._resolver = resolver or PermissionResolver(store)

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    @staticmethod
    def _allow() -> AuthorizationResult:
        return AuthorizationResult(allowed=True)

    @staticmethod
    def _deny(
        required: tuple[PermissionRequirement, ...],
        message: str,
    ) -> AuthorizationResult:
        return AuthorizationResult(
            allowed=False,
            rejection_code=PERMISSION_DENIED,
            required_permissions=required,
            message=message,
        )

    def is_initialized(self) -> bool:
        """True once any actor has ever been assigned a role."""
        return self._store.exists(UserRole)

    def is_super_admin(self, actor_id: str) -> bool:
        return self._resolver.is_super_admin(actor_id)

    def authorize(
        self,
        actor_id: str,
        required: Iterable[PermissionRequirement | Mapping[str, Any]],
    ) -> AuthorizationResult:
        if not isinstance(actor_id, str) or not actor_id.strip():
            raise UnauthorizedError()

        requirements = tuple(to_requirement(item) for item in required)

        if not self.is_initialized():
            return self._allow()

        if not requirements:
            return self._allow()

        effective = self._resolver.resolve(actor_id)
        if effective.is_super_admin:
            return self._allow()

        if all(
            matches_any(effective.permissions, requirement)
            for requirement in requirements
        ):
            logger.debug(
                f"Actor '{actor_id}' authorized for "
                f"{len(requirements)} requirement(s)"
            )
            return self._allow()

        logger.info(
            f"Actor '{actor_id}' denied: requires "
            f"{[r.to_dict() for r in requirements]}"
        )
        return self._deny(requirements, "Forbidden")
