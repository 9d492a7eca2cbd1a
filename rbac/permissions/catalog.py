"""
RBAC Permissions - Base Catalog Bootstrap
=========================================
Idempotent seeding of the RBAC permission category and the base
permission catalog.

The seed is not one transaction: category lookup/creation and each
permission insert are separate writes. Re-running after a partial
failure converges because only keys not yet present are inserted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rbac.permissions.constants import (
    ACTION_DELETE,
    ACTION_READ,
    ACTION_WRITE,
    BOOTSTRAP_FORBIDDEN,
    DEFAULT_CATEGORY_NAME,
    KIND_CUSTOM,
    MATCHER_TYPE_API,
)
from rbac.permissions.errors import InvalidStateError, UnauthorizedError
from rbac.permissions.gate import PermissionGate
from rbac.permissions.models import Permission, PermissionCategory
from rbac.permissions.provider import RbacStore

logger = logging.getLogger("rbac.catalog")


@dataclass(frozen=True)
class CatalogEntry:
    key: str
    name: str
    matcher: str
    action: str


_RESOURCES = (
    ("roles", "roles"),
    ("permissions", "permissions"),
    ("users", "user roles"),
    ("permission-categories", "permission categories"),
    ("policies", "policies"),
)

_VERBS = (
    (ACTION_READ, "Read"),
    (ACTION_WRITE, "Write"),
    (ACTION_DELETE, "Delete"),
)

BASE_PERMISSIONS: tuple[CatalogEntry, ...] = tuple(
    CatalogEntry(
        key=f"rbac.{resource}.{action}",
        name=f"{verb} {label}",
        matcher=f"/admin/rbac/{resource}",
        action=action,
    )
    for resource, label in _RESOURCES
    for action, verb in _VERBS
)


@dataclass(frozen=True)
class BootstrapResult:
    initialized: bool
    permission_count: int
    created_count: int = 0

    def to_dict(self) -> dict:
        return {
            "initialized": self.initialized,
            "permission_count": self.permission_count,
            "created_count": self.created_count,
        }


def configured_category_name() -> str:
    from django.conf import settings

    if not settings.configured:
        return DEFAULT_CATEGORY_NAME
    return getattr(settings, "RBAC_BOOTSTRAP_CATEGORY_NAME", DEFAULT_CATEGORY_NAME)


class CatalogBootstrapper:
    def __init__(
        self,
        store: RbacStore,
        gate: PermissionGate | None = None,
        *,
        category_name: str | None = None,
        catalog: tuple[CatalogEntry, ...] = BASE_PERMISSIONS,
    ):
        self._store = store
        self._gate = gate or PermissionGate(store)
        self._category_name = category_name
        self._catalog = catalog

    @property
    def category_name(self) -> str:
        return self._category_name or configured_category_name()

    def _ensure_category(self) -> PermissionCategory:
        existing = self._store.list(
            PermissionCategory, {"name": self.category_name}, take=1
        )
        if existing:
            return existing[0]
        category = self._store.create(
            PermissionCategory,
            name=self.category_name,
            kind=KIND_CUSTOM,
        )
        logger.info(f"Created permission category '{category.name}' ({category.id})")
        return category

    def bootstrap(self, actor_id: str) -> BootstrapResult:
        if not isinstance(actor_id, str) or not actor_id.strip():
            raise UnauthorizedError()

        if self._gate.is_initialized() and not self._gate.is_super_admin(actor_id):
            raise InvalidStateError(
                BOOTSTRAP_FORBIDDEN,
                "RBAC is already initialized; only a super admin may re-run bootstrap.",
            )

        category = self._ensure_category()

        keys = [entry.key for entry in self._catalog]
        existing = self._store.list(Permission, {"key": keys})
        existing_keys = {permission.key for permission in existing}
        missing = [entry for entry in self._catalog if entry.key not in existing_keys]

        for entry in missing:
            self._store.create(
                Permission,
                name=entry.name,
                description=entry.name,
                key=entry.key,
                matcher=entry.matcher,
                action=entry.action,
                kind=KIND_CUSTOM,
                matcher_type=MATCHER_TYPE_API,
                category_id=category.id,
                method="",
                path=entry.matcher,
            )

        logger.info(
            f"RBAC bootstrap by '{actor_id}': {len(missing)} created, "
            f"{len(existing)} already present"
        )
        return BootstrapResult(
            initialized=True,
            permission_count=len(existing) + len(missing),
            created_count=len(missing),
        )
