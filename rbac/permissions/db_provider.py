"""
RBAC Permissions - DB-backed Store
==================================
RbacStore over the relational tables of rbac.permissions_store.
Each write is atomic on its own; multi-step sequences are not wrapped.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Mapping, Optional

from rbac.permissions.errors import ConstraintViolationError, RecordNotFoundError
from rbac.permissions.models import (
    Permission,
    PermissionCategory,
    Policy,
    Role,
    RolePermission,
    UserRole,
    new_record_id,
)
from rbac.permissions.provider import (
    COLLECTION_TYPES,
    R,
    field_names,
    kind_name,
    normalize_ids,
    validate_filters,
    validate_kind,
    validate_page,
)


def _model_for(kind: type):
    from rbac.permissions_store import models as store_models

    validate_kind(kind)
    return {
        PermissionCategory: store_models.PermissionCategory,
        Permission: store_models.Permission,
        Role: store_models.Role,
        RolePermission: store_models.RolePermission,
        UserRole: store_models.UserRole,
        Policy: store_models.Policy,
    }[kind]


def _to_record(kind: type[R], row) -> R:
    return kind(**{name: getattr(row, name) for name in field_names(kind)})


def _lookups(filters: Mapping[str, Any]) -> dict[str, Any]:
    lookups: dict[str, Any] = {}
    for name, value in filters.items():
        if isinstance(value, COLLECTION_TYPES):
            lookups[f"{name}__in"] = list(value)
        else:
            lookups[name] = value
    return lookups


class DbRbacStore:
    def _queryset(self, kind: type, filters: Optional[Mapping[str, Any]]):
        model = _model_for(kind)
        lookups = _lookups(validate_filters(kind, filters))
        return model.objects.filter(**lookups).order_by("id")

    def create(self, kind: type[R], /, **fields: Any) -> R:
        from django.db import IntegrityError, transaction

        model = _model_for(kind)
        fields.setdefault("id", new_record_id(kind))
        record = kind(**fields)
        try:
            with transaction.atomic():
                model.objects.create(**dataclasses.asdict(record))
        except IntegrityError as exc:
            raise ConstraintViolationError(kind_name(kind), str(exc)) from exc
        return record

    def retrieve(self, kind: type[R], record_id: str) -> R:
        model = _model_for(kind)
        row = model.objects.filter(pk=record_id).first()
        if row is None:
            raise RecordNotFoundError(kind_name(kind), record_id)
        return _to_record(kind, row)

    def update(self, kind: type[R], record_id: str, /, **changes: Any) -> R:
        from django.db import IntegrityError, transaction

        if "id" in changes and changes["id"] != record_id:
            raise ValueError("id cannot be changed.")
        validate_filters(kind, changes, label="update")
        model = _model_for(kind)
        updated = dataclasses.replace(self.retrieve(kind, record_id), **changes)
        values = {
            name: value
            for name, value in dataclasses.asdict(updated).items()
            if name != "id"
        }
        try:
            with transaction.atomic():
                model.objects.filter(pk=record_id).update(**values)
        except IntegrityError as exc:
            raise ConstraintViolationError(kind_name(kind), str(exc)) from exc
        return updated

    def delete(self, kind: type, record_ids: str | Iterable[str]) -> int:
        from django.db import IntegrityError, transaction
        from django.db.models import ProtectedError

        model = _model_for(kind)
        ids = normalize_ids(record_ids)
        if not ids:
            return 0
        try:
            with transaction.atomic():
                _, per_model = model.objects.filter(pk__in=ids).delete()
        except (ProtectedError, IntegrityError) as exc:
            raise ConstraintViolationError(kind_name(kind), str(exc)) from exc
        return per_model.get(model._meta.label, 0)

    def list(
        self,
        kind: type[R],
        filters: Optional[Mapping[str, Any]] = None,
        *,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> tuple[R, ...]:
        validate_page(skip, take)
        qs = self._queryset(kind, filters)
        qs = qs[skip:] if take is None else qs[skip:skip + take]
        return tuple(_to_record(kind, row) for row in qs)

    def count(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> int:
        return self._queryset(kind, filters).count()

    def exists(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> bool:
        return self._queryset(kind, filters).exists()
