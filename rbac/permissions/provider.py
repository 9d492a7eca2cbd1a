"""
RBAC Permissions - Store Protocol and In-Memory Store
=====================================================
Generic CRUD over the six record kinds. The record dataclass itself is
the kind: store.list(UserRole, {"user_id": actor_id}).

Filters map field -> value. A list/tuple/set/frozenset value means
"field IN values". Results are ordered by id.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Mapping, Optional, Protocol, TypeVar

from rbac.permissions.errors import ConstraintViolationError, RecordNotFoundError
from rbac.permissions.models import (
    RECORD_KINDS,
    Permission,
    PermissionCategory,
    Policy,
    Role,
    RolePermission,
    UserRole,
    new_record_id,
)

R = TypeVar("R")

COLLECTION_TYPES = (list, tuple, set, frozenset)


class RbacStore(Protocol):
    def create(self, kind: type[R], /, **fields: Any) -> R:
        ...

    def retrieve(self, kind: type[R], record_id: str) -> R:
        ...

    def update(self, kind: type[R], record_id: str, /, **changes: Any) -> R:
        ...

    def delete(self, kind: type, record_ids: str | Iterable[str]) -> int:
        ...

    def list(
        self,
        kind: type[R],
        filters: Optional[Mapping[str, Any]] = None,
        *,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> tuple[R, ...]:
        ...

    def count(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> int:
        ...

    def exists(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> bool:
        ...


def kind_name(kind: type) -> str:
    return kind.__name__


def field_names(kind: type) -> frozenset[str]:
    return frozenset(f.name for f in dataclasses.fields(kind))


def validate_kind(kind: type) -> None:
    if kind not in RECORD_KINDS:
        raise ValueError(f"Unknown record kind '{kind!r}'.")


def validate_filters(
    kind: type,
    filters: Optional[Mapping[str, Any]],
    *,
    label: str = "filter",
) -> dict[str, Any]:
    if not filters:
        return {}
    allowed = field_names(kind)
    unknown = sorted(set(filters) - allowed)
    if unknown:
        raise ValueError(
            f"Unknown {label} field(s) {unknown} for {kind_name(kind)}."
        )
    return dict(filters)


def validate_page(skip: int, take: Optional[int]) -> None:
    if not isinstance(skip, int) or skip < 0:
        raise ValueError("skip must be a non-negative integer.")
    if take is not None and (not isinstance(take, int) or take < 0):
        raise ValueError("take must be a non-negative integer or None.")


def normalize_ids(record_ids: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(record_ids, str):
        return (record_ids,)
    return tuple(dict.fromkeys(record_ids))


def _filter_matches(record: Any, filters: Mapping[str, Any]) -> bool:
    for name, expected in filters.items():
        actual = getattr(record, name)
        if isinstance(expected, COLLECTION_TYPES):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


# Secondary indices maintained per kind.
_INDEXED_FIELDS: dict[type, tuple[str, ...]] = {
    PermissionCategory: ("name",),
    Permission: ("key", "category_id"),
    Role: ("name",),
    RolePermission: ("role_id", "permission_id"),
    UserRole: ("user_id", "role_id"),
    Policy: ("role_id", "permission_id"),
}

# (child kind, child field, parent kind)
_REFERENCES: tuple[tuple[type, str, type], ...] = (
    (Permission, "category_id", PermissionCategory),
    (RolePermission, "role_id", Role),
    (RolePermission, "permission_id", Permission),
    (UserRole, "role_id", Role),
    (Policy, "role_id", Role),
    (Policy, "permission_id", Permission),
)

_PROTECTED = frozenset({(Permission, "category_id")})

_UNIQUE_TOGETHER: dict[type, tuple[str, ...]] = {
    RolePermission: ("role_id", "permission_id"),
    UserRole: ("user_id", "role_id"),
}


class InMemoryRbacStore:
    """
    Arena-style store: one table per kind keyed by id, plus secondary
    indices. Mirrors the relational constraints of the DB store.
    """

    def __init__(self):
        self._tables: dict[type, dict[str, Any]] = {
            kind: {} for kind in RECORD_KINDS
        }
        self._indices: dict[type, dict[str, dict[Any, set[str]]]] = {
            kind: {name: {} for name in _INDEXED_FIELDS[kind]}
            for kind in RECORD_KINDS
        }

    # ── index maintenance ────────────────────────────────────
    def _index_add(self, kind: type, record: Any) -> None:
        for name, index in self._indices[kind].items():
            index.setdefault(getattr(record, name), set()).add(record.id)

    def _index_remove(self, kind: type, record: Any) -> None:
        for name, index in self._indices[kind].items():
            value = getattr(record, name)
            ids = index.get(value)
            if ids is None:
                continue
            ids.discard(record.id)
            if not ids:
                del index[value]

    def _candidate_ids(self, kind: type, filters: Mapping[str, Any]) -> Iterable[str]:
        for name, index in self._indices[kind].items():
            if name not in filters:
                continue
            expected = filters[name]
            values = expected if isinstance(expected, COLLECTION_TYPES) else (expected,)
            ids: set[str] = set()
            for value in values:
                ids |= index.get(value, set())
            return ids
        return self._tables[kind].keys()

    # ── constraints ──────────────────────────────────────────
    def _check_constraints(self, kind: type, record: Any) -> None:
        for child_kind, child_field, parent_kind in _REFERENCES:
            if child_kind is not kind:
                continue
            value = getattr(record, child_field)
            if value is None:
                continue
            if value not in self._tables[parent_kind]:
                raise ConstraintViolationError(
                    kind_name(kind),
                    f"{child_field} '{value}' references a missing "
                    f"{kind_name(parent_kind)}.",
                )

        unique_fields = _UNIQUE_TOGETHER.get(kind)
        if unique_fields:
            filters = {name: getattr(record, name) for name in unique_fields}
            for candidate in self._select(kind, filters):
                if candidate.id != record.id:
                    raise ConstraintViolationError(
                        kind_name(kind),
                        f"duplicate {'/'.join(unique_fields)} "
                        f"{tuple(filters.values())}.",
                    )

    def _select(self, kind: type, filters: Mapping[str, Any]) -> list[Any]:
        table = self._tables[kind]
        rows = [
            table[record_id]
            for record_id in self._candidate_ids(kind, filters)
            if _filter_matches(table[record_id], filters)
        ]
        rows.sort(key=lambda row: row.id)
        return rows

    # ── CRUD ─────────────────────────────────────────────────
    def create(self, kind: type[R], /, **fields: Any) -> R:
        validate_kind(kind)
        fields.setdefault("id", new_record_id(kind))
        record = kind(**fields)
        if record.id in self._tables[kind]:
            raise ConstraintViolationError(
                kind_name(kind), f"duplicate id '{record.id}'."
            )
        self._check_constraints(kind, record)
        self._tables[kind][record.id] = record
        self._index_add(kind, record)
        return record

    def retrieve(self, kind: type[R], record_id: str) -> R:
        validate_kind(kind)
        record = self._tables[kind].get(record_id)
        if record is None:
            raise RecordNotFoundError(kind_name(kind), record_id)
        return record

    def update(self, kind: type[R], record_id: str, /, **changes: Any) -> R:
        if "id" in changes and changes["id"] != record_id:
            raise ValueError("id cannot be changed.")
        validate_filters(kind, changes, label="update")
        existing = self.retrieve(kind, record_id)
        updated = dataclasses.replace(existing, **changes)
        self._check_constraints(kind, updated)
        self._index_remove(kind, existing)
        self._tables[kind][record_id] = updated
        self._index_add(kind, updated)
        return updated

    def delete(self, kind: type, record_ids: str | Iterable[str]) -> int:
        validate_kind(kind)
        ids = [
            record_id
            for record_id in normalize_ids(record_ids)
            if record_id in self._tables[kind]
        ]
        if not ids:
            return 0

        for child_kind, child_field, parent_kind in _REFERENCES:
            if parent_kind is not kind:
                continue
            if (child_kind, child_field) in _PROTECTED and self._select(
                child_kind, {child_field: ids}
            ):
                raise ConstraintViolationError(
                    kind_name(kind),
                    f"still referenced by {kind_name(child_kind)}.{child_field}.",
                )

        for child_kind, child_field, parent_kind in _REFERENCES:
            if parent_kind is not kind or (child_kind, child_field) in _PROTECTED:
                continue
            dependants = self._select(child_kind, {child_field: ids})
            self.delete(child_kind, [row.id for row in dependants])

        for record_id in ids:
            record = self._tables[kind].pop(record_id)
            self._index_remove(kind, record)
        return len(ids)

    def list(
        self,
        kind: type[R],
        filters: Optional[Mapping[str, Any]] = None,
        *,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> tuple[R, ...]:
        validate_kind(kind)
        validate_page(skip, take)
        rows = self._select(kind, validate_filters(kind, filters))
        end = None if take is None else skip + take
        return tuple(rows[skip:end])

    def count(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> int:
        validate_kind(kind)
        return len(self._select(kind, validate_filters(kind, filters)))

    def exists(self, kind: type, filters: Optional[Mapping[str, Any]] = None) -> bool:
        validate_kind(kind)
        filters = validate_filters(kind, filters)
        if not filters:
            return bool(self._tables[kind])
        return bool(self._select(kind, filters))
