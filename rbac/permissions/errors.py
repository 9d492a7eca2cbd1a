"""
RBAC Permissions - Exceptions
=============================
Structured errors for authorization and store operations.

Authorization denials on the normal path are returned as
AuthorizationResult values, not raised. These exceptions cover
missing actors, rejected operations and store failures.
"""

from __future__ import annotations

from typing import Sequence


class RbacError(Exception):
    """Base error for RBAC operations."""
    pass


class UnauthorizedError(RbacError):
    """No actor context was supplied."""

    def __init__(self, message: str = "Actor is required."):
        super().__init__(message)


class ForbiddenError(RbacError):
    """Actor is authenticated but the required permissions are not held."""

    def __init__(self, required_permissions: Sequence):
        self.required_permissions = tuple(required_permissions)
        super().__init__("Forbidden")


class InvalidStateError(RbacError):
    """Operation rejected in the current state (e.g. mutating a super role)."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(reason)


class StoreError(RbacError):
    """Base error raised by RBAC stores."""
    pass


class RecordNotFoundError(StoreError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} with id '{record_id}' was not found.")


class ConstraintViolationError(StoreError):
    def __init__(self, kind: str, detail: str):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind}: {detail}")
