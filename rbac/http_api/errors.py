"""
RBAC HTTP API - Error Mapping
=============================
Stable transport mapping for authorization outcomes and store failures.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from rbac.http_api.contracts import HttpApiErrorBody, HttpApiResponse
from rbac.permissions.constants import BOOTSTRAP_FORBIDDEN
from rbac.permissions.errors import (
    ConstraintViolationError,
    ForbiddenError,
    InvalidStateError,
    RbacError,
    RecordNotFoundError,
    UnauthorizedError,
)

_INVALID_STATE_STATUS = {BOOTSTRAP_FORBIDDEN: 403}


def error_response(
    *,
    status: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        status=status,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(data: Any, *, status: int = 200) -> dict[str, Any]:
    return HttpApiResponse(ok=True, status=status, data=data).to_dict()


def unauthorized_response() -> dict[str, Any]:
    return error_response(status=401, code="UNAUTHORIZED", message="Unauthorized")


def forbidden_response(required_permissions: Sequence = ()) -> dict[str, Any]:
    details = {}
    if required_permissions:
        details["required_permissions"] = [
            requirement.to_dict() for requirement in required_permissions
        ]
    return error_response(
        status=403,
        code="FORBIDDEN",
        message="Forbidden",
        details=details,
    )


def exception_response(exc: RbacError | ValueError, *, action: str) -> dict[str, Any]:
    if isinstance(exc, UnauthorizedError):
        return unauthorized_response()
    if isinstance(exc, ForbiddenError):
        return forbidden_response(exc.required_permissions)
    if isinstance(exc, InvalidStateError):
        return error_response(
            status=_INVALID_STATE_STATUS.get(exc.code, 400),
            code=exc.code,
            message=exc.reason,
        )
    if isinstance(exc, RecordNotFoundError):
        return error_response(
            status=404,
            code="NOT_FOUND",
            message=str(exc),
            details={"kind": exc.kind, "id": exc.record_id},
        )
    if isinstance(exc, ConstraintViolationError):
        return error_response(
            status=409,
            code="CONSTRAINT_VIOLATION",
            message=f"Failed to {action}.",
            details={"kind": exc.kind},
        )
    if isinstance(exc, ValueError):
        return error_response(status=400, code="INVALID_REQUEST", message=str(exc))
    return error_response(status=400, code="RBAC_ERROR", message=str(exc))
