"""
RBAC Permissions Store - Relational Tables
==========================================
Six tables keyed by opaque string ids. Join rows cascade with their
role or permission; a category cannot be removed while permissions
still reference it.
"""

from __future__ import annotations

from django.db import models


class RecordKind(models.TextChoices):
    PREDEFINED = "predefined", "Predefined"
    CUSTOM = "custom", "Custom"


class MatcherType(models.TextChoices):
    API = "api", "API"


class ActionType(models.TextChoices):
    READ = "read", "Read"
    WRITE = "write", "Write"
    DELETE = "delete", "Delete"


class PolicyType(models.TextChoices):
    ALLOW = "allow", "Allow"
    DENY = "deny", "Deny"


class PermissionCategory(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    name = models.CharField(max_length=255)
    kind = models.CharField(
        max_length=20,
        choices=RecordKind.choices,
        default=RecordKind.CUSTOM,
    )

    class Meta:
        db_table = "rbac_permission_category"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["name"], name="idx_rbac_pcat_name"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Permission(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    kind = models.CharField(
        max_length=20,
        choices=RecordKind.choices,
        default=RecordKind.CUSTOM,
    )
    matcher_type = models.CharField(
        max_length=20,
        choices=MatcherType.choices,
        default=MatcherType.API,
    )
    matcher = models.CharField(max_length=512)
    action = models.CharField(max_length=20, choices=ActionType.choices)
    category = models.ForeignKey(
        PermissionCategory,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="permissions",
        db_column="category_id",
    )
    key = models.CharField(max_length=255)
    method = models.CharField(max_length=16, default="", blank=True)
    path = models.CharField(max_length=512, default="", blank=True)

    class Meta:
        db_table = "rbac_permission"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["key"], name="idx_rbac_perm_key"),
        ]

    def __str__(self) -> str:
        return f"{self.key} ({self.action} {self.matcher})"


class Role(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    is_super = models.BooleanField(default=False)

    class Meta:
        db_table = "rbac_role"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["name"], name="idx_rbac_role_name"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class RolePermission(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name="role_permissions",
        db_column="role_id",
    )
    permission = models.ForeignKey(
        Permission,
        on_delete=models.CASCADE,
        related_name="role_permissions",
        db_column="permission_id",
    )

    class Meta:
        db_table = "rbac_role_permission"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["role", "permission"],
                name="uq_rbac_role_permission",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.role_id}:{self.permission_id}"


class UserRole(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    user_id = models.CharField(max_length=255)
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name="user_roles",
        db_column="role_id",
    )

    class Meta:
        db_table = "rbac_user_role"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["user_id"], name="idx_rbac_user_role_user"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "role"],
                name="uq_rbac_user_role",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.role_id}"


class Policy(models.Model):
    id = models.CharField(primary_key=True, max_length=64, editable=False)
    type = models.CharField(max_length=10, choices=PolicyType.choices)
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name="policies",
        db_column="role_id",
    )
    permission = models.ForeignKey(
        Permission,
        on_delete=models.CASCADE,
        related_name="policies",
        db_column="permission_id",
    )

    class Meta:
        db_table = "rbac_policy"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.role_id}:{self.permission_id}:{self.type}"
