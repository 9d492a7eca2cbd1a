"""
RBAC Permissions Store - App Configuration
==========================================
Persistent roles, permissions, grants, assignments and policies.
"""

from django.apps import AppConfig


class RbacPermissionsStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "rbac.permissions_store"
    label = "rbac_permissions_store"
    verbose_name = "RBAC Permissions Store"
