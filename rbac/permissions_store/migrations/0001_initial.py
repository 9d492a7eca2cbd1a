from django.db import migrations, models


_KIND_CHOICES = [("predefined", "Predefined"), ("custom", "Custom")]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PermissionCategory",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "kind",
                    models.CharField(
                        choices=_KIND_CHOICES,
                        default="custom",
                        max_length=20,
                    ),
                ),
            ],
            options={
                "db_table": "rbac_permission_category",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["name"], name="idx_rbac_pcat_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Role",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("is_super", models.BooleanField(default=False)),
            ],
            options={
                "db_table": "rbac_role",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["name"], name="idx_rbac_role_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Permission",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                (
                    "kind",
                    models.CharField(
                        choices=_KIND_CHOICES,
                        default="custom",
                        max_length=20,
                    ),
                ),
                (
                    "matcher_type",
                    models.CharField(
                        choices=[("api", "API")],
                        default="api",
                        max_length=20,
                    ),
                ),
                ("matcher", models.CharField(max_length=512)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("read", "Read"),
                            ("write", "Write"),
                            ("delete", "Delete"),
                        ],
                        max_length=20,
                    ),
                ),
                ("key", models.CharField(max_length=255)),
                ("method", models.CharField(blank=True, default="", max_length=16)),
                ("path", models.CharField(blank=True, default="", max_length=512)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        db_column="category_id",
                        null=True,
                        on_delete=models.deletion.PROTECT,
                        related_name="permissions",
                        to="rbac_permissions_store.permissioncategory",
                    ),
                ),
            ],
            options={
                "db_table": "rbac_permission",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["key"], name="idx_rbac_perm_key"),
                ],
            },
        ),
        migrations.CreateModel(
            name="RolePermission",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        db_column="role_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="role_permissions",
                        to="rbac_permissions_store.role",
                    ),
                ),
                (
                    "permission",
                    models.ForeignKey(
                        db_column="permission_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="role_permissions",
                        to="rbac_permissions_store.permission",
                    ),
                ),
            ],
            options={
                "db_table": "rbac_role_permission",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("role", "permission"),
                        name="uq_rbac_role_permission",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="UserRole",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("user_id", models.CharField(max_length=255)),
                (
                    "role",
                    models.ForeignKey(
                        db_column="role_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="user_roles",
                        to="rbac_permissions_store.role",
                    ),
                ),
            ],
            options={
                "db_table": "rbac_user_role",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["user_id"], name="idx_rbac_user_role_user"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_id", "role"),
                        name="uq_rbac_user_role",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Policy",
            fields=[
                (
                    "id",
                    models.CharField(
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("allow", "Allow"), ("deny", "Deny")],
                        max_length=10,
                    ),
                ),
                (
                    "role",
                    models.ForeignKey(
                        db_column="role_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="policies",
                        to="rbac_permissions_store.role",
                    ),
                ),
                (
                    "permission",
                    models.ForeignKey(
                        db_column="permission_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="policies",
                        to="rbac_permissions_store.permission",
                    ),
                ),
            ],
            options={
                "db_table": "rbac_policy",
                "ordering": ["id"],
            },
        ),
    ]
