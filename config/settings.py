"""
RBAC – Django Settings (Infrastructure Only)
============================================
Django serves as the persistence container for the RBAC store.
The engine in rbac.permissions does not depend on Django; only the
DB-backed store and the permissions_store app do.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("RBAC_SECRET_KEY", "rbac-dev-key-replace-before-deployment")

DEBUG = os.environ.get("RBAC_DEBUG", "true").lower() in {"1", "true", "yes"}

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "rbac.permissions_store",
]

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("RBAC_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "rbac": {
            "handlers": ["console"],
            "level": os.environ.get("RBAC_LOG_LEVEL", "INFO"),
        },
    },
}

# ── RBAC ──────────────────────────────────────────────────────
# Name of the permission category owning the base catalog.
RBAC_BOOTSTRAP_CATEGORY_NAME = "RBAC"

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ── Default Primary Key ──────────────────────────────────────
# RBAC tables use string ids explicitly. This is a Django fallback only.
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
