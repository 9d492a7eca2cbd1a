"""
RBAC Permissions - Constants
============================
Fixed vocabularies for actions, record kinds and policy types.
"""

ACTION_READ = "read"
ACTION_WRITE = "write"
ACTION_DELETE = "delete"

VALID_ACTIONS = (ACTION_READ, ACTION_WRITE, ACTION_DELETE)

KIND_PREDEFINED = "predefined"
KIND_CUSTOM = "custom"

VALID_KINDS = frozenset({KIND_PREDEFINED, KIND_CUSTOM})

MATCHER_TYPE_API = "api"

VALID_MATCHER_TYPES = frozenset({MATCHER_TYPE_API})

POLICY_ALLOW = "allow"
POLICY_DENY = "deny"

VALID_POLICY_TYPES = frozenset({POLICY_ALLOW, POLICY_DENY})

WILDCARD_MATCHER = "*"

DEFAULT_CATEGORY_NAME = "RBAC"

# ── Rejection codes ───────────────────────────────────────────
PERMISSION_DENIED = "PERMISSION_DENIED"
BOOTSTRAP_FORBIDDEN = "BOOTSTRAP_FORBIDDEN"
SUPER_ROLE_IMMUTABLE = "SUPER_ROLE_IMMUTABLE"
