"""
RBAC Permissions - Resource Matcher
===================================
Pure predicate: does a granted permission cover a required one?

Prefix matching is literal, not path-segment aware: a grant on
"/admin/rbac" also covers "/admin/rbac-users". Keep it that way until
the broad-grant behaviour is explicitly decided.
A blank granted matcher covers nothing.
"""

from __future__ import annotations

from typing import Iterable

from rbac.permissions.constants import WILDCARD_MATCHER


def normalize_matcher(matcher: str) -> str:
    return matcher.strip().lower()


def matches(granted, required) -> bool:
    """Return True if `granted` covers `required` (both expose matcher/action)."""
    if granted.action != required.action:
        return False

    granted_matcher = normalize_matcher(granted.matcher)
    if granted_matcher == WILDCARD_MATCHER:
        return True
    if not granted_matcher:
        return False

    required_matcher = normalize_matcher(required.matcher)
    if required_matcher == granted_matcher:
        return True

    return required_matcher.startswith(granted_matcher)


def matches_any(granted: Iterable, required) -> bool:
    return any(matches(permission, required) for permission in granted)
