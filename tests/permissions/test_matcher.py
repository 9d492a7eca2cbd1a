from __future__ import annotations

import pytest

from rbac.permissions.matcher import matches, matches_any, normalize_matcher
from rbac.permissions.models import PermissionRequirement


def _req(matcher: str, action: str = "read") -> PermissionRequirement:
    return PermissionRequirement(matcher=matcher, action=action)


def test_wildcard_covers_any_matcher_for_same_action_only() -> None:
    granted = _req("*", "read")

    assert matches(granted, _req("/anything", "read"))
    assert matches(granted, _req("", "read"))
    assert not matches(granted, _req("/anything", "write"))
    assert not matches(granted, _req("/anything", "delete"))


def test_actions_are_disjoint() -> None:
    assert not matches(_req("/x", "write"), _req("/x", "read"))
    assert not matches(_req("/x", "read"), _req("/x", "delete"))


def test_exact_match_is_normalized() -> None:
    assert matches(_req("  /Admin/RBAC  "), _req("/admin/rbac"))
    assert normalize_matcher("  /Admin/RBAC ") == "/admin/rbac"


def test_prefix_grant_covers_nested_resource() -> None:
    assert matches(_req("/admin/rbac"), _req("/admin/rbac/roles"))


def test_prefix_is_literal_not_segment_aware() -> None:
    # Known broadening: a grant on "/admin/rbac" also covers "/admin/rbac-users".
    assert matches(_req("/admin/rbac"), _req("/admin/rbac-users"))


def test_blank_grant_covers_nothing() -> None:
    assert not matches(_req("   ", "delete"), _req("/admin/anything", "delete"))
    assert not matches(_req("", "read"), _req("", "read"))


def test_longer_grant_does_not_cover_shorter_requirement() -> None:
    assert not matches(_req("/admin/rbac/roles"), _req("/admin/rbac"))
    assert not matches(_req("/admin/products"), _req("/admin/rbac"))


@pytest.mark.parametrize(
    ("granted", "expected"),
    [
        ((), False),
        ((_req("/other"),), False),
        ((_req("/other"), _req("/x")), True),
    ],
)
def test_matches_any_is_an_or_over_grants(granted, expected) -> None:
    assert matches_any(granted, _req("/x/1")) is expected
