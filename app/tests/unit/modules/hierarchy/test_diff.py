"""Unit tests for membership snapshot diffing."""

import pytest

from modules.hierarchy.core.diff import diff_memberships
from modules.hierarchy.domain.models import EnumeratedMembership

pytestmark = pytest.mark.unit


def _m(user_id, group_id, direct=True, is_admin=False):
    return EnumeratedMembership(
        user_id=user_id, group_id=group_id, direct=direct, is_admin=is_admin
    )


class TestDiffMemberships:
    def test_identical_snapshots_have_empty_diff(self):
        snapshot = [_m("u1", "g1"), _m("u2", "g1", direct=False)]

        diff = diff_memberships(snapshot, list(snapshot))

        assert diff.is_empty
        assert diff.added == []
        assert diff.removed == []

    def test_added_and_removed_pairs(self):
        before = [_m("u1", "g1"), _m("u1", "g2", direct=False)]
        after = [_m("u1", "g1"), _m("u2", "g3", direct=False)]

        diff = diff_memberships(before, after)

        assert [m.key for m in diff.added] == [("u2", "g3")]
        assert [m.key for m in diff.removed] == [("u1", "g2")]

    def test_removed_entries_come_from_before_snapshot(self):
        before = [_m("u1", "g2", direct=False)]

        diff = diff_memberships(before, [])

        assert diff.removed[0] is before[0]

    def test_admin_only_change_is_not_reported(self):
        before = [_m("u1", "g1", is_admin=False)]
        after = [_m("u1", "g1", is_admin=True)]

        assert diff_memberships(before, after).is_empty

    def test_direct_to_indirect_change_is_not_reported(self):
        before = [_m("u1", "g1", direct=True)]
        after = [_m("u1", "g1", direct=False)]

        assert diff_memberships(before, after).is_empty

    def test_output_keeps_snapshot_order(self):
        after = [_m("u2", "g9"), _m("u1", "g3"), _m("u1", "g1")]

        diff = diff_memberships([], after)

        assert [m.key for m in diff.added] == [("u2", "g9"), ("u1", "g3"), ("u1", "g1")]

