"""Membership snapshot diffing."""

from typing import Dict, Iterable, Tuple

from modules.hierarchy.domain.models import EnumeratedMembership, MembershipDiff


def _index(snapshot: Iterable[EnumeratedMembership]) -> Dict[Tuple[str, str], EnumeratedMembership]:
    index: Dict[Tuple[str, str], EnumeratedMembership] = {}
    for membership in snapshot:
        index.setdefault(membership.key, membership)
    return index


def diff_memberships(
    before: Iterable[EnumeratedMembership],
    after: Iterable[EnumeratedMembership],
) -> MembershipDiff:
    """Compute which (user, group) memberships appeared or disappeared.

    Pairs are compared by (user_id, group_id) only: a membership whose admin,
    direct or expiry fields changed but which exists on both sides is not
    reported.

    Args:
        before: Snapshot taken before the mutation
        after: Snapshot taken after the mutation

    Returns:
        MembershipDiff with ``added`` taken from ``after`` and ``removed``
        taken from ``before``, each in snapshot order
    """
    before_index = _index(before)
    after_index = _index(after)

    added = [m for key, m in after_index.items() if key not in before_index]
    removed = [m for key, m in before_index.items() if key not in after_index]

    return MembershipDiff(added=added, removed=removed)
