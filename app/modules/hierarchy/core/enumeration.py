"""Effective membership enumeration.

A user's effective memberships are their direct memberships plus every
group reachable from one of them by walking live hierarchy edges upward
(member -> parent). Indirect memberships are never admin; a group reached
both directly and indirectly is reported as direct.

Per-user, bulk (all users) and per-group enumeration all go through
``expand_memberships``; they differ only in which direct memberships are
fed into it, so the three can never drift apart. The graph is materialized
once per call and its ancestor sets are cached per seed group, which keeps
bulk enumeration proportional to users + edges rather than users x edges.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from infrastructure.logging import get_module_logger
from modules.hierarchy.core.graph import HierarchyGraph
from modules.hierarchy.core.loading import load_graph, store_call
from modules.hierarchy.domain.models import (
    DirectMembership,
    EnumeratedMembership,
    MembershipSnapshot,
)
from modules.hierarchy.infrastructure.store import GroupStore

logger = get_module_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def expand_memberships(
    graph: HierarchyGraph,
    direct_memberships: Iterable[DirectMembership],
    now: datetime,
) -> MembershipSnapshot:
    """Expand direct memberships into effective memberships over ``graph``.

    Memberships in soft-deleted groups are ignored. Output lists, for each
    user in first-seen order, the direct memberships followed by the
    indirect ones sorted by group id.

    Args:
        graph: Live hierarchy graph
        direct_memberships: Explicit memberships defining the scope
        now: Reference time for admin expiry

    Returns:
        One EnumeratedMembership per (user, group) pair
    """
    seeds_by_user: Dict[str, Dict[str, DirectMembership]] = {}
    for membership in direct_memberships:
        if graph.is_deleted(membership.group_id):
            continue
        seeds_by_user.setdefault(membership.user_id, {})[membership.group_id] = membership

    results: MembershipSnapshot = []
    for user_id, seeds in seeds_by_user.items():
        for group_id, membership in seeds.items():
            results.append(
                EnumeratedMembership(
                    user_id=user_id,
                    group_id=group_id,
                    direct=True,
                    is_admin=membership.is_admin_at(now),
                    expires_at=membership.expires_at,
                )
            )

        reached = set()
        for group_id in seeds:
            reached.update(graph.ancestors(group_id))

        for group_id in sorted(reached.difference(seeds)):
            results.append(
                EnumeratedMembership(user_id=user_id, group_id=group_id, direct=False)
            )

    return results


def enumerate_memberships(
    store: GroupStore,
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
    graph: Optional[HierarchyGraph] = None,
) -> MembershipSnapshot:
    """Return the effective memberships of one user, or of every user.

    Args:
        store: Group store to read from
        user_id: User to enumerate; None enumerates all users (bulk mode)
        now: Reference time; defaults to the current UTC time
        graph: Pre-built graph to reuse (must match ``now``)

    Returns:
        Effective memberships; empty for a user without memberships

    Raises:
        StoreFailure: If the store could not be read
    """
    now = now or _utcnow()
    if graph is None:
        graph = load_graph(store, now)

    if user_id is None:
        with store_call("fetch_all_direct_memberships"):
            direct = store.fetch_all_direct_memberships()
    else:
        with store_call("fetch_direct_memberships"):
            direct = store.fetch_direct_memberships(user_id)

    memberships = expand_memberships(graph, direct, now)
    logger.debug(
        "memberships_enumerated",
        user_id=user_id,
        bulk=user_id is None,
        direct_count=len(direct),
        effective_count=len(memberships),
    )
    return memberships


def enumerate_group_members(
    store: GroupStore,
    group_id: str,
    now: Optional[datetime] = None,
    graph: Optional[HierarchyGraph] = None,
) -> MembershipSnapshot:
    """Return every user who is effectively a member of ``group_id``.

    Only memberships held in the group or in one of its descendants can
    reach it, so the expansion is scoped to that subtree and then filtered
    to the group. The result equals the bulk enumeration filtered to
    ``group_id``.

    Raises:
        StoreFailure: If the store could not be read
    """
    now = now or _utcnow()
    if graph is None:
        graph = load_graph(store, now)

    if graph.is_deleted(group_id):
        return []

    subtree = set(graph.descendants(group_id))
    subtree.add(group_id)

    with store_call("fetch_all_direct_memberships"):
        direct = [
            m for m in store.fetch_all_direct_memberships() if m.group_id in subtree
        ]

    return [
        m for m in expand_memberships(graph, direct, now) if m.group_id == group_id
    ]
