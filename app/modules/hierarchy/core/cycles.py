"""Cycle detection for proposed hierarchy edges."""

from datetime import datetime

from infrastructure.logging import get_module_logger
from modules.hierarchy.core.graph import HierarchyGraph
from modules.hierarchy.core.loading import load_graph
from modules.hierarchy.infrastructure.store import GroupStore

logger = get_module_logger()


def would_create_cycle(
    graph: HierarchyGraph, parent_group_id: str, member_group_id: str
) -> bool:
    """Return True if nesting ``member_group_id`` inside ``parent_group_id`` closes a loop.

    Nesting the member inside the parent makes every ancestor of the parent
    an ancestor of the member. That loops back exactly when the parent is
    already nested (directly or transitively) inside the member, i.e. the
    parent is reachable from the member walking parent -> member edges.
    A self-edge is always a cycle. Runs in O(V+E) over live edges only.

    Args:
        graph: Live hierarchy graph the edge would be added to
        parent_group_id: Proposed parent group
        member_group_id: Proposed member group

    Returns:
        True if the edge must be rejected
    """
    if parent_group_id == member_group_id:
        return True
    return graph.reaches_downward(member_group_id, parent_group_id)


def check_new_hierarchy(
    store: GroupStore, parent_group_id: str, member_group_id: str, now: datetime
) -> bool:
    """Load the live graph from the store and run ``would_create_cycle``.

    Callers mutating the hierarchy must call this inside the same
    transaction as the insert.

    Raises:
        StoreFailure: If the graph could not be read.
    """
    graph = load_graph(store, now)
    creates_cycle = would_create_cycle(graph, parent_group_id, member_group_id)
    logger.debug(
        "hierarchy_cycle_checked",
        parent_group_id=parent_group_id,
        member_group_id=member_group_id,
        creates_cycle=creates_cycle,
    )
    return creates_cycle
