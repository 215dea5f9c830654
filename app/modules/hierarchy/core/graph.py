"""In-memory hierarchy graph.

The live hierarchy is materialized once per operation into adjacency maps
keyed by group id, so traversal and cycle detection are pure functions over a
value instead of recursive datastore queries.

Direction vocabulary used throughout the module:
  - ``parents_of(g)``: groups that ``g`` is nested in (membership flows up)
  - ``children_of(g)``: groups nested in ``g``

Only live edges take part: an edge is live when it has not expired at the
graph's reference time and neither endpoint is a soft-deleted group.
"""

from collections import deque
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from modules.hierarchy.domain.models import Group, HierarchyEdge


class HierarchyGraph:
    """Adjacency view of the live hierarchy at a reference instant.

    Args:
        edges: Hierarchy edges to consider (expired ones are skipped)
        now: Reference time used to evaluate edge expiry
        deleted_group_ids: Groups whose edges must be ignored
    """

    def __init__(
        self,
        edges: Iterable[HierarchyEdge],
        now: datetime,
        deleted_group_ids: Optional[Iterable[str]] = None,
    ):
        self.now = now
        self.deleted_group_ids: FrozenSet[str] = frozenset(deleted_group_ids or ())
        self._parents: Dict[str, List[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self._ancestors_cache: Dict[str, FrozenSet[str]] = {}
        self.edge_count = 0

        for edge in edges:
            if not edge.is_live_at(now):
                continue
            if (
                edge.parent_group_id in self.deleted_group_ids
                or edge.member_group_id in self.deleted_group_ids
            ):
                continue
            self._add(edge.parent_group_id, edge.member_group_id)

    @classmethod
    def from_rows(
        cls,
        groups: Iterable[Group],
        edges: Iterable[HierarchyEdge],
        now: datetime,
    ) -> "HierarchyGraph":
        """Build a graph from store rows, dropping soft-deleted groups."""
        deleted = [g.id for g in groups if g.is_deleted]
        return cls(edges, now, deleted_group_ids=deleted)

    def _add(self, parent_group_id: str, member_group_id: str) -> None:
        self._parents.setdefault(member_group_id, []).append(parent_group_id)
        self._children.setdefault(parent_group_id, []).append(member_group_id)
        self.edge_count += 1

    def without_edge(self, parent_group_id: str, member_group_id: str) -> "HierarchyGraph":
        """Return a copy of this graph with one edge removed."""
        clone = HierarchyGraph((), self.now, self.deleted_group_ids)
        for member, parents in self._parents.items():
            for parent in parents:
                if (parent, member) != (parent_group_id, member_group_id):
                    clone._add(parent, member)
        return clone

    def is_deleted(self, group_id: str) -> bool:
        return group_id in self.deleted_group_ids

    def has_edge(self, parent_group_id: str, member_group_id: str) -> bool:
        return parent_group_id in self._parents.get(member_group_id, ())

    def parents_of(self, group_id: str) -> List[str]:
        return list(self._parents.get(group_id, ()))

    def children_of(self, group_id: str) -> List[str]:
        return list(self._children.get(group_id, ()))

    def ancestors(self, group_id: str) -> FrozenSet[str]:
        """All groups reachable upward from ``group_id``, excluding itself.

        Results are cached per graph so a bulk enumeration walks each seed
        group once no matter how many users hold it. A group that sits on a
        cycle is not reported as its own ancestor.
        """
        cached = self._ancestors_cache.get(group_id)
        if cached is None:
            reached = _walk(group_id, self._parents)
            reached.discard(group_id)
            cached = frozenset(reached)
            self._ancestors_cache[group_id] = cached
        return cached

    def descendants(self, group_id: str) -> FrozenSet[str]:
        """All groups reachable downward from ``group_id``, excluding itself."""
        reached = _walk(group_id, self._children)
        reached.discard(group_id)
        return frozenset(reached)

    def reaches_downward(self, start: str, target: str) -> bool:
        """True if ``target`` is ``start`` or nested (transitively) inside it."""
        if start == target:
            return True
        return target in _walk(start, self._children, stop_at=target)


def _walk(
    start: str,
    adjacency: Dict[str, List[str]],
    stop_at: Optional[str] = None,
) -> Set[str]:
    """Breadth-first walk over ``adjacency`` from ``start``.

    The visited set keeps the walk finite even if the graph contains a cycle.
    When ``stop_at`` is reached the walk returns early.
    """
    visited: Set[str] = set()
    queue = deque(adjacency.get(start, ()))
    while queue:
        node = queue.popleft()
        if node in visited:
            continue
        visited.add(node)
        if node == stop_at:
            break
        queue.extend(n for n in adjacency.get(node, ()) if n not in visited)
    return visited
