"""Transactional hierarchy edge mutations.

Each mutation runs as one unit of work:

    acquire hierarchy lock
      open store transaction
        validate (groups/edge exist, no duplicate, no cycle)
        snapshot effective memberships (before)
        insert / update / delete exactly one edge
        snapshot effective memberships (after)
        diff before/after
      commit
    release lock

Any error rolls the transaction back, so there are no half-applied edges,
and an edge change is never committed without its diff having been
computed. Publishing the diff happens after commit, in the service layer.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from infrastructure.logging import get_module_logger
from modules.hierarchy.core.cycles import would_create_cycle
from modules.hierarchy.core.diff import diff_memberships
from modules.hierarchy.core.enumeration import enumerate_memberships
from modules.hierarchy.core.loading import load_graph, store_call, store_transaction
from modules.hierarchy.domain.errors import (
    ConflictError,
    ConflictReason,
    NotFoundError,
)
from modules.hierarchy.domain.models import (
    ChangeKind,
    Group,
    HierarchyEdge,
    MembershipDiff,
    is_live,
)
from modules.hierarchy.infrastructure.store import GroupStore

logger = get_module_logger()

# Process-wide lock keyed on "the hierarchy graph": mutations are rare
# relative to reads, so one lock serializes all of them.
HIERARCHY_LOCK = threading.RLock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HierarchyChange:
    """Outcome of a committed hierarchy mutation.

    Attributes:
        kind: Which mutation was applied
        edge: The stored edge (for delete, the row that was removed)
        diff: Memberships that appeared or disappeared
    """

    kind: ChangeKind
    edge: HierarchyEdge
    diff: MembershipDiff


class HierarchyMutator:
    """Applies insert/update/delete of exactly one hierarchy edge.

    Args:
        store: Group store holding edges and memberships
        lock: Lock serializing mutations; defaults to the process-wide HIERARCHY_LOCK
        lock_timeout: Seconds to wait for the lock; any negative value waits forever
        clock: Callable returning the current time (UTC)
    """

    def __init__(
        self,
        store: GroupStore,
        lock: Optional[threading.RLock] = None,
        lock_timeout: float = -1,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.lock = lock if lock is not None else HIERARCHY_LOCK
        self.lock_timeout = lock_timeout if lock_timeout >= 0 else -1
        self.clock = clock or _utcnow

    def apply(
        self,
        kind: ChangeKind,
        parent_group_id: str,
        member_group_id: str,
        expires_at: Optional[datetime] = None,
    ) -> HierarchyChange:
        """Dispatch to insert, update or delete based on ``kind``."""
        kind = ChangeKind(kind)
        if kind is ChangeKind.INSERT:
            return self.insert(parent_group_id, member_group_id, expires_at)
        if kind is ChangeKind.UPDATE:
            return self.update(parent_group_id, member_group_id, expires_at)
        return self.delete(parent_group_id, member_group_id)

    @contextmanager
    def _unit_of_work(self, operation: str) -> Iterator[datetime]:
        if not self.lock.acquire(timeout=self.lock_timeout):
            logger.warning(
                "hierarchy_lock_timeout",
                operation=operation,
                timeout_seconds=self.lock_timeout,
            )
            raise ConflictError(
                "another hierarchy change is in progress, try again later",
                reason=ConflictReason.CONCURRENT_MUTATION,
            )
        try:
            with store_transaction(self.store):
                yield self.clock()
        finally:
            self.lock.release()

    def _require_group(self, group_id: str) -> Group:
        with store_call("get_group"):
            group = self.store.get_group(group_id)
        if group is None or group.is_deleted:
            raise NotFoundError(
                f"group not found: {group_id}", resource="group", resource_id=group_id
            )
        return group

    def _require_edge(self, parent_group_id: str, member_group_id: str) -> HierarchyEdge:
        with store_call("get_edge"):
            edge = self.store.get_edge(parent_group_id, member_group_id)
        if edge is None:
            raise NotFoundError(
                f"hierarchy not found: {member_group_id} in {parent_group_id}",
                resource="hierarchy",
                resource_id=f"{parent_group_id}/{member_group_id}",
            )
        return edge

    def _snapshot_after(self, now: datetime):
        return enumerate_memberships(self.store, None, now)

    def insert(
        self,
        parent_group_id: str,
        member_group_id: str,
        expires_at: Optional[datetime] = None,
    ) -> HierarchyChange:
        """Nest ``member_group_id`` inside ``parent_group_id``.

        Raises:
            NotFoundError: If either group is missing or soft-deleted
            ConflictError: DUPLICATE_EDGE if the edge exists, CYCLE if it would close a loop
            StoreFailure: If the store failed at any step
        """
        with self._unit_of_work("insert") as now:
            self._require_group(parent_group_id)
            self._require_group(member_group_id)

            with store_call("edge_exists"):
                exists = self.store.edge_exists(parent_group_id, member_group_id)
            if exists:
                raise ConflictError(
                    "group is already a member", reason=ConflictReason.DUPLICATE_EDGE
                )

            graph = load_graph(self.store, now)
            if would_create_cycle(graph, parent_group_id, member_group_id):
                logger.info(
                    "hierarchy_insert_rejected_cycle",
                    parent_group_id=parent_group_id,
                    member_group_id=member_group_id,
                )
                raise ConflictError(
                    "invalid relationship: hierarchy would create a cycle",
                    reason=ConflictReason.CYCLE,
                )

            before = enumerate_memberships(self.store, None, now, graph=graph)
            with store_call("insert_edge"):
                edge = self.store.insert_edge(
                    HierarchyEdge(
                        parent_group_id=parent_group_id,
                        member_group_id=member_group_id,
                        expires_at=expires_at,
                    )
                )
            diff = diff_memberships(before, self._snapshot_after(now))

        logger.info(
            "hierarchy_edge_inserted",
            parent_group_id=parent_group_id,
            member_group_id=member_group_id,
            added=len(diff.added),
            removed=len(diff.removed),
        )
        return HierarchyChange(kind=ChangeKind.INSERT, edge=edge, diff=diff)

    def update(
        self,
        parent_group_id: str,
        member_group_id: str,
        expires_at: Optional[datetime],
    ) -> HierarchyChange:
        """Change the expiry of an existing edge; the (parent, member) identity is fixed.

        An update that makes an expired edge live again is cycle-checked
        like an insert.

        Raises:
            NotFoundError: If the edge does not exist
            ConflictError: CYCLE if re-activating the edge would close a loop
            StoreFailure: If the store failed at any step
        """
        with self._unit_of_work("update") as now:
            current = self._require_edge(parent_group_id, member_group_id)

            graph = load_graph(self.store, now)
            reactivates = not current.is_live_at(now) and is_live(expires_at, now)
            if reactivates and would_create_cycle(
                graph.without_edge(parent_group_id, member_group_id),
                parent_group_id,
                member_group_id,
            ):
                logger.info(
                    "hierarchy_update_rejected_cycle",
                    parent_group_id=parent_group_id,
                    member_group_id=member_group_id,
                )
                raise ConflictError(
                    "invalid relationship: re-activating hierarchy would create a cycle",
                    reason=ConflictReason.CYCLE,
                )

            before = enumerate_memberships(self.store, None, now, graph=graph)
            with store_call("update_edge_expiry"):
                edge = self.store.update_edge_expiry(
                    parent_group_id, member_group_id, expires_at
                )
            diff = diff_memberships(before, self._snapshot_after(now))

        logger.info(
            "hierarchy_edge_updated",
            parent_group_id=parent_group_id,
            member_group_id=member_group_id,
            expires_at=expires_at.isoformat() if expires_at else None,
            added=len(diff.added),
            removed=len(diff.removed),
        )
        return HierarchyChange(kind=ChangeKind.UPDATE, edge=edge, diff=diff)

    def delete(self, parent_group_id: str, member_group_id: str) -> HierarchyChange:
        """Remove the edge nesting ``member_group_id`` inside ``parent_group_id``.

        Raises:
            NotFoundError: If the edge does not exist
            StoreFailure: If the store failed at any step
        """
        with self._unit_of_work("delete") as now:
            self._require_edge(parent_group_id, member_group_id)

            before = enumerate_memberships(self.store, None, now)
            with store_call("delete_edge"):
                edge = self.store.delete_edge(parent_group_id, member_group_id)
            diff = diff_memberships(before, self._snapshot_after(now))

        logger.info(
            "hierarchy_edge_deleted",
            parent_group_id=parent_group_id,
            member_group_id=member_group_id,
            added=len(diff.added),
            removed=len(diff.removed),
        )
        return HierarchyChange(kind=ChangeKind.DELETE, edge=edge, diff=diff)
