"""Group store contract and the in-memory reference implementation.

The relational datastore that owns groups, direct memberships and hierarchy
edges lives outside this module. ``GroupStore`` is the narrow interface the
hierarchy core consumes from it; ``InMemoryGroupStore`` implements the same
interface for local development and tests.

Transactions:
    Every hierarchy mutation runs inside ``store.transaction()``. The
    in-memory store gives each transaction a private copy of the edge table
    (copy-on-write). Reads from the transaction's own thread see the staged
    edges; every other thread keeps reading the last committed table until
    the transaction commits, at which point the staged table is swapped in
    atomically. Raising inside the block discards the staged table.
    Group and direct-membership writes from other threads wait until the
    open transaction ends, so a mutation never observes them half-way.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from infrastructure.logging import get_module_logger
from modules.hierarchy.domain.models import DirectMembership, Group, HierarchyEdge

logger = get_module_logger()

EdgeKey = Tuple[str, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GroupStore(ABC):
    """Read/write primitives the hierarchy core needs from the datastore.

    Implementations raise whatever their driver raises on failure; the core
    wraps those errors into ``StoreFailure``.
    """

    @abstractmethod
    def transaction(self) -> Iterator[None]:
        """Context manager opening a unit of work (commit on exit, rollback on error)."""

    @abstractmethod
    def fetch_groups(self) -> List[Group]:
        """Return every group, including soft-deleted ones."""

    @abstractmethod
    def get_group(self, group_id: str) -> Optional[Group]:
        """Return one group (soft-deleted included) or None."""

    @abstractmethod
    def fetch_direct_memberships(self, user_id: str) -> List[DirectMembership]:
        """Return the explicit memberships of one user."""

    @abstractmethod
    def fetch_all_direct_memberships(self) -> List[DirectMembership]:
        """Return the explicit memberships of every user."""

    @abstractmethod
    def fetch_hierarchy_edges(self) -> List[HierarchyEdge]:
        """Return every hierarchy edge, expired ones included."""

    @abstractmethod
    def get_edge(self, parent_group_id: str, member_group_id: str) -> Optional[HierarchyEdge]:
        """Return the edge for (parent, member) or None."""

    @abstractmethod
    def edge_exists(self, parent_group_id: str, member_group_id: str) -> bool:
        """Return True if an edge for (parent, member) exists."""

    @abstractmethod
    def insert_edge(self, edge: HierarchyEdge) -> HierarchyEdge:
        """Persist a new edge and return the stored row."""

    @abstractmethod
    def update_edge_expiry(
        self,
        parent_group_id: str,
        member_group_id: str,
        expires_at: Optional[datetime],
    ) -> HierarchyEdge:
        """Change the expiry of an existing edge and return the stored row."""

    @abstractmethod
    def delete_edge(self, parent_group_id: str, member_group_id: str) -> HierarchyEdge:
        """Remove an existing edge and return the removed row."""


class InMemoryGroupStore(GroupStore):
    """Thread-safe in-memory group store with copy-on-write transactions.

    Groups and direct memberships are managed by external membership APIs;
    the ``add_*``/``remove_*`` helpers stand in for those APIs.

    Args:
        clock: Callable returning the current time, used for edge timestamps
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._lock = threading.RLock()
        self._tx_lock = threading.Lock()
        self._local = threading.local()

        self._groups: Dict[str, Group] = {}
        self._memberships: Dict[Tuple[str, str], DirectMembership] = {}
        self._edges: Dict[EdgeKey, HierarchyEdge] = {}

    # -- transactions ---------------------------------------------------

    def _staged(self) -> Optional[Dict[EdgeKey, HierarchyEdge]]:
        return getattr(self._local, "edges", None)

    def _edge_table(self) -> Dict[EdgeKey, HierarchyEdge]:
        staged = self._staged()
        if staged is not None:
            return staged
        return self._edges

    @property
    def in_transaction(self) -> bool:
        """True when the calling thread has an open transaction."""
        return self._staged() is not None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self.in_transaction:
            # Nested use joins the outer unit of work.
            yield
            return

        with self._tx_lock:
            with self._lock:
                self._local.edges = dict(self._edges)
            try:
                yield
            except BaseException:
                logger.debug("store_transaction_rolled_back")
                raise
            else:
                with self._lock:
                    self._edges = self._local.edges
                logger.debug("store_transaction_committed")
            finally:
                self._local.edges = None

    @contextmanager
    def _write_outside_transaction(self) -> Iterator[None]:
        """Hold group and membership writes until any open transaction ends.

        A mutation's before and after snapshots must both see the same
        groups and direct memberships; writes from the transacting thread
        itself go through immediately.
        """
        if self.in_transaction:
            with self._lock:
                yield
            return
        with self._tx_lock, self._lock:
            yield

    # -- groups and memberships -------------------------------------------

    def add_group(self, group: Group) -> Group:
        with self._write_outside_transaction():
            self._groups[group.id] = group
        return group

    def soft_delete_group(self, group_id: str, deleted_at: Optional[datetime] = None) -> Group:
        with self._write_outside_transaction():
            group = self._groups[group_id]
            deleted = Group(
                id=group.id,
                slug=group.slug,
                name=group.name,
                approver_group_id=group.approver_group_id,
                deleted_at=deleted_at or self._clock(),
            )
            self._groups[group_id] = deleted
        return deleted

    def add_direct_membership(self, membership: DirectMembership) -> DirectMembership:
        with self._write_outside_transaction():
            self._memberships[(membership.user_id, membership.group_id)] = membership
        return membership

    def remove_direct_membership(self, user_id: str, group_id: str) -> None:
        with self._write_outside_transaction():
            self._memberships.pop((user_id, group_id), None)

    def fetch_groups(self) -> List[Group]:
        with self._lock:
            return list(self._groups.values())

    def get_group(self, group_id: str) -> Optional[Group]:
        with self._lock:
            return self._groups.get(group_id)

    def fetch_direct_memberships(self, user_id: str) -> List[DirectMembership]:
        with self._lock:
            return [m for m in self._memberships.values() if m.user_id == user_id]

    def fetch_all_direct_memberships(self) -> List[DirectMembership]:
        with self._lock:
            return list(self._memberships.values())

    # -- hierarchy edges ----------------------------------------------------

    def fetch_hierarchy_edges(self) -> List[HierarchyEdge]:
        with self._lock:
            return list(self._edge_table().values())

    def get_edge(self, parent_group_id: str, member_group_id: str) -> Optional[HierarchyEdge]:
        with self._lock:
            return self._edge_table().get((parent_group_id, member_group_id))

    def edge_exists(self, parent_group_id: str, member_group_id: str) -> bool:
        return self.get_edge(parent_group_id, member_group_id) is not None

    def insert_edge(self, edge: HierarchyEdge) -> HierarchyEdge:
        now = self._clock()
        stored = HierarchyEdge(
            parent_group_id=edge.parent_group_id,
            member_group_id=edge.member_group_id,
            expires_at=edge.expires_at,
            id=edge.id,
            created_at=edge.created_at or now,
            updated_at=now,
        )
        with self._lock:
            table = self._edge_table()
            if stored.key in table:
                raise ValueError(
                    "unique constraint violated for hierarchy "
                    f"{edge.parent_group_id} <- {edge.member_group_id}"
                )
            table[stored.key] = stored
        return stored

    def update_edge_expiry(
        self,
        parent_group_id: str,
        member_group_id: str,
        expires_at: Optional[datetime],
    ) -> HierarchyEdge:
        with self._lock:
            table = self._edge_table()
            current = table[(parent_group_id, member_group_id)]
            updated = HierarchyEdge(
                parent_group_id=current.parent_group_id,
                member_group_id=current.member_group_id,
                expires_at=expires_at,
                id=current.id,
                created_at=current.created_at,
                updated_at=self._clock(),
            )
            table[updated.key] = updated
        return updated

    def delete_edge(self, parent_group_id: str, member_group_id: str) -> HierarchyEdge:
        with self._lock:
            return self._edge_table().pop((parent_group_id, member_group_id))
