"""Service layer for the hierarchy module.

Thin, synchronous service methods acting as the application boundary for
controllers and in-process callers. Requests are validated with the Pydantic
models from ``modules.hierarchy.schemas``; every method returns an
``OperationResult`` so callers never handle module exceptions directly:

    NotFoundError       -> NOT_FOUND
    ConflictError       -> CONFLICT (error_code = conflict reason)
    StoreFailure        -> TRANSIENT_ERROR
    invalid request     -> PERMANENT_ERROR

Change events are published only after the mutation committed. A publish
failure does not undo the change; it is logged and reported in
``OperationResult.warnings``.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from infrastructure.configuration import Settings
from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.operations import OperationResult
from infrastructure.services import get_settings
from modules.hierarchy.core.cycles import check_new_hierarchy
from modules.hierarchy.core.enumeration import (
    enumerate_group_members,
    enumerate_memberships,
)
from modules.hierarchy.core.loading import store_call
from modules.hierarchy.core.mutator import HierarchyChange, HierarchyMutator
from modules.hierarchy.domain.errors import (
    ConflictError,
    EventPublishFailure,
    HierarchyError,
    NotFoundError,
    StoreFailure,
)
from modules.hierarchy.domain.models import ChangeKind, Group, HierarchyEdge
from modules.hierarchy.events.handlers import register_handlers
from modules.hierarchy.events.subjects import (
    HIERARCHIES_SUBJECT,
    MEMBERS_SUBJECT,
    EventAction,
)
from modules.hierarchy.infrastructure.publisher import EventBusClient
from modules.hierarchy.infrastructure.store import GroupStore, InMemoryGroupStore
from modules.hierarchy.schemas import (
    HierarchyChangeRequest,
    HierarchyChangeResponse,
    HierarchyEvent,
    HierarchyResponse,
    MembershipEvent,
    MembershipResponse,
)

logger = get_module_logger()

__all__ = [
    "HierarchyService",
    "get_hierarchy_service",
]

_HIERARCHY_ACTIONS = {
    ChangeKind.INSERT: EventAction.CREATE,
    ChangeKind.UPDATE: EventAction.UPDATE,
    ChangeKind.DELETE: EventAction.DELETE,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_result(operation: str, error: HierarchyError) -> OperationResult:
    """Map a module error to the OperationResult returned at the boundary."""
    if isinstance(error, NotFoundError):
        return OperationResult.not_found(str(error))
    if isinstance(error, ConflictError):
        return OperationResult.conflict(str(error), error_code=error.reason.value)
    if isinstance(error, StoreFailure):
        logger.error(
            "hierarchy_store_failure",
            operation=operation,
            store_operation=error.operation,
            error=str(error),
        )
        return OperationResult.transient_error(str(error), error_code="STORE_FAILURE")
    logger.error("hierarchy_operation_failed", operation=operation, error=str(error))
    return OperationResult.permanent_error(str(error), error_code=type(error).__name__)


def _memberships_data(memberships) -> List[Dict[str, Any]]:
    return [MembershipResponse.model_validate(m).model_dump() for m in memberships]


class HierarchyService:
    """Application boundary for nested group hierarchies.

    Args:
        store: Group store to read and mutate
        publisher: Event bus client; defaults to an in-process client
        settings: Application settings; defaults to ``get_settings()``
        clock: Callable returning the current time (UTC)
        lock: Lock serializing mutations; defaults to the process-wide one
    """

    def __init__(
        self,
        store: GroupStore,
        publisher: Optional[EventBusClient] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        lock=None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.publisher = publisher or EventBusClient(
            prefix=self.settings.events.subject_prefix,
            version=self.settings.events.version,
        )
        self.clock = clock or _utcnow
        self.mutator = HierarchyMutator(
            store,
            lock=lock,
            lock_timeout=self.settings.hierarchy.lock_timeout_seconds,
            clock=self.clock,
        )

    # -- reads ---------------------------------------------------------------

    def enumerate_memberships(self, user_id: str) -> OperationResult:
        """Return every group ``user_id`` belongs to, directly or through nesting."""
        try:
            memberships = enumerate_memberships(self.store, user_id, self.clock())
        except HierarchyError as e:
            return _to_result("enumerate_memberships", e)
        return OperationResult.success(
            data=_memberships_data(memberships),
            message=f"{len(memberships)} memberships",
        )

    def enumerate_all_memberships(self) -> OperationResult:
        """Return the effective memberships of every user."""
        try:
            memberships = enumerate_memberships(self.store, None, self.clock())
        except HierarchyError as e:
            return _to_result("enumerate_all_memberships", e)
        return OperationResult.success(
            data=_memberships_data(memberships),
            message=f"{len(memberships)} memberships",
        )

    def enumerate_group_members(self, group_id: str) -> OperationResult:
        """Return every user who belongs to ``group_id`` directly or through a nested group."""
        try:
            self._require_group(group_id)
            members = enumerate_group_members(self.store, group_id, self.clock())
        except HierarchyError as e:
            return _to_result("enumerate_group_members", e)
        return OperationResult.success(
            data=_memberships_data(members),
            message=f"{len(members)} members",
        )

    def would_create_cycle(
        self, parent_group_id: str, member_group_id: str
    ) -> OperationResult:
        """Report whether nesting ``member_group_id`` inside ``parent_group_id`` would loop.

        Advisory only: the authoritative check runs again inside the mutation.
        """
        try:
            creates_cycle = check_new_hierarchy(
                self.store, parent_group_id, member_group_id, self.clock()
            )
        except HierarchyError as e:
            return _to_result("would_create_cycle", e)
        return OperationResult.success(data={"would_create_cycle": creates_cycle})

    def list_member_groups(self, parent_group_id: str) -> OperationResult:
        """List the groups nested directly inside ``parent_group_id``, expired edges included."""
        try:
            self._require_group(parent_group_id)
            edges, groups = self._load_edges_and_groups()
        except HierarchyError as e:
            return _to_result("list_member_groups", e)
        now = self.clock()
        data = [
            self._edge_response(edge, groups, now).model_dump()
            for edge in edges
            if edge.parent_group_id == parent_group_id
            and self._member_visible(edge, groups)
        ]
        return OperationResult.success(data=data, message=f"{len(data)} member groups")

    def list_hierarchies(self) -> OperationResult:
        """List every hierarchy edge; edges to soft-deleted member groups are hidden."""
        try:
            edges, groups = self._load_edges_and_groups()
        except HierarchyError as e:
            return _to_result("list_hierarchies", e)
        now = self.clock()
        data = [
            self._edge_response(edge, groups, now).model_dump()
            for edge in edges
            if self._member_visible(edge, groups)
        ]
        return OperationResult.success(data=data, message=f"{len(data)} hierarchies")

    # -- mutations -----------------------------------------------------------

    def apply_hierarchy_change(
        self, request: Union[HierarchyChangeRequest, Dict[str, Any]]
    ) -> OperationResult:
        """Insert, update or delete one hierarchy edge and publish the resulting changes.

        Args:
            request: Change request model, or a mapping validated into one

        Returns:
            OperationResult whose data is a ``HierarchyChangeResponse`` dump
            holding the added and removed memberships
        """
        if not isinstance(request, HierarchyChangeRequest):
            try:
                request = HierarchyChangeRequest.model_validate(request)
            except ValidationError as e:
                logger.warning("invalid_hierarchy_change_request", errors=e.errors())
                return OperationResult.permanent_error(
                    f"invalid hierarchy change request: {e.error_count()} error(s)",
                    error_code="VALIDATION_ERROR",
                )

        with bind_request_context(
            actor_id=request.actor_id,
            audit_id=request.audit_id,
            operation=f"hierarchy.{request.kind.value}",
            parent_group_id=request.parent_group_id,
            member_group_id=request.member_group_id,
        ):
            logger.info("applying_hierarchy_change")
            try:
                change = self.mutator.apply(
                    request.kind,
                    request.parent_group_id,
                    request.member_group_id,
                    request.expires_at,
                )
            except HierarchyError as e:
                logger.info(
                    "hierarchy_change_rejected",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return _to_result("apply_hierarchy_change", e)

            published, warnings = self._publish_change(request, change)

            response = HierarchyChangeResponse(
                kind=change.kind,
                parent_group_id=change.edge.parent_group_id,
                member_group_id=change.edge.member_group_id,
                expires_at=change.edge.expires_at,
                audit_id=request.audit_id,
                added=[MembershipResponse.model_validate(m) for m in change.diff.added],
                removed=[MembershipResponse.model_validate(m) for m in change.diff.removed],
                published_events=published,
            )
            logger.info(
                "hierarchy_change_applied",
                added=len(response.added),
                removed=len(response.removed),
                published_events=published,
                publish_warnings=len(warnings),
            )
            return OperationResult.success(
                data=response.model_dump(),
                message=f"hierarchy {request.kind.value} applied",
                warnings=warnings,
            )

    # -- helpers -------------------------------------------------------------

    def _require_group(self, group_id: str) -> Group:
        with store_call("get_group"):
            group = self.store.get_group(group_id)
        if group is None or group.is_deleted:
            raise NotFoundError(
                f"group not found: {group_id}", resource="group", resource_id=group_id
            )
        return group

    def _load_edges_and_groups(self) -> Tuple[List[HierarchyEdge], Dict[str, Group]]:
        with store_call("fetch_hierarchy_edges"):
            edges = self.store.fetch_hierarchy_edges()
        with store_call("fetch_groups"):
            groups = {g.id: g for g in self.store.fetch_groups()}
        return edges, groups

    @staticmethod
    def _member_visible(edge: HierarchyEdge, groups: Dict[str, Group]) -> bool:
        member = groups.get(edge.member_group_id)
        return member is not None and not member.is_deleted

    @staticmethod
    def _edge_response(
        edge: HierarchyEdge, groups: Dict[str, Group], now: datetime
    ) -> HierarchyResponse:
        parent = groups.get(edge.parent_group_id)
        member = groups.get(edge.member_group_id)
        return HierarchyResponse(
            id=edge.id,
            parent_group_id=edge.parent_group_id,
            parent_slug=parent.slug if parent else "",
            member_group_id=edge.member_group_id,
            member_slug=member.slug if member else "",
            expires_at=edge.expires_at,
            is_live=edge.is_live_at(now),
        )

    def _change_events(
        self, request: HierarchyChangeRequest, change: HierarchyChange
    ) -> List[Tuple[str, BaseModel]]:
        events: List[Tuple[str, BaseModel]] = []
        for action, memberships in (
            (EventAction.CREATE, change.diff.added),
            (EventAction.DELETE, change.diff.removed),
        ):
            for membership in memberships:
                events.append(
                    (
                        MEMBERS_SUBJECT,
                        MembershipEvent(
                            action=action,
                            group_id=membership.group_id,
                            user_id=membership.user_id,
                            actor_id=request.actor_id,
                            audit_id=request.audit_id,
                        ),
                    )
                )

        if self.settings.hierarchy.emit_hierarchy_events:
            events.append(
                (
                    HIERARCHIES_SUBJECT,
                    HierarchyEvent(
                        action=_HIERARCHY_ACTIONS[change.kind],
                        group_id=change.edge.parent_group_id,
                        actor_id=request.actor_id,
                        audit_id=request.audit_id,
                    ),
                )
            )
        return events

    def _publish_change(
        self, request: HierarchyChangeRequest, change: HierarchyChange
    ) -> Tuple[int, List[str]]:
        """Publish every event for a committed change; failures become warnings."""
        published = 0
        warnings: List[str] = []
        for subject, event in self._change_events(request, change):
            try:
                self.publisher.publish(subject, event)
                published += 1
            except EventPublishFailure as e:
                logger.warning(
                    "hierarchy_event_publish_failed",
                    subject=e.subject,
                    error=str(e),
                )
                warnings.append(str(e))
        return published, warnings


@lru_cache
def get_hierarchy_service() -> HierarchyService:
    """Application-scoped hierarchy service backed by the in-memory group store.

    Registers the in-process event log handlers for the configured prefix.
    """
    settings = get_settings()
    register_handlers(settings.events.subject_prefix)
    return HierarchyService(InMemoryGroupStore(), settings=settings)
