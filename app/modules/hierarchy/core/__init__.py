"""Core business logic - graph traversal, enumeration, diffing and mutation."""

from modules.hierarchy.core.cycles import check_new_hierarchy, would_create_cycle
from modules.hierarchy.core.diff import diff_memberships
from modules.hierarchy.core.enumeration import (
    enumerate_group_members,
    enumerate_memberships,
    expand_memberships,
)
from modules.hierarchy.core.graph import HierarchyGraph
from modules.hierarchy.core.mutator import (
    HIERARCHY_LOCK,
    HierarchyChange,
    HierarchyMutator,
)

__all__ = [
    "HIERARCHY_LOCK",
    "HierarchyChange",
    "HierarchyGraph",
    "HierarchyMutator",
    "check_new_hierarchy",
    "diff_memberships",
    "enumerate_group_members",
    "enumerate_memberships",
    "expand_memberships",
    "would_create_cycle",
]
