"""Nested group hierarchy module.

Tracks which users belong to which groups, directly or through nested
groups, keeps the hierarchy graph acyclic and reports the memberships a
hierarchy change adds or removes.

Features:
- Effective membership enumeration per user, per group and in bulk
- Cycle detection for proposed hierarchy edges
- Transactional insert/update/delete of hierarchy edges
- Membership diffs published as events after commit
"""

from modules.hierarchy.service import HierarchyService, get_hierarchy_service

__all__ = [
    "HierarchyService",
    "get_hierarchy_service",
]
