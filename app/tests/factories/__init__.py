"""Test data factories for deterministic test data generation."""

from tests.factories.hierarchy import (
    NOW,
    fixed_clock,
    make_edge,
    make_engineering_store,
    make_five_group_store,
    make_group,
    make_membership,
    make_store,
    membership_tuples,
)

__all__ = [
    "NOW",
    "fixed_clock",
    "make_edge",
    "make_engineering_store",
    "make_five_group_store",
    "make_group",
    "make_membership",
    "make_store",
    "membership_tuples",
]
