"""Helpers that read from the group store on behalf of the core algorithms.

Every store call made by the core goes through ``store_call`` so datastore
errors surface uniformly as ``StoreFailure`` (never retried here).
"""

import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from infrastructure.logging import get_module_logger
from modules.hierarchy.core.graph import HierarchyGraph
from modules.hierarchy.domain.errors import HierarchyError, StoreFailure
from modules.hierarchy.infrastructure.store import GroupStore

logger = get_module_logger()


@contextmanager
def store_call(operation: str) -> Iterator[None]:
    """Translate any datastore error raised in the block into StoreFailure.

    Errors that already belong to the hierarchy module pass through untouched.
    """
    try:
        yield
    except HierarchyError:
        raise
    except Exception as e:  # pylint: disable=broad-except
        logger.error("group_store_call_failed", operation=operation, error=str(e))
        raise StoreFailure(f"group store {operation} failed: {e}", operation=operation) from e


def load_graph(store: GroupStore, now: datetime) -> HierarchyGraph:
    """Materialize the live hierarchy graph from the store."""
    with store_call("fetch_groups"):
        groups = store.fetch_groups()
    with store_call("fetch_hierarchy_edges"):
        edges = store.fetch_hierarchy_edges()
    graph = HierarchyGraph.from_rows(groups, edges, now)
    logger.debug(
        "hierarchy_graph_loaded",
        groups=len(groups),
        live_edges=graph.edge_count,
        deleted_groups=len(graph.deleted_group_ids),
    )
    return graph


@contextmanager
def store_transaction(store: GroupStore) -> Iterator[None]:
    """Run the block inside ``store.transaction()``.

    Failures to begin or commit the transaction surface as StoreFailure;
    errors raised by the block itself roll back and propagate unchanged.
    """
    transaction = store.transaction()
    with store_call("begin_transaction"):
        transaction.__enter__()
    try:
        yield
    except BaseException:
        if not transaction.__exit__(*sys.exc_info()):
            raise
    else:
        with store_call("commit_transaction"):
            transaction.__exit__(None, None, None)
