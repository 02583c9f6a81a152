"""
Constants for MDB_CONVERT.

This module contains the operation surface of a converted collection and the
configuration defaults shared across the codebase.
"""

from typing import Final, FrozenSet, Tuple

# ============================================================================
# OPERATION SURFACE
# ============================================================================

INTERCEPTED_METHODS: Final[FrozenSet[str]] = frozenset(
    {
        # Writes
        "insert_one",
        "insert_many",
        "insert",
        "update_one",
        "update_many",
        "update",
        "replace_one",
        # Deletes
        "delete_one",
        "delete_many",
        # Reads
        "find_one",
        "find",
        "find_one_and_delete",
        "find_one_and_replace",
        "find_one_and_update",
    }
)
"""Operations whose arguments or results are rewritten by a converter.

Closed allow-list: anything not named here is forwarded untouched, so a raw
write path can never be silently rewritten (or silently skipped).
"""

PASSTHROUGH_METHODS: Final[Tuple[str, ...]] = (
    # Database operations
    "bulk_write",
    "rename",
    "drop",
    "estimated_document_count",
    "count_documents",
    "distinct",
    "aggregate",
    "watch",
    "map_reduce",
    "initialize_unordered_bulk_op",
    "initialize_ordered_bulk_op",
    "remove",
    "count",
    # House-keeping operations
    "create_index",
    "create_indexes",
    "drop_index",
    "drop_indexes",
    "list_indexes",
    "index_information",
    "options",
)
"""Known collection operations that a converted collection forwards as-is."""

TRANSFORM_NAMES: Final[Tuple[str, ...]] = (
    "pre_insert",
    "pre_update",
    "pre_replace",
    "post_find",
    "delete_filter",
)
"""The five transforms every converter must supply."""

# ============================================================================
# OBSERVABILITY CONSTANTS
# ============================================================================

METRICS_PREFIX: Final[str] = "converter"
"""Prefix for metric names recorded by converted collections."""

DEFAULT_MAX_METRICS: Final[int] = 10000
"""Maximum number of metric series kept before evicting the oldest (LRU)."""

# Environment variables
ENV_RECORD_METRICS: Final[str] = "MDB_CONVERT_RECORD_METRICS"
ENV_MAX_METRICS: Final[str] = "MDB_CONVERT_METRICS_MAX"
ENV_LOG_CALLS: Final[str] = "MDB_CONVERT_LOG_CALLS"
