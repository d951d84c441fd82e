"""Index synchronization and query proxying against Typesense."""

from search_sync.index.backend import IndexBackend, TypesenseBackend
from search_sync.index.executor import IndexSyncExecutor, classify
from search_sync.index.provisioner import CollectionCache, CollectionProvisioner
from search_sync.index.proxy import QueryProxy, resolve_collection
from search_sync.index.schemas import (
    BatchSummary,
    CollectionSchema,
    SyncAction,
    SyncOperation,
)

__all__ = [
    "BatchSummary",
    "CollectionCache",
    "CollectionProvisioner",
    "CollectionSchema",
    "IndexBackend",
    "IndexSyncExecutor",
    "QueryProxy",
    "SyncAction",
    "SyncOperation",
    "TypesenseBackend",
    "classify",
    "resolve_collection",
]
