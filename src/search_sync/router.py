"""Top-level dispatch of inbound payloads."""

import json
from typing import Any

import structlog

from search_sync.config import FieldsMap
from search_sync.index.backend import IndexBackend
from search_sync.index.executor import IndexSyncExecutor
from search_sync.index.provisioner import CollectionCache, CollectionProvisioner
from search_sync.index.proxy import QueryProxy
from search_sync.index.schemas import BatchSummary
from search_sync.stream.decoder import parse_event
from search_sync.stream.types import ChangeBatch, InboundEvent, QueryInvocation

logger = structlog.get_logger()


class EventRouter:
    """Routes change batches to the sync executor and queries to the proxy.

    Attributes:
        executor: Executor applying change records.
        proxy: Proxy forwarding searches.
    """

    def __init__(self, executor: IndexSyncExecutor, proxy: QueryProxy) -> None:
        """Initialize router.

        Args:
            executor: Executor applying change records.
            proxy: Proxy forwarding searches.
        """
        self.executor = executor
        self.proxy = proxy

    @classmethod
    def from_backend(
        cls,
        backend: IndexBackend,
        fields_map: FieldsMap | None = None,
        cache: CollectionCache | None = None,
    ) -> "EventRouter":
        """Wire a router and its collaborators around one backend.

        Args:
            backend: Index backend.
            fields_map: Per-model field configuration.
            cache: Collection existence cache to share.

        Returns:
            Ready-to-use router.
        """
        provisioner = CollectionProvisioner(backend, cache)
        return cls(
            executor=IndexSyncExecutor(backend, provisioner, fields_map),
            proxy=QueryProxy(backend),
        )

    async def handle_batch(self, batch: ChangeBatch) -> BatchSummary:
        """Synchronize every record of a change batch."""
        return await self.executor.sync_batch(batch.records)

    async def handle_query(self, invocation: QueryInvocation) -> str:
        """Run a query invocation and serialize the backend response."""
        result = await self.proxy.handle(invocation)
        return json.dumps(result)

    async def route(self, payload: Any) -> BatchSummary | str:
        """Classify a payload and dispatch it.

        Args:
            payload: Raw invocation payload (mapping or JSON text).

        Returns:
            A BatchSummary for change batches, or the backend's search
            response as JSON text for query invocations.

        Raises:
            UnknownEventError: If the payload matches no known shape.
        """
        return await self.dispatch(parse_event(payload))

    async def dispatch(self, event: InboundEvent) -> BatchSummary | str:
        """Run an already-classified event.

        Args:
            event: Decoded change batch or query invocation.

        Returns:
            Same as ``route``.
        """
        if isinstance(event, ChangeBatch):
            logger.debug("event_routed", kind="change_batch", records=len(event.records))
            return await self.handle_batch(event)

        logger.debug("event_routed", kind="query", field_name=event.field_name)
        return await self.handle_query(event)
