"""Applies decoded change records to the search index."""

import asyncio
from collections.abc import Sequence

import structlog

from search_sync.config import FieldsMap
from search_sync.errors import BackendError, DecodeError, NotFoundError, SyncError
from search_sync.index.backend import IndexBackend
from search_sync.index.provisioner import CollectionProvisioner
from search_sync.index.schemas import BatchSummary, SyncAction, SyncOperation
from search_sync.stream.dates import expand_date_fields
from search_sync.stream.decoder import Document, decode_record
from search_sync.stream.types import ChangeRecord, EventKind

logger = structlog.get_logger()

SOFT_DELETE_FIELD = "_deleted"


def classify(kind: EventKind, document: Document) -> SyncAction:
    """Decide whether a change becomes an upsert or a delete.

    Args:
        kind: Stream event kind.
        document: Decoded document for the change.

    Returns:
        UPSERT for inserts and live modifications, DELETE otherwise.
    """
    if kind is EventKind.INSERT:
        return SyncAction.UPSERT
    if kind is EventKind.MODIFY and not document.get(SOFT_DELETE_FIELD):
        return SyncAction.UPSERT
    return SyncAction.DELETE


class IndexSyncExecutor:
    """Turns change records into index upserts and deletes.

    Records in a batch are applied concurrently with no ordering between
    them. Modifications replace the whole document.
    """

    def __init__(
        self,
        backend: IndexBackend,
        provisioner: CollectionProvisioner,
        fields_map: FieldsMap | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            backend: Index backend for document writes.
            provisioner: Provisioner consulted before every upsert.
            fields_map: Per-model field configuration.
        """
        self._backend = backend
        self.provisioner = provisioner
        self._fields_map = fields_map or FieldsMap()

    def plan(self, record: ChangeRecord) -> SyncOperation:
        """Decode, expand and classify one record.

        Args:
            record: Validated stream record.

        Returns:
            The index operation to perform.

        Raises:
            DecodeError: If the record cannot be decoded or has no ``id``.
        """
        try:
            collection = record.collection_name
            model_name = record.model_name
        except ValueError as e:
            raise DecodeError(str(e), event_id=record.event_id) from e

        document = expand_date_fields(
            decode_record(record),
            self._fields_map.date_fields(model_name),
        )
        if document.get("id") in (None, ""):
            raise DecodeError("Document has no id", event_id=record.event_id)

        return SyncOperation(
            action=classify(record.kind, document),
            collection=collection,
            document=document,
        )

    async def apply(self, operation: SyncOperation) -> None:
        """Perform a planned operation against the backend.

        Args:
            operation: Planned upsert or delete.

        Raises:
            ProvisionError: If the target collection cannot be created.
            SyncError: If the backend rejects the write.
        """
        if operation.action is SyncAction.UPSERT:
            await self._upsert(operation)
        else:
            await self._delete(operation)

    async def _upsert(self, operation: SyncOperation) -> None:
        await self.provisioner.ensure_collection(operation.collection)
        try:
            await self._backend.upsert_document(operation.collection, operation.document)
        except BackendError as e:
            raise SyncError(
                str(e),
                collection=operation.collection,
                document_id=operation.document_id,
                action=operation.action.value,
            ) from e
        logger.info(
            "document_upserted",
            collection=operation.collection,
            document_id=operation.document_id,
        )

    async def _delete(self, operation: SyncOperation) -> None:
        try:
            await self._backend.delete_document(operation.collection, operation.document_id)
        except NotFoundError:
            # Redelivered or already-removed documents.
            logger.info(
                "document_delete_missing",
                collection=operation.collection,
                document_id=operation.document_id,
            )
            return
        except BackendError as e:
            raise SyncError(
                str(e),
                collection=operation.collection,
                document_id=operation.document_id,
                action=operation.action.value,
            ) from e
        logger.info(
            "document_deleted",
            collection=operation.collection,
            document_id=operation.document_id,
        )

    async def sync_record(self, record: ChangeRecord) -> SyncAction:
        """Plan and apply a single record.

        Args:
            record: Validated stream record.

        Returns:
            The action that was applied.
        """
        operation = self.plan(record)
        await self.apply(operation)
        return operation.action

    async def sync_batch(self, records: Sequence[ChangeRecord]) -> BatchSummary:
        """Apply every record of a batch concurrently.

        The first failure fails the whole batch; the outcome of sibling
        records is not reported.

        Args:
            records: Records from one stream invocation.

        Returns:
            Counts of applied upserts and deletes.
        """
        actions = await asyncio.gather(*(self.sync_record(record) for record in records))

        summary = BatchSummary(
            upserted=sum(1 for action in actions if action is SyncAction.UPSERT),
            deleted=sum(1 for action in actions if action is SyncAction.DELETE),
        )
        logger.info(
            "change_batch_synced",
            records=len(records),
            upserted=summary.upserted,
            deleted=summary.deleted,
        )
        return summary
