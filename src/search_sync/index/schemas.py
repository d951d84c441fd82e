"""Pydantic schemas for index collections and sync results."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FieldSpec(BaseModel):
    """Typesense collection field definition.

    Attributes:
        name: Field name or regular expression.
        type: Typesense field type ("auto" lets the backend infer it).
    """

    name: str
    type: str = "auto"


class CollectionSchema(BaseModel):
    """Schema sent when provisioning a collection.

    Attributes:
        name: Collection name.
        fields: Field catalog; defaults to a single auto-typed wildcard.
        enable_nested_fields: Whether object and array-of-object fields
            are indexed.
    """

    name: str
    fields: list[FieldSpec] = Field(
        default_factory=lambda: [FieldSpec(name=".*", type="auto")]
    )
    enable_nested_fields: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the backend create call."""
        return self.model_dump()


class SyncAction(str, Enum):
    """Index operation derived from a change record."""

    UPSERT = "upsert"
    DELETE = "delete"


class SyncOperation(BaseModel):
    """A planned index operation for one change record.

    Attributes:
        action: Upsert or delete.
        collection: Target collection.
        document: Expanded document; always carries ``id``.
    """

    action: SyncAction
    collection: str
    document: dict[str, Any]

    @property
    def document_id(self) -> str:
        """Identity of the target document."""
        return str(self.document["id"])


class BatchSummary(BaseModel):
    """Outcome of a fully applied change batch.

    Attributes:
        upserted: Number of documents upserted.
        deleted: Number of documents deleted (including already-missing ones).
    """

    upserted: int = 0
    deleted: int = 0
