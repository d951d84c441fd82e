"""Inbound event types: DynamoDB stream batches and AppSync query invocations."""
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

AttributeMap = dict[str, dict[str, Any]]

RAW_SEARCH_FIELD = "rawSearch"


class EventKind(str, Enum):
    """DynamoDB stream event names."""

    INSERT = "INSERT"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"


class StreamImages(BaseModel):
    """The ``dynamodb`` section of a stream record.

    Attributes:
        keys: Primary key attributes of the changed item.
        new_image: Item attributes after the change.
        old_image: Item attributes before the change.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keys: AttributeMap | None = Field(default=None, alias="Keys")
    new_image: AttributeMap | None = Field(default=None, alias="NewImage")
    old_image: AttributeMap | None = Field(default=None, alias="OldImage")


class ChangeRecord(BaseModel):
    """A single change-data-capture record from a table stream.

    Attributes:
        event_id: Stream-assigned record identifier.
        kind: Whether the item was inserted, modified or removed.
        source_arn: Stream ARN encoding the origin table.
        images: Typed attribute images of the item.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event_id: str | None = Field(default=None, alias="eventID")
    kind: EventKind = Field(alias="eventName")
    source_arn: str = Field(alias="eventSourceARN")
    images: StreamImages = Field(alias="dynamodb")

    @property
    def table_name(self) -> str:
        """Source table name parsed from the stream ARN.

        ``arn:aws:dynamodb:<region>:<account>:table/<Table>/stream/<label>``
        """
        parts = self.source_arn.split(":")
        if len(parts) < 6:
            raise ValueError(f"Malformed stream ARN: {self.source_arn}")
        resource = parts[5].split("/")
        if len(resource) < 2 or resource[0] != "table" or not resource[1]:
            raise ValueError(f"Malformed stream ARN: {self.source_arn}")
        return resource[1]

    @property
    def model_name(self) -> str:
        """Model name, the table name's leading segment."""
        return self.table_name.split("-")[0]

    @property
    def collection_name(self) -> str:
        """Index collection the record is synchronized into."""
        return self.table_name.lower()


class ChangeBatch(BaseModel):
    """One invocation's worth of stream records."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    records: list[ChangeRecord] = Field(alias="Records", min_length=1)


class SearchArguments(BaseModel):
    """Decoded ``arguments`` object of a query invocation.

    Attributes:
        search_parameters: Free-form backend search parameters.
        collection: Explicit target collection (raw search only).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    search_parameters: dict[str, Any] = Field(
        default_factory=dict, alias="searchParameters"
    )
    collection: str | None = None


class QueryInvocation(BaseModel):
    """A resolver invocation forwarding a search to the index.

    Attributes:
        type_name: GraphQL parent type (normally "Query").
        field_name: Resolved field; "rawSearch" names its collection explicitly.
        table_name: Source table backing the model being searched.
        arguments: Search arguments, JSON-encoded on the wire.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type_name: str = Field(alias="typeName")
    field_name: str | None = Field(default=None, alias="fieldName")
    table_name: str | None = Field(default=None, alias="tableName")
    arguments: SearchArguments = Field(default_factory=SearchArguments)

    @field_validator("arguments", mode="before")
    @classmethod
    def _decode_arguments(cls, value: Any) -> Any:
        if isinstance(value, str):
            return json.loads(value) if value.strip() else {}
        return value

    @property
    def is_raw_search(self) -> bool:
        """Whether the invocation targets an explicit collection."""
        return self.field_name == RAW_SEARCH_FIELD


InboundEvent = ChangeBatch | QueryInvocation
