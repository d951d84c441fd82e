"""Change stream decoding: payload classification, attribute images, date facets."""
from search_sync.stream.dates import expand_date_fields
from search_sync.stream.decoder import Document, decode_record, parse_event
from search_sync.stream.types import (
    ChangeBatch,
    ChangeRecord,
    EventKind,
    InboundEvent,
    QueryInvocation,
)

__all__ = [
    "ChangeBatch",
    "ChangeRecord",
    "Document",
    "EventKind",
    "InboundEvent",
    "QueryInvocation",
    "decode_record",
    "expand_date_fields",
    "parse_event",
]
