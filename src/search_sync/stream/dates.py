"""Calendar facet fields derived from timestamp attributes."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken to be UTC.

    Args:
        value: Candidate timestamp value.

    Returns:
        UTC datetime, or None if the value is not a parseable timestamp.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def date_facets(field: str, moment: datetime) -> dict[str, str]:
    """Build the four facet fields for one timestamp.

    Args:
        field: Name of the source timestamp field.
        moment: UTC datetime.

    Returns:
        Mapping of ``<field>Year``, ``<field>Month``, ``<field>Day`` and
        ``<field>Hour`` to their string values.
    """
    return {
        f"{field}Year": f"{moment.year:04d}",
        f"{field}Month": f"{moment.year:04d}-{moment.month:02d}",
        f"{field}Day": f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}",
        f"{field}Hour": f"{moment.hour:02d}",
    }


def expand_date_fields(
    document: Mapping[str, Any],
    date_fields: Iterable[str],
) -> dict[str, Any]:
    """Add calendar facet fields for every parseable timestamp field.

    Values that do not parse are left as they are. The input mapping is
    not modified.

    Args:
        document: Decoded document.
        date_fields: Field names to treat as timestamps.

    Returns:
        New document with the original fields plus derived facets.
    """
    wanted = frozenset(date_fields)
    expanded = dict(document)

    for field, value in document.items():
        if field not in wanted:
            continue
        moment = parse_timestamp(value)
        if moment is not None:
            expanded.update(date_facets(field, moment))

    return expanded
