"""Forwards search requests to the index backend."""

from typing import Any

import structlog

from search_sync.errors import InvalidQueryError
from search_sync.index.backend import IndexBackend
from search_sync.stream.types import QueryInvocation

logger = structlog.get_logger()


def resolve_collection(invocation: QueryInvocation) -> str:
    """Determine the collection a query invocation targets.

    Raw searches name their collection explicitly; every other field is
    served from the collection of its backing table.

    Args:
        invocation: Decoded query invocation.

    Returns:
        Lower-cased collection name.

    Raises:
        InvalidQueryError: If no collection can be resolved.
    """
    if invocation.is_raw_search:
        name = invocation.arguments.collection
    else:
        name = invocation.table_name

    if not name or not name.strip():
        raise InvalidQueryError(
            f"Query {invocation.field_name or invocation.type_name!r} names no collection"
        )
    return name.strip().lower()


class QueryProxy:
    """Passes search parameters through to a collection's search endpoint."""

    def __init__(self, backend: IndexBackend) -> None:
        """Initialize proxy.

        Args:
            backend: Index backend that executes searches.
        """
        self._backend = backend

    async def search(self, collection: str, parameters: dict[str, Any]) -> dict[str, Any]:
        """Search a collection with caller-supplied parameters.

        Args:
            collection: Target collection name.
            parameters: Backend search parameters, forwarded verbatim.

        Returns:
            The backend's response, unmodified.

        Raises:
            InvalidQueryError: If the collection name is empty.
        """
        if not collection:
            raise InvalidQueryError("Search requires a collection")

        result = await self._backend.search(collection, parameters)
        logger.info(
            "query_forwarded",
            collection=collection,
            parameters=sorted(parameters),
            found=result.get("found") if isinstance(result, dict) else None,
        )
        return result

    async def handle(self, invocation: QueryInvocation) -> dict[str, Any]:
        """Resolve and execute a query invocation.

        Args:
            invocation: Decoded query invocation.

        Returns:
            The backend's response, unmodified.
        """
        collection = resolve_collection(invocation)
        return await self.search(collection, invocation.arguments.search_parameters)
