"""Index backend interface and its Typesense implementation."""

import asyncio
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

import requests
import structlog
import typesense
from typesense.exceptions import (
    HTTPStatus0Error,
    ObjectAlreadyExists,
    ObjectNotFound,
    ServiceUnavailable,
    TypesenseClientError,
)

from search_sync.config import TypesenseSettings
from search_sync.errors import (
    AlreadyExistsError,
    BackendError,
    BackendUnavailableError,
    NotFoundError,
)

logger = structlog.get_logger()

T = TypeVar("T")


class IndexBackend(Protocol):
    """Network operations the sync engine and query proxy need."""

    async def list_collections(self) -> list[str]: ...

    async def create_collection(self, schema: dict[str, Any]) -> None: ...

    async def upsert_document(
        self, collection: str, document: dict[str, Any]
    ) -> None: ...

    async def delete_document(self, collection: str, document_id: str) -> None: ...

    async def search(
        self, collection: str, parameters: dict[str, Any]
    ) -> dict[str, Any]: ...


class TypesenseBackend:
    """IndexBackend backed by the official Typesense client.

    The client is blocking, so each call runs in a worker thread. Retries
    are disabled; a failed call surfaces immediately.
    """

    def __init__(self, client: typesense.Client) -> None:
        """Initialize backend.

        Args:
            client: Configured Typesense client.
        """
        self._client = client

    @classmethod
    def from_settings(cls, settings: TypesenseSettings) -> "TypesenseBackend":
        """Build a backend from connection settings.

        Args:
            settings: Typesense connection settings.

        Returns:
            Backend talking to the configured node.
        """
        client = typesense.Client(
            {
                "nodes": [
                    {
                        "host": settings.host,
                        "port": settings.port,
                        "protocol": settings.protocol,
                    }
                ],
                "api_key": settings.api_key,
                "connection_timeout_seconds": settings.connection_timeout_seconds,
                "num_retries": 0,
            }
        )
        logger.info(
            "typesense_client_configured",
            host=settings.host,
            port=settings.port,
            protocol=settings.protocol,
        )
        return cls(client)

    async def _call(self, operation: str, func: Callable[[], T]) -> T:
        """Run a blocking client call and translate its failures.

        Args:
            operation: Operation name for errors and logs.
            func: Zero-argument callable performing the request.

        Returns:
            The client's return value.
        """
        try:
            return await asyncio.to_thread(func)
        except ObjectAlreadyExists as e:
            raise AlreadyExistsError(str(e), operation) from e
        except ObjectNotFound as e:
            raise NotFoundError(str(e), operation) from e
        except (ServiceUnavailable, HTTPStatus0Error) as e:
            raise BackendUnavailableError(f"{operation}: {e}") from e
        except TypesenseClientError as e:
            raise BackendError(str(e), operation) from e
        except requests.exceptions.RequestException as e:
            logger.error("typesense_transport_error", operation=operation, error=str(e))
            raise BackendUnavailableError(f"{operation}: {e}") from e

    async def list_collections(self) -> list[str]:
        """Return the names of all collections on the node."""
        collections = await self._call("list_collections", self._client.collections.retrieve)
        return [collection["name"] for collection in collections]

    async def create_collection(self, schema: dict[str, Any]) -> None:
        """Create a collection.

        Args:
            schema: Collection schema payload.
        """
        await self._call(
            "create_collection",
            lambda: self._client.collections.create(schema),
        )

    async def upsert_document(self, collection: str, document: dict[str, Any]) -> None:
        """Insert or replace a document by its ``id``.

        Args:
            collection: Target collection.
            document: Document to index.
        """
        await self._call(
            "upsert",
            lambda: self._client.collections[collection].documents.upsert(document),
        )

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document by id.

        Args:
            collection: Target collection.
            document_id: Document identity.
        """
        await self._call(
            "delete",
            lambda: self._client.collections[collection].documents[document_id].delete(),
        )

    async def search(self, collection: str, parameters: dict[str, Any]) -> dict[str, Any]:
        """Run a search against a collection.

        Args:
            collection: Target collection.
            parameters: Search parameters, passed through untouched.

        Returns:
            The backend's search response.
        """
        return await self._call(
            "search",
            lambda: self._client.collections[collection].documents.search(parameters),
        )
