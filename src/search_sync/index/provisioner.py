"""On-demand collection provisioning with a process-local existence cache."""

import structlog

from search_sync.errors import AlreadyExistsError, BackendError, ProvisionError
from search_sync.index.backend import IndexBackend
from search_sync.index.schemas import CollectionSchema

logger = structlog.get_logger()


class CollectionCache:
    """Set of collection names known to exist on the backend.

    Only positive results are recorded, and a recorded name is never
    re-checked. Concurrent callers may both miss for the same name; the
    provisioner treats the resulting duplicate create as success, so the
    cache needs no locking.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._known: set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._known

    def __len__(self) -> int:
        return len(self._known)

    def mark_existing(self, name: str) -> None:
        """Record that a collection exists.

        Args:
            name: Collection name.
        """
        self._known.add(name)


class CollectionProvisioner:
    """Ensures index collections exist before documents are written.

    Attributes:
        cache: Existence cache shared by all callers of this provisioner.
    """

    def __init__(self, backend: IndexBackend, cache: CollectionCache | None = None) -> None:
        """Initialize provisioner.

        Args:
            backend: Index backend used for listing and creating collections.
            cache: Existence cache; a fresh one is created if None.
        """
        self._backend = backend
        self.cache = cache if cache is not None else CollectionCache()

    async def ensure_collection(self, name: str) -> None:
        """Create a collection with a catch-all schema unless it exists.

        Args:
            name: Collection name.

        Raises:
            ProvisionError: If creation fails for a reason other than the
                collection already existing.
        """
        if name in self.cache:
            return

        if name in await self._backend.list_collections():
            self.cache.mark_existing(name)
            logger.debug("collection_exists", collection=name)
            return

        schema = CollectionSchema(name=name)
        try:
            await self._backend.create_collection(schema.to_payload())
        except AlreadyExistsError:
            logger.info("collection_create_raced", collection=name)
        except BackendError as e:
            logger.error("collection_create_failed", collection=name, error=str(e))
            raise ProvisionError(str(e), collection=name) from e
        else:
            logger.info("collection_created", collection=name)

        self.cache.mark_existing(name)
