"""Exception taxonomy for change synchronization and query proxying."""


class SearchSyncError(Exception):
    """Base class for all search-sync errors."""


class DecodeError(SearchSyncError):
    """Raised when a change record is malformed or incomplete."""

    def __init__(self, message: str, event_id: str | None = None) -> None:
        """Initialize decode error.

        Args:
            message: Error description.
            event_id: Stream event identifier of the offending record, if known.
        """
        super().__init__(message)
        self.event_id = event_id


class UnknownEventError(SearchSyncError):
    """Raised when an inbound payload is neither a change batch nor a query."""


class InvalidQueryError(SearchSyncError):
    """Raised when a query invocation does not resolve to a collection."""


class BackendError(SearchSyncError):
    """Raised when the index backend rejects a request."""

    def __init__(self, message: str, operation: str) -> None:
        """Initialize backend error.

        Args:
            message: Error description returned by the backend.
            operation: Backend operation that failed (e.g. "upsert").
        """
        super().__init__(message)
        self.operation = operation


class AlreadyExistsError(BackendError):
    """Raised when the backend reports the target object already exists."""


class NotFoundError(BackendError):
    """Raised when the backend reports the target object does not exist."""


class BackendUnavailableError(SearchSyncError):
    """Raised on network or timeout failures talking to the backend."""


class ProvisionError(SearchSyncError):
    """Raised when a collection cannot be created."""

    def __init__(self, message: str, collection: str) -> None:
        """Initialize provisioning error.

        Args:
            message: Error description.
            collection: Collection that failed to provision.
        """
        super().__init__(message)
        self.collection = collection


class SyncError(SearchSyncError):
    """Raised when the backend rejects a document upsert or delete."""

    def __init__(
        self,
        message: str,
        collection: str,
        document_id: str,
        action: str,
    ) -> None:
        """Initialize sync error.

        Args:
            message: Error description.
            collection: Target collection.
            document_id: Identity of the document being synchronized.
            action: "upsert" or "delete".
        """
        super().__init__(message)
        self.collection = collection
        self.document_id = document_id
        self.action = action
