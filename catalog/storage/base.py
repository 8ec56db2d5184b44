from abc import ABC, abstractmethod
from typing import Any, Iterable, Literal

from pydantic import BaseModel

from catalog.core.config import Settings, get_settings
from catalog.core.logging import get_logger

log = get_logger(__name__)

Document = dict[str, Any]


class WriteOp(BaseModel):
    """One step of an atomic write batch."""

    kind: Literal["put", "delete"]
    collection: str
    id: str
    document: Document | None = None

    @classmethod
    def put(cls, collection: str, id: str, document: Document) -> "WriteOp":
        return cls(kind="put", collection=collection, id=id, document=document)

    @classmethod
    def delete(cls, collection: str, id: str) -> "WriteOp":
        return cls(kind="delete", collection=collection, id=id)


class BackendAdapter(ABC):
    """Uniform CRUD over named collections of JSON-compatible documents.

    Every document carries its key in ``id``. Failures of the underlying
    storage surface as ``PersistenceFailedError``.
    """

    name: str = "backend"

    @abstractmethod
    async def list(self, collection: str) -> list[Document]:
        """Return every document in the collection; order is backend-defined."""
        ...

    @abstractmethod
    async def get(self, collection: str, id: str) -> Document | None:
        """Return the document or None when absent."""
        ...

    @abstractmethod
    async def put(self, collection: str, id: str, document: Document) -> None:
        """Create or replace the document."""
        ...

    @abstractmethod
    async def patch(self, collection: str, id: str, fields: Document) -> None:
        """Merge fields into an existing document; NotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, collection: str, id: str) -> None:
        """Remove the document; missing ids are ignored."""
        ...

    @abstractmethod
    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        """Remove every document whose ``field`` equals ``value``; return the count."""
        ...

    @abstractmethod
    async def transact(self, ops: Iterable[WriteOp]) -> None:
        """Apply all operations or none of them."""
        ...

    async def close(self) -> None:
        return None


def select_adapter(settings: Settings | None = None) -> BackendAdapter:
    """Pick the backend once at boot: remote when configured, local otherwise."""
    settings = settings or get_settings()
    if settings.remote_configured:
        from catalog.storage.remote import RemoteAdapter
        log.info("storage_selected", backend="remote", database=settings.mongodb_db_name)
        return RemoteAdapter(settings)
    from catalog.db.seeds import default_seeds
    from catalog.storage.local import LocalAdapter
    log.info("storage_selected", backend="local", path=settings.store_local_path)
    return LocalAdapter(settings.store_local_path, seeds=default_seeds(settings))
