from contextlib import contextmanager
from typing import Any, Iterable, Iterator

import certifi
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from catalog.core.config import Settings, get_settings
from catalog.core.exceptions import NotFoundError, PersistenceFailedError
from catalog.core.logging import get_logger
from catalog.storage.base import BackendAdapter, Document, WriteOp

log = get_logger(__name__)


def _use_tls(uri: str) -> bool:
    """True if URI uses TLS (Atlas or explicit tls=true)."""
    return "mongodb+srv://" in uri or "tls=true" in uri.lower()


def _from_mongo(doc: dict[str, Any]) -> Document:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def _to_mongo(id: str, document: Document) -> dict[str, Any]:
    body = {k: v for k, v in document.items() if k != "id"}
    body["_id"] = id
    return body


@contextmanager
def _persistence(operation: str, collection: str | None = None) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        log.warning("remote_operation_failed", operation=operation, collection=collection, error=str(e))
        raise PersistenceFailedError(
            f"Remote {operation} failed",
            details={"operation": operation, "collection": collection},
        ) from e


class RemoteAdapter(BackendAdapter):
    """Networked MongoDB store; every call round-trips, nothing is cached."""

    name = "remote"

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        kwargs: dict[str, Any] = {}
        # Atlas in Docker: tlsCAFile + tlsDisableOCSPEndpointCheck avoid TLSV1_ALERT_INTERNAL_ERROR
        if _use_tls(settings.mongodb_uri):
            kwargs["tlsCAFile"] = certifi.where()
            kwargs["tlsDisableOCSPEndpointCheck"] = True
        if settings.mongodb_username:
            kwargs["username"] = settings.mongodb_username
            kwargs["password"] = settings.mongodb_password
        self._client = AsyncIOMotorClient(settings.mongodb_uri, **kwargs)
        self._db = self._client[settings.mongodb_db_name]

    async def list(self, collection: str) -> list[Document]:
        with _persistence("list", collection):
            docs = await self._db[collection].find({}).to_list(length=None)
        return [_from_mongo(d) for d in docs]

    async def get(self, collection: str, id: str) -> Document | None:
        with _persistence("get", collection):
            doc = await self._db[collection].find_one({"_id": id})
        return _from_mongo(doc) if doc else None

    async def put(self, collection: str, id: str, document: Document) -> None:
        with _persistence("put", collection):
            await self._db[collection].replace_one({"_id": id}, _to_mongo(id, document), upsert=True)

    async def patch(self, collection: str, id: str, fields: Document) -> None:
        update = {k: v for k, v in fields.items() if k not in ("id", "_id")}
        with _persistence("patch", collection):
            if update:
                result = await self._db[collection].update_one({"_id": id}, {"$set": update})
                matched = result.matched_count
            else:
                matched = await self._db[collection].count_documents({"_id": id}, limit=1)
        if not matched:
            raise NotFoundError(f"{collection}/{id} not found")

    async def delete(self, collection: str, id: str) -> None:
        with _persistence("delete", collection):
            await self._db[collection].delete_one({"_id": id})

    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        key = "_id" if field == "id" else field
        with _persistence("delete_where", collection):
            result = await self._db[collection].delete_many({key: value})
        return result.deleted_count

    async def transact(self, ops: Iterable[WriteOp]) -> None:
        ops = list(ops)
        if not ops:
            return
        with _persistence("transact"):
            async with await self._client.start_session() as session:
                async with session.start_transaction():
                    for op in ops:
                        coll = self._db[op.collection]
                        if op.kind == "put":
                            await coll.replace_one(
                                {"_id": op.id},
                                _to_mongo(op.id, op.document or {}),
                                upsert=True,
                                session=session,
                            )
                        else:
                            await coll.delete_one({"_id": op.id}, session=session)

    async def close(self) -> None:
        self._client.close()
