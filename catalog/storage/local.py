import copy
from pathlib import Path
from typing import Any, Iterable, Mapping

import orjson

from catalog.core.exceptions import NotFoundError, PersistenceFailedError
from catalog.core.logging import get_logger
from catalog.storage.base import BackendAdapter, Document, WriteOp

log = get_logger(__name__)


def _upsert(docs: list[Document], id: str, document: Document) -> None:
    doc = {**document, "id": id}
    for i, existing in enumerate(docs):
        if existing.get("id") == id:
            docs[i] = doc
            return
    docs.append(doc)


def _remove(docs: list[Document], id: str) -> list[Document]:
    return [d for d in docs if d.get("id") != id]


class LocalAdapter(BackendAdapter):
    """Single-process store: one JSON file per collection, rewritten on every change.

    A collection with no file yet is seeded from ``seeds`` and persisted
    on first access, so later reads see the same data.
    """

    name = "local"

    def __init__(self, root: str | Path, seeds: Mapping[str, list[Document]] | None = None) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._seeds = dict(seeds or {})

    def _path(self, collection: str) -> Path:
        return self.root / f"{collection}.json"

    def _read(self, collection: str) -> list[Document]:
        path = self._path(collection)
        if not path.exists():
            seed = copy.deepcopy(self._seeds.get(collection, []))
            self._write(collection, seed)
            if seed:
                log.info("collection_seeded", collection=collection, count=len(seed))
            return seed
        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            raise PersistenceFailedError(f"Could not read {collection}", details={"collection": collection}) from e
        if not isinstance(data, list):
            raise PersistenceFailedError(f"Corrupt collection {collection}", details={"collection": collection})
        return data

    def _write(self, collection: str, docs: list[Document]) -> None:
        path = self._path(collection)
        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_bytes(orjson.dumps(docs, option=orjson.OPT_INDENT_2))
            tmp.replace(path)
        except (OSError, TypeError) as e:
            raise PersistenceFailedError(f"Could not write {collection}", details={"collection": collection}) from e

    async def list(self, collection: str) -> list[Document]:
        return self._read(collection)

    async def get(self, collection: str, id: str) -> Document | None:
        for doc in self._read(collection):
            if doc.get("id") == id:
                return doc
        return None

    async def put(self, collection: str, id: str, document: Document) -> None:
        docs = self._read(collection)
        _upsert(docs, id, document)
        self._write(collection, docs)

    async def patch(self, collection: str, id: str, fields: Document) -> None:
        docs = self._read(collection)
        for doc in docs:
            if doc.get("id") == id:
                doc.update(fields)
                doc["id"] = id
                self._write(collection, docs)
                return
        raise NotFoundError(f"{collection}/{id} not found")

    async def delete(self, collection: str, id: str) -> None:
        docs = self._read(collection)
        remaining = _remove(docs, id)
        if len(remaining) != len(docs):
            self._write(collection, remaining)

    async def delete_where(self, collection: str, field: str, value: Any) -> int:
        docs = self._read(collection)
        remaining = [d for d in docs if d.get(field) != value]
        removed = len(docs) - len(remaining)
        if removed:
            self._write(collection, remaining)
        return removed

    async def transact(self, ops: Iterable[WriteOp]) -> None:
        ops = list(ops)
        if not ops:
            return
        previous: dict[str, list[Document]] = {}
        staged: dict[str, list[Document]] = {}
        for op in ops:
            if op.collection not in staged:
                previous[op.collection] = self._read(op.collection)
                staged[op.collection] = copy.deepcopy(previous[op.collection])
            if op.kind == "put":
                _upsert(staged[op.collection], op.id, op.document or {})
            else:
                staged[op.collection] = _remove(staged[op.collection], op.id)

        written: list[str] = []
        try:
            for collection, docs in staged.items():
                self._write(collection, docs)
                written.append(collection)
        except PersistenceFailedError:
            log.error("transaction_rollback", collections=written)
            for collection in written:
                self._write(collection, previous[collection])
            raise
