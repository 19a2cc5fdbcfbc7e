"""
Document store client capability used by the loader and the benchmark runner.

`StoreClient` is the narrow interface the benchmark depends on; handles are
opaque (pymongo `Collection` objects in production, plain markers in tests).
`MongoStoreClient` implements it on top of pymongo and converts every
`PyMongoError` into a `StoreOperationError` tagged with the operation and the
target namespace, including errors raised while a `find` cursor is consumed.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Protocol, Sequence, runtime_checkable

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from attrbench.domain.errors import StoreOperationError
from attrbench.utils.logging import get_logger

log = get_logger(__name__)

EXPLAIN_VERBOSITY = "executionStats"


@runtime_checkable
class StoreClient(Protocol):
    """Operations the benchmark needs from a document store."""

    def insert_many(self, handle: Any, documents: Sequence[Mapping[str, Any]]) -> None: ...

    def insert_one(self, handle: Any, document: Mapping[str, Any]) -> None: ...

    def find(self, handle: Any, filter_document: Mapping[str, Any]) -> Iterator[Dict[str, Any]]: ...

    def run_explain(
        self, handle: Any, collection_name: str, filter_document: Mapping[str, Any]
    ) -> Dict[str, Any]: ...

    def create_index(self, handle: Any, index_spec: Mapping[str, Any]) -> None: ...

    def drop_collection(self, handle: Any) -> None: ...


def index_keys_and_options(index_spec: Mapping[str, Any]) -> tuple[List[tuple[str, Any]], Dict[str, Any]]:
    """
    Split an index definition into pymongo key pairs and options.

    Accepts either a bare keys document (`{"attributes.k": 1, "attributes.v": 1}`)
    or a full definition (`{"key": {...}, "name": "...", "sparse": true}`).
    """
    key = index_spec.get("key")
    if isinstance(key, Mapping):
        options = {name: value for name, value in index_spec.items() if name != "key"}
        return list(key.items()), options
    return list(index_spec.items()), {}


def build_explain_command(collection_name: str, filter_document: Mapping[str, Any]) -> Dict[str, Any]:
    """Explain a find with execution-statistics verbosity."""
    return {
        "explain": {"find": collection_name, "filter": dict(filter_document)},
        "verbosity": EXPLAIN_VERBOSITY,
    }


class MongoStoreClient:
    """pymongo-backed `StoreClient`."""

    @staticmethod
    def _wrap(exc: PyMongoError, operation: str, handle: Collection) -> StoreOperationError:
        return StoreOperationError(str(exc), operation=operation, namespace=handle.full_name)

    def insert_many(self, handle: Collection, documents: Sequence[Mapping[str, Any]]) -> None:
        try:
            handle.insert_many(list(documents), ordered=True)
        except PyMongoError as exc:
            raise self._wrap(exc, "insert_many", handle) from exc

    def insert_one(self, handle: Collection, document: Mapping[str, Any]) -> None:
        try:
            handle.insert_one(dict(document))
        except PyMongoError as exc:
            raise self._wrap(exc, "insert_one", handle) from exc

    def find(self, handle: Collection, filter_document: Mapping[str, Any]) -> Iterator[Dict[str, Any]]:
        try:
            yield from handle.find(dict(filter_document))
        except PyMongoError as exc:
            raise self._wrap(exc, "find", handle) from exc

    def run_explain(
        self, handle: Collection, collection_name: str, filter_document: Mapping[str, Any]
    ) -> Dict[str, Any]:
        command = build_explain_command(collection_name, filter_document)
        try:
            return dict(handle.database.command(command))
        except PyMongoError as exc:
            raise self._wrap(exc, "run_explain", handle) from exc

    def create_index(self, handle: Collection, index_spec: Mapping[str, Any]) -> None:
        keys, options = index_keys_and_options(index_spec)
        try:
            name = handle.create_index(keys, **options)
        except PyMongoError as exc:
            raise self._wrap(exc, "create_index", handle) from exc
        log.info("Index created", extra={"namespace": handle.full_name, "index": name})

    def drop_collection(self, handle: Collection) -> None:
        try:
            handle.drop()
        except PyMongoError as exc:
            raise self._wrap(exc, "drop_collection", handle) from exc
        log.info("Collection dropped", extra={"namespace": handle.full_name})


__all__ = [
    "EXPLAIN_VERBOSITY",
    "MongoStoreClient",
    "StoreClient",
    "build_explain_command",
    "index_keys_and_options",
]
