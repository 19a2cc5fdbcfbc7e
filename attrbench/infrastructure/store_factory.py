"""
MongoDB connection factory for the attribute pattern benchmark.

`MongoClientRegistry` owns the `MongoClient` instances for a run: stores that
share a connection string share a client. It is created once by the CLI,
handed around inside the run context and closed explicitly when the run ends.
`build_store_set` resolves the four logical stores (base collection, results
collection, index definitions) from settings.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from pymongo import MongoClient

from attrbench.config import Settings
from attrbench.domain.models import (
    CLASSIC_ATTR,
    CLASSIC_SUBDOC,
    ENHANCED_ATTR,
    WILDCARD_SUBDOC,
    StoreSet,
    StoreTarget,
)
from attrbench.utils.logging import get_logger

log = get_logger(__name__)


def get_mongo_client(uri: str, max_pool_size: int = 50) -> MongoClient:
    """
    Create a pymongo client sized for concurrent benchmark workers.

    Retryable writes are disabled so a failed insert surfaces immediately.
    """
    return MongoClient(
        uri,
        maxPoolSize=max_pool_size,
        retryWrites=False,
        retryReads=False,
    )


class MongoClientRegistry:
    """
    Thread-safe cache of MongoClient instances keyed by connection string.
    """

    def __init__(self, max_pool_size: int = 50) -> None:
        self._max_pool_size = max_pool_size
        self._clients: Dict[str, MongoClient] = {}
        self._lock = threading.Lock()

    def get_client(self, uri: str) -> MongoClient:
        with self._lock:
            client = self._clients.get(uri)
            if client is None:
                client = get_mongo_client(uri, max_pool_size=self._max_pool_size)
                self._clients[uri] = client
            return client

    def close_all(self) -> None:
        """Close every client; safe to call more than once."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
        for client in clients:
            client.close()
        if clients:
            log.debug("Mongo clients closed", extra={"clients": len(clients)})


def _store_target(
    registry: MongoClientRegistry,
    name: str,
    uri: str,
    db_name: str,
    coll_name: str,
    results_coll_name: str,
    indexes: list,
) -> StoreTarget:
    database = registry.get_client(uri)[db_name]
    return StoreTarget(
        name=name,
        collection=database[coll_name],
        collection_name=coll_name,
        results=database[results_coll_name],
        indexes=tuple(indexes),
    )


def build_store_set(settings: Settings, registry: Optional[MongoClientRegistry] = None) -> StoreSet:
    registry = registry or MongoClientRegistry(max_pool_size=settings.max_pool_size)
    return StoreSet(
        classic_attr=_store_target(
            registry,
            CLASSIC_ATTR,
            settings.classic_attr_uri,
            settings.classic_attr_db,
            settings.classic_attr_coll,
            settings.classic_attr_results_coll,
            settings.classic_attr_idx,
        ),
        enhanced_attr=_store_target(
            registry,
            ENHANCED_ATTR,
            settings.enhanced_attr_uri,
            settings.enhanced_attr_db,
            settings.enhanced_attr_coll,
            settings.enhanced_attr_results_coll,
            settings.enhanced_attr_idx,
        ),
        classic_subdoc=_store_target(
            registry,
            CLASSIC_SUBDOC,
            settings.classic_subdoc_uri,
            settings.classic_subdoc_db,
            settings.classic_subdoc_coll,
            settings.classic_subdoc_results_coll,
            settings.classic_subdoc_idx,
        ),
        wildcard_subdoc=_store_target(
            registry,
            WILDCARD_SUBDOC,
            settings.wildcard_subdoc_uri,
            settings.wildcard_subdoc_db,
            settings.wildcard_subdoc_coll,
            settings.wildcard_subdoc_results_coll,
            settings.wildcard_subdoc_idx,
        ),
    )


__all__ = [
    "MongoClientRegistry",
    "build_store_set",
    "get_mongo_client",
]
