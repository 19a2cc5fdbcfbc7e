"""
Infrastructure package for the attribute pattern benchmark.

Centralizes document store concerns (client capability, pymongo clients,
store target resolution). Keep this layer focused on I/O and resource
management, decoupled from generation and mode logic.
"""

from attrbench.infrastructure.store_client import MongoStoreClient, StoreClient
from attrbench.infrastructure.store_factory import (
    MongoClientRegistry,
    build_store_set,
    get_mongo_client,
)

__all__ = [
    "MongoClientRegistry",
    "MongoStoreClient",
    "StoreClient",
    "build_store_set",
    "get_mongo_client",
]
