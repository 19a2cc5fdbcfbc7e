"""
Run context: everything a mode needs, built once per CLI invocation.

Holds the settings, the store client, the four resolved store targets, the
shared random source and the document generator. The context owns the client
registry and closes it in `close()`; callers wrap a run in try/finally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from attrbench.config import Settings
from attrbench.domain.models import StoreSet
from attrbench.generation.generator import DocumentGenerator
from attrbench.generation.random_source import RandomSource
from attrbench.infrastructure.store_client import MongoStoreClient, StoreClient
from attrbench.infrastructure.store_factory import MongoClientRegistry, build_store_set
from attrbench.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class RunContext:
    settings: Settings
    client: StoreClient
    stores: StoreSet
    generator: DocumentGenerator
    random_source: RandomSource
    registry: Optional[MongoClientRegistry] = None

    def close(self) -> None:
        if self.registry is not None:
            self.registry.close_all()


def build_context(settings: Settings) -> RunContext:
    """
    Resolve store targets and create the generator for one run.

    pymongo connects lazily, so no server round trip happens here.
    """
    random_source = RandomSource(settings.random_seed)
    registry = MongoClientRegistry(max_pool_size=settings.max_pool_size)
    stores = build_store_set(settings, registry)
    log.debug(
        "Run context built",
        extra={"stores": [store.name for store in stores.all()], "seeded": settings.random_seed is not None},
    )
    return RunContext(
        settings=settings,
        client=MongoStoreClient(),
        stores=stores,
        generator=DocumentGenerator.from_settings(settings, random_source),
        random_source=random_source,
        registry=registry,
    )


__all__ = ["RunContext", "build_context"]
