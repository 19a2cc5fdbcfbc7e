"""
Pytest configuration for the attribute pattern benchmark.

Provides fixtures for:
- Settings with small, deterministic knobs
- Parsed schema templates
- A recording fake store client and string-handle store targets
- A run context wired to the fakes (no MongoDB needed)
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Sequence, Tuple

import pytest

from attrbench.config import Settings
from attrbench.context import RunContext
from attrbench.domain.models import (
    CLASSIC_ATTR,
    CLASSIC_SUBDOC,
    ENHANCED_ATTR,
    WILDCARD_SUBDOC,
    SchemaTemplate,
    StoreSet,
    StoreTarget,
)
from attrbench.generation.generator import DocumentGenerator
from attrbench.generation.random_source import RandomSource

TEST_SEED = 1234

SAMPLE_TEMPLATE_JSON = """{
  "a": 1,
  "label": "x",
  "attributes": {"x": "red", "y": 3, "z": "blue", "w": 4}
}"""

SAMPLE_QUERY_TEMPLATE_JSON = """{
  "label": "x",
  "attributes": {"x": "red", "y": 3, "z": "blue", "w": 4}
}"""

SAMPLE_CATALOG = "red, green, blue"


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Explicit keyword values win over environment variables and `.env`.
    """
    return Settings(
        document_template=SAMPLE_TEMPLATE_JSON,
        query_template=SAMPLE_QUERY_TEMPLATE_JSON,
        batch_size=5,
        batch_count=3,
        load_parallel_count=2,
        test_count=6,
        parallel_count=8,
        attributes_to_query=2,
        max_int=10,
        min_date=datetime(2015, 1, 1, tzinfo=timezone.utc),
        max_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
        string_catalog=SAMPLE_CATALOG,
        random_seed=TEST_SEED,
        log_level="DEBUG",
    )


@pytest.fixture
def sample_template() -> SchemaTemplate:
    return SchemaTemplate.from_json(SAMPLE_TEMPLATE_JSON)


@pytest.fixture
def random_source() -> RandomSource:
    return RandomSource(TEST_SEED)


@pytest.fixture
def generator(test_settings: Settings, random_source: RandomSource) -> DocumentGenerator:
    return DocumentGenerator.from_settings(test_settings, random_source)


class FakeStoreClient:
    """
    Thread-safe recording store client.

    Handles are plain strings. `find_results` maps a handle to the documents
    `find` yields; `failures` maps (operation, handle) to an exception raised
    on that call.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.inserted: Dict[Any, List[Dict[str, Any]]] = {}
        self.find_results: Dict[Any, List[Dict[str, Any]]] = {}
        self.explain_result: Dict[str, Any] = {
            "queryPlanner": {"winningPlan": {"stage": "IXSCAN", "keyPattern": {"attributes.$**": 1}}},
            "executionStats": {"nReturned": 0, "totalKeysExamined": 0},
            "$clusterTime": {"clusterTime": 1},
        }
        self.failures: Dict[Tuple[str, Any], Exception] = {}
        self._lock = threading.Lock()

    def _record(self, operation: str, handle: Any) -> None:
        with self._lock:
            self.calls.append((operation, handle))
        failure = self.failures.get((operation, handle))
        if failure is not None:
            raise failure

    def operations(self, operation: str) -> List[Any]:
        return [handle for name, handle in self.calls if name == operation]

    def insert_many(self, handle: Any, documents: Sequence[Mapping[str, Any]]) -> None:
        self._record("insert_many", handle)
        with self._lock:
            self.inserted.setdefault(handle, []).extend(dict(doc) for doc in documents)

    def insert_one(self, handle: Any, document: Mapping[str, Any]) -> None:
        self._record("insert_one", handle)
        with self._lock:
            self.inserted.setdefault(handle, []).append(dict(document))

    def find(self, handle: Any, filter_document: Mapping[str, Any]) -> Iterator[Dict[str, Any]]:
        self._record("find", handle)
        return iter(list(self.find_results.get(handle, [])))

    def run_explain(
        self, handle: Any, collection_name: str, filter_document: Mapping[str, Any]
    ) -> Dict[str, Any]:
        self._record("run_explain", handle)
        return dict(self.explain_result)

    def create_index(self, handle: Any, index_spec: Mapping[str, Any]) -> None:
        self._record("create_index", handle)

    def drop_collection(self, handle: Any) -> None:
        self._record("drop_collection", handle)


def _target(name: str, indexes: Tuple[Mapping[str, Any], ...] = ()) -> StoreTarget:
    return StoreTarget(
        name=name,
        collection=f"{name}.docs",
        collection_name="docs",
        results=f"{name}.results",
        indexes=indexes,
    )


@pytest.fixture
def fake_client() -> FakeStoreClient:
    return FakeStoreClient()


@pytest.fixture
def fake_stores() -> StoreSet:
    return StoreSet(
        classic_attr=_target(CLASSIC_ATTR, ({"attributes.k": 1, "attributes.v": 1},)),
        enhanced_attr=_target(ENHANCED_ATTR, ({"attributes": 1},)),
        classic_subdoc=_target(CLASSIC_SUBDOC),
        wildcard_subdoc=_target(WILDCARD_SUBDOC, ({"attributes.$**": 1},)),
    )


@pytest.fixture
def fake_context(
    test_settings: Settings,
    fake_client: FakeStoreClient,
    fake_stores: StoreSet,
    generator: DocumentGenerator,
    random_source: RandomSource,
) -> RunContext:
    return RunContext(
        settings=test_settings,
        client=fake_client,
        stores=fake_stores,
        generator=generator,
        random_source=random_source,
    )

