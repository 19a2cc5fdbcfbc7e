"""
Integration tests for the attribute pattern benchmark.

These tests run against a real MongoDB server and verify that:
1. The loader provisions indexes and fills all four stores identically
2. The equality benchmark matches the same documents on every store
3. Result records land in the results collections with sanitized names

Run with: RUN_INTEGRATION_TESTS=1 MONGODB_URI=mongodb://localhost:27017 pytest tests/integration/
"""

from __future__ import annotations

import os
import uuid

import pytest
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from attrbench.config import Settings
from attrbench.context import build_context
from attrbench.orchestrator import run_mode

DEFAULT_URI = "mongodb://localhost:27017"
BATCH_SIZE = 20
BATCH_COUNT = 3
TEST_COUNT = 5

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
        reason="Integration tests require RUN_INTEGRATION_TESTS=1 and a reachable MongoDB",
    ),
]


@pytest.fixture(scope="module")
def mongodb_uri() -> str:
    uri = os.getenv("MONGODB_URI", DEFAULT_URI)
    client = MongoClient(uri, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
    except PyMongoError:
        pytest.skip(f"MongoDB not reachable at {uri}")
    finally:
        client.close()
    return uri


@pytest.fixture
def integration_settings(mongodb_uri: str):
    suffix = uuid.uuid4().hex[:8]
    settings = Settings(
        _env_file=None,
        classic_attr_uri=mongodb_uri,
        enhanced_attr_uri=mongodb_uri,
        classic_subdoc_uri=mongodb_uri,
        wildcard_subdoc_uri=mongodb_uri,
        classic_attr_db=f"it_classicAttr_{suffix}",
        enhanced_attr_db=f"it_enhancedAttr_{suffix}",
        classic_subdoc_db=f"it_classicSubdoc_{suffix}",
        wildcard_subdoc_db=f"it_wildcardSubdoc_{suffix}",
        batch_size=BATCH_SIZE,
        batch_count=BATCH_COUNT,
        test_count=TEST_COUNT,
        parallel_count=4,
        attributes_to_query=1,
        max_int=3,
        string_catalog="red, blue",
        random_seed=42,
    )
    yield settings

    client = MongoClient(mongodb_uri)
    try:
        for db_name in (
            settings.classic_attr_db,
            settings.enhanced_attr_db,
            settings.classic_subdoc_db,
            settings.wildcard_subdoc_db,
        ):
            client.drop_database(db_name)
    finally:
        client.close()


def test_load_then_benchmark(integration_settings: Settings, tmp_path):
    context = build_context(integration_settings)
    try:
        load_summary = run_mode("dataloader", context, results_dir=tmp_path, persist=False)
        expected = BATCH_SIZE * BATCH_COUNT
        for counts in load_summary["stores"].values():
            assert counts == {"documents": expected}

        for store in context.stores.all():
            assert store.collection.count_documents({}) == expected
        wildcard_indexes = context.stores.wildcard_subdoc.collection.index_information()
        assert any(dict(spec["key"]) == {"attributes.$**": 1} for spec in wildcard_indexes.values())

        bench_summary = run_mode("equalitybenchmark", context, results_dir=tmp_path, persist=True)
    finally:
        context.close()

    matched = {name: counts["matched"] for name, counts in bench_summary["stores"].items()}
    assert len(set(matched.values())) == 1, matched
    assert (tmp_path / "latest.json").exists()

    client = MongoClient(integration_settings.wildcard_subdoc_uri)
    try:
        results = client[integration_settings.wildcard_subdoc_db]["results"]
        assert results.count_documents({}) == TEST_COUNT
        record = results.find_one({"_id": f"{bench_summary['run_prefix']}_0"})
        assert record is not None
        assert record["nMatched"] == len(record["matched_ids"])
        assert all("." not in name and not name.startswith("$") for name in record["query"])
    finally:
        client.close()
