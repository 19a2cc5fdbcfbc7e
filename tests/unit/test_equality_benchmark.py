from __future__ import annotations

import logging

import pytest

from attrbench.domain.errors import SchemaError, StoreOperationError
from attrbench.domain.models import SchemaTemplate
from attrbench.modes.equality_benchmark import QueryBenchmarkRunner
from attrbench.shapes.selection import AttributeSubsetSelector
from attrbench.shapes.transform import to_attribute_array, to_attribute_query

FIXED_EPOCH = 1_700_000_000.75
RUN_PREFIX = "1700000000"
EXPECTED_QUERIES = 6


def _runner(context, **overrides) -> QueryBenchmarkRunner:
    return QueryBenchmarkRunner(context, clock=lambda: FIXED_EPOCH, **overrides)


def test_query_set_has_three_aligned_shapes(fake_context, sample_template):
    query_set = _runner(fake_context).build_query_set(sample_template)

    assert len(query_set) == EXPECTED_QUERIES
    for attribute_query, enhanced_query, dot_query in zip(
        query_set.attribute_queries, query_set.enhanced_queries, query_set.dot_queries
    ):
        assert len(attribute_query["$and"]) == 2
        assert len(enhanced_query["$and"]) == 2
        dotted = [name for name in dot_query if name.startswith("attributes.")]
        assert len(dotted) == 2
        assert "attributes" not in dot_query
        pairs = [clause["attributes"] for clause in enhanced_query["$and"]]
        assert pairs == [{"k": name.split(".", 1)[1], "v": dot_query[name]} for name in dotted]
        assert [clause["attributes"]["$elemMatch"] for clause in attribute_query["$and"]] == pairs


@pytest.mark.parametrize(("parallel_count", "expected"), [(1, 1), (3, 1), (4, 1), (8, 2), (17, 4)])
def test_workers_per_pairing(fake_context, parallel_count, expected):
    assert _runner(fake_context, parallel_count=parallel_count).workers_per_pairing == expected


def test_execute_records_one_result_per_query_and_store(fake_context, fake_client):
    matched = [{"_id": "m1"}, {"_id": "m2"}]
    fake_client.find_results["wildcard_subdoc.docs"] = matched

    result = _runner(fake_context).execute()

    assert result["mode"] == "equalitybenchmark"
    assert result["run_prefix"] == RUN_PREFIX
    assert result["stores"]["wildcard_subdoc"] == {"queries": EXPECTED_QUERIES, "matched": 2 * EXPECTED_QUERIES}
    assert result["stores"]["classic_attr"] == {"queries": EXPECTED_QUERIES, "matched": 0}
    assert len(fake_client.operations("run_explain")) == 4 * EXPECTED_QUERIES
    assert len(fake_client.operations("find")) == 4 * EXPECTED_QUERIES

    for store in ("classic_attr", "enhanced_attr", "classic_subdoc", "wildcard_subdoc"):
        records = fake_client.inserted[f"{store}.results"]
        assert sorted(record["_id"] for record in records) == sorted(
            f"{RUN_PREFIX}_{index}" for index in range(EXPECTED_QUERIES)
        )

    wildcard = fake_client.inserted["wildcard_subdoc.results"][0]
    assert wildcard["nMatched"] == 2
    assert wildcard["matched_ids"] == ["m1", "m2"]
    assert list(wildcard) == ["_id", "query", "nMatched", "matched_ids", "executionStats"]


def test_persisted_query_and_stats_are_sanitized(fake_context, fake_client):
    _runner(fake_context, test_count=1).execute()

    classic = fake_client.inserted["classic_attr.results"][0]
    assert "_and" in classic["query"]
    assert "_elemMatch" in classic["query"]["_and"][0]["attributes"]
    assert "_clusterTime" in classic["executionStats"]
    assert classic["executionStats"]["queryPlanner"]["winningPlan"]["keyPattern"] == {"attributes,_**": 1}

    dotted = fake_client.inserted["classic_subdoc.results"][0]["query"]
    assert all("." not in name for name in dotted)


def test_runs_are_bracketed_by_log_messages(fake_context, caplog):
    caplog.set_level(logging.INFO)
    _runner(fake_context, test_count=1).execute()

    assert f"Starting run {RUN_PREFIX}_0, type: Wildcard Index" in caplog.text
    assert f"Finished run {RUN_PREFIX}_0, type: Classic Attribute" in caplog.text


def test_store_failure_propagates_with_run_id(fake_context, fake_client, caplog):
    caplog.set_level(logging.INFO)
    fake_client.failures[("run_explain", "enhanced_attr.docs")] = StoreOperationError(
        "explain failed", operation="run_explain", namespace="enhancedAttr.docs"
    )

    with pytest.raises(StoreOperationError) as excinfo:
        _runner(fake_context, test_count=1).execute()

    assert excinfo.value.context == [f"{RUN_PREFIX}_0"]
    assert f"Run {RUN_PREFIX}_0 failed" in caplog.text
    assert "enhanced_attr.results" not in fake_client.inserted


def test_zero_attributes_to_query_is_rejected_before_store_calls(fake_context, fake_client):
    with pytest.raises(SchemaError, match="no attributes"):
        _runner(fake_context, attributes_to_query=0).execute()

    assert fake_client.calls == []


def test_template_with_empty_attributes_is_rejected(fake_context):
    template = SchemaTemplate.from_document({"label": "x", "attributes": {}})

    with pytest.raises(SchemaError, match="no attributes"):
        _runner(fake_context).build_query_set(template)


def test_zero_queries_touch_nothing(fake_context, fake_client):
    result = _runner(fake_context, test_count=0).execute()

    assert fake_client.calls == []
    assert all(counts == {"queries": 0, "matched": 0} for counts in result["stores"].values())


def test_queries_match_documents_loaded_in_array_shape(generator, sample_template, random_source):
    base = generator.generate_document(sample_template)
    stored = to_attribute_array(base)
    trimmed = AttributeSubsetSelector(2, random_source).select(base)

    for clause in to_attribute_query(trimmed)["$and"]:
        assert clause["attributes"]["$elemMatch"] in stored["attributes"]
