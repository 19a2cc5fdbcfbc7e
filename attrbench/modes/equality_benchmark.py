"""
Equality query benchmark over the four stores.

One randomized query set is derived from the query template and rendered in
the three query shapes; every store runs the shape that matches how its
documents are stored, so all four answer logically identical questions.
Each query is explained (execution statistics), executed, and the outcome is
written as a result record to the store's results collection.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from attrbench.context import RunContext
from attrbench.domain.errors import SchemaError, StoreOperationError
from attrbench.domain.models import ATTRIBUTES_FIELD, BenchmarkResultRecord, SchemaTemplate, StoreTarget
from attrbench.modes.abstract import AbstractBenchmarkMode, ModeResult
from attrbench.shapes.sanitize import sanitize_field_names
from attrbench.shapes.selection import AttributeSubsetSelector
from attrbench.shapes.transform import (
    to_attribute_query,
    to_dot_notation_query,
    to_enhanced_attribute_query,
)
from attrbench.utils.logging import get_logger
from attrbench.utils.task_group import WorkUnit, run_bounded

log = get_logger(__name__)

Query = Dict[str, Any]

# Query-shape pairings run side by side.
PAIRING_COUNT = 4


@dataclass
class QuerySet:
    """The same logical queries in the three query shapes, index-aligned."""

    attribute_queries: List[Query] = field(default_factory=list)
    enhanced_queries: List[Query] = field(default_factory=list)
    dot_queries: List[Query] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.dot_queries)


class QueryBenchmarkRunner(AbstractBenchmarkMode):
    """
    Run the equality benchmark.

    Parameters
    ----------
    context : RunContext
        Client, stores, generator and shared random source for the run.
    test_count, parallel_count, attributes_to_query : int | None
        Overrides for the corresponding settings.
    clock : Callable[[], float]
        Epoch-seconds source for the run prefix.
    """

    name: str = "equalitybenchmark"
    description: str = "Explain, execute and record equality queries on all four stores."

    def __init__(
        self,
        context: RunContext,
        test_count: Optional[int] = None,
        parallel_count: Optional[int] = None,
        attributes_to_query: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = context.settings
        self.test_count = settings.test_count if test_count is None else test_count
        self.parallel_count = settings.parallel_count if parallel_count is None else parallel_count
        self.attributes_to_query = (
            settings.attributes_to_query if attributes_to_query is None else attributes_to_query
        )
        self._context = context
        self._client = context.client
        self._stores = context.stores
        self._generator = context.generator
        self._selector = AttributeSubsetSelector(self.attributes_to_query, context.random_source)
        self._clock = clock

    @property
    def workers_per_pairing(self) -> int:
        return max(1, self.parallel_count // PAIRING_COUNT)

    def build_query_set(self, template: SchemaTemplate) -> QuerySet:
        """
        Derive the aligned query lists from `test_count` trimmed query bases.

        Raises
        ------
        SchemaError
            If a trimmed base has no attributes left; an empty `$and` is
            rejected by the server.
        """
        query_set = QuerySet()
        for base in self._generator.generate_query_bases(template, self.test_count):
            trimmed = self._selector.select(base)
            if not trimmed.get(ATTRIBUTES_FIELD):
                raise SchemaError(
                    f"Query has no attributes to match (attributes_to_query={self.attributes_to_query})."
                )
            query_set.attribute_queries.append(to_attribute_query(trimmed))
            query_set.enhanced_queries.append(to_enhanced_attribute_query(trimmed))
            query_set.dot_queries.append(to_dot_notation_query(trimmed))
        return query_set

    def execute_query(self, target: StoreTarget, query: Mapping[str, Any], run_id: str) -> int:
        """
        Explain, execute and record a single query.

        Returns
        -------
        int
            Number of matched documents.
        """
        label = target.display_name
        log.info(f"Starting run {run_id}, type: {label}", extra={"run_id": run_id, "store": target.name})
        try:
            stats = self._client.run_explain(target.collection, target.collection_name, query)
            matched_ids = [document["_id"] for document in self._client.find(target.collection, query)]
            record = BenchmarkResultRecord.from_matches(
                run_id,
                sanitize_field_names(query),
                matched_ids,
                sanitize_field_names(stats),
            )
            self._client.insert_one(target.results, record.to_document())
        except StoreOperationError as exc:
            log.error(f"Run {run_id} failed, type: {label}", extra={"run_id": run_id, "store": target.name})
            raise exc.add_context(run_id)
        log.info(f"Finished run {run_id}, type: {label}", extra={"run_id": run_id, "store": target.name})
        return record.n_matched

    def run_pairing(self, target: StoreTarget, queries: Sequence[Query], run_prefix: str) -> Dict[str, int]:
        units = []
        for index, query in enumerate(queries):
            run_id = f"{run_prefix}_{index}"
            units.append(WorkUnit(run_id, partial(self.execute_query, target, query, run_id)))
        matched = run_bounded(units, max_workers=self.workers_per_pairing, label=target.name)
        return {"queries": len(matched), "matched": sum(matched)}

    def pairings(self, query_set: QuerySet) -> List[Tuple[StoreTarget, List[Query]]]:
        return [
            (self._stores.classic_attr, query_set.attribute_queries),
            (self._stores.enhanced_attr, query_set.enhanced_queries),
            (self._stores.classic_subdoc, query_set.dot_queries),
            (self._stores.wildcard_subdoc, query_set.dot_queries),
        ]

    def execute(self) -> ModeResult:
        template = SchemaTemplate.from_json(self._context.settings.query_template)
        self._generator.check_template(template)
        query_set = self.build_query_set(template)

        run_prefix = str(int(self._clock()))
        log.info(
            "Equality benchmark starting",
            extra={
                "run_prefix": run_prefix,
                "queries": len(query_set),
                "workers_per_store": self.workers_per_pairing,
            },
        )

        pairings = self.pairings(query_set)
        units = [
            WorkUnit(target.name, partial(self.run_pairing, target, queries, run_prefix))
            for target, queries in pairings
        ]
        counts = run_bounded(units, max_workers=PAIRING_COUNT, label="equality")

        return ModeResult(
            mode=self.name,
            stores={target.name: store_counts for (target, _), store_counts in zip(pairings, counts)},
            run_prefix=run_prefix,
            extra={
                "test_count": self.test_count,
                "parallel_count": self.parallel_count,
                "attributes_to_query": self.attributes_to_query,
            },
        )


__all__ = ["QueryBenchmarkRunner", "QuerySet"]
