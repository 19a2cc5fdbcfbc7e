from __future__ import annotations

from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Sequence

from attrbench.context import RunContext
from attrbench.domain.errors import StoreOperationError
from attrbench.domain.models import SchemaTemplate, StoreTarget
from attrbench.modes.abstract import AbstractBenchmarkMode, ModeResult
from attrbench.utils.logging import get_logger
from attrbench.utils.task_group import WorkUnit, run_bounded

log = get_logger(__name__)


class BatchLoader(AbstractBenchmarkMode):
    """
    Provision the four stores and bulk-load random documents into them.

    Every batch is generated once: its array shape goes to the classic and
    enhanced attribute stores, its subdocument shape to the classic and
    wildcard subdocument stores, so all four hold the same records.
    """

    name: str = "dataloader"
    description: str = "Drop, index and bulk-load the four stores in parallel batches."

    def __init__(
        self,
        context: RunContext,
        batch_size: Optional[int] = None,
        batch_count: Optional[int] = None,
        parallel_count: Optional[int] = None,
    ) -> None:
        settings = context.settings
        self.batch_size = settings.batch_size if batch_size is None else batch_size
        self.batch_count = settings.batch_count if batch_count is None else batch_count
        self.parallel_count = settings.load_parallel_count if parallel_count is None else parallel_count
        if self.batch_size < 0 or self.batch_count < 0:
            raise ValueError("batch_size and batch_count must be >= 0")
        self._context = context
        self._client = context.client
        self._stores = context.stores
        self._generator = context.generator

    def provision(self) -> None:
        """Drop each base collection, then create its configured indexes."""
        for store in self._stores.all():
            self._client.drop_collection(store.collection)
            for index_spec in store.indexes:
                self._client.create_index(store.collection, index_spec)

    def _insert(self, store: StoreTarget, documents: Sequence[Mapping[str, Any]], unit_id: str) -> int:
        try:
            self._client.insert_many(store.collection, documents)
        except StoreOperationError as exc:
            raise exc.add_context(unit_id)
        return len(documents)

    def load_batch(self, batch_index: int, template: SchemaTemplate) -> Dict[str, int]:
        """
        Generate one batch and insert it into all four stores concurrently.

        Returns
        -------
        Dict[str, int]
            Documents inserted per store name.
        """
        log.info(
            f"Starting batch {batch_index} for {self.batch_size} documents",
            extra={"batch": batch_index, "documents": self.batch_size},
        )
        try:
            batch = self._generator.generate_batch(template, self.batch_size)
            placements = [
                (self._stores.classic_attr, batch.array_docs),
                (self._stores.enhanced_attr, batch.array_docs),
                (self._stores.classic_subdoc, batch.subdocument_docs),
                (self._stores.wildcard_subdoc, batch.subdocument_docs),
            ]
            units: List[WorkUnit[int]] = []
            for store, documents in placements:
                unit_id = f"{batch_index}_{store.name}"
                units.append(WorkUnit(unit_id, partial(self._insert, store, documents, unit_id)))
            counts = run_bounded(units, max_workers=len(units), label=f"batch-{batch_index}")
        except Exception:
            log.error(f"Error at batch {batch_index}.", extra={"batch": batch_index})
            raise

        log.info(f"Batch {batch_index} done.", extra={"batch": batch_index})
        return {store.name: count for (store, _), count in zip(placements, counts)}

    def execute(self) -> ModeResult:
        template = SchemaTemplate.from_json(self._context.settings.document_template)
        self._generator.check_template(template, add_id=True)

        self.provision()

        totals = {store.name: 0 for store in self._stores.all()}
        if self.batch_size == 0 or self.batch_count == 0:
            log.info(
                "Nothing to load",
                extra={"batch_size": self.batch_size, "batch_count": self.batch_count},
            )
        else:
            units = [
                WorkUnit(str(batch_index), partial(self.load_batch, batch_index, template))
                for batch_index in range(self.batch_count)
            ]
            for batch_counts in run_bounded(units, max_workers=self.parallel_count, label="loader"):
                for store_name, count in batch_counts.items():
                    totals[store_name] += count

        return ModeResult(
            mode=self.name,
            stores={store_name: {"documents": count} for store_name, count in totals.items()},
            run_prefix=None,
            extra={
                "batch_size": self.batch_size,
                "batch_count": self.batch_count,
                "parallel_count": self.parallel_count,
            },
        )


__all__ = ["BatchLoader"]
