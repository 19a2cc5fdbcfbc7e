"""
Random document generation from a schema template.

Each template field gets a random value drawn by the rule registered for its
type tag; the `attributes` sub-fields are drawn independently with the same
rules. Subdocument-shape documents are converted to the attribute-array shape
so both shapes of a batch share `_id` and values.

Usage:
    from attrbench.generation import DocumentGenerator

    generator = DocumentGenerator(["red", "blue"], max_int=100, min_date=start, max_date=end)
    batch = generator.generate_batch(template, 1_000)
    batch.subdocument_docs, batch.array_docs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from bson import ObjectId
from bson.decimal128 import Decimal128
from bson.int64 import Int64

from attrbench.domain.errors import UnsupportedTypeError
from attrbench.domain.models import ATTRIBUTES_FIELD, FieldType, SchemaTemplate, TemplateField
from attrbench.generation.random_source import RandomSource
from attrbench.shapes.transform import to_attribute_array

if TYPE_CHECKING:
    from attrbench.config import Settings

ID_FIELD = "_id"

Document = Dict[str, Any]


@dataclass
class GeneratedBatch:
    """Parallel lists: `array_docs[i]` is the array shape of `subdocument_docs[i]`."""

    subdocument_docs: List[Document] = field(default_factory=list)
    array_docs: List[Document] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.subdocument_docs)


class DocumentGenerator:
    """
    Produce documents with random values shaped like a schema template.

    Parameters
    ----------
    string_catalog : Sequence[str]
        Values string fields are picked from (must not be empty).
    max_int : int
        Exclusive upper bound for 32-bit integer fields (must be > 0).
    min_date, max_date : datetime
        Date fields fall in [min_date, max_date).
    random_source : RandomSource | None
        Shared, lock-guarded PRNG; a fresh unseeded one is created if omitted.
    """

    def __init__(
        self,
        string_catalog: Sequence[str],
        max_int: int,
        min_date: datetime,
        max_date: datetime,
        random_source: Optional[RandomSource] = None,
    ) -> None:
        if not string_catalog:
            raise ValueError("The string catalog must contain at least one value.")
        if max_int <= 0:
            raise ValueError(f"max_int must be > 0, got {max_int}.")
        if max_date < min_date:
            raise ValueError("max_date must not be earlier than min_date.")

        self.string_catalog = tuple(string_catalog)
        self.max_int = max_int
        self.base_date = min_date
        self.max_seconds = (max_date - min_date).total_seconds()
        self._random = random_source or RandomSource()

        self._rules: Dict[FieldType, Callable[[], Any]] = {
            FieldType.NULL: lambda: None,
            FieldType.BOOLEAN: self._random.coin,
            FieldType.INT32: lambda: self._random.below(self.max_int),
            FieldType.INT64: lambda: Int64(self._random.bits(63)),
            FieldType.DOUBLE: self._random.unit,
            FieldType.DECIMAL128: lambda: Decimal128(repr(self._random.unit())),
            FieldType.DATETIME: self._random_date,
            FieldType.STRING: lambda: self._random.choice(self.string_catalog),
        }

    @classmethod
    def from_settings(
        cls, settings: "Settings", random_source: Optional[RandomSource] = None
    ) -> "DocumentGenerator":
        return cls(
            string_catalog=settings.string_catalog_values,
            max_int=settings.max_int,
            min_date=settings.min_date,
            max_date=settings.max_date,
            random_source=random_source,
        )

    def _random_date(self) -> datetime:
        return self.base_date + timedelta(seconds=self._random.unit() * self.max_seconds)

    def random_value(self, template_field: TemplateField) -> Any:
        rule = self._rules.get(template_field.field_type)
        if rule is None:
            raise UnsupportedTypeError(template_field.name, template_field.field_type.value)
        return rule()

    def check_template(self, template: SchemaTemplate, add_id: bool = False) -> None:
        """
        Raise `UnsupportedTypeError` for the first field no rule can fill.

        With `add_id`, a template `_id` is skipped since generation replaces it.
        """
        skipped = {ATTRIBUTES_FIELD, ID_FIELD} if add_id else {ATTRIBUTES_FIELD}
        top_level = [f for f in template.fields if f.name not in skipped]
        for template_field in (*top_level, *template.attributes):
            if template_field.field_type not in self._rules:
                raise UnsupportedTypeError(template_field.name, template_field.field_type.value)

    def generate_document(self, template: SchemaTemplate, add_id: bool = False) -> Document:
        """
        Build one subdocument-shape document.

        Raises
        ------
        UnsupportedTypeError
            If a field (or attribute sub-field) has no generation rule.
        """
        output: Document = {}
        for template_field in template.fields:
            if add_id and template_field.name == ID_FIELD:
                continue
            if template_field.name == ATTRIBUTES_FIELD:
                output[ATTRIBUTES_FIELD] = {
                    attribute.name: self.random_value(attribute) for attribute in template.attributes
                }
            else:
                output[template_field.name] = self.random_value(template_field)

        if add_id:
            output[ID_FIELD] = ObjectId()
        return output

    def generate_batch(self, template: SchemaTemplate, count: int) -> GeneratedBatch:
        """Generate `count` documents with `_id` in both subdocument and array shape."""
        batch = GeneratedBatch()
        for _ in range(count):
            subdocument = self.generate_document(template, add_id=True)
            batch.subdocument_docs.append(subdocument)
            batch.array_docs.append(to_attribute_array(subdocument))
        return batch

    def generate_query_bases(self, template: SchemaTemplate, count: int) -> List[Document]:
        """Generate `count` subdocument-shape documents without `_id` to derive queries from."""
        return [self.generate_document(template, add_id=False) for _ in range(count)]


__all__ = ["DocumentGenerator", "GeneratedBatch", "ID_FIELD"]
