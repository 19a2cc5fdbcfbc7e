"""
Domain models for the attribute pattern benchmark.

Defines the schema template parsed from configuration, the result record
persisted once per executed query, and the logical store targets the loader
and benchmark runner fan out to.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId, json_util
from bson.decimal128 import Decimal128
from bson.errors import BSONError
from bson.int64 import Int64
from pydantic import BaseModel, Field

from attrbench.domain.errors import SchemaError

ATTRIBUTES_FIELD = "attributes"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class FieldType(str, Enum):
    """Type tags inferred from template example values (BSON type aliases)."""

    NULL = "null"
    BOOLEAN = "bool"
    INT32 = "int"
    INT64 = "long"
    DOUBLE = "double"
    DECIMAL128 = "decimal"
    DATETIME = "date"
    STRING = "string"
    DOCUMENT = "object"
    ARRAY = "array"
    OBJECT_ID = "objectId"
    OTHER = "other"


def infer_field_type(value: Any) -> FieldType:
    """
    Map an example value to its type tag.

    Order matters: `bool` and `Int64` are both `int` subclasses.
    """
    if value is None:
        return FieldType.NULL
    if isinstance(value, bool):
        return FieldType.BOOLEAN
    if isinstance(value, Int64):
        return FieldType.INT64
    if isinstance(value, int):
        if _INT32_MIN <= value <= _INT32_MAX:
            return FieldType.INT32
        return FieldType.INT64
    if isinstance(value, float):
        return FieldType.DOUBLE
    if isinstance(value, (Decimal128, Decimal)):
        return FieldType.DECIMAL128
    if isinstance(value, datetime):
        return FieldType.DATETIME
    if isinstance(value, str):
        return FieldType.STRING
    if isinstance(value, Mapping):
        return FieldType.DOCUMENT
    if isinstance(value, (list, tuple)):
        return FieldType.ARRAY
    if isinstance(value, ObjectId):
        return FieldType.OBJECT_ID
    return FieldType.OTHER


class TemplateField(BaseModel):
    name: str
    field_type: FieldType

    model_config = {"frozen": True}


class SchemaTemplate(BaseModel):
    """
    Parsed field-name -> type-tag template.

    `fields` keeps every top-level field in template order, including the
    `attributes` entry (tagged as a document); `attributes` holds the tags of
    the attribute sub-fields in their own order.
    """

    fields: Tuple[TemplateField, ...] = Field(..., description="Top-level fields in order.")
    attributes: Tuple[TemplateField, ...] = Field(..., description="Attribute sub-fields in order.")

    model_config = {"frozen": True}

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "SchemaTemplate":
        if not isinstance(document, Mapping):
            raise SchemaError("The schema template must be a document.")
        if ATTRIBUTES_FIELD not in document:
            raise SchemaError(f"The schema template has no '{ATTRIBUTES_FIELD}' field.")
        raw_attributes = document[ATTRIBUTES_FIELD]
        if not isinstance(raw_attributes, Mapping):
            raise SchemaError(f"The '{ATTRIBUTES_FIELD}' field is not a subdocument.")

        fields = tuple(
            TemplateField(name=name, field_type=infer_field_type(value))
            for name, value in document.items()
        )
        attributes = tuple(
            TemplateField(name=name, field_type=infer_field_type(value))
            for name, value in raw_attributes.items()
        )
        return cls(fields=fields, attributes=attributes)

    @classmethod
    def from_json(cls, text: str) -> "SchemaTemplate":
        """Parse a template written in MongoDB Extended JSON."""
        try:
            document = json_util.loads(text)
        except (ValueError, TypeError, BSONError) as exc:
            raise SchemaError(f"The schema template is not valid Extended JSON: {exc}") from exc
        return cls.from_document(document)

    @property
    def field_names(self) -> List[str]:
        return [field.name for field in self.fields]

    @property
    def attribute_names(self) -> List[str]:
        return [field.name for field in self.attributes]


class BenchmarkResultRecord(BaseModel):
    """
    Outcome of a single query execution against one logical store.

    Query and execution stats are expected to be sanitized already (no `$` or
    `.` in field names) so the record can be stored as-is.
    """

    run_id: str = Field(..., alias="_id", description="Composite `<timestamp>_<counter>` id.")
    query: Dict[str, Any] = Field(..., description="Sanitized query document.")
    n_matched: int = Field(..., alias="nMatched", ge=0)
    matched_ids: List[Any] = Field(default_factory=list)
    execution_stats: Dict[str, Any] = Field(..., alias="executionStats")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_matches(
        cls,
        run_id: str,
        query: Mapping[str, Any],
        matched_ids: List[Any],
        execution_stats: Mapping[str, Any],
    ) -> "BenchmarkResultRecord":
        return cls(
            run_id=run_id,
            query=dict(query),
            n_matched=len(matched_ids),
            matched_ids=list(matched_ids),
            execution_stats=dict(execution_stats),
        )

    def to_document(self) -> Dict[str, Any]:
        """Render the record in its persisted field order."""
        return {
            "_id": self.run_id,
            "query": self.query,
            "nMatched": self.n_matched,
            "matched_ids": list(self.matched_ids),
            "executionStats": self.execution_stats,
        }


CLASSIC_ATTR = "classic_attr"
ENHANCED_ATTR = "enhanced_attr"
CLASSIC_SUBDOC = "classic_subdoc"
WILDCARD_SUBDOC = "wildcard_subdoc"

STORE_LABELS: Dict[str, str] = {
    CLASSIC_ATTR: "Classic Attribute",
    ENHANCED_ATTR: "Enhanced Attribute",
    CLASSIC_SUBDOC: "Classic Subdocument",
    WILDCARD_SUBDOC: "Wildcard Index",
}


@dataclass(frozen=True)
class StoreTarget:
    """
    One logical store: where base documents live, where results go, and the
    indexes provisioned on the base collection.

    `collection` and `results` are opaque handles understood by the store
    client (pymongo collections in production).
    """

    name: str
    collection: Any
    collection_name: str
    results: Any
    indexes: Tuple[Mapping[str, Any], ...] = ()
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.label or STORE_LABELS.get(self.name, self.name)


@dataclass(frozen=True)
class StoreSet:
    classic_attr: StoreTarget
    enhanced_attr: StoreTarget
    classic_subdoc: StoreTarget
    wildcard_subdoc: StoreTarget

    def all(self) -> Tuple[StoreTarget, ...]:
        return (self.classic_attr, self.enhanced_attr, self.classic_subdoc, self.wildcard_subdoc)


__all__ = [
    "ATTRIBUTES_FIELD",
    "BenchmarkResultRecord",
    "CLASSIC_ATTR",
    "CLASSIC_SUBDOC",
    "ENHANCED_ATTR",
    "FieldType",
    "STORE_LABELS",
    "SchemaTemplate",
    "StoreSet",
    "StoreTarget",
    "TemplateField",
    "WILDCARD_SUBDOC",
    "infer_field_type",
]
