"""
Domain package for the attribute pattern benchmark.

Exports the schema template, result record and store target models together
with the error taxonomy. Keep this package focused on data definitions.
"""

from attrbench.domain.errors import (
    AttrBenchError,
    PreflightError,
    SchemaError,
    ShapeMismatchError,
    StoreOperationError,
    UnsupportedTypeError,
)
from attrbench.domain.models import (
    ATTRIBUTES_FIELD,
    BenchmarkResultRecord,
    FieldType,
    SchemaTemplate,
    StoreSet,
    StoreTarget,
    TemplateField,
    infer_field_type,
)

__all__ = [
    "ATTRIBUTES_FIELD",
    "AttrBenchError",
    "BenchmarkResultRecord",
    "FieldType",
    "PreflightError",
    "SchemaError",
    "SchemaTemplate",
    "ShapeMismatchError",
    "StoreOperationError",
    "StoreSet",
    "StoreTarget",
    "TemplateField",
    "UnsupportedTypeError",
    "infer_field_type",
]
