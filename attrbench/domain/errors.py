"""
Error taxonomy for the attribute pattern benchmark.

Two families share the `AttrBenchError` root:

- `PreflightError` subclasses are raised by local, pure code (template parsing,
  value generation, shape conversion) before any store is touched.
- `StoreOperationError` wraps failures reported by the document store client.

None of these are retried; they abort the enclosing load or benchmark run.
"""

from __future__ import annotations

from typing import List, Optional


class AttrBenchError(Exception):
    """Root of every error raised by the benchmark toolbox."""


class PreflightError(AttrBenchError):
    """Local error detected before issuing store operations."""


class SchemaError(PreflightError):
    """The schema template is missing `attributes` or it is not a mapping."""


class UnsupportedTypeError(PreflightError):
    """A template field carries a type tag with no generation rule."""

    def __init__(self, field_name: str, type_tag: str) -> None:
        self.field_name = field_name
        self.type_tag = type_tag
        super().__init__(f"Unsupported type '{type_tag}' for template field '{field_name}'.")


class ShapeMismatchError(PreflightError):
    """A document handed to a shape conversion has a non-mapping `attributes` field."""


class StoreOperationError(AttrBenchError):
    """
    A store client call failed.

    Attributes
    ----------
    operation : str
        Client operation name (e.g. "insert_many", "run_explain").
    namespace : str | None
        `database.collection` the call targeted, when known.
    context : list[str]
        Work-unit identifiers (batch unit id, query run id) appended as the
        error travels up through the fan-out.
    """

    def __init__(self, message: str, operation: str, namespace: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.namespace = namespace
        self.context: List[str] = []

    def add_context(self, identifier: str) -> "StoreOperationError":
        if identifier not in self.context:
            self.context.append(identifier)
        return self

    def __str__(self) -> str:
        parts = [f"{self.operation} failed"]
        if self.namespace:
            parts.append(f"on {self.namespace}")
        if self.context:
            parts.append(f"[{', '.join(self.context)}]")
        return f"{' '.join(parts)}: {self.message}"


__all__ = [
    "AttrBenchError",
    "PreflightError",
    "SchemaError",
    "ShapeMismatchError",
    "StoreOperationError",
    "UnsupportedTypeError",
]
