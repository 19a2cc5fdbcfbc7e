"""
Conversions between the canonical subdocument shape and the array/query shapes.

Every conversion copies fields other than `attributes` verbatim and in order,
and replaces `attributes` (at its original position) with the target shape:

    subdocument     {"a": 1, "attributes": {"x": "red", "y": 3}}
    attribute array {"a": 1, "attributes": [{"k": "x", "v": "red"}, {"k": "y", "v": 3}]}
    dot notation    {"a": 1, "attributes.x": "red", "attributes.y": 3}
    $elemMatch      {"a": 1, "$and": [{"attributes": {"$elemMatch": {"k": "x", "v": "red"}}}, ...]}
    full match      {"a": 1, "$and": [{"attributes": {"k": "x", "v": "red"}}, ...]}

Inputs are never mutated; a document without `attributes` is copied as-is.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from attrbench.domain.errors import ShapeMismatchError
from attrbench.domain.models import ATTRIBUTES_FIELD

KEY_FIELD = "k"
VALUE_FIELD = "v"
AND_OPERATOR = "$and"
ELEM_MATCH_OPERATOR = "$elemMatch"

Document = Dict[str, Any]


def _pair(name: str, value: Any) -> Document:
    return {KEY_FIELD: name, VALUE_FIELD: value}


def _convert(
    document: Mapping[str, Any],
    emit_attributes: Callable[[Document, Mapping[str, Any]], None],
) -> Document:
    output: Document = {}
    for name, value in document.items():
        if name != ATTRIBUTES_FIELD:
            output[name] = value
            continue
        if not isinstance(value, Mapping):
            raise ShapeMismatchError(
                f"The '{ATTRIBUTES_FIELD}' field is not a subdocument "
                f"(got {type(value).__name__})."
            )
        emit_attributes(output, value)
    return output


def to_attribute_array(document: Mapping[str, Any]) -> Document:
    """Subdocument shape -> array of {k, v} pairs in map order."""

    def emit(output: Document, attributes: Mapping[str, Any]) -> None:
        output[ATTRIBUTES_FIELD] = [_pair(name, value) for name, value in attributes.items()]

    return _convert(document, emit)


def to_dot_notation_query(document: Mapping[str, Any]) -> Document:
    """Subdocument shape -> one `attributes.<name>` equality per attribute."""

    def emit(output: Document, attributes: Mapping[str, Any]) -> None:
        for name, value in attributes.items():
            output[f"{ATTRIBUTES_FIELD}.{name}"] = value

    return _convert(document, emit)


def to_attribute_query(document: Mapping[str, Any]) -> Document:
    """Subdocument shape -> `$and` of `$elemMatch` clauses over the attribute array."""

    def emit(output: Document, attributes: Mapping[str, Any]) -> None:
        output[AND_OPERATOR] = [
            {ATTRIBUTES_FIELD: {ELEM_MATCH_OPERATOR: _pair(name, value)}}
            for name, value in attributes.items()
        ]

    return _convert(document, emit)


def to_enhanced_attribute_query(document: Mapping[str, Any]) -> Document:
    """
    Subdocument shape -> `$and` of exact {k, v} subdocument matches.

    Relies on array elements being exactly two-field `{k, v}` documents in
    that field order.
    """

    def emit(output: Document, attributes: Mapping[str, Any]) -> None:
        output[AND_OPERATOR] = [
            {ATTRIBUTES_FIELD: _pair(name, value)} for name, value in attributes.items()
        ]

    return _convert(document, emit)


__all__ = [
    "AND_OPERATOR",
    "ELEM_MATCH_OPERATOR",
    "KEY_FIELD",
    "VALUE_FIELD",
    "to_attribute_array",
    "to_attribute_query",
    "to_dot_notation_query",
    "to_enhanced_attribute_query",
]
