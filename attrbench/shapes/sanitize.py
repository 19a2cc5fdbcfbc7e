"""
Field-name sanitizing for persisting query echoes and explain output.

Stored documents may not carry `$`-prefixed or dotted field names, yet query
documents (`$and`, `attributes.x`) and execution plans (`$clusterTime`,
`parsedQuery`) are full of them. `sanitize_field_names` builds a new tree with
`$` -> `_` and `.` -> `,` in every field name.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping


def sanitize_name(name: str) -> str:
    return name.replace("$", "_").replace(".", ",")


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return sanitize_field_names(value)
    if isinstance(value, (list, tuple)):
        # Only documents that are direct array elements are rewritten.
        return [
            sanitize_field_names(item) if isinstance(item, Mapping) else item for item in value
        ]
    return value


def sanitize_field_names(document: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a rewritten copy of `document`; the input is left untouched.

    Examples
    --------
    >>> sanitize_field_names({"$a.b": {"c.d": 1}})
    {'_a,b': {'c,d': 1}}
    """
    return {sanitize_name(str(name)): _sanitize_value(value) for name, value in document.items()}


__all__ = ["sanitize_field_names", "sanitize_name"]
