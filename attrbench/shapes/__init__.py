"""
Shape package: conversions between document/query representations, the
field-name sanitizer used before persisting, and the attribute subset selector.
"""

from attrbench.shapes.sanitize import sanitize_field_names, sanitize_name
from attrbench.shapes.selection import AttributeSubsetSelector
from attrbench.shapes.transform import (
    to_attribute_array,
    to_attribute_query,
    to_dot_notation_query,
    to_enhanced_attribute_query,
)

__all__ = [
    "AttributeSubsetSelector",
    "sanitize_field_names",
    "sanitize_name",
    "to_attribute_array",
    "to_attribute_query",
    "to_dot_notation_query",
    "to_enhanced_attribute_query",
]
