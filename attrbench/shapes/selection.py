from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from attrbench.domain.models import ATTRIBUTES_FIELD
from attrbench.generation.random_source import RandomSource


class AttributeSubsetSelector:
    """
    Trim a query base document to a fixed number of attributes.

    Entries are removed one at a time, each chosen uniformly among the ones
    still present; survivors keep their original order. Documents without an
    `attributes` mapping, or with no more than `target` attributes, come back
    as an equal copy.
    """

    def __init__(self, target: int, random_source: Optional[RandomSource] = None) -> None:
        if target < 0:
            raise ValueError(f"Attribute target must be >= 0, got {target}.")
        self.target = target
        self._random = random_source or RandomSource()

    def select(self, document: Mapping[str, Any]) -> Dict[str, Any]:
        output = dict(document)
        attributes = output.get(ATTRIBUTES_FIELD)
        if not isinstance(attributes, Mapping):
            return output

        names = list(attributes.keys())
        for _ in range(len(names) - self.target):
            del names[self._random.below(len(names))]

        output[ATTRIBUTES_FIELD] = {name: attributes[name] for name in names}
        return output

    __call__ = select


__all__ = ["AttributeSubsetSelector"]
