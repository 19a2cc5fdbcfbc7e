"""
Generation package: thread-safe random source and the template-driven
document generator.
"""

from attrbench.generation.generator import DocumentGenerator, GeneratedBatch
from attrbench.generation.random_source import RandomSource

__all__ = [
    "DocumentGenerator",
    "GeneratedBatch",
    "RandomSource",
]
