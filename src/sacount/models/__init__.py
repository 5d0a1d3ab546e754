"""
Data models for sacount.

Provides Pydantic models for alleles, candidate variants and run configuration.
"""

from .core import (
    UNKNOWN,
    Allele,
    AlleleType,
    CounterConfig,
    InputVariant,
    UnsupportedVariantError,
)
from .counts import AlleleCounts, LocusTally

__all__ = [
    "UNKNOWN",
    "Allele",
    "AlleleCounts",
    "AlleleType",
    "CounterConfig",
    "InputVariant",
    "LocusTally",
    "UnsupportedVariantError",
]
