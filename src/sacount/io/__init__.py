"""
I/O module for sacount.

Provides the candidate list reader, alignment and reference access, and the
VCF writer.
"""

from .input import AlignmentSource, ReferenceSequence, VariantListReader
from .output import VcfWriter

__all__ = [
    "AlignmentSource",
    "ReferenceSequence",
    "VariantListReader",
    "VcfWriter",
]
