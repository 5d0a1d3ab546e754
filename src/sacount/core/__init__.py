"""
Core module for sacount.

Provides the CIGAR coordinate kernel, repeat/homopolymer context and
statistical scoring used by the allele counter.
"""

from .cigar import (
    IndelEvent,
    MalformedCigarError,
    base_at_position,
    find_indel_at_locus,
    locate_read_indel,
)
from .repeats import HomopolymerRun
from .stats import phred_quality, strand_bias

__all__ = [
    "HomopolymerRun",
    "IndelEvent",
    "MalformedCigarError",
    "base_at_position",
    "find_indel_at_locus",
    "locate_read_indel",
    "phred_quality",
    "strand_bias",
]
