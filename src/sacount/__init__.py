"""
sacount (Simple Allele Counter) - per-allele read support at candidate variants.

This package provides a command-line interface and Python API for validating
or genotyping a list of candidate variants against one sample's alignments,
emitting a VCF record with strand, repeat and quality annotations per variant.

Example usage:
    $ sacount run -b sample.bam -f reference.fa -v candidates.vcf -o calls.vcf
"""

__version__ = "1.0.0"

from .call import SampleCall
from .counter import AlleleCounter
from .models.core import Allele, AlleleType, CounterConfig, InputVariant
from .models.counts import AlleleCounts
from .pipeline import Pipeline

__all__ = [
    "__version__",
    "Allele",
    "AlleleCounter",
    "AlleleCounts",
    "AlleleType",
    "CounterConfig",
    "InputVariant",
    "Pipeline",
    "SampleCall",
]
