"""
Input Adapters: candidate variants, alignments and reference sequence.

This module provides the collaborators the counting engine reads from:
- ``VariantListReader`` parses the tabular candidate list into InputVariants.
- ``AlignmentSource`` fetches the reads overlapping a locus from a BAM/CRAM.
- ``ReferenceSequence`` serves reference bases by 1-based coordinate.
"""

import logging
from collections.abc import Iterator
from itertools import islice
from pathlib import Path

import pysam

from ..models.core import InputVariant, UnsupportedVariantError

logger = logging.getLogger(__name__)


class VariantListReader:
    """Reads candidate variants from a VCF-like tab-delimited file."""

    def __init__(self, path: Path):
        self.path = path

    def __iter__(self) -> Iterator[InputVariant]:
        with open(self.path) as f:
            for line_no, line in enumerate(f, start=1):
                if line.startswith("#") or not line.strip():
                    continue
                try:
                    yield InputVariant.from_line(line)
                except UnsupportedVariantError as e:
                    raise UnsupportedVariantError(f"{self.path}:{line_no}: {e}") from e


class ReferenceSequence:
    """
    Read-only access to a faidx-indexed reference FASTA.

    Coordinates are 1-based. Unresolvable regions yield an empty string.
    """

    def __init__(self, fasta_path: Path):
        self.path = fasta_path
        self.fasta = pysam.FastaFile(str(fasta_path))

    def get_sequence(self, chrom: str, start: int, length: int) -> str:
        if length <= 0 or start < 1:
            return ""
        try:
            return self.fasta.fetch(chrom, start - 1, start - 1 + length).upper()
        except (KeyError, ValueError, IndexError):
            return ""

    def chromosome_length(self, chrom: str) -> int:
        try:
            return self.fasta.get_reference_length(chrom)
        except KeyError:
            return 0

    def close(self):
        self.fasta.close()

    def __enter__(self) -> "ReferenceSequence":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class AlignmentSource:
    """Fetches reads overlapping a single locus from an indexed alignment file."""

    def __init__(self, bam_path: Path):
        self.path = bam_path
        self.bam = pysam.AlignmentFile(str(bam_path), "rb")

    @property
    def contigs(self) -> list[tuple[str, int]]:
        return list(zip(self.bam.references, self.bam.lengths))

    def reads_at(self, chrom: str, pos: int, max_reads: int) -> list[pysam.AlignedSegment]:
        """
        Reads overlapping 1-based ``pos``, capped at ``max_reads``.

        Contigs missing from the alignment header yield no reads.
        """
        if chrom not in self.bam.references:
            logger.warning("Contig %s not found in %s", chrom, self.path)
            return []
        reads = list(islice(self.bam.fetch(chrom, pos - 1, pos), max_reads))
        if len(reads) == max_reads:
            logger.warning("Read cap of %d reached at %s:%d", max_reads, chrom, pos)
        return reads

    def close(self):
        self.bam.close()

    def __enter__(self) -> "AlignmentSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
