"""
Allele counting at a single locus - Pure Python Implementation.

This module classifies every read overlapping a candidate variant's locus
into an allele and aggregates strand- and position-aware counts per allele.

**Key Classes:**
- ReadEvidence: Tagged classification of one read (base, indel or none)
- AlleleCounter: Read classifier and aggregator producing a SampleCall

**Usage:**
    from sacount.counter import AlleleCounter

    counter = AlleleCounter(reference)
    call = counter.count_variant(variant, reads)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

import pysam

from .call import SampleCall, assemble_call
from .core.cigar import (
    IndelEvent,
    find_indel_at_locus,
    indel_bases,
    locate_read_indel,
    mapped_length,
    read_base_at,
)
from .core.stats import DEFAULT_ALPHA, DEFAULT_BETA
from .models.core import UNKNOWN, Allele, AlleleType, CounterConfig, InputVariant
from .models.counts import AlleleCounts, LocusTally

logger = logging.getLogger(__name__)


class EvidenceKind(str, Enum):
    """What kind of signal a read gave at the locus."""
    BASE = "base"
    INDEL = "indel"
    NONE = "none"


@dataclass(frozen=True)
class ReadEvidence:
    """Classification of one read at one locus."""

    kind: EvidenceKind
    allele: Allele = UNKNOWN
    event: IndelEvent | None = None


NO_EVIDENCE = ReadEvidence(EvidenceKind.NONE)


class AlleleCounter:
    """
    Classifies reads at a locus and aggregates per-allele counts.

    **Attributes:**
        reference: Reference provider (``get_sequence``, ``chromosome_length``)
        min_mapping_quality: Reads below this are dropped after counting depth
        min_base_quality: Minimum phred quality for base evidence
        max_mismatch_rate: Mismatch cap, as a fraction of mapped length
    """

    def __init__(
        self,
        reference,
        min_mapping_quality: int = 20,
        min_base_quality: int = 20,
        max_mismatch_rate: float = 0.05,
        require_contig_support: bool = True,
        contig_tag: str = "YA",
        prior_alpha: float = DEFAULT_ALPHA,
        prior_beta: float = DEFAULT_BETA,
    ):
        self.reference = reference
        self.min_mapping_quality = min_mapping_quality
        self.min_base_quality = min_base_quality
        self.max_mismatch_rate = max_mismatch_rate
        self.require_contig_support = require_contig_support
        self.contig_tag = contig_tag
        self.prior_alpha = prior_alpha
        self.prior_beta = prior_beta

    @classmethod
    def from_config(cls, config: CounterConfig, reference) -> "AlleleCounter":
        return cls(
            reference,
            min_mapping_quality=config.min_mapping_quality,
            min_base_quality=config.min_base_quality,
            max_mismatch_rate=config.max_mismatch_rate,
            require_contig_support=config.require_contig_support,
            contig_tag=config.contig_tag,
            prior_alpha=config.prior_alpha,
            prior_beta=config.prior_beta,
        )

    @staticmethod
    def _should_skip(read: pysam.AlignedSegment) -> bool:
        """Duplicates, unmapped and non-primary reads never count."""
        return read.is_duplicate or read.is_unmapped or read.is_secondary or read.is_supplementary

    def _count_mismatches(self, read: pysam.AlignedSegment) -> int:
        """Edit distance minus indel bases; NM tag if present, else against the reference."""
        cigar = read.cigartuples or []
        if read.has_tag("NM"):
            return int(read.get_tag("NM")) - indel_bases(cigar)

        sequence = read.query_sequence
        if sequence is None or read.reference_end is None:
            return 0
        ref_seq = self.reference.get_sequence(
            read.reference_name, read.reference_start + 1, read.reference_end - read.reference_start
        )
        mismatches = 0
        for read_pos, ref_pos in read.get_aligned_pairs(matches_only=True):
            offset = ref_pos - read.reference_start
            if offset < len(ref_seq) and sequence[read_pos].upper() != ref_seq[offset]:
                mismatches += 1
        return mismatches

    def _exceeds_mismatch_cap(self, read: pysam.AlignedSegment) -> bool:
        cigar = read.cigartuples or []
        return self._count_mismatches(read) > mapped_length(cigar) * self.max_mismatch_rate

    def _passes_base_quality(self, base: tuple[str, int] | None) -> bool:
        return base is not None and base[1] >= self.min_base_quality

    def classify(
        self, read: pysam.AlignedSegment, variant: InputVariant, locus: int
    ) -> ReadEvidence:
        """
        Decide which allele a read supports at ``locus``.

        Indel evidence comes from ``locate_read_indel``; otherwise the base
        at the locus is used, with extra requirements depending on the
        candidate's type.
        """
        event = locate_read_indel(
            read, locus, contig_tag=self.contig_tag, require_contig_support=self.require_contig_support
        )
        if event is not None:
            return ReadEvidence(EvidenceKind.INDEL, event.allele, event)

        candidate = variant.allele
        base = read_base_at(read, locus)

        if candidate.is_indel:
            # Only reads with contiguous, indel-free coverage of locus and locus+1 count
            next_base = read_base_at(read, locus + 1)
            own_indel = find_indel_at_locus(read.reference_start + 1, read.cigartuples or [], locus)
            if own_indel is None and next_base is not None and self._passes_base_quality(base):
                return self._base_evidence(base[0])
            return NO_EVIDENCE

        if candidate.type == AlleleType.MNP:
            if base is None:
                return NO_EVIDENCE
            alt = variant.alt.upper()
            if base[0].upper() != alt[0] or not self._passes_base_quality(base):
                return self._base_evidence(base[0])

            bases = [base[0].upper()]
            for i in range(1, len(alt)):
                next_base = read_base_at(read, locus + i)
                if not self._passes_base_quality(next_base):
                    break
                bases.append(next_base[0].upper())

            if "".join(bases) == alt:
                return ReadEvidence(EvidenceKind.BASE, candidate)
            return self._base_evidence(base[0])

        if self._passes_base_quality(base):
            return self._base_evidence(base[0])
        return NO_EVIDENCE

    @staticmethod
    def _base_evidence(base: str) -> ReadEvidence:
        allele = Allele.from_base(base)
        if allele.is_unknown:
            return NO_EVIDENCE
        return ReadEvidence(EvidenceKind.BASE, allele)

    def _reference_allele(self, chrom: str, position: int) -> Allele:
        ref_base = self.reference.get_sequence(chrom, position, 1)
        if not ref_base:
            logger.warning("Reference base unresolvable at %s:%d", chrom, position)
            return UNKNOWN
        return Allele.from_base(ref_base[0])

    def process_locus(
        self, variant: InputVariant, reads: Iterable[pysam.AlignedSegment]
    ) -> SampleCall:
        """
        Classify and aggregate all reads at the variant's locus.

        Args:
            variant: Candidate variant; its position is the locus.
            reads: Alignments overlapping the locus.

        Returns:
            The assembled SampleCall.
        """
        chrom, position = variant.chrom, variant.pos
        tally = LocusTally()

        ref_allele = self._reference_allele(chrom, position)
        allele_counts: dict[Allele, AlleleCounts] = {ref_allele: AlleleCounts()}
        allele_counts.setdefault(variant.allele, AlleleCounts())

        mismatch_capped = variant.allele.is_indel

        for read in reads:
            if self._should_skip(read):
                continue

            tally.total_depth += 1

            if read.mapping_quality < self.min_mapping_quality:
                tally.low_mapq += 1
                continue

            if mismatch_capped and read.has_tag(self.contig_tag) and self._exceeds_mismatch_cap(read):
                tally.mismatch_exceeded += 1
                continue

            evidence = self.classify(read, variant, position)
            if evidence.kind == EvidenceKind.NONE:
                continue

            ac = allele_counts.setdefault(evidence.allele, AlleleCounts())
            ac.increment(read)

            if evidence.event is not None:
                ac.update_read_idx(evidence.event.read_index)
                if evidence.event.is_insertion:
                    ac.update_insert_bases(evidence.event.insert_bases)

        logger.debug(
            "%s:%d depth=%d lmq=%d mer=%d alleles=%s",
            chrom,
            position,
            tally.total_depth,
            tally.low_mapq,
            tally.mismatch_exceeded,
            {str(a): c.total_count for a, c in allele_counts.items()},
        )

        call = assemble_call(
            variant,
            ref_allele,
            allele_counts,
            tally,
            self.reference,
            prior_alpha=self.prior_alpha,
            prior_beta=self.prior_beta,
        )

        # Span end is final once the call is assembled
        for counts in allele_counts.values():
            counts.clear_read_ids()
        return call

    def count_variant(
        self, variant: InputVariant, reads: Iterable[pysam.AlignedSegment]
    ) -> SampleCall:
        """Like ``process_locus`` but emits an empty call when no reads overlap."""
        reads = list(reads)
        if not reads:
            return SampleCall.empty(variant)
        return self.process_locus(variant, reads)
