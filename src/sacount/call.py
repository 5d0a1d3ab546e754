"""
Call assembly: turning aggregated allele counts into a per-locus record.

``assemble_call`` combines counts, repeat/homopolymer context and quality
scores into a ``SampleCall``; ``SampleCall.to_vcf_line`` renders it as a
single-sample VCF data line.
"""

import logging
from dataclasses import dataclass

from .core.repeats import (
    HomopolymerRun,
    context_bounds,
    find_repeat,
    repeat_length,
    repeat_window_length,
)
from .core.stats import DEFAULT_ALPHA, DEFAULT_BETA, phred_quality, strand_bias
from .models.core import UNKNOWN, Allele, AlleleType, InputVariant
from .models.counts import AlleleCounts, LocusTally

logger = logging.getLogger(__name__)

FORMAT = "GT:DP:DP2:AD:AD2:ROR:LMQ:ISPAN:VAF:MER:FROR"
GENOTYPE = "0/1"


@dataclass(frozen=True)
class SampleCall:
    """Output record for one locus."""

    chromosome: str
    position: int
    ref: Allele
    alt: Allele
    allele_counts: dict[Allele, AlleleCounts]
    ref_field: str
    alt_field: str
    total_reads: int = 0
    usable_depth: int = 0
    qual: float = 0.0
    repeat_period: int = 0
    repeat_unit: str = ""
    mapq_drops: int = 0
    mismatch_exceeded: int = 0
    context: str | None = None
    hrun: HomopolymerRun | None = None
    ispan: int = 0
    strand_bias: float = 0.0
    alt_insert: str | None = None

    @classmethod
    def create(
        cls,
        chromosome: str,
        position: int,
        ref: Allele,
        alt: Allele,
        allele_counts: dict[Allele, AlleleCounts],
        ref_field: str,
        alt_field: str,
        context: str | None = None,
        **kwargs,
    ) -> "SampleCall":
        """Build a call, deriving the homopolymer run, ISPAN and strand bias."""
        ref_counts = allele_counts.get(ref) or AlleleCounts()
        alt_counts = allele_counts.get(alt) or AlleleCounts()
        return cls(
            chromosome=chromosome,
            position=position,
            ref=ref,
            alt=alt,
            allele_counts=allele_counts,
            ref_field=ref_field,
            alt_field=alt_field,
            context=context,
            hrun=HomopolymerRun.find(context) if context is not None else None,
            ispan=alt_counts.read_span if alt in allele_counts else 0,
            strand_bias=strand_bias(ref_counts.fwd, ref_counts.rev, alt_counts.fwd, alt_counts.rev),
            **kwargs,
        )

    @classmethod
    def empty(cls, variant: InputVariant) -> "SampleCall":
        """Record for a locus no read overlaps."""
        ref = Allele.from_base(variant.ref[0])
        alt = variant.allele
        counts = {ref: AlleleCounts()}
        counts.setdefault(alt, AlleleCounts())
        return cls.create(
            variant.chrom,
            variant.pos,
            ref,
            alt,
            counts,
            variant.ref,
            variant.alt,
        )

    @property
    def ref_counts(self) -> AlleleCounts:
        return self.allele_counts.get(self.ref) or AlleleCounts()

    @property
    def alt_counts(self) -> AlleleCounts:
        return self.allele_counts.get(self.alt) or AlleleCounts()

    @property
    def vaf(self) -> float:
        if self.alt not in self.allele_counts or self.usable_depth <= 0:
            return 0.0
        return self.alt_counts.count / self.usable_depth

    @property
    def info(self) -> str:
        if self.total_reads == 0:
            return "."

        hrun_len = self.hrun.length if self.hrun else 0
        hrun_pos = self.hrun.pos if self.hrun else 0
        info = (
            f"RP={self.repeat_period};RU={self.repeat_unit};"
            f"HRUN={hrun_len},{hrun_pos};CTX={self.context or 'N'}"
        )
        if (
            self.alt_insert is not None
            and len(self.alt_field) > 1
            and self.alt_insert != self.alt_field
            and self.alt_counts.count > 0
        ):
            # Observed inserted bases differ from the declared ALT
            info += f";ALT_INSERT={self.alt_insert[1:]}"
        return info

    def sample_info(self) -> str:
        ref_counts = self.ref_counts
        alt_counts = self.alt_counts
        return (
            f"{GENOTYPE}:{self.usable_depth}:{self.total_reads}:"
            f"{ref_counts.count},{alt_counts.count}:"
            f"{ref_counts.total_count},{alt_counts.total_count}:"
            f"{ref_counts.fwd},{ref_counts.rev},{alt_counts.fwd},{alt_counts.rev}:"
            f"{self.mapq_drops}:{self.ispan}:{self.vaf:.2f}:"
            f"{self.mismatch_exceeded}:{self.strand_bias:.2f}"
        )

    def to_vcf_line(self) -> str:
        row = [
            self.chromosome,
            str(self.position),
            ".",
            self.ref_field,
            self.alt_field,
            f"{self.qual:.2f}",
            ".",
            self.info,
            FORMAT,
            self.sample_info(),
        ]
        return "\t".join(row)


def preferred_insert_bases(allele: Allele, counts: AlleleCounts) -> str:
    """Most represented inserted sequence, or N's when no read spans the insertion."""
    return counts.preferred_insert_bases or "N" * allele.length


def reference_context(reference, chromosome: str, position: int) -> str:
    """Reference bases around the locus, ``N`` near chromosome ends."""
    bounds = context_bounds(position, reference.chromosome_length(chromosome))
    if bounds is None:
        return "N"
    start, length = bounds
    return reference.get_sequence(chromosome, start, length) or "N"


def assemble_call(
    variant: InputVariant,
    ref_allele: Allele,
    allele_counts: dict[Allele, AlleleCounts],
    tally: LocusTally,
    reference,
    prior_alpha: float = DEFAULT_ALPHA,
    prior_beta: float = DEFAULT_BETA,
) -> SampleCall:
    """
    Assemble the SampleCall for an evaluated locus.

    Falls back to a degenerate record (zero quality, empty repeat fields)
    when the reference base or the candidate allele is unknown.
    """
    chromosome, position = variant.chrom, variant.pos
    alt = variant.allele
    context = reference_context(reference, chromosome, position)

    if ref_allele.is_unknown or alt.is_unknown:
        logger.debug("Degenerate call at %s:%d (ref=%s, alt=%s)", chromosome, position, ref_allele, alt)
        ref_field = reference.get_sequence(chromosome, position, 1) or "N"
        return SampleCall.create(
            chromosome,
            position,
            ref_allele,
            UNKNOWN,
            allele_counts,
            ref_field,
            ".",
            context=context,
            total_reads=tally.total_depth,
            mapq_drops=tally.low_mapq,
            mismatch_exceeded=tally.mismatch_exceeded,
        )

    chromosome_length = reference.chromosome_length(chromosome)
    window_length = repeat_window_length(alt, position, chromosome_length)
    window = reference.get_sequence(chromosome, position + 1, window_length) if window_length else ""
    period, unit = find_repeat(alt, window, variant.alt)

    span = repeat_length(period, unit, alt.type)
    AlleleCounts.set_span_end(position + span, allele_counts.values())
    usable_depth = AlleleCounts.sum(allele_counts.values())

    alt_counts = allele_counts[alt]
    qual = phred_quality(alt_counts.count, usable_depth, prior_alpha, prior_beta)

    alt_insert = None
    if alt.type == AlleleType.INSERTION:
        alt_insert = variant.ref + preferred_insert_bases(alt, alt_counts)

    return SampleCall.create(
        chromosome,
        position,
        ref_allele,
        alt,
        allele_counts,
        variant.ref,
        variant.alt,
        context=context,
        total_reads=tally.total_depth,
        usable_depth=usable_depth,
        qual=qual,
        repeat_period=period,
        repeat_unit=unit,
        mapq_drops=tally.low_mapq,
        mismatch_exceeded=tally.mismatch_exceeded,
        alt_insert=alt_insert,
    )
