"""
Core data models for sacount.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

VALID_BASES = frozenset("ACGT")


class UnsupportedVariantError(ValueError):
    """Raised for candidate variants outside the supported simple representation."""


class AlleleType(str, Enum):
    """
    Kind of allele observed at a locus.

    A single base is a BASE allele whether it matches the reference or not;
    "reference" and "substitution" are relative to the locus, not the key.
    """
    BASE = "BASE"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    MNP = "MNP"
    UNKNOWN = "UNKNOWN"


class Allele(BaseModel):
    """
    Immutable allele key.

    Two alleles are equal when type and base/length/sequence match, so
    freshly constructed alleles can be used to look up counts.
    """
    model_config = ConfigDict(frozen=True)

    type: AlleleType
    base: str | None = None
    length: int = 0
    sequence: str | None = None

    @classmethod
    def from_base(cls, base: str) -> "Allele":
        """Allele for a single observed base; anything but A/C/G/T is UNKNOWN."""
        base = base.upper()
        if base not in VALID_BASES:
            return UNKNOWN
        return cls(type=AlleleType.BASE, base=base, length=1)

    @classmethod
    def insertion(cls, length: int) -> "Allele":
        return cls(type=AlleleType.INSERTION, length=length)

    @classmethod
    def deletion(cls, length: int) -> "Allele":
        return cls(type=AlleleType.DELETION, length=length)

    @classmethod
    def mnp(cls, sequence: str) -> "Allele":
        sequence = sequence.upper()
        return cls(type=AlleleType.MNP, sequence=sequence, length=len(sequence))

    @property
    def is_indel(self) -> bool:
        return self.type in (AlleleType.INSERTION, AlleleType.DELETION)

    @property
    def is_unknown(self) -> bool:
        return self.type == AlleleType.UNKNOWN

    def __str__(self) -> str:
        if self.type == AlleleType.BASE:
            return self.base or "N"
        if self.type == AlleleType.MNP:
            return self.sequence or ""
        if self.is_indel:
            return f"{self.type.value}({self.length})"
        return "UNK"


UNKNOWN = Allele(type=AlleleType.UNKNOWN)


class InputVariant(BaseModel):
    """
    One candidate variant from the input list.

    ``pos`` is 1-based. ``allele`` is the alternate allele the counter treats
    as the candidate.
    """
    model_config = ConfigDict(frozen=True)

    chrom: str
    pos: int = Field(ge=1, description="1-based position of the variant")
    ref: str
    alt: str
    allele: Allele

    @classmethod
    def create(cls, chrom: str, pos: int, ref: str, alt: str) -> "InputVariant":
        """
        Build a variant, deriving the candidate allele from the REF/ALT lengths.

        Raises:
            UnsupportedVariantError: REF and ALT differ in length and neither
                has length 1.
        """
        if len(ref) != 1 and len(alt) != 1 and len(ref) != len(alt):
            raise UnsupportedVariantError(
                f"At least one of the REF and ALT fields must be of length 1 for indels: "
                f"{chrom}:{pos} {ref}>{alt}"
            )

        if len(ref) > len(alt):
            allele = Allele.deletion(len(ref) - len(alt))
        elif len(alt) > len(ref):
            allele = Allele.insertion(len(alt) - len(ref))
        elif len(alt) > 1:
            allele = Allele.mnp(alt)
        else:
            allele = Allele.from_base(alt)

        return cls(chrom=chrom, pos=pos, ref=ref, alt=alt, allele=allele)

    @classmethod
    def from_line(cls, line: str) -> "InputVariant":
        """Parse a whitespace-delimited CHROM POS ID REF ALT ... line; ID is ignored."""
        fields = line.split()
        if len(fields) < 5:
            raise UnsupportedVariantError(f"Expected at least 5 columns, got {len(fields)}: {line!r}")
        try:
            pos = int(fields[1])
        except ValueError as e:
            raise UnsupportedVariantError(f"Invalid position {fields[1]!r}") from e
        return cls.create(fields[0], pos, fields[3], fields[4])


class CounterConfig(BaseModel):
    """
    Global configuration for an allele counting run.
    """
    # Input
    bam_file: Path
    reference_fasta: Path
    variant_file: Path

    # Output
    output_file: Path | None = None
    sample_name: str = "SAMPLE"

    # Filters
    min_mapping_quality: int = Field(default=20, ge=0)
    min_base_quality: int = Field(default=20, ge=0)
    max_mismatch_rate: float = Field(default=0.05, ge=0.0, le=1.0)

    # Reads evaluated per locus
    max_reads_per_locus: int = Field(default=500000, ge=1)

    # Indel evidence
    require_contig_support: bool = True
    contig_tag: str = Field(default="YA", min_length=2, max_length=2)

    # Beta-binomial error prior for the call quality
    prior_alpha: float = Field(default=1.0, gt=0)
    prior_beta: float = Field(default=100.0, gt=0)

    # Performance
    threads: int = Field(default=1, ge=1)

    @field_validator("bam_file", "reference_fasta", "variant_file")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"File not found: {v}")
        return v

    @field_validator("output_file")
    @classmethod
    def validate_output_file(cls, v: Path | None) -> Path | None:
        if v is not None and v.is_dir():
            raise ValueError(f"Output path must be a file, not a directory: {v}")
        return v
