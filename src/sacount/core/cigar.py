"""
CIGAR Kernel: translating reference coordinates into read coordinates.

All positions handled here are 1-based reference coordinates, matching the
candidate variant list. Read indices are 0-based offsets into the read
sequence (soft clips included, hard clips excluded).

Two walks are provided:
- ``base_at_position`` finds the (base, quality) a read shows at a reference
  position, or ``None`` when the read does not cover it with aligned bases.
- ``find_indel_at_locus`` finds an insertion/deletion anchored at a locus,
  i.e. one that begins immediately after the locus base.

``locate_read_indel`` layers assembled-contig corroboration on top of the
latter, using the ``id,start,cigar`` annotation left on realigned reads.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

import pysam

from ..models.core import Allele

MATCH_OPS = (pysam.CMATCH, pysam.CEQUAL, pysam.CDIFF)

_CIGAR_RE = re.compile(r"(\d+)([MIDNSHP=X])")
_CIGAR_CODES = {
    "M": pysam.CMATCH,
    "I": pysam.CINS,
    "D": pysam.CDEL,
    "N": pysam.CREF_SKIP,
    "S": pysam.CSOFT_CLIP,
    "H": pysam.CHARD_CLIP,
    "P": pysam.CPAD,
    "=": pysam.CEQUAL,
    "X": pysam.CDIFF,
}

Cigar = Sequence[tuple[int, int]]


class MalformedCigarError(ValueError):
    """Raised when a CIGAR string or operator cannot be interpreted."""


@dataclass(frozen=True)
class IndelEvent:
    """An insertion or deletion located on a read."""

    op: int
    length: int
    read_index: int
    insert_bases: str | None = None

    @property
    def is_insertion(self) -> bool:
        return self.op == pysam.CINS

    @property
    def is_deletion(self) -> bool:
        return self.op == pysam.CDEL

    @property
    def allele(self) -> Allele:
        if self.is_insertion:
            return Allele.insertion(self.length)
        return Allele.deletion(self.length)


@dataclass(frozen=True)
class ContigAnnotation:
    """Alignment of the assembled contig a read was realigned to."""

    contig_id: str
    start: int
    cigar: list[tuple[int, int]]

    @classmethod
    def parse(cls, text: str) -> "ContigAnnotation":
        fields = text.split(",")
        if len(fields) < 3:
            raise MalformedCigarError(f"Malformed contig annotation: {text!r}")
        try:
            start = int(fields[1])
        except ValueError as e:
            raise MalformedCigarError(f"Malformed contig start in annotation: {text!r}") from e
        return cls(contig_id=fields[0], start=start, cigar=parse_cigar(fields[2]))


def parse_cigar(text: str) -> list[tuple[int, int]]:
    """Decode a CIGAR string into pysam-style ``(op, length)`` tuples."""
    elements = _CIGAR_RE.findall(text)
    if not elements or sum(len(n) + len(op) for n, op in elements) != len(text):
        raise MalformedCigarError(f"Invalid CIGAR string: {text!r}")
    return [(_CIGAR_CODES[op], int(n)) for n, op in elements]


def base_at_position(
    alignment_start: int,
    cigar: Cigar,
    sequence: str,
    qualities: Sequence[int] | None,
    ref_pos: int,
) -> tuple[str, int] | None:
    """
    Return the (base, phred quality) aligned to ``ref_pos``.

    Args:
        alignment_start: 1-based leftmost aligned reference position.
        cigar: ``(op, length)`` tuples.
        sequence: Read bases, soft clips included.
        qualities: Per-base phred qualities parallel to ``sequence``.
        ref_pos: 1-based reference position.

    Returns:
        ``None`` when the position falls in a deletion, skip, clip, or beyond
        the read (including truncated quality strings).

    Raises:
        MalformedCigarError: an operator other than M/=/X/I/D/N/S/H is walked.
    """
    read_pos = 0
    ref_cursor = alignment_start
    read_length = len(sequence)

    for op, length in cigar:
        if ref_cursor > ref_pos or read_pos >= read_length:
            break

        if op == pysam.CHARD_CLIP:
            continue
        elif op in (pysam.CSOFT_CLIP, pysam.CINS):
            read_pos += length
        elif op in (pysam.CDEL, pysam.CREF_SKIP):
            ref_cursor += length
        elif op in MATCH_OPS:
            if ref_pos < ref_cursor + length:
                read_pos += ref_pos - ref_cursor
                if read_pos < read_length and qualities is not None and read_pos < len(qualities):
                    return sequence[read_pos], qualities[read_pos]
                return None
            read_pos += length
            ref_cursor += length
        else:
            raise MalformedCigarError(f"Invalid CIGAR operator: {op}")

    return None


def find_indel_at_locus(alignment_start: int, cigar: Cigar, locus: int) -> IndelEvent | None:
    """
    Find an insertion or deletion starting right after ``locus``.

    An indel is "at" the locus when the reference cursor, after every
    preceding operation, equals ``locus + 1``.
    """
    read_idx = 0
    ref_cursor = alignment_start
    anchor = locus + 1

    for op, length in cigar:
        if op in MATCH_OPS:
            read_idx += length
            ref_cursor += length
        elif op == pysam.CINS:
            if ref_cursor == anchor:
                return IndelEvent(op=op, length=length, read_index=read_idx)
            read_idx += length
        elif op == pysam.CDEL:
            if ref_cursor == anchor:
                return IndelEvent(op=op, length=length, read_index=read_idx)
            ref_cursor += length
        elif op == pysam.CSOFT_CLIP:
            read_idx += length
        elif op == pysam.CREF_SKIP:
            ref_cursor += length

        if ref_cursor > anchor:
            break

    return None


def locate_read_indel(
    read: pysam.AlignedSegment,
    locus: int,
    contig_tag: str = "YA",
    require_contig_support: bool = True,
) -> IndelEvent | None:
    """
    Locate the indel a read supports at ``locus``.

    When the read carries an assembled-contig annotation, the contig's indel
    is reported only if the read itself has an indel of the same operation
    at the locus. The event then uses the read's own index; truncated
    insertions touching either read end have the index shifted by the
    missing length. Length-mismatched insertions away from the read ends
    keep the uncorrected index.

    Reads without an annotation only contribute indels when
    ``require_contig_support`` is False.
    """
    sequence = read.query_sequence or ""
    read_start = read.reference_start + 1
    cigar = read.cigartuples or []

    if not read.has_tag(contig_tag):
        if require_contig_support:
            return None
        event = find_indel_at_locus(read_start, cigar, locus)
        if event is not None and event.is_insertion:
            bases = sequence[event.read_index:event.read_index + event.length]
            return IndelEvent(event.op, event.length, event.read_index, bases.upper() or None)
        return event

    contig = ContigAnnotation.parse(str(read.get_tag(contig_tag)))
    contig_event = find_indel_at_locus(contig.start, contig.cigar, locus)
    if contig_event is None:
        return None

    read_event = find_indel_at_locus(read_start, cigar, locus)
    if read_event is None or read_event.op != contig_event.op:
        return None

    read_index = read_event.read_index
    insert_bases = None

    if contig_event.is_insertion:
        if contig_event.length == read_event.length:
            insert_bases = sequence[read_index:read_index + read_event.length].upper() or None
        elif read_event.length < contig_event.length:
            length_diff = contig_event.length - read_event.length
            if read_index == 0:
                read_index -= length_diff
            elif read_index + read_event.length == len(sequence):
                read_index += length_diff

    return IndelEvent(contig_event.op, contig_event.length, read_index, insert_bases)


def read_base_at(read: pysam.AlignedSegment, ref_pos: int) -> tuple[str, int] | None:
    """``base_at_position`` for a pysam read."""
    if read.query_sequence is None or read.cigartuples is None:
        return None
    return base_at_position(
        read.reference_start + 1,
        read.cigartuples,
        read.query_sequence,
        read.query_qualities,
        ref_pos,
    )


def indel_bases(cigar: Cigar) -> int:
    """Number of inserted plus deleted bases."""
    return sum(length for op, length in cigar if op in (pysam.CINS, pysam.CDEL))


def mapped_length(cigar: Cigar) -> int:
    """Number of read bases aligned to the reference."""
    return sum(length for op, length in cigar if op in MATCH_OPS)
