"""
Repeat and homopolymer context around a locus.
"""

from dataclasses import dataclass

from ..models.core import Allele, AlleleType

# Reference window is this many times the event length.
REPEAT_WINDOW_FACTOR = 100

# Context window: locus-9 .. locus+10
CONTEXT_UPSTREAM = 9
CONTEXT_LENGTH = 20
CONTEXT_MARGIN = 10


@dataclass(frozen=True)
class HomopolymerRun:
    """Longest single-base run in a context window."""

    length: int
    base: str
    pos: int

    @classmethod
    def find(cls, context: str) -> "HomopolymerRun | None":
        """
        Return the longest run in ``context`` (first one on ties).

        Runs of ``N`` are ignored; ``None`` if no called base is present.
        """
        best: HomopolymerRun | None = None
        i = 0
        while i < len(context):
            base = context[i]
            j = i + 1
            while j < len(context) and context[j] == base:
                j += 1
            if base.upper() != "N" and (best is None or j - i > best.length):
                best = cls(length=j - i, base=base, pos=i)
            i = j
        return best


def get_repeat_unit(bases: str) -> str:
    """Smallest unit that tiles ``bases`` exactly (``ATAT`` -> ``AT``)."""
    n = len(bases)
    for size in range(1, n + 1):
        if n % size == 0 and bases[:size] * (n // size) == bases:
            return bases[:size]
    return bases


def get_repeat_period(unit: str, sequence: str) -> int:
    """Number of consecutive copies of ``unit`` at the start of ``sequence``."""
    if not unit:
        return 0
    period = 0
    index = 0
    while sequence.startswith(unit, index):
        period += 1
        index += len(unit)
    return period


def candidate_repeat_bases(allele: Allele, window: str, alt_field: str) -> str:
    """Deleted bases for deletions, the ALT minus its anchor base otherwise."""
    if allele.type == AlleleType.DELETION:
        return window[:allele.length]
    return alt_field[1:]


def find_repeat(allele: Allele, window: str, alt_field: str) -> tuple[int, str]:
    """
    Compute ``(period, unit)`` for a candidate against the reference window.

    ``window`` starts one base after the locus.
    """
    bases = candidate_repeat_bases(allele, window, alt_field)
    unit = get_repeat_unit(bases.upper())
    return get_repeat_period(unit, window.upper()), unit


def repeat_window_length(allele: Allele, position: int, chromosome_length: int) -> int:
    return max(0, min(allele.length * REPEAT_WINDOW_FACTOR, chromosome_length - position - 2))


def repeat_length(period: int, unit: str, allele_type: AlleleType) -> int:
    """
    Reference bases covered by the repeat.

    Deletions drop one copy since the deleted copy is not reference context;
    only indels have a repeat span.
    """
    if allele_type == AlleleType.DELETION:
        period = max(period - 1, 0)
    elif allele_type != AlleleType.INSERTION:
        period = 0
    return period * len(unit)


def context_bounds(position: int, chromosome_length: int) -> tuple[int, int] | None:
    """1-based start and length of the context window, or None near chromosome ends."""
    if CONTEXT_MARGIN < position < chromosome_length - CONTEXT_MARGIN:
        return position - CONTEXT_UPSTREAM, CONTEXT_LENGTH
    return None
