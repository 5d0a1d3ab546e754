"""
Per-allele read support accumulated while evaluating one locus.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

import pysam


class AlleleCounts:
    """
    Read support for one allele at one locus.

    ``count`` is fragment based (mates sharing a name count once) and, once
    a span end is set, only includes fragments whose furthest mate reaches
    it. ``total_count`` and the strand counts are per read.

    ``clear_read_ids`` settles ``count`` and drops the per-fragment name
    map; call it once the span end is final.
    """

    def __init__(self) -> None:
        self.total_count = 0
        self.fwd = 0
        self.rev = 0
        self.min_read_idx: int | None = None
        self.max_read_idx: int | None = None
        self.span_end: int | None = None
        self._fragment_ends: dict[str, int] = {}
        self._settled_count: int | None = None
        self._insert_bases: Counter[str] = Counter()

    def __repr__(self) -> str:
        return (
            f"AlleleCounts(count={self.count}, total={self.total_count}, "
            f"fwd={self.fwd}, rev={self.rev})"
        )

    @property
    def count(self) -> int:
        if self._settled_count is not None:
            return self._settled_count
        if self.span_end is None:
            return len(self._fragment_ends)
        return sum(1 for end in self._fragment_ends.values() if end >= self.span_end)

    @property
    def tracked_fragments(self) -> int:
        """Fragment names still held for deduplication."""
        return len(self._fragment_ends)

    def increment(self, read: pysam.AlignedSegment) -> None:
        """Add one supporting read."""
        self.total_count += 1
        if read.is_reverse:
            self.rev += 1
        else:
            self.fwd += 1

        # reference_end is 0-based exclusive, i.e. the 1-based last aligned base
        end = read.reference_end if read.reference_end is not None else read.reference_start + 1

        name = read.query_name
        if name is None:
            name = f"_unnamed{len(self._fragment_ends)}"
        self._fragment_ends[name] = max(self._fragment_ends.get(name, end), end)

    def update_read_idx(self, read_idx: int) -> None:
        if self.min_read_idx is None or read_idx < self.min_read_idx:
            self.min_read_idx = read_idx
        if self.max_read_idx is None or read_idx > self.max_read_idx:
            self.max_read_idx = read_idx

    def update_insert_bases(self, bases: str | None) -> None:
        if bases:
            self._insert_bases[bases] += 1

    @property
    def preferred_insert_bases(self) -> str:
        """Most represented fully spanned insertion; first seen wins ties."""
        if not self._insert_bases:
            return ""
        return self._insert_bases.most_common(1)[0][0]

    @property
    def read_span(self) -> int:
        if self.min_read_idx is None or self.max_read_idx is None:
            return 0
        return self.max_read_idx - self.min_read_idx

    def clear_read_ids(self) -> None:
        self._settled_count = self.count
        self._fragment_ends.clear()

    @staticmethod
    def set_span_end(span_end: int, counts: Iterable["AlleleCounts"]) -> None:
        for ac in counts:
            ac.span_end = span_end

    @staticmethod
    def sum(counts: Iterable["AlleleCounts"]) -> int:
        return sum(ac.count for ac in counts)


@dataclass
class LocusTally:
    """Read-level bookkeeping for one locus."""

    total_depth: int = 0
    low_mapq: int = 0
    mismatch_exceeded: int = 0
