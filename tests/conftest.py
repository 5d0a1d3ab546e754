"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pysam
import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

# chr1: position 50 (1-based) is the A anchoring a CCCCC homopolymer at 51-55.
CHR1 = "ACGT" * 12 + "GA" + "CCCCC" + "TG" + "ACGT" * 35


class FakeReference:
    """In-memory stand-in for ReferenceSequence."""

    def __init__(self, sequences: dict[str, str]):
        self.sequences = sequences

    def get_sequence(self, chrom: str, start: int, length: int) -> str:
        seq = self.sequences.get(chrom)
        if seq is None or length <= 0 or start < 1:
            return ""
        return seq[start - 1:start - 1 + length].upper()

    def chromosome_length(self, chrom: str) -> int:
        return len(self.sequences.get(chrom, ""))


def build_read(name, seq, start, cigar, flag=0, mapq=60, quals=None, tags=None):
    """Create an AlignedSegment; ``start`` is the 0-based reference start."""
    a = pysam.AlignedSegment()
    a.query_name = name
    a.query_sequence = seq
    a.flag = flag
    a.reference_id = 0
    a.reference_start = start
    a.mapping_quality = mapq
    a.cigarstring = cigar
    a.query_qualities = quals if quals is not None else [30] * len(seq)
    for tag, value in (tags or {}).items():
        a.set_tag(tag, value)
    return a


def with_base(seq: str, index: int, base: str) -> str:
    return seq[:index] + base + seq[index + 1:]


@pytest.fixture
def chr1_seq() -> str:
    return CHR1


@pytest.fixture
def reference() -> FakeReference:
    return FakeReference({"chr1": CHR1})


@pytest.fixture
def make_read():
    return build_read


@pytest.fixture
def fasta_file(tmp_path: Path) -> Path:
    """Indexed FASTA holding chr1."""
    path = tmp_path / "ref.fa"
    with open(path, "w") as f:
        f.write(">chr1\n")
        for i in range(0, len(CHR1), 60):
            f.write(CHR1[i:i + 60] + "\n")
    pysam.faidx(str(path))
    return path


@pytest.fixture
def bam_factory(tmp_path: Path):
    """Write reads to a sorted, indexed BAM. Returns the path."""

    def _build(reads, filename="sample.bam") -> Path:
        unsorted = tmp_path / f"unsorted_{filename}"
        header = {"HD": {"VN": "1.0"}, "SQ": [{"LN": len(CHR1), "SN": "chr1"}]}
        with pysam.AlignmentFile(str(unsorted), "wb", header=header) as outf:
            for r in reads:
                outf.write(r)
        sorted_bam = tmp_path / filename
        pysam.sort("-o", str(sorted_bam), str(unsorted))
        pysam.index(str(sorted_bam))
        return sorted_bam

    return _build
