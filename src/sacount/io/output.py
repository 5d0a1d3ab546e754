"""
Output Writer: single-sample VCF with allele count annotations.
"""

from pathlib import Path
from typing import TextIO

from ..call import FORMAT, SampleCall

INFO_HEADERS = [
    '##INFO=<ID=RP,Number=1,Type=Integer,Description="Number of times smallest repeating alternate sequence appears in the reference">',
    '##INFO=<ID=RU,Number=1,Type=String,Description="Smallest repeat unit within alternate sequence.  Appears RP times in reference">',
    '##INFO=<ID=HRUN,Number=2,Type=Integer,Description="Length,position of homopolymer run found in CTX">',
    '##INFO=<ID=CTX,Number=1,Type=String,Description="Reference context sequence">',
    '##INFO=<ID=ALT_INSERT,Number=1,Type=String,Description="Observed inserted sequence when it differs from ALT">',
]

FORMAT_HEADERS = [
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Depth (fragment)">',
    '##FORMAT=<ID=DP2,Number=1,Type=Integer,Description="Depth 2 (read)">',
    '##FORMAT=<ID=AD,Number=2,Type=Integer,Description="Allele Depth (fragment)">',
    '##FORMAT=<ID=AD2,Number=2,Type=Integer,Description="Allele Depth (read)">',
    '##FORMAT=<ID=ROR,Number=4,Type=Integer,Description="Read Orientation (ref_fwd, ref_rev, alt_fwd, alt_rev)">',
    '##FORMAT=<ID=LMQ,Number=1,Type=Integer,Description="Number of reads filtered due to low mapping quality">',
    '##FORMAT=<ID=ISPAN,Number=1,Type=Integer,Description="Max variant read pos minus min variant read pos">',
    '##FORMAT=<ID=VAF,Number=1,Type=Float,Description="Variant allele frequency">',
    '##FORMAT=<ID=MER,Number=1,Type=Integer,Description="Number of ref reads with num mismatches greater than read length * .05">',
    '##FORMAT=<ID=FROR,Number=1,Type=Float,Description="Phred scaled Fisher\'s Exact Test for read orientation">',
]


class VcfWriter:
    """Writes SampleCalls to a VCF file, or to an already open stream."""

    def __init__(
        self,
        output: Path | TextIO,
        reference_path: Path,
        contigs: list[tuple[str, int]],
        sample_name: str = "SAMPLE",
    ):
        self.reference_path = reference_path
        self.contigs = contigs
        self.sample_name = sample_name
        if isinstance(output, Path):
            self.file = open(output, "w")
            self._owns_file = True
        else:
            self.file = output
            self._owns_file = False
        self._headers_written = False

    def header_lines(self) -> list[str]:
        headers = [
            "##fileformat=VCFv4.2",
            f"##reference=file://{Path(self.reference_path).resolve()}",
        ]
        headers += [f"##contig=<ID={name},length={length}>" for name, length in self.contigs]
        headers += INFO_HEADERS
        headers += FORMAT_HEADERS
        headers.append(f"#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\t{self.sample_name}")
        return headers

    def _write_header(self):
        self.file.write("\n".join(self.header_lines()) + "\n")
        self._headers_written = True

    def write(self, call: SampleCall):
        if not self._headers_written:
            self._write_header()
        self.file.write(call.to_vcf_line() + "\n")

    def close(self):
        if not self._headers_written:
            self._write_header()
        if self._owns_file:
            self.file.close()
        else:
            self.file.flush()

    def __enter__(self) -> "VcfWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

