"""Tests for VCF output."""

import io

from sacount.call import FORMAT, SampleCall
from sacount.io.output import VcfWriter
from sacount.models.core import InputVariant

EMPTY_SAMPLE = "0/1:0:0:0,0:0,0:0,0,0,0:0:0:0.00:0:0.00"


def test_header_lines(tmp_path):
    writer = VcfWriter(io.StringIO(), tmp_path / "ref.fa", [("chr1", 197), ("chr2", 50)], "TUMOR")
    headers = writer.header_lines()

    assert headers[0] == "##fileformat=VCFv4.2"
    assert headers[1].startswith("##reference=file://")
    assert headers[1].endswith("ref.fa")
    assert "##contig=<ID=chr1,length=197>" in headers
    assert "##contig=<ID=chr2,length=50>" in headers
    assert any(h.startswith("##INFO=<ID=HRUN,") for h in headers)
    assert any(h.startswith("##FORMAT=<ID=FROR,") for h in headers)
    assert headers[-1] == "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tTUMOR"


def test_every_format_key_has_a_header(tmp_path):
    headers = VcfWriter(io.StringIO(), tmp_path / "ref.fa", []).header_lines()
    for key in FORMAT.split(":"):
        assert any(h.startswith(f"##FORMAT=<ID={key},") for h in headers)


def test_empty_call_line():
    call = SampleCall.empty(InputVariant.create("chr1", 50, "A", "T"))
    assert call.to_vcf_line() == f"chr1\t50\t.\tA\tT\t0.00\t.\t.\t{FORMAT}\t{EMPTY_SAMPLE}"


def test_writes_to_stream_without_closing_it(tmp_path):
    stream = io.StringIO()
    with VcfWriter(stream, tmp_path / "ref.fa", [("chr1", 197)]) as writer:
        writer.write(SampleCall.empty(InputVariant.create("chr1", 50, "A", "T")))
        writer.write(SampleCall.empty(InputVariant.create("chr1", 60, "AC", "A")))

    lines = stream.getvalue().splitlines()
    records = [line for line in lines if not line.startswith("#")]
    assert len(records) == 2
    assert records[0].startswith("chr1\t50\t")
    assert records[1].startswith("chr1\t60\t.\tAC\tA\t")
    assert not stream.closed


def test_header_written_even_without_records(tmp_path):
    out = tmp_path / "out.vcf"
    with VcfWriter(out, tmp_path / "ref.fa", [("chr1", 197)]):
        pass
    lines = out.read_text().splitlines()
    assert lines[0] == "##fileformat=VCFv4.2"
    assert lines[-1].startswith("#CHROM")
