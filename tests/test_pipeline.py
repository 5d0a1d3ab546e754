"""End-to-end tests for the counting pipeline."""

import pytest
from conftest import CHR1, build_read, with_base

from sacount.call import FORMAT
from sacount.models.core import CounterConfig, UnsupportedVariantError
from sacount.pipeline import Pipeline, make_batches


def snp_reads():
    ref = CHR1[20:80]
    alt = with_base(ref, 29, "T")
    return [
        build_read("r1", ref, 20, "60M"),
        build_read("r2", ref, 20, "60M"),
        build_read("r3", ref, 20, "60M"),
        build_read("a1", alt, 20, "60M"),
        build_read("a2", alt, 20, "60M", flag=16),
    ]


@pytest.fixture
def variant_file(tmp_path):
    path = tmp_path / "variants.vcf"
    path.write_text(
        "##fileformat=VCFv4.2\n"
        "#CHROM\tPOS\tID\tREF\tALT\n"
        "chr1\t50\trs1\tA\tT\n"
        "\n"
        "chr1\t150\t.\tA\tG\n"
    )
    return path


def records(path):
    return [line.split("\t") for line in path.read_text().splitlines() if not line.startswith("#")]


def make_config(tmp_path, bam, fasta, variants, **kwargs):
    return CounterConfig(
        bam_file=bam,
        reference_fasta=fasta,
        variant_file=variants,
        output_file=tmp_path / "out.vcf",
        **kwargs,
    )


def test_pipeline_writes_one_record_per_variant(tmp_path, fasta_file, bam_factory, variant_file):
    bam = bam_factory(snp_reads())
    config = make_config(tmp_path, bam, fasta_file, variant_file, sample_name="TUMOR")

    assert Pipeline(config).run() == 2

    text = (tmp_path / "out.vcf").read_text()
    assert "##contig=<ID=chr1,length=197>" in text
    assert text.splitlines()[-3].endswith("\tTUMOR")

    first, second = records(tmp_path / "out.vcf")
    assert first[:5] == ["chr1", "50", ".", "A", "T"]
    assert float(first[5]) > 0
    assert first[7].startswith("RP=0;RU=;HRUN=5,10;CTX=")
    assert first[8] == FORMAT
    assert first[9] == "0/1:5:5:3,2:3,2:3,0,1,1:0:0:0.40:0:3.98"

    assert second[:5] == ["chr1", "150", ".", "A", "G"]
    assert second[5:8] == ["0.00", ".", "."]


def test_pipeline_output_independent_of_threads(tmp_path, fasta_file, bam_factory, variant_file):
    bam = bam_factory(snp_reads())
    single = make_config(tmp_path, bam, fasta_file, variant_file, threads=1)
    Pipeline(single).run()
    expected = (tmp_path / "out.vcf").read_text()

    multi = make_config(tmp_path, bam, fasta_file, variant_file, threads=2)
    Pipeline(multi).run()
    assert (tmp_path / "out.vcf").read_text() == expected


def test_pipeline_rejects_malformed_variant_list(tmp_path, fasta_file, bam_factory):
    bad = tmp_path / "bad.vcf"
    bad.write_text("chr1\t50\t.\tA\tT\nchr1\tfifty\t.\tA\tT\n")
    config = make_config(tmp_path, bam_factory(snp_reads()), fasta_file, bad)

    with pytest.raises(UnsupportedVariantError, match="bad.vcf:2"):
        Pipeline(config).run()


def test_pipeline_skips_locus_with_malformed_contig_annotation(tmp_path, fasta_file, bam_factory):
    seq = CHR1[20:50] + "CC" + CHR1[50:80]
    reads = [
        build_read("i1", seq, 20, "30M2I30M", tags={"YA": "c1,21,30Q2I40M", "NM": 2}),
        build_read("r1", CHR1[20:80], 20, "60M"),
    ]
    variants = tmp_path / "ins.vcf"
    variants.write_text("chr1\t50\t.\tA\tACC\nchr1\t150\t.\tA\tG\n")
    config = make_config(tmp_path, bam_factory(reads), fasta_file, variants)

    assert Pipeline(config).run() == 1
    (only,) = records(tmp_path / "out.vcf")
    assert only[1] == "150"


def test_make_batches_preserves_order():
    items = list(range(10))
    batches = make_batches(items, threads=2)
    assert [v for batch in batches for v in batch] == items
    assert len(batches) <= 8
    assert make_batches([], threads=4) == []
