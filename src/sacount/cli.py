"""
CLI Entry Point: Exposes the sacount functionality via command line.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from . import __version__
from .models.core import CounterConfig
from .pipeline import Pipeline
from .utils.logging import setup_logging

app = typer.Typer(help="sacount: per-allele read support at candidate variant loci")

console = Console(stderr=True)


@app.callback()
def main():
    """
    sacount: per-allele read support at candidate variant loci
    """
    pass


@app.command()
def version():
    """Show the version and exit."""
    typer.echo(f"py-sacount {__version__}")


@app.command()
def run(
    bam_file: Path = typer.Option(..., "--bam", "-b", help="Path to indexed BAM file"),
    reference: Path = typer.Option(..., "--fasta", "-f", help="Path to faidx-indexed reference FASTA"),
    variant_file: Path = typer.Option(
        ..., "--variants", "-v", help="Candidate variants (CHROM POS ID REF ALT ...)"
    ),
    output_file: Path | None = typer.Option(
        None, "--output", "-o", help="Output VCF path (default: stdout)"
    ),
    sample_name: str = typer.Option("SAMPLE", "--sample-name", "-s", help="Sample column name"),
    min_mapq: int = typer.Option(20, "--min-mapq", help="Minimum mapping quality"),
    min_baseq: int = typer.Option(20, "--min-baseq", help="Minimum base quality"),
    max_reads: int = typer.Option(
        500000, "--max-reads", help="Maximum reads evaluated per locus"
    ),
    contig_support: bool = typer.Option(
        True,
        "--contig-support/--no-contig-support",
        help="Only count indels corroborated by an assembled-contig annotation",
    ),
    threads: int = typer.Option(1, "--threads", "-t", help="Number of worker processes"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Count allele support at every candidate variant and write a VCF.
    """
    setup_logging(verbose=verbose, log_file=str(log_file) if log_file else None)

    try:
        config = CounterConfig(
            bam_file=bam_file,
            reference_fasta=reference,
            variant_file=variant_file,
            output_file=output_file,
            sample_name=sample_name,
            min_mapping_quality=min_mapq,
            min_base_quality=min_baseq,
            max_reads_per_locus=max_reads,
            require_contig_support=contig_support,
            threads=threads,
        )
    except ValidationError as e:
        console.print(f"[bold red]Invalid arguments:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    try:
        Pipeline(config).run()
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
