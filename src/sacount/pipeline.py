"""
Pipeline Orchestrator: Manages the execution flow of sacount.

This module handles:
1. Reading candidate variants from the input list.
2. Evaluating each variant's locus against the sample BAM, in parallel batches.
3. Writing one VCF record per variant, in input order.
"""

import logging
import math
import sys

from joblib import Parallel, delayed
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .call import SampleCall
from .core.cigar import MalformedCigarError
from .counter import AlleleCounter
from .io.input import AlignmentSource, ReferenceSequence, VariantListReader
from .io.output import VcfWriter
from .models.core import CounterConfig, InputVariant
from .utils.logging import ensure_logging, logging_settings, timed

logger = logging.getLogger(__name__)

# Batches per worker
BATCHES_PER_THREAD = 4


def evaluate_batch(
    config: CounterConfig,
    variants: list[InputVariant],
    log_settings: tuple[bool, str | None] | None = None,
) -> list[SampleCall | None]:
    """
    Evaluate a batch of variants with private alignment and reference handles.

    A malformed CIGAR aborts only the offending variant, which yields ``None``.
    ``log_settings`` configures logging when run in a fresh worker process.
    """
    if log_settings is not None:
        ensure_logging(*log_settings)
    results: list[SampleCall | None] = []
    with ReferenceSequence(config.reference_fasta) as reference, AlignmentSource(
        config.bam_file
    ) as source:
        counter = AlleleCounter.from_config(config, reference)
        for variant in variants:
            reads = source.reads_at(variant.chrom, variant.pos, config.max_reads_per_locus)
            try:
                results.append(counter.count_variant(variant, reads))
            except MalformedCigarError as e:
                logger.error(
                    "Skipping %s:%d %s>%s: %s", variant.chrom, variant.pos, variant.ref, variant.alt, e
                )
                results.append(None)
    return results


def make_batches(variants: list[InputVariant], threads: int) -> list[list[InputVariant]]:
    if not variants:
        return []
    n_batches = min(len(variants), threads * BATCHES_PER_THREAD)
    size = math.ceil(len(variants) / n_batches)
    return [variants[i:i + size] for i in range(0, len(variants), size)]


class Pipeline:
    def __init__(self, config: CounterConfig):
        self.config = config
        self.console = Console(stderr=True)

    def load_variants(self) -> list[InputVariant]:
        return list(VariantListReader(self.config.variant_file))

    def run(self) -> int:
        """Execute the pipeline. Returns the number of records written."""
        with timed("Loading variants", logger):
            variants = self.load_variants()
        logger.info("Loaded %d variants from %s", len(variants), self.config.variant_file)

        with AlignmentSource(self.config.bam_file) as source:
            contigs = source.contigs

        output = self.config.output_file if self.config.output_file is not None else sys.stdout
        batches = make_batches(variants, self.config.threads)
        log_settings = logging_settings()
        written = 0

        with VcfWriter(
            output, self.config.reference_fasta, contigs, sample_name=self.config.sample_name
        ) as writer, Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task("[cyan]Counting alleles...", total=len(variants))

            with timed("Counting alleles", logger), Parallel(
                n_jobs=self.config.threads, return_as="generator"
            ) as parallel:
                for results in parallel(
                    delayed(evaluate_batch)(self.config, batch, log_settings) for batch in batches
                ):
                    for call in results:
                        if call is not None:
                            writer.write(call)
                            written += 1
                    progress.advance(task, len(results))

        skipped = len(variants) - written
        if skipped:
            logger.warning("%d variants could not be evaluated", skipped)
        logger.info("Wrote %d records", written)
        return written
