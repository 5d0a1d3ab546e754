"""
Statistical scoring of allele counts.

- Call quality: phred-scaled beta-binomial right tail of the alternate count.
- Strand bias: phred-scaled two-tailed Fisher's exact test on read orientation.
"""

import numpy as np
from scipy.special import logsumexp
from scipy.stats import betabinom, fisher_exact

DEFAULT_ALPHA = 1.0
DEFAULT_BETA = 100.0


def betabinomial_tail_log(
    depth: int, alt_count: int, alpha: float = DEFAULT_ALPHA, beta: float = DEFAULT_BETA
) -> float:
    """Natural log of P(X >= alt_count) for X ~ BetaBinomial(depth, alpha, beta)."""
    if alt_count <= 0 or depth <= 0:
        return 0.0
    alt_count = min(alt_count, depth)
    k = np.arange(alt_count, depth + 1)
    # Log-space sum over the tail
    return float(min(logsumexp(betabinom.logpmf(k, depth, alpha, beta)), 0.0))


def phred_quality(
    alt_count: int, depth: int, alpha: float = DEFAULT_ALPHA, beta: float = DEFAULT_BETA
) -> float:
    """
    Phred-scaled probability that ``alt_count`` supporting reads out of
    ``depth`` arose from error alone.

    Zero when there is no alternate support; increases with ``alt_count``.
    """
    log_p = betabinomial_tail_log(depth, alt_count, alpha, beta)
    return float(abs(-10.0 * log_p / np.log(10.0)))


def strand_bias(ref_fwd: int, ref_rev: int, alt_fwd: int, alt_rev: int) -> float:
    """
    Phred-scaled two-tailed Fisher's exact p-value for read orientation.

    The table is [[ref_fwd, ref_rev], [alt_fwd, alt_rev]]; ``abs`` removes the
    negative zero produced for p == 1.
    """
    table = np.array([[ref_fwd, ref_rev], [alt_fwd, alt_rev]])
    _, p_value = fisher_exact(table, alternative="two-sided")
    if np.isnan(p_value):
        return 0.0
    return float(abs(-10.0 * np.log10(p_value)))
