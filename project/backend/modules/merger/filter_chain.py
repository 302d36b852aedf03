"""
atempo filter chain construction for merger module.

ffmpeg's atempo only stretches within [0.5, 2.0], so an arbitrary ratio is
decomposed into whole 2.0 (or 0.5) steps followed by an in-range remainder.
"""
from typing import List, Sequence

from shared.validation import is_positive_finite
from .config import (
    ATEMPO_MIN,
    ATEMPO_MAX,
    ATEMPO_EPSILON,
    ATEMPO_PRECISION,
    IDENTITY_RATIO,
)


def build_atempo_chain(ratio: float) -> List[float]:
    """
    Decompose ratio into atempo factors whose product is ratio.

    Every factor lies in [0.5, 2.0] and the chain is never empty: a ratio
    already in range (including 1.0) yields a single element. Invalid ratios
    collapse to the identity chain [1.0].

    Args:
        ratio: Target tempo ratio

    Returns:
        Factors to apply in order
    """
    if not is_positive_finite(ratio):
        return [IDENTITY_RATIO]

    chain: List[float] = []
    remainder = ratio

    while remainder > ATEMPO_MAX + ATEMPO_EPSILON:
        chain.append(ATEMPO_MAX)
        remainder /= ATEMPO_MAX

    while remainder < ATEMPO_MIN - ATEMPO_EPSILON:
        chain.append(ATEMPO_MIN)
        remainder /= ATEMPO_MIN

    # Rounding can nudge a boundary remainder (e.g. 2.0000000004) out of range
    remainder = min(max(round(remainder, ATEMPO_PRECISION), ATEMPO_MIN), ATEMPO_MAX)
    chain.append(remainder)
    return chain


def format_atempo_filter(chain: Sequence[float]) -> str:
    """
    Render a chain as a single ffmpeg audio filter expression.

    Full steps render as "2.0" / "0.5"; the final remainder keeps
    ATEMPO_PRECISION decimals, e.g. "atempo=2.0,atempo=1.250000".
    """
    if not chain:
        chain = [IDENTITY_RATIO]

    terms = [f"atempo={factor!r}" for factor in chain[:-1]]
    terms.append(f"atempo={chain[-1]:.{ATEMPO_PRECISION}f}")
    return ",".join(terms)
