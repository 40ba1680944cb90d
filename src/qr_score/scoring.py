"""Weighted aggregation of stress test outcomes and contrast into a report."""

import logging
import math
from typing import Mapping, Optional

from qr_score.config import WeightTable
from qr_score.constants import (
    CONTRAST_TARGET_RATIO,
    EXPECTED_WEIGHT_TOTAL,
    FAILING_GRADE,
    GRADE_THRESHOLDS,
    LUMINANCE_BINS,
    NOT_DECODABLE_ERROR,
)
from qr_score.decoders import DecodedSymbol
from qr_score.types import Report, freeze_results

logger = logging.getLogger(__name__)

__all__ = ['grade_from_score', 'contrast_percent', 'calculate_score', 'not_decodable_report', 'build_report']


def grade_from_score(score: int) -> str:
    """Letter grade; each band includes its lower bound."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def contrast_percent(contrast_ratio: float) -> int:
    """
    Contrast ratio as a whole percentage, rounded half up.

    The ratio is snapped to the luminance histogram resolution first and the
    rounding is done in integers, so values such as 0.035 or 0.285 are not
    pulled below the half by float error.
    """
    bins = int(round(contrast_ratio * LUMINANCE_BINS))
    return (bins * 100 + LUMINANCE_BINS // 2) // LUMINANCE_BINS


def calculate_score(
    results: Mapping[str, bool],
    contrast_ratio: float,
    weights: WeightTable,
    contrast_target: float = CONTRAST_TARGET_RATIO,
) -> int:
    """
    Combine outcomes and contrast into a 0-100 score.

    score = (passing test weight + contrast share of its weight) / total weight,
    as a rounded percentage. The contrast share is ratio / target clamped to
    [0, 1]. Weight tables that do not sum to 100 are used as given.

    Args:
        results: identifier -> passed
        contrast_ratio: Raw contrast ratio of the base image
        weights: Weight table
        contrast_target: Ratio that earns the full contrast weight

    Returns:
        Integer score clamped to [0, 100]
    """
    total_weight = weights.total()
    if not math.isclose(total_weight, EXPECTED_WEIGHT_TOTAL):
        logger.warning(
            f"Weights sum to {total_weight:g}, not {EXPECTED_WEIGHT_TOTAL:g}; "
            f"score is computed without renormalization"
        )
    if total_weight <= 0:
        return 0

    passing_weight = sum(weights.weight_for(identifier) for identifier, passed in results.items() if passed)
    contrast_share = min(max(contrast_ratio / contrast_target, 0.0), 1.0)
    contrast_score = contrast_share * weights.contrast_ratio

    raw = (passing_weight + contrast_score) / total_weight * 100.0
    score = min(max(_round_half_up(raw), 0), 100)

    logger.debug(
        f"Score: passing={passing_weight:g}, contrast={contrast_score:.2f}, "
        f"total={total_weight:g} -> {score}"
    )
    return score


def not_decodable_report() -> Report:
    """Zero-score report for an image no backend can read."""
    return Report(score=0, grade=FAILING_GRADE, decodable=False, error=NOT_DECODABLE_ERROR)


def build_report(
    symbol: Optional[DecodedSymbol],
    results: Mapping[str, bool],
    contrast_ratio: float,
    weights: WeightTable,
    contrast_target: float = CONTRAST_TARGET_RATIO,
) -> Report:
    """
    Assemble the final report.

    Content and error correction always come from the base-image decode,
    never from a perturbed variant.
    """
    if symbol is None:
        return not_decodable_report()

    score = calculate_score(results, contrast_ratio, weights, contrast_target)
    return Report(
        score=score,
        grade=grade_from_score(score),
        decodable=True,
        content=symbol.content,
        results=freeze_results(results),
        contrast_ratio=contrast_percent(contrast_ratio),
        error_correction=symbol.error_correction,
    )
