"""Percentile-based luminance spread of the unperturbed QR image."""

import logging

import numpy as np

from qr_score.constants import CONTRAST_TARGET_RATIO, LOW_PERCENTILE_DIVISOR, LUMINANCE_BINS
from qr_score.pixel_buffer import PixelBuffer
from qr_score.types import ContrastMeasurement

logger = logging.getLogger(__name__)

__all__ = ['relative_luminance', 'contrast_ratio', 'measure_contrast']

# Rec. 709 / WCAG weights for linear RGB
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

# sRGB channel value -> linear light, indexed by the 8-bit sample
_srgb = np.arange(256, dtype=np.float64) / 255.0
SRGB_TO_LINEAR = np.where(_srgb <= 0.03928, _srgb / 12.92, ((_srgb + 0.055) / 1.055) ** 2.4)
del _srgb


def relative_luminance(rgb: np.ndarray) -> np.ndarray:
    """
    Relative luminance of 8-bit sRGB pixels.

    Args:
        rgb: (..., 3) uint8 array

    Returns:
        Float array in [0, 1] with the leading shape of the input
    """
    linear = SRGB_TO_LINEAR[rgb]
    return linear @ LUMA_WEIGHTS


def contrast_ratio(buffer: PixelBuffer) -> float:
    """
    Spread between the 5th and 95th percentile luminance, in [0, 1].

    Luminance is quantized into a fixed histogram and the percentiles are
    read off the cumulative counts, so equal images always give equal
    ratios regardless of pixel order.
    """
    total = len(buffer)
    if total == 0:
        return 0.0

    luminance = relative_luminance(buffer.rgb())
    bins = np.minimum(np.rint(luminance * LUMINANCE_BINS), LUMINANCE_BINS).astype(np.int64)
    histogram = np.bincount(bins.ravel(), minlength=LUMINANCE_BINS + 1)
    cumulative = np.cumsum(histogram)

    tail = total // LOW_PERCENTILE_DIVISOR
    low_target = max(tail, 1)
    high_target = total - tail

    p5_bin = int(np.searchsorted(cumulative, low_target, side="left"))
    p95_bin = int(np.searchsorted(cumulative, high_target, side="left"))

    # Exactly k / LUMINANCE_BINS
    ratio = (p95_bin - p5_bin) / LUMINANCE_BINS
    logger.debug(f"Contrast percentile bins: p5={p5_bin}, p95={p95_bin}, ratio={ratio:.3f}")
    return ratio


def measure_contrast(buffer: PixelBuffer, target: float = CONTRAST_TARGET_RATIO) -> ContrastMeasurement:
    """
    Measure contrast and normalize it against the target ratio.

    The normalized score is clamped to [0, 1]; the raw ratio is not.
    """
    if target <= 0:
        raise ValueError(f"Contrast target must be positive, got {target}")
    ratio = contrast_ratio(buffer)
    score = min(max(ratio / target, 0.0), 1.0)
    return ContrastMeasurement(ratio=ratio, score=score)
