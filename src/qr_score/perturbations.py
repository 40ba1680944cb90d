"""Synthetic image degradations applied by the stress test battery.

Every function here is pure: it reads an immutable PixelBuffer and returns a
new one, so identical inputs and parameters always give byte-identical
outputs. Alpha is carried through untouched; only the colour channels are
transformed.
"""

import logging
import math

import cv2
import numpy as np
from scipy.ndimage import gaussian_filter1d

from qr_score.constants import BLUR_RADIUS_SIGMAS, CONTRAST_PIVOT
from qr_score.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

__all__ = [
    'downscale',
    'blur_radius',
    'gaussian_blur',
    'contrast_factor',
    'adjust_contrast',
    'shift_luminance',
    'rotate_hue',
    'scale_saturation',
]


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _rgb_float(buffer: PixelBuffer) -> np.ndarray:
    """Colour channels as float32 in [0, 1], the range OpenCV expects for HLS."""
    return buffer.rgb().astype(np.float32) / 255.0


def downscale(buffer: PixelBuffer, module_size: int, pixels_per_module: int) -> PixelBuffer:
    """
    Simulate a low-resolution capture where each module spans n x n pixels.

    Args:
        buffer: Base image
        module_size: Pixels per module in the base image
        pixels_per_module: Target pixels per module (1-4 in the default battery)

    Returns:
        Area-resampled buffer, or the input when it is already at or below
        the target resolution
    """
    if module_size < 1:
        raise ValueError(f"Module size must be positive, got {module_size}")
    if pixels_per_module < 1:
        raise ValueError(f"Pixels per module must be positive, got {pixels_per_module}")

    scale = pixels_per_module / module_size
    if scale >= 1.0:
        return buffer

    new_w = max(1, int(round(buffer.width * scale)))
    new_h = max(1, int(round(buffer.height * scale)))
    return buffer.resized(new_w, new_h)


def blur_radius(sigma: float) -> int:
    """Kernel radius ceil(3 * sigma), enough to hold over 99% of the Gaussian mass."""
    if sigma <= 0:
        raise ValueError(f"Sigma must be positive, got {sigma}")
    return int(math.ceil(BLUR_RADIUS_SIGMAS * sigma))


def gaussian_blur(buffer: PixelBuffer, sigma: float) -> PixelBuffer:
    """Separable Gaussian blur; borders replicate the edge pixel."""
    if sigma <= 0:
        return buffer

    radius = blur_radius(sigma)
    rgb = buffer.rgb().astype(np.float64)
    blurred = gaussian_filter1d(rgb, sigma, axis=0, mode="nearest", radius=radius)
    blurred = gaussian_filter1d(blurred, sigma, axis=1, mode="nearest", radius=radius)

    logger.debug(f"Applied gaussian blur sigma={sigma} (radius {radius})")
    return PixelBuffer.from_rgb_and_alpha(_to_uint8(blurred), buffer.alpha)


def contrast_factor(percent: float) -> float:
    """Multiplicative gain for a contrast change of +/- percent."""
    return ((100.0 + percent) / 100.0) ** 2


def adjust_contrast(buffer: PixelBuffer, percent: float) -> PixelBuffer:
    """Scale every channel's distance from mid-grey (128) by contrast_factor(percent)."""
    factor = contrast_factor(percent)
    rgb = buffer.rgb().astype(np.float64)
    adjusted = (rgb - CONTRAST_PIVOT) * factor + CONTRAST_PIVOT
    return PixelBuffer.from_rgb_and_alpha(_to_uint8(adjusted), buffer.alpha)


def shift_luminance(buffer: PixelBuffer, delta: int) -> PixelBuffer:
    """
    Add delta to CIE L* (8-bit OpenCV scale, 0-255) and convert back to RGB.

    Working in L*a*b* changes perceived brightness while leaving the
    chromatic a*/b* axes alone.
    """
    lab = cv2.cvtColor(np.ascontiguousarray(buffer.rgb()), cv2.COLOR_RGB2LAB).astype(np.int16)
    lab[..., 0] = np.clip(lab[..., 0] + int(delta), 0, 255)
    rgb = cv2.cvtColor(lab.astype(np.uint8), cv2.COLOR_LAB2RGB)
    return PixelBuffer.from_rgb_and_alpha(rgb, buffer.alpha)


def rotate_hue(buffer: PixelBuffer, degrees: float) -> PixelBuffer:
    """Rotate hue by the given angle in HLS space; lightness and saturation are kept."""
    hls = cv2.cvtColor(_rgb_float(buffer), cv2.COLOR_RGB2HLS)
    hls[..., 0] = np.mod(hls[..., 0] + np.float32(degrees), 360.0)
    rgb = cv2.cvtColor(hls, cv2.COLOR_HLS2RGB)
    return PixelBuffer.from_rgb_and_alpha(_to_uint8(rgb * 255.0), buffer.alpha)


def scale_saturation(buffer: PixelBuffer, percent: float) -> PixelBuffer:
    """Multiply HLS saturation by (1 + percent / 100), clamped to [0, 1]."""
    factor = 1.0 + percent / 100.0
    hls = cv2.cvtColor(_rgb_float(buffer), cv2.COLOR_RGB2HLS)
    hls[..., 2] = np.clip(hls[..., 2] * np.float32(factor), 0.0, 1.0)
    rgb = cv2.cvtColor(hls, cv2.COLOR_HLS2RGB)
    return PixelBuffer.from_rgb_and_alpha(_to_uint8(rgb * 255.0), buffer.alpha)
