"""In-memory RGBA raster used by every stage of the scoring pipeline."""

import io
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image

from qr_score.constants import MAX_DIMENSION, SUPPORTED_SUFFIXES

logger = logging.getLogger(__name__)

__all__ = ['PixelBuffer', 'validate_dimensions']


def validate_dimensions(width: int, height: int) -> None:
    """
    Reject images that are empty or larger than MAX_DIMENSION on either side.

    Raises:
        ValueError: If a dimension is zero or exceeds MAX_DIMENSION
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image is empty: {width}x{height}")
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        raise ValueError(
            f"Image too large: {width}x{height} exceeds maximum "
            f"{MAX_DIMENSION}x{MAX_DIMENSION}"
        )


class PixelBuffer:
    """
    Immutable RGBA image, 8 bits per channel, stored row-major as (H, W, 4).

    The backing array is copied on construction and marked read-only, so a
    buffer can be shared between threads without locking.
    """

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        """
        Args:
            pixels: uint8 array shaped (H, W), (H, W, 3) or (H, W, 4)

        Raises:
            ValueError: If the array has the wrong dtype or shape
        """
        if not isinstance(pixels, np.ndarray):
            raise ValueError(f"Expected numpy array, got {type(pixels).__name__}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")

        if pixels.ndim == 2:
            pixels = np.stack([pixels, pixels, pixels, np.full_like(pixels, 255)], axis=-1)
        elif pixels.ndim == 3 and pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=-1)
        elif not (pixels.ndim == 3 and pixels.shape[2] == 4):
            raise ValueError(f"Expected (H, W), (H, W, 3) or (H, W, 4) array, got shape {pixels.shape}")

        validate_dimensions(pixels.shape[1], pixels.shape[0])

        data = np.array(pixels, dtype=np.uint8, copy=True, order="C")
        data.setflags(write=False)
        self._pixels = data

    @classmethod
    def from_rgb_and_alpha(cls, rgb: np.ndarray, alpha: np.ndarray) -> "PixelBuffer":
        """Rebuild a buffer from an (H, W, 3) colour array and an (H, W) alpha plane."""
        return cls(np.concatenate([rgb, alpha[..., np.newaxis]], axis=-1))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """Convert a PIL image of any mode to an RGBA buffer."""
        if image.mode != "RGBA":
            logger.debug(f"Converting image from {image.mode} to RGBA")
            image = image.convert("RGBA")
        return cls(np.asarray(image, dtype=np.uint8))

    @classmethod
    def from_bytes(cls, data: bytes) -> "PixelBuffer":
        """
        Decode an encoded raster (PNG, JPEG, WebP) held in memory.

        Raises:
            ValueError: If the bytes cannot be decoded as an image
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return cls.from_image(img)
        except (OSError, Image.DecompressionBombError) as e:
            raise ValueError(f"Failed to load image: {e}") from e

    @classmethod
    def load(cls, image_path: Union[str, Path]) -> "PixelBuffer":
        """
        Load a raster image from disk.

        Args:
            image_path: Path to the image file (.png, .jpg, .webp)

        Returns:
            PixelBuffer holding the image as RGBA

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the format is unsupported or the file is unreadable
        """
        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        if path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError(f"Unsupported image format: {path.suffix}")

        logger.debug(f"Loading image: {image_path}")
        return cls.from_bytes(path.read_bytes())

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (H, W, 4) uint8 view."""
        return self._pixels

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[..., 3]

    def __len__(self) -> int:
        return self.width * self.height

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return np.array_equal(self._pixels, other._pixels)

    def __hash__(self) -> int:
        return hash((self._pixels.shape, self._pixels.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"

    def rgb(self) -> np.ndarray:
        """Colour channels as an (H, W, 3) uint8 view."""
        return self._pixels[..., :3]

    def to_gray(self) -> np.ndarray:
        """Luma (ITU-R BT.601) as an (H, W) uint8 array, alpha ignored."""
        return cv2.cvtColor(np.ascontiguousarray(self.rgb()), cv2.COLOR_RGB2GRAY)

    def resized(self, width: int, height: int) -> "PixelBuffer":
        """
        Resample to (width, height) with area averaging.

        Area interpolation averages every source pixel that falls in a target
        pixel, which keeps module edges as mixed grey rather than aliasing.
        """
        if width == self.width and height == self.height:
            return self
        resized = cv2.resize(self._pixels, (width, height), interpolation=cv2.INTER_AREA)
        logger.debug(f"Resized buffer from {self.width}x{self.height} to {width}x{height}")
        return PixelBuffer(resized)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self._pixels))
