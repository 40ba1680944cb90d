"""QR scannability scorer - main entry point for the scoring engine."""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from PIL import Image

from qr_score.battery import StressTestBattery
from qr_score.config import ScoringConfig
from qr_score.contrast import measure_contrast
from qr_score.decoders import DecoderBackend, DecoderChain
from qr_score.pixel_buffer import PixelBuffer
from qr_score.scoring import build_report, not_decodable_report
from qr_score.types import Report

logger = logging.getLogger(__name__)

__all__ = ['QRScorer', 'score_image']

ImageSource = Union[PixelBuffer, Image.Image, str, Path, bytes]


def _as_buffer(image: ImageSource) -> PixelBuffer:
    if isinstance(image, PixelBuffer):
        return image
    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)
    if isinstance(image, bytes):
        return PixelBuffer.from_bytes(image)
    return PixelBuffer.load(image)


class QRScorer:
    """
    Scores how well a QR code survives synthetic degradation.

    The base image is decoded once. If that fails the run stops with a
    zero-score report; otherwise the stress test battery and the contrast
    analysis run and are aggregated into a 0-100 score and letter grade.
    A scorer holds no state between runs.
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        backends: Optional[Sequence[DecoderBackend]] = None,
    ):
        """
        Initialize scorer.

        Args:
            config: Thresholds, enabled tests and weights (defaults if omitted)
            backends: Decoder backends in priority order (default chain if omitted)
        """
        self.config = config if config is not None else ScoringConfig()
        self.chain = DecoderChain(backends)
        self.battery = StressTestBattery(self.config, self.chain)

    def score(self, image: ImageSource, module_size: int, max_workers: Optional[int] = None) -> Report:
        """
        Score a rasterized QR code.

        Args:
            image: PixelBuffer, PIL image, encoded bytes or path to an image file
            module_size: Pixels per QR module in the image
            max_workers: Override for the stress test thread pool size

        Returns:
            Report with score, grade and per-test results
        """
        if module_size < 1:
            raise ValueError(f"Module size must be positive, got {module_size}")

        buffer = _as_buffer(image)
        logger.info(f"Scoring {buffer.width}x{buffer.height} image (module size {module_size}px)")

        symbol = self.chain.decode(buffer)
        if symbol is None:
            logger.info("Base image is not decodable")
            return not_decodable_report()

        results = self.battery.run(buffer, module_size, max_workers=max_workers)
        contrast = measure_contrast(buffer, target=self.config.contrast_target)

        report = build_report(
            symbol,
            results,
            contrast.ratio,
            self.config.weights,
            contrast_target=self.config.contrast_target,
        )

        logger.info(
            f"Scoring complete: score={report.score}, grade={report.grade}, "
            f"contrast_ratio={report.contrast_ratio}"
        )
        return report

    def batch_score(
        self, images: Sequence[ImageSource], module_size: int, max_workers: Optional[int] = None
    ) -> list[Report]:
        """
        Score multiple images that share a module size.

        Args:
            images: Images to score
            module_size: Pixels per QR module, shared by all images
            max_workers: Override for the stress test thread pool size

        Returns:
            List of Reports in input order
        """
        logger.info(f"Batch scoring {len(images)} images")
        return [self.score(image, module_size, max_workers=max_workers) for image in images]


def score_image(image: ImageSource, module_size: int, config: Optional[ScoringConfig] = None) -> Report:
    """Score one image with the default decoder chain."""
    return QRScorer(config=config).score(image, module_size)
