#!/usr/bin/env python3
"""Score the scannability of a rasterized QR code.

Usage:
    python score_image.py qr.png --module-size 8
    python score_image.py qr.png --module-size 8 --workers 1
    python score_image.py qr.png --module-size 8 --contrast-weight 50
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from qr_score import QRScorer, ScoringConfig, WeightTable

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Measure how well a QR code survives synthetic degradation",
    )

    parser.add_argument(
        "image_path",
        type=str,
        help="Path to input image file (.png, .jpg, .webp)",
    )

    parser.add_argument(
        "--module-size",
        "-m",
        type=int,
        required=True,
        help="Width of one QR module in pixels",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Stress test thread pool size (default: automatic)",
    )

    parser.add_argument(
        "--contrast-weight",
        type=float,
        default=None,
        help="Override the contrast ratio weight (default: 70)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    image_path = Path(args.image_path)
    if not image_path.exists():
        logger.error(f"Image not found: {image_path}")
        sys.exit(1)

    config = ScoringConfig()
    if args.contrast_weight is not None:
        config = ScoringConfig(weights=WeightTable(contrast_ratio=args.contrast_weight))

    scorer = QRScorer(config=config)
    try:
        report = scorer.score(image_path, module_size=args.module_size, max_workers=args.workers)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Scoring failed: {e}")
        sys.exit(1)

    print(json.dumps(report.to_dict()))
    sys.exit(0 if report.decodable else 1)


if __name__ == "__main__":
    main()
