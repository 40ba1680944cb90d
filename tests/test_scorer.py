"""Tests for the QRScorer engine."""

import io

import numpy as np
import pytest

from conftest import QR_BOX_SIZE, QR_CONTENT
from qr_score.config import ScoringConfig
from qr_score.constants import TEST_IDENTIFIERS
from qr_score.decoders import DecodedSymbol
from qr_score.pixel_buffer import PixelBuffer
from qr_score.scorer import QRScorer, score_image


class NeverBackend:
    name = "never"

    def try_decode(self, buffer):
        return None


class AlwaysBackend:
    name = "always"

    def try_decode(self, buffer):
        return DecodedSymbol("fake", "Q")


def test_undecodable_image_short_circuits():
    """Test the exact zero-score report when no backend can read the image."""
    scorer = QRScorer(backends=[NeverBackend(), NeverBackend()])
    buffer = PixelBuffer(np.full((64, 64), 255, dtype=np.uint8))

    report = scorer.score(buffer, module_size=4)

    assert report.to_dict() == {
        "score": 0,
        "grade": "F",
        "decodable": False,
        "error": "No QR code found in image",
    }


def test_undecodable_ignores_configuration():
    """Test that weights and enabled tests do not change the error report."""
    config = ScoringConfig(enabled_tests=("blur_light",))
    scorer = QRScorer(config=config, backends=[NeverBackend(), NeverBackend()])
    buffer = PixelBuffer(np.zeros((32, 32), dtype=np.uint8))

    assert scorer.score(buffer, module_size=2).score == 0
    assert scorer.score(buffer, module_size=2).decodable is False


def test_always_decodable_split_image_scores_100(split_buffer):
    """Test all-pass battery with full contrast under default weights."""
    scorer = QRScorer(backends=[AlwaysBackend(), NeverBackend()])

    report = scorer.score(split_buffer, module_size=5)

    assert report.score == 100
    assert report.grade == "A"
    assert report.content == "fake"
    assert report.error_correction == "Q"
    assert report.contrast_ratio == 100
    assert list(report.results) == sorted(TEST_IDENTIFIERS)


def test_rejects_invalid_module_size(split_buffer):
    """Test module size validation."""
    with pytest.raises(ValueError, match="Module size"):
        QRScorer().score(split_buffer, module_size=0)


def test_score_real_qr(qr_buffer):
    """Test the full pipeline on a clean rendered QR code."""
    report = score_image(qr_buffer, module_size=QR_BOX_SIZE)

    assert report.decodable is True
    assert report.content == QR_CONTENT
    assert report.error_correction in (None, "M")
    assert report.contrast_ratio == 100
    assert set(report.results) == set(TEST_IDENTIFIERS)
    assert report.results["blur_light"] is True
    assert report.results["contrast_up"] is True
    assert report.score >= 70
    assert report.grade in ("A", "B")


def test_rerun_is_identical(qr_buffer):
    """Test that scoring the same image twice gives identical reports."""
    scorer = QRScorer()

    first = scorer.score(qr_buffer, module_size=QR_BOX_SIZE)
    second = scorer.score(qr_buffer, module_size=QR_BOX_SIZE, max_workers=1)

    assert first.to_dict() == second.to_dict()


def test_accepts_pil_bytes_and_paths(qr_image, tmp_path):
    """Test the supported image inputs."""
    img_path = tmp_path / "qr.png"
    qr_image.save(img_path)
    encoded = io.BytesIO()
    qr_image.save(encoded, format="PNG")

    config = ScoringConfig(enabled_tests=("blur_light",))
    scorer = QRScorer(config=config)

    reports = scorer.batch_score([qr_image, str(img_path), img_path, encoded.getvalue()], QR_BOX_SIZE)

    assert len(reports) == 4
    assert all(report.content == QR_CONTENT for report in reports)
    assert all(report.to_dict() == reports[0].to_dict() for report in reports)


def test_batch_score_passes_max_workers_through(split_buffer):
    """Test that batch scoring honors the thread pool override."""
    scorer = QRScorer(backends=[AlwaysBackend(), NeverBackend()])

    reports = scorer.batch_score([split_buffer, split_buffer], module_size=5, max_workers=1)

    assert [report.score for report in reports] == [100, 100]
    with pytest.raises(ValueError, match="max_workers"):
        scorer.batch_score([split_buffer], module_size=5, max_workers=0)
