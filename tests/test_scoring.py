"""Tests for score aggregation, grading and report assembly."""

import pytest

from qr_score.config import ScoringConfig, WeightTable
from qr_score.constants import TEST_IDENTIFIERS
from qr_score.decoders import DecodedSymbol
from qr_score.scoring import (
    build_report,
    calculate_score,
    contrast_percent,
    grade_from_score,
    not_decodable_report,
)

SYMBOL = DecodedSymbol("https://example.com", "M")


def _all(passed=True):
    return {identifier: passed for identifier in TEST_IDENTIFIERS}


def test_default_weights_sum_to_100():
    """Test the default weight table."""
    weights = WeightTable()

    assert weights.total() == pytest.approx(100.0)
    assert weights.contrast_ratio == 70.0
    assert sum(weights.tests.values()) == pytest.approx(30.0)
    assert set(weights.tests) == set(TEST_IDENTIFIERS)


@pytest.mark.parametrize(
    "score,grade",
    [
        (100, "A"), (80, "A"), (79, "B"), (60, "B"), (59, "C"),
        (40, "C"), (39, "D"), (20, "D"), (19, "F"), (0, "F"),
    ],
)
def test_grade_boundaries(score, grade):
    """Test that each band includes its lower bound."""
    assert grade_from_score(score) == grade


def test_all_pass_with_full_contrast_scores_100():
    """Test the perfect score."""
    assert calculate_score(_all(), 1.0, WeightTable()) == 100
    assert calculate_score(_all(), 0.7, WeightTable()) == 100


def test_half_target_contrast_scores_65():
    """Test ratio 0.35: half the contrast weight plus all test weight."""
    assert calculate_score(_all(), 0.35, WeightTable()) == 65


def test_nothing_passing_scores_zero():
    """Test the minimum score."""
    assert calculate_score(_all(False), 0.0, WeightTable()) == 0
    assert calculate_score({}, 0.0, WeightTable()) == 0


def test_contrast_alone_contributes_its_weight():
    """Test that full contrast with no passing tests gives the contrast weight."""
    assert calculate_score(_all(False), 0.9, WeightTable()) == 70


def test_zero_total_weight_scores_zero():
    """Test the degenerate empty weight table."""
    weights = WeightTable(tests={}, contrast_ratio=0.0)

    assert calculate_score(_all(), 1.0, weights) == 0


def test_non_100_weight_table_is_not_renormalized():
    """Test scoring against a weight table that does not sum to 100."""
    weights = WeightTable(tests={"blur_light": 10.0, "blur_heavy": 30.0}, contrast_ratio=0.0)
    results = {"blur_light": True, "blur_heavy": False, "hue_up": True}

    assert calculate_score(results, 1.0, weights) == 25


def test_unweighted_tests_contribute_nothing():
    """Test that passing tests absent from the weight table add zero."""
    weights = WeightTable(tests={"blur_light": 50.0}, contrast_ratio=50.0)

    assert calculate_score({"hue_up": True}, 0.0, weights) == 0


def test_custom_contrast_target():
    """Test that the target ratio sets where contrast earns full weight."""
    assert calculate_score(_all(False), 0.5, WeightTable(), contrast_target=1.0) == 35


def test_weight_table_validation():
    """Test rejection of negative weights and unknown identifiers."""
    with pytest.raises(ValueError):
        WeightTable(tests={"blur_light": -1.0})
    with pytest.raises(ValueError):
        WeightTable(tests={"not_a_test": 1.0})
    with pytest.raises(ValueError):
        WeightTable(contrast_ratio=-5.0)


def test_config_validation():
    """Test rejection of invalid configuration values."""
    with pytest.raises(ValueError):
        ScoringConfig(blur_light_sigma=0.0)
    with pytest.raises(ValueError):
        ScoringConfig(enabled_tests=("blur_light", "sharpen"))
    with pytest.raises(ValueError):
        ScoringConfig(max_workers=0)


def test_not_decodable_report_shape():
    """Test the reduced report for undecodable images."""
    report = not_decodable_report()

    assert report.to_dict() == {
        "score": 0,
        "grade": "F",
        "decodable": False,
        "error": "No QR code found in image",
    }
    assert build_report(None, _all(), 1.0, WeightTable()) == report


def test_full_report_shape():
    """Test report assembly for a decodable image."""
    results = _all()
    report = build_report(SYMBOL, results, 0.35, WeightTable())
    data = report.to_dict()

    assert list(data) == [
        "score", "grade", "decodable", "content", "results", "contrast_ratio", "error_correction",
    ]
    assert data["score"] == 65
    assert data["grade"] == "B"
    assert data["decodable"] is True
    assert data["content"] == "https://example.com"
    assert data["contrast_ratio"] == 35
    assert data["error_correction"] == "M"
    assert list(data["results"]) == sorted(TEST_IDENTIFIERS)


def test_reported_contrast_ratio_is_not_clamped():
    """Test that a high ratio is reported as measured, not capped at the target."""
    report = build_report(SYMBOL, _all(), 0.93, WeightTable())

    assert report.contrast_ratio == 93
    assert report.score == 100


@pytest.mark.parametrize(
    "ratio,percent",
    [(36 / 1000 - 1 / 1000, 4), (0.035, 4), (0.285, 29), (0.784, 78), (0.0, 0), (1.0, 100)],
)
def test_reported_contrast_ratio_rounds_half_up_at_bin_resolution(ratio, percent):
    """Test that float error in the ratio never pulls a half below the rounding point."""
    report = build_report(SYMBOL, _all(), ratio, WeightTable())

    assert report.contrast_ratio == percent
    assert contrast_percent(ratio) == percent


def test_weight_table_is_immutable():
    """Test that the per-test weights cannot be edited after construction."""
    source = {"blur_light": 30.0}
    weights = WeightTable(tests=source, contrast_ratio=70.0)

    with pytest.raises(TypeError):
        weights.tests["blur_light"] = 500.0
    source["blur_light"] = 500.0

    assert weights.total() == pytest.approx(100.0)
