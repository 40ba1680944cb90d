"""Shared result types for stress testing and scoring."""

from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, NamedTuple, Optional

from qr_score.pixel_buffer import PixelBuffer

Transform = Callable[[PixelBuffer], PixelBuffer]


class TestSpec(NamedTuple):
    """One weighted (perturbation -> decode) check in the battery."""

    __test__ = False  # Keep pytest from collecting this as a test class

    identifier: str  # Stable report key, e.g. "blur_heavy"
    transform: Transform
    weight: float


class TestOutcome(NamedTuple):
    """Result of running a single TestSpec."""

    __test__ = False

    identifier: str
    passed: bool


class ContrastMeasurement(NamedTuple):
    """Contrast of the base image."""

    ratio: float  # Raw p95 - p5 luminance spread, [0, 1]
    score: float  # ratio / target, clamped to [0, 1]


def freeze_results(results: Mapping[str, bool]) -> Mapping[str, bool]:
    """Read-only copy of an outcome mapping with keys in sorted order."""
    return MappingProxyType({key: bool(results[key]) for key in sorted(results)})


class Report(NamedTuple):
    """Final scannability report, built once per scoring run."""

    score: int  # 0-100
    grade: str  # A, B, C, D or F
    decodable: bool
    content: Optional[str] = None
    results: Mapping[str, bool] = MappingProxyType({})
    contrast_ratio: Optional[int] = None  # round(ratio * 100), not clamped
    error_correction: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-ready representation.

        Undecodable images use the reduced shape (score, grade, decodable,
        error); everything else carries the full breakdown.
        """
        if not self.decodable:
            return {
                "score": self.score,
                "grade": self.grade,
                "decodable": self.decodable,
                "error": self.error,
            }
        return {
            "score": self.score,
            "grade": self.grade,
            "decodable": self.decodable,
            "content": self.content,
            "results": dict(self.results),
            "contrast_ratio": self.contrast_ratio,
            "error_correction": self.error_correction,
        }
