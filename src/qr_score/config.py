"""Thresholds and weight table for the stress test battery and scoring."""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from pydantic import Field, field_validator
from pydantic.dataclasses import dataclass

from qr_score.constants import (
    CONTRAST_TARGET_RATIO,
    CONTRAST_WEIGHT_KEY,
    DEFAULT_BLUR_HEAVY_SIGMA,
    DEFAULT_BLUR_LIGHT_SIGMA,
    DEFAULT_CONTRAST,
    DEFAULT_CONTRAST_STRICT,
    DEFAULT_CONTRAST_WEIGHT,
    DEFAULT_HUE,
    DEFAULT_HUE_STRICT,
    DEFAULT_LUMINANCE,
    DEFAULT_LUMINANCE_STRICT,
    DEFAULT_SATURATION,
    DEFAULT_SATURATION_STRICT,
    DEFAULT_TEST_WEIGHTS,
    TEST_IDENTIFIERS,
)

__all__ = ['WeightTable', 'ScoringConfig']


def _check_identifiers(identifiers) -> None:
    unknown = sorted(set(identifiers) - set(TEST_IDENTIFIERS))
    if unknown:
        raise ValueError(f"Unknown stress test identifiers: {', '.join(unknown)}")


@dataclass(frozen=True)
class WeightTable:
    """
    Per-test weights plus the contrast weight.

    The defaults sum to 100 so the score reads as a percentage. Other sums
    are accepted and scored as-is, never renormalized.
    """

    tests: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_TEST_WEIGHTS))
    contrast_ratio: float = Field(default=DEFAULT_CONTRAST_WEIGHT, ge=0.0)

    @field_validator("tests")
    @classmethod
    def validate_tests(cls, v: Dict[str, float]) -> Mapping[str, float]:
        """Weights must be non-negative and keyed by known test identifiers; stored read-only."""
        _check_identifiers(v)
        negative = sorted(key for key, weight in v.items() if weight < 0)
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")
        return MappingProxyType(dict(v))

    def weight_for(self, identifier: str) -> float:
        """Weight of a test, or of the contrast metric for the reserved key."""
        if identifier == CONTRAST_WEIGHT_KEY:
            return self.contrast_ratio
        return self.tests.get(identifier, 0.0)

    def total(self) -> float:
        return sum(self.tests.values()) + self.contrast_ratio

    def as_dict(self) -> Dict[str, float]:
        weights = dict(self.tests)
        weights[CONTRAST_WEIGHT_KEY] = self.contrast_ratio
        return weights


@dataclass(frozen=True)
class ScoringConfig:
    """Perturbation strengths, enabled tests and weights for one scoring run."""

    blur_light_sigma: float = Field(default=DEFAULT_BLUR_LIGHT_SIGMA, gt=0.0)
    blur_heavy_sigma: float = Field(default=DEFAULT_BLUR_HEAVY_SIGMA, gt=0.0)
    contrast: float = Field(default=DEFAULT_CONTRAST, ge=0.0, le=100.0)
    contrast_strict: float = Field(default=DEFAULT_CONTRAST_STRICT, ge=0.0, le=100.0)
    luminance: int = Field(default=DEFAULT_LUMINANCE, ge=0, le=255)
    luminance_strict: int = Field(default=DEFAULT_LUMINANCE_STRICT, ge=0, le=255)
    hue: float = Field(default=DEFAULT_HUE, ge=0.0, le=360.0)
    hue_strict: float = Field(default=DEFAULT_HUE_STRICT, ge=0.0, le=360.0)
    saturation: float = Field(default=DEFAULT_SATURATION, ge=0.0, le=100.0)
    saturation_strict: float = Field(default=DEFAULT_SATURATION_STRICT, ge=0.0, le=100.0)
    contrast_target: float = Field(default=CONTRAST_TARGET_RATIO, gt=0.0, le=1.0)
    max_workers: Optional[int] = Field(default=None, ge=1)
    enabled_tests: Tuple[str, ...] = Field(default=TEST_IDENTIFIERS)
    weights: WeightTable = Field(default_factory=WeightTable)

    @field_validator("enabled_tests")
    @classmethod
    def validate_enabled_tests(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Only known identifiers may be enabled."""
        _check_identifiers(v)
        return v

    def is_enabled(self, identifier: str) -> bool:
        return identifier in self.enabled_tests
