"""Stress test battery: perturb the base image and check it still decodes.

Each TestSpec is run in isolation (transform, then decode) on a bounded
thread pool. Tasks only read the immutable base buffer and return their
own TestOutcome; results are merged after every task has finished.
"""

import concurrent.futures
import logging
import os
from functools import partial
from typing import Dict, List, Mapping, Optional

from qr_score import perturbations
from qr_score.config import ScoringConfig
from qr_score.constants import DOWNSCALE_FACTORS
from qr_score.decoders import DecoderChain
from qr_score.pixel_buffer import PixelBuffer
from qr_score.types import TestOutcome, TestSpec, Transform, freeze_results

logger = logging.getLogger(__name__)

__all__ = ['StressTestBattery', 'default_max_workers']


def default_max_workers() -> int:
    return min(8, (os.cpu_count() or 1) + 4)


def _signed_pairs(name: str, normal, strict) -> List[tuple]:
    """(identifier, signed amount) for the up/down and strict up/down variants."""
    return [
        (f"{name}_up", normal),
        (f"{name}_down", -normal),
        (f"{name}_strict_up", strict),
        (f"{name}_strict_down", -strict),
    ]


class StressTestBattery:
    """Runs the configured perturbations against a decoder chain."""

    def __init__(self, config: Optional[ScoringConfig] = None, chain: Optional[DecoderChain] = None):
        self.config = config if config is not None else ScoringConfig()
        self.chain = chain if chain is not None else DecoderChain()

    def _transforms(self, module_size: int) -> Dict[str, Transform]:
        cfg = self.config
        transforms: Dict[str, Transform] = {}

        for n in DOWNSCALE_FACTORS:
            transforms[f"downscale_{n}x"] = partial(
                perturbations.downscale, module_size=module_size, pixels_per_module=n
            )

        transforms["blur_light"] = partial(perturbations.gaussian_blur, sigma=cfg.blur_light_sigma)
        transforms["blur_heavy"] = partial(perturbations.gaussian_blur, sigma=cfg.blur_heavy_sigma)

        for identifier, amount in _signed_pairs("contrast", cfg.contrast, cfg.contrast_strict):
            transforms[identifier] = partial(perturbations.adjust_contrast, percent=amount)
        for identifier, amount in _signed_pairs("luminance", cfg.luminance, cfg.luminance_strict):
            transforms[identifier] = partial(perturbations.shift_luminance, delta=amount)
        for identifier, amount in _signed_pairs("hue", cfg.hue, cfg.hue_strict):
            transforms[identifier] = partial(perturbations.rotate_hue, degrees=amount)
        for identifier, amount in _signed_pairs("saturation", cfg.saturation, cfg.saturation_strict):
            transforms[identifier] = partial(perturbations.scale_saturation, percent=amount)

        return transforms

    def build_specs(self, module_size: int) -> List[TestSpec]:
        """
        Build the enabled stress tests for an image with the given module size.

        Args:
            module_size: Pixels per QR module in the base image

        Returns:
            TestSpecs in canonical order (downscale, blur, contrast,
            luminance, hue, saturation)
        """
        if module_size < 1:
            raise ValueError(f"Module size must be positive, got {module_size}")

        transforms = self._transforms(module_size)
        weights = self.config.weights
        return [
            TestSpec(identifier=identifier, transform=transform, weight=weights.weight_for(identifier))
            for identifier, transform in transforms.items()
            if self.config.is_enabled(identifier)
        ]

    def run_spec(self, spec: TestSpec, base: PixelBuffer) -> TestOutcome:
        """
        Apply one spec's transform and try to decode the result.

        Any failure is recorded as a failed test and never propagates.
        """
        try:
            perturbed = spec.transform(base)
            passed = self.chain.decode(perturbed) is not None
        except Exception as e:
            logger.warning(f"Stress test {spec.identifier} failed with error: {e}")
            passed = False
        logger.debug(f"Stress test {spec.identifier}: {'pass' if passed else 'fail'}")
        return TestOutcome(identifier=spec.identifier, passed=passed)

    def run_specs(
        self, specs: List[TestSpec], base: PixelBuffer, max_workers: Optional[int] = None
    ) -> Mapping[str, bool]:
        """
        Run specs against the base image and merge their outcomes.

        Args:
            specs: Stress tests to run
            base: Unperturbed image
            max_workers: Thread pool size, at least 1; 1 runs sequentially in the caller's thread

        Returns:
            Read-only mapping identifier -> passed, sorted by identifier
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        workers = max_workers or self.config.max_workers or default_max_workers()

        if workers == 1 or len(specs) <= 1:
            outcomes = [self.run_spec(spec, base) for spec in specs]
        else:
            outcomes = []
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_spec = {executor.submit(self.run_spec, spec, base): spec for spec in specs}
                for future in concurrent.futures.as_completed(future_to_spec):
                    outcomes.append(future.result())

        return freeze_results({outcome.identifier: outcome.passed for outcome in outcomes})

    def run(self, base: PixelBuffer, module_size: int, max_workers: Optional[int] = None) -> Mapping[str, bool]:
        """Build and run the full battery for a base image."""
        specs = self.build_specs(module_size)
        logger.info(f"Running {len(specs)} stress tests (module size {module_size}px)")
        results = self.run_specs(specs, base, max_workers=max_workers)
        passed = sum(results.values())
        logger.info(f"Stress tests complete: {passed}/{len(results)} passed")
        return results
