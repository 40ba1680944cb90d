"""Shared constants for QR stress testing and scoring."""

# Input limits
MAX_DIMENSION = 10_000  # Largest accepted width or height in pixels
SUPPORTED_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp")

# Perturbation defaults
DEFAULT_BLUR_LIGHT_SIGMA = 1.0
DEFAULT_BLUR_HEAVY_SIGMA = 2.0
DEFAULT_CONTRAST = 30.0  # Percent
DEFAULT_CONTRAST_STRICT = 50.0
DEFAULT_LUMINANCE = 20  # L* levels (8-bit scale)
DEFAULT_LUMINANCE_STRICT = 40
DEFAULT_HUE = 45.0  # Degrees
DEFAULT_HUE_STRICT = 90.0
DEFAULT_SATURATION = 30.0  # Percent
DEFAULT_SATURATION_STRICT = 50.0
DOWNSCALE_FACTORS = (1, 2, 3, 4)  # Pixels per module after downscaling
BLUR_RADIUS_SIGMAS = 3.0  # Kernel radius in units of sigma (>99% of the mass)
CONTRAST_PIVOT = 128.0

# Contrast analysis
CONTRAST_TARGET_RATIO = 0.7  # Ratio that earns the full contrast weight
LUMINANCE_BINS = 1000  # Histogram resolution for percentile selection
LOW_PERCENTILE_DIVISOR = 20  # 1/20 = 5th percentile

# Scoring
CONTRAST_WEIGHT_KEY = "contrast_ratio"
DEFAULT_CONTRAST_WEIGHT = 70.0
EXPECTED_WEIGHT_TOTAL = 100.0
NOT_DECODABLE_ERROR = "No QR code found in image"
GRADE_THRESHOLDS = (
    (80, "A"),
    (60, "B"),
    (40, "C"),
    (20, "D"),
)
FAILING_GRADE = "F"

# Stress test identifiers, in the order the battery builds them
TEST_IDENTIFIERS = (
    "downscale_1x",
    "downscale_2x",
    "downscale_3x",
    "downscale_4x",
    "blur_light",
    "blur_heavy",
    "contrast_up",
    "contrast_down",
    "contrast_strict_up",
    "contrast_strict_down",
    "luminance_up",
    "luminance_down",
    "luminance_strict_up",
    "luminance_strict_down",
    "hue_up",
    "hue_down",
    "hue_strict_up",
    "hue_strict_down",
    "saturation_up",
    "saturation_down",
    "saturation_strict_up",
    "saturation_strict_down",
)

DEFAULT_TEST_WEIGHTS = {
    "downscale_1x": 1.0,
    "downscale_2x": 2.0,
    "downscale_3x": 2.0,
    "downscale_4x": 2.0,
    "blur_light": 2.0,
    "blur_heavy": 1.0,
    "contrast_up": 2.0,
    "contrast_down": 2.0,
    "contrast_strict_up": 1.0,
    "contrast_strict_down": 1.0,
    "luminance_up": 2.0,
    "luminance_down": 2.0,
    "luminance_strict_up": 1.0,
    "luminance_strict_down": 1.0,
    "hue_up": 1.0,
    "hue_down": 1.0,
    "hue_strict_up": 1.0,
    "hue_strict_down": 1.0,
    "saturation_up": 1.0,
    "saturation_down": 1.0,
    "saturation_strict_up": 1.0,
    "saturation_strict_down": 1.0,
}
