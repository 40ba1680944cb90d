"""qr-score - QR code scannability scoring under synthetic degradation"""

__version__ = "0.1.0"

from .config import ScoringConfig, WeightTable
from .decoders import DecodedSymbol, DecoderChain, decode_only
from .pixel_buffer import PixelBuffer
from .scorer import QRScorer, score_image
from .types import Report

__all__ = [
    "QRScorer",
    "score_image",
    "ScoringConfig",
    "WeightTable",
    "PixelBuffer",
    "DecoderChain",
    "DecodedSymbol",
    "decode_only",
    "Report",
]
