"""QR decoding through an ordered fallback chain of independent backends.

Order: zxing-cpp local-average binarizer -> zxing-cpp global histogram ->
OpenCV -> OpenCV on the inverted image. The first backend that reads the
symbol wins; backends are never cross-checked against each other.
"""

import logging
from typing import NamedTuple, Optional, Protocol, Sequence

import cv2
import zxingcpp

from qr_score.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

__all__ = [
    'DecodedSymbol',
    'DecoderBackend',
    'ZXingBackend',
    'OpenCVBackend',
    'DecoderChain',
    'default_backends',
    'decode_only',
    'normalize_ec_level',
]

EC_LEVELS = ("L", "M", "Q", "H")


class DecodedSymbol(NamedTuple):
    """A successfully decoded QR symbol."""

    content: str
    error_correction: Optional[str]  # 'L', 'M', 'Q', 'H' or None if unreported


class DecoderBackend(Protocol):
    """Anything that can attempt to read a QR symbol from a buffer."""

    name: str

    def try_decode(self, buffer: PixelBuffer) -> Optional[DecodedSymbol]:
        ...


def normalize_ec_level(level: Optional[str]) -> Optional[str]:
    """
    Map a backend's error-correction label to L/M/Q/H.

    Accepts single letters as well as spelled-out names ("Medium", "High").
    """
    if not level:
        return None
    first = str(level).strip()[:1].upper()
    return first if first in EC_LEVELS else None


class ZXingBackend:
    """zxing-cpp reader restricted to QR codes."""

    def __init__(self, binarizer: "zxingcpp.Binarizer" = zxingcpp.Binarizer.LocalAverage):
        self.binarizer = binarizer
        self.name = f"zxing-{getattr(binarizer, 'name', binarizer)}"

    def try_decode(self, buffer: PixelBuffer) -> Optional[DecodedSymbol]:
        results = zxingcpp.read_barcodes(
            buffer.to_gray(),
            formats=zxingcpp.BarcodeFormat.QRCode,
            binarizer=self.binarizer,
        )
        for result in results:
            if result.text:
                return DecodedSymbol(
                    content=result.text,
                    error_correction=normalize_ec_level(getattr(result, "ec_level", None)),
                )
        return None


class OpenCVBackend:
    """
    cv2.QRCodeDetector, optionally run on the inverted image.

    OpenCV does not report the error-correction level.
    """

    def __init__(self, invert: bool = False):
        self.invert = invert
        self.name = "opencv-inverted" if invert else "opencv"

    def try_decode(self, buffer: PixelBuffer) -> Optional[DecodedSymbol]:
        gray = buffer.to_gray()
        if self.invert:
            gray = 255 - gray

        # Detector instances hold state, so each call gets its own
        detector = cv2.QRCodeDetector()
        data, _, _ = detector.detectAndDecode(gray)
        if data:
            return DecodedSymbol(content=data, error_correction=None)
        return None


def default_backends() -> list:
    return [
        ZXingBackend(zxingcpp.Binarizer.LocalAverage),
        ZXingBackend(zxingcpp.Binarizer.GlobalHistogram),
        OpenCVBackend(),
        OpenCVBackend(invert=True),
    ]


class DecoderChain:
    """
    Tries each backend in a fixed priority order until one succeeds.

    The order decides which content and error-correction level are reported
    when backends disagree. A backend that raises counts as "not found".
    """

    def __init__(self, backends: Optional[Sequence[DecoderBackend]] = None):
        backends = list(backends) if backends is not None else default_backends()
        if len(backends) < 2:
            raise ValueError(f"Decoder chain needs at least 2 backends, got {len(backends)}")
        self.backends = tuple(backends)

    def decode(self, buffer: PixelBuffer) -> Optional[DecodedSymbol]:
        """
        Decode a QR symbol from the buffer.

        Returns:
            DecodedSymbol from the first backend that succeeds, or None
        """
        for backend in self.backends:
            try:
                symbol = backend.try_decode(buffer)
            except Exception as e:
                logger.debug(f"Backend {backend.name} failed: {e}")
                continue
            if symbol is not None:
                logger.debug(f"Decoded with backend {backend.name}")
                return symbol
        return None

    def is_decodable(self, buffer: PixelBuffer) -> bool:
        return self.decode(buffer) is not None


def decode_only(buffer: PixelBuffer) -> Optional[DecodedSymbol]:
    """Decode with the default chain, without any stress testing."""
    return DecoderChain().decode(buffer)
