"""Shared fixtures: synthetic QR codes rendered with the qrcode package."""

import numpy as np
import pytest
import qrcode

from qr_score.pixel_buffer import PixelBuffer

QR_CONTENT = "https://example.com"
QR_BOX_SIZE = 8


def render_qr(content: str = QR_CONTENT, box_size: int = QR_BOX_SIZE):
    """Render a black-on-white QR code as an RGB PIL image."""
    qr = qrcode.QRCode(
        box_size=box_size,
        border=4,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
    )
    qr.add_data(content)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").convert("RGB")


@pytest.fixture
def qr_image():
    return render_qr()


@pytest.fixture
def qr_buffer(qr_image):
    return PixelBuffer.from_image(qr_image)


@pytest.fixture
def split_buffer():
    """100x100 image, left half black and right half white."""
    pixels = np.zeros((100, 100), dtype=np.uint8)
    pixels[:, 50:] = 255
    return PixelBuffer(pixels)
