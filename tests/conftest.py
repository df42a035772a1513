"""
Shared fixtures for the VIN Scan test suite.
"""

from typing import List, Optional

import cv2
import numpy as np
import pytest

from vin_scan.config import reset_config
from vin_scan.core.models import OCRResult
from vin_scan.providers.ocr_providers import OCRProvider


# Check digits verified by hand against the ISO 3779 weights
VALID_VINS = [
    "1HGBH41JXMN109186",
    "1M8GDM9AXKP042788",
    "1HGCM82673A123456",
    "1FTFW1ET1DFC12345",
    "1G1ZD5ST9GF123456",
    "11111111111111111",
]


class FakeOCRProvider(OCRProvider):
    """Provider test double: returns a canned result or raises."""

    def __init__(self, result: Optional[OCRResult] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[bytes] = []

    @property
    def name(self) -> str:
        return "Fake"

    def extract_text(self, image_bytes: bytes) -> OCRResult:
        self.calls.append(image_bytes)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def valid_vins():
    return list(VALID_VINS)


@pytest.fixture
def fake_provider():
    """Factory fixture: fake_provider(result=..., error=...)."""
    def _make(result: Optional[OCRResult] = None, error: Optional[Exception] = None):
        return FakeOCRProvider(result=result, error=error)
    return _make


@pytest.fixture
def png_bytes():
    """A 400x100 light-gray PNG."""
    image = np.full((100, 400, 3), 200, dtype=np.uint8)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


@pytest.fixture(autouse=True)
def _fresh_config():
    """Each test sees configuration rebuilt from its own environment."""
    reset_config()
    yield
    reset_config()
