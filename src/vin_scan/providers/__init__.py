"""
VIN Scan Providers Module
=========================

OCR provider abstraction layer. Exactly one provider is active per
service, chosen by the OCR_PROVIDER setting:

- google: Google Cloud Vision (TEXT_DETECTION)
- aws: AWS Textract (DetectDocumentText)
- paddleocr: local PaddleOCR engine (default and fallback)

Usage:
    from vin_scan.providers import OCRProviderFactory

    provider = OCRProviderFactory.create("aws")
    result = provider.extract_text(image_bytes)
    print(result.text, result.confidence)
"""

from .ocr_providers import (
    OCRProviderType,
    OCRProviderError,
    OCRProvider,
    OCRResult,
    WordBox,
)
from .google_vision import GoogleVisionOCRProvider
from .textract import TextractOCRProvider
from .paddle import PaddleOCRProvider
from .factory import OCRProviderFactory

__all__ = [
    "OCRProviderType",
    "OCRProviderError",
    "OCRProvider",
    "OCRResult",
    "WordBox",
    "GoogleVisionOCRProvider",
    "TextractOCRProvider",
    "PaddleOCRProvider",
    "OCRProviderFactory",
]
