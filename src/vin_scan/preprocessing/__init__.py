"""
VIN Image Preprocessing Module
==============================

Image decoding and plate enhancement for the local OCR engine.

Usage:
    from vin_scan.preprocessing import VINPreprocessor, decode_image

    preprocessor = VINPreprocessor()
    processed = preprocessor.process(decode_image(image_bytes))
"""

from .vin_preprocessor import (
    VINPreprocessor,
    PreprocessConfig,
    PreprocessStrategy,
    ImageDecodeError,
    decode_image,
)

__all__ = [
    'VINPreprocessor',
    'PreprocessConfig',
    'PreprocessStrategy',
    'ImageDecodeError',
    'decode_image',
]
