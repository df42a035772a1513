"""
VIN Scan
========

VIN (Vehicle Identification Number) acquisition from plate photos.

Package Structure:
    vin_scan/
    ├── core/           # VIN constants, check digit, extraction, result records
    ├── providers/      # OCR backends (Google Vision, Textract, PaddleOCR)
    ├── preprocessing/  # Image decoding and plate enhancement
    ├── pipeline/       # Extraction pipeline and processing service
    ├── registry/       # NHTSA vPIC decoder
    └── cli.py          # vin-scan command

Quick Start:
    from vin_scan import VINProcessingService

    with VINProcessingService.from_config() as service:
        info = service.process_vin_image(open("plate.jpg", "rb").read())
        print(info.vin, info.year, info.make, info.model)

    # Validation only
    from vin_scan import is_valid_vin
    is_valid_vin("1HGBH41JXMN109186")  # True

Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "VIN Scan Team"

# Core exports (lightweight, always available)
from .core import (
    VINConstants,
    VIN_LENGTH,
    VIN_VALID_CHARS,
    VINValidationResult,
    calculate_check_digit,
    is_valid_vin,
    validate_vin,
    find_vin_candidates,
    extract_vin_from_text,
    WordBox,
    OCRResult,
    VINExtractionResult,
    NHTSADecodeResult,
    VehicleInfo,
)

__all__ = [
    "__version__",
    "__author__",
    # Core
    "VINConstants",
    "VIN_LENGTH",
    "VIN_VALID_CHARS",
    "VINValidationResult",
    "calculate_check_digit",
    "is_valid_vin",
    "validate_vin",
    "find_vin_candidates",
    "extract_vin_from_text",
    # Records
    "WordBox",
    "OCRResult",
    "VINExtractionResult",
    "NHTSADecodeResult",
    "VehicleInfo",
    # Lazy
    "VINExtractionPipeline",
    "VINProcessingService",
    "NHTSADecoder",
    "OCRProviderFactory",
]


# Lazy imports for the pipeline (cloud client libraries, OpenCV)
def __getattr__(name: str):
    """Lazy import for pipeline modules."""
    if name == "VINExtractionPipeline":
        from .pipeline.extraction import VINExtractionPipeline
        return VINExtractionPipeline
    elif name == "VINProcessingService":
        from .pipeline.service import VINProcessingService
        return VINProcessingService
    elif name == "NHTSADecoder":
        from .registry.nhtsa import NHTSADecoder
        return NHTSADecoder
    elif name == "OCRProviderFactory":
        from .providers.factory import OCRProviderFactory
        return OCRProviderFactory
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
