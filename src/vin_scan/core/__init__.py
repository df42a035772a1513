"""
VIN Scan Core Module
====================

VIN constants, check-digit validation, text extraction and the result
records passed between pipeline stages.
"""

from .vin_utils import (
    # Constants
    VINConstants,
    VIN_LENGTH,
    VIN_VALID_CHARS,
    VIN_INVALID_CHARS,
    # Validation
    VINValidationResult,
    calculate_check_digit,
    is_valid_vin,
    validate_vin,
    # Extraction
    find_vin_candidates,
    extract_vin_from_text,
)
from .models import (
    WordBox,
    OCRResult,
    VINExtractionResult,
    NHTSADecodeResult,
    VehicleInfo,
)

__all__ = [
    # Constants
    "VINConstants",
    "VIN_LENGTH",
    "VIN_VALID_CHARS",
    "VIN_INVALID_CHARS",
    # Validation
    "VINValidationResult",
    "calculate_check_digit",
    "is_valid_vin",
    "validate_vin",
    # Extraction
    "find_vin_candidates",
    "extract_vin_from_text",
    # Records
    "WordBox",
    "OCRResult",
    "VINExtractionResult",
    "NHTSADecodeResult",
    "VehicleInfo",
]
