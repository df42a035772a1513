"""
VIN Scan Registry Module
========================

Vehicle registry lookups (NHTSA vPIC).
"""

from .nhtsa import (
    NHTSADecoder,
    NHTSA_API_BASE_URL,
    NHTSA_FIELD_MAPPING,
    parse_decode_results,
)

__all__ = [
    "NHTSADecoder",
    "NHTSA_API_BASE_URL",
    "NHTSA_FIELD_MAPPING",
    "parse_decode_results",
]
