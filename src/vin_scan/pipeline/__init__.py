"""
VIN Scan Pipeline Module
========================

Extraction pipeline (OCR -> validated VIN) and the end-to-end processing
service (extraction -> registry decode -> VehicleInfo).
"""

from .extraction import VINExtractionPipeline, find_vin_bounding_box
from .service import VINProcessingService, parse_year

__all__ = [
    "VINExtractionPipeline",
    "find_vin_bounding_box",
    "VINProcessingService",
    "parse_year",
]
