"""
VIN Extraction Pipeline
=======================

OCR provider + text extractor + check-digit validator, producing a
VINExtractionResult. Provider failures are converted to result data here
and never reach the caller as exceptions.
"""

import logging
from typing import Iterable, Optional

from ..core.models import OCRResult, VINExtractionResult, WordBox
from ..core.vin_utils import extract_vin_from_text, is_valid_vin
from ..providers.ocr_providers import OCRProvider, OCRProviderError

logger = logging.getLogger(__name__)

NO_VIN_FOUND = "No valid VIN found in image"
VIN_FAILED_VALIDATION = "VIN failed validation check"
OCR_EXTRACTION_FAILED = "OCR extraction failed"


def find_vin_bounding_box(vin: str, boxes: Iterable[WordBox]) -> Optional[WordBox]:
    """
    First word box (provider order) whose text contains the VIN or is
    contained in it. Comparison is case-insensitive; blank boxes never match.
    """
    target = vin.upper()
    for box in boxes:
        text = box.text.strip().upper()
        if text and (target in text or text in target):
            return box
    return None


class VINExtractionPipeline:
    """
    Runs one OCR provider over an image and pulls out a validated VIN.

    Usage:
        pipeline = VINExtractionPipeline(OCRProviderFactory.create())
        result = pipeline.extract_vin_from_image(image_bytes)
        if result.is_valid:
            print(result.vin)
    """

    def __init__(self, provider: OCRProvider):
        self.provider = provider

    def extract_vin_from_image(self, image_bytes: bytes) -> VINExtractionResult:
        try:
            ocr_result = self.provider.extract_text(image_bytes)
        except OCRProviderError as e:
            logger.error(f"VIN extraction error: {e}", extra={"ocr_error": e.to_dict()})
            return self._failure(str(e))
        except Exception as e:
            logger.exception(f"VIN extraction error from {self.provider.name}")
            return self._failure(str(e) or OCR_EXTRACTION_FAILED)

        return self._from_ocr_result(ocr_result)

    def _from_ocr_result(self, ocr_result: OCRResult) -> VINExtractionResult:
        vin = extract_vin_from_text(ocr_result.text)

        if not vin:
            logger.info(f"No VIN in OCR text from {ocr_result.provider or self.provider.name}")
            return VINExtractionResult(
                vin=None,
                confidence=ocr_result.confidence,
                is_valid=False,
                extracted_text=ocr_result.text,
                error=NO_VIN_FOUND,
            )

        # The extractor only returns validated VINs; the result flag is
        # still derived from the validator itself
        valid = is_valid_vin(vin)
        box = find_vin_bounding_box(vin, ocr_result.bounding_boxes)

        logger.info(f"Extracted VIN {vin} (valid={valid}, confidence={ocr_result.confidence:.3f})")
        return VINExtractionResult(
            vin=vin,
            confidence=ocr_result.confidence,
            is_valid=valid,
            extracted_text=ocr_result.text,
            bounding_box=box,
            error=None if valid else VIN_FAILED_VALIDATION,
        )

    @staticmethod
    def _failure(message: str) -> VINExtractionResult:
        return VINExtractionResult(
            vin=None,
            confidence=0.0,
            is_valid=False,
            extracted_text="",
            error=message,
        )
