"""
VIN Processing Service
======================

End-to-end scan: image bytes -> extraction -> registry decode -> VehicleInfo.

The registry is only consulted for a VIN that passed the check digit.
"""

import logging
import re
from typing import Optional

from ..config import PipelineConfig, get_config
from ..core.models import NHTSADecodeResult, VehicleInfo, VINExtractionResult
from ..providers.factory import OCRProviderFactory
from ..registry.nhtsa import NHTSADecoder
from .extraction import VINExtractionPipeline

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_year(value: Optional[str]) -> Optional[int]:
    """Leading integer of a model-year string ("2021", "2021 "), else None."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


class VINProcessingService:
    """
    Composes the extraction pipeline and the registry decoder.

    Provider and decoder are fixed at construction; a service instance
    holds no per-scan state.

    Usage:
        with VINProcessingService.from_config() as service:
            info = service.process_vin_image(image_bytes)
            if info.error:
                print(info.error, info.ocr_text)
    """

    def __init__(self, pipeline: VINExtractionPipeline, decoder: NHTSADecoder):
        self.pipeline = pipeline
        self.decoder = decoder

    @classmethod
    def from_config(cls, config: Optional[PipelineConfig] = None,
                    provider_type: Optional[str] = None) -> "VINProcessingService":
        """Build the configured OCR provider, pipeline and decoder."""
        config = config or get_config()
        provider = OCRProviderFactory.create(provider_type, config=config)
        return cls(
            pipeline=VINExtractionPipeline(provider),
            decoder=NHTSADecoder.from_config(config.registry),
        )

    def extract_vin_from_image(self, image_bytes: bytes) -> VINExtractionResult:
        return self.pipeline.extract_vin_from_image(image_bytes)

    def decode_vin(self, vin: str) -> NHTSADecodeResult:
        return self.decoder.decode_vin(vin)

    def process_vin_image(self, image_bytes: bytes) -> VehicleInfo:
        extraction = self.extract_vin_from_image(image_bytes)

        if not extraction.vin or not extraction.is_valid:
            return VehicleInfo(
                vin=extraction.vin or "",
                is_valid=False,
                confidence=extraction.confidence,
                ocr_text=extraction.extracted_text,
                error=extraction.error,
            )

        nhtsa_data = self.decode_vin(extraction.vin)

        return VehicleInfo(
            vin=extraction.vin,
            year=parse_year(nhtsa_data.model_year),
            make=nhtsa_data.make or None,
            model=nhtsa_data.model or None,
            trim=nhtsa_data.trim or None,
            is_valid=True,
            confidence=extraction.confidence,
            ocr_text=extraction.extracted_text,
            nhtsa_data=nhtsa_data,
            error=nhtsa_data.error_text if nhtsa_data.has_error else None,
        )

    def close(self) -> None:
        self.decoder.close()

    def __enter__(self) -> "VINProcessingService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
