"""
Result records passed between the OCR, extraction, decode and service stages.

All records are frozen: each is built once per scan and handed on.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class WordBox:
    """
    A single recognized word and its axis-aligned box.

    Coordinates are in provider units: fractions of the image for Textract
    and the local engine, pixels for Google Vision.
    """
    x: float
    y: float
    width: float
    height: float
    text: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "text": self.text,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class OCRResult:
    """
    Standardized OCR result across all providers.

    Attributes:
        text: Full recognized text
        confidence: Confidence score (0.0 to 1.0)
        bounding_boxes: Word boxes in provider order
        provider: Name of the OCR provider used
        metadata: Additional provider-specific metadata
    """
    text: str
    confidence: float
    bounding_boxes: Tuple[WordBox, ...] = ()
    provider: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls, provider: str = "", **metadata) -> "OCRResult":
        """Result for an image in which no text was found."""
        return cls(text="", confidence=0.0, provider=provider, metadata=metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": self.text,
            "confidence": self.confidence,
            "provider": self.provider,
            "bounding_boxes": [box.to_dict() for box in self.bounding_boxes],
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class VINExtractionResult:
    """Outcome of running OCR plus VIN extraction on one image."""
    vin: Optional[str]
    confidence: float
    is_valid: bool
    extracted_text: str
    bounding_box: Optional[WordBox] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vin": self.vin,
            "confidence": self.confidence,
            "is_valid": self.is_valid,
            "extracted_text": self.extracted_text,
            "bounding_box": self.bounding_box.to_dict() if self.bounding_box else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class NHTSADecodeResult:
    """
    Vehicle attributes decoded by the NHTSA vPIC registry.

    Any attribute the registry did not return stays None. ``error_code``
    may be set alongside populated attributes: vPIC reports partial
    decodes as warnings.
    """
    make: Optional[str] = None
    model: Optional[str] = None
    model_year: Optional[str] = None
    vehicle_type: Optional[str] = None
    trim: Optional[str] = None
    engine_info: Optional[str] = None
    transmission_info: Optional[str] = None
    drive_type: Optional[str] = None
    fuel_type: Optional[str] = None
    plant_country: Optional[str] = None
    plant_company_name: Optional[str] = None
    plant_state: Optional[str] = None
    plant_city: Optional[str] = None
    error_code: Optional[str] = None
    error_text: Optional[str] = None
    additional_error_text: Optional[str] = None

    @property
    def has_error(self) -> bool:
        return self.error_code is not None and self.error_code != "0"

    def to_dict(self, include_unset: bool = False) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if include_unset:
            return data
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class VehicleInfo:
    """Terminal artifact of a scan, handed to the caller for persistence."""
    vin: str
    is_valid: bool
    confidence: float
    ocr_text: str
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    nhtsa_data: Optional[NHTSADecodeResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vin": self.vin,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "trim": self.trim,
            "is_valid": self.is_valid,
            "confidence": self.confidence,
            "ocr_text": self.ocr_text,
            "nhtsa_data": self.nhtsa_data.to_dict() if self.nhtsa_data else None,
            "error": self.error,
        }

    def to_summary(self) -> Dict[str, Any]:
        """The subset a caller returns to its own client after persisting."""
        return {
            "vin": self.vin,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "trim": self.trim,
            "confidence": self.confidence,
            "is_valid": self.is_valid,
        }

    def vin_meta(self, processed_at: Optional[datetime] = None) -> Dict[str, Any]:
        """Audit payload stored next to the vehicle record."""
        processed_at = processed_at or datetime.now(timezone.utc)
        return {
            "ocr": {
                "extracted_text": self.ocr_text,
                "confidence": self.confidence,
                "processed_at": processed_at.isoformat(),
            },
            "nhtsa": self.nhtsa_data.to_dict() if self.nhtsa_data else None,
        }
