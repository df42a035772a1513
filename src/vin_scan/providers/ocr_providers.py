"""
OCR Providers - Abstraction Layer
=================================

The capability every OCR backend implements:

    extract_text(image_bytes) -> OCRResult

Backends:
- Google Cloud Vision (cloud, TEXT_DETECTION)
- AWS Textract (cloud, DetectDocumentText)
- PaddleOCR (local, no network)

A backend raises OCRProviderError when the underlying engine or service
fails. An image with no text is not a failure: it yields an empty
OCRResult with zero confidence.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..core.models import OCRResult, WordBox

logger = logging.getLogger(__name__)


class OCRProviderType(str, Enum):
    """Values accepted by the OCR_PROVIDER setting."""
    GOOGLE_VISION = "google"
    TEXTRACT = "aws"
    PADDLEOCR = "paddleocr"


class OCRProviderError(Exception):
    """
    Raised by a provider when its engine or upstream service fails.

    Attributes:
        message: Human readable description
        provider: Provider name (e.g. "GoogleVision")
        status: Upstream status, an HTTP code or service error code
        details: Extra context for logs
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status: Optional[Union[int, str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.provider = provider
        self.status = status
        self.details = details or {}
        prefix = f"[{provider}]" if status is None else f"[{provider} {status}]"
        super().__init__(f"{prefix} {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "provider": self.provider,
            "status": self.status,
            "message": self.message,
            "details": self.details,
        }


class OCRProvider(ABC):
    """
    Interface implemented by every OCR backend.

    Implementations hold only read-only configuration and a client handle
    after construction, so one instance may serve concurrent scans.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    def extract_text(self, image_bytes: bytes) -> OCRResult:
        """
        Recognize text in an encoded image.

        Args:
            image_bytes: Raw image file content (JPEG, PNG, ...)

        Returns:
            OCRResult with full text, confidence and word boxes

        Raises:
            OCRProviderError: If the engine or service call fails
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def clamp_confidence(value: Any) -> float:
    """Coerce a provider score into [0, 1]; missing or junk scores become 0."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if score != score:  # NaN
        return 0.0
    return max(0.0, min(1.0, score))


__all__ = [
    "OCRProviderType",
    "OCRProviderError",
    "OCRProvider",
    "OCRResult",
    "WordBox",
    "clamp_confidence",
]
