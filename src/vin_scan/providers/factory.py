"""
Provider factory: turns the OCR_PROVIDER setting into exactly one provider.
"""

import logging
from typing import Dict, List, Optional, Type, Union

from ..config import PipelineConfig, get_config
from .google_vision import GoogleVisionOCRProvider
from .ocr_providers import OCRProvider, OCRProviderType
from .paddle import PaddleOCRProvider
from .textract import TextractOCRProvider

logger = logging.getLogger(__name__)


class OCRProviderFactory:
    """
    Factory for creating OCR provider instances.

    Unknown selections fall back to the local PaddleOCR engine.

    Usage:
        provider = OCRProviderFactory.create("google")
        provider = OCRProviderFactory.create(OCRProviderType.TEXTRACT, config=my_config)
    """

    DEFAULT = OCRProviderType.PADDLEOCR

    # Registry of available providers, keyed by selection value
    _providers: Dict[str, Type[OCRProvider]] = {
        OCRProviderType.GOOGLE_VISION.value: GoogleVisionOCRProvider,
        OCRProviderType.TEXTRACT.value: TextractOCRProvider,
        OCRProviderType.PADDLEOCR.value: PaddleOCRProvider,
    }

    @classmethod
    def resolve(cls, provider_type: Optional[Union[str, OCRProviderType]]) -> str:
        """Normalize a selection value, applying the local-engine fallback."""
        if isinstance(provider_type, OCRProviderType):
            key = provider_type.value
        else:
            key = (provider_type or "").strip().lower()

        if key not in cls._providers:
            logger.warning(
                f"Unknown OCR provider {provider_type!r}, falling back to {cls.DEFAULT.value}. "
                f"Available: {cls.list_available()}"
            )
            return cls.DEFAULT.value
        return key

    @classmethod
    def create(
        cls,
        provider_type: Optional[Union[str, OCRProviderType]] = None,
        config: Optional[PipelineConfig] = None,
    ) -> OCRProvider:
        """
        Create an OCR provider instance.

        Args:
            provider_type: Selection value; defaults to config.ocr.provider
            config: Full configuration (global config if None)

        Returns:
            Configured OCRProvider instance. Cloud clients and the local
            engine are created lazily on first extract_text().
        """
        config = config or get_config()
        if provider_type is None:
            provider_type = config.ocr.provider

        key = cls.resolve(provider_type)
        provider_class = cls._providers[key]

        if provider_class is GoogleVisionOCRProvider:
            provider = GoogleVisionOCRProvider(config=config.google, timeout=config.ocr.timeout)
        elif provider_class is TextractOCRProvider:
            provider = TextractOCRProvider(config=config.textract, timeout=config.ocr.timeout)
        elif provider_class is PaddleOCRProvider:
            provider = PaddleOCRProvider(config=config.paddle)
        else:
            provider = provider_class()

        logger.info(f"OCR provider selected: {provider.name}")
        return provider

    @classmethod
    def list_available(cls) -> List[str]:
        """List all registered provider types."""
        return list(cls._providers.keys())

    @classmethod
    def register(cls, provider_type: str, provider_class: type) -> None:
        """
        Register a new provider type.

        Registered classes are constructed without arguments.
        """
        if not isinstance(provider_class, type) or not issubclass(provider_class, OCRProvider):
            raise TypeError(
                f"Provider class must inherit from OCRProvider, "
                f"got {getattr(provider_class, '__name__', provider_class)!r}"
            )
        cls._providers[provider_type.strip().lower()] = provider_class
        logger.info(f"Registered OCR provider: {provider_type}")
