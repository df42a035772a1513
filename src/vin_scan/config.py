"""
VIN Scan Configuration - Centralized Settings
=============================================

All configurable parameters in one place.
Supports environment variable overrides.

Usage:
    from vin_scan.config import get_config
    config = get_config()
    print(config.ocr.provider)

Environment Variables:
    OCR_PROVIDER=google|aws|paddleocr
    NHTSA_API_BASE=https://vpic.nhtsa.dot.gov/api
    GOOGLE_APPLICATION_CREDENTIALS_JSON='{"type": "service_account", ...}'
    AWS_TEXTRACT_REGION=us-east-1
    VIN_LOG_LEVEL=DEBUG
"""

import os
import json
import logging
from dataclasses import dataclass, field, asdict, is_dataclass
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration file or value cannot be used."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        super().__init__(f"Configuration error: {message}")


def _get_env_float(key: str, default: Optional[float]) -> Optional[float]:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is not None and value.strip():
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Invalid float for {key}: {value}, using default {default}")
    return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get bool from environment variable."""
    value = os.environ.get(key)
    if value is not None:
        return value.lower() in ('true', '1', 'yes', 'on')
    return default


def _get_env_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class OCRConfig:
    """Provider selection shared by all OCR backends."""

    # google | aws | paddleocr; anything else falls back to paddleocr
    provider: str = field(
        default_factory=lambda: _get_env_str('OCR_PROVIDER', 'paddleocr')
    )

    # Per-call deadline handed to cloud clients; None leaves it to the caller
    timeout: Optional[float] = field(
        default_factory=lambda: _get_env_float('VIN_OCR_TIMEOUT', None)
    )


@dataclass
class GoogleVisionConfig:
    """Google Cloud Vision credentials and request settings."""

    credentials_json: Optional[str] = field(
        default_factory=lambda: os.environ.get('GOOGLE_APPLICATION_CREDENTIALS_JSON')
    )
    credentials_file: Optional[str] = field(
        default_factory=lambda: os.environ.get('GOOGLE_APPLICATION_CREDENTIALS')
    )
    max_results: int = 50


@dataclass
class TextractConfig:
    """AWS Textract region and credentials."""

    region: str = field(
        default_factory=lambda: _get_env_str('AWS_TEXTRACT_REGION', 'us-east-1')
    )
    # Empty means the default AWS credential chain is used
    access_key_id: Optional[str] = field(
        default_factory=lambda: os.environ.get('AWS_ACCESS_KEY_ID') or None
    )
    secret_access_key: Optional[str] = field(
        default_factory=lambda: os.environ.get('AWS_SECRET_ACCESS_KEY') or None
    )


@dataclass
class PaddleConfig:
    """Local PaddleOCR engine configuration."""

    lang: str = field(
        default_factory=lambda: _get_env_str('VIN_OCR_LANG', 'en')
    )
    ocr_version: str = 'PP-OCRv3'  # PP-OCRv3 works better for VIN plates
    use_gpu: bool = field(
        default_factory=lambda: _get_env_bool('VIN_USE_GPU', False)
    )
    det_db_box_thresh: float = field(
        default_factory=lambda: _get_env_float('VIN_DET_BOX_THRESH', 0.3)
    )
    use_doc_orientation_classify: bool = False
    use_doc_unwarping: bool = False
    use_textline_orientation: bool = False

    # Preprocessing applied before recognition
    preprocess_strategy: str = field(
        default_factory=lambda: _get_env_str('VIN_PREPROCESS_MODE', 'engraved')
    )
    preprocess_target_width: int = 1024
    clahe_clip_limit: float = 2.0


@dataclass
class RegistryConfig:
    """NHTSA vPIC decode endpoint."""

    base_url: str = field(
        default_factory=lambda: _get_env_str('NHTSA_API_BASE', 'https://vpic.nhtsa.dot.gov/api')
    )
    timeout: Optional[float] = field(
        default_factory=lambda: _get_env_float('VIN_REGISTRY_TIMEOUT', None)
    )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(
        default_factory=lambda: _get_env_str('VIN_LOG_LEVEL', 'INFO')
    )
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format: str = '%Y-%m-%d %H:%M:%S'

    # File logging (optional)
    log_file: Optional[str] = field(
        default_factory=lambda: os.environ.get('VIN_LOG_FILE')
    )


@dataclass
class PipelineConfig:
    """Complete VIN scan configuration."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    google: GoogleVisionConfig = field(default_factory=GoogleVisionConfig)
    textract: TextractConfig = field(default_factory=TextractConfig)
    paddle: PaddleConfig = field(default_factory=PaddleConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def save(self, path: Path):
        """Save configuration to JSON file (secrets included, mind the permissions)."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'PipelineConfig':
        """Load configuration from JSON file, layered over env defaults."""
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"cannot read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")

        config = cls()
        for section_name, values in data.items():
            section = getattr(config, section_name, None)
            if not is_dataclass(section) or not isinstance(values, dict):
                logger.warning(f"Ignoring unknown config section: {section_name}")
                continue
            for key, value in values.items():
                if hasattr(section, key):
                    setattr(section, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section_name}.{key}")

        return config


# Global configuration instance (singleton pattern)
_config: Optional[PipelineConfig] = None


def get_config() -> PipelineConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = PipelineConfig()
        _setup_logging(_config.logging)
    return _config


def reset_config():
    """Reset configuration to defaults (useful for testing)."""
    global _config
    _config = None


def _setup_logging(config: LoggingConfig):
    """Configure logging based on settings."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt=config.date_format,
        handlers=handlers,
    )
