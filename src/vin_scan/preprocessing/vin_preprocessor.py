"""
VIN Image Preprocessor
======================

Decodes uploaded image bytes and prepares VIN plate photos for the local
OCR engine.

Strategies:
- NONE: Decode only
- STANDARD: Resize + CLAHE, for clean printed labels
- ENGRAVED: Resize + CLAHE + morphological closing + bilateral filter,
  for stamped or engraved metal plates (default)
- LOW_CONTRAST: Stronger CLAHE + unsharp mask, for faded plates
- ADAPTIVE: Picks one of the above from the image contrast
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class PreprocessStrategy(str, Enum):
    """Preprocessing strategy enumeration."""
    NONE = 'none'
    STANDARD = 'standard'
    ENGRAVED = 'engraved'
    LOW_CONTRAST = 'low_contrast'
    ADAPTIVE = 'adaptive'

    @classmethod
    def parse(cls, value: Union[str, "PreprocessStrategy"]) -> "PreprocessStrategy":
        """Lenient lookup used for values coming from env/config files."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown preprocessing strategy {value!r}, using ENGRAVED")
            return cls.ENGRAVED


class ImageDecodeError(ValueError):
    """Raised when image bytes cannot be decoded into a raster."""


@dataclass
class PreprocessConfig:
    """Configuration for VIN image preprocessing."""

    strategy: PreprocessStrategy = PreprocessStrategy.ENGRAVED

    # Resizing: plates are wide and short
    target_width: int = 1024
    min_height: int = 32
    max_height: int = 512

    # CLAHE
    clahe_clip_limit: float = 2.0
    clahe_tile_size: Tuple[int, int] = (8, 8)

    # Morphology
    morph_kernel_size: Tuple[int, int] = (2, 2)
    morph_iterations: int = 1

    # Edge-preserving denoise
    bilateral_d: int = 5
    bilateral_sigma_color: float = 50.0
    bilateral_sigma_space: float = 50.0

    # Unsharp mask (low contrast)
    unsharp_radius: int = 1
    unsharp_amount: float = 1.5

    # Std dev of the grayscale image below this counts as low contrast
    low_contrast_threshold: float = 50.0
    high_contrast_threshold: float = 80.0


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decode encoded image bytes into a BGR array.

    Raises:
        ImageDecodeError: If the bytes are empty or not a supported raster
    """
    if not image_bytes:
        raise ImageDecodeError("Image is empty")

    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise ImageDecodeError(f"Unreadable image: {e}") from e

    if image is None or image.size == 0:
        raise ImageDecodeError("Unreadable image: unsupported or corrupt format")
    return image


class VINPreprocessor:
    """
    VIN plate preprocessor with multiple strategies.

    Output is always a 3-channel BGR image, which is what PaddleOCR expects.

    Example:
        preprocessor = VINPreprocessor(strategy=PreprocessStrategy.LOW_CONTRAST)
        processed = preprocessor.process(decode_image(image_bytes))
    """

    def __init__(
        self,
        strategy: Optional[PreprocessStrategy] = None,
        config: Optional[PreprocessConfig] = None,
    ):
        self.config = config or PreprocessConfig()
        if strategy is not None:
            self.config = replace(self.config, strategy=PreprocessStrategy.parse(strategy))

        self.clahe = cv2.createCLAHE(
            clipLimit=self.config.clahe_clip_limit,
            tileGridSize=self.config.clahe_tile_size
        )
        self.morph_kernel = np.ones(self.config.morph_kernel_size, np.uint8)

        logger.debug(f"VINPreprocessor initialized with strategy={self.config.strategy.value}")

    @property
    def strategy(self) -> PreprocessStrategy:
        return self.config.strategy

    def process(
        self,
        image: np.ndarray,
        strategy: Optional[PreprocessStrategy] = None,
    ) -> np.ndarray:
        """
        Process a BGR image for OCR.

        Raises:
            ValueError: If image is empty
        """
        if image is None or image.size == 0:
            raise ValueError("Input image is empty or None")

        active = strategy or self.config.strategy

        if active == PreprocessStrategy.NONE:
            return image
        if active == PreprocessStrategy.ADAPTIVE:
            active = self.suggest_strategy(image)
            logger.debug(f"Adaptive preprocessing selected {active.value}")

        if active == PreprocessStrategy.STANDARD:
            return self._process_standard(image)
        if active == PreprocessStrategy.LOW_CONTRAST:
            return self._process_low_contrast(image)
        return self._process_engraved(image)

    def suggest_strategy(self, image: np.ndarray) -> PreprocessStrategy:
        """Pick a strategy from the grayscale contrast of the image."""
        contrast = float(np.std(self._to_gray(image)))

        if contrast < self.config.low_contrast_threshold:
            return PreprocessStrategy.LOW_CONTRAST
        if contrast > self.config.high_contrast_threshold:
            return PreprocessStrategy.STANDARD
        return PreprocessStrategy.ENGRAVED

    def _process_standard(self, image: np.ndarray) -> np.ndarray:
        gray = self._to_gray(self._resize_to_target(image))
        return cv2.cvtColor(self.clahe.apply(gray), cv2.COLOR_GRAY2BGR)

    def _process_engraved(self, image: np.ndarray) -> np.ndarray:
        gray = self._to_gray(self._resize_to_target(image))
        enhanced = self.clahe.apply(gray)

        # Closing reconnects broken strokes in stamped characters
        closed = cv2.morphologyEx(
            enhanced,
            cv2.MORPH_CLOSE,
            self.morph_kernel,
            iterations=self.config.morph_iterations
        )
        denoised = cv2.bilateralFilter(
            closed,
            d=self.config.bilateral_d,
            sigmaColor=self.config.bilateral_sigma_color,
            sigmaSpace=self.config.bilateral_sigma_space
        )
        return cv2.cvtColor(denoised, cv2.COLOR_GRAY2BGR)

    def _process_low_contrast(self, image: np.ndarray) -> np.ndarray:
        gray = self._to_gray(self._resize_to_target(image))

        strong_clahe = cv2.createCLAHE(clipLimit=4.0, tileGridSize=(4, 4))
        enhanced = strong_clahe.apply(gray)

        blurred = cv2.GaussianBlur(enhanced, (0, 0), self.config.unsharp_radius)
        sharpened = cv2.addWeighted(
            enhanced,
            1 + self.config.unsharp_amount,
            blurred,
            -self.config.unsharp_amount,
            0
        )
        closed = cv2.morphologyEx(sharpened, cv2.MORPH_CLOSE, self.morph_kernel)
        return cv2.cvtColor(closed, cv2.COLOR_GRAY2BGR)

    def _resize_to_target(self, image: np.ndarray) -> np.ndarray:
        """Resize to the target width, keeping aspect ratio within height bounds."""
        h, w = image.shape[:2]
        scale = self.config.target_width / w
        new_h = max(self.config.min_height, min(int(h * scale), self.config.max_height))

        return cv2.resize(
            image,
            (self.config.target_width, new_h),
            interpolation=cv2.INTER_AREA if scale < 1 else cv2.INTER_CUBIC
        )

    @staticmethod
    def _to_gray(image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return image
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
