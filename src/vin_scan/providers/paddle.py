"""
PaddleOCR provider - local engine, no network dependency.

The engine is loaded on first use; importing this module does not
require paddleocr to be installed.
"""

import logging
import threading
from typing import Any, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..config import PaddleConfig
from ..preprocessing import (
    ImageDecodeError,
    PreprocessConfig,
    PreprocessStrategy,
    VINPreprocessor,
    decode_image,
)
from .ocr_providers import OCRProvider, OCRProviderError, OCRResult, WordBox, clamp_confidence

logger = logging.getLogger(__name__)


class PaddleOCRProvider(OCRProvider):
    """
    Local-engine backend built on PaddleOCR.

    Features:
    - Local processing (no API calls)
    - VIN plate preprocessing before recognition
    - Word boxes normalized to [0, 1] of the processed image

    Any engine failure (not installed, model load, unreadable image,
    prediction error) is raised as OCRProviderError.
    """

    def __init__(self, config: Optional[PaddleConfig] = None, engine: Optional[Any] = None):
        """
        Args:
            config: Engine and preprocessing settings (env defaults if None)
            engine: Pre-built PaddleOCR instance, mainly for tests
        """
        self.config = config or PaddleConfig()
        self._ocr = engine
        self._init_lock = threading.Lock()
        self._preprocessor = VINPreprocessor(
            config=PreprocessConfig(
                strategy=PreprocessStrategy.parse(self.config.preprocess_strategy),
                target_width=self.config.preprocess_target_width,
                clahe_clip_limit=self.config.clahe_clip_limit,
            )
        )

    @property
    def name(self) -> str:
        return "PaddleOCR"

    @property
    def is_available(self) -> bool:
        """Check if PaddleOCR is installed."""
        if self._ocr is not None:
            return True
        try:
            import paddleocr  # noqa: F401
            return True
        except ImportError:
            return False

    def initialize(self) -> None:
        """Load the PaddleOCR models; no-op once loaded."""
        with self._init_lock:
            if self._ocr is not None:
                return

            try:
                from paddleocr import PaddleOCR
            except ImportError as e:
                raise OCRProviderError(
                    "PaddleOCR is not installed. Run: pip install 'vin-scan[paddle]'",
                    provider=self.name,
                ) from e

            logger.info(f"Initializing PaddleOCR with {self.config.ocr_version}...")
            try:
                self._ocr = PaddleOCR(
                    lang=self.config.lang,
                    ocr_version=self.config.ocr_version,
                    device="gpu" if self.config.use_gpu else "cpu",
                    use_doc_orientation_classify=self.config.use_doc_orientation_classify,
                    use_doc_unwarping=self.config.use_doc_unwarping,
                    use_textline_orientation=self.config.use_textline_orientation,
                    text_det_box_thresh=self.config.det_db_box_thresh,
                )
            except Exception as e:
                raise OCRProviderError(
                    f"Failed to initialize PaddleOCR: {e}",
                    provider=self.name,
                    details={"error": str(e)},
                ) from e
            logger.info(f"PaddleOCR ({self.config.ocr_version}) initialized, "
                        f"preprocessing={self._preprocessor.strategy.value}")

    def extract_text(self, image_bytes: bytes) -> OCRResult:
        self.initialize()

        try:
            image = self._preprocessor.process(decode_image(image_bytes))
        except ImageDecodeError as e:
            raise OCRProviderError(str(e), provider=self.name) from e
        except cv2.error as e:
            raise OCRProviderError(f"Image preprocessing failed: {e}", provider=self.name) from e

        try:
            result = self._ocr.predict(image)
        except Exception as e:
            raise OCRProviderError(
                f"OCR prediction failed: {e}",
                provider=self.name,
                details={"error": str(e)},
            ) from e

        height, width = image.shape[:2]
        try:
            text, confidence, boxes = self._parse_result(result, width, height)
        except (TypeError, ValueError, IndexError) as e:
            raise OCRProviderError(
                f"Malformed PaddleOCR result: {e}",
                provider=self.name,
                details={"error": str(e)},
            ) from e

        if not text:
            return OCRResult.empty(provider=self.name, lang=self.config.lang)

        return OCRResult(
            text=text,
            confidence=confidence,
            bounding_boxes=tuple(boxes),
            provider=self.name,
            metadata={
                "lang": self.config.lang,
                "preprocess_strategy": self._preprocessor.strategy.value,
            },
        )

    def _parse_result(self, result: Any, width: int, height: int) -> Tuple[str, float, List[WordBox]]:
        """Parse the PaddleOCR 3.x predict() output (a list of per-page dicts)."""
        if not result:
            return "", 0.0, []

        page = result[0] if isinstance(result, (list, tuple)) else result
        if not hasattr(page, "get"):
            raise OCRProviderError(
                f"Unexpected PaddleOCR result type: {type(page).__name__}",
                provider=self.name,
            )

        texts = list(page.get("rec_texts") or [])
        scores = list(page.get("rec_scores") or [])
        polys = page.get("rec_polys")
        if polys is None:
            polys = page.get("dt_polys")
        polys = list(polys) if polys is not None else []

        words: List[str] = []
        word_scores: List[float] = []
        boxes: List[WordBox] = []
        for i, raw_text in enumerate(texts):
            text = str(raw_text).strip()
            if not text:
                continue
            score = clamp_confidence(scores[i] if i < len(scores) else 0.0)
            words.append(text)
            word_scores.append(score)
            if i < len(polys):
                boxes.append(self._poly_to_box(polys[i], width, height, text, score))

        if not words:
            return "", 0.0, []
        return " ".join(words), float(np.mean(word_scores)), boxes

    @staticmethod
    def _poly_to_box(poly: Sequence[Sequence[float]], width: int, height: int,
                     text: str, confidence: float) -> WordBox:
        points = np.asarray(poly, dtype=float).reshape(-1, 2)
        x_min, y_min = points.min(axis=0)
        x_max, y_max = points.max(axis=0)
        return WordBox(
            x=float(x_min) / width,
            y=float(y_min) / height,
            width=float(x_max - x_min) / width,
            height=float(y_max - y_min) / height,
            text=text,
            confidence=confidence,
        )
