"""
AWS Textract provider (synchronous DetectDocumentText).

boto3 signs each request with SigV4 for the configured region.
"""

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import TextractConfig
from .ocr_providers import OCRProvider, OCRProviderError, OCRResult, WordBox, clamp_confidence

logger = logging.getLogger(__name__)


class TextractOCRProvider(OCRProvider):
    """
    Document-text backend.

    Only WORD blocks are consumed. Textract reports confidence as a
    percentage and geometry as fractions of the page, so word boxes are
    already normalized to [0, 1].
    """

    def __init__(
        self,
        config: Optional[TextractConfig] = None,
        client: Optional[Any] = None,
        timeout: Optional[float] = None,
    ):
        self.config = config or TextractConfig()
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "Textract"

    def _get_client(self) -> Any:
        if self._client is None:
            # Zero retries: failures surface to the pipeline on the first attempt
            boto_config = BotoConfig(retries={"max_attempts": 1, "mode": "standard"})
            if self.timeout is not None:
                boto_config = boto_config.merge(BotoConfig(read_timeout=self.timeout))
            try:
                self._client = boto3.client(
                    "textract",
                    region_name=self.config.region,
                    aws_access_key_id=self.config.access_key_id,
                    aws_secret_access_key=self.config.secret_access_key,
                    config=boto_config,
                )
            except BotoCoreError as e:
                raise OCRProviderError(
                    f"Failed to create Textract client: {e}",
                    provider=self.name,
                ) from e
            logger.info(f"Textract client initialized (region={self.config.region})")
        return self._client

    def extract_text(self, image_bytes: bytes) -> OCRResult:
        client = self._get_client()

        try:
            response = client.detect_document_text(Document={"Bytes": image_bytes})
        except ClientError as e:
            error = e.response.get("Error", {})
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise OCRProviderError(
                f"AWS Textract error: {error.get('Code', 'Unknown')}: {error.get('Message', e)}",
                provider=self.name,
                status=status,
                details={"error_code": error.get("Code")},
            ) from e
        except BotoCoreError as e:
            raise OCRProviderError(
                f"AWS Textract request failed: {e}",
                provider=self.name,
            ) from e

        if not isinstance(response, dict):
            raise OCRProviderError(
                f"Malformed Textract response: {type(response).__name__}",
                provider=self.name,
            )

        blocks = response.get("Blocks") or []
        if not isinstance(blocks, list):
            raise OCRProviderError(
                f"Malformed Textract response: Blocks is {type(blocks).__name__}",
                provider=self.name,
            )

        try:
            return self._parse_blocks(blocks)
        except (TypeError, ValueError, AttributeError) as e:
            raise OCRProviderError(
                f"Malformed Textract response: {e}",
                provider=self.name,
            ) from e

    def _parse_blocks(self, blocks: List[Dict[str, Any]]) -> OCRResult:
        words: List[str] = []
        confidences: List[float] = []
        boxes: List[WordBox] = []

        for block in blocks:
            if not isinstance(block, dict):
                raise TypeError(f"block is {type(block).__name__}")
            if block.get("BlockType") != "WORD":
                continue
            text = block.get("Text") or ""
            if not text.strip():
                continue

            confidence = clamp_confidence(float(block.get("Confidence") or 0) / 100)
            words.append(text)
            confidences.append(confidence)

            bbox = (block.get("Geometry") or {}).get("BoundingBox")
            if bbox:
                boxes.append(WordBox(
                    x=float(bbox.get("Left") or 0),
                    y=float(bbox.get("Top") or 0),
                    width=float(bbox.get("Width") or 0),
                    height=float(bbox.get("Height") or 0),
                    text=text,
                    confidence=confidence,
                ))

        if not words:
            return OCRResult.empty(provider=self.name)

        return OCRResult(
            text=" ".join(words),
            confidence=sum(confidences) / len(confidences),
            bounding_boxes=tuple(boxes),
            provider=self.name,
            metadata={"word_count": len(words), "region": self.config.region},
        )
