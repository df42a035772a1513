"""
Google Cloud Vision provider.

Sends the image to ``images:annotate`` with a TEXT_DETECTION feature.
Authentication uses a service-account key; google-auth signs the JWT
assertion and exchanges it for a bearer token.
"""

import json
import logging
from typing import Any, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import vision
from google.oauth2 import service_account

from ..config import GoogleVisionConfig
from .ocr_providers import OCRProvider, OCRProviderError, OCRResult, WordBox, clamp_confidence

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


class GoogleVisionOCRProvider(OCRProvider):
    """
    Cloud-vision backend.

    Word boxes are in pixels of the submitted image: Vision returns
    polygon vertices, which are flattened to axis-aligned boxes.

    Usage:
        provider = GoogleVisionOCRProvider(GoogleVisionConfig(credentials_json=key_json))
        result = provider.extract_text(image_bytes)
    """

    def __init__(
        self,
        config: Optional[GoogleVisionConfig] = None,
        client: Optional[Any] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            config: Credentials and request settings (env defaults if None)
            client: Pre-built ImageAnnotatorClient, mainly for tests
            timeout: Per-request deadline in seconds; None means no deadline
        """
        self.config = config or GoogleVisionConfig()
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "GoogleVision"

    def _load_credentials(self) -> service_account.Credentials:
        try:
            if self.config.credentials_json:
                info = json.loads(self.config.credentials_json)
                return service_account.Credentials.from_service_account_info(
                    info, scopes=[CLOUD_PLATFORM_SCOPE]
                )
            if self.config.credentials_file:
                return service_account.Credentials.from_service_account_file(
                    self.config.credentials_file, scopes=[CLOUD_PLATFORM_SCOPE]
                )
        except (ValueError, OSError) as e:
            # json.JSONDecodeError is a ValueError; so are malformed key fields
            raise OCRProviderError(
                f"Invalid Google service account credentials: {e}",
                provider=self.name,
            ) from e

        raise OCRProviderError("Google Vision credentials not configured", provider=self.name)

    def _get_client(self) -> Any:
        if self._client is None:
            credentials = self._load_credentials()
            self._client = vision.ImageAnnotatorClient(credentials=credentials)
            logger.info(f"Google Vision client initialized for {credentials.service_account_email}")
        return self._client

    def extract_text(self, image_bytes: bytes) -> OCRResult:
        client = self._get_client()

        request = vision.AnnotateImageRequest(
            image=vision.Image(content=image_bytes),
            features=[
                vision.Feature(
                    type_=vision.Feature.Type.TEXT_DETECTION,
                    max_results=self.config.max_results,
                )
            ],
        )

        try:
            # retry=None: a failed call is reported once, never re-attempted here
            response = client.annotate_image(request, retry=None, timeout=self.timeout)
        except auth_exceptions.GoogleAuthError as e:
            raise OCRProviderError(
                f"Failed to get access token: {e}",
                provider=self.name,
                status="UNAUTHENTICATED",
            ) from e
        except google_exceptions.GoogleAPIError as e:
            status = getattr(e, "code", None)
            raise OCRProviderError(
                f"Google Vision API error: {getattr(e, 'message', None) or e}",
                provider=self.name,
                status=status,
            ) from e

        if response.error.message:
            raise OCRProviderError(
                f"Google Vision API error: {response.error.message}",
                provider=self.name,
                status=response.error.code,
            )

        return self._parse_response(response)

    def _parse_response(self, response: Any) -> OCRResult:
        annotations = list(response.text_annotations or [])
        if not annotations:
            return OCRResult.empty(provider=self.name)

        # First annotation is the full text block, the rest are single words
        full = annotations[0]
        boxes = [self._word_box(annotation) for annotation in annotations[1:]]

        return OCRResult(
            text=full.description or "",
            confidence=clamp_confidence(full.confidence),
            bounding_boxes=tuple(boxes),
            provider=self.name,
            metadata={"locale": getattr(full, "locale", "") or ""},
        )

    @staticmethod
    def _word_box(annotation: Any) -> WordBox:
        vertices: List[Any] = list(annotation.bounding_poly.vertices or [])
        xs = [v.x or 0 for v in vertices] or [0]
        ys = [v.y or 0 for v in vertices] or [0]
        x, y = min(xs), min(ys)

        return WordBox(
            x=float(x),
            y=float(y),
            width=float(max(xs) - x),
            height=float(max(ys) - y),
            text=annotation.description or "",
            confidence=clamp_confidence(annotation.confidence),
        )
