"""Async image-annotation client using httpx.

Reports may carry a photo. When image similarity is enabled, each photo is
annotated by a Google Vision compatible endpoint and reduced to a caption
(the detected labels and objects) plus a suggested category, which are then
compared like descriptions.
"""
from __future__ import annotations
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

from civic_dedup.config import Config, get_config
from civic_dedup.utils.logger import log_debug, log_error

# Ordered: the first category whose hints match any element wins.
CATEGORY_HINTS = (
    ("infrastructure", ("road", "street", "pothole", "asphalt", "pavement", "sidewalk")),
    ("water", ("water", "leak", "pipe", "drain", "flooding")),
    ("streetlight", ("light", "lamp", "electric", "wire", "pole")),
    ("waste", ("trash", "garbage", "waste", "litter", "bin")),
    ("parks", ("tree", "park", "garden", "green", "plant")),
    ("building", ("building", "construction", "wall", "structure")),
    ("transportation", ("vehicle", "car", "traffic", "transport")),
    ("safety", ("safety", "danger", "hazard", "security")),
)


class VisionError(Exception):
    """The annotation endpoint failed or returned an unusable payload."""


@dataclass(frozen=True)
class ImageAnalysis:
    """What the annotation endpoint saw in one image."""

    description: str
    suggested_category: str
    confidence: float = 0.0
    labels: List[str] = field(default_factory=list)


def suggest_category(elements: Sequence[str]) -> str:
    """Map detected labels/objects to a coarse issue category."""
    lowered = [e.lower() for e in elements]
    for category, hints in CATEGORY_HINTS:
        if any(hint in element for element in lowered for hint in hints):
            return category
    return "others"


def describe_elements(labels: Sequence[str], objects: Sequence[str]) -> str:
    """Caption made of the unique detected elements, in detection order."""
    seen = []
    for element in list(labels) + list(objects):
        element = element.strip().lower()
        if element and element not in seen:
            seen.append(element)
    return " ".join(seen)


def analysis_from_response(annotations: Dict[str, Any], max_labels: int = 10) -> ImageAnalysis:
    """Build an ``ImageAnalysis`` from one ``responses[]`` entry."""
    if "error" in annotations:
        raise VisionError(f"Annotation failed: {annotations['error'].get('message', 'unknown error')}")

    label_annotations = annotations.get("labelAnnotations") or []
    labels = [a.get("description", "") for a in label_annotations if a.get("description")]
    objects = [
        a.get("name", "")
        for a in annotations.get("localizedObjectAnnotations") or []
        if a.get("name")
    ]
    confidence = float(label_annotations[0].get("score", 0.0)) if label_annotations else 0.0

    return ImageAnalysis(
        description=describe_elements(labels, objects),
        suggested_category=suggest_category(labels + objects),
        confidence=confidence,
        labels=(labels + objects)[:max_labels],
    )


class AsyncVisionClient:
    """Async client for a Google Vision style ``images:annotate`` endpoint."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Context manager entry - creates HTTP client."""
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.vision_timeout))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - closes HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def is_configured(self) -> bool:
        return bool(self.config.google_vision_api_key)

    def _request_body(self, content: Optional[bytes], image_uri: Optional[str]) -> Dict[str, Any]:
        if content is not None:
            image = {"content": base64.b64encode(content).decode("ascii")}
        elif image_uri:
            image = {"source": {"imageUri": image_uri}}
        else:
            raise VisionError("Either image content or an image URI is required")

        max_results = self.config.vision_max_labels
        return {
            "requests": [
                {
                    "image": image,
                    "features": [
                        {"type": "LABEL_DETECTION", "maxResults": max_results},
                        {"type": "OBJECT_LOCALIZATION", "maxResults": max_results},
                    ],
                }
            ]
        }

    async def analyze_image(
        self, content: Optional[bytes] = None, image_uri: Optional[str] = None
    ) -> ImageAnalysis:
        """Annotate one image given as raw bytes or by URI.

        Raises:
            VisionError: On missing configuration, HTTP failure or a
                malformed response.
        """
        if not self.is_configured():
            raise VisionError("Vision API not configured (GOOGLE_VISION_API_KEY)")
        if not self._client:
            raise VisionError("AsyncVisionClient not initialized - use 'async with' context")

        body = self._request_body(content, image_uri)
        try:
            resp = await self._client.post(
                self.config.vision_endpoint,
                params={"key": self.config.google_vision_api_key},
                json=body,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            log_error("Vision annotation request failed", error=str(e))
            raise VisionError(f"Vision annotation request failed: {e}") from e
        except ValueError as e:
            raise VisionError(f"Vision endpoint returned invalid JSON: {e}") from e

        responses = data.get("responses") if isinstance(data, dict) else None
        if not responses:
            raise VisionError("Vision endpoint returned no annotations")

        analysis = analysis_from_response(responses[0], self.config.vision_max_labels)
        log_debug("Image analyzed", category=analysis.suggested_category, label_count=len(analysis.labels))
        return analysis
