"""Image annotation for the optional photo-similarity signal."""

from civic_dedup.vision.client import AsyncVisionClient, ImageAnalysis, VisionError

__all__ = ["AsyncVisionClient", "ImageAnalysis", "VisionError"]
