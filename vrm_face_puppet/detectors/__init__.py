"""Detector implementations for face landmark and expression detection."""

from .insightface_detector import InsightFaceDetector

__all__ = [
    "InsightFaceDetector",
]
