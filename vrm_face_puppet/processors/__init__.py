"""Camera input, signal extraction and loop orchestration."""

from .camera_reader import CameraReader
from .landmark_overlay import LandmarkOverlay
from .pipeline import DetectionLoop, FacePuppetPipeline, RenderLoop
from .signal_extractor import SignalExtractor

__all__ = [
    "CameraReader",
    "DetectionLoop",
    "FacePuppetPipeline",
    "LandmarkOverlay",
    "RenderLoop",
    "SignalExtractor",
]
