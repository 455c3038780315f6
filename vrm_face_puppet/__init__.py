"""
VRM Face Puppet Package

A Python package for driving a VRM avatar from a webcam: face landmarks and
expression scores are turned into head yaw, mouth opening and smile signals
that animate the avatar in real time.
"""

__version__ = "1.0.0"

from .avatar.vrm_loader import VRMLoader
from .avatar.vrm_model import VRMModel
from .core.avatar_status import AvatarStatus
from .core.types import AnimationSignal, FaceResult
from .detectors.insightface_detector import InsightFaceDetector
from .mappers.animation_mapper import AnimationMapper
from .processors.camera_reader import CameraReader
from .processors.landmark_overlay import LandmarkOverlay
from .processors.pipeline import DetectionLoop, FacePuppetPipeline, RenderLoop
from .processors.signal_extractor import SignalExtractor
from .renderers.scene_renderer import SceneRenderer

__all__ = [
    "AnimationMapper",
    "AnimationSignal",
    "AvatarStatus",
    "CameraReader",
    "DetectionLoop",
    "FacePuppetPipeline",
    "FaceResult",
    "InsightFaceDetector",
    "LandmarkOverlay",
    "RenderLoop",
    "SceneRenderer",
    "SignalExtractor",
    "VRMLoader",
    "VRMModel",
]
