"""Core components for vrm-face-puppet package."""

from .avatar_status import AvatarStatus
from .base_avatar import BaseAvatar, BoneNode
from .base_detector import BaseDetector
from .base_frame_reader import BaseFrameReader
from .base_mapper import BaseAnimationMapper
from .base_renderer import BaseRenderer
from .clock import AnimationClock
from .exceptions import AvatarLoadError, CameraUnavailableError
from .types import AnimationSignal, FaceResult, Point2D

__all__ = [
    "AnimationClock",
    "AnimationSignal",
    "AvatarLoadError",
    "AvatarStatus",
    "BaseAnimationMapper",
    "BaseAvatar",
    "BaseDetector",
    "BaseFrameReader",
    "BaseRenderer",
    "BoneNode",
    "CameraUnavailableError",
    "FaceResult",
    "Point2D",
]
