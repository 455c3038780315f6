"""VRM avatar rig and asset loading."""

from .vrm_loader import ProgressPrinter, VRMLoader
from .vrm_model import BlendShapeProxy, Humanoid, SceneNode, VRMModel

__all__ = [
    "BlendShapeProxy",
    "Humanoid",
    "ProgressPrinter",
    "SceneNode",
    "VRMLoader",
    "VRMModel",
]
