"""Base interface for animatable humanoid avatars."""

from abc import ABC, abstractmethod
from typing import Optional
import numpy as np


class BoneNode:
    """
    Transform of a single scene node.

    Rotation is stored as Euler angles in radians applied in XYZ order,
    so callers can drive a single axis by writing one component.
    """

    def __init__(self,
                 name: str,
                 translation: Optional[np.ndarray] = None,
                 rotation: Optional[np.ndarray] = None,
                 scale: Optional[np.ndarray] = None):
        self.name = name
        self.translation = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        self.rotation = np.zeros(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
        self.scale = np.ones(3) if scale is None else np.asarray(scale, dtype=np.float64)

    def __repr__(self) -> str:
        return f"BoneNode({self.name!r}, rotation={self.rotation.tolist()})"


class BaseAvatar(ABC):
    """
    Abstract humanoid avatar exposing named bones and named blend shapes.

    Bone and blend shape writes take effect on the next update() call.
    """

    # VRM version of the rig: "0.x" (faces -z at rest) or "1.0" (faces +z)
    spec_version: str = "0.x"

    @abstractmethod
    def get_bone_node(self, bone_name: str) -> Optional[BoneNode]:
        """
        Look up a humanoid bone.

        Args:
            bone_name: Humanoid bone name (e.g. "head")

        Returns:
            Bone node, or None if the rig has no such bone
        """
        pass

    @abstractmethod
    def set_blend_shape(self, preset_name: str, value: float) -> None:
        """Set a blend shape weight by preset name."""
        pass

    @abstractmethod
    def get_blend_shape(self, preset_name: str) -> Optional[float]:
        """Current weight of a blend shape, or None if the rig has no such preset."""
        pass

    @abstractmethod
    def update(self, delta_time: float) -> None:
        """
        Advance the rig's internal state by delta_time seconds.

        Args:
            delta_time: Seconds since the previous update
        """
        pass
