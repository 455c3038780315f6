"""Extraction of animation signals from face detection results."""

import math
from typing import Optional

from ..core.constants import LANDMARK_POINTS, SMILE_THRESHOLD
from ..core.geometry import vector_angle, vector_sub
from ..core.types import AnimationSignal, FaceResult


class SignalExtractor:
    """
    Maps a face detection result onto the shared animation signals.

    Three signals are derived:
    - Smile trigger: latched on when the "happy" score exceeds the threshold.
      Only the animation mapper clears it.
    - Head yaw: approximated from the tilt of the nose bridge (landmarks 27 -> 30).
      This is a 2D proxy, only meaningful for small to moderate rotations.
    - Lip distance: vertical distance between upper and lower lip centers in
      detector pixels, not normalized by face size.
    """

    def __init__(self, smile_threshold: float = SMILE_THRESHOLD):
        self.smile_threshold = smile_threshold

    def update(self, result: Optional[FaceResult], signal: AnimationSignal) -> bool:
        """
        Update signals from a detection result.

        Args:
            result: Detection result, or None when no face was found
            signal: Shared signals to overwrite

        Returns:
            True if the signals were updated, False if they were left as-is
        """
        if result is None:
            return False

        if result.expressions.get("happy", 0.0) > self.smile_threshold:
            signal.smiling = True

        signal.head_yaw_angle = self.head_yaw_angle(result)
        signal.lip_dist = self.lip_distance(result)
        return True

    def head_yaw_angle(self, result: FaceResult) -> float:
        """
        Approximate head yaw from the nose bridge vector.

        The vector angle is measured from +x, so a vertical nose gives pi/2;
        subtract that and negate to turn it into a rotation about the vertical axis.
        """
        upper_nose = result.point(LANDMARK_POINTS["upper_nose"])
        lower_nose = result.point(LANDMARK_POINTS["lower_nose"])
        nose_vec = vector_sub(lower_nose, upper_nose)
        return -(vector_angle(nose_vec) - math.pi / 2)

    def lip_distance(self, result: FaceResult) -> float:
        upper_lip = result.point(LANDMARK_POINTS["upper_lip"])
        lower_lip = result.point(LANDMARK_POINTS["lower_lip"])
        return lower_lip.y - upper_lip.y
