"""Animation signal to VRM bone and blend shape mapper."""

import math
from typing import Optional

from ..core.base_avatar import BaseAvatar, BoneNode
from ..core.base_mapper import BaseAnimationMapper
from ..core.constants import (
    BLEND_SHAPE_A,
    BLEND_SHAPE_JOY,
    BONE_HEAD,
    BONE_LEFT_UPPER_ARM,
    BONE_RIGHT_UPPER_ARM,
    HEAD_YAW_DEADBAND,
    HEAD_YAW_GAIN,
    HEAD_YAW_LIMIT,
    LIP_CLOSED_DIST,
    LIP_OPEN_SPAN,
    SMILE_AMPLITUDE,
    SMILE_RELEASE_THRESHOLD,
    UPPER_ARM_ANGLE,
)
from ..core.types import AnimationSignal


def lip_ratio(lip_dist: float) -> float:
    """
    Convert a lip distance to a mouth-open weight.

    LIP_CLOSED_DIST is the closed-mouth baseline and LIP_OPEN_SPAN the extra
    distance at full open, both in detector pixels.

    Args:
        lip_dist: Vertical lip distance in detector pixels

    Returns:
        Mouth-open weight in [0, 1]
    """
    ratio = (lip_dist - LIP_CLOSED_DIST) / LIP_OPEN_SPAN
    if ratio < 0:
        return 0.0
    if ratio > 1:
        return 1.0
    return ratio


class AnimationMapper(BaseAnimationMapper):
    """
    Writes the latest animation signals onto a humanoid avatar once per render frame.

    Smile is played as a decaying oscillation driven by wall-clock phase: while
    smiling, Joy follows 0.8 * sin(pi * t) and the smile ends the first frame
    its magnitude drops under the release threshold. Re-triggering mid-decay
    just continues from the oscillator's current phase.
    """

    def map(self,
            signal: AnimationSignal,
            avatar: BaseAvatar,
            delta_time: float,
            elapsed_time: float) -> None:
        """
        Map signals onto the avatar for one frame and advance it.

        Args:
            signal: Latest animation signals; smiling and prev_head_yaw_angle are updated here
            avatar: Avatar to drive
            delta_time: Seconds since the previous render frame
            elapsed_time: Seconds since the avatar became available
        """
        s = math.sin(math.pi * elapsed_time)

        if signal.smiling:
            self._apply_smile(signal, avatar, s)

        # Runs after the smile branch so the frame that ends a smile already tracks the lips
        if signal.lip_dist is not None and not signal.smiling:
            avatar.set_blend_shape(BLEND_SHAPE_A, lip_ratio(signal.lip_dist))

        if signal.head_yaw_angle is not None:
            self._apply_head_yaw(signal, avatar)

        self._apply_idle_pose(avatar)

        # Rig update last so it sees this frame's target pose
        avatar.update(delta_time)

    def _apply_smile(self, signal: AnimationSignal, avatar: BaseAvatar, s: float) -> None:
        s *= SMILE_AMPLITUDE
        # Smiling overrides mouth-open tracking
        avatar.set_blend_shape(BLEND_SHAPE_A, 0.0)
        avatar.set_blend_shape(BLEND_SHAPE_JOY, s)

        if abs(s) < SMILE_RELEASE_THRESHOLD:
            signal.smiling = False
            avatar.set_blend_shape(BLEND_SHAPE_JOY, 0.0)

    def _apply_head_yaw(self, signal: AnimationSignal, avatar: BaseAvatar) -> None:
        angle = signal.head_yaw_angle
        prev = signal.prev_head_yaw_angle

        # Dead band against per-frame landmark jitter; no baseline means no change
        if prev is not None and abs(angle - prev) > HEAD_YAW_DEADBAND:
            # Nose-vector proxy has a shallow range, so amplify it
            y = angle * HEAD_YAW_GAIN
            # Implausible values are dropped for this frame, not clamped
            if abs(y) < HEAD_YAW_LIMIT:
                head = avatar.get_bone_node(BONE_HEAD)
                if head is not None:
                    head.rotation[1] = y

        signal.prev_head_yaw_angle = angle

    def _apply_idle_pose(self, avatar: BaseAvatar) -> None:
        self._set_rotation_z(avatar.get_bone_node(BONE_LEFT_UPPER_ARM), UPPER_ARM_ANGLE)
        self._set_rotation_z(avatar.get_bone_node(BONE_RIGHT_UPPER_ARM), -UPPER_ARM_ANGLE)

    @staticmethod
    def _set_rotation_z(bone: Optional[BoneNode], angle: float) -> None:
        if bone is not None:
            bone.rotation[2] = angle
