"""Base class for mapping animation signals onto an avatar."""

from abc import ABC, abstractmethod

from .base_avatar import BaseAvatar
from .types import AnimationSignal


class BaseAnimationMapper(ABC):
    """Abstract base class for per-frame signal to avatar mapping."""

    @abstractmethod
    def map(self,
            signal: AnimationSignal,
            avatar: BaseAvatar,
            delta_time: float,
            elapsed_time: float) -> None:
        """
        Write bone rotations and blend shape weights for one render frame,
        then advance the avatar by delta_time.

        Args:
            signal: Latest animation signals (may be mutated)
            avatar: Avatar to drive
            delta_time: Seconds since the previous render frame
            elapsed_time: Seconds since the avatar became available
        """
        pass
