"""Base frame reader interface for video input sources."""

from abc import ABC, abstractmethod
from typing import Optional, Any
import numpy as np


class BaseFrameReader(ABC):
    """
    Abstract base class for frame readers (cameras, video files, etc.).

    All frame readers return frames in the format: (H, W, 3) BGR uint8 numpy arrays.
    """

    def __init__(self) -> None:
        """Initialize base frame reader."""
        self.fps: float = 30.0
        self.width: int = 0
        self.height: int = 0

    @abstractmethod
    def read(self) -> Optional[np.ndarray]:
        """
        Read the next frame.

        Returns:
            Frame as (H, W, 3) BGR uint8 array, or None if no frame is available
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close reader and clean up resources."""
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Optional[Exception], exc_tb: Optional[Any]) -> None:
        """Context manager exit with automatic cleanup."""
        self.close()
