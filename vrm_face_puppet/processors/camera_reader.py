"""Camera frame reader using OpenCV."""

from typing import Optional
import cv2
import numpy as np

from ..core.base_frame_reader import BaseFrameReader
from ..core.constants import CAMERA_DEVICE_INDEX
from ..core.exceptions import CameraUnavailableError


class CameraReader(BaseFrameReader):
    """
    Read live frames from a camera device.
    """

    def __init__(self, device_index: int = CAMERA_DEVICE_INDEX) -> None:
        """
        Open the camera device.

        Args:
            device_index: OpenCV camera index

        Raises:
            CameraUnavailableError: If the device cannot be opened
        """
        super().__init__()

        self.device_index = device_index
        self.cap = cv2.VideoCapture(device_index)
        if not self.cap.isOpened():
            self.cap.release()
            raise CameraUnavailableError(f"Failed to open camera device {device_index}")

        # Camera properties
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        self.fps = fps if fps and fps > 0 else self.fps
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    def read(self) -> Optional[np.ndarray]:
        """
        Grab the current camera frame.

        Returns:
            Frame as (H, W, 3) BGR uint8 array, or None if the grab failed
        """
        ret, frame = self.cap.read()
        if not ret:
            return None
        return frame

    def close(self) -> None:
        """Release video capture."""
        if self.cap:
            self.cap.release()
