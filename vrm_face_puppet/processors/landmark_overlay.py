"""Debug view of the webcam frame with detected landmarks drawn on top."""

from typing import Optional, Tuple
import cv2
import numpy as np

from ..core.constants import LANDMARK_DISPLAY_SIZE, LANDMARK_INDICES
from ..core.types import FaceResult

WINDOW_NAME = "landmarks"

# BGR colors per landmark group
GROUP_COLORS = {
    "jaw": (255, 255, 255),         # White
    "right_eyebrow": (255, 255, 0),  # Cyan
    "left_eyebrow": (255, 255, 0),   # Cyan
    "nose": (255, 0, 0),            # Blue
    "right_eye": (0, 255, 0),       # Green
    "left_eye": (0, 255, 0),        # Green
    "mouth": (0, 0, 255),           # Red
}
DEFAULT_COLOR = (0, 255, 0)


class LandmarkOverlay:
    """
    Draws landmarks over the camera frame, scaled to the preview size.

    Not needed for animation; purely a debugging aid.
    """

    def __init__(self, display_size: Tuple[int, int] = LANDMARK_DISPLAY_SIZE):
        """
        Args:
            display_size: Preview size (width, height)
        """
        self.display_size = display_size
        self._shown = False
        self._point_colors = {
            idx: GROUP_COLORS[part]
            for part, indices in LANDMARK_INDICES.items()
            for idx in indices
        }

    def scale_landmarks(self, result: FaceResult, frame_shape: Tuple[int, ...]) -> np.ndarray:
        """
        Map landmarks from frame pixels to preview pixels.

        Args:
            result: Detection result in frame pixel space
            frame_shape: Shape of the source frame (H, W, ...)

        Returns:
            Landmarks (N, 2) in preview pixel space
        """
        height, width = frame_shape[:2]
        display_width, display_height = self.display_size
        points = result.landmarks[:, :2].cpu().numpy().astype(np.float64)
        points[:, 0] *= display_width / width
        points[:, 1] *= display_height / height
        return points

    def draw(self, frame: np.ndarray, result: Optional[FaceResult]) -> np.ndarray:
        """
        Render the preview image.

        Args:
            frame: Camera frame (H, W, 3) BGR
            result: Detection result, or None to show the bare frame

        Returns:
            Preview image at display size
        """
        image = cv2.resize(frame, self.display_size)
        if result is None:
            return image

        for idx, (x, y) in enumerate(self.scale_landmarks(result, frame.shape)):
            color = self._point_colors.get(idx, DEFAULT_COLOR)
            cv2.circle(image, (int(round(x)), int(round(y))), 2, color, -1)
        return image

    def show(self, image: np.ndarray):
        cv2.imshow(WINDOW_NAME, image)
        cv2.waitKey(1)
        self._shown = True

    def close(self):
        if self._shown:
            cv2.destroyWindow(WINDOW_NAME)
            self._shown = False
