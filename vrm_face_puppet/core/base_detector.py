"""Base class for face detection systems."""

from abc import ABC, abstractmethod
from typing import Optional, Union
import numpy as np
import torch

from .types import FaceResult


class BaseDetector(ABC):
    """Abstract base class for face detectors producing landmarks and expressions."""

    @abstractmethod
    def load(self, weights_dir: str) -> None:
        """
        Load all model weights. Must complete before any detection attempt.

        Args:
            weights_dir: Directory holding the model weights
        """
        pass

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether every sub-model is ready for detection."""
        pass

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[FaceResult]:
        """
        Detect a single face in the given image.

        Args:
            image: Input image as numpy array (H, W, 3) in BGR format

        Returns:
            Face result, or None if no face was detected
        """
        pass

    def postprocess_landmarks(self, landmarks: Union[np.ndarray, torch.Tensor]) -> torch.Tensor:
        """
        Convert raw landmarks to a float tensor of (x, y) pixel coordinates.
        Moved to GPU when one is available.

        Args:
            landmarks: Raw landmarks from detector (N, 2) or (N, 3) in pixel coordinates

        Returns:
            Landmarks as torch tensor (N, 2)
        """
        if isinstance(landmarks, np.ndarray):
            landmarks = torch.from_numpy(np.ascontiguousarray(landmarks))

        if torch.cuda.is_available():
            landmarks = landmarks.cuda()

        # Depth is not used by any signal
        return landmarks[:, :2].float()
