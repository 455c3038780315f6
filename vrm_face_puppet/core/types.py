"""Type definitions for face detection results and animation signals."""

from dataclasses import dataclass, field
from typing import Optional, Dict, NamedTuple, Tuple
import torch


class Point2D(NamedTuple):
    """A 2D point (or vector) in detector pixel space."""
    x: float
    y: float


@dataclass
class FaceResult:
    """
    Output of a single detection attempt for one face.

    Produced by the detector, consumed once by the signal extractor and discarded.
    """

    # Landmark coordinates (N, 2) in detector pixel space, iBUG 68-point layout
    landmarks: torch.Tensor

    # Expression name -> score in [0, 1]
    expressions: Dict[str, float] = field(default_factory=dict)

    # Detection confidence
    score: float = 1.0

    # Face box (x1, y1, x2, y2) in pixels
    bbox: Optional[Tuple[float, float, float, float]] = None

    def point(self, index: int) -> Point2D:
        """Return a single landmark as a plain 2D point."""
        x, y = self.landmarks[index, :2].tolist()
        return Point2D(float(x), float(y))


@dataclass
class AnimationSignal:
    """
    Latest-value animation signals shared between the detection and render loops.

    There is no history and no lock: whichever loop wrote last wins, and the
    render loop may observe fields from different detection passes.
    """

    smiling: bool = False
    lip_dist: Optional[float] = None
    head_yaw_angle: Optional[float] = None
    prev_head_yaw_angle: Optional[float] = None
