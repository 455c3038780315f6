"""Avatar availability states for the render loop."""

from enum import Enum


class AvatarStatus(Enum):
    """Lifecycle of the avatar asset."""
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
