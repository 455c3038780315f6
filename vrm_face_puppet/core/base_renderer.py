"""Base renderer interface for the avatar scene."""

from abc import ABC, abstractmethod
from typing import List

from .base_avatar import BaseAvatar


class BaseRenderer(ABC):
    """
    Abstract base class for scene renderers.

    A renderer owns the output window, draws the scene on demand and
    reports keyboard input.
    """

    def __init__(self):
        """Initialize base renderer."""
        self.closed = False

    @abstractmethod
    def add_avatar(self, avatar: BaseAvatar) -> None:
        """Add a loaded avatar to the scene."""
        pass

    @abstractmethod
    def render(self) -> None:
        """Draw one frame of the scene."""
        pass

    @abstractmethod
    def process_events(self) -> List[str]:
        """
        Drain pending window events.

        Returns:
            Characters of the keys pressed since the last call
        """
        pass

    @abstractmethod
    def close(self):
        """Close renderer and clean up resources."""
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with automatic cleanup."""
        self.close()
