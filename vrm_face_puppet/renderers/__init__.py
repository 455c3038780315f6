"""Renderer implementations for the avatar scene."""

from .scene_renderer import SceneRenderer

__all__ = [
    "SceneRenderer",
]
