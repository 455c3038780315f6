"""Mapper implementations for animation signal to avatar conversion."""

from .animation_mapper import AnimationMapper, lip_ratio

__all__ = [
    "AnimationMapper",
    "lip_ratio",
]
