"""Loader utilities for data-driven scenes."""

from .scene_loader import SceneLoader, SceneLoadResult

__all__ = ['SceneLoader', 'SceneLoadResult']
