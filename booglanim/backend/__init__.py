from .base import PlaybackState, RenderBackend, Snapshot
from .compositor import Compositor, bezier_points
from .moviepy_backend import MoviePyBackend

__all__ = [
    "PlaybackState",
    "RenderBackend",
    "Snapshot",
    "Compositor",
    "bezier_points",
    "MoviePyBackend",
]
