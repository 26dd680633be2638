from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from booglanim.things import Thing

Snapshot = List[Thing]
FrameCallback = Callable[[int], None]


@dataclass
class PlaybackState:
    playing: bool = False
    reverse: bool = False
    frame: int = 0


class RenderBackend(ABC):
    """
    Everything the studio needs from a renderer. Resources must be loaded
    (update_media_resources awaited) before frames are sent.

    Playback commands only move a PlaybackState here; a backend with a live
    preview reads it from its own draw loop.
    """

    def __init__(self):
        self.playback = PlaybackState()
        self.frames: List[Snapshot] = []

    @abstractmethod
    async def update_media_resources(self, res: Sequence[Tuple[int, str]], fps: int) -> None:
        ...

    @abstractmethod
    async def export(self, path: str, on_encoded_frame: Optional[FrameCallback] = None) -> None:
        ...

    async def add_frames(self, frames: Sequence[Snapshot]) -> None:
        self.frames = list(frames)
        self._seek(0)

    def _seek(self, frame: int) -> None:
        last = max(len(self.frames) - 1, 0)
        self.playback.frame = min(max(frame, 0), last)

    async def play(self) -> None:
        self.playback.playing = True
        self.playback.reverse = False

    async def pause(self) -> None:
        self.playback.playing = False
        self.playback.reverse = False

    async def stop(self) -> None:
        await self.pause()
        self._seek(0)

    async def next_frame(self) -> None:
        await self.pause()
        self._seek(self.playback.frame + 1)

    async def prev_frame(self) -> None:
        await self.pause()
        self._seek(self.playback.frame - 1)

    async def reverse(self) -> None:
        self.playback.playing = True
        self.playback.reverse = True
