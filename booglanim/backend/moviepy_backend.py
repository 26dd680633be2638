#!/usr/bin/env python3
"""
In-process render backend built on Pillow and MoviePy.

Resources are loaded once per build from the serialized resource table;
export composites every stored snapshot and encodes the sequence to MP4.
"""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from moviepy import ImageSequenceClip
from PIL import Image, UnidentifiedImageError

from booglanim.backend.base import FrameCallback, RenderBackend
from booglanim.backend.compositor import Compositor
from booglanim.config.schemas import StudioConfig
from booglanim.errors import ExportError, FileFormatError
from booglanim.sdk import (
    CHARACTER_FILE_TYPE,
    DEFAULT_FPS,
    SUPPORTED_IMAGE_TYPES,
    decode_character_image,
    read_character_file,
)
from booglanim.utils.logs import get_logger

log = get_logger("moviepy_backend")


class MoviePyBackend(RenderBackend):
    def __init__(self, config: Optional[StudioConfig] = None):
        super().__init__()
        self.config = config or StudioConfig()
        render = self.config.render
        self.compositor = Compositor(render.width, render.height, render.bg.as_tuple())
        self.images: Dict[int, Image.Image] = {}
        self.fps = DEFAULT_FPS

    def _resolve(self, key: str) -> Path:
        p = Path(key)
        if p.is_absolute():
            return p
        return Path(self.config.paths.resource_root) / p

    def load_resource(self, key: str) -> Image.Image:
        """
        Load one resource as an RGBA image.

        Raises:
            FileFormatError: unknown extension or unreadable file
        """
        path = self._resolve(key)
        lower = key.lower()
        if lower.endswith(CHARACTER_FILE_TYPE):
            return decode_character_image(read_character_file(path), key)
        if lower.endswith(SUPPORTED_IMAGE_TYPES):
            try:
                with Image.open(path) as img:
                    return img.convert("RGBA")
            except (OSError, UnidentifiedImageError) as e:
                raise FileFormatError(key, f"can't open image: {e}") from e
        raise FileFormatError(
            key,
            f"file extension {Path(key).suffix!r} not recognized, should be one of "
            f"{list(SUPPORTED_IMAGE_TYPES) + [CHARACTER_FILE_TYPE]}",
        )

    def _load_all(self, res: Sequence[Tuple[int, str]]) -> Dict[int, Image.Image]:
        return {rid: self.load_resource(key) for rid, key in res}

    async def update_media_resources(self, res: Sequence[Tuple[int, str]], fps: int) -> None:
        images = await asyncio.to_thread(self._load_all, list(res))
        self.images = images
        self.fps = fps
        await self.stop()
        log.info(f"loaded {len(images)} resource(s) at {fps} fps")

    def render_frame(self, index: int) -> Image.Image:
        return self.compositor.render(self.frames[index], self.images)

    async def export(self, path: str, on_encoded_frame: Optional[FrameCallback] = None) -> None:
        if not self.frames:
            raise ExportError("no frames to export; build first")
        arrays = []
        for index in range(len(self.frames)):
            arrays.append(np.asarray(self.render_frame(index)))
            if on_encoded_frame is not None:
                on_encoded_frame(index)
            await asyncio.sleep(0)
        clip = ImageSequenceClip(arrays, fps=self.fps)
        await asyncio.to_thread(
            clip.write_videofile,
            path,
            codec=self.config.render.codec,
            audio=False,
            logger=None,
        )
        log.info(f"exported {len(arrays)} frame(s) to {path}")
