"""
Studio
Drives a build from script text to frames in the render backend, and
forwards playback/export commands.
"""

from dataclasses import dataclass
from typing import List, Optional

from booglanim.backend.base import RenderBackend, Snapshot
from booglanim.config.schemas import StudioConfig
from booglanim.errors import BooglanimError, ExportError
from booglanim.loader import ScriptJob, compile_script
from booglanim.sdk import EXPORT_EXTENSION
from booglanim.timeline import Timeline
from booglanim.utils.logs import audit_event, get_logger
from booglanim.world import World

log = get_logger("studio")


@dataclass
class BuildResult:
    world: World
    frames: List[Snapshot]

    @property
    def frame_count(self) -> int:
        return len(self.frames)


class Studio:
    """Host for one editor session. Keeps the last successfully built World."""

    def __init__(self, backend: RenderBackend, config: Optional[StudioConfig] = None):
        self.backend = backend
        self.config = config or StudioConfig()
        self.world: Optional[World] = None
        self.status = "idle"
        self.finished_build = False
        self.last_frame = 0

    def _status(self, text: str) -> None:
        self.status = text
        log.info(f"[build] {text}")

    def _audit(self, step: str, status: str, **fields) -> None:
        audit_event(step, status, path=self.config.paths.audit_log, **fields)

    async def build(self, source: str, filename: str = "<script>") -> BuildResult:
        """
        Run the script, tick its World to the end and hand resources and
        frames to the backend. Any failure aborts the build and leaves the
        previous World in place.
        """
        self.finished_build = False
        self._status("building - running editor code...")
        try:
            compiled = compile_script(source, filename)
        except BooglanimError as e:
            self._status("build failed - your code doesn't compile")
            self._audit("compile", "FAIL", file=filename, error=str(e))
            raise
        self._audit("compile", "OK", file=filename, modules=compiled.modules)

        job = ScriptJob(compiled, resource_dir=self.config.paths.resource_root).start()
        try:
            world = await job.wait(self.config.build.poll_interval_sec)
        except BooglanimError as e:
            self._status("build failed - script error")
            self._audit("run_script", "FAIL", file=filename, error=str(e))
            raise
        self._audit("run_script", "OK", file=filename, things=len(world.things), tasks=len(world.tasks))

        try:
            self._status("building - updating media resources...")
            await self.backend.update_media_resources(world.res.serialize(), world.fps)
            self._audit("update_resources", "OK", resources=len(world.res), fps=world.fps)

            self._status("building frames...")
            timeline = Timeline(world, max_frames=self.config.build.max_frames)
            frames = timeline.run()
            self._audit("frames", "OK", frames=len(frames))

            self._status("sending frames...")
            await self.backend.add_frames(frames)
            self._audit("send_frames", "OK", frames=len(frames))
        except Exception as e:
            self._status(f"build failed - {e}")
            self._audit("build", "FAIL", file=filename, error=str(e))
            raise

        self.world = world
        self.last_frame = len(frames)
        self.finished_build = True
        self._status("build complete!")
        return BuildResult(world, frames)

    async def play(self) -> None:
        await self.backend.play()

    async def pause(self) -> None:
        await self.backend.pause()

    async def stop(self) -> None:
        await self.backend.stop()

    async def next_frame(self) -> None:
        await self.backend.next_frame()

    async def prev_frame(self) -> None:
        await self.backend.prev_frame()

    async def reverse(self) -> None:
        await self.backend.reverse()

    def on_encoded_frame(self, index: int) -> None:
        done = index + 1
        if done == self.last_frame:
            self._status("finished rendering video!")
        else:
            self._status(f"{done} frame(s) out of {self.last_frame} completed")

    async def export(self, path: str) -> None:
        if not self.finished_build:
            raise ExportError("you need to finish building before you can export")
        if not path.endswith(EXPORT_EXTENSION):
            raise ExportError(f"invalid file path {path!r}, must end with {EXPORT_EXTENSION}")
        try:
            await self.backend.export(path, self.on_encoded_frame)
        except Exception as e:
            self._audit("export", "FAIL", path=path, error=str(e))
            raise
        self._audit("export", "OK", path=path, frames=self.last_frame)
