from __future__ import annotations

import math
from typing import List, Optional

from booglanim.errors import TaskFailedError, TimelineStalledError
from booglanim.things import Thing
from booglanim.utils.logs import get_logger
from booglanim.world import Group, Immediate, Single, World

log = get_logger("timeline")

Snapshot = List[Thing]


class Timeline:
    """
    Frame-indexed scheduler over a World's task list.

    Each tick walks the tasks in order, keeping a running offset: a Single
    or Immediate task is called with `frame - offset` on every tick and then
    pushes the offset by its length, while a Group only runs once the frame
    has reached the offset accumulated before it and stops the walk if it
    has not. The return value of tick() is the timeline length known so far.
    """

    def __init__(self, world: World, max_frames: int = 100_000):
        self.world = world
        self.max_frames = max_frames
        self.frame = 0

    def tick(self) -> int:
        offset = 0
        for index, task in enumerate(self.world.tasks):
            relative = self.frame - offset
            try:
                if isinstance(task, Group):
                    if self.frame < offset:
                        break
                    for r in task.runs:
                        r.run(relative)
                    offset += task.last_frame
                elif isinstance(task, Single):
                    task.run.run(relative)
                    offset += task.last_frame
                elif isinstance(task, Immediate):
                    task.callback(relative)
                else:  # pragma: no cover - World normalizes tasks
                    raise TypeError(f"unknown task shape {type(task).__name__}")
            except Exception as e:
                log.error(f"task {index} failed at frame {self.frame}: {e}")
                raise TaskFailedError(self.frame, index, e) from e
        self.world.things.sort(key=lambda t: t.layer)
        self.frame += 1
        return offset

    def snapshot(self) -> Snapshot:
        return [t.snapshot() for t in self.world.things]

    def run(self, limit: Optional[int] = None) -> List[Snapshot]:
        """
        Tick until the frame counter reaches the known length, capturing a
        snapshot before every tick. The first snapshot is the initial state.

        Raises:
            TimelineStalledError: if more than `limit` (default max_frames) ticks are needed
        """
        limit = self.max_frames if limit is None else limit
        frames: List[Snapshot] = []
        total: float = math.inf
        while self.frame < total:
            if self.frame >= limit:
                raise TimelineStalledError(limit, total)
            frames.append(self.snapshot())
            total = self.tick()
        log.info(f"timeline finished after {len(frames)} frame(s)")
        return frames
