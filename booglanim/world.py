"""
World: everything one build produces. Resources, things, the ordered task
list and the frame rate the exporter should use.

Tasks come in three shapes, normalized when the World is built:
  Single(run)         one Run, placed after everything before it
  Group(runs)         several Runs sharing one window
  Immediate(callback) a bare per-frame callback that takes no time
"""

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple, Union

from booglanim.anim import Run
from booglanim.errors import InvalidTaskError
from booglanim.resources import ResourceTable
from booglanim.sdk import DEFAULT_FPS
from booglanim.things import Thing


@dataclass(frozen=True)
class Single:
    run: Run

    @property
    def last_frame(self) -> int:
        return self.run.last_frame


@dataclass(frozen=True)
class Group:
    runs: Tuple[Run, ...]

    def __post_init__(self):
        if not self.runs:
            raise InvalidTaskError("a group needs at least one run")
        for r in self.runs:
            if not isinstance(r, Run):
                raise InvalidTaskError(f"group members must be Runs, got {type(r).__name__}")

    @property
    def last_frame(self) -> int:
        return max(r.last_frame for r in self.runs)


@dataclass(frozen=True)
class Immediate:
    callback: Callable[[int], None]

    @property
    def last_frame(self) -> int:
        return 0


Task = Union[Single, Group, Immediate]


def as_task(item) -> Task:
    """Coerce a Run, a list of Runs or a callable into a task variant."""
    if isinstance(item, (Single, Group, Immediate)):
        return item
    if isinstance(item, Run):
        return Single(item)
    if isinstance(item, (list, tuple)):
        return Group(tuple(item))
    if callable(item):
        return Immediate(item)
    raise InvalidTaskError(f"cannot schedule {type(item).__name__!s} as a task")


@dataclass
class World:
    res: ResourceTable
    things: List[Thing]
    tasks: Sequence = field(default_factory=tuple)
    fps: int = DEFAULT_FPS

    def __post_init__(self):
        if not isinstance(self.res, ResourceTable):
            raise InvalidTaskError("World.res must be a ResourceTable")
        if self.fps <= 0:
            raise InvalidTaskError(f"fps must be positive, got {self.fps}")
        self.things = list(self.things)
        for t in self.things:
            if not isinstance(t, Thing):
                raise InvalidTaskError(f"World.things may only hold things, got {type(t).__name__}")
        self.tasks = tuple(as_task(t) for t in self.tasks)


__all__ = ["Single", "Group", "Immediate", "Task", "as_task", "World"]
