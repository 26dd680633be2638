#!/usr/bin/env python3
"""
Animation Primitives for the timeline

This module provides the building blocks a script uses to describe a
timeline. `from_` and `at` window a body onto a range of frames and return a
Run the scheduler can place; the mutators (`animate`, `move`, `resize`,
`lock`, `lock_to_limb`, `move_limb_to`) are bodies that change a thing a
little on every frame they are called.

Mutators are called as `mutator(frame, duration)` with a frame relative to
the start of their window. On relative frame 0 they capture what they need
(velocity, offsets, start points) and every later frame reuses it.
"""

import copy
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from booglanim.errors import InvalidTaskError, TimingError
from booglanim.point import Point, add, pt, scale, sub
from booglanim.sdk import Limb
from booglanim.things import (
    Character,
    Thing,
    canvas_to_character,
    character_to_canvas,
    position_of,
)
from booglanim.utils.logs import get_logger

log = get_logger("anim")


@dataclass
class Run:
    """A per-frame procedure plus the frame its window ends on."""

    run: Callable[[int], None]
    last_frame: int

    def __call__(self, frame: int) -> None:
        self.run(frame)


def from_(start_frame: int, end_frame: int, body: Callable[[int, int], None]) -> Run:
    """
    Call body(frame - start, end - start) while start <= frame < end.

    Raises:
        TimingError: if the window is empty or reversed
    """
    if end_frame <= start_frame:
        raise TimingError(f"empty window: from_({start_frame}, {end_frame})")
    duration = end_frame - start_frame

    def run(frame: int) -> None:
        if start_frame <= frame < end_frame:
            body(frame - start_frame, duration)

    return Run(run, end_frame)


def at(frame: int, body: Callable[[], None]) -> Run:
    """Call body() once, on exactly `frame`."""

    def run(f: int) -> None:
        if f == frame:
            body()

    return Run(run, frame)


class Mutator:
    """
    Base for stateful per-frame bodies.

    Subclasses implement initialize(duration), which captures parameters from
    the current state of the things involved, and step(frame, duration).
    """

    needs_duration = True

    def __init__(self):
        self.initialized = False

    def initialize(self, duration: int) -> None:
        raise NotImplementedError

    def step(self, frame: int, duration: int) -> None:
        raise NotImplementedError

    def __call__(self, frame: int, duration: int = 0) -> None:
        if frame == 0:
            if self.needs_duration and duration <= 0:
                raise TimingError(
                    f"{type(self).__name__} needs a positive duration, got {duration}"
                )
            self.initialize(duration)
            self.initialized = True
            log.debug(f"{type(self).__name__} initialized over {duration} frame(s)")
        elif not self.initialized:
            raise TimingError(
                f"{type(self).__name__} stepped at frame {frame} before its first frame"
            )
        self.step(frame, duration)


class Animate(Mutator):
    """Flip through poses (limb sets) or image ids, one per frame."""

    needs_duration = False

    def __init__(
        self,
        thing: Thing,
        frames: Union[Sequence[List[Limb]], Sequence[int]],
        reverse: bool = False,
        bounce: bool = False,
    ):
        super().__init__()
        self.thing = thing
        self.frames = list(frames)
        self.reverse = reverse
        self.bounce = bounce
        self.poses = bool(self.frames) and isinstance(self.frames[0], (list, tuple))
        if self.poses and not isinstance(thing, Character):
            raise InvalidTaskError("only characters can be animated with poses")

    def index(self, frame: int) -> int:
        n = len(self.frames)
        if n == 1:
            i = 0
        elif not self.bounce:
            i = frame % n
        else:
            last = n - 1
            i = last - abs(frame % (2 * last) - last)
        if self.reverse:
            i = n - 1 - i
        return i

    def initialize(self, duration: int) -> None:
        pass

    def step(self, frame: int, duration: int) -> None:
        if not self.frames:
            return
        selected = self.frames[self.index(frame)]
        if self.poses:
            self.thing.limbs = copy.deepcopy(list(selected))
        else:
            self.thing.img = selected

    def __call__(self, frame: int, duration: int = 0) -> None:
        # stateless: any frame can be shown first
        self.step(frame, duration)


class Move(Mutator):
    """Constant-velocity move, velocity fixed from the position on frame 0."""

    def __init__(self, thing: Thing, to: Point):
        super().__init__()
        self.thing = thing
        self.to = to
        self.velocity: Optional[Point] = None

    def initialize(self, duration: int) -> None:
        self.velocity = scale(1 / duration, sub(self.to, self.thing.pos))

    def step(self, frame: int, duration: int) -> None:
        self.thing.pos = add(self.thing.pos, self.velocity)


class Resize(Mutator):
    def __init__(self, thing: Thing, size: float):
        super().__init__()
        self.thing = thing
        self.size = size
        self.delta = 0.0

    def initialize(self, duration: int) -> None:
        self.delta = (self.size - self.thing.scale) / duration

    def step(self, frame: int, duration: int) -> None:
        self.thing.scale += self.delta


class Lock(Mutator):
    """
    Rigidly attach one thing to another. The offset and scale ratio are
    captured on frame 0, relative to the anchor's scale; afterwards the
    attached thing follows the anchor's position and scale.
    """

    needs_duration = False

    def __init__(self, thing: Thing, anchor: Thing, offset: Point):
        super().__init__()
        self.thing = thing
        self.anchor = anchor
        self.offset = offset
        self.relative_offset: Optional[Point] = None
        self.relative_scale = 1.0

    def anchor_point(self) -> Point:
        return self.anchor.pos

    def initialize(self, duration: int) -> None:
        if self.anchor.scale == 0:
            raise InvalidTaskError("cannot lock to a thing with zero scale")
        self.relative_offset = scale(1 / self.anchor.scale, self.offset)
        self.relative_scale = self.thing.scale / self.anchor.scale

    def step(self, frame: int, duration: int) -> None:
        self.thing.pos = add(self.anchor_point(), scale(self.anchor.scale, self.relative_offset))
        self.thing.scale = self.relative_scale * self.anchor.scale


class LockToLimb(Lock):
    """Lock whose anchor is one joint of a character, re-read every frame."""

    def __init__(self, thing: Thing, character: Character, limb: int, joint: int, offset: Point):
        super().__init__(thing, character, offset)
        self.limb = limb
        self.joint = joint

    def anchor_point(self) -> Point:
        return character_to_canvas(self.anchor.joint(self.limb, self.joint), self.anchor)


class MoveLimbTo(Mutator):
    """Slide one joint in a straight line to a thing's position or a point."""

    def __init__(
        self,
        character: Character,
        limb: int,
        joint: int,
        destination: Union[Thing, Point],
        offset: Optional[Point] = None,
    ):
        super().__init__()
        self.character = character
        self.limb = limb
        self.joint = joint
        self.destination = destination
        self.offset = offset if offset is not None else pt(0, 0)
        self.start: Optional[Point] = None
        self.diff: Optional[Point] = None

    def initialize(self, duration: int) -> None:
        finish = add(position_of(self.destination), self.offset)
        self.start = character_to_canvas(self.character.joint(self.limb, self.joint), self.character)
        self.diff = sub(finish, self.start)

    def step(self, frame: int, duration: int) -> None:
        canvas = add(scale(frame / duration, self.diff), self.start)
        self.character.set_joint(self.limb, self.joint, canvas_to_character(canvas, self.character))


def animate(thing: Thing, frames, reverse: bool = False, bounce: bool = False) -> Animate:
    return Animate(thing, frames, reverse=reverse, bounce=bounce)


def move(thing: Thing, to: Point) -> Move:
    return Move(thing, to)


def resize(thing: Thing, size: float) -> Resize:
    return Resize(thing, size)


def lock(thing: Thing, anchor: Thing, offset: Point) -> Lock:
    return Lock(thing, anchor, offset)


def lock_to_limb(thing: Thing, character: Character, limb: int, joint: int, offset: Point) -> LockToLimb:
    return LockToLimb(thing, character, limb, joint, offset)


def move_limb_to(
    character: Character,
    limb: int,
    joint: int,
    destination: Union[Thing, Point],
    offset: Optional[Point] = None,
) -> MoveLimbTo:
    return MoveLimbTo(character, limb, joint, destination, offset)


__all__ = [
    "Run",
    "from_",
    "at",
    "Mutator",
    "Animate",
    "Move",
    "Resize",
    "Lock",
    "LockToLimb",
    "MoveLimbTo",
    "animate",
    "move",
    "resize",
    "lock",
    "lock_to_limb",
    "move_limb_to",
]
