"""
Drawable, animatable things: skeletal characters and flat objects.

A Character owns limbs whose joints are stored relative to the character
(already divided by its scale and offset by its position), so moving or
resizing the character carries every limb with it.
"""

import asyncio
import copy
from contextvars import ContextVar
from pathlib import Path
from typing import List, Literal, NamedTuple, Optional, Union

from PIL import Image
from pydantic import BaseModel, Field

from booglanim.point import Point, add, pt, scale, sub
from booglanim.resources import ResourceTable
from booglanim.sdk import OBJ_DEFAULT_SCALE, Limb, read_character_file, read_pose_file

# A drawable image: either a decoded image or an id in the world's ResourceTable.
ImageRef = Union[int, Image.Image]

resource_root: ContextVar[Optional[str]] = ContextVar("resource_root", default=None)


class ThingView(NamedTuple):
    pos: Point
    scale: float
    img: ImageRef
    layer: float
    visible: bool


class Thing(BaseModel):
    kind: str
    pos: Point = Field(default_factory=lambda: pt(0, 0))
    scale: float = 1.0
    img: ImageRef = 0
    layer: float = 0
    visible: bool = True

    class Config:
        arbitrary_types_allowed = True

    def common(self) -> ThingView:
        return ThingView(self.pos, self.scale, self.img, self.layer, self.visible)

    def snapshot(self) -> "Thing":
        """Deep copy that shares the image handle instead of copying pixels."""
        return copy.deepcopy(self, {id(self.img): self.img})


class Character(Thing):
    kind: Literal["character"] = "character"
    limbs: List[Limb] = Field(default_factory=list)
    limbs_in_front: bool = False
    debug: bool = False

    def joint(self, limb: int, joint: int) -> Point:
        return self.limbs[limb].points[joint]

    def set_joint(self, limb: int, joint: int, value: Point) -> None:
        self.limbs[limb].points[joint] = value


class SubRect(BaseModel):
    """Normalized source rectangle for spritesheet sampling."""

    top_left: Point = Field(default_factory=lambda: pt(0, 0))
    wh: Point = Field(default_factory=lambda: pt(1, 1))


class Obj(Thing):
    kind: Literal["obj"] = "obj"
    scale: float = OBJ_DEFAULT_SCALE
    subrect: SubRect = Field(default_factory=SubRect)


AnyThing = Union[Character, Obj]


def position_of(target: Union[Thing, Point]) -> Point:
    if isinstance(target, Thing):
        return target.pos
    return target


def character_to_canvas(p: Point, character: Character) -> Point:
    return add(character.pos, scale(character.scale, p))


def canvas_to_character(p: Point, character: Character) -> Point:
    return scale(1 / character.scale, sub(p, character.pos))


def resolve_resource(path: str) -> Path:
    p = Path(path)
    if p.is_absolute():
        return p
    root = resource_root.get()
    return Path(root if root is not None else Path.home()) / p


async def load_character(path: str, res: ResourceTable) -> Character:
    """Load a character file; its image is referenced by resource id."""
    data = await asyncio.to_thread(read_character_file, resolve_resource(path))
    return Character(
        limbs=data.limbs,
        pos=pt(0, 0),
        scale=data.scale,
        img=res.add(path),
    )


async def load_character_anim(path: str) -> List[List[Limb]]:
    return await asyncio.to_thread(read_pose_file, resolve_resource(path))


async def load_obj(path: str, res: ResourceTable) -> Obj:
    return Obj(img=res.add(path))


async def load_obj_anim(path: str, frames: int, extension: str, res: ResourceTable) -> List[int]:
    """Register `path/0.ext` .. `path/(frames-1).ext` and return their ids."""
    return [res.add(f"{path}/{i}.{extension}") for i in range(frames)]


__all__ = [
    "ImageRef",
    "ThingView",
    "Thing",
    "Character",
    "Obj",
    "SubRect",
    "AnyThing",
    "Limb",
    "position_of",
    "character_to_canvas",
    "canvas_to_character",
    "resolve_resource",
    "resource_root",
    "load_character",
    "load_character_anim",
    "load_obj",
    "load_obj_anim",
]
