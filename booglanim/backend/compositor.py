#!/usr/bin/env python3
"""
Frame compositor

Draws one snapshot of things onto a Pillow canvas. Coordinates are canvas
pixels with the origin at the top left; a thing's `pos` is the centre of
its image and `scale` is the drawn width. Limbs are cubic Beziers through
the first three joints, stroked `thickness * scale` wide, drawn behind the
character's image unless `limbs_in_front` is set.
"""

from typing import Dict, List, Sequence, Tuple

from PIL import Image, ImageDraw

from booglanim.errors import BooglanimError
from booglanim.point import Point, mid
from booglanim.sdk import Limb
from booglanim.things import Character, Obj, Thing, character_to_canvas

BEZIER_STEPS = 24
DEBUG_LINE = (0, 170, 0)
DEBUG_JOINT = (0, 51, 153)


def bezier_points(joints: Sequence[Point], steps: int = BEZIER_STEPS) -> List[Tuple[float, float]]:
    """
    Sample the limb curve. Two joints give a straight segment; otherwise the
    curve runs j0 -> j2 with control points mid(j0, j1) and mid(j1, j2).
    """
    if len(joints) == 2:
        return [(joints[0].x, joints[0].y), (joints[1].x, joints[1].y)]
    p0, p3 = joints[0], joints[2]
    c1, c2 = mid(joints[0], joints[1]), mid(joints[1], joints[2])
    out = []
    for i in range(steps + 1):
        t = i / steps
        u = 1 - t
        x = u * u * u * p0.x + 3 * u * u * t * c1.x + 3 * u * t * t * c2.x + t * t * t * p3.x
        y = u * u * u * p0.y + 3 * u * u * t * c1.y + 3 * u * t * t * c2.y + t * t * t * p3.y
        out.append((x, y))
    return out


class Compositor:
    def __init__(self, width: int, height: int, bg: Tuple[int, int, int] = (0, 0, 0)):
        self.width = width
        self.height = height
        self.bg = bg

    def render(self, things: Sequence[Thing], images: Dict[int, Image.Image]) -> Image.Image:
        canvas = Image.new("RGBA", (self.width, self.height), self.bg + (255,))
        for thing in things:
            if not thing.common().visible:
                continue
            self.draw_thing(canvas, thing, images)
        return canvas.convert("RGB")

    def source_image(self, thing: Thing, images: Dict[int, Image.Image]) -> Image.Image:
        ref = thing.common().img
        if isinstance(ref, Image.Image):
            img = ref
        else:
            try:
                img = images[ref]
            except KeyError:
                raise BooglanimError(f"resource id {ref} was never loaded") from None
        if isinstance(thing, Obj):
            w, h = img.size
            tl, wh = thing.subrect.top_left, thing.subrect.wh
            box = (
                round(tl.x * w),
                round(tl.y * h),
                round((tl.x + wh.x) * w),
                round((tl.y + wh.y) * h),
            )
            if box != (0, 0, w, h):
                img = img.crop(box)
        return img

    def draw_image(self, canvas: Image.Image, thing: Thing, images: Dict[int, Image.Image]) -> None:
        view = thing.common()
        img = self.source_image(thing, images)
        src_w, src_h = img.size
        w = round(view.scale)
        h = round(view.scale * src_h / src_w) if src_w else 0
        if w <= 0 or h <= 0:
            return
        img = img.convert("RGBA").resize((w, h))
        left = round(view.pos.x - w / 2)
        top = round(view.pos.y - h / 2)
        canvas.paste(img, (left, top), img)

    def draw_limb(self, draw: ImageDraw.ImageDraw, limb: Limb, character: Character) -> None:
        joints = [character_to_canvas(p, character) for p in limb.points]
        width = max(1, round(limb.thickness * character.scale))
        color = (limb.color.r, limb.color.g, limb.color.b)
        curve = bezier_points(joints)
        draw.line(curve, fill=color, width=width, joint="curve")
        r = width / 2
        for x, y in (curve[0], curve[-1]):
            draw.ellipse((x - r, y - r, x + r, y + r), fill=color)

    def draw_debug(self, draw: ImageDraw.ImageDraw, limb: Limb, character: Character) -> None:
        joints = [character_to_canvas(p, character) for p in limb.points]
        draw.line([(j.x, j.y) for j in joints], fill=DEBUG_LINE, width=3)
        for j in joints:
            draw.ellipse((j.x - 10, j.y - 10, j.x + 10, j.y + 10), fill=DEBUG_JOINT)

    def draw_thing(self, canvas: Image.Image, thing: Thing, images: Dict[int, Image.Image]) -> None:
        if not isinstance(thing, Character):
            self.draw_image(canvas, thing, images)
            return
        if thing.limbs_in_front:
            self.draw_image(canvas, thing, images)
        draw = ImageDraw.Draw(canvas)
        for limb in thing.limbs:
            self.draw_limb(draw, limb, thing)
        if not thing.limbs_in_front:
            self.draw_image(canvas, thing, images)
        if thing.debug:
            draw = ImageDraw.Draw(canvas)
            for limb in thing.limbs:
                self.draw_debug(draw, limb, thing)
