#!/usr/bin/env python3
"""
Core SDK for booglanim

This module provides the single source of truth for persisted file formats,
shared constants and the limb types that characters are built from.
Character files and pose files written by the character editors are read
and written here so their JSON shape stays in one place.
"""

import base64
import io
import json
from pathlib import Path
from typing import List, Union

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field, ValidationError, validator

from booglanim.errors import FileFormatError
from booglanim.point import Point


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_FPS = 24
OBJ_DEFAULT_SCALE = 100.0
SUPPORTED_IMAGE_TYPES = (".png", ".bmp", ".jpg", ".jpeg", ".webp")
CHARACTER_FILE_TYPE = ".json"
EXPORT_EXTENSION = ".mp4"


# ============================================================================
# PYDANTIC MODELS
# ============================================================================

class Color(BaseModel):
    """Stroke colour of a limb."""

    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class Limb(BaseModel):
    """Joint chain of a character, in the character's local frame."""

    points: List[Point] = Field(..., description="Joint positions, character-relative")
    color: Color = Field(default_factory=lambda: Color(r=255, g=233, b=209))
    thickness: float = Field(0.2, ge=0, description="Stroke width as a fraction of scale")

    @validator('points')
    def validate_points(cls, v):
        if len(v) < 2:
            raise ValueError("A limb needs at least two joints")
        return v


class CharacterFile(BaseModel):
    """On-disk character: base64 PNG image, limbs and a default scale."""

    img: str = Field(..., description="Base64-encoded PNG")
    limbs: List[Limb] = Field(default_factory=list)
    scale: float = Field(..., description="Default on-canvas width")

    @validator('scale')
    def validate_scale(cls, v):
        if v <= 0:
            raise ValueError("Character scale must be positive")
        return v


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def read_json_file(path: Union[str, Path]):
    """Parse a UTF-8 JSON file, raising FileFormatError on anything malformed."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise FileFormatError(str(path), f"invalid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise FileFormatError(str(path), f"not UTF-8 text: {e}") from e


def read_character_file(path: Union[str, Path]) -> CharacterFile:
    """Load and validate a character file."""
    data = read_json_file(path)
    if not isinstance(data, dict):
        raise FileFormatError(str(path), "character file must be a JSON object")
    try:
        return CharacterFile(**data)
    except ValidationError as e:
        raise FileFormatError(str(path), str(e)) from e


def write_character_file(character: CharacterFile, path: Union[str, Path]) -> None:
    """Save a character file as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(character.model_dump(mode="json"), f)


def read_pose_file(path: Union[str, Path]) -> List[List[Limb]]:
    """Load an animation file: a list of frames, each a list of limbs."""
    data = read_json_file(path)
    if not isinstance(data, list) or not all(isinstance(frame, list) for frame in data):
        raise FileFormatError(str(path), "pose file must be a JSON array of limb arrays")
    try:
        return [[Limb(**limb) for limb in frame] for frame in data]
    except (TypeError, ValidationError) as e:
        raise FileFormatError(str(path), str(e)) from e


def write_pose_file(frames: List[List[Limb]], path: Union[str, Path]) -> None:
    """Save an animation file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [[limb.model_dump(mode="json") for limb in frame] for frame in frames]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f)


def png_to_base64(path: Union[str, Path]) -> str:
    """Re-encode any image Pillow can open as PNG and return it base64-encoded."""
    try:
        with Image.open(path) as img:
            buf = io.BytesIO()
            img.save(buf, format="PNG")
    except (OSError, UnidentifiedImageError) as e:
        raise FileFormatError(str(path), f"cannot read image: {e}") from e
    return base64.b64encode(buf.getvalue()).decode("ascii")


def decode_character_image(character: CharacterFile, path: str = "<character>") -> Image.Image:
    """Decode the embedded PNG of a character file into an RGBA image."""
    try:
        raw = base64.b64decode(character.img, validate=True)
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (ValueError, OSError, UnidentifiedImageError) as e:
        raise FileFormatError(path, f"embedded image is not a valid base64 PNG: {e}") from e
    return img.convert("RGBA")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    # Constants
    'DEFAULT_FPS', 'OBJ_DEFAULT_SCALE', 'SUPPORTED_IMAGE_TYPES', 'CHARACTER_FILE_TYPE',
    'EXPORT_EXTENSION',

    # Models
    'Color', 'Limb', 'CharacterFile',

    # Helper functions
    'read_json_file', 'read_character_file', 'write_character_file',
    'read_pose_file', 'write_pose_file',
    'png_to_base64', 'decode_character_image',
]
