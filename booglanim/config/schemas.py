from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class BgColor(BaseModel):
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)

    class Config:
        extra = "allow"

    def as_tuple(self):
        return (self.r, self.g, self.b)


class RenderSettings(BaseModel):
    width: int = Field(1280, ge=16, le=7680)
    height: int = Field(720, ge=16, le=4320)
    bg: BgColor = BgColor()
    codec: str = "libx264"

    class Config:
        extra = "allow"


class BuildSettings(BaseModel):
    poll_interval_sec: float = Field(0.1, gt=0, le=10)
    max_frames: int = Field(100_000, ge=1)

    class Config:
        extra = "allow"


class PathSettings(BaseModel):
    resource_root: str = Field(default_factory=lambda: str(Path.home()))
    audit_log: Optional[str] = None

    class Config:
        extra = "allow"


class StudioConfig(BaseModel):
    render: RenderSettings = RenderSettings()
    build: BuildSettings = BuildSettings()
    paths: PathSettings = PathSettings()
    profile: Optional[str] = None

    class Config:
        extra = "allow"
