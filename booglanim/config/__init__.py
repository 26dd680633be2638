from .schemas import BgColor, BuildSettings, PathSettings, RenderSettings, StudioConfig

__all__ = ["BgColor", "BuildSettings", "PathSettings", "RenderSettings", "StudioConfig"]
