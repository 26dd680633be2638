"""
booglanim - scripted 2D character animation

This package provides the timeline scheduler, the task primitives scripts
compose it from, and the loader that turns a script into a World.
"""

from .anim import Run, animate, at, from_, lock, lock_to_limb, move, move_limb_to, resize
from .errors import (
    BooglanimError,
    ExportError,
    FileFormatError,
    InvalidTaskError,
    ScriptCompileError,
    ScriptImportError,
    ScriptRuntimeError,
    TaskFailedError,
    TimelineStalledError,
    TimingError,
)
from .loader import ScriptJob, compile_script, run_script
from .point import Point, pt
from .resources import ResourceTable
from .things import Character, Obj, Thing
from .timeline import Timeline
from .world import Group, Immediate, Single, World

__version__ = "0.1.0"
__all__ = [
    "Run",
    "from_",
    "at",
    "animate",
    "move",
    "resize",
    "lock",
    "lock_to_limb",
    "move_limb_to",
    "BooglanimError",
    "ExportError",
    "FileFormatError",
    "InvalidTaskError",
    "ScriptCompileError",
    "ScriptImportError",
    "ScriptRuntimeError",
    "TaskFailedError",
    "TimelineStalledError",
    "TimingError",
    "ScriptJob",
    "compile_script",
    "run_script",
    "Point",
    "pt",
    "ResourceTable",
    "Character",
    "Obj",
    "Thing",
    "Timeline",
    "Single",
    "Group",
    "Immediate",
    "World",
]
