"""
Exception types raised by booglanim.

Every error a build can hit derives from BooglanimError so the studio and the
CLI can report it uniformly and abort the build.
"""

from typing import Optional


class BooglanimError(Exception):
    """Base class for all booglanim errors."""


class ConfigError(BooglanimError, ValueError):
    """Configuration file could not be parsed or validated."""


class ScriptCompileError(BooglanimError):
    """The user program could not be turned into a runnable unit."""

    def __init__(self, message: str, lineno: Optional[int] = None):
        self.lineno = lineno
        if lineno is not None:
            message = f"line {lineno}: {message}"
        super().__init__(message)


class ScriptImportError(ScriptCompileError):
    """The user program imports something outside the built-in modules."""


class ScriptRuntimeError(BooglanimError):
    """The entry function raised or returned something other than a World."""


class FileFormatError(BooglanimError, ValueError):
    """A character, pose or resource file is malformed or unsupported."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class InvalidTaskError(BooglanimError, ValueError):
    """A task or primitive was built from unusable inputs."""


class TimingError(InvalidTaskError):
    """A window or mutator has no duration to interpolate over."""


class TaskFailedError(BooglanimError):
    """A task raised while the timeline was ticking."""

    def __init__(self, frame: int, task_index: int, cause: BaseException):
        self.frame = frame
        self.task_index = task_index
        super().__init__(
            f"task {task_index} failed at frame {frame}: {type(cause).__name__}: {cause}"
        )


class TimelineStalledError(BooglanimError):
    """The timeline kept growing past the configured frame limit."""

    def __init__(self, max_frames: int, known_total: float):
        self.max_frames = max_frames
        self.known_total = known_total
        super().__init__(
            f"timeline did not finish within {max_frames} frames "
            f"(last known length: {known_total})"
        )


class ExportError(BooglanimError):
    """Export was requested in a state or to a path that cannot work."""


__all__ = [
    "BooglanimError",
    "ConfigError",
    "ScriptCompileError",
    "ScriptImportError",
    "ScriptRuntimeError",
    "FileFormatError",
    "InvalidTaskError",
    "TimingError",
    "TaskFailedError",
    "TimelineStalledError",
    "ExportError",
]
