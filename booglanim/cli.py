#!/usr/bin/env python3
"""
booglanim command line

    booglanim build SCRIPT [--export OUT.mp4] [--config conf/studio.yaml]
    booglanim validate FILE [FILE ...]
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from booglanim.errors import BooglanimError
from booglanim.sdk import read_character_file, read_json_file, read_pose_file
from booglanim.utils.config import DEFAULT_CONFIG_PATH, load_studio_config


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="booglanim", description="Script and render 2D animations")
    sub = ap.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Run a script and build its frames")
    b.add_argument("script", help="Path to the animation script (.py)")
    b.add_argument("--export", default=None, help="Write the result to this .mp4 file")
    b.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Studio config YAML")
    b.add_argument("--max-frames", type=int, default=None, help="Override build.max_frames")
    b.add_argument("--resource-root", default=None, help="Directory relative resource paths resolve against")

    v = sub.add_parser("validate", help="Validate character and pose files")
    v.add_argument("files", nargs="+", help="Character (.json object) or pose (.json array) files")
    v.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return ap


def validate_file(path: Path) -> str:
    """Validate one file and return a short description of what it holds."""
    data = read_json_file(path)
    if isinstance(data, list):
        frames = read_pose_file(path)
        return f"pose file, {len(frames)} frame(s)"
    character = read_character_file(path)
    return f"character file, {len(character.limbs)} limb(s), scale {character.scale}"


def _cmd_validate(args) -> int:
    failures = 0
    for name in args.files:
        path = Path(name)
        try:
            summary = validate_file(path)
        except (OSError, BooglanimError) as e:
            failures += 1
            print(f"❌ {path}: {e}")
            continue
        print(f"✅ {path}" + (f": {summary}" if args.verbose else ""))
    return 1 if failures else 0


async def _build(args) -> int:
    from booglanim.backend.moviepy_backend import MoviePyBackend
    from booglanim.studio import Studio

    overrides = {}
    if args.max_frames is not None:
        overrides.setdefault("build", {})["max_frames"] = args.max_frames
    if args.resource_root is not None:
        overrides.setdefault("paths", {})["resource_root"] = args.resource_root
    config = load_studio_config(args.config, cli_overrides=overrides)

    source = Path(args.script).read_text(encoding="utf-8")
    studio = Studio(MoviePyBackend(config), config)
    result = await studio.build(source, filename=args.script)
    print(f"Built {result.frame_count} frame(s) at {result.world.fps} fps")
    if args.export:
        await studio.export(args.export)
        print(f"Exported to {args.export}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "validate":
        return _cmd_validate(args)
    try:
        return asyncio.run(_build(args))
    except (OSError, BooglanimError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
