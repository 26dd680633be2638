"""
Test configuration and fixtures.

This module provides pytest fixtures so that:
- audit events land in the test's tmp_path, never in the repo
- resource files (PNG images, character files) are generated on the fly
- studio tests run against an in-memory backend instead of a renderer
"""

import os
import sys

import pytest
from PIL import Image

# Ensure repo root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from booglanim.backend.base import RenderBackend
from booglanim.config.schemas import StudioConfig
from booglanim.point import pt
from booglanim.sdk import CharacterFile, Color, Limb, png_to_base64, write_character_file


@pytest.fixture(autouse=True)
def isolated_audit_log(tmp_path, monkeypatch):
    """Redirect the build audit log for every test"""
    path = tmp_path / "logs" / "builds.jsonl"
    monkeypatch.setenv("BOOGLANIM_AUDIT_LOG", str(path))
    return path


@pytest.fixture
def resource_dir(tmp_path):
    d = tmp_path / "res"
    d.mkdir()
    return d


def make_png(path, size=(10, 10), color=(255, 0, 0, 255)):
    Image.new("RGBA", size, color).save(path)
    return path


@pytest.fixture
def png_file(resource_dir):
    return make_png(resource_dir / "ball.png")


@pytest.fixture
def sample_limbs():
    return [
        Limb(points=[pt(-2, 0), pt(0, 0), pt(2, 0)], color=Color(r=0, g=255, b=0), thickness=0.5),
        Limb(points=[pt(0, 0), pt(1, 1), pt(2, 0)]),
    ]


@pytest.fixture
def character_file(resource_dir, sample_limbs):
    png = make_png(resource_dir / "hero.png", size=(4, 8), color=(0, 0, 255, 255))
    path = resource_dir / "hero.json"
    write_character_file(CharacterFile(img=png_to_base64(png), limbs=sample_limbs, scale=50), path)
    return path


@pytest.fixture
def studio_config(resource_dir):
    return StudioConfig(
        render={"width": 64, "height": 48},
        build={"poll_interval_sec": 0.001, "max_frames": 500},
        paths={"resource_root": str(resource_dir)},
    )


class FakeBackend(RenderBackend):
    """Records what the studio sends instead of rendering it"""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.fail_resources = False

    async def update_media_resources(self, res, fps):
        if self.fail_resources:
            raise RuntimeError("backend unavailable")
        self.calls.append(("update_media_resources", list(res), fps))

    async def add_frames(self, frames):
        self.calls.append(("add_frames", len(frames)))
        await super().add_frames(frames)

    async def export(self, path, on_encoded_frame=None):
        self.calls.append(("export", path))
        for index in range(len(self.frames)):
            if on_encoded_frame is not None:
                on_encoded_frame(index)


@pytest.fixture
def fake_backend():
    return FakeBackend()
