#!/usr/bin/env python3
"""
Tests for the persisted file formats: character files and pose files.
"""

import json

import pytest
from PIL import Image

from booglanim.errors import FileFormatError
from booglanim.point import pt
from booglanim.sdk import (
    CharacterFile,
    Color,
    Limb,
    decode_character_image,
    png_to_base64,
    read_character_file,
    read_pose_file,
    write_pose_file,
)


def test_character_file_roundtrip(character_file, sample_limbs):
    loaded = read_character_file(character_file)
    assert loaded.scale == 50
    assert loaded.limbs[0].points == sample_limbs[0].points
    assert loaded.limbs[0].color == Color(r=0, g=255, b=0)
    assert loaded.limbs[1].thickness == pytest.approx(0.2)

    img = decode_character_image(loaded)
    assert img.size == (4, 8)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0)) == (0, 0, 255, 255)


def test_character_file_json_shape(character_file):
    data = json.loads(character_file.read_text())
    assert set(data) == {"img", "limbs", "scale"}
    assert data["limbs"][0]["points"][0] == {"x": -2.0, "y": 0.0}
    assert set(data["limbs"][0]) == {"points", "color", "thickness"}


def test_limb_defaults():
    limb = Limb(points=[pt(0, 0), pt(1, 0)])
    assert limb.color == Color(r=255, g=233, b=209)
    assert limb.thickness == pytest.approx(0.2)


def test_limb_needs_two_joints():
    with pytest.raises(ValueError):
        Limb(points=[pt(0, 0)])


def test_malformed_character_files(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(FileFormatError):
        read_character_file(broken)

    wrong_shape = tmp_path / "list.json"
    wrong_shape.write_text("[]")
    with pytest.raises(FileFormatError):
        read_character_file(wrong_shape)

    missing_scale = tmp_path / "noscale.json"
    missing_scale.write_text(json.dumps({"img": "", "limbs": []}))
    with pytest.raises(FileFormatError) as exc:
        read_character_file(missing_scale)
    assert exc.value.path == str(missing_scale)


def test_bad_embedded_image():
    with pytest.raises(FileFormatError):
        decode_character_image(CharacterFile(img="not base64!!", limbs=[], scale=1))


def test_png_to_base64_reencodes(tmp_path):
    src = tmp_path / "dot.bmp"
    Image.new("RGB", (3, 3), (1, 2, 3)).save(src)
    img = decode_character_image(CharacterFile(img=png_to_base64(src), scale=1))
    assert img.getpixel((1, 1)) == (1, 2, 3, 255)

    with pytest.raises(FileFormatError):
        png_to_base64(tmp_path / "missing.png")


def test_pose_file_roundtrip(tmp_path, sample_limbs):
    path = tmp_path / "walk" / "poses.json"
    write_pose_file([sample_limbs, sample_limbs[:1]], path)
    frames = read_pose_file(path)
    assert len(frames) == 2
    assert [len(f) for f in frames] == [2, 1]
    assert frames[1][0].points == sample_limbs[0].points


def test_malformed_pose_files(tmp_path):
    path = tmp_path / "poses.json"
    path.write_text(json.dumps({"frames": []}))
    with pytest.raises(FileFormatError):
        read_pose_file(path)

    path.write_text(json.dumps([[{"points": [{"x": 0, "y": 0}]}]]))
    with pytest.raises(FileFormatError):
        read_pose_file(path)

    path.write_text(json.dumps([[3]]))
    with pytest.raises(FileFormatError):
        read_pose_file(path)


def test_non_utf8_files_are_format_errors(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"img": "\xff\xfe", "limbs": [], "scale": 1}')
    with pytest.raises(FileFormatError, match="UTF-8"):
        read_character_file(path)
    with pytest.raises(FileFormatError):
        read_pose_file(path)
