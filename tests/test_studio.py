import asyncio
import json
import textwrap

import pytest

from booglanim.errors import ExportError, ScriptCompileError, ScriptRuntimeError, TimelineStalledError
from booglanim.studio import Studio

TWO_BALLS = textwrap.dedent(
    """
    from booglanim.anim import from_, move
    from booglanim.point import pt
    from booglanim.things import load_obj
    from booglanim.resources import ResourceTable
    from booglanim.world import World

    async def get_world():
        res = ResourceTable()
        a = await load_obj("a.png", res)
        b = await load_obj("b.png", res)
        return World(
            res,
            [a, b],
            [from_(0, 10, move(a, pt(1, 0))), from_(0, 10, move(b, pt(0, 1)))],
            fps=30,
        )
    """
)


def read_audit(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


@pytest.fixture
def studio(fake_backend, studio_config):
    return Studio(fake_backend, studio_config)


def test_build_sends_resources_then_frames(studio, fake_backend, isolated_audit_log):
    result = asyncio.run(studio.build(TWO_BALLS, "balls.py"))

    assert result.frame_count == 20
    assert studio.finished_build
    assert studio.status == "build complete!"
    assert studio.world is result.world
    assert fake_backend.calls == [
        ("update_media_resources", [(0, "a.png"), (1, "b.png")], 30),
        ("add_frames", 20),
    ]
    tenth = {t.img: t for t in fake_backend.frames[10]}
    assert tenth[0].pos.x == pytest.approx(1)
    assert tenth[1].pos.y == pytest.approx(0)

    steps = [(e["step"], e["status"]) for e in read_audit(isolated_audit_log)]
    assert steps == [
        ("compile", "OK"),
        ("run_script", "OK"),
        ("update_resources", "OK"),
        ("frames", "OK"),
        ("send_frames", "OK"),
    ]


def test_compile_failure_keeps_previous_world(studio, fake_backend, isolated_audit_log):
    asyncio.run(studio.build(TWO_BALLS))
    previous = studio.world

    with pytest.raises(ScriptCompileError):
        asyncio.run(studio.build("import os\n\nasync def get_world():\n    pass\n"))
    assert studio.world is previous
    assert not studio.finished_build
    assert studio.status.startswith("build failed")
    assert read_audit(isolated_audit_log)[-1]["step"] == "compile"
    assert read_audit(isolated_audit_log)[-1]["status"] == "FAIL"


def test_script_error_does_not_touch_backend(studio, fake_backend):
    src = "async def get_world():\n    raise ValueError('oops')\n"
    with pytest.raises(ScriptRuntimeError):
        asyncio.run(studio.build(src))
    assert fake_backend.calls == []
    assert studio.world is None


def test_backend_failure_aborts_build(studio, fake_backend):
    fake_backend.fail_resources = True
    with pytest.raises(RuntimeError):
        asyncio.run(studio.build(TWO_BALLS))
    assert not studio.finished_build
    assert studio.status == "build failed - backend unavailable"


def test_runaway_build_is_stopped(fake_backend, studio_config):
    studio_config.build.max_frames = 5
    src = textwrap.dedent(
        """
        from booglanim.anim import from_
        from booglanim.resources import ResourceTable
        from booglanim.world import World

        async def get_world():
            return World(ResourceTable(), [], [from_(0, 1000, lambda f, d: None)])
        """
    )
    with pytest.raises(TimelineStalledError):
        asyncio.run(Studio(fake_backend, studio_config).build(src))
    assert [c[0] for c in fake_backend.calls] == ["update_media_resources"]


def test_export_requires_a_finished_build(studio):
    with pytest.raises(ExportError, match="finish building"):
        asyncio.run(studio.export("out.mp4"))


def test_export_reports_progress(studio, fake_backend, isolated_audit_log):
    statuses = []

    async def go():
        await studio.build(TWO_BALLS)
        original = studio._status

        def record(text):
            statuses.append(text)
            original(text)

        studio._status = record
        with pytest.raises(ExportError, match="must end with .mp4"):
            await studio.export("out.avi")
        await studio.export("out.mp4")

    asyncio.run(go())
    assert fake_backend.calls[-1] == ("export", "out.mp4")
    assert statuses[0] == "1 frame(s) out of 20 completed"
    assert statuses[-1] == "finished rendering video!"
    assert len(statuses) == 20
    last = read_audit(isolated_audit_log)[-1]
    assert last["step"] == "export" and last["status"] == "OK" and last["frames"] == 20


def test_playback_is_forwarded(studio, fake_backend):
    async def go():
        await studio.build(TWO_BALLS)
        await studio.play()
        assert fake_backend.playback.playing
        await studio.next_frame()
        await studio.next_frame()
        await studio.prev_frame()
        assert fake_backend.playback.frame == 1
        await studio.reverse()
        assert fake_backend.playback.reverse
        await studio.pause()
        assert not fake_backend.playback.playing
        await studio.stop()
        assert fake_backend.playback.frame == 0

    asyncio.run(go())
