import pytest

from booglanim.anim import Run, from_, move
from booglanim.errors import InvalidTaskError, TaskFailedError, TimelineStalledError
from booglanim.point import pt
from booglanim.resources import ResourceTable
from booglanim.things import Obj
from booglanim.timeline import Timeline
from booglanim.world import Group, Immediate, Single, World, as_task


def noop(*_):
    pass


def make_world(tasks, things=()):
    return World(ResourceTable(), list(things), tasks)


def test_world_normalizes_task_shapes():
    r = Run(noop, 3)
    w = make_world([r, [r, Run(noop, 5)], noop])
    assert isinstance(w.tasks, tuple)
    assert isinstance(w.tasks[0], Single)
    assert isinstance(w.tasks[1], Group) and w.tasks[1].last_frame == 5
    assert isinstance(w.tasks[2], Immediate) and w.tasks[2].last_frame == 0


def test_world_rejects_bad_tasks():
    with pytest.raises(InvalidTaskError):
        make_world([[]])
    with pytest.raises(InvalidTaskError):
        make_world([[Run(noop, 1), "nope"]])
    with pytest.raises(InvalidTaskError):
        as_task(42)
    with pytest.raises(InvalidTaskError):
        World(ResourceTable(), [], [], fps=0)


def test_sequential_singles_report_full_length_on_first_tick():
    tl = Timeline(make_world([from_(0, 10, noop), from_(0, 10, noop)]))
    assert tl.tick() == 20


def test_groups_discover_length_as_frames_advance():
    tl = Timeline(make_world([[from_(0, 10, noop)], [from_(0, 10, noop)]]))
    assert tl.tick() == 10
    for _ in range(9):
        tl.tick()
    assert tl.frame == 10
    assert tl.tick() == 20


def test_group_advances_by_its_longest_member():
    tl = Timeline(make_world([[Run(noop, 8), Run(noop, 12)]]))
    assert tl.tick() == 12


def test_group_waits_for_earlier_tasks():
    seen = []
    tl = Timeline(make_world([from_(0, 5, noop), [Run(seen.append, 3)]]))
    for _ in range(8):
        tl.tick()
    assert seen == [0, 1, 2]


def test_single_runs_every_tick_with_relative_frame():
    seen = []
    tl = Timeline(make_world([from_(0, 10, noop), Run(seen.append, 2)]))
    for _ in range(3):
        tl.tick()
    assert seen == [-10, -9, -8]


def test_immediate_callback_takes_no_time():
    seen = []
    tl = Timeline(make_world([from_(0, 4, noop), seen.append, Run(noop, 1)]))
    assert tl.tick() == 5
    tl.tick()
    assert seen == [-4, -3]


def test_group_members_share_a_tick_last_write_wins():
    ball = Obj(img=0)
    first = Run(lambda f: setattr(ball, "pos", pt(1, 1)), 1)
    second = Run(lambda f: setattr(ball, "pos", pt(2, 2)), 1)
    Timeline(make_world([[first, second]], [ball])).tick()
    assert ball.pos == pt(2, 2)


def test_things_are_stably_sorted_by_layer_each_tick():
    a, b, c = Obj(img=0, layer=2), Obj(img=1, layer=1), Obj(img=2, layer=1)
    world = make_world([], [a, b, c])
    Timeline(world).tick()
    assert [t.img for t in world.things] == [1, 2, 0]


def test_end_to_end_two_sequential_moves():
    a = Obj(img=0, pos=pt(0, 0))
    b = Obj(img=1, pos=pt(0, 0))
    world = make_world(
        [from_(0, 10, move(a, pt(1, 0))), from_(0, 10, move(b, pt(0, 1)))],
        [a, b],
    )
    frames = Timeline(world).run()
    assert len(frames) == 20

    first = {t.img: t for t in frames[0]}
    assert first[0].pos == pt(0, 0) and first[1].pos == pt(0, 0)

    tenth = {t.img: t for t in frames[10]}
    assert tenth[0].pos.x == pytest.approx(1) and tenth[0].pos.y == pytest.approx(0)
    assert tenth[1].pos == pt(0, 0)

    # B arrives on the last tick, which is read from the world rather than a 21st snapshot
    assert b.pos.x == pytest.approx(0) and b.pos.y == pytest.approx(1)


def test_snapshots_are_independent_copies():
    ball = Obj(img=0, pos=pt(0, 0))
    tl = Timeline(make_world([from_(0, 3, move(ball, pt(3, 0)))], [ball]))
    frames = tl.run()
    assert [round(f[0].pos.x) for f in frames] == [0, 1, 2]
    assert frames[0][0] is not ball


def test_empty_world_yields_initial_snapshot():
    frames = Timeline(make_world([], [Obj(img=0)])).run()
    assert len(frames) == 1


def test_task_failure_aborts_the_tick():
    def boom(frame):
        if frame == 2:
            raise ValueError("bad frame")

    tl = Timeline(make_world([Run(noop, 1), Run(boom, 5)]))
    with pytest.raises(TaskFailedError) as exc:
        tl.run()
    assert exc.value.frame == 3
    assert exc.value.task_index == 1
    assert isinstance(exc.value.__cause__, ValueError)


def test_runaway_timeline_is_bounded():
    tl = Timeline(make_world([from_(0, 10**9, noop)]), max_frames=50)
    with pytest.raises(TimelineStalledError):
        tl.run()
    assert tl.frame == 50
