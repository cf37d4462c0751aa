from __future__ import annotations

import pytest

from demsmooth.config import SmoothConfig
from demsmooth.demo import Block, Demo, entity_update_message, time_message
from demsmooth.entity_update import EntityOrigin, decode_entity_update
from demsmooth.pipeline import PASS_ORDER, process_demo
from demsmooth.roll import add_roll
from demsmooth.window import WindowStats


def test_passes_run_in_order(monkeypatch) -> None:
    calls: list[str] = []

    def _fake_window_pass(name: str):
        def run(blocks, config) -> WindowStats:  # noqa: ANN001
            calls.append(name)
            return WindowStats(applied=len(blocks))

        return run

    def _fake_roll(blocks, config) -> int:  # noqa: ANN001
        calls.append("roll")
        return len(blocks)

    monkeypatch.setattr("demsmooth.pipeline.smooth_motion", _fake_window_pass("motion"))
    monkeypatch.setattr("demsmooth.pipeline.smooth_camera_pitch_yaw", _fake_window_pass("camera_pitch_yaw"))
    monkeypatch.setattr("demsmooth.pipeline.add_roll", _fake_roll)
    monkeypatch.setattr("demsmooth.pipeline.smooth_camera_roll", _fake_window_pass("camera_roll"))

    reports = process_demo(Demo(cd_track=b"-1", blocks=[Block(angles=[0.0, 0.0, 0.0])]))

    assert calls == ["motion", "camera_pitch_yaw", "roll", "camera_roll"]
    assert tuple(report.name for report in reports) == PASS_ORDER
    assert [report.written for report in reports] == [1, 1, 1, 1]
    assert reports[2].stats is None


def test_roll_follows_smoothed_yaw() -> None:
    # One degree of frame-to-frame jitter banks on raw yaw but not once smoothed.
    yaws = [100.0 + (0.5 if i % 2 else -0.5) for i in range(40)]
    raw = [Block(angles=[0.0, yaw, 0.0]) for yaw in yaws]
    add_roll(raw)
    assert any(block.roll != 0.0 for block in raw[20:])

    blocks = [Block(angles=[0.0, yaw, 0.0], messages=[time_message(0.0)]) for yaw in yaws]
    process_demo(Demo(cd_track=b"-1", blocks=blocks), SmoothConfig(camera_radius=5))

    assert all(block.roll == 0.0 for block in blocks[11:])


def test_process_demo_end_to_end() -> None:
    config = SmoothConfig(camera_radius=2, motion_radius=2)
    blocks = []
    for i in range(12):
        update = entity_update_message(1, origin=(i * 10 + (5 if i % 2 else 0), 0, 24))
        blocks.append(Block(angles=[0.0, 180.0 - 2.0 * i, 0.0], messages=[time_message(i * 0.1), update]))
        blocks.append(Block(angles=[0.0, 180.0 - 2.0 * i, 0.0], messages=[]))
    demo = Demo(cd_track=b"-1", blocks=blocks)

    reports = process_demo(demo, config)

    assert [report.written for report in reports] == [10, 10, 24, 10]
    origin = decode_entity_update(blocks[4 * 2].messages[1], 1, EntityOrigin(x=0, y=0, z=0))
    assert origin is not None
    assert origin.x == 42
    # interpolated frames follow the keyframe before them
    assert blocks[5].yaw == blocks[4].yaw
    assert blocks[4].yaw == pytest.approx(176.0)
    assert blocks[4].roll > 0.0
