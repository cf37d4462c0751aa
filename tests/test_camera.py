from __future__ import annotations

import math

import pytest

from demsmooth.camera import circular_mean, mean, smooth_camera_pitch_yaw, smooth_camera_roll
from demsmooth.config import SmoothConfig
from demsmooth.demo import Block, time_message


def _timed(pitch: float = 0.0, yaw: float = 0.0, roll: float = 0.0) -> Block:
    return Block(angles=[pitch, yaw, roll], messages=[time_message(0.0)])


def _untimed(pitch: float = 0.0, yaw: float = 0.0, roll: float = 0.0) -> Block:
    return Block(angles=[pitch, yaw, roll], messages=[])


def _wrapped_distance(a: float, b: float) -> float:
    diff = (a - b) % 360.0
    return min(diff, 360.0 - diff)


def test_mean() -> None:
    assert mean([1.0, 2.0, 6.0]) == 3.0


def test_circular_mean_across_wrap() -> None:
    assert _wrapped_distance(circular_mean([350.0, 10.0]), 0.0) == pytest.approx(0.0, abs=1e-9)
    assert _wrapped_distance(circular_mean([340.0, 350.0, 0.0, 10.0, 20.0]), 0.0) == pytest.approx(0.0, abs=1e-9)


def test_circular_mean_plain_angles() -> None:
    assert circular_mean([90.0, 90.0, 90.0]) == pytest.approx(90.0)
    assert circular_mean([80.0, 100.0]) == pytest.approx(90.0)
    result = circular_mean([10.0, 20.0])
    assert 0.0 < result <= 360.0
    assert result == pytest.approx(15.0)


def test_constant_camera_is_unchanged() -> None:
    config = SmoothConfig(camera_radius=2)
    blocks = [_timed(pitch=10.0, yaw=123.0) for _ in range(5)]

    stats = smooth_camera_pitch_yaw(blocks, config)

    assert stats.applied == 3
    assert blocks[2].pitch == 10.0
    assert blocks[2].yaw == pytest.approx(123.0)


def test_startup_blocks_are_left_alone() -> None:
    config = SmoothConfig(camera_radius=3)
    blocks = [_timed(pitch=float(i), yaw=float(i * 7)) for i in range(12)]
    original = [list(block.angles) for block in blocks]

    smooth_camera_pitch_yaw(blocks, config)

    for block, angles in zip(blocks[:3], original[:3]):
        assert block.angles == angles
    assert blocks[3].pitch == pytest.approx(3.0)
    assert blocks[3].yaw == pytest.approx(21.0)


def test_yaw_smoothing_across_wrap() -> None:
    config = SmoothConfig(camera_radius=1)
    blocks = [_timed(yaw=350.0), _timed(yaw=0.0), _timed(yaw=10.0)]

    smooth_camera_pitch_yaw(blocks, config)

    assert _wrapped_distance(blocks[1].yaw, 0.0) == pytest.approx(0.0, abs=1e-9)


def test_untimed_blocks_are_forward_filled() -> None:
    config = SmoothConfig(camera_radius=1)
    blocks = [
        _timed(pitch=4.0, yaw=40.0),
        _timed(pitch=5.0, yaw=45.0),
        _untimed(pitch=1.0, yaw=1.0),
        _untimed(pitch=2.0, yaw=2.0),
        _untimed(pitch=3.0, yaw=3.0),
        _timed(pitch=6.0, yaw=50.0),
    ]

    smooth_camera_pitch_yaw(blocks, config)

    smoothed = blocks[1]
    assert smoothed.yaw == pytest.approx(45.0)
    assert smoothed.pitch == pytest.approx(5.0)
    for block in blocks[2:5]:
        assert block.yaw == smoothed.yaw
        assert block.pitch == smoothed.pitch
    assert blocks[0].angles == [4.0, 40.0, 0.0]


def test_roll_pass_touches_roll_only() -> None:
    config = SmoothConfig(camera_radius=1)
    blocks = [_timed(yaw=1.0, roll=0.0), _timed(yaw=2.0, roll=3.0), _untimed(yaw=9.0, roll=-1.0), _timed(yaw=3.0, roll=6.0)]

    smooth_camera_roll(blocks, config)

    assert blocks[1].roll == pytest.approx(3.0)
    assert blocks[2].roll == blocks[1].roll
    assert blocks[3].roll == pytest.approx(4.5)
    assert [block.yaw for block in blocks] == [1.0, 2.0, 9.0, 3.0]


def test_nothing_to_smooth() -> None:
    config = SmoothConfig(camera_radius=1)

    single = [_timed(yaw=30.0)]
    smooth_camera_pitch_yaw(single, config)
    assert single[0].yaw == 30.0

    untimed = [_untimed(yaw=float(i)) for i in range(5)]
    stats = smooth_camera_pitch_yaw(untimed, config)
    assert stats.applied == 0
    assert [block.yaw for block in untimed] == [0.0, 1.0, 2.0, 3.0, 4.0]

    assert smooth_camera_pitch_yaw([], config).applied == 0


def test_default_radius_window() -> None:
    blocks = [_timed(pitch=float(i % 2), yaw=math.fmod(i * 3.0, 360.0)) for i in range(130)]

    stats = smooth_camera_pitch_yaw(blocks)

    assert stats.applied == 130 - 60
    assert blocks[60].pitch == pytest.approx(sum(float(i % 2) for i in range(121)) / 121)
