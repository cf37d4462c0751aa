from __future__ import annotations

import dataclasses

import pytest

from demsmooth.config import DEFAULT_CONFIG, SmoothConfig


def test_defaults() -> None:
    assert DEFAULT_CONFIG == SmoothConfig()
    assert DEFAULT_CONFIG.camera_radius == 60
    assert DEFAULT_CONFIG.motion_radius == 30
    assert DEFAULT_CONFIG.motion_restart_distance == 200
    assert DEFAULT_CONFIG.roll_trigger_angle == 0.3
    assert DEFAULT_CONFIG.roll_speed == 0.2
    assert DEFAULT_CONFIG.roll_target == 10.0
    assert DEFAULT_CONFIG.tracked_entity_id == 1


def test_config_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.camera_radius = 5  # type: ignore[misc]


def test_zero_radius_is_allowed() -> None:
    config = SmoothConfig(camera_radius=0, motion_radius=0)
    assert config.camera_radius == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"camera_radius": -1},
        {"motion_radius": -1},
        {"motion_restart_distance": 0},
        {"roll_trigger_angle": -0.1},
        {"roll_speed": 0.0},
        {"roll_target": -1.0},
        {"tracked_entity_id": -1},
        {"tracked_entity_id": 0x10000},
    ],
)
def test_invalid_values_are_rejected(overrides: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        SmoothConfig(**overrides)
