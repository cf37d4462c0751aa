from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SmoothConfig:
    """Tuning constants shared by the smoothing passes.

    Radii are window half-widths in timed blocks; the window holds
    `2 * radius + 1` samples. Distances are in protocol coordinate units,
    angles in degrees.
    """

    camera_radius: int = 60
    motion_radius: int = 30
    motion_restart_distance: int = 200
    roll_trigger_angle: float = 0.3
    roll_speed: float = 0.2
    roll_target: float = 10.0
    tracked_entity_id: int = 1

    def __post_init__(self) -> None:
        if self.camera_radius < 0:
            raise ValueError(f"camera_radius must be >= 0, got {self.camera_radius}")
        if self.motion_radius < 0:
            raise ValueError(f"motion_radius must be >= 0, got {self.motion_radius}")
        if self.motion_restart_distance <= 0:
            raise ValueError(f"motion_restart_distance must be > 0, got {self.motion_restart_distance}")
        if self.roll_trigger_angle < 0:
            raise ValueError(f"roll_trigger_angle must be >= 0, got {self.roll_trigger_angle}")
        if self.roll_speed <= 0:
            raise ValueError(f"roll_speed must be > 0, got {self.roll_speed}")
        if self.roll_target < 0:
            raise ValueError(f"roll_target must be >= 0, got {self.roll_target}")
        if not (0 <= self.tracked_entity_id <= 0xFFFF):
            raise ValueError(f"tracked_entity_id out of range: {self.tracked_entity_id}")


DEFAULT_CONFIG = SmoothConfig()
