from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .camera import smooth_camera_pitch_yaw, smooth_camera_roll
from .config import DEFAULT_CONFIG, SmoothConfig
from .demo.types import Demo
from .motion import smooth_motion
from .roll import add_roll
from .window import WindowStats

PASS_MOTION: Final[str] = "motion"
PASS_CAMERA_PITCH_YAW: Final[str] = "camera_pitch_yaw"
PASS_ROLL: Final[str] = "roll"
PASS_CAMERA_ROLL: Final[str] = "camera_roll"

PASS_ORDER: Final[tuple[str, ...]] = (PASS_MOTION, PASS_CAMERA_PITCH_YAW, PASS_ROLL, PASS_CAMERA_ROLL)


@dataclass(frozen=True, slots=True)
class PassReport:
    name: str
    written: int
    stats: WindowStats | None = None


def process_demo(demo: Demo, config: SmoothConfig = DEFAULT_CONFIG) -> list[PassReport]:
    """Run all passes over `demo.blocks` in place.

    Order matters: roll is synthesized from the already smoothed yaw and is
    smoothed itself last.
    """

    blocks = demo.blocks
    reports: list[PassReport] = []

    stats = smooth_motion(blocks, config)
    reports.append(PassReport(name=PASS_MOTION, written=stats.applied, stats=stats))

    stats = smooth_camera_pitch_yaw(blocks, config)
    reports.append(PassReport(name=PASS_CAMERA_PITCH_YAW, written=stats.applied, stats=stats))

    written = add_roll(blocks, config)
    reports.append(PassReport(name=PASS_ROLL, written=written))

    stats = smooth_camera_roll(blocks, config)
    reports.append(PassReport(name=PASS_CAMERA_ROLL, written=stats.applied, stats=stats))

    return reports
