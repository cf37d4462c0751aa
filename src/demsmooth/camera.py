from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from .config import DEFAULT_CONFIG, SmoothConfig
from .demo.types import PITCH, ROLL, YAW, Block
from .stream import next_timed, untimed_after
from .window import SlidingWindow, WindowStats


@dataclass(frozen=True, slots=True)
class AngleSample:
    index: int
    block: Block
    pitch: float
    yaw: float
    roll: float


def mean(values: Iterable[float]) -> float:
    total = 0.0
    count = 0
    for value in values:
        total += float(value)
        count += 1
    return total / count


def circular_mean(values: Iterable[float]) -> float:
    """Mean of angles in degrees, correct across the 0/360 wrap.

    Angles are shifted by -180 before averaging and back afterwards, so the
    result lies in (0, 360].
    """

    sum_sin = 0.0
    sum_cos = 0.0
    for value in values:
        rad = math.radians(float(value) - 180.0)
        sum_sin += math.sin(rad)
        sum_cos += math.cos(rad)
    return math.degrees(math.atan2(sum_sin, sum_cos)) + 180.0


def _fetch_angles(blocks: Sequence[Block]) -> Callable[[int, AngleSample | None], AngleSample | None]:
    def fetch(start: int, prev: AngleSample | None) -> AngleSample | None:
        idx = next_timed(blocks, start)
        if idx is None:
            return None
        block = blocks[idx]
        return AngleSample(
            index=idx,
            block=block,
            pitch=block.angles[PITCH],
            yaw=block.angles[YAW],
            roll=block.angles[ROLL],
        )

    return fetch


def _writer(blocks: Sequence[Block], axes: tuple[int, ...]) -> Callable[[AngleSample, tuple[float, ...]], None]:
    def apply(sample: AngleSample, values: tuple[float, ...]) -> None:
        targets = [sample.block, *untimed_after(blocks, sample.index)]
        for block in targets:
            for axis, value in zip(axes, values):
                block.angles[axis] = value

    return apply


def smooth_camera_pitch_yaw(blocks: Sequence[Block], config: SmoothConfig = DEFAULT_CONFIG) -> WindowStats:
    """Average pitch linearly and yaw circularly around each timed block."""

    def aggregate(window: Sequence[AngleSample]) -> tuple[float, float]:
        return (
            mean(sample.pitch for sample in window),
            circular_mean(sample.yaw for sample in window),
        )

    return SlidingWindow(
        radius=config.camera_radius,
        fetch=_fetch_angles(blocks),
        aggregate=aggregate,
        apply=_writer(blocks, (PITCH, YAW)),
    ).run()


def smooth_camera_roll(blocks: Sequence[Block], config: SmoothConfig = DEFAULT_CONFIG) -> WindowStats:
    def aggregate(window: Sequence[AngleSample]) -> tuple[float]:
        return (mean(sample.roll for sample in window),)

    return SlidingWindow(
        radius=config.camera_radius,
        fetch=_fetch_angles(blocks),
        aggregate=aggregate,
        apply=_writer(blocks, (ROLL,)),
    ).run()
