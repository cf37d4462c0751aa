from __future__ import annotations

import math
from typing import Iterable, Sequence

from .config import DEFAULT_CONFIG, SmoothConfig
from .demo.types import Block
from .entity_update import LocationSample, find_location
from .window import SlidingWindow, WindowStats


def trunc_mean(values: Iterable[int]) -> int:
    """Integer mean rounded toward zero."""

    total = 0
    count = 0
    for value in values:
        total += int(value)
        count += 1
    quotient = abs(total) // count
    return -quotient if total < 0 else quotient


def location_distance(a: LocationSample, b: LocationSample) -> int:
    dx = a.origin.x - b.origin.x
    dy = a.origin.y - b.origin.y
    dz = a.origin.z - b.origin.z
    return int(math.sqrt(dx * dx + dy * dy + dz * dz))


def smooth_motion(blocks: Sequence[Block], config: SmoothConfig = DEFAULT_CONFIG) -> WindowStats:
    """Average the tracked entity's origin over neighbouring updates.

    A step of `motion_restart_distance` units or more between consecutive
    updates is treated as a teleport: the window is not carried across it.
    Only coordinates present in an update are rewritten.
    """

    entity_id = config.tracked_entity_id
    limit = config.motion_restart_distance

    def fetch(start: int, prev: LocationSample | None) -> LocationSample | None:
        return find_location(blocks, start, entity_id, prev)

    def aggregate(window: Sequence[LocationSample]) -> tuple[int, int, int]:
        return (
            trunc_mean(sample.origin.x for sample in window),
            trunc_mean(sample.origin.y for sample in window),
            trunc_mean(sample.origin.z for sample in window),
        )

    def apply(sample: LocationSample, values: tuple[int, int, int]) -> None:
        for ref, value in zip(sample.origin.refs(), values):
            if ref is not None:
                ref.write(value)

    def accept(tail: LocationSample, candidate: LocationSample) -> bool:
        return location_distance(candidate, tail) < limit

    return SlidingWindow(
        radius=config.motion_radius,
        fetch=fetch,
        aggregate=aggregate,
        apply=apply,
        accept=accept,
    ).run()
