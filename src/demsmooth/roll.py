from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_CONFIG, SmoothConfig
from .demo.types import ROLL, YAW, Block


def next_roll(roll: float, yaw_delta: float, config: SmoothConfig = DEFAULT_CONFIG) -> float:
    """One step of the banking hysteresis.

    Turning faster than the trigger angle leans further into the turn up to
    the target; a steady heading eases back, snapping to zero within one step.
    """

    speed = config.roll_speed
    target = config.roll_target
    if yaw_delta > config.roll_trigger_angle:
        return min(roll + speed, target)
    if yaw_delta < -config.roll_trigger_angle:
        return max(roll - speed, -target)
    if roll < -speed:
        return roll + speed
    if roll > speed:
        return roll - speed
    return 0.0


def add_roll(blocks: Sequence[Block], config: SmoothConfig = DEFAULT_CONFIG) -> int:
    """Overwrite every block's roll with a bank derived from its yaw change.

    Returns the number of blocks written.
    """

    if not blocks:
        return 0
    roll = 0.0
    prev_yaw = blocks[0].angles[YAW]
    for block in blocks:
        yaw = block.angles[YAW]
        roll = next_roll(roll, prev_yaw - yaw, config)
        block.angles[ROLL] = roll
        prev_yaw = yaw
    return len(blocks)
