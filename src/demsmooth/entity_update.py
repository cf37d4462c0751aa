"""Position decoding for the tracked entity's fast update messages.

A fast update's tag byte carries the low seven mask bits; further mask
bytes, the entity number and the present fields follow in a fixed order.
Only the three origin coordinates are of interest here, everything that
precedes them is skipped.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Final, Sequence

from .demo.messages import (
    U_ANGLE1,
    U_ANGLE2,
    U_EXTEND1,
    U_EXTEND2,
    U_LONGENTITY,
    U_MOREBITS,
    U_ORIGIN1,
    U_ORIGIN2,
    U_ORIGIN3,
    ByteCursor,
    TruncatedPayload,
)
from .demo.types import Block, FieldRef, Message
from .stream import iter_timed

_ORIGIN_BITS: Final[int] = U_ORIGIN1 | U_ORIGIN2 | U_ORIGIN3
# model, frame, colormap, skin, effects: one byte each, all ahead of the origin.
_LEADING_BYTE_FIELDS: Final[int] = 0x3C40


class InsufficientLocationInfoWarning(UserWarning):
    """An update without all three origin fields and nothing to inherit them from."""


class TruncatedUpdateWarning(UserWarning):
    """An update shorter than its mask says it is."""


@dataclass(frozen=True, slots=True)
class EntityOrigin:
    x: int
    y: int
    z: int
    x_ref: FieldRef | None = None
    y_ref: FieldRef | None = None
    z_ref: FieldRef | None = None

    def refs(self) -> tuple[FieldRef | None, FieldRef | None, FieldRef | None]:
        return (self.x_ref, self.y_ref, self.z_ref)


@dataclass(frozen=True, slots=True)
class LocationSample:
    index: int
    block: Block
    origin: EntityOrigin


def _read_coord(cur: ByteCursor, message: Message, present: int, fallback: int) -> tuple[int, FieldRef | None]:
    if not present:
        return fallback, None
    ref = FieldRef(message=message, offset=cur.offset)
    return cur.i16(), ref


def _decode(message: Message, entity_id: int, prev: EntityOrigin | None) -> EntityOrigin | None:
    cur = ByteCursor(message.payload)
    mask = message.tag & 0x7F
    if mask & U_MOREBITS:
        mask |= cur.u8() << 8
    if mask & U_EXTEND1:
        mask |= cur.u8() << 16
    if mask & U_EXTEND2:
        mask |= cur.u8() << 24

    entity = cur.u16() if mask & U_LONGENTITY else cur.u8()
    if entity != entity_id:
        return None

    if (mask & _ORIGIN_BITS) != _ORIGIN_BITS and prev is None:
        warnings.warn(
            f"insufficient location info (mask 0x{mask:x})",
            category=InsufficientLocationInfoWarning,
            stacklevel=4,
        )

    cur.skip((mask & _LEADING_BYTE_FIELDS).bit_count())
    x, x_ref = _read_coord(cur, message, mask & U_ORIGIN1, prev.x if prev else 0)
    if mask & U_ANGLE1:
        cur.skip(1)
    y, y_ref = _read_coord(cur, message, mask & U_ORIGIN2, prev.y if prev else 0)
    if mask & U_ANGLE2:
        cur.skip(1)
    z, z_ref = _read_coord(cur, message, mask & U_ORIGIN3, prev.z if prev else 0)

    return EntityOrigin(x=x, y=y, z=z, x_ref=x_ref, y_ref=y_ref, z_ref=z_ref)


def decode_entity_update(message: Message, entity_id: int, prev: EntityOrigin | None = None) -> EntityOrigin | None:
    """Decode the origin of `entity_id` from one fast update.

    Returns None when the message is not a fast update, belongs to another
    entity or is truncated. Coordinates the update leaves out are taken from
    `prev` (zero without one) and get no write-back reference.
    """

    if not message.is_entity_update:
        return None
    try:
        return _decode(message, entity_id, prev)
    except TruncatedPayload as exc:
        warnings.warn(
            f"truncated entity update (tag 0x{message.tag:02x}): {exc}",
            category=TruncatedUpdateWarning,
            stacklevel=3,
        )
        return None


def find_location(
    blocks: Sequence[Block],
    start: int,
    entity_id: int,
    prev: LocationSample | None = None,
) -> LocationSample | None:
    """First timed block at or after `start` carrying an update for `entity_id`."""

    prev_origin = prev.origin if prev is not None else None
    for idx, block in iter_timed(blocks, start):
        for message in block.messages:
            origin = decode_entity_update(message, entity_id, prev_origin)
            if origin is not None:
                return LocationSample(index=idx, block=block, origin=origin)
    return None
