from __future__ import annotations

import struct
import warnings
from typing import Final, Iterable

from .types import (
    OPAQUE_TAG,
    PROTOCOL_NETQUAKE,
    SVC_BF,
    SVC_CDTRACK,
    SVC_CENTERPRINT,
    SVC_CLIENTDATA,
    SVC_CUTSCENE,
    SVC_DAMAGE,
    SVC_DISCONNECT,
    SVC_FAST_UPDATE,
    SVC_FINALE,
    SVC_FOG,
    SVC_FOUNDSECRET,
    SVC_INTERMISSION,
    SVC_KILLEDMONSTER,
    SVC_LIGHTSTYLE,
    SVC_NOP,
    SVC_PARTICLE,
    SVC_PRINT,
    SVC_SELLSCREEN,
    SVC_SERVERINFO,
    SVC_SETANGLE,
    SVC_SETPAUSE,
    SVC_SETVIEW,
    SVC_SIGNONNUM,
    SVC_SKYBOX,
    SVC_SOUND,
    SVC_SPAWNBASELINE,
    SVC_SPAWNBASELINE2,
    SVC_SPAWNSTATIC,
    SVC_SPAWNSTATIC2,
    SVC_SPAWNSTATICSOUND,
    SVC_SPAWNSTATICSOUND2,
    SVC_STOPSOUND,
    SVC_STUFFTEXT,
    SVC_TEMP_ENTITY,
    SVC_TIME,
    SVC_UPDATECOLORS,
    SVC_UPDATEFRAGS,
    SVC_UPDATENAME,
    SVC_UPDATESTAT,
    SVC_VERSION,
    Message,
)

# Fast update mask bits.
U_MOREBITS: Final[int] = 1 << 0
U_ORIGIN1: Final[int] = 1 << 1
U_ORIGIN2: Final[int] = 1 << 2
U_ORIGIN3: Final[int] = 1 << 3
U_ANGLE2: Final[int] = 1 << 4
U_STEP: Final[int] = 1 << 5
U_FRAME: Final[int] = 1 << 6
U_SIGNAL: Final[int] = 1 << 7
U_ANGLE1: Final[int] = 1 << 8
U_ANGLE3: Final[int] = 1 << 9
U_MODEL: Final[int] = 1 << 10
U_COLORMAP: Final[int] = 1 << 11
U_SKIN: Final[int] = 1 << 12
U_EFFECTS: Final[int] = 1 << 13
U_LONGENTITY: Final[int] = 1 << 14
U_EXTEND1: Final[int] = 1 << 15
U_ALPHA: Final[int] = 1 << 16
U_FRAME2: Final[int] = 1 << 17
U_MODEL2: Final[int] = 1 << 18
U_LERPFINISH: Final[int] = 1 << 19
U_EXTEND2: Final[int] = 1 << 23

# svc_clientdata bits.
SU_VIEWHEIGHT: Final[int] = 1 << 0
SU_IDEALPITCH: Final[int] = 1 << 1
SU_PUNCH1: Final[int] = 1 << 2
SU_VELOCITY1: Final[int] = 1 << 5
SU_WEAPONFRAME: Final[int] = 1 << 12
SU_ARMOR: Final[int] = 1 << 13
SU_WEAPON: Final[int] = 1 << 14
SU_EXTEND1: Final[int] = 1 << 15
SU_EXTEND2: Final[int] = 1 << 23
_SU_FITZ_BYTES: Final[tuple[int, ...]] = (
    1 << 16,  # weapon2
    1 << 17,  # armor2
    1 << 18,  # ammo2
    1 << 19,  # shells2
    1 << 20,  # nails2
    1 << 21,  # rockets2
    1 << 22,  # cells2
    1 << 24,  # weaponframe2
    1 << 25,  # weaponalpha
)

# svc_sound field mask.
SND_VOLUME: Final[int] = 1 << 0
SND_ATTENUATION: Final[int] = 1 << 1
SND_LARGEENTITY: Final[int] = 1 << 3
SND_LARGESOUND: Final[int] = 1 << 4

# svc_spawnbaseline2 / svc_spawnstatic2 bits.
B_LARGEMODEL: Final[int] = 1 << 0
B_LARGEFRAME: Final[int] = 1 << 1
B_ALPHA: Final[int] = 1 << 2

_FIXED_SIZES: Final[dict[int, int]] = {
    SVC_NOP: 0,
    SVC_DISCONNECT: 0,
    SVC_UPDATESTAT: 5,
    SVC_VERSION: 4,
    SVC_SETVIEW: 2,
    SVC_TIME: 4,
    SVC_SETANGLE: 3,
    SVC_UPDATEFRAGS: 3,
    SVC_STOPSOUND: 2,
    SVC_UPDATECOLORS: 2,
    SVC_PARTICLE: 11,
    SVC_DAMAGE: 8,
    SVC_SPAWNSTATIC: 13,
    SVC_SPAWNBASELINE: 15,
    SVC_SETPAUSE: 1,
    SVC_SIGNONNUM: 1,
    SVC_KILLEDMONSTER: 0,
    SVC_FOUNDSECRET: 0,
    SVC_SPAWNSTATICSOUND: 9,
    SVC_INTERMISSION: 0,
    SVC_CDTRACK: 2,
    SVC_SELLSCREEN: 0,
}

_FITZ_FIXED_SIZES: Final[dict[int, int]] = {
    SVC_BF: 0,
    SVC_FOG: 6,
    SVC_SPAWNSTATICSOUND2: 10,
}

_STRING_MESSAGES: Final[frozenset[int]] = frozenset(
    {SVC_PRINT, SVC_STUFFTEXT, SVC_CENTERPRINT, SVC_FINALE, SVC_CUTSCENE}
)

_TE_POINT: Final[frozenset[int]] = frozenset({0, 1, 2, 3, 4, 7, 8, 10, 11})
_TE_BEAM: Final[frozenset[int]] = frozenset({5, 6, 9, 13})
_TE_EXPLOSION2: Final[int] = 12


class MessageSplitWarning(UserWarning):
    """A block contained bytes that could not be split into server messages."""


class TruncatedPayload(Exception):
    pass


class _Unsized(Exception):
    pass


class ByteCursor:
    """Forward reader over message bytes; raises `TruncatedPayload` past the end."""

    def __init__(self, data: bytes | bytearray, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    def skip(self, count: int) -> None:
        if self.offset + count > len(self.data):
            raise TruncatedPayload(f"{count} byte(s) at offset {self.offset} run past end of {len(self.data)}")
        self.offset += count

    def u8(self) -> int:
        self.skip(1)
        return self.data[self.offset - 1]

    def u16(self) -> int:
        self.skip(2)
        return int.from_bytes(self.data[self.offset - 2 : self.offset], "little")

    def i16(self) -> int:
        self.skip(2)
        return int.from_bytes(self.data[self.offset - 2 : self.offset], "little", signed=True)

    def i32(self) -> int:
        self.skip(4)
        return int.from_bytes(self.data[self.offset - 4 : self.offset], "little", signed=True)

    def string(self) -> bytes:
        end = self.data.find(b"\x00", self.offset)
        if end < 0:
            raise TruncatedPayload(f"unterminated string at offset {self.offset}")
        text = bytes(self.data[self.offset : end])
        self.offset = end + 1
        return text


def _skip_baseline(cur: ByteCursor, bits: int) -> None:
    cur.skip(2 if bits & B_LARGEMODEL else 1)
    cur.skip(2 if bits & B_LARGEFRAME else 1)
    cur.skip(2)  # colormap, skin
    cur.skip(9)  # (coord, angle) x 3
    if bits & B_ALPHA:
        cur.skip(1)


def _skip_sound(cur: ByteCursor, fitz: bool) -> None:
    mask = cur.u8()
    if mask & SND_VOLUME:
        cur.skip(1)
    if mask & SND_ATTENUATION:
        cur.skip(1)
    if fitz and mask & SND_LARGEENTITY:
        cur.skip(3)
    else:
        cur.skip(2)
    if fitz and mask & SND_LARGESOUND:
        cur.skip(2)
    else:
        cur.skip(1)
    cur.skip(6)


def _skip_serverinfo(cur: ByteCursor) -> int:
    protocol = cur.i32()
    cur.skip(2)  # maxclients, gametype
    cur.string()  # level name
    while cur.string():
        pass  # model precache
    while cur.string():
        pass  # sound precache
    return protocol


def _skip_clientdata(cur: ByteCursor, fitz: bool) -> None:
    bits = cur.u16()
    if fitz and bits & SU_EXTEND1:
        bits |= cur.u8() << 16
    if fitz and bits & SU_EXTEND2:
        bits |= cur.u8() << 24
    if bits & SU_VIEWHEIGHT:
        cur.skip(1)
    if bits & SU_IDEALPITCH:
        cur.skip(1)
    for axis in range(3):
        if bits & (SU_PUNCH1 << axis):
            cur.skip(1)
        if bits & (SU_VELOCITY1 << axis):
            cur.skip(1)
    cur.skip(4)  # items, always sent
    for bit in (SU_WEAPONFRAME, SU_ARMOR, SU_WEAPON):
        if bits & bit:
            cur.skip(1)
    cur.skip(2)  # health
    cur.skip(6)  # ammo, shells, nails, rockets, cells, active weapon
    if fitz:
        for bit in _SU_FITZ_BYTES:
            if bits & bit:
                cur.skip(1)


def _skip_temp_entity(cur: ByteCursor) -> None:
    kind = cur.u8()
    if kind in _TE_POINT:
        cur.skip(6)
    elif kind in _TE_BEAM:
        cur.skip(14)
    elif kind == _TE_EXPLOSION2:
        cur.skip(8)
    else:
        raise _Unsized(f"unknown temp entity type {kind}")


def _skip_fast_update(cur: ByteCursor, tag: int, fitz: bool) -> None:
    mask = tag & 0x7F
    if mask & U_MOREBITS:
        mask |= cur.u8() << 8
    if fitz and mask & U_EXTEND1:
        mask |= cur.u8() << 16
    if fitz and mask & U_EXTEND2:
        mask |= cur.u8() << 24
    cur.skip(2 if mask & U_LONGENTITY else 1)
    for bit, size in (
        (U_MODEL, 1),
        (U_FRAME, 1),
        (U_COLORMAP, 1),
        (U_SKIN, 1),
        (U_EFFECTS, 1),
        (U_ORIGIN1, 2),
        (U_ANGLE1, 1),
        (U_ORIGIN2, 2),
        (U_ANGLE2, 1),
        (U_ORIGIN3, 2),
        (U_ANGLE3, 1),
    ):
        if mask & bit:
            cur.skip(size)
    if fitz:
        for bit in (U_ALPHA, U_FRAME2, U_MODEL2, U_LERPFINISH):
            if mask & bit:
                cur.skip(1)


def _skip_message(cur: ByteCursor, tag: int, protocol: int) -> int:
    """Advance `cur` past one message body; returns the (possibly new) protocol."""

    fitz = protocol != PROTOCOL_NETQUAKE
    if tag >= SVC_FAST_UPDATE:
        _skip_fast_update(cur, tag, fitz)
    elif tag in _FIXED_SIZES:
        cur.skip(_FIXED_SIZES[tag])
    elif fitz and tag in _FITZ_FIXED_SIZES:
        cur.skip(_FITZ_FIXED_SIZES[tag])
    elif tag in _STRING_MESSAGES or (fitz and tag == SVC_SKYBOX):
        cur.string()
    elif tag in (SVC_LIGHTSTYLE, SVC_UPDATENAME):
        cur.skip(1)
        cur.string()
    elif tag == SVC_SOUND:
        _skip_sound(cur, fitz)
    elif tag == SVC_SERVERINFO:
        return _skip_serverinfo(cur)
    elif tag == SVC_CLIENTDATA:
        _skip_clientdata(cur, fitz)
    elif tag == SVC_TEMP_ENTITY:
        _skip_temp_entity(cur)
    elif fitz and tag == SVC_SPAWNBASELINE2:
        cur.skip(2)
        _skip_baseline(cur, cur.u8())
    elif fitz and tag == SVC_SPAWNSTATIC2:
        _skip_baseline(cur, cur.u8())
    else:
        raise _Unsized(f"unknown message type {tag}")
    return protocol


def split_messages(data: bytes, protocol: int = PROTOCOL_NETQUAKE) -> tuple[list[Message], int]:
    """Split the server message bytes of one block.

    Returns the messages and the protocol in effect after the block (an
    `svc_serverinfo` switches it). Bytes that cannot be sized end up in one
    trailing opaque message so the block still serializes unchanged.
    """

    data = bytes(data)
    messages: list[Message] = []
    offset = 0
    while offset < len(data):
        tag = data[offset]
        cur = ByteCursor(data, offset + 1)
        try:
            protocol = _skip_message(cur, tag, protocol)
        except (TruncatedPayload, _Unsized) as exc:
            warnings.warn(
                f"could not split block at offset {offset}: {exc}; keeping {len(data) - offset} bytes as-is",
                category=MessageSplitWarning,
                stacklevel=2,
            )
            messages.append(Message(tag=OPAQUE_TAG, payload=bytearray(data[offset:])))
            break
        messages.append(Message(tag=tag, payload=bytearray(data[offset + 1 : cur.offset])))
        offset = cur.offset
    return messages, protocol


def join_messages(messages: Iterable[Message]) -> bytes:
    return b"".join(message.to_bytes() for message in messages)


def time_message(seconds: float) -> Message:
    return Message(tag=SVC_TIME, payload=bytearray(struct.pack("<f", float(seconds))))


def entity_update_message(
    entity: int,
    *,
    origin: tuple[int | None, int | None, int | None] = (None, None, None),
    angles: tuple[int | None, int | None, int | None] = (None, None, None),
    model: int | None = None,
    frame: int | None = None,
    colormap: int | None = None,
    skin: int | None = None,
    effects: int | None = None,
    alpha: int | None = None,
    long_entity: bool | None = None,
) -> Message:
    """Build a fast entity update.

    `origin` holds raw int16 coordinates and `angles` raw protocol angle
    bytes; `None` leaves the field out of the update.
    """

    if long_entity is None:
        long_entity = entity > 0xFF
    mask = 0
    if long_entity:
        mask |= U_LONGENTITY
    for bit, value in (
        (U_MODEL, model),
        (U_FRAME, frame),
        (U_COLORMAP, colormap),
        (U_SKIN, skin),
        (U_EFFECTS, effects),
        (U_ORIGIN1, origin[0]),
        (U_ANGLE1, angles[0]),
        (U_ORIGIN2, origin[1]),
        (U_ANGLE2, angles[1]),
        (U_ORIGIN3, origin[2]),
        (U_ANGLE3, angles[2]),
        (U_ALPHA, alpha),
    ):
        if value is not None:
            mask |= bit
    if mask & 0xFF0000:
        mask |= U_EXTEND1
    if mask & 0xFFFF00:
        mask |= U_MOREBITS

    payload = bytearray()
    if mask & U_MOREBITS:
        payload.append((mask >> 8) & 0xFF)
    if mask & U_EXTEND1:
        payload.append((mask >> 16) & 0xFF)
    if long_entity:
        payload += struct.pack("<H", entity & 0xFFFF)
    else:
        payload.append(entity & 0xFF)
    for value in (model, frame, colormap, skin, effects):
        if value is not None:
            payload.append(value & 0xFF)
    for coord, angle in zip(origin, angles):
        if coord is not None:
            payload += struct.pack("<h", coord)
        if angle is not None:
            payload.append(angle & 0xFF)
    if alpha is not None:
        payload.append(alpha & 0xFF)

    return Message(tag=SVC_FAST_UPDATE | (mask & 0x7F), payload=payload)
