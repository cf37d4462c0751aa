from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

PITCH: Final[int] = 0
YAW: Final[int] = 1
ROLL: Final[int] = 2

PROTOCOL_NETQUAKE: Final[int] = 15
PROTOCOL_FITZQUAKE: Final[int] = 666

SVC_BAD: Final[int] = 0
SVC_NOP: Final[int] = 1
SVC_DISCONNECT: Final[int] = 2
SVC_UPDATESTAT: Final[int] = 3
SVC_VERSION: Final[int] = 4
SVC_SETVIEW: Final[int] = 5
SVC_SOUND: Final[int] = 6
SVC_TIME: Final[int] = 7
SVC_PRINT: Final[int] = 8
SVC_STUFFTEXT: Final[int] = 9
SVC_SETANGLE: Final[int] = 10
SVC_SERVERINFO: Final[int] = 11
SVC_LIGHTSTYLE: Final[int] = 12
SVC_UPDATENAME: Final[int] = 13
SVC_UPDATEFRAGS: Final[int] = 14
SVC_CLIENTDATA: Final[int] = 15
SVC_STOPSOUND: Final[int] = 16
SVC_UPDATECOLORS: Final[int] = 17
SVC_PARTICLE: Final[int] = 18
SVC_DAMAGE: Final[int] = 19
SVC_SPAWNSTATIC: Final[int] = 20
SVC_SPAWNBASELINE: Final[int] = 22
SVC_TEMP_ENTITY: Final[int] = 23
SVC_SETPAUSE: Final[int] = 24
SVC_SIGNONNUM: Final[int] = 25
SVC_CENTERPRINT: Final[int] = 26
SVC_KILLEDMONSTER: Final[int] = 27
SVC_FOUNDSECRET: Final[int] = 28
SVC_SPAWNSTATICSOUND: Final[int] = 29
SVC_INTERMISSION: Final[int] = 30
SVC_FINALE: Final[int] = 31
SVC_CDTRACK: Final[int] = 32
SVC_SELLSCREEN: Final[int] = 33
SVC_CUTSCENE: Final[int] = 34
SVC_SKYBOX: Final[int] = 37
SVC_BF: Final[int] = 40
SVC_FOG: Final[int] = 41
SVC_SPAWNBASELINE2: Final[int] = 42
SVC_SPAWNSTATIC2: Final[int] = 43
SVC_SPAWNSTATICSOUND2: Final[int] = 44

# Fast entity updates carry their low mask bits in the tag byte.
SVC_FAST_UPDATE: Final[int] = 0x80

# Tag used for the unsplittable remainder of a block.
OPAQUE_TAG: Final[int] = -1


@dataclass(slots=True, eq=False)
class Message:
    """One server message: the tag byte plus the bytes that follow it."""

    tag: int
    payload: bytearray = field(default_factory=bytearray)

    @property
    def is_time(self) -> bool:
        return self.tag == SVC_TIME

    @property
    def is_entity_update(self) -> bool:
        return self.tag >= SVC_FAST_UPDATE

    def read_int16(self, offset: int) -> int:
        return int.from_bytes(self.payload[offset : offset + 2], "little", signed=True)

    def write_int16(self, offset: int, value: int) -> None:
        if offset < 0 or offset + 2 > len(self.payload):
            raise IndexError(f"int16 write at {offset} outside payload of {len(self.payload)} bytes")
        self.payload[offset : offset + 2] = (int(value) & 0xFFFF).to_bytes(2, "little")

    def to_bytes(self) -> bytes:
        if self.tag == OPAQUE_TAG:
            return bytes(self.payload)
        return bytes((self.tag & 0xFF,)) + bytes(self.payload)


@dataclass(frozen=True, slots=True)
class FieldRef:
    """Write-back target for a 16-bit field inside a message payload."""

    message: Message
    offset: int

    def read(self) -> int:
        return self.message.read_int16(self.offset)

    def write(self, value: int) -> None:
        self.message.write_int16(self.offset, value)


@dataclass(slots=True, eq=False)
class Block:
    """A demo block: the client view angles and the server messages of one frame.

    `angles` is `[pitch, yaw, roll]` in degrees.
    """

    angles: list[float]
    messages: list[Message] = field(default_factory=list)

    @property
    def pitch(self) -> float:
        return self.angles[PITCH]

    @property
    def yaw(self) -> float:
        return self.angles[YAW]

    @property
    def roll(self) -> float:
        return self.angles[ROLL]


@dataclass(slots=True)
class Demo:
    cd_track: bytes
    blocks: list[Block] = field(default_factory=list)
