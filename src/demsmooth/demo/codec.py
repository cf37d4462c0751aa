from __future__ import annotations

import io
from pathlib import Path
from typing import Final

from construct import Array, Bytes, ConstructError, Float32l, Int32ul, StreamError, Struct, this

from .messages import join_messages, split_messages
from .types import PROTOCOL_NETQUAKE, Block, Demo

# Quake writes the cd track as a short decimal line, e.g. b"-1\n".
_MAX_CD_TRACK_LEN: Final[int] = 16

_BLOCK = Struct(
    "size" / Int32ul,
    "angles" / Array(3, Float32l),
    "data" / Bytes(this.size),
)


class DemoFormatError(ValueError):
    pass


def loads(data: bytes) -> Demo:
    data = bytes(data)
    end = data.find(b"\n", 0, _MAX_CD_TRACK_LEN + 1)
    if end < 0:
        raise DemoFormatError("missing cd track header")
    cd_track = data[:end]

    stream = io.BytesIO(data)
    stream.seek(end + 1)
    blocks: list[Block] = []
    protocol = PROTOCOL_NETQUAKE
    while stream.tell() < len(data):
        offset = stream.tell()
        try:
            raw = _BLOCK.parse_stream(stream)
        except StreamError as exc:
            raise DemoFormatError(f"truncated block {len(blocks)} at offset {offset}") from exc
        except ConstructError as exc:
            raise DemoFormatError(str(exc)) from exc
        messages, protocol = split_messages(raw.data, protocol)
        blocks.append(Block(angles=[float(a) for a in raw.angles], messages=messages))

    return Demo(cd_track=cd_track, blocks=blocks)


def load(path: Path) -> Demo:
    return loads(Path(path).read_bytes())


def dumps(demo: Demo) -> bytes:
    if b"\n" in demo.cd_track:
        raise DemoFormatError("cd track header must not contain a newline")
    out = bytearray(demo.cd_track)
    out += b"\n"
    for idx, block in enumerate(demo.blocks):
        data = join_messages(block.messages)
        try:
            out += _BLOCK.build({"size": len(data), "angles": [float(a) for a in block.angles], "data": data})
        except ConstructError as exc:
            raise DemoFormatError(f"block {idx}: {exc}") from exc
    return bytes(out)


def dump(demo: Demo, path: Path) -> None:
    Path(path).write_bytes(dumps(demo))
