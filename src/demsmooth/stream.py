from __future__ import annotations

from typing import Iterator, Sequence

from .demo.types import Block


def is_timed(block: Block) -> bool:
    return bool(block.messages) and block.messages[0].is_time


def next_timed(blocks: Sequence[Block], start: int) -> int | None:
    for idx in range(max(start, 0), len(blocks)):
        if is_timed(blocks[idx]):
            return idx
    return None


def iter_timed(blocks: Sequence[Block], start: int = 0) -> Iterator[tuple[int, Block]]:
    idx = next_timed(blocks, start)
    while idx is not None:
        yield idx, blocks[idx]
        idx = next_timed(blocks, idx + 1)


def untimed_after(blocks: Sequence[Block], index: int) -> Iterator[Block]:
    """Blocks following `index` up to, not including, the next timed block."""

    for idx in range(index + 1, len(blocks)):
        block = blocks[idx]
        if is_timed(block):
            return
        yield block
