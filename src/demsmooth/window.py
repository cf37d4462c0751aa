from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Generic, Protocol, Sequence, TypeVar


class WindowSample(Protocol):
    @property
    def index(self) -> int: ...


S = TypeVar("S", bound=WindowSample)
V = TypeVar("V")

# fetch(start, prev) -> first sample at or after block `start`, or None when exhausted.
FetchFn = Callable[[int, S | None], S | None]


class WindowState(Enum):
    FILLING = auto()
    STEADY = auto()


@dataclass(slots=True)
class WindowStats:
    samples: int = 0
    applied: int = 0
    restarts: int = 0


def _always_accept(tail: object, candidate: object) -> bool:
    return True


class SlidingWindow(Generic[S, V]):
    """Centered moving aggregate over a stream of samples.

    The window holds up to `2 * radius + 1` samples. Every step aggregates the
    whole window and applies the result to the sample at `min(radius, len - 1)`,
    then slides by one. A sample that cannot be fetched, or that `accept`
    rejects against the current tail, shrinks the window instead; once fewer
    than `radius + 1` samples remain the window is refilled from just after
    its tail.
    """

    def __init__(
        self,
        *,
        radius: int,
        fetch: FetchFn[S],
        aggregate: Callable[[Sequence[S]], V],
        apply: Callable[[S, V], None],
        accept: Callable[[S, S], bool] = _always_accept,
    ) -> None:
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")
        self.radius = int(radius)
        self.capacity = 2 * self.radius + 1
        self._fetch = fetch
        self._aggregate = aggregate
        self._apply = apply
        self._accept = accept

    def _fill(self, window: deque[S], start: int, stats: WindowStats) -> None:
        window.clear()
        prev: S | None = None
        while len(window) < self.capacity:
            sample = self._fetch(start, prev)
            if sample is None:
                return
            stats.samples += 1
            window.append(sample)
            start = sample.index + 1
            prev = sample

    def run(self) -> WindowStats:
        stats = WindowStats()
        window: deque[S] = deque()
        state = WindowState.FILLING
        start = 0

        while True:
            if state is WindowState.FILLING:
                self._fill(window, start, stats)
                if len(window) < self.radius + 1:
                    # Not enough history left to reach steady state.
                    return stats
                if start > 0:
                    stats.restarts += 1
                state = WindowState.STEADY
                continue

            current = window[min(self.radius, len(window) - 1)]
            self._apply(current, self._aggregate(window))
            stats.applied += 1

            tail = window[-1]
            window.popleft()
            candidate = self._fetch(tail.index + 1, tail)
            if candidate is not None and self._accept(tail, candidate):
                stats.samples += 1
                window.append(candidate)

            if len(window) < self.radius + 1:
                start = tail.index + 1
                state = WindowState.FILLING
