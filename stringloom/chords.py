# stringloom/chords.py
# Chord rasterization and the per-run chord cache.

import math
import threading
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Tuple

import numpy as np


# =========================
# RASTER
# =========================
def to_pixel(point, bbox, width: int, height: int) -> Tuple[int, int]:
    """Map a frame point into integer pixel coordinates of a width x height buffer."""
    x = math.floor((point[0] - bbox.x) * (width - 1) / bbox.width)
    y = math.floor((point[1] - bbox.y) * (height - 1) / bbox.height)
    return min(max(x, 0), width - 1), min(max(y, 0), height - 1)


def bresenham(x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
    """Integer pixels from (x0, y0) to (x1, y1) inclusive, shape (K, 2) as (x, y)."""
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    pts = []
    while True:
        pts.append((x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return np.array(pts, dtype=np.intp)


def rasterize(start: Tuple[int, int], end: Tuple[int, int]) -> np.ndarray:
    """Bresenham line that is the exact reverse of rasterize(end, start)."""
    if tuple(end) < tuple(start):
        return bresenham(end[0], end[1], start[0], start[1])[::-1]
    return bresenham(start[0], start[1], end[0], end[1])


# =========================
# CHORDS
# =========================
@dataclass(frozen=True, eq=False)
class Chord:
    a: int
    b: int
    start: Tuple[int, int]
    end: Tuple[int, int]
    pixels: np.ndarray
    fade: float

    @property
    def key(self) -> Tuple[int, int]:
        return self.a, self.b

    @cached_property
    def rows(self) -> np.ndarray:
        return self.pixels[:, 1]

    @cached_property
    def cols(self) -> np.ndarray:
        return self.pixels[:, 0]

    def other(self, nail: int) -> int:
        return self.b if nail == self.a else self.a

    def __len__(self) -> int:
        return len(self.pixels)


def pair_index(i: int, j: int, n: int) -> int:
    """Slot of the unordered pair {i, j} in a table of n*(n-1)/2 entries."""
    a, b = (i, j) if i < j else (j, i)
    return a * (2 * n - a - 1) // 2 + (b - a - 1)


class ChordCache:
    """
    Lazily rasterized chords between every pair of nails.

    One slot per unordered pair; a chord is built on first request and never
    changes afterwards. Inserts take a lock so lanes can share the cache from
    worker threads.
    """

    def __init__(self, nails_px, fade: float):
        self.nails_px = [tuple(int(v) for v in p) for p in nails_px]
        self.n = len(self.nails_px)
        self.fade = float(fade)
        self._table: List[Optional[Chord]] = [None] * (self.n * (self.n - 1) // 2)
        self._lock = threading.Lock()

    @classmethod
    def for_frame(cls, nails, bbox, width: int, height: int, fade: float) -> "ChordCache":
        return cls([to_pixel(p, bbox, width, height) for p in nails], fade)

    @property
    def capacity(self) -> int:
        return len(self._table)

    def __len__(self) -> int:
        return sum(1 for c in self._table if c is not None)

    def get(self, i: int, j: int) -> Chord:
        if i == j:
            raise ValueError(f"no chord from nail {i} to itself")
        k = pair_index(i, j, self.n)
        chord = self._table[k]
        if chord is None:
            chord = self._build(min(i, j), max(i, j))
            with self._lock:
                if self._table[k] is None:
                    self._table[k] = chord
                chord = self._table[k]
        return chord

    def pixels(self, i: int, j: int) -> np.ndarray:
        """Chord pixels ordered from nail i to nail j."""
        px = self.get(i, j).pixels
        return px if i < j else px[::-1]

    def connections(self, nail: int) -> List[Optional[Chord]]:
        """Chords from `nail` to every nail, None at `nail` itself."""
        return [None if j == nail else self.get(nail, j) for j in range(self.n)]

    def _build(self, a: int, b: int) -> Chord:
        start, end = self.nails_px[a], self.nails_px[b]
        px = rasterize(start, end)
        px.flags.writeable = False
        return Chord(a, b, start, end, px, self.fade)
