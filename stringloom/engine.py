# stringloom/engine.py
# Greedy multi-lane stroke selection.
#
# Every round each lane proposes its best chord from where it stands; the
# lane with the lowest score draws its chord into the shared accumulator.
# The run ends when the budget is spent or no lane can improve anymore.

import enum
import logging
import math
import random
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .chords import ChordCache
from .config import LOG_EVERY, FrameConfig
from .geometry import Frame
from .lane import Lane
from .palette import Color, generate_palette

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    TERMINATED = "terminated"


class StopReason(enum.Enum):
    BUDGET = "iteration budget reached"
    EXHAUSTED = "no improving move left"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class RoundEvent:
    iteration: int
    lane: int
    color: Color
    nail: int
    score: float
    progress: float


def as_rgba(buffer) -> np.ndarray:
    """Float64 (H, W, 4) copy of an RGB or RGBA pixel buffer."""
    arr = np.array(buffer, dtype=np.float64)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"expected an (H, W, 4) or (H, W, 3) buffer, got shape {arr.shape}")
    if arr.shape[0] < 1 or arr.shape[1] < 1:
        raise ValueError(f"empty pixel buffer {arr.shape}")
    if arr.shape[2] == 3:
        arr = np.concatenate([arr, np.full(arr.shape[:2] + (1,), 255.0)], axis=2)
    return arr


def flat_buffer(height: int, width: int, color) -> np.ndarray:
    buf = np.empty((height, width, 4), dtype=np.float64)
    buf[...] = color
    return buf


def replay(log: Sequence[Tuple[int, int]], lanes: Sequence[Tuple[Color, int]],
           chords: ChordCache, background, shape) -> np.ndarray:
    """
    Redraw a drawing-order log onto a fresh accumulator.

    `log` holds (lane index, nail) per committed round, `lanes` the
    (color, start nail) of every lane, `shape` is (height, width).
    """
    height, width = shape[:2]
    accumulator = flat_buffer(height, width, background)
    fresh = [Lane(color, start) for color, start in lanes]
    for index, nail in log:
        fresh[index].move_to(nail, chords, accumulator)
    return accumulator


class Engine:
    def __init__(self, target, config: Optional[FrameConfig] = None,
                 rng: Optional[random.Random] = None, label: str = "run"):
        self.label = label
        self._source = target
        self._rng = rng
        self._pool = None
        self.reconfigure(config or FrameConfig())

    # =========================
    # SETUP
    # =========================
    def reconfigure(self, config: FrameConfig) -> None:
        """Throw away all state and rebuild it for `config`."""
        config.validate()
        self.close()

        target = as_rgba(self._source)
        target.flags.writeable = False
        self.config = config
        self.rng = self._rng or random.Random(config.seed)
        self.frame = Frame.from_config(config)
        self.bbox = self.frame.bbox()
        self.nails = self.frame.nails(config.n_nails)

        self.target = target
        self.height, self.width = target.shape[:2]
        self.accumulator = flat_buffer(self.height, self.width, config.background)
        self.chords = ChordCache.for_frame(self.nails, self.bbox, self.width, self.height, config.fade)

        self.palette = generate_palette(config.n_colors, config.black_background, self.rng)
        self.lanes = [Lane(c, 0, self.rng) for c in self.palette]

        self.iteration = 0
        self.thread_order: List[int] = []
        self.log: List[Tuple[int, int]] = []
        self.state = EngineState.IDLE
        self.stop_reason: Optional[StopReason] = None
        self.error: Optional[BaseException] = None

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    # =========================
    # LOOP
    # =========================
    def _evaluate_all(self) -> List[float]:
        if self.config.workers == 1 or len(self.lanes) < 2:
            return [lane.evaluate(self.chords, self.target, self.accumulator) for lane in self.lanes]
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=self.config.workers,
                                            thread_name_prefix="stringloom-lane")
        futures = [self._pool.submit(lane.evaluate, self.chords, self.target, self.accumulator)
                   for lane in self.lanes]
        return [f.result() for f in futures]

    def _stop(self, reason: StopReason) -> None:
        self.state = EngineState.TERMINATED
        self.stop_reason = reason
        self.close()
        logger.info("[%s] stopped after %d rounds: %s", self.label, self.iteration, reason.value)

    def step(self) -> Optional[RoundEvent]:
        """Run one round. Returns None once the run has terminated."""
        if self.state is EngineState.TERMINATED:
            return None
        if self.state is EngineState.IDLE:
            self.state = EngineState.RUNNING
            logger.info("[%s] %d nails, %d lanes, raster %dx%d, budget %d",
                        self.label, len(self.nails), len(self.lanes),
                        self.width, self.height, self.config.max_iter)
        if self.iteration >= self.config.max_iter:
            self._stop(StopReason.BUDGET)
            return None

        try:
            scores = self._evaluate_all()
            best, best_score = None, math.inf
            for i, score in enumerate(scores):
                if score < best_score:
                    best, best_score = i, score
            if best is None:
                self._stop(StopReason.EXHAUSTED)
                return None
            nail = self.lanes[best].commit(self.chords, self.accumulator)
        except Exception as e:
            logger.exception("[%s] round %d failed", self.label, self.iteration + 1)
            self.error = e
            self._stop(StopReason.FAILED)
            return None

        self.iteration += 1
        self.thread_order.append(best)
        self.log.append((best, nail))
        if self.iteration % LOG_EVERY == 0:
            logger.info("[%s] round %d/%d best_score=%.4g",
                        self.label, self.iteration, self.config.max_iter, best_score)

        event = RoundEvent(self.iteration, best, self.lanes[best].color, nail,
                           best_score, self.iteration / self.config.max_iter)
        if self.iteration >= self.config.max_iter:
            self._stop(StopReason.BUDGET)
        return event

    def rounds(self) -> Iterator[RoundEvent]:
        """Yield after every committed round; stop consuming to pause."""
        while True:
            event = self.step()
            if event is None:
                return
            yield event

    def run(self, on_round: Optional[Callable[[RoundEvent], None]] = None,
            should_stop: Optional[Callable[[], bool]] = None) -> StopReason:
        for event in self.rounds():
            if on_round is not None:
                on_round(event)
            if should_stop is not None and should_stop():
                self._stop(StopReason.CANCELLED)
                break
        return self.stop_reason

    # =========================
    # RESULTS
    # =========================
    def commits_per_lane(self) -> Counter:
        return Counter(self.thread_order)

    def drawing_order(self) -> List[Tuple[Color, List[int]]]:
        """Consecutive rounds won by the same lane, as (color, nails reached)."""
        runs: List[Tuple[Color, List[int]]] = []
        last = None
        for index, nail in self.log:
            if index != last:
                runs.append((self.lanes[index].color, []))
                last = index
            runs[-1][1].append(nail)
        return runs

    def strokes(self) -> List[Tuple[Color, Tuple[float, float], Tuple[float, float]]]:
        """Every committed chord in commit order, in frame coordinates."""
        at = [lane.start_nail for lane in self.lanes]
        out = []
        for index, nail in self.log:
            a = self.nails[at[index]]
            b = self.nails[nail]
            out.append((self.lanes[index].color, (float(a[0]), float(a[1])), (float(b[0]), float(b[1]))))
            at[index] = nail
        return out

    def replay(self) -> np.ndarray:
        return replay(self.log, [(lane.color, lane.start_nail) for lane in self.lanes],
                      self.chords, self.config.background, self.accumulator.shape)
