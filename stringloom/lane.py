# stringloom/lane.py
# One coloured thread being routed through the nails.

import enum
import math
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from .chords import Chord
from .scoring import blend, score_chord


class LaneError(RuntimeError):
    pass


class LaneState(enum.Enum):
    AWAITING_EVALUATION = "awaiting-evaluation"
    HAS_CANDIDATE = "has-candidate"


@dataclass(frozen=True)
class Candidate:
    nail: int
    chord: Optional[Chord]
    score: float

    @property
    def viable(self) -> bool:
        return math.isfinite(self.score)


class Lane:
    """
    Position, history and memoized best move of one thread.

    The candidate stays valid until this lane moves: other lanes committing
    in between do not invalidate it.
    """

    def __init__(self, color, start_nail: int = 0, rng: Optional[random.Random] = None):
        self.color = color
        self.start_nail = start_nail
        self.current_nail = start_nail
        self.path: List[int] = [start_nail]
        self.candidate: Optional[Candidate] = None
        self.rng = rng or random.Random()
        # origin nail -> nails already reached from it
        self._traversed: Dict[int, Set[int]] = {}

    def __repr__(self):
        return f"Lane(color={tuple(self.color)}, at={self.current_nail}, moves={len(self.path) - 1})"

    @property
    def state(self) -> LaneState:
        if self.candidate is None:
            return LaneState.AWAITING_EVALUATION
        return LaneState.HAS_CANDIDATE

    @property
    def moves(self) -> int:
        return len(self.path) - 1

    def has_traversed(self, origin: int, dest: int) -> bool:
        return dest in self._traversed.get(origin, ())

    def segments(self) -> List[Tuple[int, int]]:
        return list(zip(self.path[:-1], self.path[1:]))

    def chord_score(self, nail: int, chord, target, accumulator) -> float:
        """Score of moving to `nail`; a chord already taken from here scores 0."""
        if self.has_traversed(self.current_nail, nail):
            return 0.0
        return score_chord(chord, self.color, target, accumulator)

    def evaluate(self, chords, target, accumulator) -> float:
        """Best score over all chords from the current nail (memoized)."""
        if self.candidate is not None:
            return self.candidate.score

        best_score, best_nail, best_chord = math.inf, None, None
        for nail, chord in enumerate(chords.connections(self.current_nail)):
            if chord is None:
                continue
            score = self.chord_score(nail, chord, target, accumulator)
            if score < best_score:
                best_score, best_nail, best_chord = score, nail, chord

        if best_nail is None or best_score >= 0:
            # Placeholder only, an infinite score never wins a round
            self.candidate = Candidate(self.rng.randrange(chords.n), None, math.inf)
        else:
            self.candidate = Candidate(best_nail, best_chord, best_score)
        return self.candidate.score

    def commit(self, chords, accumulator) -> int:
        """Draw the memoized move into the accumulator and advance. Returns the new nail."""
        if self.candidate is None:
            raise LaneError("commit() called before evaluate()")
        if not self.candidate.viable:
            raise LaneError(f"lane {tuple(self.color)} has no improving move")
        nail = self.candidate.nail
        self.move_to(nail, chords, accumulator)
        return nail

    def move_to(self, nail: int, chords, accumulator) -> None:
        chord = chords.get(self.current_nail, nail)
        rows, cols = chord.rows, chord.cols
        # compute before touching the buffer so a failure leaves it untouched
        drawn = blend(self.color, accumulator[rows, cols], chord.fade)
        accumulator[rows, cols] = drawn

        self._traversed.setdefault(self.current_nail, set()).add(nail)
        self.current_nail = nail
        self.path.append(nail)
        self.candidate = None
