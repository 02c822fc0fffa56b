# stringloom/scoring.py
# How much drawing one chord in one colour would move the accumulator
# towards the target. Lower is better; negative means improvement.

import numpy as np

# Regressions count for 1/REGRESSION_DIVISOR of an equal improvement
REGRESSION_DIVISOR = 5.0


def blend(color, samples: np.ndarray, fade: float) -> np.ndarray:
    """color*fade + samples*(1-fade), per channel (exact no-op where samples == color)."""
    return samples + (np.asarray(color, dtype=np.float64) - samples) * fade


def pixel_deltas(chord, color, target: np.ndarray, accumulator: np.ndarray) -> np.ndarray:
    """
    Per pixel change in absolute error (summed over RGBA) if the chord were drawn.
    """
    current = accumulator[chord.rows, chord.cols]
    goal = target[chord.rows, chord.cols]
    drawn = blend(color, current, chord.fade)
    return (np.abs(goal - drawn) - np.abs(goal - current)).sum(axis=1)


def score_chord(chord, color, target: np.ndarray, accumulator: np.ndarray) -> float:
    """
    Mean of the per-pixel deltas, regressions down-weighted, cubed.

    Cubing keeps the sign and stretches the gap between strong and weak
    candidates.
    """
    delta = pixel_deltas(chord, color, target, accumulator)
    total = delta[delta < 0].sum() + delta[delta > 0].sum() / REGRESSION_DIVISOR
    return float(total / len(delta)) ** 3
