# stringloom/config.py
# Run parameters for one string-art generation.
#
# Defaults live as module constants (edit them here, or override per run
# through FrameConfig / the CLI). A FrameConfig is immutable: changing a
# parameter means building a new Engine from a new config.

import math
from dataclasses import dataclass, replace as _replace
from typing import Optional, Tuple

# =========================
# DEFAULTS
# =========================
SHAPES = ("circle", "rectangle")
SHAPE = "circle"

CIRCLE_DIAMETER_CM = 76.2   # 30 inches
RECT_WIDTH_CM = 60.0
RECT_HEIGHT_CM = 40.0
CM_PER_INCH = 2.54

N_NAILS = 300
MAX_ITER = 10000
N_COLORS = 5

# Raster resolution is derived from the thread width, then divided by this
DOWNSCALE_FACTOR = 4
THREAD_DIAM_IN = 0.01
NAIL_DIAM_IN = 0.1
FALLBACK_RESOLUTION = 400

# Accumulator start colour, RGBA
LIGHT_BACKGROUND = (128, 128, 128, 255)
DARK_BACKGROUND = (0, 0, 0, 255)

LOG_EVERY = 250


class ConfigError(ValueError):
    """Raised for a configuration the engine cannot run with."""


def cm_to_inches(cm: float) -> float:
    return cm / CM_PER_INCH


@dataclass(frozen=True)
class FrameConfig:
    shape: str = SHAPE
    diameter_cm: float = CIRCLE_DIAMETER_CM
    rect_width_cm: float = RECT_WIDTH_CM
    rect_height_cm: float = RECT_HEIGHT_CM
    n_nails: int = N_NAILS
    max_iter: int = MAX_ITER
    n_colors: int = N_COLORS
    black_background: bool = False
    downscale_factor: float = DOWNSCALE_FACTOR
    thread_diam_in: float = THREAD_DIAM_IN
    workers: int = 1
    seed: Optional[int] = None

    def validate(self) -> "FrameConfig":
        if self.shape not in SHAPES:
            raise ConfigError(f"unknown frame shape {self.shape!r}, expected one of {SHAPES}")
        if self.n_nails <= 1:
            raise ConfigError(f"need at least 2 nails, got {self.n_nails}")
        if self.max_iter <= 0:
            raise ConfigError(f"iteration budget must be positive, got {self.max_iter}")
        if self.shape == "circle" and not self.diameter_cm > 0:
            raise ConfigError(f"circle diameter must be positive, got {self.diameter_cm}")
        if self.shape == "rectangle" and not (self.rect_width_cm > 0 and self.rect_height_cm > 0):
            raise ConfigError(
                f"rectangle size must be positive, got {self.rect_width_cm} x {self.rect_height_cm}"
            )
        if self.n_colors < 0:
            raise ConfigError(f"colour count cannot be negative, got {self.n_colors}")
        if not self.downscale_factor > 0:
            raise ConfigError(f"downscale factor must be positive, got {self.downscale_factor}")
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        return self

    def replace(self, **changes) -> "FrameConfig":
        return _replace(self, **changes)

    @property
    def fade(self) -> float:
        """Alpha weight of one stroke."""
        return 1.0 / (self.downscale_factor * 1.8)

    @property
    def background(self) -> Tuple[int, int, int, int]:
        return DARK_BACKGROUND if self.black_background else LIGHT_BACKGROUND

    def raster_size(self, bbox) -> Tuple[int, int]:
        """(width, height) in pixels of the buffers for a frame bounding box."""
        max_res = ((bbox.width / self.thread_diam_in) / 2) / self.downscale_factor
        if not math.isfinite(max_res) or max_res <= 1:
            max_res = FALLBACK_RESOLUTION
        aspect = bbox.width / bbox.height
        if aspect >= 1:
            w, h = max_res, max_res / aspect
        else:
            w, h = max_res * aspect, max_res
        return max(2, int(round(w))), max(2, int(round(h)))
