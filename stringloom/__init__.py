"""Multi-colour string art: greedy chord selection over nails on a frame."""

from .chords import Chord, ChordCache, bresenham, rasterize
from .config import ConfigError, FrameConfig
from .engine import Engine, EngineState, RoundEvent, StopReason, replay
from .geometry import BBox, Frame
from .lane import Lane, LaneError, LaneState
from .palette import Color, generate_palette, hsl_to_rgb
from .scoring import score_chord

__version__ = "0.1.0"
