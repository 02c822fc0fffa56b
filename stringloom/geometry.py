# stringloom/geometry.py
# Frame outline and nail placement.
#
# Nails are spread by arc length along the outline, starting where an SVG
# path of the same shape starts (circle: rightmost point, rectangle: top-left
# corner) and running clockwise on screen (y grows downwards).
# All coordinates are in inches, centred on the origin.

import logging
import math
from collections import namedtuple
from dataclasses import dataclass

import numpy as np

from .config import cm_to_inches

logger = logging.getLogger(__name__)

BBox = namedtuple("BBox", "x y width height")

# Polyline resolution used to measure a circle
OUTLINE_SEGMENTS = 2048


class MeasurementError(Exception):
    pass


@dataclass(frozen=True)
class Frame:
    shape: str
    width: float
    height: float

    @classmethod
    def from_config(cls, cfg) -> "Frame":
        if cfg.shape == "circle":
            d = cm_to_inches(cfg.diameter_cm)
            return cls("circle", d, d)
        return cls("rectangle", cm_to_inches(cfg.rect_width_cm), cm_to_inches(cfg.rect_height_cm))

    @property
    def radius(self) -> float:
        return self.width / 2

    def bbox(self) -> BBox:
        return BBox(-self.width / 2, -self.height / 2, self.width, self.height)

    def canvas_box(self) -> BBox:
        """Bounding box plus margin, for laying the frame out on a page."""
        if self.shape == "circle":
            side = self.radius * 3
            return BBox(-side / 2, -side / 2, side, side)
        pad = max(self.width, self.height) / 4
        return BBox(-self.width / 2 - pad, -self.height / 2 - pad,
                    self.width + 2 * pad, self.height + 2 * pad)

    def perimeter(self) -> float:
        if self.shape == "circle":
            return 2 * math.pi * self.radius
        return 2 * (self.width + self.height)

    def outline(self, segments: int = OUTLINE_SEGMENTS) -> np.ndarray:
        """Closed polyline (first point repeated at the end), shape (M+1, 2)."""
        if self.shape == "circle":
            a = np.linspace(0.0, 2 * math.pi, segments + 1)
            return np.column_stack((self.radius * np.cos(a), self.radius * np.sin(a)))
        w2, h2 = self.width / 2, self.height / 2
        return np.array([(-w2, -h2), (w2, -h2), (w2, h2), (-w2, h2), (-w2, -h2)], dtype=np.float64)

    def nails(self, count: int, measured: bool = True) -> np.ndarray:
        """`count` nail positions, shape (count, 2)."""
        if measured:
            try:
                return points_along(self.outline(), count)
            except MeasurementError as e:
                logger.warning("Failed to measure frame (%s), using closed-form placement", e)
        return self.closed_form_nails(count)

    def closed_form_nails(self, count: int) -> np.ndarray:
        k = np.arange(count, dtype=np.float64)
        if self.shape == "circle":
            a = k / count * 2 * math.pi
            return np.column_stack((self.radius * np.cos(a), self.radius * np.sin(a)))

        w, h = self.width, self.height
        pts = np.empty((count, 2), dtype=np.float64)
        for i, d in enumerate(k / count * self.perimeter()):
            if d <= w:
                pts[i] = (-w / 2 + d, -h / 2)          # top
            elif d <= w + h:
                pts[i] = (w / 2, -h / 2 + (d - w))     # right
            elif d <= 2 * w + h:
                pts[i] = (w / 2 - (d - w - h), h / 2)  # bottom
            else:
                pts[i] = (-w / 2, h / 2 - (d - 2 * w - h))  # left
        return pts


def points_along(outline: np.ndarray, count: int) -> np.ndarray:
    """Points at equal arc-length steps along a closed polyline."""
    seg = np.diff(outline, axis=0)
    lengths = np.hypot(seg[:, 0], seg[:, 1])
    total = float(lengths.sum())
    if not math.isfinite(total) or total <= 0:
        raise MeasurementError(f"outline length is {total}")
    logger.debug("Frame length measured: %.4f", total)

    cum = np.concatenate(([0.0], np.cumsum(lengths)))
    at = np.arange(count, dtype=np.float64) / count * total
    return np.column_stack((np.interp(at, cum, outline[:, 0]), np.interp(at, cum, outline[:, 1])))
