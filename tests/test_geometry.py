"""Tests for frame outline and nail placement.

Tests for stringloom.geometry:
    - Circle nails lie on the circle, first nail at 3 o'clock
    - Rectangle nails are spaced by arc length (corners do not cluster)
    - Measured placement matches the closed form
    - Fallback to the closed form when measuring fails
    - Bounding box and canvas box

Run:
    pytest tests/test_geometry.py -v
"""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from stringloom.config import FrameConfig
from stringloom.geometry import BBox, Frame, MeasurementError, points_along


# ---------------------------------------------------------------------------
# Circle
# ---------------------------------------------------------------------------


class TestCircle:
    def test_nails_on_circle(self) -> None:
        frame = Frame("circle", 10.0, 10.0)
        nails = frame.nails(300)
        assert nails.shape == (300, 2)
        r = np.hypot(nails[:, 0], nails[:, 1])
        np.testing.assert_allclose(r, 5.0, rtol=1e-5)

    def test_first_nail_at_three_oclock(self) -> None:
        nails = Frame("circle", 4.0, 4.0).nails(8)
        np.testing.assert_allclose(nails[0], (2.0, 0.0), atol=1e-12)
        # screen coordinates: a quarter turn later is straight down
        np.testing.assert_allclose(nails[2], (0.0, 2.0), atol=1e-4)

    def test_measured_matches_closed_form(self) -> None:
        frame = Frame("circle", 12.0, 12.0)
        np.testing.assert_allclose(frame.nails(250), frame.closed_form_nails(250), atol=6.0 * 1e-4)

    def test_deterministic(self) -> None:
        frame = Frame("circle", 7.0, 7.0)
        assert np.array_equal(frame.nails(123), frame.nails(123))

    def test_perimeter(self) -> None:
        assert Frame("circle", 2.0, 2.0).perimeter() == pytest.approx(2 * math.pi)


# ---------------------------------------------------------------------------
# Rectangle
# ---------------------------------------------------------------------------


class TestRectangle:
    def test_arc_length_spacing(self) -> None:
        frame = Frame("rectangle", 2.0, 1.0)
        expected = [(-1, -0.5), (0, -0.5), (1, -0.5), (1, 0.5), (0, 0.5), (-1, 0.5)]
        np.testing.assert_allclose(frame.nails(6), expected, atol=1e-12)
        np.testing.assert_allclose(frame.closed_form_nails(6), expected, atol=1e-12)

    def test_equal_steps_along_perimeter(self) -> None:
        frame = Frame("rectangle", 3.0, 1.0)
        nails = frame.nails(16)
        # perimeter 8, 16 nails: every step along the outline is 0.5 long
        nxt = np.roll(nails, -1, axis=0)
        steps = np.abs(nails - nxt).sum(axis=1)
        np.testing.assert_allclose(steps, 0.5, atol=1e-12)

    def test_measured_matches_closed_form(self) -> None:
        frame = Frame("rectangle", 23.6, 15.7)
        np.testing.assert_allclose(frame.nails(301), frame.closed_form_nails(301), atol=1e-9)

    def test_bbox(self) -> None:
        assert Frame("rectangle", 4.0, 2.0).bbox() == BBox(-2.0, -1.0, 4.0, 2.0)

    def test_canvas_box_pads_quarter_of_longest_side(self) -> None:
        assert Frame("rectangle", 4.0, 2.0).canvas_box() == BBox(-3.0, -2.0, 6.0, 4.0)

    def test_circle_canvas_box(self) -> None:
        assert Frame("circle", 2.0, 2.0).canvas_box() == BBox(-1.5, -1.5, 3.0, 3.0)


# ---------------------------------------------------------------------------
# Measurement fallback
# ---------------------------------------------------------------------------


class TestFallback:
    def test_points_along_rejects_degenerate_outline(self) -> None:
        with pytest.raises(MeasurementError):
            points_along(np.zeros((5, 2)), 4)

    def test_fallback_on_measurement_failure(self, monkeypatch, caplog) -> None:
        frame = Frame("rectangle", 5.0, 3.0)
        monkeypatch.setattr(Frame, "outline", lambda self, segments=0: np.zeros((5, 2)))
        with caplog.at_level(logging.WARNING, logger="stringloom.geometry"):
            nails = frame.nails(40)
        np.testing.assert_allclose(nails, frame.closed_form_nails(40))
        assert "closed-form" in caplog.text

    def test_unmeasured_circle_within_tolerance(self) -> None:
        frame = Frame("circle", 30.0, 30.0)
        np.testing.assert_allclose(frame.nails(300, measured=False), frame.nails(300), atol=15.0 * 1e-4)


class TestFromConfig:
    def test_circle_inches(self) -> None:
        frame = Frame.from_config(FrameConfig(shape="circle", diameter_cm=76.2))
        assert frame.width == pytest.approx(30.0)
        assert frame.radius == pytest.approx(15.0)

    def test_rectangle_inches(self) -> None:
        frame = Frame.from_config(FrameConfig(shape="rectangle", rect_width_cm=25.4, rect_height_cm=5.08))
        assert (frame.width, frame.height) == (pytest.approx(10.0), pytest.approx(2.0))
