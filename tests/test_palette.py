"""Tests for thread colour generation.

Tests for stringloom.palette:
    - HSL -> RGB at the primary hues and at lightness 0.6
    - Fixed palettes for 0, 1, 2, 3 and 5 colours on both backgrounds
    - Exact count for every n, no too-dark colour on a black background
    - Reproducible top-up with an injected random source

Run:
    pytest tests/test_palette.py -v
"""

from __future__ import annotations

import random

import pytest

from stringloom import palette
from stringloom.palette import BLACK, BLUE, GREEN, GREY, RED, WHITE, Color, generate_palette, hsl_to_rgb


class TestHslToRgb:
    @pytest.mark.parametrize("h,expected", [(0, (255, 0, 0)), (120, (0, 255, 0)), (240, (0, 0, 255)),
                                            (60, (255, 255, 0)), (180, (0, 255, 255)), (300, (255, 0, 255))])
    def test_primary_hues(self, h, expected) -> None:
        assert hsl_to_rgb(h, 1, 0.5).rgb() == expected

    def test_lighter(self) -> None:
        assert hsl_to_rgb(0, 1, 0.6) == Color(255, 51, 51)

    def test_grey_without_saturation(self) -> None:
        assert hsl_to_rgb(200, 0, 0.5) == Color(128, 128, 128)

    def test_opaque(self) -> None:
        assert hsl_to_rgb(33, 1, 0.5).a == 255


class TestFixedPalettes:
    def test_zero(self) -> None:
        assert generate_palette(0) == []
        assert generate_palette(-3) == []

    def test_one(self) -> None:
        assert generate_palette(1) == [BLACK]
        assert generate_palette(1, black_background=True) == [WHITE]

    def test_two(self) -> None:
        assert generate_palette(2) == [BLACK, WHITE]
        assert generate_palette(2, black_background=True) == [WHITE, GREY]

    def test_three_ignores_background(self) -> None:
        assert generate_palette(3) == [RED, GREEN, BLUE]
        assert generate_palette(3, black_background=True) == [RED, GREEN, BLUE]

    def test_five(self) -> None:
        light = generate_palette(5)
        dark = generate_palette(5, black_background=True)
        assert light[:3] == dark[:3] == [Color(0, 255, 255), Color(255, 0, 255), Color(255, 255, 0)]
        assert light[3:] == [BLACK, WHITE]
        assert BLACK not in dark
        assert len(set(dark)) == 5


class TestGeneratedPalettes:
    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6, 7, 10, 24])
    @pytest.mark.parametrize("dark", [False, True])
    def test_exact_count(self, n, dark) -> None:
        assert len(generate_palette(n, dark, random.Random(0))) == n

    def test_evenly_spaced_hues(self) -> None:
        assert generate_palette(4) == [hsl_to_rgb(h, 1, 0.5) for h in (0, 90, 180, 270)]

    @pytest.mark.parametrize("n", [4, 6, 8, 10])
    def test_nothing_too_dark_on_black(self, n) -> None:
        for c in generate_palette(n, black_background=True, rng=random.Random(1)):
            assert sum(c.rgb()) >= palette.DARK_THRESHOLD

    def test_top_up_replaces_dark_samples(self, monkeypatch) -> None:
        # raise the bar so pure-hue samples at lightness 0.6 get dropped
        monkeypatch.setattr(palette, "DARK_THRESHOLD", 400)
        colors = generate_palette(6, black_background=True, rng=random.Random(7))
        assert len(colors) == 6
        assert all(sum(c.rgb()) >= 400 for c in colors)
        assert hsl_to_rgb(0, 1, 0.6) not in colors

    def test_top_up_reproducible(self, monkeypatch) -> None:
        monkeypatch.setattr(palette, "DARK_THRESHOLD", 400)
        a = generate_palette(8, black_background=True, rng=random.Random(42))
        b = generate_palette(8, black_background=True, rng=random.Random(42))
        assert a == b
