"""Tests for the printable nail template and sheet tiling.

Tests for stringloom.template and stringloom.tiling:
    - Outward label direction on circles and rectangles
    - Template page size is the frame plus margins, at 1:1
    - Sheet grid arithmetic with and without overlap
    - split_template writes one page per sheet

Run:
    pytest tests/test_template.py -v
"""

from __future__ import annotations

import math

import pytest
from pypdf import PdfReader, PdfWriter

from stringloom.geometry import Frame
from stringloom.template import MM_PER_INCH, make_nail_template_pdf, outward_normal
from stringloom.tiling import mm_to_pt, sheet_grid, split_template


class TestOutwardNormal:
    def test_circle(self) -> None:
        frame = Frame("circle", 10.0, 10.0)
        assert outward_normal(frame, 3.0, 4.0) == (pytest.approx(0.6), pytest.approx(0.8))

    def test_rectangle_edges(self) -> None:
        frame = Frame("rectangle", 4.0, 2.0)
        assert outward_normal(frame, 2.0, 0.3) == (1.0, 0.0)
        assert outward_normal(frame, -0.5, -1.0) == (0.0, -1.0)

    def test_rectangle_corner(self) -> None:
        frame = Frame("rectangle", 4.0, 2.0)
        nx, ny = outward_normal(frame, -2.0, 1.0)
        assert (nx, ny) == (pytest.approx(-math.sqrt(0.5)), pytest.approx(math.sqrt(0.5)))


class TestTemplate:
    @pytest.mark.parametrize("shape,size", [("circle", (8.0, 8.0)), ("rectangle", (10.0, 6.0))])
    def test_page_size(self, tmp_path, shape, size) -> None:
        frame = Frame(shape, *size)
        path = tmp_path / "template.pdf"
        w, h = make_nail_template_pdf(str(path), frame, frame.nails(120), margin_mm=30.0)
        assert w == pytest.approx(size[0] * MM_PER_INCH + 60)
        assert h == pytest.approx(size[1] * MM_PER_INCH + 60)
        reader = PdfReader(str(path))
        assert len(reader.pages) == 1
        assert float(reader.pages[0].mediabox.width) == pytest.approx(mm_to_pt(w), abs=0.01)
        assert float(reader.pages[0].mediabox.height) == pytest.approx(mm_to_pt(h), abs=0.01)


class TestSheetGrid:
    def test_no_overlap(self) -> None:
        assert sheet_grid(1000, 500, 400, 300, 0) == (3, 2)

    def test_overlap(self) -> None:
        assert sheet_grid(1000, 500, 400, 300, 10) == (3, 2)
        assert sheet_grid(780, 290, 400, 300, 20) == (2, 1)

    def test_fits_on_one(self) -> None:
        assert sheet_grid(100, 100, 400, 300, 10) == (1, 1)

    def test_bad_overlap(self) -> None:
        with pytest.raises(ValueError):
            sheet_grid(1000, 500, 400, 300, 300)
        with pytest.raises(ValueError):
            sheet_grid(1000, 500, 400, 300, -1)


class TestSplit:
    def test_split_circle_template_on_a4(self, tmp_path) -> None:
        frame = Frame("circle", 200 / MM_PER_INCH, 200 / MM_PER_INCH)
        src = tmp_path / "template.pdf"
        make_nail_template_pdf(str(src), frame, frame.nails(60), margin_mm=40.0)  # 280 x 280 mm
        out = tmp_path / "tiles.pdf"
        cols, rows = split_template(str(src), str(out), paper="A4", landscape=True, overlap_mm=10.0)
        assert (cols, rows) == (1, 2)
        reader = PdfReader(str(out))
        assert len(reader.pages) == 2
        assert float(reader.pages[0].mediabox.width) == pytest.approx(mm_to_pt(297.0))
        assert float(reader.pages[0].mediabox.height) == pytest.approx(mm_to_pt(210.0))

    def test_portrait_a3(self, tmp_path) -> None:
        frame = Frame("rectangle", 500 / MM_PER_INCH, 300 / MM_PER_INCH)
        src = tmp_path / "template.pdf"
        make_nail_template_pdf(str(src), frame, frame.nails(40), margin_mm=20.0)  # 540 x 340 mm
        out = tmp_path / "tiles.pdf"
        cols, rows = split_template(str(src), str(out), paper="A3", landscape=False, overlap_mm=0.0)
        assert (cols, rows) == (2, 1)
        assert len(PdfReader(str(out)).pages) == 2

    def test_unknown_paper(self, tmp_path) -> None:
        with pytest.raises(ValueError, match="paper"):
            split_template("missing.pdf", str(tmp_path / "out.pdf"), paper="Letter")

    def test_rejects_multi_page(self, tmp_path) -> None:
        src = tmp_path / "two.pdf"
        writer = PdfWriter()
        writer.add_blank_page(width=200, height=200)
        writer.add_blank_page(width=200, height=200)
        with open(src, "wb") as f:
            writer.write(f)
        with pytest.raises(ValueError, match="single-page"):
            split_template(str(src), str(tmp_path / "out.pdf"))
