# stringloom/tiling.py
# Split a large single-page template onto standard sheets for printing.

import logging
import math

from pypdf import PageObject, PdfReader, PdfWriter, Transformation

logger = logging.getLogger(__name__)

PT_PER_MM = 72.0 / 25.4

# portrait (width, height) in mm
PAPER_MM = {
    "A4": (210.0, 297.0),
    "A3": (297.0, 420.0),
}


def mm_to_pt(mm: float) -> float:
    return mm * PT_PER_MM


def sheet_grid(src_w: float, src_h: float, page_w: float, page_h: float, overlap: float):
    """(columns, rows) of sheets needed to cover src_w x src_h, neighbours sharing `overlap`."""
    if overlap < 0 or overlap >= min(page_w, page_h):
        raise ValueError(f"overlap must be in [0, {min(page_w, page_h)}), got {overlap}")
    cols = max(1, math.ceil((src_w - overlap) / (page_w - overlap)))
    rows = max(1, math.ceil((src_h - overlap) / (page_h - overlap)))
    return cols, rows


def split_template(
    in_pdf: str,
    out_pdf: str,
    paper: str = "A3",
    landscape: bool = True,
    overlap_mm: float = 10.0,   # 0..15mm typical (for taping)
    scale: float = 1.0,
):
    """
    Input: 1-page PDF (the nail template).
    Output: one page per sheet, row by row from the top-left, at `scale`
    (keep 1.0 so nail spacing prints true to size).
    Returns (columns, rows).
    """
    if paper not in PAPER_MM:
        raise ValueError(f"unknown paper {paper!r}, expected one of {sorted(PAPER_MM)}")
    w_mm, h_mm = PAPER_MM[paper]
    if landscape:
        w_mm, h_mm = h_mm, w_mm
    page_w = mm_to_pt(w_mm)
    page_h = mm_to_pt(h_mm)
    overlap = mm_to_pt(overlap_mm)

    reader = PdfReader(in_pdf)
    if len(reader.pages) != 1:
        raise ValueError("Expected a single-page PDF as input.")

    src = reader.pages[0]
    left = float(src.mediabox.left)
    bottom = float(src.mediabox.bottom)
    src_w = float(src.mediabox.width) * scale
    src_h = float(src.mediabox.height) * scale

    cols, rows = sheet_grid(src_w, src_h, page_w, page_h, overlap)
    step_w = page_w - overlap
    step_h = page_h - overlap

    writer = PdfWriter()
    for r in range(rows):
        # this sheet shows y in [top - page_h, top] of the scaled source
        y0 = src_h - r * step_h - page_h
        for col in range(cols):
            x0 = col * step_w
            sheet = PageObject.create_blank_page(width=page_w, height=page_h)
            t = Transformation().translate(-left, -bottom).scale(scale, scale).translate(-x0, -y0)
            sheet.merge_transformed_page(src, t)
            writer.add_page(sheet)

    with open(out_pdf, "wb") as f:
        writer.write(f)

    logger.info("Split %s onto %d x %d %s sheets (overlap %s mm, scale %.2f%%)",
                in_pdf, cols, rows, paper, overlap_mm, scale * 100)
    return cols, rows
