# stringloom/template.py
# Printable 1:1 nail template: frame outline, nail dots, index digits.

import math

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

MM_PER_INCH = 25.4


def outward_normal(frame, x: float, y: float):
    """Unit vector pointing away from the frame at boundary point (x, y)."""
    if frame.shape == "circle":
        L = math.hypot(x, y)
        return x / L, y / L
    eps = 1e-9 * max(frame.width, frame.height)
    nx = math.copysign(1.0, x) if abs(abs(x) - frame.width / 2) < eps else 0.0
    ny = math.copysign(1.0, y) if abs(abs(y) - frame.height / 2) < eps else 0.0
    L = math.hypot(nx, ny) or 1.0
    return nx / L, ny / L


def make_nail_template_pdf(
    out_path: str,
    frame,
    nails,
    margin_mm: float = 40.0,
    nail_radius_mm: float = 1.6,

    # digits stacked along the outward normal, units nearest the nail
    units_offset_mm: float = 10.0,
    digit_step_mm: float = 8.0,
    font_mm: float = 6.0,

    # "always" | "auto" | "never"
    show_hundreds_mode: str = "auto",

    # readability halo
    halo_r_mm: float = 3.6,
):
    """
    nails: frame coordinates in inches (Frame.nails()). Returns (width_mm, height_mm) of the page.
    """
    bb = frame.bbox()
    page_w_mm = bb.width * MM_PER_INCH + 2 * margin_mm
    page_h_mm = bb.height * MM_PER_INCH + 2 * margin_mm
    c = canvas.Canvas(out_path, pagesize=(page_w_mm * mm, page_h_mm * mm))

    # frame inches (y down) -> page mm (y up)
    def to_page(x_in, y_in):
        x_mm = (x_in - bb.x) * MM_PER_INCH + margin_mm
        y_mm = page_h_mm - ((y_in - bb.y) * MM_PER_INCH + margin_mm)
        return x_mm, y_mm

    c.setFillColor(colors.white)
    c.rect(0, 0, page_w_mm * mm, page_h_mm * mm, stroke=0, fill=1)

    # Calibration line: 100 mm
    c.setStrokeColor(colors.black)
    c.setLineWidth(0.6 * mm)
    c.line(10 * mm, 10 * mm, 110 * mm, 10 * mm)
    c.setFont("Helvetica", 7)
    c.setFillColor(colors.black)
    c.drawString(12 * mm, 14 * mm, "100 mm")

    # Frame outline
    c.setLineWidth(0.2 * mm)
    cx, cy = to_page(0.0, 0.0)
    if frame.shape == "circle":
        c.circle(cx * mm, cy * mm, frame.radius * MM_PER_INCH * mm, stroke=1, fill=0)
    else:
        x0, y0 = to_page(bb.x, bb.y + bb.height)
        c.rect(x0 * mm, y0 * mm, bb.width * MM_PER_INCH * mm, bb.height * MM_PER_INCH * mm, stroke=1, fill=0)

    def draw_digit(ch: str, x_mm: float, y_mm: float):
        font_pt = font_mm * mm
        c.setFont("Helvetica", font_pt)

        # white halo behind digit
        c.setFillColor(colors.white)
        c.circle(x_mm * mm, y_mm * mm, halo_r_mm * mm, stroke=0, fill=1)
        c.setFillColor(colors.black)

        tw = c.stringWidth(ch, "Helvetica", font_pt)
        c.drawString(x_mm * mm - tw / 2.0, y_mm * mm - (font_pt / 3.0), ch)

    n_nails = len(nails)
    c.setStrokeColor(colors.black)
    c.setFillColor(colors.black)
    for idx, (x_in, y_in) in enumerate(nails):
        x, y = to_page(x_in, y_in)
        c.setFillColor(colors.black)
        c.circle(x * mm, y * mm, nail_radius_mm * mm, stroke=1, fill=1)

        nx, ny = outward_normal(frame, x_in, y_in)
        ny = -ny  # page y is up

        digits = [idx % 10, (idx // 10) % 10]
        show_h = show_hundreds_mode == "always" or (show_hundreds_mode == "auto" and idx >= 100)
        if show_h:
            digits.append((idx // 100) % 10)

        for k, d in enumerate(digits):
            off = units_offset_mm + k * digit_step_mm
            draw_digit(str(d), x + nx * off, y + ny * off)

    c.setFont("Helvetica", 7)
    c.setFillColor(colors.black)
    c.drawString(
        10 * mm, (page_h_mm - 12) * mm,
        f"N={n_nails}, shape={frame.shape}, {bb.width * MM_PER_INCH:.1f}x{bb.height * MM_PER_INCH:.1f} mm, nail 0 at "
        + ("3 o'clock" if frame.shape == "circle" else "top-left corner")
    )

    c.showPage()
    c.save()
    return page_w_mm, page_h_mm
