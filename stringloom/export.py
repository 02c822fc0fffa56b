# stringloom/export.py
# Writing a finished run to disk: nail sequence, vector strokes, frame, preview.

import svgwrite

from .config import NAIL_DIAM_IN, THREAD_DIAM_IN
from .imaging import to_image

HEADER = "Generated using stringloom"


# =========================
# NAIL SEQUENCE
# =========================
def format_nail_sequence(engine) -> str:
    """
    Plain-text winding instructions.

    One block per run of consecutive rounds won by the same thread; the first
    block of every thread starts with the nail it is tied to.
    """
    out = f"{HEADER}\n{engine.iteration} connections in total\n\n"
    started = set()
    last = None
    for index, nail in engine.log:
        lane = engine.lanes[index]
        if index != last:
            r, g, b = lane.color.rgb()
            out += f"\nThread: [{r}, {g}, {b}]\n"
            last = index
        if index not in started:
            out += f"{lane.start_nail}\n"
            started.add(index)
        out += f"{nail}\n"
    return out


def export_nail_sequence(engine, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_nail_sequence(engine))


# =========================
# SVG
# =========================
def _drawing(frame, filename):
    box = frame.canvas_box()
    return svgwrite.Drawing(
        filename,
        size=(f"{box.width}in", f"{box.height}in"),
        viewBox=f"{box.x} {box.y} {box.width} {box.height}",
    )


def _frame_shape(dwg, frame, fill):
    if frame.shape == "circle":
        return dwg.circle((0, 0), frame.radius, fill=fill)
    bb = frame.bbox()
    return dwg.rect((bb.x, bb.y), (bb.width, bb.height), fill=fill)


def export_strokes_svg(engine, filename, stroke_width=THREAD_DIAM_IN, opacity=1.0):
    """Every committed chord, in commit order, over the frame."""
    dwg = _drawing(engine.frame, filename)
    fill = "black" if engine.config.black_background else "grey"
    dwg.add(_frame_shape(dwg, engine.frame, fill))
    strings = dwg.g(fill="none", stroke_width=stroke_width, stroke_opacity=opacity)
    for color, a, b in engine.strokes():
        strings.add(dwg.line(a, b, stroke=svgwrite.rgb(*color.rgb())))
    dwg.add(strings)
    dwg.save()


def export_frame_svg(frame, nails, filename, nail_diam=NAIL_DIAM_IN):
    """Frame outline with numbered nails."""
    dwg = _drawing(frame, filename)
    dwg.add(_frame_shape(dwg, frame, "none").stroke("black", width=nail_diam / 10))
    for i, (x, y) in enumerate(nails):
        dwg.add(dwg.circle((x, y), nail_diam / 2, fill="aqua"))
        dwg.add(dwg.text(
            str(i),
            insert=(x, y + (nail_diam / 2) * 0.7),
            font_size=nail_diam,
            text_anchor="middle",
            fill="black",
            stroke="white",
            stroke_width=nail_diam / 100,
        ))
    dwg.save()


# =========================
# RASTER
# =========================
def save_preview(buffer, path, **save_kwargs):
    img = to_image(buffer)
    if str(path).lower().endswith((".jpg", ".jpeg")):
        img = img.convert("RGB")
    img.save(path, **save_kwargs)
