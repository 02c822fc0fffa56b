# stringloom/cli.py
# Command line driver.
#
#   stringloom render input/maria.jpg --nails 240 --colors 3
#   stringloom template --shape rectangle --width-cm 60 --height-cm 40 --nails 200
#   stringloom split output/maria_template.pdf output/maria_template_A3.pdf
#
# `render` writes (all start with <name> + "_"):
#   <out-dir>/<name>_target.png
#   <out-dir>/<name>_preview.png
#   <out-dir>/<name>_strings.svg
#   <out-dir>/<name>_frame.svg
#   <out-dir>/<name>_order.txt

import argparse
import logging
import os
import sys

from . import config as defaults
from .config import ConfigError, FrameConfig
from .engine import Engine, StopReason
from .export import export_frame_svg, export_nail_sequence, export_strokes_svg, save_preview
from .geometry import Frame
from .imaging import load_target
from .template import make_nail_template_pdf
from .tiling import PAPER_MM, split_template

logger = logging.getLogger("stringloom")


def _add_frame_args(p):
    p.add_argument("--shape", choices=defaults.SHAPES, default=defaults.SHAPE)
    p.add_argument("--diameter-cm", type=float, default=defaults.CIRCLE_DIAMETER_CM)
    p.add_argument("--width-cm", type=float, default=defaults.RECT_WIDTH_CM)
    p.add_argument("--height-cm", type=float, default=defaults.RECT_HEIGHT_CM)
    p.add_argument("--nails", type=int, default=defaults.N_NAILS)


def _frame_config(args, **extra) -> FrameConfig:
    return FrameConfig(
        shape=args.shape,
        diameter_cm=args.diameter_cm,
        rect_width_cm=args.width_cm,
        rect_height_cm=args.height_cm,
        n_nails=args.nails,
        **extra,
    ).validate()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stringloom", description="Multi-colour string art generator.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="compute a nail sequence for an image")
    render.add_argument("image")
    render.add_argument("--out-dir", default="output")
    render.add_argument("--name", help="output file prefix (default: image file name)")
    _add_frame_args(render)
    render.add_argument("--iterations", type=int, default=defaults.MAX_ITER)
    render.add_argument("--colors", type=int, default=defaults.N_COLORS)
    render.add_argument("--black-background", action="store_true")
    render.add_argument("--downscale", type=float, default=defaults.DOWNSCALE_FACTOR)
    render.add_argument("--workers", type=int, default=1)
    render.add_argument("--seed", type=int)
    render.add_argument("--blur", type=float, default=0.0, help="gaussian blur radius in pixels")
    render.add_argument("--contrast", type=float, default=1.0)

    template = sub.add_parser("template", help="printable nail template PDF")
    template.add_argument("out")
    _add_frame_args(template)

    split = sub.add_parser("split", help="tile a template PDF onto paper sheets")
    split.add_argument("in_pdf")
    split.add_argument("out_pdf")
    split.add_argument("--paper", choices=sorted(PAPER_MM), default="A3")
    split.add_argument("--portrait", action="store_true")
    split.add_argument("--overlap-mm", type=float, default=10.0)
    return parser


def cmd_render(args, parser) -> int:
    try:
        cfg = _frame_config(
            args,
            max_iter=args.iterations,
            n_colors=args.colors,
            black_background=args.black_background,
            downscale_factor=args.downscale,
            workers=args.workers,
            seed=args.seed,
        )
    except ConfigError as e:
        parser.error(str(e))

    name = args.name or os.path.splitext(os.path.basename(args.image))[0]
    os.makedirs(args.out_dir, exist_ok=True)

    def out(suffix: str) -> str:
        """<out-dir>/<name>_<suffix>"""
        return os.path.join(args.out_dir, f"{name}_{suffix}")

    frame = Frame.from_config(cfg)
    size = cfg.raster_size(frame.bbox())
    print(f"Preparing target {size[0]}x{size[1]} ...")
    try:
        target = load_target(args.image, size, blur_radius=args.blur, contrast=args.contrast)
    except OSError as e:
        parser.error(f"cannot read {args.image}: {e}")
    save_preview(target, out("target.png"))

    engine = Engine(target, cfg, label=name)
    print(f"Choosing up to {cfg.max_iter} strings with {len(engine.lanes)} threads ...")
    reason = engine.run()

    export_nail_sequence(engine, out("order.txt"))
    export_strokes_svg(engine, out("strings.svg"))
    export_frame_svg(engine.frame, engine.nails, out("frame.svg"))
    save_preview(engine.accumulator, out("preview.png"))

    print(f"DONE: {engine.iteration} strings ({reason.value})")
    print("Created:")
    for suffix in ("target.png", "preview.png", "strings.svg", "frame.svg", "order.txt"):
        print(f"  {out(suffix)}")
    if reason is StopReason.FAILED:
        print(f"Run stopped early: {engine.error!r}", file=sys.stderr)
        return 1
    return 0


def cmd_template(args, parser) -> int:
    try:
        cfg = _frame_config(args)
    except ConfigError as e:
        parser.error(str(e))
    frame = Frame.from_config(cfg)
    w, h = make_nail_template_pdf(args.out, frame, frame.nails(cfg.n_nails))
    print(f"Created: {args.out} ({w:.0f}x{h:.0f} mm)")
    return 0


def cmd_split(args, parser) -> int:
    try:
        cols, rows = split_template(args.in_pdf, args.out_pdf, paper=args.paper,
                                    landscape=not args.portrait, overlap_mm=args.overlap_mm)
    except (OSError, ValueError) as e:
        parser.error(str(e))
    print(f"Created: {args.out_pdf} ({cols} x {rows} {args.paper} sheets)")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    commands = {"render": cmd_render, "template": cmd_template, "split": cmd_split}
    return commands[args.command](args, parser)


if __name__ == "__main__":
    sys.exit(main())
