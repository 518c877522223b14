"""
cli.py: run the analysis from a terminal
Usage:
    crimescene classify scene.jpg --output scene
    crimescene path floorplan.png --start 5 5 --end 350 220 --output route
"""

import argparse
import logging
import sys

from .config import load_config
from .image import load_image, save_image
from .pipeline import SceneAnalyzer
from .render import draw_superpixels


def build_parser() -> argparse.ArgumentParser:
    # Accepted before or after the subcommand; SUPPRESS keeps a top-level value
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config",  default=argparse.SUPPRESS, help="YAML config file")
    common.add_argument("--verbose", action="store_true", default=argparse.SUPPRESS,
                        help="Debug logging")

    parser = argparse.ArgumentParser(prog="crimescene")
    parser.add_argument("--config",  default=None,        help="YAML config file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    cls = sub.add_parser("classify", parents=[common], help="Label evidence regions in an image")
    cls.add_argument("image",                          help="Path to input image")
    cls.add_argument("--output",     default="output", help="Output filename prefix")
    cls.add_argument("--superpixels", action="store_true",
                     help="Also save the superpixel boundaries")

    pth = sub.add_parser("path", parents=[common], help="Shortest walkable route on a floor plan")
    pth.add_argument("image",                          help="Path to floor plan image")
    pth.add_argument("--start", type=int, nargs=2, required=True, metavar=("X", "Y"))
    pth.add_argument("--end",   type=int, nargs=2, required=True, metavar=("X", "Y"))
    pth.add_argument("--output", default="output",     help="Output filename prefix")
    return parser


def run_classify(analyzer: SceneAnalyzer, args) -> int:
    image  = load_image(args.image)
    result = analyzer.classify(image)

    t = result.timing
    print(f"[classify] {len(result.superpixels)} regions, "
          f"{result.graph.number_of_edges()} adjacencies, "
          f"{len(result.detections)} detections in {sum(t.values()):.2f}s")
    for label, n in sorted(result.counts.items()):
        print(f"  {label:<8} {n}")

    save_image(f"{args.output}_classified.png", result.overlay())
    print(f"[classify] saved → {args.output}_classified.png")
    if args.superpixels:
        save_image(f"{args.output}_superpixels.png", draw_superpixels(image, result.labels))
        print(f"[classify] saved → {args.output}_superpixels.png")
    return 0


def run_path(analyzer: SceneAnalyzer, args) -> int:
    image  = load_image(args.image)
    result = analyzer.find_path(image, tuple(args.start), tuple(args.end))
    path   = result.path

    if path.found:
        print(f"[path] {path.start_cell} → {path.end_cell}: {path.length} steps "
              f"({path.expanded} cells expanded)")
    else:
        print(f"[path] no path found ({path.status.value})")

    save_image(f"{args.output}_path.png", result.overlay())
    print(f"[path] saved → {args.output}_path.png")
    return 0 if path.found else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    analyzer = SceneAnalyzer(load_config(args.config))
    if args.command == "classify":
        return run_classify(analyzer, args)
    return run_path(analyzer, args)


if __name__ == "__main__":
    sys.exit(main())
