"""Command-line front end: render a scene file to a PNG image.

Usage:
    raytracer [-f SCENE] [options]

Options:
    -f, --file, --scene SCENE   JSON scene file (default: built-in demo scene)
    -o, --out-file PATH         Output PNG (default: first free raytraced[-N].png)
    --width WIDTH               Override the camera's image width
    --height HEIGHT             Override the camera's image height
    -r, --recurse-depth DEPTH   Override the recursion depth
    --sequential                Render pixels one after another
    -n, --num-threads N         CPU threads for parallel rendering (default: 8)
    --arch {cpu,gpu}            Taichi backend (default: cpu)
    -v, --verbose / -q, --quiet Logging verbosity

Example:
    raytracer -f examples/scenes/spheres.json --width 800 --height 600 -r 4
"""

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger(__name__)

DEFAULT_NUM_THREADS = 8


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="raytracer",
        description="Render a scene with the Whitted-style ray tracer.",
    )
    parser.add_argument(
        "-f",
        "--file",
        "--scene",
        dest="scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "-o",
        "--out-file",
        type=str,
        default=None,
        help="Output PNG path (default: first free raytraced[-N].png)",
    )
    parser.add_argument("--width", type=int, default=None, help="Override image width")
    parser.add_argument("--height", type=int, default=None, help="Override image height")
    parser.add_argument(
        "-r",
        "--recurse-depth",
        type=int,
        default=None,
        help="Override the recursion depth",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Render pixels sequentially instead of in parallel",
    )
    parser.add_argument(
        "-n",
        "--num-threads",
        type=int,
        default=DEFAULT_NUM_THREADS,
        help=f"CPU threads for parallel rendering (default: {DEFAULT_NUM_THREADS})",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings")

    args = parser.parse_args(argv)
    if args.num_threads <= 0:
        parser.error("--num-threads must be positive")
    return args


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def init_taichi(arch: str, num_threads: int) -> None:
    """Initialize Taichi. Must run before any raytracer module with fields is imported."""
    if arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        ti.init(arch=ti.cpu, cpu_max_num_threads=num_threads)


def run(args: argparse.Namespace) -> Path:
    """Load (or build) the scene, apply overrides, render and save.

    Returns:
        The path of the written image.
    """
    # Lazy imports to allow Taichi initialization first
    from raytracer.preview.export import find_unique_file_name, save_png_from_array
    from raytracer.scene.config import load_scene
    from raytracer.scene.demo import create_demo_scene

    if args.scene is not None:
        tracer = load_scene(args.scene)
    else:
        logger.info("No scene file given, rendering the demo scene")
        tracer = create_demo_scene()

    if args.width is not None:
        tracer.set_width(args.width)
    if args.height is not None:
        tracer.set_height(args.height)
    if args.recurse_depth is not None:
        tracer.set_recurse_depth(args.recurse_depth)

    if args.sequential:
        image = tracer.raycast()
    else:
        image = tracer.par_raycast()

    out_file = Path(args.out_file).absolute() if args.out_file else find_unique_file_name()
    return save_png_from_array(image, out_file)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    init_taichi(args.arch, args.num_threads)

    try:
        out_file = run(args)
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved image to {out_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
