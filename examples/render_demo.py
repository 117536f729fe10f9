#!/usr/bin/env python3
"""Render the built-in demo scene.

Builds the demo scene (floor, back wall, three spheres, a triangle and two
lights), renders it and saves a PNG. Optionally writes the scene out as a
JSON scene file that the ``raytracer`` command can load.

Usage:
    python examples/render_demo.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 480)
    --depth DEPTH       Recursion depth (default: 5)
    --output OUTPUT     Output file path (default: demo.png)
    --save-scene PATH   Also write the scene as JSON
    --sequential        Render sequentially

Example:
    python examples/render_demo.py --width 320 --height 240 --depth 3
"""

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the built-in demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Image height (default: 480)")
    parser.add_argument("--depth", type=int, default=5, help="Recursion depth (default: 5)")
    parser.add_argument(
        "--output",
        type=str,
        default="demo.png",
        help="Output file path (default: demo.png)",
    )
    parser.add_argument("--save-scene", type=str, default=None, help="Write the scene as JSON")
    parser.add_argument("--sequential", action="store_true", help="Render sequentially")
    return parser.parse_args()


def render_demo(
    width: int = 640,
    height: int = 480,
    depth: int = 5,
    output_path: str = "demo.png",
    scene_path: str | None = None,
    parallel: bool = True,
) -> Path:
    """Render the demo scene and save it to a PNG file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raytracer.preview.export import save_png_from_array
    from raytracer.scene.config import save_scene
    from raytracer.scene.demo import create_demo_scene

    tracer = create_demo_scene(width, height, recurse_depth=depth)
    if scene_path is not None:
        save_scene(tracer, scene_path)
        print(f"Scene written to {scene_path}")

    print(f"Rendering {width}x{height} at depth {depth}...")
    start_time = time.time()
    image = tracer.render(parallel=parallel)
    print(f"Rendered in {time.time() - start_time:.2f}s")

    return save_png_from_array(image, output_path)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    ti.init(arch=ti.cpu)

    output = render_demo(
        width=args.width,
        height=args.height,
        depth=args.depth,
        output_path=args.output,
        scene_path=args.save_scene,
        parallel=not args.sequential,
    )
    print(f"Saved image to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
