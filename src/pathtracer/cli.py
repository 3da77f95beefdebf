"""Command-line entry point.

Renders the random sphere field to a PNG.

Usage:
    python -m src.pathtracer render [options]

Options:
    --width WIDTH           Image width in pixels (default: 1920)
    --samples SAMPLES       Number of samples per pixel (default: 500)
    --max-depth DEPTH       Maximum bounces per path (default: 50)
    --seed SEED             Seed for scene layout and sampling (default: random)
    --output OUTPUT         Output file path (default: output.png)
    --band-height ROWS      Rows rendered per kernel launch (default: 16)
    --quiet                 Suppress progress output
    --cpu                   Force the CPU backend

Example:
    python -m src.pathtracer render --width 400 --samples 20 --seed 7
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

DEFAULT_WIDTH = 1920
DEFAULT_SAMPLES = 500
DEFAULT_MAX_DEPTH = 50
DEFAULT_OUTPUT = "output.png"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Monte Carlo path tracer for sphere scenes.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="Render the random sphere scene")
    render.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    render.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES})",
    )
    render.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum bounces per path (default: {DEFAULT_MAX_DEPTH})",
    )
    render.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene layout and sampling (default: random)",
    )
    render.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT})",
    )
    render.add_argument(
        "--band-height",
        type=int,
        default=16,
        help="Rows rendered per kernel launch (default: 16)",
    )
    render.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    render.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def init_taichi(force_cpu: bool = False, quiet: bool = False) -> None:
    """Initialize Taichi, preferring the GPU backend."""
    if force_cpu:
        ti.init(arch=ti.cpu)
        if not quiet:
            print("Using CPU backend")
        return

    try:
        ti.init(arch=ti.gpu)
        if not quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not quiet:
            print("Using CPU backend")


def render_random_scene(
    width: int = DEFAULT_WIDTH,
    samples_per_pixel: int = DEFAULT_SAMPLES,
    max_depth: int = DEFAULT_MAX_DEPTH,
    seed: int | None = None,
    output_path: str = DEFAULT_OUTPUT,
    band_height: int = 16,
    quiet: bool = False,
) -> Path:
    """Render the random sphere scene and save it as a PNG.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If any render parameter is invalid.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.config import RenderConfig
    from src.pathtracer.core.renderer import Renderer
    from src.pathtracer.preview.export import ImageBuffer
    from src.pathtracer.preview.progress import TqdmProgress
    from src.pathtracer.scene.random_scene import ASPECT_RATIO, create_random_scene

    config = RenderConfig.from_aspect_ratio(
        width,
        ASPECT_RATIO,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        rng_seed=seed,
    )
    config.validate()

    if not quiet:
        print(f"Creating random scene ({config.image_width}x{config.image_height})...")

    scene, camera = create_random_scene(seed=seed, aspect_ratio=ASPECT_RATIO)
    renderer = Renderer(config, camera)
    sink = ImageBuffer(config.image_width, config.image_height)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    with TqdmProgress(total=config.pixel_count, disable=quiet) as progress:
        renderer.render(scene, sink=sink, progress=progress, band_height=band_height)

    output_file = Path(output_path)
    sink.save_png(str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    init_taichi(force_cpu=args.cpu, quiet=args.quiet)

    try:
        render_random_scene(
            width=args.width,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            band_height=args.band_height,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
