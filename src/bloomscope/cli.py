"""
CLI entry point for the flower garden.

Usage:
    bloomscope <audio files...> [options]
    bloomscope <audio files...> --headless --bloom-all -o garden.png
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from bloomscope.config import GardenConfig
from bloomscope.io.exporter import LayoutExporter
from bloomscope.pipeline import GardenPipeline
from bloomscope.visualizers.garden import GardenRenderer
from bloomscope.visualizers.palette import PaletteName


def _print_status(message: str):
    print(f"[status] {message}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloomscope",
        description="Turn audio clips into a garden of blooming flowers laid out by UMAP",
    )

    parser.add_argument(
        "audio",
        type=Path,
        nargs="*",
        help="Input audio files (wav, flac, ogg, mp3)",
    )

    # Canvas
    parser.add_argument("--width", type=int, default=1280, help="Canvas width (default: 1280)")
    parser.add_argument("--height", type=int, default=800, help="Canvas height (default: 800)")
    parser.add_argument("-f", "--fps", type=int, default=60, help="Animation frame rate (default: 60)")

    # Look
    parser.add_argument(
        "--palette", type=str, default="animals",
        choices=[p.value for p in PaletteName],
        help="Colour palette (default: animals)",
    )
    parser.add_argument(
        "--colors", type=str, nargs=3, default=None, metavar=("C1", "C2", "C3"),
        help="Three hex colours for --palette custom",
    )
    parser.add_argument(
        "--size-scale", type=float, default=1.0,
        help="Energy-to-size multiplier (default: 1.0)",
    )
    parser.add_argument(
        "--jitter", type=float, default=6.0,
        help="Per-frame position jitter in pixels (default: 6)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for petal variation")

    # Headless export
    parser.add_argument(
        "--headless", action="store_true",
        help="Render a single still and exit instead of opening a window",
    )
    parser.add_argument(
        "--bloom-all", action="store_true",
        help="Render every flower fully open (headless only)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="PNG output path for --headless (default: umap-flowers.png)",
    )
    parser.add_argument(
        "--manifest", type=Path, default=None,
        help="Also write the glyph layout as JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser


def config_from_args(args: argparse.Namespace) -> GardenConfig:
    config = GardenConfig(
        width=args.width,
        height=args.height,
        fps=args.fps,
        size_scale=args.size_scale,
        jitter=args.jitter,
        palette=args.palette,
        seed=args.seed,
    )
    if args.colors:
        config.custom_colors = tuple(args.colors)
    return config


def run_headless(pipeline: GardenPipeline, args: argparse.Namespace) -> int:
    config = pipeline.config
    t0 = time.time()

    if not pipeline.load(args.audio):
        return 1
    if not pipeline.generate(config.width, config.height):
        return 1
    print(f"  Generated {len(pipeline.session.glyphs)} flowers in {time.time() - t0:.1f}s")

    if args.bloom_all:
        pipeline.bloom_all()

    renderer = GardenRenderer(config, rng=pipeline.rng)
    surface = renderer.render_frame(pipeline.session.glyphs)

    exporter = LayoutExporter()
    output = args.output or Path(config.export_name)
    written = exporter.export_png(renderer.surface_to_array(surface), output)
    print(f"  Output: {written}")

    if args.manifest:
        exporter.export_json(
            pipeline.session.glyphs, args.manifest, config.width, config.height, config.palette
        )
        print(f"  Manifest: {args.manifest}")
    return 0


def main():
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    missing = [p for p in args.audio if not p.exists()]
    if missing:
        print(f"Error: Audio file not found: {missing[0]}", file=sys.stderr)
        sys.exit(1)

    if args.palette == "custom" and not args.colors:
        parser.error("--palette custom requires --colors C1 C2 C3")

    config = config_from_args(args)

    if args.headless:
        if not args.audio:
            parser.error("--headless needs at least one audio file")
        pipeline = GardenPipeline(config, on_status=_print_status)
        sys.exit(run_headless(pipeline, args))

    from bloomscope.app import GardenApp
    from bloomscope.io.player import ClipPlayer

    player = ClipPlayer(master_gain=config.master_gain)
    pipeline = GardenPipeline(config, player=player, on_status=_print_status)
    GardenApp(pipeline).run(args.audio)


if __name__ == "__main__":
    main()
