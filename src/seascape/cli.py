"""Command-line interface for island scene generation."""

import argparse
import logging
import time
from pathlib import Path

import numpy as np
import structlog
from numpy.typing import NDArray


def _dump_debug_images(output_dir: Path, **arrays: NDArray) -> None:
    """Save 2D arrays as images for debugging.

    Args:
        output_dir: Directory to save images.
        **arrays: Named arrays to save.
    """
    logger = structlog.get_logger()
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        logger.warning("matplotlib_unavailable", skipped="debug_images")
        return

    output_dir.mkdir(parents=True, exist_ok=True)

    for name, arr in arrays.items():
        fig, ax = plt.subplots(figsize=(10, 10))
        cmap = "terrain" if name.startswith("terrain") else "ocean"
        image = ax.imshow(arr, cmap=cmap, origin="lower")
        fig.colorbar(image, ax=ax, shrink=0.8)

        ax.set_title(name)
        ax.axis("off")

        fig.savefig(output_dir / f"{name}.png", dpi=150, bbox_inches="tight")
        plt.close(fig)

    logger.info("debug_images_saved", path=str(output_dir), count=len(arrays))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a procedural island and animated ocean"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path or name of scene TOML config file",
    )
    parser.add_argument(
        "--terrain-type",
        type=str,
        default=None,
        help="Inland relief style (overrides config)",
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=None,
        help="Terrain grid cells per side (overrides config)",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Noise seed (overrides config)"
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=0,
        help="Ocean frames to simulate before saving (default: 0)",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0 / 60.0,
        help="Seconds per simulated frame (default: 1/60)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/scene.npz",
        help="Output path (default: saves/scene.npz)",
    )
    parser.add_argument(
        "--debug-images",
        type=str,
        default=None,
        help="Directory to save debug images (optional)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for scene generation."""
    args = build_parser().parse_args(argv)

    # Configure structlog
    level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    logger = structlog.get_logger()

    # Import here to avoid slow startup for --help
    from pydantic import ValidationError

    from .config import Config, find_config, load_config
    from .exceptions import SeascapeError
    from .persistence import save_scene
    from .scene import IslandScene

    if args.config:
        try:
            config_path = find_config(args.config)
        except FileNotFoundError:
            logger.error("config_not_found", path=args.config)
            raise SystemExit(1)
        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = Config()
        logger.info("using_default_config")

    # Apply CLI overrides
    overrides = {}
    if args.terrain_type is not None:
        overrides["terrain_type"] = args.terrain_type
    if args.resolution is not None:
        overrides["resolution"] = args.resolution
    try:
        if overrides:
            config.terrain = config.terrain.model_validate(
                {**config.terrain.model_dump(), **overrides}
            )
        if args.seed is not None:
            config.noise_seed = args.seed
    except ValidationError as e:
        logger.error("invalid_override", error=str(e))
        raise SystemExit(2)

    output_path = Path(args.output)
    if output_path.suffix != ".npz":
        output_path = output_path.with_suffix(".npz")

    start_time = time.time()
    try:
        with IslandScene(config) as scene:
            for _ in range(args.frames):
                scene.step(args.dt)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            save_scene(output_path, scene)

            if args.debug_images:
                side = scene.ocean.layout.side
                _dump_debug_images(
                    Path(args.debug_images),
                    terrain_height=np.asarray(scene.terrain.heights),
                    ocean_height=np.asarray(scene.ocean.mesh.heights).reshape(side, side),
                )
    except SeascapeError as e:
        logger.error("generation_failed", error=str(e))
        raise SystemExit(1)

    logger.info(
        "generation_complete",
        output=str(output_path),
        frames=args.frames,
        seconds=round(time.time() - start_time, 2),
    )


if __name__ == "__main__":
    main()
