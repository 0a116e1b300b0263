"""CLI entry-point for the survey scene pipeline."""

from __future__ import annotations

import logging
import sys

import click

from packages.core.types import SynthesisConfig
from packages.survey.process import process_file
from packages.survey.scene import InMemoryScene


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log per-record detail.")
def main(verbose: bool):
    """Building-survey JSON → 3D scene primitives."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.argument("input_file", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON.")
@click.option("--target-extent", default=50.0, show_default=True, help="Legacy fit window (view units).")
@click.option("--wall-height", default=2.5, show_default=True, help="Legacy wall height (view units).")
def render(input_file: str, as_json: bool, target_extent: float, wall_height: float):
    """Convert a survey file and place it in an in-memory scene."""
    config = SynthesisConfig(target_extent=target_extent, wall_height=wall_height)
    scene = InMemoryScene(
        min_frame_size=config.min_frame_size,
        camera_distance_factor=config.camera_distance_factor,
    )
    result = process_file(input_file, scene, config=config)

    if as_json:
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(result.status)
        for key, count in result.counts.items():
            entry = result.legend.get(key)
            label = entry.label if entry else key
            click.echo(f"  {label}: {count}")
        if scene.frame is not None:
            c = scene.frame.center
            click.echo(
                f"  {len(scene.objects)} objects, frame size {scene.frame.size:.2f} "
                f"centred at ({c.x:.2f}, {c.y:.2f}, {c.z:.2f})"
            )

    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
