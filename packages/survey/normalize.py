"""Spatial normalization — centre survey coordinates and pick a uniform scale.

The two schemas deliberately use different scaling policies:

* legacy walls are fitted into a fixed window (``target_extent / extent``);
* current records use a constant unit conversion (``1/12``), independent of
  the aggregate extent.

Both subtract the centre first and multiply by the scale second.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from packages.core.types import MaterialRecord, NormalizedBounds, Vec2, WallRecord

logger = logging.getLogger(__name__)

TARGET_EXTENT = 50.0
MIN_EXTENT = 1.0
UNIT_SCALE = 1.0 / 12.0


def _bounds_of(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return (mins, maxs) of an (N, 2) array; the origin for an empty one."""
    if len(points) == 0:
        zero = np.zeros(2)
        return zero, zero.copy()
    return points.min(axis=0), points.max(axis=0)


def _make_bounds(mins: np.ndarray, maxs: np.ndarray, scale: float, extent: float) -> NormalizedBounds:
    center = (mins + maxs) / 2.0
    return NormalizedBounds(
        min=Vec2(x=float(mins[0]), y=float(mins[1])),
        max=Vec2(x=float(maxs[0]), y=float(maxs[1])),
        center=Vec2(x=float(center[0]), y=float(center[1])),
        extent=extent,
        scale=scale,
    )


def _extent(mins: np.ndarray, maxs: np.ndarray) -> float:
    with np.errstate(over="ignore"):
        dims = maxs - mins
    extent = float(max(dims[0], dims[1]))
    if not np.isfinite(extent):
        raise ValueError("Survey coordinates span more than a float can represent")
    return extent


def wall_corners(walls: Iterable[WallRecord]) -> np.ndarray:
    """Stack both bbox corners of every wall into an (N, 2) array."""
    rows = []
    for w in walls:
        rows.append((w.bbox.x1, w.bbox.y1))
        rows.append((w.bbox.x2, w.bbox.y2))
    return np.asarray(rows, dtype=np.float64).reshape(-1, 2)


def record_points(records: Iterable[MaterialRecord]) -> np.ndarray:
    """Stack every coordinate of every record into an (N, 2) array."""
    rows = [(p[0], p[1]) for r in records for p in r.coordinates]
    return np.asarray(rows, dtype=np.float64).reshape(-1, 2)


def normalize_walls(
    walls: Sequence[WallRecord],
    *,
    target_extent: float = TARGET_EXTENT,
    min_extent: float = MIN_EXTENT,
) -> NormalizedBounds:
    """Fit all wall bounding boxes into a window of *target_extent* units.

    A zero extent (every corner identical, or no walls) is replaced by
    *min_extent* so the scale stays finite and non-zero.
    """
    mins, maxs = _bounds_of(wall_corners(walls))
    extent = _extent(mins, maxs)
    effective = extent if extent > 0 else min_extent
    scale = target_extent / effective
    if not np.isfinite(scale):
        raise ValueError(f"Survey extent {extent!r} is too small to scale")
    logger.info(
        "Normalize walls: extent=%.3f, scale=%.4f (target %.1f)",
        extent, scale, target_extent,
    )
    return _make_bounds(mins, maxs, scale, extent)


def normalize_records(
    records: Sequence[MaterialRecord],
    *,
    unit_scale: float = UNIT_SCALE,
) -> NormalizedBounds:
    """Centre all record coordinates and apply a fixed unit conversion."""
    mins, maxs = _bounds_of(record_points(records))
    extent = _extent(mins, maxs)
    logger.info("Normalize records: extent=%.3f, scale=%.4f", extent, unit_scale)
    return _make_bounds(mins, maxs, unit_scale, extent)


def to_view(x: float, y: float, bounds: NormalizedBounds) -> tuple[float, float]:
    """Map a source point into the ground plane: subtract centre, then scale."""
    return (
        (x - bounds.center.x) * bounds.scale,
        (y - bounds.center.y) * bounds.scale,
    )
