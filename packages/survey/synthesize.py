"""Geometry synthesis — survey records → boxes, flat polygons and thick lines.

Legacy walls become upright boxes on the ground plane.  Current-schema
records are dispatched by point count:

* ≥ 3 points → flat :class:`PolygonPrimitive` at the category elevation;
* = 2 points → horizontal :class:`LineSegmentPrimitive`;
* 0 or 1 point → skipped.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Sequence

import numpy as np

from packages.core.types import (
    BoxPrimitive,
    LineSegmentPrimitive,
    MaterialRecord,
    NormalizedBounds,
    PolygonPrimitive,
    Vec2,
    Vec3,
    WallRecord,
)
from packages.survey.categories import (
    MaterialCategory,
    material_color,
    material_elevation,
    wall_color,
)
from packages.survey.normalize import to_view

logger = logging.getLogger(__name__)

WALL_HEIGHT = 2.5
MIN_DIMENSION = 0.1
LINE_EPSILON = 0.001
DEFAULT_PITCH = 4.0

RIDGE_THICKNESS = 0.25
RIDGE_HEIGHT = 0.3
LINE_THICKNESS = 0.15
LINE_HEIGHT = 0.12

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_pitch(settings: dict[str, Any], default: float = DEFAULT_PITCH) -> float:
    """Read ``settings["pitch"]`` as a float.

    Numbers are used as-is, strings contribute their leading numeric part
    (``"6/12"`` → 6.0).  Missing, non-finite or unparseable values give
    *default*.
    """
    raw = settings.get("pitch")
    if isinstance(raw, bool) or raw is None:
        return default
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        m = _LEADING_NUMBER.match(raw)
        if m is None:
            return default
        value = float(m.group(0))
    else:
        return default
    return value if math.isfinite(value) else default


# ── legacy walls ─────────────────────────────────────────────────────

def synthesize_walls(
    walls: Sequence[WallRecord],
    bounds: NormalizedBounds,
    *,
    wall_height: float = WALL_HEIGHT,
    min_dimension: float = MIN_DIMENSION,
) -> list[BoxPrimitive]:
    """Build one box per wall, sitting on the ground plane."""
    scale = bounds.scale
    boxes: list[BoxPrimitive] = []
    for wall in walls:
        b = wall.bbox
        width = abs(b.x2 - b.x1) * scale
        depth = abs(b.y2 - b.y1) * scale
        # Zero-thickness boxes vanish or upset the renderer
        width = width or min_dimension
        depth = depth or min_dimension

        px, pz = to_view(wall.center.x, wall.center.y, bounds)
        boxes.append(
            BoxPrimitive(
                category=wall.category,
                color=wall_color(wall.category),
                width=width,
                height=wall_height,
                depth=depth,
                position=Vec3(x=px, y=wall_height / 2, z=pz),
            )
        )
    logger.info(f"🧱 Built {len(boxes)} wall boxes")
    return boxes


# ── current records ──────────────────────────────────────────────────

def synthesize_polygon(record: MaterialRecord, bounds: NormalizedBounds) -> PolygonPrimitive:
    """Flat footprint of a ≥3-point record.  Pitch is carried, not applied."""
    ring = [Vec2(x=x, y=z) for x, z in (to_view(p[0], p[1], bounds) for p in record.coordinates)]
    if ring[-1] != ring[0]:
        ring.append(ring[0].model_copy())
    key = record.material_type
    return PolygonPrimitive(
        category=key,
        color=material_color(key),
        points=ring,
        elevation=material_elevation(key),
        pitch=parse_pitch(record.settings),
    )


def line_dimensions(key: str) -> tuple[float, float]:
    """Return ``(thickness, height)`` for a line category."""
    if MaterialCategory.from_key(key) is MaterialCategory.RIDGE:
        return RIDGE_THICKNESS, RIDGE_HEIGHT
    return LINE_THICKNESS, LINE_HEIGHT


def synthesize_line(
    record: MaterialRecord,
    bounds: NormalizedBounds,
    *,
    epsilon: float = LINE_EPSILON,
) -> LineSegmentPrimitive | None:
    """Thick horizontal segment for a 2-point record, or None if degenerate."""
    key = record.material_type
    elevation = material_elevation(key)
    (x0, z0), (x1, z1) = (to_view(p[0], p[1], bounds) for p in record.coordinates[:2])

    start = np.array([x0, elevation, z0])
    end = np.array([x1, elevation, z1])
    direction = end - start
    length = float(np.linalg.norm(direction))
    if not np.isfinite(length) or length < epsilon:
        return None

    thickness, height = line_dimensions(key)
    mid = (start + end) / 2.0
    angle = float(np.arctan2(direction[2], direction[0]))

    return LineSegmentPrimitive(
        category=key,
        color=material_color(key),
        start=Vec3(x=float(start[0]), y=float(start[1]), z=float(start[2])),
        end=Vec3(x=float(end[0]), y=float(end[1]), z=float(end[2])),
        thickness=thickness,
        height=height,
        elevation=elevation,
        length=length,
        position=Vec3(x=float(mid[0]), y=float(mid[1]) + height / 2, z=float(mid[2])),
        # Box long axis is +X; negate so it turns toward +Z
        rotation_y=-angle,
    )


def synthesize_records(
    records: Sequence[MaterialRecord],
    bounds: NormalizedBounds,
    *,
    line_epsilon: float = LINE_EPSILON,
) -> list[PolygonPrimitive | LineSegmentPrimitive]:
    """Dispatch every record by point count, preserving record order."""
    out: list[PolygonPrimitive | LineSegmentPrimitive] = []
    skipped = 0
    for i, record in enumerate(records):
        n = len(record.coordinates)
        if n >= 3:
            out.append(synthesize_polygon(record, bounds))
        elif n == 2:
            line = synthesize_line(record, bounds, epsilon=line_epsilon)
            if line is None:
                logger.debug("Record %d (%s): zero-length segment skipped", i, record.material_type)
                skipped += 1
            else:
                out.append(line)
        else:
            logger.debug("Record %d (%s): %d point(s), skipped", i, record.material_type, n)
            skipped += 1

    logger.info(
        "  Synthesized %d primitives from %d records (%d skipped)",
        len(out), len(records), skipped,
    )
    return out
