"""Scene projection — the contract between the pipeline and a renderer.

The pipeline never owns a live scene.  It hands a full primitive list to a
:class:`SceneAdapter`, which retires everything it inserted previously and
reports camera-fit bounds for the new contents.  :class:`InMemoryScene` is
the reference adapter used by the CLI and the tests.
"""

from __future__ import annotations

import logging
import math
from typing import Protocol, Sequence

import numpy as np

from packages.core.types import (
    BoxPrimitive,
    FrameBounds,
    LineSegmentPrimitive,
    PolygonPrimitive,
    Vec3,
)

logger = logging.getLogger(__name__)

MIN_FRAME_SIZE = 10.0
CAMERA_DISTANCE_FACTOR = 1.8

Primitive = BoxPrimitive | PolygonPrimitive | LineSegmentPrimitive


# ── bounds ───────────────────────────────────────────────────────────

def primitive_corners(prim: Primitive) -> np.ndarray:
    """Return an (N, 3) array of points enclosing *prim*."""
    if isinstance(prim, BoxPrimitive):
        c = np.array([prim.position.x, prim.position.y, prim.position.z])
        half = np.array([prim.width, prim.height, prim.depth]) / 2.0
        return np.vstack([c - half, c + half])
    if isinstance(prim, PolygonPrimitive):
        return np.array([[v.x, v.y, v.z] for v in prim.vertices()], dtype=np.float64)
    if isinstance(prim, LineSegmentPrimitive):
        ends = np.array([
            [prim.start.x, prim.start.y, prim.start.z],
            [prim.end.x, prim.end.y, prim.end.z],
        ])
        pad = np.array([prim.thickness / 2, 0.0, prim.thickness / 2])
        top = np.array([0.0, prim.height, 0.0])
        return np.vstack([ends - pad, ends + pad + top])
    raise TypeError(f"Unsupported primitive {type(prim).__name__}")


def compute_frame_bounds(
    primitives: Sequence[Primitive],
    *,
    min_size: float = MIN_FRAME_SIZE,
    distance_factor: float = CAMERA_DISTANCE_FACTOR,
) -> FrameBounds:
    """Axis-aligned bounds over *primitives* plus a camera placement.

    The largest dimension is floored to *min_size* so a tiny or empty model
    still frames sensibly.  The camera sits on an elevated diagonal at
    ``distance_factor × size`` from the centre.
    """
    if primitives:
        pts = np.vstack([primitive_corners(p) for p in primitives])
        mins, maxs = pts.min(axis=0), pts.max(axis=0)
    else:
        mins = np.zeros(3)
        maxs = np.zeros(3)

    center = (mins + maxs) / 2.0
    size = max(float((maxs - mins).max()), min_size)
    distance = distance_factor * size
    offset = distance / math.sqrt(3.0)
    camera = center + offset

    def _v(a: np.ndarray) -> Vec3:
        return Vec3(x=float(a[0]), y=float(a[1]), z=float(a[2]))

    return FrameBounds(
        min=_v(mins),
        max=_v(maxs),
        center=_v(center),
        size=size,
        camera_distance=distance,
        camera_position=_v(camera),
        target=_v(center),
    )


# ── adapter contract ─────────────────────────────────────────────────

class SceneAdapter(Protocol):
    """What a renderer must offer the pipeline."""

    def replace(self, primitives: Sequence[Primitive]) -> FrameBounds:
        """Retire every previously inserted object, then insert *primitives*."""
        ...

    def clear(self) -> None:
        """Retire every inserted object."""
        ...


class RenderResource:
    """A disposable renderer-side handle (geometry buffer or material)."""

    def __init__(self, kind: str, **params):
        self.kind = kind
        self.params = params
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            raise RuntimeError(f"{self.kind} resource disposed twice")
        self.disposed = True


class SceneObject:
    """A primitive placed in the scene with the resources it owns."""

    def __init__(self, primitive: Primitive):
        self.primitive = primitive
        self.geometry = RenderResource(f"{primitive.kind}-geometry")
        self.material = RenderResource("material", color=primitive.color)

    @property
    def disposed(self) -> bool:
        return self.geometry.disposed and self.material.disposed

    def dispose(self) -> None:
        self.geometry.dispose()
        self.material.dispose()


class InMemoryScene:
    """Reference :class:`SceneAdapter` that keeps objects in a list."""

    def __init__(
        self,
        *,
        min_frame_size: float = MIN_FRAME_SIZE,
        camera_distance_factor: float = CAMERA_DISTANCE_FACTOR,
    ):
        self.min_frame_size = min_frame_size
        self.camera_distance_factor = camera_distance_factor
        self.objects: list[SceneObject] = []
        self.retired_count = 0
        self.frame: FrameBounds | None = None

    def clear(self) -> None:
        while self.objects:
            obj = self.objects.pop(0)
            obj.dispose()
            self.retired_count += 1
        self.frame = None

    def replace(self, primitives: Sequence[Primitive]) -> FrameBounds:
        previous = len(self.objects)
        self.clear()
        if previous:
            logger.info(f"🧹 Retired {previous} scene objects")

        self.objects = [SceneObject(p) for p in primitives]
        self.frame = compute_frame_bounds(
            primitives,
            min_size=self.min_frame_size,
            distance_factor=self.camera_distance_factor,
        )
        logger.info(
            "Scene now holds %d objects (frame size %.2f)", len(self.objects), self.frame.size,
        )
        return self.frame

    @property
    def primitives(self) -> list[Primitive]:
        return [o.primitive for o in self.objects]
