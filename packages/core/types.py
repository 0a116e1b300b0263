"""Pydantic models for survey input, normalized bounds and scene primitives.

Two survey shapes are accepted: the legacy ``walls[]`` bounding-box export
and the current ``records[]`` roof-component export.  Both are converted
into a flat list of geometry primitives expressed in visualization space
(X = source x, Y = up, Z = source y; centred on the origin and scaled).
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── tiny helpers ──────────────────────────────────────────────────────
def _unused_number(v: Any, default: float) -> Any:
    """Fields geometry never reads fall back to *default* when null or non-finite."""
    if v is None:
        return default
    if isinstance(v, float) and not math.isfinite(v):
        return default
    return v


class Vec2(BaseModel):
    """A 2-component vector (x, y) in source or ground-plane units."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class Vec3(BaseModel):
    """A 3-component vector (x, y, z) in visualization units, Y up."""

    x: float
    y: float
    z: float


# ── legacy schema ────────────────────────────────────────────────────
class WallBBox(BaseModel):
    """Axis-aligned wall footprint.  Corners may come in any order."""

    model_config = ConfigDict(allow_inf_nan=False)

    x1: float
    y1: float
    x2: float
    y2: float


class WallRecord(BaseModel):
    """One detected wall from the legacy ``walls[]`` export."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    category: str = Field(alias="class")
    confidence: float = 0.0
    bbox: WallBBox
    center: Vec2
    area: float = 0.0

    @field_validator("confidence", "area", mode="before")
    @classmethod
    def _unused_or_zero(cls, v: Any) -> Any:
        return _unused_number(v, 0.0)


# ── current schema ───────────────────────────────────────────────────
class MaterialRecord(BaseModel):
    """One roof component from the current ``records[]`` export."""

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    material_type: str = Field(alias="materialType")
    settings: dict[str, Any] = Field(default_factory=dict)
    coordinates: list[list[float]] = Field(
        default_factory=list, alias="coordinates_real_world"
    )
    scale_factor: float = Field(default=1.0, alias="scale_factor_float")

    @field_validator("settings", mode="before")
    @classmethod
    def _settings_or_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("coordinates", mode="before")
    @classmethod
    def _coordinates_or_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("scale_factor", mode="before")
    @classmethod
    def _scale_factor_default(cls, v: Any) -> Any:
        return _unused_number(v, 1.0)

    @field_validator("coordinates")
    @classmethod
    def _keep_xy(cls, v: list[list[float]]) -> list[list[float]]:
        # Extra components (e.g. a z value) are ignored
        out = []
        for point in v:
            if len(point) < 2:
                raise ValueError(f"coordinate {point!r} needs at least two values")
            out.append([point[0], point[1]])
        return out


class Project(BaseModel):
    """Container for the current schema."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = ""
    records: list[MaterialRecord] = Field(default_factory=list)

    @field_validator("project_id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


# ── detected documents (tagged union) ────────────────────────────────
class SchemaKind(str, Enum):
    LEGACY_WALLS = "legacy_walls"
    CURRENT_RECORDS = "current_records"
    UNRECOGNIZED = "unrecognized"


class LegacyDocument(BaseModel):
    kind: Literal[SchemaKind.LEGACY_WALLS] = SchemaKind.LEGACY_WALLS
    walls: list[WallRecord] = Field(default_factory=list)


class ProjectDocument(BaseModel):
    kind: Literal[SchemaKind.CURRENT_RECORDS] = SchemaKind.CURRENT_RECORDS
    project: Project


class UnrecognizedDocument(BaseModel):
    kind: Literal[SchemaKind.UNRECOGNIZED] = SchemaKind.UNRECOGNIZED


SurveyDocument = Union[LegacyDocument, ProjectDocument, UnrecognizedDocument]


# ── normalization ────────────────────────────────────────────────────
class NormalizedBounds(BaseModel):
    """Centre and uniform scale mapping source units into view space."""

    min: Vec2
    max: Vec2
    center: Vec2
    extent: float = Field(description="max(width, depth) of the source region")
    scale: float = Field(description="Multiplier applied after subtracting the centre")


# ── geometry primitives ──────────────────────────────────────────────
class BoxPrimitive(BaseModel):
    """An upright wall box resting on the ground plane."""

    kind: Literal["box"] = "box"
    category: str
    color: int
    width: float
    height: float
    depth: float
    position: Vec3


class PolygonPrimitive(BaseModel):
    """A flat roof footprint laid into the ground plane at *elevation*.

    ``points`` are ground-plane ``(x, z)`` pairs; the ring is closed, so the
    last point repeats the first exactly once.
    """

    kind: Literal["polygon"] = "polygon"
    category: str
    color: int
    points: list[Vec2]
    elevation: float
    pitch: float = Field(description="Parsed from settings; not applied to the footprint")

    def vertices(self) -> list[Vec3]:
        """Return the ring as 3D points at the polygon's elevation."""
        return [Vec3(x=p.x, y=self.elevation, z=p.y) for p in self.points]


class LineSegmentPrimitive(BaseModel):
    """A thick horizontal segment (a rotated box) between two points."""

    kind: Literal["line"] = "line"
    category: str
    color: int
    start: Vec3
    end: Vec3
    thickness: float
    height: float
    elevation: float
    length: float
    position: Vec3
    rotation_y: float = Field(description="Rotation about the up axis, radians")


GeometryPrimitive = Annotated[
    Union[BoxPrimitive, PolygonPrimitive, LineSegmentPrimitive],
    Field(discriminator="kind"),
]


# ── pipeline result ──────────────────────────────────────────────────
class LegendEntry(BaseModel):
    label: str
    color: str


class SceneResult(BaseModel):
    """Everything the rendering / UI layer needs from one parse event."""

    schema_kind: Optional[SchemaKind] = None
    status: str
    primitives: list[GeometryPrimitive] = Field(default_factory=list)
    counts: dict[str, int] = Field(default_factory=dict)
    legend: dict[str, LegendEntry] = Field(default_factory=dict)
    bounds: Optional[NormalizedBounds] = None
    project_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.status.startswith("error:")


class FrameBounds(BaseModel):
    """Axis-aligned box around everything in the scene plus a camera fit."""

    min: Vec3
    max: Vec3
    center: Vec3
    size: float = Field(description="Largest dimension, floored to a minimum")
    camera_distance: float
    camera_position: Vec3
    target: Vec3


# ── tunables ─────────────────────────────────────────────────────────
class SynthesisConfig(BaseModel):
    """Constants shared by the normalizer, synthesizer and scene fit."""

    model_config = ConfigDict(frozen=True)

    target_extent: float = Field(default=50.0, gt=0)
    min_extent: float = Field(default=1.0, gt=0)
    wall_height: float = Field(default=2.5, gt=0)
    min_dimension: float = Field(default=0.1, gt=0)
    unit_scale: float = Field(default=1.0 / 12.0, gt=0)
    line_epsilon: float = Field(default=0.001, ge=0)
    min_frame_size: float = Field(default=10.0, gt=0)
    camera_distance_factor: float = Field(default=1.8, gt=0)
