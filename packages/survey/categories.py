"""Category enumerations and the color / elevation / label lookup tables.

Every table is keyed by a closed enum with a ``DEFAULT`` member, so an
unknown category string resolves to the default row instead of failing.
"""

from __future__ import annotations

from enum import Enum


class WallCategory(str, Enum):
    PERIMETER = "perimeter_wall"
    INTERIOR = "interior_wall"
    FOUNDATION = "foundation_wall"
    KNEE = "knee_wall"
    DEFAULT = "default"

    @classmethod
    def from_key(cls, key: str) -> "WallCategory":
        try:
            return cls(key)
        except ValueError:
            return cls.DEFAULT


class MaterialCategory(str, Enum):
    ROOF_AREA = "roof_area"
    EAVE = "eave_length"
    VALLEY = "valley_length"
    HIP = "hip_length"
    RIDGE = "ridge_length"
    GABLE = "gable_length"
    DEFAULT = "default"

    @classmethod
    def from_key(cls, key: str) -> "MaterialCategory":
        try:
            return cls(key)
        except ValueError:
            return cls.DEFAULT


# ── legacy walls ─────────────────────────────────────────────────────
WALL_COLORS: dict[WallCategory, int] = {
    WallCategory.PERIMETER: 0xEF4444,   # red
    WallCategory.INTERIOR: 0x3B82F6,    # blue
    WallCategory.FOUNDATION: 0x64748B,  # slate
    WallCategory.KNEE: 0xF59E0B,        # amber
    WallCategory.DEFAULT: 0xFFFFFF,
}

WALL_LABELS: dict[WallCategory, str] = {
    WallCategory.PERIMETER: "Perimeter Wall",
    WallCategory.INTERIOR: "Interior Wall",
    WallCategory.FOUNDATION: "Foundation Wall",
    WallCategory.KNEE: "Knee Wall",
    WallCategory.DEFAULT: "Other Wall",
}

# ── roof components ──────────────────────────────────────────────────
MATERIAL_COLORS: dict[MaterialCategory, int] = {
    MaterialCategory.ROOF_AREA: 0xF97316,  # orange
    MaterialCategory.EAVE: 0x14B8A6,       # teal
    MaterialCategory.VALLEY: 0xA855F7,     # purple
    MaterialCategory.HIP: 0xF59E0B,        # amber
    MaterialCategory.RIDGE: 0x3B82F6,      # blue
    MaterialCategory.GABLE: 0x22C55E,      # green
    MaterialCategory.DEFAULT: 0xFFFFFF,
}

# Small vertical offsets keep coplanar categories from z-fighting.
# Keep every known category on its own level.
MATERIAL_ELEVATIONS: dict[MaterialCategory, float] = {
    MaterialCategory.VALLEY: -0.05,
    MaterialCategory.ROOF_AREA: 0.0,
    MaterialCategory.EAVE: 0.05,
    MaterialCategory.GABLE: 0.1,
    MaterialCategory.HIP: 0.15,
    MaterialCategory.RIDGE: 0.3,
    MaterialCategory.DEFAULT: 0.0,
}

MATERIAL_LABELS: dict[MaterialCategory, str] = {
    MaterialCategory.ROOF_AREA: "Roof Area",
    MaterialCategory.EAVE: "Eaves",
    MaterialCategory.VALLEY: "Valleys",
    MaterialCategory.HIP: "Hips",
    MaterialCategory.RIDGE: "Ridges",
    MaterialCategory.GABLE: "Gables",
    MaterialCategory.DEFAULT: "Other",
}


def wall_color(key: str) -> int:
    return WALL_COLORS[WallCategory.from_key(key)]


def material_color(key: str) -> int:
    return MATERIAL_COLORS[MaterialCategory.from_key(key)]


def material_elevation(key: str) -> float:
    return MATERIAL_ELEVATIONS[MaterialCategory.from_key(key)]


def color_hex(color: int) -> str:
    """Format a packed 0xRRGGBB color as ``#rrggbb``."""
    return f"#{color:06x}"


def legend_for(counts: dict[str, int], *, walls: bool) -> dict[str, tuple[str, int]]:
    """Return ``{category: (label, color)}`` for every category in *counts*.

    Unknown categories keep their raw key as the label so the legend can
    still tell them apart.
    """
    legend: dict[str, tuple[str, int]] = {}
    for key in counts:
        if walls:
            cat = WallCategory.from_key(key)
            label, color = WALL_LABELS[cat], WALL_COLORS[cat]
        else:
            cat = MaterialCategory.from_key(key)
            label, color = MATERIAL_LABELS[cat], MATERIAL_COLORS[cat]
        if cat.value == "default" and key != "default":
            label = key
        legend[key] = (label, color)
    return legend
