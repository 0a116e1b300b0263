"""Shared test fixtures – small survey documents in both schemas."""

from __future__ import annotations

import json
from pathlib import Path

import pytest


def _wall(category: str, x1: float, y1: float, x2: float, y2: float) -> dict:
    """A legacy wall whose centre matches its bounding box."""
    return {
        "class": category,
        "confidence": 0.9,
        "bbox": {"x1": x1, "y1": y1, "x2": x2, "y2": y2},
        "center": {"x": (x1 + x2) / 2, "y": (y1 + y2) / 2},
        "area": abs(x2 - x1) * abs(y2 - y1),
    }


def _record(material: str, coords: list[list[float]], **settings) -> dict:
    return {
        "materialType": material,
        "settings": settings,
        "coordinates_real_world": coords,
        "scale_factor_float": 1.0,
    }


@pytest.fixture()
def room_walls_data() -> dict:
    """A 200 × 100 rectangular room (source pixels) offset from the origin.

    Four perimeter walls, 4 units thick, plus one interior wall and one
    wall of an unknown class.
    """
    return {
        "walls": [
            _wall("perimeter_wall", 100, 50, 300, 54),
            _wall("perimeter_wall", 100, 146, 300, 150),
            _wall("perimeter_wall", 100, 50, 104, 150),
            _wall("perimeter_wall", 296, 50, 300, 150),
            _wall("interior_wall", 200, 54, 204, 146),
            _wall("mystery_wall", 150, 90, 160, 94),
        ]
    }


@pytest.fixture()
def roof_project_data() -> dict:
    """A simple gable-ish roof in inches: one panel and several edges."""
    return {
        "project_id": "p-42",
        "records": [
            _record("roof_area", [[0, 0], [240, 0], [240, 120], [0, 120]], pitch="6/12"),
            _record("ridge_length", [[0, 60], [240, 60]]),
            _record("eave_length", [[0, 0], [240, 0]]),
            _record("hip_length", [[0, 0], [60, 60]]),
            _record("valley_length", [[240, 120], [180, 60]]),
            _record("gable_length", [[0, 0], [0, 120]]),
            _record("ridge_length", [[50, 50], [50, 50]]),
            _record("roof_area", [[10, 10]]),
            _record("roof_area", []),
        ],
    }


@pytest.fixture()
def write_json(tmp_path: Path):
    """Write a JSON-able value to a temp file and return its path."""

    def _write(data, name: str = "survey.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
