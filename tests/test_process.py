"""End-to-end tests for the survey pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from packages.core.types import SceneResult, SchemaKind
from packages.survey import process as process_mod
from packages.survey.process import process_file, process_text
from packages.survey.scene import InMemoryScene


class TestLegacy:
    def test_applies_walls(self, room_walls_data: dict):
        scene = InMemoryScene()
        result = process_text(json.dumps(room_walls_data), scene, source_name="room.json")

        assert result.ok
        assert result.schema_kind is SchemaKind.LEGACY_WALLS
        assert result.status == "applied: room.json"
        assert len(result.primitives) == 6
        assert result.counts == {"perimeter_wall": 4, "interior_wall": 1, "mystery_wall": 1}
        assert result.legend["perimeter_wall"].label == "Perimeter Wall"
        assert result.legend["perimeter_wall"].color == "#ef4444"
        assert result.legend["mystery_wall"].label == "mystery_wall"
        assert result.legend["mystery_wall"].color == "#ffffff"
        assert len(scene.objects) == 6

    def test_example_wall(self):
        data = {"walls": [{
            "class": "perimeter_wall", "bbox": {"x1": 0, "y1": 0, "x2": 10, "y2": 0},
            "center": {"x": 5, "y": 0}, "confidence": 1, "area": 0,
        }]}
        result = process_text(json.dumps(data))
        box = result.primitives[0]
        assert box.width == pytest.approx(50.0)
        assert box.depth == pytest.approx(0.1)
        assert (box.position.x, box.position.z) == pytest.approx((0.0, 0.0))

    def test_frame_centred(self, room_walls_data: dict):
        scene = InMemoryScene()
        process_text(json.dumps(room_walls_data), scene)
        assert scene.frame.center.x == pytest.approx(0.0, abs=1e-9)
        assert scene.frame.center.z == pytest.approx(0.0, abs=1e-9)
        assert scene.frame.size == pytest.approx(50.0)


class TestCurrent:
    def test_project_status(self, roof_project_data: dict):
        scene = InMemoryScene()
        result = process_text(json.dumps(roof_project_data), scene)

        assert result.ok
        assert result.schema_kind is SchemaKind.CURRENT_RECORDS
        assert result.status == "project p-42 — 9 records loaded"
        assert result.project_id == "p-42"
        assert len(result.primitives) == 6
        assert result.counts["roof_area"] == 3
        assert result.counts["ridge_length"] == 2
        assert result.legend["valley_length"].color == "#a855f7"
        assert len(scene.objects) == 6

    def test_ridge_example(self):
        data = {"project_id": "p1", "records": [{
            "materialType": "ridge_length", "settings": {},
            "coordinates_real_world": [[0, 0], [120, 0]], "scale_factor_float": 1,
        }]}
        result = process_text(json.dumps(data))
        line = result.primitives[0]
        assert line.kind == "line"
        assert line.length == pytest.approx(10.0)
        assert (line.thickness, line.height, line.elevation) == pytest.approx((0.25, 0.3, 0.3))
        assert line.rotation_y == pytest.approx(0.0)

    def test_result_json_round_trip(self, roof_project_data: dict):
        result = process_text(json.dumps(roof_project_data))
        again = SceneResult.model_validate_json(result.model_dump_json())
        assert [p.kind for p in again.primitives] == [p.kind for p in result.primitives]


class TestErrors:
    def test_unrecognized(self):
        scene = InMemoryScene()
        result = process_text('{"foo": 1}', scene)
        assert result.status == "error: unrecognized format"
        assert result.primitives == []
        assert not result.ok
        assert scene.frame is None

    def test_invalid_json_keeps_previous_scene(self, room_walls_data: dict):
        scene = InMemoryScene()
        process_text(json.dumps(room_walls_data), scene)
        before = list(scene.objects)

        result = process_text("{not json", scene)
        assert result.status == "error: invalid JSON"
        assert scene.objects == before
        assert not any(o.disposed for o in before)

    def test_unrecognized_keeps_previous_scene(self, room_walls_data: dict):
        scene = InMemoryScene()
        process_text(json.dumps(room_walls_data), scene)
        process_text("[1, 2, 3]", scene)
        assert len(scene.objects) == 6

    def test_malformed_records_fail_rendering(self, room_walls_data: dict):
        scene = InMemoryScene()
        process_text(json.dumps(room_walls_data), scene)
        result = process_text('{"walls": [{"class": "x"}]}', scene)
        assert result.status == "error: rendering failed"
        assert result.error
        assert len(scene.objects) == 6

    def test_unexpected_failure_is_contained(self, monkeypatch, room_walls_data: dict):
        def boom(*args, **kwargs):
            raise RuntimeError("renderer exploded")

        monkeypatch.setattr(process_mod, "synthesize_walls", boom)
        result = process_text(json.dumps(room_walls_data), InMemoryScene())
        assert result.status == "error: rendering failed"
        assert "renderer exploded" in result.error

    @pytest.mark.parametrize(
        "text",
        [
            '{"walls": [{"class": "x", "bbox": {"x1": 0, "y1": 0, "x2": Infinity, "y2": 0}, "center": {"x": 0, "y": 0}}]}',
            '{"project_id": "p", "records": [{"materialType": "ridge_length", "coordinates_real_world": [[NaN, 0], [1, 0]]}]}',
        ],
    )
    def test_non_standard_numbers_are_invalid_json(self, text: str, room_walls_data: dict):
        scene = InMemoryScene()
        process_text(json.dumps(room_walls_data), scene)
        before = list(scene.objects)

        result = process_text(text, scene)
        assert result.status == "error: invalid JSON"
        assert result.primitives == []
        assert scene.objects == before

    @pytest.mark.parametrize(
        "bbox",
        [
            '{"x1": 0, "y1": 0, "x2": 1e999, "y2": 0}',
            '{"x1": -1e308, "y1": 0, "x2": 1e308, "y2": 0}',
        ],
    )
    def test_extreme_numbers_fail_cleanly(self, bbox: str):
        text = '{"walls": [{"class": "x", "bbox": ' + bbox + ', "center": {"x": 0, "y": 0}}]}'
        scene = InMemoryScene()
        result = process_text(text, scene)
        assert result.status == "error: rendering failed"
        assert result.primitives == []
        assert scene.frame is None

    def test_status_sequence(self, roof_project_data: dict):
        seen: list[str] = []
        process_text(json.dumps(roof_project_data), on_status=seen.append)
        assert seen == ["loading", "project p-42 — 9 records loaded"]


class TestProcessFile:
    def test_reads_file(self, write_json, room_walls_data: dict):
        path = write_json(room_walls_data, "house.json")
        result = process_file(path, InMemoryScene())
        assert result.status == "applied: house.json"

    def test_missing_file(self, tmp_path: Path):
        seen: list[str] = []
        result = process_file(tmp_path / "nope.json", on_status=seen.append)
        assert result.status == "error: could not read file"
        assert seen == ["loading", "error: could not read file"]

    def test_undecodable_bytes(self, tmp_path: Path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        assert process_file(path).status == "error: could not read file"


class TestLenientFields:
    def test_null_unused_fields(self):
        data = {
            "project_id": "p7",
            "records": [{
                "materialType": "ridge_length", "settings": None, "scale_factor_float": None,
                "coordinates_real_world": [[0, 0], [120, 0]],
            }],
        }
        result = process_text(json.dumps(data))
        assert result.ok
        assert len(result.primitives) == 1

    def test_null_confidence(self, room_walls_data: dict):
        room_walls_data["walls"][0]["confidence"] = None
        room_walls_data["walls"][1]["area"] = None
        result = process_text(json.dumps(room_walls_data))
        assert result.ok
        assert len(result.primitives) == 6

    def test_missing_project_id(self):
        data = {"records": [{"materialType": "eave_length", "coordinates_real_world": [[0, 0], [12, 0]]}]}
        result = process_text(json.dumps(data))
        assert result.status == "project (unnamed) — 1 records loaded"
        assert result.project_id == ""


class TestFailureLogging:
    def test_bad_records_logged_without_traceback(self, caplog):
        with caplog.at_level(logging.WARNING, logger="packages.survey.process"):
            process_text('{"walls": [{"class": "x"}]}')
        records = [r for r in caplog.records if r.name == "packages.survey.process"]
        assert [r.levelno for r in records] == [logging.WARNING]
        assert records[0].exc_info is None

    def test_unexpected_failure_logged_with_traceback(self, caplog, monkeypatch, room_walls_data: dict):
        def boom(*args, **kwargs):
            raise RuntimeError("renderer exploded")

        monkeypatch.setattr(process_mod, "synthesize_walls", boom)
        with caplog.at_level(logging.WARNING, logger="packages.survey.process"):
            process_text(json.dumps(room_walls_data))
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors and errors[0].exc_info is not None
