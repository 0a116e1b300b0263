"""End-to-end pipeline: survey JSON → primitives handed to a scene adapter."""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import ValidationError

from packages.core.types import (
    LegacyDocument,
    LegendEntry,
    ProjectDocument,
    SceneResult,
    SchemaKind,
    SurveyDocument,
    SynthesisConfig,
    UnrecognizedDocument,
)
from packages.survey.categories import color_hex, legend_for
from packages.survey.detect import parse_document
from packages.survey.loader import parse_survey_json, read_survey_text
from packages.survey.normalize import normalize_records, normalize_walls
from packages.survey.scene import SceneAdapter
from packages.survey.synthesize import synthesize_records, synthesize_walls

logger = logging.getLogger(__name__)

STATUS_LOADING = "loading"
STATUS_INVALID_JSON = "error: invalid JSON"
STATUS_UNRECOGNIZED = "error: unrecognized format"
STATUS_RENDER_FAILED = "error: rendering failed"
STATUS_READ_FAILED = "error: could not read file"

UNNAMED_PROJECT = "(unnamed)"

StatusCallback = Callable[[str], None]


def applied_status(name: str) -> str:
    return f"applied: {name}"


def project_status(project_id: str, record_count: int) -> str:
    return f"project {project_id.strip() or UNNAMED_PROJECT} — {record_count} records loaded"


def _legend(counts: dict[str, int], *, walls: bool) -> dict[str, LegendEntry]:
    return {
        key: LegendEntry(label=label, color=color_hex(color))
        for key, (label, color) in legend_for(counts, walls=walls).items()
    }


def build_scene(
    document: SurveyDocument,
    *,
    source_name: str = "<input>",
    config: SynthesisConfig | None = None,
) -> SceneResult:
    """Normalize and synthesize a typed document into a :class:`SceneResult`.

    Runs synchronously to completion; no scene is touched.
    """
    config = config or SynthesisConfig()

    if isinstance(document, LegacyDocument):
        walls = document.walls
        bounds = normalize_walls(
            walls, target_extent=config.target_extent, min_extent=config.min_extent,
        )
        primitives = synthesize_walls(
            walls, bounds, wall_height=config.wall_height, min_dimension=config.min_dimension,
        )
        counts = dict(Counter(w.category for w in walls))
        return SceneResult(
            schema_kind=SchemaKind.LEGACY_WALLS,
            status=applied_status(source_name),
            primitives=primitives,
            counts=counts,
            legend=_legend(counts, walls=True),
            bounds=bounds,
        )

    if isinstance(document, ProjectDocument):
        project = document.project
        bounds = normalize_records(project.records, unit_scale=config.unit_scale)
        primitives = synthesize_records(
            project.records, bounds, line_epsilon=config.line_epsilon,
        )
        counts = dict(Counter(r.material_type for r in project.records))
        return SceneResult(
            schema_kind=SchemaKind.CURRENT_RECORDS,
            status=project_status(project.project_id, len(project.records)),
            primitives=primitives,
            counts=counts,
            legend=_legend(counts, walls=False),
            bounds=bounds,
            project_id=project.project_id,
        )

    if isinstance(document, UnrecognizedDocument):
        return SceneResult(schema_kind=SchemaKind.UNRECOGNIZED, status=STATUS_UNRECOGNIZED)

    raise TypeError(f"Unsupported document {type(document).__name__}")


def process_data(
    data: Any,
    scene: Optional[SceneAdapter] = None,
    *,
    source_name: str = "<input>",
    config: SynthesisConfig | None = None,
) -> SceneResult:
    """Run detection → normalization → synthesis on already-decoded JSON.

    The scene is replaced only when synthesis succeeds; every failure leaves
    the previously applied primitives in place.
    """
    try:
        document = parse_document(data)
        result = build_scene(document, source_name=source_name, config=config)
        if result.schema_kind is SchemaKind.UNRECOGNIZED:
            logger.warning("⚠️  %s: unrecognized survey format", source_name)
            return result
        if scene is not None:
            scene.replace(result.primitives)
    except ValidationError as e:
        # Bad input data, not a bug: no traceback
        logger.warning(
            "❌ %s: %d invalid field(s) in survey records", source_name, e.error_count(),
        )
        return SceneResult(status=STATUS_RENDER_FAILED, error=str(e))
    except Exception as e:
        logger.exception("❌ Rendering failed for %s", source_name)
        return SceneResult(status=STATUS_RENDER_FAILED, error=str(e))

    logger.info(f"🎉 {result.status} ({len(result.primitives)} primitives)")
    return result


def process_text(
    text: str,
    scene: Optional[SceneAdapter] = None,
    *,
    source_name: str = "<input>",
    config: SynthesisConfig | None = None,
    on_status: StatusCallback | None = None,
) -> SceneResult:
    """Decode JSON text and run the pipeline.  Never raises."""
    if on_status:
        on_status(STATUS_LOADING)
    return _process_decoded(
        text, scene, source_name=source_name, config=config, on_status=on_status,
    )


def _process_decoded(
    text: str,
    scene: Optional[SceneAdapter],
    *,
    source_name: str,
    config: SynthesisConfig | None,
    on_status: StatusCallback | None,
) -> SceneResult:
    try:
        data = parse_survey_json(text)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s", source_name, e)
        result = SceneResult(status=STATUS_INVALID_JSON, error=str(e))
    else:
        result = process_data(data, scene, source_name=source_name, config=config)

    if on_status:
        on_status(result.status)
    return result


def process_file(
    path: str | Path,
    scene: Optional[SceneAdapter] = None,
    *,
    config: SynthesisConfig | None = None,
    on_status: StatusCallback | None = None,
) -> SceneResult:
    """Read a survey file and run the pipeline.  Never raises."""
    path = Path(path)
    if on_status:
        on_status(STATUS_LOADING)

    try:
        text = read_survey_text(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("File reading error for %s: %s", path, e)
        result = SceneResult(status=STATUS_READ_FAILED, error=str(e))
        if on_status:
            on_status(result.status)
        return result

    return _process_decoded(
        text, scene, source_name=path.name, config=config, on_status=on_status,
    )
