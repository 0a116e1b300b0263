"""Schema detection: classify a parsed JSON value as one of the survey shapes."""

from __future__ import annotations

import logging
from typing import Any

from packages.core.types import (
    LegacyDocument,
    Project,
    ProjectDocument,
    SchemaKind,
    SurveyDocument,
    UnrecognizedDocument,
    WallRecord,
)

logger = logging.getLogger(__name__)


def detect_schema(data: Any) -> SchemaKind:
    """Return which survey shape *data* has.

    ``records`` is checked before ``walls``; anything that is not a JSON
    object carrying one of those two arrays is unrecognized.
    """
    if not isinstance(data, dict):
        return SchemaKind.UNRECOGNIZED
    if isinstance(data.get("records"), list):
        return SchemaKind.CURRENT_RECORDS
    if isinstance(data.get("walls"), list):
        return SchemaKind.LEGACY_WALLS
    return SchemaKind.UNRECOGNIZED


def parse_document(data: Any) -> SurveyDocument:
    """Detect the shape of *data* and validate it into a typed document.

    Raises :class:`pydantic.ValidationError` when the shape is recognized
    but its records are malformed.
    """
    kind = detect_schema(data)
    logger.debug("Detected schema %s", kind.value)

    if kind is SchemaKind.CURRENT_RECORDS:
        return ProjectDocument(project=Project.model_validate(data))
    if kind is SchemaKind.LEGACY_WALLS:
        walls = [WallRecord.model_validate(w) for w in data["walls"]]
        return LegacyDocument(walls=walls)
    if kind is SchemaKind.UNRECOGNIZED:
        return UnrecognizedDocument()
    raise AssertionError(f"unhandled schema kind {kind!r}")
