"""Load survey JSON from text or disk.

Supported shapes
----------------
* **Legacy** – ``{"walls": [...]}`` wall bounding boxes.
* **Current** – ``{"project_id": ..., "records": [...]}`` roof components.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from packages.core.types import SurveyDocument
from packages.survey.detect import parse_document

logger = logging.getLogger(__name__)


def read_survey_text(path: str | Path) -> str:
    """Read a survey file as UTF-8 text.

    ``OSError`` and ``UnicodeDecodeError`` propagate to the caller.
    """
    p = Path(path)
    logger.info(f"📄 Reading survey file {p.name}...")
    text = p.read_text(encoding="utf-8")
    logger.info(f"✅ Read {len(text):,} characters")
    return text


class _NonStandardConstant(ValueError):
    pass


def _reject_constant(name: str) -> Any:
    raise _NonStandardConstant(f"Non-standard JSON constant {name!r}")


def parse_survey_json(text: str) -> Any:
    """Decode strict JSON text.

    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and are rejected
    like any other syntax error.  Raises ``json.JSONDecodeError``.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except _NonStandardConstant as e:
        raise json.JSONDecodeError(str(e), text, 0) from e


def load_survey(path: str | Path) -> SurveyDocument:
    """Read, decode and validate a survey file into a typed document."""
    return parse_document(parse_survey_json(read_survey_text(path)))
