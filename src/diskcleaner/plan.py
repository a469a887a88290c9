"""Parsing of externally produced cleanup plans.

Two forms are accepted: the JSON plan exported by the UI
(``{"items": [{"path": ..., "category": ...}], "applyMode": "trash"}``) and a
plain text list with one path per line, where blank lines and ``#`` comments
are ignored.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from diskcleaner.exceptions import PlanError
from diskcleaner.models import CleanupPlan, PlanItem


def _looks_like_json(text: str) -> bool:
    return text.lstrip().startswith(("{", "["))


def parse_text_plan(text: str) -> CleanupPlan:
    """Parse a plain list of paths."""
    items = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        items.append(PlanItem(path=line))
    return CleanupPlan(items=items)


def parse_json_plan(text: str) -> CleanupPlan:
    """
    Parse a JSON plan.

    Raises:
        PlanError: If the text is not a JSON object with an ``items`` list
            of ``{"path": ...}`` objects.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PlanError(f"Invalid plan JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise PlanError('Invalid plan JSON; expected { "items": [ { "path", "category" } ] }')

    try:
        return CleanupPlan.model_validate(data)
    except ValidationError as e:
        raise PlanError(f"Invalid plan: {e}") from e


def parse_plan(text: str) -> CleanupPlan:
    """
    Parse a plan in either accepted form.

    Raises:
        PlanError: If JSON-looking input is malformed.
    """
    if _looks_like_json(text):
        return parse_json_plan(text)
    return parse_text_plan(text)


def load_plan(path: Path) -> CleanupPlan:
    """
    Read and parse a plan file.

    Raises:
        PlanError: If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PlanError(f"Cannot read plan {path}: {e}") from e
    return parse_plan(text)
