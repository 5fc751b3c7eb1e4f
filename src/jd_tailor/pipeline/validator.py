"""Sanity checks applied to extracted values before they touch the resume."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from jd_tailor.models.tailoring import SectionType
from jd_tailor.utils.json_parser import looks_like_json

logger = logging.getLogger(__name__)

# (min_length, max_length) in characters, after trimming.
FIELD_BOUNDS: dict[str, tuple[int, int]] = {
    "summary": (10, 2500),
    "description": (10, 1500),
    "keyAchievements": (5, 2000),
    "name": (2, 150),
    "company": (2, 150),
    "position": (2, 150),
    "skill": (1, 100),
    "language": (2, 60),
    "certification": (3, 150),
}

# Fields the model is allowed to rewrite per entry type.
SECTION_FIELDS: dict[SectionType, tuple[str, ...]] = {
    SectionType.WORK_EXPERIENCE: ("description", "keyAchievements"),
    SectionType.PROJECTS: ("name", "description", "keyAchievements"),
}


def is_valid(value: Any, min_length: int, max_length: int) -> bool:
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    if len(stripped) < min_length or len(stripped) > max_length:
        return False
    # Raw JSON leaking into a prose field means extraction went wrong.
    return not looks_like_json(stripped)


def is_valid_field(field: str, value: Any) -> bool:
    min_length, max_length = FIELD_BOUNDS[field]
    return is_valid(value, min_length, max_length)


def coerce_text(value: Any) -> Any:
    """Turn a list of bullet strings into the newline-joined form the resume uses."""
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return "\n".join(re.sub(r"^\s*[-•*]\s*", "", v).strip() for v in value)
    return value


def sanitize_json_string(value: Any) -> Any:
    """Unwrap a string that is itself JSON into plain text."""
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if not looks_like_json(stripped) and not (stripped.startswith('"') and stripped.endswith('"')):
        return value
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        return value
    if isinstance(parsed, str):
        return parsed
    if isinstance(parsed, list):
        return ", ".join(str(p) for p in parsed)
    if isinstance(parsed, dict):
        return ", ".join(v for v in parsed.values() if isinstance(v, str))
    return value


def validate_fields(section_type: SectionType, fields: dict) -> dict[str, str]:
    """Keep only the entry fields that are allowed for the section and pass bounds."""
    allowed = SECTION_FIELDS[section_type]
    validated = {}
    for name in allowed:
        if name not in fields:
            continue
        value = coerce_text(fields[name])
        if is_valid_field(name, value):
            validated[name] = value.strip()
        else:
            logger.warning("Rejected %s.%s: failed validation", section_type.value, name)
    return validated


def validate_items(items: Any, field: str) -> list[str] | None:
    """Validate a list of short strings. Returns None if any entry is bad."""
    if not isinstance(items, list) or not items:
        return None
    cleaned = []
    for item in items:
        item = sanitize_json_string(item)
        if not is_valid_field(field, item):
            logger.warning("Rejected %s entry %r", field, item)
            return None
        cleaned.append(item.strip())
    return cleaned
