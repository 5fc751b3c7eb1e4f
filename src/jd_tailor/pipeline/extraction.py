"""Recover structured section values from free-form model output.

The engine runs an ordered list of strategies over the raw response. Each
strategy either returns a value or ``SKIP``; the first value wins. Nothing in
here raises: a response that cannot be read at all yields ``None``.

Strategies, in order:
1. Parse the fenced blocks, last first, then the whole text as JSON,
   repairing single quotes and trailing commas if needed, and project the
   result onto the expected keys.
2. Scrape ``"key": "value"`` / ``"key": [...]`` pairs with regexes, which
   works on JSON too broken to parse.
3. Degraded recovery: strip fences, braces and key names and keep the text.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from jd_tailor.models.tailoring import ExtractionResult
from jd_tailor.utils.json_parser import (
    find_fenced_blocks,
    parse_json_lenient,
    strip_code_fences,
)

logger = logging.getLogger(__name__)

SKIP = object()

ExpectedKeys = str | Sequence[str]
Strategy = Callable[[str, ExpectedKeys], Any]


def extract(raw_text: str, expected_keys: ExpectedKeys) -> Any:
    """Best-effort structured value from ``raw_text``.

    A single key expects a string or list back; a list of keys expects a dict
    holding whichever of those keys the model answered.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return None

    for strategy in STRATEGIES:
        try:
            value = strategy(raw_text, expected_keys)
        except Exception:
            logger.debug("Extraction strategy %s raised", strategy.__name__, exc_info=True)
            continue
        if value is not SKIP:
            logger.debug("Extracted %r via %s", expected_keys, strategy.__name__)
            return value
    return None


def extract_result(raw_text: str, expected_keys: ExpectedKeys) -> ExtractionResult:
    value = extract(raw_text, expected_keys)
    if value is None:
        return ExtractionResult.failed("no usable content in model response")
    return ExtractionResult.success(value)


def _key_list(expected_keys: ExpectedKeys) -> list[str]:
    if isinstance(expected_keys, str):
        return [expected_keys]
    return list(expected_keys)


# --- Strategy 1: JSON ---


def parse_structured(raw_text: str, expected_keys: ExpectedKeys) -> Any:
    # Models often echo the prompt's current-content block before answering,
    # so the last fenced block that holds the expected keys wins.
    for block in reversed(find_fenced_blocks(raw_text)):
        parsed = parse_json_lenient(block)
        if parsed is None:
            continue
        value = project(parsed, expected_keys)
        if value is not SKIP:
            return value

    parsed = parse_json_lenient(raw_text)
    if parsed is None:
        return SKIP
    return project(parsed, expected_keys)


def project(parsed: Any, expected_keys: ExpectedKeys) -> Any:
    """Narrow a parsed JSON value to what the caller asked for."""
    if isinstance(expected_keys, str):
        key = expected_keys
        if isinstance(parsed, dict):
            if key in parsed and parsed[key] is not None:
                return parsed[key]
            if len(parsed) == 1:
                (only,) = parsed.values()
                if isinstance(only, (str, list)):
                    return only
            return SKIP
        if isinstance(parsed, (str, list)):
            return parsed
        return SKIP

    if not isinstance(parsed, dict):
        return SKIP
    result = {k: parsed[k] for k in expected_keys if k in parsed}
    return result or SKIP


# --- Strategy 2: regex scraping ---


def _string_pattern(key: str) -> re.Pattern:
    return re.compile(rf'["\']{re.escape(key)}["\']\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)


def _array_pattern(key: str) -> re.Pattern:
    return re.compile(rf'["\']{re.escape(key)}["\']\s*:\s*\[(.*?)\]', re.DOTALL)


def _scrape_key(raw_text: str, key: str) -> Any:
    match = _string_pattern(key).search(raw_text)
    if match:
        return _unescape(match.group(1))

    match = _array_pattern(key).search(raw_text)
    if match:
        body = match.group(1)
        try:
            items = json.loads(f"[{body}]")
        except json.JSONDecodeError:
            items = [
                _unescape(a or b)
                for a, b in re.findall(r'"((?:[^"\\]|\\.)*)"|\'([^\']*)\'', body)
            ]
        return items
    return None


def scrape_fields(raw_text: str, expected_keys: ExpectedKeys) -> Any:
    if isinstance(expected_keys, str):
        value = _scrape_key(raw_text, expected_keys)
        return SKIP if value is None else value

    found = {}
    for key in expected_keys:
        value = _scrape_key(raw_text, key)
        if value is not None:
            found[key] = value
    return found or SKIP


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value.replace('\\"', '"').replace("\\n", "\n")


# --- Strategy 3: plain text ---


def plain_text(raw_text: str, expected_keys: ExpectedKeys) -> Any:
    text = strip_code_fences(raw_text)
    text = re.sub(r"[{}]", "", text)
    for key in _key_list(expected_keys):
        text = re.sub(rf'["\']?{re.escape(key)}["\']?\s*:?', "", text)
    text = text.strip().strip('"').strip()
    return text or SKIP


STRATEGIES: list[Strategy] = [parse_structured, scrape_fields, plain_text]


_BULLET_LINE_RE = re.compile(r"^\s*[-•*]\s*(.+?)\s*$", re.MULTILINE)


def extract_list_items(text: str) -> list[str]:
    """Split a degraded plain-text answer into list items.

    Bullet lines win, then comma separation, then one item per line.
    """
    bullets = _BULLET_LINE_RE.findall(text)
    if bullets:
        return [b for b in bullets if b]
    if "," in text:
        return [item.strip() for item in text.split(",") if item.strip()]
    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and ":" not in line
    ]
