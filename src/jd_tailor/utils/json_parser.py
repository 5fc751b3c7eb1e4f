"""Helpers for pulling JSON out of LLM responses."""

from __future__ import annotations

import json
import re

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_SINGLE_QUOTED_RE = re.compile(r"'((?:[^'\\\n]|\\.)*)'(?=\s*[:,}\]])")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def find_fenced_blocks(text: str) -> list[str]:
    """Return the content of every ``` fenced block, in order of appearance."""
    return [match.group(1).strip() for match in _FENCE_RE.finditer(text)]


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers, keeping what was inside them."""
    text = re.sub(r"```(?:json|JSON)?", "", text)
    return text.strip()


def parse_json(text: str) -> dict | list | str | None:
    """Parse text as JSON, returning None instead of raising.

    Tries in order:
    1. Direct json.loads on the full text
    2. First '{' to last '}'
    3. First '[' to last ']'
    """
    text = text.strip()
    if not text:
        return None

    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        pass

    result = _extract_between(text, "{", "}")
    if result is not None:
        return result

    return _extract_between(text, "[", "]")


def repair_json(text: str) -> str:
    """Normalize single quotes and drop trailing commas.

    Only covers the mistakes models make when asked for a flat JSON answer.
    """
    repaired = _SINGLE_QUOTED_RE.sub(_requote, text)
    return _TRAILING_COMMA_RE.sub(r"\1", repaired)


def parse_json_lenient(text: str) -> dict | list | str | None:
    """parse_json, then parse_json again on the repaired text."""
    result = parse_json(text)
    if result is not None:
        return result
    repaired = repair_json(text)
    if repaired == text:
        return None
    return parse_json(repaired)


def looks_like_json(text: str) -> bool:
    """True when the string itself is a JSON object or array."""
    stripped = text.strip()
    if not stripped or stripped[0] not in "{[":
        return False
    try:
        return isinstance(json.loads(stripped), (dict, list))
    except json.JSONDecodeError:
        return False


def _requote(match: re.Match) -> str:
    inner = match.group(1).replace("\\'", "'").replace('"', '\\"')
    return f'"{inner}"'


def _extract_between(text: str, opener: str, closer: str) -> dict | list | None:
    start = text.find(opener)
    end = text.rfind(closer)
    if start != -1 and end != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass
    return None
