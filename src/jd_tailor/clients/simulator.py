"""Offline stand-in for an LLM provider.

Answers section prompts with a canned rewrite of the content they carry, so the
whole pipeline can run without an API key or network access.
"""

from __future__ import annotations

import json
import logging
import re

from jd_tailor.pipeline.prompts import CURRENT_CONTENT_HEADING, OUTPUT_FORMAT_HEADING, PROBE_PROMPT

logger = logging.getLogger(__name__)

SIMULATED_SUMMARY = "This is a simulated tailored summary based on the job description."
SIMULATED_ACHIEVEMENT = "- Simulated achievement point."

_PROBE_ANSWER = '{"status": "ok"}'
_CONTENT_RE = re.compile(re.escape(CURRENT_CONTENT_HEADING) + r"\n```json\n(.*?)\n```", re.DOTALL)
_ANSWER_KEY_RE = re.compile(re.escape(OUTPUT_FORMAT_HEADING) + r'.*?\{"(\w+)"', re.DOTALL)


def simulate_response(messages: list[dict]) -> str:
    """Canned model answer for the user prompt in ``messages``."""
    prompt = "\n".join(m.get("content", "") for m in messages if m.get("role") == "user")
    content_match = _CONTENT_RE.search(prompt)
    key_match = _ANSWER_KEY_RE.search(prompt)
    if prompt.strip() == PROBE_PROMPT or not content_match or not key_match:
        return _PROBE_ANSWER

    current = json.loads(content_match.group(1))
    key = key_match.group(1)
    logger.debug("Simulating %s answer", key)

    if key == "summary":
        answer: dict = {"summary": SIMULATED_SUMMARY}
    elif key in ("description", "name"):
        answer = {k: v for k, v in current.items() if k in ("name", "description") and v}
        achievements = current.get("keyAchievements", "").rstrip()
        answer["keyAchievements"] = f"{achievements}\n{SIMULATED_ACHIEVEMENT}".lstrip()
    elif key == "skills":
        answer = {"skills": [s for group in current for s in _group_skills(group)]}
    else:
        answer = {key: current}

    return "```json\n" + json.dumps(answer, indent=2, ensure_ascii=False) + "\n```"


def _group_skills(group) -> list[str]:
    if isinstance(group, dict):
        return list(group.get("skills", []))
    return list(group)
