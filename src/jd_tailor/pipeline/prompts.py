"""Per-section prompt builders."""

from __future__ import annotations

import json

from jd_tailor.models.tailoring import SectionType, TailorRequest

SYSTEM_PROMPT = """\
You are an expert resume tailoring assistant. You rewrite one resume section at a \
time so it matches the keywords and requirements of a job description.

Rules:
1. Make minimal changes and keep the core meaning and structure intact.
2. Use only facts present in the original content. Never invent experience, \
employers, dates or metrics.
3. Work relevant skills and keywords from the job description in naturally.
4. Keep the same number of entries; do not add or remove items.
5. Respond ONLY with the JSON requested, inside a single ```json ... ``` block."""

PROBE_PROMPT = 'Reply with the JSON {"status": "ok"} and nothing else.'

CURRENT_CONTENT_HEADING = "## Current content"
OUTPUT_FORMAT_HEADING = "## Output format"

_OUTPUT_FORMATS: dict[SectionType, str] = {
    SectionType.SUMMARY: '{"summary": "<tailored summary, 2-4 sentences>"}',
    SectionType.WORK_EXPERIENCE: (
        '{"description": "<one or two sentences about the role>", '
        '"keyAchievements": "<achievements, one per line, separated by \\n>"}'
    ),
    SectionType.PROJECTS: (
        '{"name": "<project name>", "description": "<one or two sentences>", '
        '"keyAchievements": "<achievements, one per line, separated by \\n>"}'
    ),
    SectionType.SKILLS: '{"skills": ["<skill>", "<skill>", ...]}',
    SectionType.LANGUAGES: '{"languages": ["<language>", ...]}',
    SectionType.CERTIFICATIONS: '{"certifications": ["<certification>", ...]}',
}

_TASKS: dict[SectionType, str] = {
    SectionType.SUMMARY: "Rewrite the professional summary.",
    SectionType.WORK_EXPERIENCE: (
        "Rewrite the description and key achievements of this work experience entry. "
        "Do not change the company, position or dates."
    ),
    SectionType.PROJECTS: "Rewrite the name, description and key achievements of this project.",
    SectionType.SKILLS: (
        "Reorder and rephrase the skills so the most relevant come first. "
        "Return a flat list with the same number of skills."
    ),
    SectionType.LANGUAGES: "Return the languages, most relevant first. Keep the same entries.",
    SectionType.CERTIFICATIONS: (
        "Return the certifications, most relevant first, using their official names. "
        "If there are no relevant certifications, answer None."
    ),
}


def build_section_prompt(request: TailorRequest) -> str:
    """User prompt for one section: context, current content, output format."""
    parts = [_TASKS[request.section_type]]

    if request.job_description:
        parts.append(f"## Job description\n```text\n{request.job_description}\n```")
    if request.instruction:
        parts.append(f"## Refinement instruction\n```text\n{request.instruction}\n```")

    current = json.dumps(request.section_content, indent=2, ensure_ascii=False)
    parts.append(f"{CURRENT_CONTENT_HEADING}\n```json\n{current}\n```")
    parts.append(
        f"{OUTPUT_FORMAT_HEADING}\nRespond with exactly this JSON shape in a ```json block:\n"
        + _OUTPUT_FORMATS[request.section_type]
    )
    return "\n\n".join(parts)
