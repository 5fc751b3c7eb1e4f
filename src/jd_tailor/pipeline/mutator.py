"""Functional updates to the resume, plus the state container that owns it."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from jd_tailor.models.resume import Resume, SkillGroup
from jd_tailor.models.tailoring import SectionType

logger = logging.getLogger(__name__)

_ENTRY_SECTIONS = {
    SectionType.WORK_EXPERIENCE: "work_experience",
    SectionType.PROJECTS: "projects",
}


def section_key(section_type: SectionType, index: int | None = None) -> str:
    if index is None:
        return section_type.value
    return f"{section_type.value}-{index}"


def parse_section_key(key: str) -> tuple[SectionType, int | None]:
    """'workExperience-2' -> (WORK_EXPERIENCE, 2); 'skills' -> (SKILLS, None)."""
    name, sep, index = key.rpartition("-")
    try:
        if sep and index.isdigit():
            section_type, idx = SectionType(name), int(index)
        else:
            section_type, idx = SectionType(key), None
    except ValueError:
        raise KeyError(f"Unknown section: {key}") from None

    if (section_type in _ENTRY_SECTIONS) != (idx is not None):
        raise KeyError(f"Malformed section key: {key}")
    return section_type, idx


def apply_partial(resume: Resume, section_key: str, partial_value: Any) -> Resume:
    """Return a new resume with ``partial_value`` merged into one section.

    Entries are shallow-merged field by field; list sections keep their
    original number of groups and entries.
    """
    section_type, index = parse_section_key(section_key)
    updated = resume.model_copy(deep=True)

    if section_type is SectionType.SUMMARY:
        updated.summary = partial_value
    elif section_type in _ENTRY_SECTIONS:
        entries = getattr(updated, _ENTRY_SECTIONS[section_type])
        entries[index] = merge_entry(entries[index], partial_value)
    elif section_type is SectionType.SKILLS:
        updated.skills = redistribute_skills(updated.skills, partial_value)
    elif section_type is SectionType.LANGUAGES:
        updated.languages = fit_list(updated.languages, partial_value)
    elif section_type is SectionType.CERTIFICATIONS:
        updated.certifications = fit_list(updated.certifications, partial_value)
    return updated


def merge_entry(entry: BaseModel, fields: dict) -> BaseModel:
    """Shallow merge; accepts camelCase or snake_case keys, ignores unknown ones."""
    update = {}
    for key, value in fields.items():
        name = _field_name(type(entry), key)
        if name is None:
            logger.debug("Ignoring unknown field %r for %s", key, type(entry).__name__)
            continue
        update[name] = value
    return entry.model_copy(update=update)


def _field_name(model: type[BaseModel], key: str) -> str | None:
    for name, info in model.model_fields.items():
        if key == name or key == info.alias:
            return name
    return None


def fit_list(original: list[str], new: list[str]) -> list[str]:
    """Same length as ``original``: extra entries dropped, missing ones kept from before."""
    return list(new[: len(original)]) + list(original[len(new) :])


def redistribute_skills(
    groups: list[SkillGroup | list[str]],
    new_skills: list,
) -> list[SkillGroup | list[str]]:
    """Spread tailored skills back over the original groups.

    A grouped answer with the same number of groups maps one to one. A flat
    list is cut into consecutive chunks of each group's original size, so a
    short answer leaves the later groups untouched and a long one is truncated.
    """
    if len(new_skills) == len(groups) and all(isinstance(g, (list, dict, SkillGroup)) for g in new_skills):
        chunks = [group_items(g) for g in new_skills]
        chunks = [chunk[: len(group_items(orig))] for chunk, orig in zip(chunks, groups)]
    else:
        flat = [s for s in new_skills if isinstance(s, str)]
        chunks = []
        cursor = 0
        for group in groups:
            size = len(group_items(group))
            chunks.append(flat[cursor : cursor + size])
            cursor += size

    result = []
    for group, chunk in zip(groups, chunks):
        if not chunk:
            result.append(group)
        elif isinstance(group, SkillGroup):
            result.append(group.model_copy(update={"skills": chunk}))
        else:
            result.append(chunk)
    return result


def group_items(group: Any) -> list[str]:
    if isinstance(group, SkillGroup):
        return list(group.skills)
    if isinstance(group, dict):
        return [s for s in group.get("skills", []) if isinstance(s, str)]
    return [s for s in group if isinstance(s, str)]


class ResumeStore:
    """Holds the current resume; all changes go through ``set``."""

    def __init__(self, resume: Resume):
        self._resume = resume

    def get(self) -> Resume:
        return self._resume

    def set(self, updater: Callable[[Resume], Resume]) -> Resume:
        updated = updater(self._resume)
        if not isinstance(updated, Resume):
            raise TypeError("Resume updater must return a Resume")
        self._resume = updated
        return updated
