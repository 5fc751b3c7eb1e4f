"""Pydantic models for the resume being tailored."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Editor JSON is camelCase; fields the core never touches are carried through.
_EDITOR_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="allow",
)


class WorkExperience(BaseModel):
    model_config = _EDITOR_CONFIG

    company: str = ""
    position: str = ""
    description: str = ""
    key_achievements: str = ""


class Project(BaseModel):
    model_config = _EDITOR_CONFIG

    name: str = ""
    description: str = ""
    key_achievements: str = ""


class SkillGroup(BaseModel):
    model_config = _EDITOR_CONFIG

    title: str = ""
    skills: list[str] = []


class Resume(BaseModel):
    model_config = _EDITOR_CONFIG

    summary: str = ""
    work_experience: list[WorkExperience] = []
    projects: list[Project] = []
    skills: list[SkillGroup | list[str]] = []
    languages: list[str] = []
    certifications: list[str] = []

    def to_editor_json(self) -> dict:
        """Dump with the editor's camelCase keys, extra fields included."""
        return self.model_dump(by_alias=True)


class SavedVersion(BaseModel):
    """A named snapshot of a tailored resume."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    timestamp: datetime = Field(default_factory=datetime.now)
    job_description: str = ""
    data: Resume
