"""Models describing a tailoring run: requests, extraction results, progress."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class SectionType(str, Enum):
    SUMMARY = "summary"
    WORK_EXPERIENCE = "workExperience"
    PROJECTS = "projects"
    SKILLS = "skills"
    LANGUAGES = "languages"
    CERTIFICATIONS = "certifications"


class SectionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class TailorRequest(BaseModel):
    section_type: SectionType
    section_key: str  # "summary", "workExperience-2", ...
    section_content: Any
    job_description: str = ""
    instruction: str | None = None


class ExtractionResult(BaseModel):
    """Outcome of pulling one section's value out of a model response."""

    ok: bool
    value: Any = None
    reason: str = ""

    @classmethod
    def success(cls, value: Any) -> ExtractionResult:
        return cls(ok=True, value=value)

    @classmethod
    def failed(cls, reason: str) -> ExtractionResult:
        return cls(ok=False, reason=reason)


class TailorReport(BaseModel):
    success_count: int = 0
    total_sections: int = 0
    section_progress: dict[str, SectionStatus] = {}
    errors: list[str] = []
    setup_error: str | None = None
    partial_failure: bool = False

    @property
    def success_rate(self) -> float:
        if not self.total_sections:
            return 0.0
        return self.success_count / self.total_sections


class ProgressEvent(BaseModel):
    stage: str  # probe | section | retry | summary | done
    section: str | None = None
    status: str = ""
    message: str = ""
    report: TailorReport | None = None
