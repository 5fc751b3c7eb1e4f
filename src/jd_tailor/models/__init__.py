"""Data models for the resume tailoring core."""

from jd_tailor.models.resume import (
    Project,
    Resume,
    SavedVersion,
    SkillGroup,
    WorkExperience,
)
from jd_tailor.models.tailoring import (
    ExtractionResult,
    ProgressEvent,
    SectionStatus,
    SectionType,
    TailorReport,
    TailorRequest,
)

__all__ = [
    "ExtractionResult",
    "ProgressEvent",
    "Project",
    "Resume",
    "SavedVersion",
    "SectionStatus",
    "SectionType",
    "SkillGroup",
    "TailorReport",
    "TailorRequest",
    "WorkExperience",
]
