"""Tests for resume mutation and the resume store."""

import pytest

from jd_tailor.models.resume import Resume, SkillGroup
from jd_tailor.models.tailoring import SectionType
from jd_tailor.pipeline.mutator import (
    ResumeStore,
    apply_partial,
    fit_list,
    parse_section_key,
    redistribute_skills,
    section_key,
)


class TestSectionKeys:
    def test_entry_key(self):
        assert section_key(SectionType.WORK_EXPERIENCE, 2) == "workExperience-2"

    def test_plain_key(self):
        assert section_key(SectionType.SKILLS) == "skills"

    def test_parse(self):
        assert parse_section_key("projects-0") == (SectionType.PROJECTS, 0)
        assert parse_section_key("summary") == (SectionType.SUMMARY, None)

    @pytest.mark.parametrize("key", ["education", "workExperience", "summary-1", "hobbies-0"])
    def test_bad_keys_raise(self, key):
        with pytest.raises(KeyError):
            parse_section_key(key)


class TestApplyPartial:
    def test_description_merge_leaves_other_fields(self, sample_resume):
        updated = apply_partial(sample_resume, "workExperience-0", {"description": "X"})
        before = sample_resume.work_experience[0].model_dump()
        after = updated.work_experience[0].model_dump()
        assert after["description"] == "X"
        assert {k: v for k, v in after.items() if k != "description"} == {
            k: v for k, v in before.items() if k != "description"
        }
        assert updated.work_experience[1] == sample_resume.work_experience[1]

    def test_input_not_mutated(self, sample_resume):
        apply_partial(sample_resume, "summary", "Rewritten summary for the role.")
        apply_partial(sample_resume, "workExperience-1", {"description": "Changed"})
        assert sample_resume.summary.startswith("Machine learning engineer")
        assert sample_resume.work_experience[1].description.startswith("Computer vision")

    def test_camel_case_entry_keys(self, sample_resume):
        updated = apply_partial(sample_resume, "projects-0", {"keyAchievements": "Indexed 5M documents"})
        assert updated.projects[0].key_achievements == "Indexed 5M documents"
        assert updated.projects[0].name == "Doc Search"

    def test_unknown_entry_fields_ignored(self, sample_resume):
        updated = apply_partial(sample_resume, "workExperience-0", {"salary": "lots"})
        assert updated.work_experience[0] == sample_resume.work_experience[0]

    def test_extra_fields_survive(self, sample_resume):
        updated = apply_partial(sample_resume, "workExperience-0", {"description": "New text here"})
        data = updated.to_editor_json()
        assert data["workExperience"][0]["startYear"] == "2022-01-01"
        assert data["projects"][0]["link"] == "https://example.com/doc-search"
        assert data["email"] == "jordan@example.com"

    def test_index_out_of_range(self, sample_resume):
        with pytest.raises(IndexError):
            apply_partial(sample_resume, "workExperience-5", {"description": "X"})

    def test_unknown_section(self, sample_resume):
        with pytest.raises(KeyError):
            apply_partial(sample_resume, "education", ["x"])

    def test_languages_keep_length(self, sample_resume):
        updated = apply_partial(sample_resume, "languages", ["English (native)", "Spanish", "French"])
        assert updated.languages == ["English (native)", "Spanish"]

    def test_certifications_padded_from_original(self, sample_resume):
        updated = apply_partial(sample_resume, "certifications", [])
        assert updated.certifications == sample_resume.certifications

    def test_skills_group_counts_preserved(self, sample_resume):
        updated = apply_partial(
            sample_resume,
            "skills",
            ["AWS", "Python", "PyTorch", "Stakeholder management", "Mentoring", "Extra"],
        )
        assert [len(g.skills) for g in updated.skills] == [3, 2]
        assert updated.skills[0].title == "Technical Skills"
        assert updated.skills[1].skills == ["Stakeholder management", "Mentoring"]


class TestRedistributeSkills:
    def test_short_flat_answer_keeps_later_groups(self):
        groups = [SkillGroup(title="A", skills=["a1", "a2"]), SkillGroup(title="B", skills=["b1"])]
        result = redistribute_skills(groups, ["x1", "x2"])
        assert result[0].skills == ["x1", "x2"]
        assert result[1].skills == ["b1"]

    def test_grouped_answer_maps_one_to_one(self):
        groups = [SkillGroup(title="A", skills=["a1"]), SkillGroup(title="B", skills=["b1", "b2"])]
        result = redistribute_skills(groups, [["x1", "x2"], {"title": "Other", "skills": ["y1"]}])
        assert result[0].skills == ["x1"]
        assert result[0].title == "A"
        assert result[1].skills == ["y1"]
        assert result[1].title == "B"

    def test_plain_list_groups(self):
        result = redistribute_skills([["a1", "a2"], ["b1"]], ["x1", "x2", "x3"])
        assert result == [["x1", "x2"], ["x3"]]


def test_fit_list():
    assert fit_list(["a", "b", "c"], ["x"]) == ["x", "b", "c"]
    assert fit_list(["a"], ["x", "y"]) == ["x"]
    assert fit_list([], ["x"]) == []


class TestResumeStore:
    def test_set_replaces_resume(self, resume_store):
        updated = resume_store.set(lambda r: apply_partial(r, "summary", "New summary for the job."))
        assert resume_store.get() is updated
        assert resume_store.get().summary == "New summary for the job."

    def test_updater_must_return_resume(self, resume_store):
        original = resume_store.get()
        with pytest.raises(TypeError):
            resume_store.set(lambda r: None)
        assert resume_store.get() is original

    def test_updater_error_leaves_state(self, resume_store):
        original = resume_store.get()
        with pytest.raises(IndexError):
            resume_store.set(lambda r: apply_partial(r, "projects-9", {"name": "X"}))
        assert resume_store.get() is original


def test_empty_resume_defaults():
    resume = Resume()
    assert resume.work_experience == []
    assert resume.to_editor_json()["workExperience"] == []
