"""Tests for the offline simulate provider."""

import json

from jd_tailor.clients.simulator import SIMULATED_SUMMARY, simulate_response
from jd_tailor.models.tailoring import SectionType, TailorRequest
from jd_tailor.pipeline.extraction import extract
from jd_tailor.pipeline.prompts import PROBE_PROMPT, build_section_prompt


def _messages(section_type: SectionType, content) -> list[dict]:
    request = TailorRequest(
        section_type=section_type,
        section_key=section_type.value,
        section_content=content,
        job_description="Python role",
    )
    return [{"role": "user", "content": build_section_prompt(request)}]


class TestSimulateResponse:
    def test_probe(self):
        answer = simulate_response([{"role": "user", "content": PROBE_PROMPT}])
        assert json.loads(answer) == {"status": "ok"}

    def test_summary(self):
        answer = simulate_response(_messages(SectionType.SUMMARY, "Backend engineer."))
        assert extract(answer, "summary") == SIMULATED_SUMMARY

    def test_work_entry_gets_extra_achievement(self):
        content = {
            "company": "Globex",
            "position": "Staff Engineer",
            "description": "Led the payments platform team.",
            "keyAchievements": "Reduced p99 latency by 40%",
        }
        answer = simulate_response(_messages(SectionType.WORK_EXPERIENCE, content))
        assert extract(answer, ["description", "keyAchievements", "company"]) == {
            "description": "Led the payments platform team.",
            "keyAchievements": "Reduced p99 latency by 40%\n- Simulated achievement point.",
        }

    def test_project_keeps_name(self):
        content = {"name": "Doc Search", "description": "", "keyAchievements": ""}
        answer = simulate_response(_messages(SectionType.PROJECTS, content))
        assert extract(answer, ["name", "description", "keyAchievements"]) == {
            "name": "Doc Search",
            "keyAchievements": "- Simulated achievement point.",
        }

    def test_skills_flattened(self):
        content = [{"title": "Tech", "skills": ["Python", "SQL"]}, ["Mentoring"]]
        answer = simulate_response(_messages(SectionType.SKILLS, content))
        assert extract(answer, "skills") == ["Python", "SQL", "Mentoring"]

    def test_certifications_echoed(self):
        answer = simulate_response(_messages(SectionType.CERTIFICATIONS, ["PMP"]))
        assert extract(answer, "certifications") == ["PMP"]
