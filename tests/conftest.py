"""Shared test fixtures."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from jd_tailor.clients.llm_client import GatewayResponse, LLMClient
from jd_tailor.models.resume import Resume
from jd_tailor.pipeline.mutator import ResumeStore


def _fenced(payload) -> str:
    return f"Here is the tailored section:\n```json\n{json.dumps(payload)}\n```"


@pytest.fixture
def fenced():
    """Build a model-style answer: prose plus a ```json block."""
    return _fenced


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Machine Learning Engineer

Responsibilities:
- Build retrieval-augmented generation services on AWS
- Own MLOps pipelines and model deployment
- Work with product teams on LLM features

Requirements:
- 4+ years of Python and PyTorch
- Experience with AWS Bedrock, SageMaker, Docker
- Strong communication skills
"""


@pytest.fixture
def sample_resume_json() -> dict:
    return {
        "name": "Jordan Lee",
        "position": "ML Engineer",
        "email": "jordan@example.com",
        "summary": "Machine learning engineer focused on retrieval systems and model optimisation.",
        "education": [{"school": "State University", "degree": "BSc Computer Science"}],
        "workExperience": [
            {
                "company": "Acme Analytics",
                "position": "Senior Data Scientist",
                "description": "Built AI products for retail and telecom clients.",
                "keyAchievements": "Shipped a RAG system with 93% accuracy\nCut churn by 15%",
                "startYear": "2022-01-01",
                "endYear": "",
            },
            {
                "company": "Vision Labs",
                "position": "Deep Learning Engineer",
                "description": "Computer vision analytics for CCTV footage.",
                "keyAchievements": "Truck tracking at 91% accuracy",
                "startYear": "2019-06-01",
                "endYear": "2021-12-31",
            },
        ],
        "projects": [
            {
                "name": "Doc Search",
                "description": "Semantic search over internal documents.",
                "keyAchievements": "Indexed 2M documents",
                "link": "https://example.com/doc-search",
            }
        ],
        "skills": [
            {"title": "Technical Skills", "skills": ["Python", "PyTorch", "Docker"]},
            {"title": "Soft Skills", "skills": ["Communication", "Mentoring"]},
        ],
        "languages": ["English", "Spanish"],
        "certifications": ["AWS Certified Machine Learning - Specialty"],
    }


@pytest.fixture
def sample_resume(sample_resume_json) -> Resume:
    return Resume.model_validate(sample_resume_json)


@pytest.fixture
def single_entry_resume() -> Resume:
    """Summary plus one work experience entry, nothing else."""
    return Resume.model_validate(
        {
            "summary": "Backend engineer with eight years of Python experience.",
            "workExperience": [
                {
                    "company": "Globex",
                    "position": "Staff Engineer",
                    "description": "Led the payments platform team.",
                    "keyAchievements": "Reduced p99 latency by 40%",
                    "startYear": "2018-03-01",
                }
            ],
        }
    )


@pytest.fixture
def resume_store(sample_resume) -> ResumeStore:
    return ResumeStore(sample_resume)


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.complete = AsyncMock(return_value=GatewayResponse(content='{"status": "ok"}'))
    client.get_token_summary.return_value = {"input": 0, "output": 0, "calls": []}
    return client


@pytest.fixture
def no_sleep():
    """Async sleep replacement that records requested delays."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
