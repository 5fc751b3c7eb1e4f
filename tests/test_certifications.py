"""Tests for certification classification."""

import pytest

from jd_tailor.pipeline.certifications import (
    PLACEHOLDER_CERTIFICATIONS,
    classify,
    filter_certifications,
    looks_like_certification,
    split_candidates,
)


class TestClassify:
    def test_none_answer_returns_placeholders(self):
        assert classify("None") == PLACEHOLDER_CERTIFICATIONS

    def test_placeholders_are_a_copy(self):
        result = classify("none")
        result.append("x")
        assert len(PLACEHOLDER_CERTIFICATIONS) == 2

    def test_structured_answer_filtered(self, fenced):
        raw = fenced(
            {
                "certifications": [
                    "AWS Certified Solutions Architect - Associate",
                    "Strong communicator",
                ]
            }
        )
        assert classify(raw) == ["AWS Certified Solutions Architect - Associate"]

    def test_alternate_key(self, fenced):
        raw = fenced({"credentials": ["Certified Kubernetes Administrator (CKA)"]})
        assert classify(raw) == ["Certified Kubernetes Administrator (CKA)"]

    def test_bullet_fallback(self):
        raw = (
            "- AWS Certified Developer\n"
            "- Google Cloud Professional Data Engineer\n"
            "- Enjoys hiking"
        )
        assert classify(raw) == [
            "AWS Certified Developer",
            "Google Cloud Professional Data Engineer",
        ]

    def test_noisy_response_falls_back_to_lines(self):
        raw = (
            '{"certifications": ["Team player"]}\n'
            "- AWS Certified Developer\n"
            + "x" * 1500
        )
        assert classify(raw) == ["AWS Certified Developer"]

    def test_none_sentence_mentioning_certifications_returns_placeholders(self):
        raw = "None of the current certifications are relevant to this data engineering role."
        assert classify(raw) == PLACEHOLDER_CERTIFICATIONS

    def test_explanation_line_dropped_from_list(self):
        raw = (
            "- PMP\n"
            "- There is no cloud certification that matches the posting\n"
            "- CISSP"
        )
        assert classify(raw) == ["PMP", "CISSP"]

    def test_long_none_is_not_a_none_answer(self):
        raw = (
            "The candidate has none that I could find in the resume text you shared, "
            "so I will leave this section as it is for now."
        )
        assert classify(raw) is None

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_blank(self, raw):
        assert classify(raw) is None


class TestLooksLikeCertification:
    @pytest.mark.parametrize(
        "entry",
        [
            "PMP",
            "Microsoft Azure Fundamentals AZ-900",
            "Certified Scrum Master",
            "Deep Learning Specialization (Coursera)",
        ],
    )
    def test_accepts(self, entry):
        assert looks_like_certification(entry)

    @pytest.mark.parametrize(
        "entry",
        [
            "Note: the certification list is short",
            "Excellent teamwork",
            "ab",
            "Certified " + "x" * 150,
            "None of the current certifications are relevant to this data engineering role.",
            "Unfortunately no AWS certifications match this role",
            "I would add a professional certificate once the candidate completes one",
            "Holds a professional certificate in data analytics from a local college program",
        ],
    )
    def test_rejects(self, entry):
        assert not looks_like_certification(entry)

    def test_colon_entry_kept_with_vendor(self):
        assert looks_like_certification("AWS: Certified Developer")


class TestFilterAndSplit:
    def test_dedupe_and_strip_quotes(self):
        assert filter_certifications(["PMP", "'PMP'", '"pmp"', 3]) == ["PMP"]

    def test_split_single_line_on_commas(self):
        assert split_candidates("PMP, CISSP") == ["PMP", "CISSP"]

    def test_split_numbered_lines(self):
        raw = "```\n1. CISSP\n2) CCNA\n```"
        assert split_candidates(raw) == ["CISSP", "CCNA"]
