"""Separate real certification names from the prose models wrap them in."""

from __future__ import annotations

import logging
import re

from jd_tailor.pipeline.extraction import extract

logger = logging.getLogger(__name__)

CERTIFICATION_KEYS = ("certifications", "certificates", "credentials")

# Shown when the model explicitly says the candidate has none.
PLACEHOLDER_CERTIFICATIONS = [
    "Relevant certification in progress",
    "Additional professional training available upon request",
]

MAX_CERTIFICATION_LENGTH = 150
NOISY_RESPONSE_LENGTH = 1500
NONE_RESPONSE_LENGTH = 100

_KEYWORD_RE = re.compile(
    r"\b(certifi\w*|certificate|credential|licen[cs]e|accredit\w*|associate|professional"
    r"|specialist|expert|practitioner|foundations?|diploma|nanodegree|bootcamp|course)\b",
    re.IGNORECASE,
)
_VENDOR_RE = re.compile(
    r"\b(aws|amazon|azure|microsoft|google|gcp|cisco|comptia|oracle|pmi|scrum|itil|isc2"
    r"|isaca|coursera|udemy|edx|udacity|linkedin|databricks|snowflake|salesforce"
    r"|kubernetes|cncf|red hat|hashicorp|terraform|nvidia|ibm|deeplearning\.ai|tensorflow"
    r"|mongodb|hubspot|sap|vmware|juniper|tableau)\b",
    re.IGNORECASE,
)
# AZ-900, SAA-C03, DP-100, CKA, CISSP, PMP, CCNA ...
_CODE_RE = re.compile(
    r"\b([A-Z]{2,4}-[A-Z]?\d{2,4}|CKA|CKAD|CKS|CISSP|CISM|CISA|PMP|CAPM|CCNA|CCNP|CSM|PSM|CPA|CFA|OSCP|RHCE|RHCSA)\b"
)
_BULLET_RE = re.compile(r"^\s*(?:[-•*]|\d+[.)])\s*")
# Sentences about the list rather than entries of it.
_PROSE_START_RE = re.compile(
    r"^(none|no|not|n/a|i|i'm|i've|there|these|this|we|you|unfortunately|sorry|the candidate|based on)\b",
    re.IGNORECASE,
)
MAX_UNBRANDED_WORDS = 8


def classify(raw_response: str) -> list[str] | None:
    """Certification names found in a model response, or None."""
    if not isinstance(raw_response, str) or not raw_response.strip():
        return None

    structured = _structured_candidates(raw_response)
    filtered = filter_certifications(structured) if structured is not None else []

    noisy = len(raw_response) > NOISY_RESPONSE_LENGTH
    if structured is None or (noisy and not filtered):
        filtered = filter_certifications(split_candidates(raw_response))

    if filtered:
        return filtered

    if _says_none(raw_response):
        logger.info("Model reported no certifications; using placeholders")
        return list(PLACEHOLDER_CERTIFICATIONS)

    logger.warning("No certifications recognised in model response")
    return None


def looks_like_certification(entry: str) -> bool:
    entry = entry.strip()
    if len(entry) < 3 or len(entry) > MAX_CERTIFICATION_LENGTH:
        return False
    if _PROSE_START_RE.match(entry):
        return False
    strong = bool(_VENDOR_RE.search(entry) or _CODE_RE.search(entry))
    if ":" in entry or strong:
        return strong
    # A keyword alone only counts in something name-sized.
    return bool(_KEYWORD_RE.search(entry)) and len(entry.split()) <= MAX_UNBRANDED_WORDS


def filter_certifications(candidates: list) -> list[str]:
    seen = set()
    result = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            continue
        candidate = candidate.strip().strip("\"'").strip()
        if looks_like_certification(candidate) and candidate.lower() not in seen:
            seen.add(candidate.lower())
            result.append(candidate)
    return result


def split_candidates(raw_response: str) -> list[str]:
    text = re.sub(r"```(?:json)?", "", raw_response)
    lines = [line for line in text.splitlines() if line.strip()]
    if len(lines) == 1:
        lines = lines[0].split(",")
    return [_BULLET_RE.sub("", line).strip().strip(",[]{}").strip() for line in lines]


def _structured_candidates(raw_response: str) -> list | None:
    for key in CERTIFICATION_KEYS:
        value = extract(raw_response, key)
        if isinstance(value, list):
            return value
    return None


def _says_none(raw_response: str) -> bool:
    text = raw_response.strip()
    if len(text) > NONE_RESPONSE_LENGTH:
        return False
    return re.search(r"\bnone\b", text, re.IGNORECASE) is not None
