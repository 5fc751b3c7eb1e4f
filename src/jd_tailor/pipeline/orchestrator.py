"""Section orchestrator - tailors the resume one section at a time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from jd_tailor.clients.errors import ErrorKind, classify_error
from jd_tailor.clients.llm_client import GatewayRequest, LLMClient
from jd_tailor.config import AppConfig
from jd_tailor.models.resume import Resume, SkillGroup
from jd_tailor.models.tailoring import (
    ExtractionResult,
    ProgressEvent,
    SectionStatus,
    SectionType,
    TailorReport,
    TailorRequest,
)
from jd_tailor.pipeline.certifications import classify
from jd_tailor.pipeline.extraction import extract_list_items, extract_result
from jd_tailor.pipeline.mutator import ResumeStore, apply_partial, group_items, section_key
from jd_tailor.pipeline.prompts import PROBE_PROMPT, SYSTEM_PROMPT, build_section_prompt
from jd_tailor.pipeline.retry import with_retry
from jd_tailor.pipeline.validator import (
    SECTION_FIELDS,
    coerce_text,
    is_valid_field,
    validate_fields,
    validate_items,
)

logger = logging.getLogger(__name__)

SETUP_MESSAGE = (
    "LLM credentials are not configured ({error}). Set ANTHROPIC_API_KEY or "
    "OPENAI_API_KEY in your environment or .env file and try again."
)

_ENTRY_FIELDS = {
    SectionType.WORK_EXPERIENCE: {"company", "position", "description", "key_achievements"},
    SectionType.PROJECTS: {"name", "description", "key_achievements"},
}


class SectionOrchestrator:
    """Runs the per-section tailoring pipeline against one resume store.

    Sections are processed strictly in order with one gateway call in flight;
    a failed section is recorded and the run moves on.
    """

    def __init__(
        self,
        llm: LLMClient,
        store: ResumeStore,
        *,
        provider: str = "anthropic",
        model: str = "claude-haiku-4-5-20251001",
        max_tokens: int = 1024,
        temperature: float = 0.5,
        max_attempts: int = 3,
        initial_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        warning_threshold: float = 0.5,
        connectivity_probe: bool = True,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm = llm
        self.store = store
        self.provider = provider
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms
        self.max_delay_ms = max_delay_ms
        self.warning_threshold = warning_threshold
        self.connectivity_probe = connectivity_probe
        self._sleep = sleep

    @classmethod
    def from_config(cls, llm: LLMClient, store: ResumeStore, config: AppConfig) -> SectionOrchestrator:
        return cls(
            llm,
            store,
            provider=config.llm.provider,
            model=config.llm.model,
            max_tokens=config.llm.max_tokens,
            temperature=config.llm.temperature,
            max_attempts=config.retry.max_attempts,
            initial_delay_ms=config.retry.initial_delay_ms,
            max_delay_ms=config.retry.max_delay_ms,
            warning_threshold=config.pipeline.warning_threshold,
            connectivity_probe=config.pipeline.connectivity_probe,
        )

    async def tailor_all(
        self,
        job_description: str,
        on_event: Callable[[ProgressEvent], None] | None = None,
    ) -> TailorReport:
        """Tailor every section to the job description."""
        if not job_description or not job_description.strip():
            raise ValueError("Please paste the job description first.")
        return await self._consume(self.stream(job_description), on_event)

    async def refine_all(
        self,
        instruction: str,
        job_description: str = "",
        on_event: Callable[[ProgressEvent], None] | None = None,
    ) -> TailorReport:
        """Rewrite every section following a free-text instruction."""
        if not instruction or not instruction.strip():
            raise ValueError("Please enter refinement instructions first.")
        return await self._consume(
            self.stream(job_description, instruction=instruction), on_event
        )

    async def _consume(
        self,
        events: AsyncIterator[ProgressEvent],
        on_event: Callable[[ProgressEvent], None] | None,
    ) -> TailorReport:
        report = None
        async for event in events:
            if on_event:
                on_event(event)
            if event.report is not None:
                report = event.report
        return report

    async def stream(
        self,
        job_description: str,
        *,
        instruction: str | None = None,
    ) -> AsyncIterator[ProgressEvent]:
        """Run the pipeline, yielding progress events.

        The last event has stage "done" and carries the TailorReport.
        """
        report = TailorReport()

        if self.connectivity_probe:
            yield ProgressEvent(stage="probe", status="started", message="Checking LLM connectivity")
            try:
                await self._call(PROBE_PROMPT, max_tokens=20)
            except Exception as exc:
                if classify_error(exc) is ErrorKind.AUTH:
                    report.setup_error = SETUP_MESSAGE.format(error=exc)
                    logger.error("Connectivity probe failed: %s", exc)
                    yield ProgressEvent(stage="probe", status="error", message=report.setup_error)
                    yield ProgressEvent(stage="done", status="aborted", report=report)
                    return
                logger.warning("Connectivity probe failed (%s); continuing", exc)
                yield ProgressEvent(stage="probe", status="warning", message=str(exc))
            else:
                yield ProgressEvent(stage="probe", status="success")

        requests = self.plan_sections(self.store.get(), job_description, instruction)
        report.total_sections = len(requests)
        logger.info("Tailoring %d sections", len(requests))

        for request in requests:
            key = request.section_key
            yield ProgressEvent(stage="section", section=key, status="started")

            prompt = build_section_prompt(request)
            retries: asyncio.Queue[ProgressEvent] = asyncio.Queue()

            def _on_retry(attempt: int, delay: float, error: BaseException, key: str = key) -> None:
                retries.put_nowait(self._retry_event(key, attempt, delay, error))

            call = asyncio.create_task(
                with_retry(
                    lambda prompt=prompt: self._call(prompt),
                    self.max_attempts,
                    self.initial_delay_ms,
                    max_delay_ms=self.max_delay_ms,
                    on_retry=_on_retry,
                    sleep=self._sleep,
                )
            )
            try:
                # Retry notices go out while the backoff sleep is still running.
                while not call.done():
                    getter = asyncio.ensure_future(retries.get())
                    done, _ = await asyncio.wait({call, getter}, return_when=asyncio.FIRST_COMPLETED)
                    if getter in done:
                        yield getter.result()
                    else:
                        getter.cancel()
                while not retries.empty():
                    yield retries.get_nowait()
            finally:
                if not call.done():
                    call.cancel()

            try:
                raw = call.result()
            except Exception as exc:
                report.section_progress[key] = SectionStatus.FAILED
                if classify_error(exc) is ErrorKind.AUTH:
                    report.setup_error = SETUP_MESSAGE.format(error=exc)
                    logger.error("Authentication failed during %s: %s", key, exc)
                    yield ProgressEvent(stage="section", section=key, status="error", message=report.setup_error)
                    break
                message = f"{key}: {exc}"
                report.errors.append(message)
                logger.warning("Gateway call failed for %s: %s", key, exc)
                yield ProgressEvent(stage="section", section=key, status="failed", message=str(exc))
                continue

            try:
                result = self.ingest(request, raw)
                if result.ok:
                    self.store.set(lambda resume: apply_partial(resume, key, result.value))
            except Exception as exc:
                logger.exception("Could not apply %s", key)
                result = ExtractionResult.failed(f"could not apply update: {exc}")

            if result.ok:
                report.success_count += 1
                report.section_progress[key] = SectionStatus.SUCCESS
                yield ProgressEvent(stage="section", section=key, status="success")
            else:
                report.section_progress[key] = SectionStatus.FAILED
                report.errors.append(f"{key}: {result.reason}")
                logger.warning("Section %s not applied: %s", key, result.reason)
                yield ProgressEvent(stage="section", section=key, status="failed", message=result.reason)

        if report.setup_error is None and report.total_sections:
            summary = f"{report.success_count} of {report.total_sections} sections tailored"
            if report.success_rate < self.warning_threshold:
                report.partial_failure = True
                yield ProgressEvent(
                    stage="summary",
                    status="warning",
                    message=f"Only {summary}; the rest keep their original content.",
                )
            else:
                yield ProgressEvent(stage="summary", status="success", message=summary)
            logger.info(summary)

        yield ProgressEvent(stage="done", status="aborted" if report.setup_error else "completed", report=report)

    def _retry_event(self, key: str, attempt: int, delay: float, error: BaseException) -> ProgressEvent:
        return ProgressEvent(
            stage="retry",
            section=key,
            status="retrying",
            message=f"Service busy ({error}); retrying in {delay:.1f}s "
            f"(attempt {attempt}/{self.max_attempts})",
        )

    async def _call(self, prompt: str, max_tokens: int | None = None) -> str:
        request = GatewayRequest(
            provider=self.provider,
            model=self.model,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature,
        )
        response = await self.llm.complete(request)
        return response.content

    def plan_sections(
        self,
        resume: Resume,
        job_description: str,
        instruction: str | None = None,
    ) -> list[TailorRequest]:
        """Sections to tailor, in order. Empty sections are skipped."""

        def _request(section_type: SectionType, content, index: int | None = None) -> TailorRequest:
            return TailorRequest(
                section_type=section_type,
                section_key=section_key(section_type, index),
                section_content=content,
                job_description=job_description,
                instruction=instruction,
            )

        requests = []
        if resume.summary.strip():
            requests.append(_request(SectionType.SUMMARY, resume.summary))
        for i, entry in enumerate(resume.work_experience):
            content = entry.model_dump(by_alias=True, include=_ENTRY_FIELDS[SectionType.WORK_EXPERIENCE])
            requests.append(_request(SectionType.WORK_EXPERIENCE, content, i))
        for i, entry in enumerate(resume.projects):
            content = entry.model_dump(by_alias=True, include=_ENTRY_FIELDS[SectionType.PROJECTS])
            requests.append(_request(SectionType.PROJECTS, content, i))
        if any(group_items(g) for g in resume.skills):
            content = [g.model_dump(by_alias=True) if isinstance(g, SkillGroup) else g for g in resume.skills]
            requests.append(_request(SectionType.SKILLS, content))
        if resume.languages:
            requests.append(_request(SectionType.LANGUAGES, resume.languages))
        if resume.certifications:
            requests.append(_request(SectionType.CERTIFICATIONS, resume.certifications))
        return requests

    def ingest(self, request: TailorRequest, raw: str) -> ExtractionResult:
        """Extract and validate one section's value from the raw model text."""
        section_type = request.section_type

        if section_type is SectionType.SUMMARY:
            result = extract_result(raw, "summary")
            if not result.ok:
                return result
            value = coerce_text(result.value)
            if not is_valid_field("summary", value):
                return ExtractionResult.failed("summary failed validation")
            return ExtractionResult.success(value.strip())

        if section_type in SECTION_FIELDS:
            result = extract_result(raw, list(SECTION_FIELDS[section_type]))
            if not result.ok:
                return result
            value = result.value
            if not isinstance(value, dict):
                return ExtractionResult.failed("response did not contain the expected fields")
            fields = validate_fields(section_type, value)
            if not fields:
                return ExtractionResult.failed("no field passed validation")
            return ExtractionResult.success(fields)

        if section_type is SectionType.SKILLS:
            return self._ingest_skills(request, raw)

        if section_type is SectionType.LANGUAGES:
            result = extract_result(raw, "languages")
            if not result.ok:
                return result
            value = result.value
            if isinstance(value, str):
                value = extract_list_items(value)
            items = validate_items(value, "language")
            if items is None:
                return ExtractionResult.failed("languages failed validation")
            return ExtractionResult.success(items)

        items = classify(raw)
        if items is None:
            return ExtractionResult.failed("no certifications recognised")
        items = validate_items(items, "certification")
        if items is None:
            return ExtractionResult.failed("certifications failed validation")
        return ExtractionResult.success(items)

    def _ingest_skills(self, request: TailorRequest, raw: str) -> ExtractionResult:
        result = extract_result(raw, "skills")
        if not result.ok:
            return result
        value = result.value
        if isinstance(value, str):
            value = extract_list_items(value)
        if not isinstance(value, list) or not value:
            return ExtractionResult.failed("skills response was not a list")

        if all(isinstance(g, (dict, list)) for g in value):
            groups = [validate_items(group_items(g), "skill") for g in value]
            if any(g is None for g in groups):
                return ExtractionResult.failed("skills failed validation")
            if len(groups) == len(request.section_content):
                return ExtractionResult.success(groups)
            # Group count changed; fall back to spreading a flat list.
            return ExtractionResult.success([skill for group in groups for skill in group])

        items = validate_items(value, "skill")
        if items is None:
            return ExtractionResult.failed("skills failed validation")
        return ExtractionResult.success(items)
