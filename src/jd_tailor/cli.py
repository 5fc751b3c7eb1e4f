"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from jd_tailor.clients.llm_client import LLMClient
from jd_tailor.config import AppConfig, load_config
from jd_tailor.models.resume import Resume
from jd_tailor.models.tailoring import ProgressEvent, SectionStatus, TailorReport
from jd_tailor.pipeline.mutator import ResumeStore
from jd_tailor.pipeline.orchestrator import SectionOrchestrator
from jd_tailor.storage.version_store import VersionStore

app = typer.Typer(
    name="jd-tailor",
    help="Tailor a resume to a job description, one section at a time.",
    no_args_is_help=True,
)
versions_app = typer.Typer(help="Manage saved resume versions.", no_args_is_help=True)
app.add_typer(versions_app, name="versions")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_resume(path: Path) -> Resume:
    if not path.exists():
        console.print(f"[red]Resume file not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return Resume.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        console.print(f"[red]Resume file is not valid resume JSON: {exc}[/red]")
        raise typer.Exit(1)


def _run(
    config: AppConfig,
    resume: Resume,
    job_description: str,
    instruction: str | None,
) -> tuple[Resume, TailorReport, dict]:
    llm = LLMClient(provider=config.llm.provider, timeout=config.llm.timeout)
    store = ResumeStore(resume)
    orchestrator = SectionOrchestrator.from_config(llm, store, config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Tailoring resume...", total=None)

        def on_event(event: ProgressEvent) -> None:
            if event.stage == "section" and event.status == "started":
                progress.update(task, description=f"Tailoring {event.section}...")
            elif event.stage == "retry":
                progress.update(task, description=event.message)
            elif event.stage == "probe" and event.status == "started":
                progress.update(task, description=event.message)

        if instruction is None:
            coro = orchestrator.tailor_all(job_description, on_event=on_event)
        else:
            coro = orchestrator.refine_all(instruction, job_description, on_event=on_event)
        try:
            report = asyncio.run(coro)
        except ValueError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)

    return store.get(), report, llm.get_token_summary()


def _print_report(report: TailorReport, tokens: dict) -> None:
    if report.setup_error:
        console.print(Panel(report.setup_error, title="Setup required", border_style="red"))
        return

    table = Table(title="Sections")
    table.add_column("Section")
    table.add_column("Status")
    for key, status in report.section_progress.items():
        color = "green" if status is SectionStatus.SUCCESS else "red"
        table.add_row(key, f"[{color}]{status.value}[/{color}]")
    console.print(table)

    for error in report.errors:
        console.print(f"[dim]- {error}[/dim]")

    summary = (
        f"{report.success_count} of {report.total_sections} sections tailored"
        f"\nTokens: {tokens['input']} in / {tokens['output']} out"
    )
    if report.partial_failure:
        console.print(
            Panel(
                summary + "\nLess than half of the sections were tailored; "
                "the others keep their original content.",
                title="Partial result",
                border_style="yellow",
            )
        )
    else:
        console.print(Panel(summary, title="Done", border_style="green"))


def _finish(
    config: AppConfig,
    resume_path: Path,
    output: Path | None,
    tailored: Resume,
    report: TailorReport,
    tokens: dict,
    save: str | None,
    job_description: str,
) -> None:
    _print_report(report, tokens)
    if report.setup_error:
        raise typer.Exit(2)

    if output is None:
        output = resume_path.with_name(f"{resume_path.stem}_tailored.json")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps(tailored.to_editor_json(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    console.print(f"\n[green]Resume saved: {output}[/green]")

    if save:
        store = VersionStore(config.storage.resolved_db_path)
        store.save(save, tailored, job_description=job_description)
        console.print(f"[green]Saved version: {save}[/green]")


@app.command()
def tailor(
    resume: Path = typer.Argument(help="Resume JSON file"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    output: Path = typer.Option(None, "--output", "-o", help="Output JSON path"),
    save: str = typer.Option(None, "--save", help="Also store the result as a named version"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Tailor every resume section to a job description."""
    _setup_logging(verbose)
    if not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)

    config = load_config(config_path)
    job_description = jd.read_text(encoding="utf-8")
    original = _load_resume(resume)

    if verbose:
        console.print(f"[dim]Job description: {len(job_description)} chars[/dim]")
        console.print(f"[dim]Provider: {config.llm.provider} / {config.llm.model}[/dim]")

    tailored, report, tokens = _run(config, original, job_description, None)
    _finish(config, resume, output, tailored, report, tokens, save, job_description)


@app.command()
def refine(
    resume: Path = typer.Argument(help="Resume JSON file"),
    instruction: str = typer.Option(..., "--instruction", "-i", help="What to change"),
    jd: Path = typer.Option(None, "--jd", help="Job description for context"),
    output: Path = typer.Option(None, "--output", "-o", help="Output JSON path"),
    save: str = typer.Option(None, "--save", help="Also store the result as a named version"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Rewrite resume sections following an instruction."""
    _setup_logging(verbose)
    config = load_config(config_path)
    job_description = ""
    if jd is not None:
        if not jd.exists():
            console.print(f"[red]Job description file not found: {jd}[/red]")
            raise typer.Exit(1)
        job_description = jd.read_text(encoding="utf-8")
    original = _load_resume(resume)

    tailored, report, tokens = _run(config, original, job_description, instruction)
    _finish(config, resume, output, tailored, report, tokens, save, job_description)


@versions_app.command("list")
def list_versions(
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
) -> None:
    """List saved versions, newest first."""
    config = load_config(config_path)
    store = VersionStore(config.storage.resolved_db_path)
    saved = store.list_versions()
    if not saved:
        console.print("[yellow]No saved versions.[/yellow]")
        return

    table = Table(title="Saved versions")
    table.add_column("Name")
    table.add_column("Saved at")
    table.add_column("Job description")
    for version in saved:
        jd_preview = version.job_description.strip().splitlines()[0][:60] if version.job_description.strip() else "-"
        table.add_row(version.name, version.timestamp.strftime("%Y-%m-%d %H:%M"), jd_preview)
    console.print(table)


@versions_app.command("show")
def show_version(
    name: str = typer.Argument(help="Version name"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the resume JSON here"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
) -> None:
    """Print or export a saved version."""
    config = load_config(config_path)
    version = VersionStore(config.storage.resolved_db_path).get(name)
    if version is None:
        console.print(f"[red]No saved version named {name!r}[/red]")
        raise typer.Exit(1)

    data = json.dumps(version.data.to_editor_json(), indent=2, ensure_ascii=False)
    if output is None:
        console.print_json(data)
    else:
        output.write_text(data, encoding="utf-8")
        console.print(f"[green]Exported {name} to {output}[/green]")


@versions_app.command("delete")
def delete_version(
    name: str = typer.Argument(help="Version name"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
) -> None:
    """Delete a saved version."""
    config = load_config(config_path)
    if VersionStore(config.storage.resolved_db_path).delete(name):
        console.print(f"[green]Deleted {name}[/green]")
    else:
        console.print(f"[yellow]No saved version named {name!r}[/yellow]")


if __name__ == "__main__":
    app()
