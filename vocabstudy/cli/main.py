"""
Typer CLI for the vocab study engine.

Commands:
    vocab db init                  - Create database tables
    vocab person add NAME          - Register an awesome person
    vocab content import PATH      - Import vocab items from CSV file(s)
    vocab enroll PERSON VOCAB...   - Start studying vocab items
    vocab list PERSON              - Show the next study list
    vocab check VOCAB STUDY TEXT   - Check one answer
    vocab stats STUDY              - Show stats for one vocab study
    vocab profile PERSON           - Show a person's progress profile
    vocab study PERSON             - Interactive study session

Usage:
    vocab --help
    vocab content import vocabulary/
    vocab study 1 --limit 5 --rounds 2
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import get_settings
from vocabstudy.errors import StudyError
from vocabstudy.log import configure_logging
from vocabstudy.models import Verdict
from vocabstudy.store.base import ProgressStore

app = typer.Typer(
    help="vocab: fuzzy-matched vocabulary drilling",
    no_args_is_help=True,
)

console = Console()

QUIT_WORDS = frozenset({":q", ":quit"})
HINT_WORDS = frozenset({":h", ":hint"})


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency injection container for CLI commands.

    Lazily initializes the store and service so `--help` never touches the
    database.
    """

    def __init__(self, store: ProgressStore | None = None):
        self.settings = get_settings()
        self._store = store
        self._service = None

    @property
    def store(self) -> ProgressStore:
        """Lazy load SqlProgressStore."""
        if self._store is None:
            from vocabstudy.store.sql import SqlProgressStore

            self._store = SqlProgressStore()
        return self._store

    @property
    def service(self):
        """Lazy load StudyService."""
        if self._service is None:
            from vocabstudy.study.service import StudyService

            self._service = StudyService.from_settings(self.store, self.settings)
        return self._service


def _build_context() -> CLIContext:
    """Build CLI context with dependency injection."""
    return CLIContext()


def _fail(error: StudyError) -> NoReturn:
    rprint(f"[red]✗[/red] {error}")
    raise typer.Exit(code=1)


# ========================================
# DB COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialize database tables."""
    from vocabstudy.db.database import init_db

    init_db()
    rprint("[green]✓[/green] Database initialized")


# ========================================
# PERSON COMMANDS
# ========================================

person_app = typer.Typer(help="Awesome person management")
app.add_typer(person_app, name="person")


@person_app.command("add")
def person_add(
    name: str = typer.Argument(..., help="Display name"),
    awesome_id: int | None = typer.Option(None, "--id", help="Explicit awesome id"),
) -> None:
    """Register an awesome person."""
    ctx = _build_context()
    try:
        person = ctx.store.add_person(name, awesome_id=awesome_id)
    except StudyError as e:
        _fail(e)
    rprint(f"[green]✓[/green] Added {person.name} (awesome id {person.awesome_id})")


# ========================================
# CONTENT COMMANDS
# ========================================

content_app = typer.Typer(help="Vocabulary content import")
app.add_typer(content_app, name="content")


@content_app.command("import")
def content_import(
    path: Path = typer.Argument(..., help="CSV file or directory of CSV files"),
    enroll: int | None = typer.Option(
        None, "--enroll", help="Also enroll this awesome id in every imported item"
    ),
) -> None:
    """Import vocab items from CSV."""
    from vocabstudy.content.loader import VocabularyLoader

    ctx = _build_context()
    loader = VocabularyLoader(ctx.store)
    try:
        report = loader.import_directory(path) if path.is_dir() else loader.import_file(path)
        if enroll is not None:
            for item in report.imported:
                ctx.service.enroll(enroll, item.vocab_id)
    except (FileNotFoundError, ValueError) as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    except StudyError as e:
        _fail(e)

    rprint(
        f"[green]✓[/green] Imported {report.count} vocab items from {report.files} file(s)"
        + (f", skipped {report.skipped}" if report.skipped else "")
    )


# ========================================
# STUDY COMMANDS
# ========================================


@app.command("enroll")
def enroll(
    awesome_id: int = typer.Argument(..., help="Awesome person id"),
    vocab_ids: list[int] = typer.Argument(..., help="Vocab item ids"),
) -> None:
    """Start studying vocab items."""
    ctx = _build_context()
    try:
        for vocab_id in vocab_ids:
            session = ctx.service.enroll(awesome_id, vocab_id)
            rprint(f"[green]✓[/green] vocab {vocab_id} -> vocab study {session.vocab_study_id}")
    except StudyError as e:
        _fail(e)


@app.command("list")
def list_challenges(
    awesome_id: int = typer.Argument(..., help="Awesome person id"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum challenges"),
) -> None:
    """Show the next study list, weakest items first."""
    ctx = _build_context()
    try:
        challenges = ctx.service.get_study_list(awesome_id, limit)
    except StudyError as e:
        _fail(e)

    if not challenges:
        rprint("[yellow]Nothing to study yet.[/yellow] Enroll in some vocab first.")
        return

    table = Table(title=f"Study list for person {awesome_id}")
    table.add_column("Vocab", justify="right")
    table.add_column("Study", justify="right")
    table.add_column("Prompt")
    for challenge in challenges:
        table.add_row(str(challenge.vocab_id), str(challenge.vocab_study_id), challenge.prompt)
    console.print(table)


@app.command("check")
def check(
    vocab_id: int = typer.Argument(..., help="Vocab item id"),
    vocab_study_id: int = typer.Argument(..., help="Vocab study id"),
    entered: str = typer.Argument(..., help="The answer to check"),
) -> None:
    """Check one answer and record the attempt."""
    ctx = _build_context()
    try:
        result = ctx.service.evaluate_response(vocab_id, vocab_study_id, entered)
    except StudyError as e:
        _fail(e)
    rprint(_styled_feedback(result.verdict, result.feedback))


@app.command("stats")
def stats(vocab_study_id: int = typer.Argument(..., help="Vocab study id")) -> None:
    """Show stats for one vocab study."""
    ctx = _build_context()
    try:
        vocab_stats = ctx.service.get_vocab_stats(vocab_study_id)
    except StudyError as e:
        _fail(e)

    table = Table(title=f"Vocab study {vocab_study_id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Vocab", str(vocab_stats.vocab_id))
    table.add_row("Attempts", str(vocab_stats.attempts))
    table.add_row("Correct", str(vocab_stats.correct_attempts))
    table.add_row("Percentage", f"{vocab_stats.percentage_correct:.0%}")
    table.add_row("Strength", f"{vocab_stats.last_change:.2f}")
    table.add_row("Last tested", vocab_stats.last_tested)
    table.add_row("Stage", f"[{vocab_stats.stage.color}]{vocab_stats.stage.display_name}[/]")
    console.print(table)


@app.command("profile")
def profile(awesome_id: int = typer.Argument(..., help="Awesome person id")) -> None:
    """Show a person's progress profile."""
    ctx = _build_context()
    try:
        person = ctx.service.get_awesome_person(awesome_id)
    except StudyError as e:
        _fail(e)

    table = Table(title=person.name or f"Person {awesome_id}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Known", str(person.num_known))
    table.add_row("Correct", str(person.num_correct))
    table.add_row("Incorrect", str(person.num_incorrect))
    table.add_row("Total", f"{person.total_percentage:.0%}")
    table.add_row("Under-exposed", str(person.smallest_vocab))
    for stage, count in person.stage_counts.items():
        table.add_row(stage.title(), str(count))
    console.print(table)


@app.command("study")
def study(
    awesome_id: int = typer.Argument(..., help="Awesome person id"),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Challenges per round"),
    rounds: int = typer.Option(1, "--rounds", "-r", min=1, help="Study lists to work through"),
) -> None:
    """Interactive study session. Type :h for a hint, :q to stop."""
    ctx = _build_context()
    tally = {"answered": 0, "correct": 0}

    try:
        for round_no in range(1, rounds + 1):
            challenges = ctx.service.get_study_list(awesome_id, limit)
            if not challenges:
                rprint("[yellow]Nothing to study yet.[/yellow]")
                break
            if not _run_round(ctx, challenges, round_no, tally):
                break
    except StudyError as e:
        _fail(e)

    logger.info(f"Study session for person {awesome_id}: {tally['correct']}/{tally['answered']} correct")
    rprint(f"\n[bold]Session complete:[/bold] {tally['correct']}/{tally['answered']} correct")


def _run_round(ctx: CLIContext, challenges: list, round_no: int, tally: dict[str, int]) -> bool:
    """Present one study list. Returns False when the learner quits."""
    for challenge in challenges:
        console.print(Panel(challenge.prompt, title=f"Round {round_no}", border_style="cyan"))
        remaining = list(challenge.hints)
        entered = Prompt.ask("Answer (:h for a hint)", default="", show_default=False)
        while entered.strip() in HINT_WORDS:
            if remaining:
                rprint(f"[dim]{remaining.pop(0)}[/dim]")
            else:
                rprint("[yellow]No more hints.[/yellow]")
            entered = Prompt.ask("Answer", default="", show_default=False)
        if entered.strip() in QUIT_WORDS:
            return False

        result = ctx.service.evaluate_response(challenge.vocab_id, challenge.vocab_study_id, entered)
        tally["answered"] += 1
        tally["correct"] += int(result.is_correct)
        rprint(_styled_feedback(result.verdict, result.feedback))
    return True


def _styled_feedback(verdict: Verdict, feedback: str) -> str:
    color = {
        Verdict.CORRECT: "green",
        Verdict.CLOSE: "yellow",
        Verdict.INCORRECT: "red",
    }[verdict]
    return f"[{color}]{feedback}[/{color}]"


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(level="WARNING")
    app()


if __name__ == "__main__":
    main()
