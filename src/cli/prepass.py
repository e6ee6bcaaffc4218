"""Terminal front-end for Prepass: analyze notes, review cards, take quizzes."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from src.application_services.study.study_service import StudyService
from src.core.database import DatabaseManager
from src.core.flashcard_session import FlashcardSession
from src.core.models import QuizQuestion, Strength
from src.core.quiz_session import QuizSession
from src.core.scoring import pass_status
from src.core.settings import Settings, get_settings, has_gemini_config
from src.domain.content.models.analysis_models import AnalysisRequest
from src.domain.shared.services import InputError, PrepassError, ServiceError
from src.infrastructure.messaging.event_bus import DomainEvent, EventBus
from src.infrastructure.processors.upload_processor import UploadProcessor

console = Console()
logger = logging.getLogger(__name__)

OPTION_LABELS = "ABCD"
GRADE_KEYS = {"1": Strength.WEAK, "2": Strength.OKAY, "3": Strength.STRONG}
STRENGTH_STYLES = {
    Strength.WEAK: "red",
    Strength.OKAY: "yellow",
    Strength.STRONG: "green",
}


def _configure_logging(settings: Settings, verbose: bool) -> None:
    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True)]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )


def _log_event(event: DomainEvent) -> None:
    logger.debug(f"{event.event_name}: {event.payload()}")


def _meter(percentage: int) -> Table:
    """Pass meter: bar, percentage and readiness label on one row."""
    grid = Table.grid(padding=(0, 1))
    grid.add_row(
        ProgressBar(total=100, completed=percentage, width=30),
        f"[bold]{percentage}%[/bold]",
        f"[dim]{pass_status(percentage)}[/dim]",
    )
    return grid


def _fail(error: PrepassError) -> None:
    console.print(f"[red]❌ {error.user_message}[/red]")
    sys.exit(1)


@click.group()
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite database file")
@click.option("--user", "user_id", type=str, help="User the study material belongs to")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.version_option(version="0.1.0", prog_name="prepass")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, user_id: str | None, verbose: bool) -> None:
    """Prepass - turn your notes into flashcards and quizzes and track how ready you are."""
    settings = get_settings()
    _configure_logging(settings, verbose)

    try:
        db_manager = DatabaseManager(db_path or settings.database_path)
        event_bus = EventBus()
        event_bus.subscribe(DomainEvent, _log_event)
        service = StudyService(
            db_manager,
            event_bus,
            user_id or settings.user_id,
            settings=settings,
        )
        service.load()
    except PrepassError as e:
        _fail(e)

    ctx.obj = service


@cli.command()
@click.option("--text", "text", type=str, help="Notes to analyze")
@click.option(
    "--text-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read notes from a text file",
)
@click.argument("files", nargs=-1, type=click.Path(path_type=Path))
@click.pass_obj
def analyze(service: StudyService, text: str | None, text_file: Path | None, files: tuple[Path, ...]) -> None:
    """Generate flashcards, quizzes and important points from notes.

    FILES may be images or PDFs of your notes.
    """
    if text_file is not None:
        try:
            file_text = text_file.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError):
            _fail(InputError(f"Could not read {text_file.name} as UTF-8 text"))
        text = "\n\n".join(filter(None, [text, file_text]))

    batch = UploadProcessor(service.settings.max_upload_bytes).process(files)
    for error in batch.errors:
        console.print(f"[yellow]⚠️  {error.user_message}[/yellow]")

    request = AnalysisRequest(text=text, images=batch.images, pdfs=batch.pdfs)
    if not request.has_content:
        _fail(InputError())
    if not has_gemini_config(service.settings):
        _fail(ServiceError("AI service is not configured. Set GEMINI_API_KEY or enable Vertex AI."))

    try:
        with console.status("[cyan]Generating study material...[/cyan]"):
            summary = asyncio.run(service.generate_from_notes(request))
    except PrepassError as e:
        _fail(e)

    console.print(
        f"[green]✅ Added {summary.flashcards_added} flashcards, "
        f"{summary.quizzes_added} quiz questions and "
        f"{summary.points_added} important points[/green]"
    )
    if summary.summary:
        console.print(Panel(summary.summary, title="Summary", border_style="blue"))


@cli.command()
@click.pass_obj
def dashboard(service: StudyService) -> None:
    """Show pass readiness and today's essentials."""
    stats = service.dashboard()

    console.print("\n[bold blue]📊 Dashboard[/bold blue]")
    if stats.has_data:
        console.print(_meter(stats.pass_percentage))
        if stats.below_target:
            console.print(
                f"[yellow]Master about {stats.cards_needed_for()} more cards to reach "
                f"{stats.target_percentage}%[/yellow]"
            )
    else:
        console.print(f"Pass probability: [dim]{stats.pass_display}[/dim]")

    table = Table(title="Today's Essentials")
    table.add_column("Stat", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("🔥 Streak", f"{stats.streak_days} days")
    table.add_row("🧠 Flashcards", str(stats.flashcards_studied))
    table.add_row("🎯 Weak cards", str(stats.weak_cards))
    table.add_row("⏱️  Study time", f"{stats.study_minutes}m")
    table.add_row("❓ Quiz questions", str(stats.quizzes_completed))
    table.add_row("📌 Important points", str(stats.important_points))
    console.print(table)

    if stats.next_action == "notes":
        console.print("[blue]Add some notes with 'prepass analyze' to get started.[/blue]")


@cli.command()
@click.pass_obj
def points(service: StudyService) -> None:
    """List the important points extracted from your notes."""
    if not service.important_points:
        console.print("[yellow]No important points yet.[/yellow]")
        return

    for number, point in enumerate(service.important_points, start=1):
        console.print(f"[cyan]{number}.[/cyan] {point}")


def _show_card(session: FlashcardSession) -> None:
    card = session.current_card
    if card is None:
        return
    side, text = ("Back", card.back) if session.is_flipped else ("Front", card.front)
    style = STRENGTH_STYLES[card.strength]
    console.print(
        Panel(
            text,
            title=f"{session.position} · {side}",
            subtitle=f"[{style}]{card.strength.value}[/{style}]",
        )
    )


@cli.command()
@click.pass_obj
def flashcards(service: StudyService) -> None:
    """Review flashcards and grade how well you know each one."""
    session = service.start_flashcard_session()
    if session.is_empty:
        console.print("[yellow]No flashcards yet. Add notes with 'prepass analyze'.[/yellow]")
        return

    help_text = "[f]lip [n]ext [p]rev 1=weak 2=okay 3=strong [s]huffle [r]estart [q]uit"
    while True:
        console.print(_meter(session.pass_percentage))
        _show_card(session)
        action = click.prompt(
            help_text,
            type=click.Choice(["f", "n", "p", "1", "2", "3", "s", "r", "q"]),
            show_choices=False,
        )
        if action == "q":
            break
        if action in GRADE_KEYS:
            try:
                session.grade_current(GRADE_KEYS[action])
            except PrepassError as e:
                # Grade was rolled back; keep reviewing
                console.print(f"[red]Failed to update flashcard: {e.user_message}[/red]")
            continue

        {
            "f": session.flip,
            "n": session.next,
            "p": session.previous,
            "s": session.shuffle,
            "r": session.restart,
        }[action]()


def _show_question(session: QuizSession, question: QuizQuestion) -> None:
    console.print(f"\n[bold]{session.position}[/bold]  ({session.progress_percentage}% done)")
    console.print(f"[bold cyan]{question.question}[/bold cyan]")
    for label, option in zip(OPTION_LABELS, question.options, strict=True):
        console.print(f"  {label}. {option}")


@cli.command()
@click.pass_obj
def quiz(service: StudyService) -> None:
    """Take a multiple-choice quiz."""
    session = service.start_quiz_session()
    if session.is_empty:
        console.print("[yellow]No quiz questions yet. Add notes with 'prepass analyze'.[/yellow]")
        return

    while True:
        while not session.is_complete:
            question = session.current_question
            if question is None:
                break
            _show_question(session, question)
            choice = click.prompt(
                "Your answer",
                type=click.Choice(list(OPTION_LABELS), case_sensitive=False),
            )
            is_correct = session.submit_answer(OPTION_LABELS.index(choice.upper()))
            if is_correct:
                console.print("[green]✅ Correct![/green]")
            else:
                correct_label = OPTION_LABELS[question.correct_index]
                console.print(
                    f"[red]❌ Incorrect. Answer: {correct_label}. "
                    f"{question.correct_option}[/red]"
                )
            session.advance()

        console.print(
            f"\n[bold]🏆 You scored {session.correct_count} out of {session.total}[/bold]"
        )
        console.print(_meter(session.percentage))
        if not click.confirm("Try again?", default=False):
            break
        session.restart()


@cli.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def reset(service: StudyService, yes: bool) -> None:
    """Delete all flashcards, quizzes and important points."""
    console.print("[yellow]This will delete ALL your study material![/yellow]")
    if not yes and not click.confirm("Are you sure you want to continue?"):
        console.print("[blue]Reset cancelled.[/blue]")
        return

    try:
        deleted = asyncio.run(service.delete_all_data())
    except PrepassError as e:
        _fail(e)

    console.print(
        f"[green]✅ All data deleted successfully "
        f"({sum(deleted.values())} records)[/green]"
    )


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
