"""
Stepwise: terminal practice CLI.

A Rich terminal interface for parent-guided practice sessions. The parent
reads the prompt, listens to the child, and logs the attempt.

Commands:
- stepwise profiles      - List learner profiles
- stepwise new-profile   - Create a learner profile
- stepwise subjects      - Show available subjects
- stepwise practice      - Run an interactive practice session
- stepwise status        - Show levels and active sessions
- stepwise stats         - Show progress statistics
- stepwise set-size      - Change session size for a subject
- stepwise set-level     - Override the unlocked level for a subject
- stepwise select        - Choose which subjects to practice
"""
from __future__ import annotations

import random
import sys
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from stepwise.config import get_settings
from stepwise.content.catalog import bootstrap_profile, sync_catalog
from stepwise.core.models import LearnerProfile, Outcome
from stepwise.delivery.profile_store import ProfileStore, learner_id_for
from stepwise.study.guidance import Guidance
from stepwise.study.orchestrator import AdvanceStatus
from stepwise.study.practice_service import CardView, PracticeService


# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="stepwise",
    help="Stepwise: adaptive practice sessions for young learners",
    no_args_is_help=True,
)
console = Console()

# Global options, filled in by the callback
state: dict[str, Optional[object]] = {"profile": None, "seed": None}


@app.callback()
def _global_options(
    profile: Optional[str] = typer.Option(
        None,
        "--profile", "-p",
        help="Learner profile to use (defaults to the only profile)",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for replayable session draws",
    ),
) -> None:
    state["profile"] = profile
    state["seed"] = seed


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "correct": "bold green",
    "wrong": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
}

PRACTICE_CHOICES = ["r", "c", "w", "n", "q"]


def _store() -> ProfileStore:
    return ProfileStore(get_settings().profile_dir)


def _service() -> PracticeService:
    seed = state.get("seed")
    rng = random.Random(seed) if seed is not None else random.Random()
    return PracticeService(settings=get_settings(), rng=rng)


def _load_profile(store: ProfileStore, service: PracticeService) -> LearnerProfile:
    """Resolve the --profile option to a profile, syncing new catalog items."""
    name = state.get("profile")
    if name is None:
        profiles = store.list_profiles()
        if len(profiles) != 1:
            console.print("[red]Choose a profile with --profile NAME[/red]")
            if not profiles:
                console.print("Create one first: stepwise new-profile NAME")
            raise typer.Exit(1)
        profile = profiles[0]
    else:
        profile = store.load(str(name))
        if profile is None:
            console.print(f"[red]No profile named {name!r}[/red]")
            raise typer.Exit(1)

    if sync_catalog(profile, service.catalog, service.registry, service.settings):
        store.save(profile)
    return profile


def _require_subject(profile: LearnerProfile, subject: str) -> None:
    if not profile.words_for_subject(subject):
        console.print(f"[red]Unknown subject: {subject}[/red]")
        console.print(f"Available: {', '.join(profile.subjects())}")
        raise typer.Exit(1)


# =============================================================================
# Display Helpers
# =============================================================================

def display_card(service: PracticeService, profile: LearnerProfile, card: CardView) -> None:
    """Display the current card."""
    session = profile.sessions[card.session_id]
    subject = service.registry.get(card.subject_code)
    icon = subject.icon if subject else ""
    level = profile.settings[card.subject_code].unlocked_level
    header = (
        f"{icon} {service.registry.display_name(card.subject_code)}  |  "
        f"Card {session.current_index + 1}/{session.size}  |  Level {level}"
    )

    content = f"[dim]{card.prompt_label}[/dim]\n\n[bold]{card.question}[/bold]"
    if card.show_answer and card.answer:
        content += f"\n\n[cyan]{card.answer_label}:[/cyan] {card.answer}"
    if card.revealed and card.notes:
        content += f"\n[dim]{card.notes}[/dim]"

    bar = "█" * (card.mastery_progress // 10) + "░" * (10 - card.mastery_progress // 10)
    state_color = card.mastery_state.color
    content += (
        f"\n\n[{state_color}]{card.mastery_state.emoji} {card.mastery_state.display_name}"
        f"[/{state_color}]  {bar} {card.mastery_progress}%"
    )

    console.print(Panel(content, title=header, title_align="left", border_style="cyan", padding=(1, 2)))


def display_guidance(guidance: Optional[Guidance]) -> None:
    if guidance is None:
        return
    color = guidance.urgency.color
    content = f"{guidance.urgency.emoji} [{color}]{guidance.message}[/{color}]"
    if guidance.tip:
        content += f"\n[dim]Tip: {guidance.tip}[/dim]"
    console.print(Panel(content, border_style=color))


def _display_session_summary(service: PracticeService, profile: LearnerProfile, session_id: str) -> None:
    stats = service.session_stats(profile, session_id)
    if stats is None:
        return
    console.print(Panel(
        f"Questions: {stats.total_questions}\n"
        f"Mastered this session: {stats.mastered_in_session}\n"
        f"Still practicing: {stats.practiced_in_session}\n"
        f"Yet to try: {stats.yet_to_try}\n"
        f"Mastered overall: {stats.currently_mastered} "
        f"(started with {stats.initially_mastered})",
        title="Session",
        border_style="green",
    ))


# =============================================================================
# Commands
# =============================================================================

@app.command()
def profiles() -> None:
    """List learner profiles."""
    store = _store()
    found = store.list_profiles()
    if not found:
        console.print("[yellow]No profiles yet.[/yellow] Create one: stepwise new-profile NAME")
        return

    table = Table(title="Profiles")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Subjects")
    table.add_column("Words", justify="right")
    for profile in found:
        table.add_row(
            profile.learner_id,
            profile.display_name,
            ", ".join(profile.selected_subjects),
            str(len(profile.words)),
        )
    console.print(table)


@app.command("new-profile")
def new_profile(name: str = typer.Argument(..., help="Learner's display name")) -> None:
    """Create a learner profile with every catalog item at step 0."""
    store = _store()
    learner_id = learner_id_for(name)
    if store.exists(learner_id):
        console.print(f"[red]Profile {learner_id!r} already exists[/red]")
        raise typer.Exit(1)

    service = _service()
    profile = bootstrap_profile(
        learner_id, name, service.catalog, service.registry, service.settings
    )
    path = store.save(profile)
    console.print(f"[green]Created profile[/green] [bold]{name}[/bold] ({learner_id})")
    console.print(f"[dim]{len(profile.words)} words across {len(profile.settings)} subjects → {path}[/dim]")


@app.command()
def subjects() -> None:
    """Show available subjects."""
    service = _service()
    store = _store()
    profile = None
    if state.get("profile") is not None or len(store.list_profiles()) == 1:
        profile = _load_profile(store, service)

    table = Table(title="Subjects")
    table.add_column("Code", style="dim")
    table.add_column("Subject", style="bold")
    table.add_column("Items", justify="right")
    table.add_column("Levels", justify="right")
    table.add_column("Revision")
    table.add_column("Selected")
    for code in service.catalog.subjects():
        subject = service.registry.get(code)
        levels = service.catalog.levels(code)
        selected = profile is not None and code in profile.selected_subjects
        table.add_row(
            code,
            f"{subject.icon if subject else ''} {service.registry.display_name(code)}",
            str(len(service.catalog.items(code))),
            f"{levels[0]}-{levels[-1]}" if levels else "-",
            "yes" if service.registry.supports_revision(code) else "no",
            "[green]✓[/green]" if selected else "",
        )
    console.print(table)


@app.command()
def practice(subject: str = typer.Argument(..., help="Subject code, e.g. mathtables")) -> None:
    """
    Run an interactive practice session.

    Keys: r = reveal answer, c = correct, w = wrong, n = next card, q = quit.
    """
    store = _store()
    service = _service()
    profile = _load_profile(store, service)
    _require_subject(profile, subject)

    session = service.ensure_active_session(profile, subject)
    if session is None:
        console.print("[green]Nothing left to practice here. Check back for new questions![/green]")
        store.save(profile)
        raise typer.Exit(0)
    store.save(profile)

    subject_profile = service.registry.get(subject)
    if subject_profile:
        console.print(f"\n[dim]{subject_profile.parent_instruction}[/dim]")

    try:
        while True:
            card = service.current_card(profile, session.id)
            if card is None:
                break
            console.print()
            display_card(service, profile, card)
            if card.last_outcome is None:
                display_guidance(
                    service.session_guidance(profile, session.id)
                    or service.word_guidance(profile, card.word_id)
                )

            choice = Prompt.ask(
                "[dim]r reveal · c correct · w wrong · n next · q quit[/dim]",
                choices=PRACTICE_CHOICES,
                default="n",
                show_choices=False,
            )

            if choice == "q":
                break
            if choice == "r":
                service.reveal_answer(profile, session.id, card.word_id)
            elif choice in ("c", "w"):
                outcome = Outcome.CORRECT if choice == "c" else Outcome.WRONG
                service.record_attempt(profile, session.id, card.word_id, outcome)
                style = STYLES["correct"] if outcome is Outcome.CORRECT else STYLES["wrong"]
                console.print(f"[{style}]{'Correct!' if choice == 'c' else 'Not yet'}[/{style}]")
                display_guidance(service.word_guidance(profile, card.word_id))
            else:
                result = service.advance(profile, session.id)
                if result.status is AdvanceStatus.ROTATED:
                    _display_session_summary(service, profile, result.previous_session_id)
                    if result.level_unlocked:
                        level = profile.settings[subject].unlocked_level
                        console.print(f"[bold green]Level {level} unlocked![/bold green]")
                    session = profile.sessions[result.session_id]
                    display_guidance(service.session_guidance(profile, session.id))
                elif result.status is AdvanceStatus.NO_MORE_CONTENT:
                    _display_session_summary(service, profile, session.id)
                    display_guidance(service.session_guidance(profile, session.id))
                    console.print("[green]All done for now![/green]")
                    store.save(profile)
                    break

            store.save(profile)

    except (KeyboardInterrupt, EOFError):
        console.print("\n\n[yellow]Session paused.[/yellow]")

    store.save(profile)


@app.command()
def status() -> None:
    """Show levels, session sizes and active sessions."""
    store = _store()
    service = _service()
    profile = _load_profile(store, service)

    table = Table(title=f"{profile.display_name}'s progress")
    table.add_column("Subject", style="bold")
    table.add_column("Level", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Mastered", justify="right")
    table.add_column("Active session")
    for subject in profile.subjects():
        settings = profile.settings.get(subject)
        stats = service.progress_stats(profile, subject)
        active = profile.active_session(subject)
        progress = service.session_progress(profile, active.id) if active else None
        table.add_row(
            service.registry.display_name(subject),
            str(settings.unlocked_level if settings else 1),
            str(settings.session_size if settings else service.settings.default_session_size),
            f"{stats.mastered_words}/{stats.total_words}",
            f"{progress.completed_count}/{progress.total_count}" if progress else "-",
        )
    console.print(table)


@app.command()
def stats(subject: Optional[str] = typer.Argument(None, help="Limit to one subject")) -> None:
    """Show progress statistics."""
    store = _store()
    service = _service()
    profile = _load_profile(store, service)
    if subject is not None:
        _require_subject(profile, subject)

    progress = service.progress_stats(profile, subject)

    console.print("\n[bold cyan]Progress Statistics[/bold cyan]")
    console.print("=" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Scope", service.registry.display_name(subject) if subject else "All subjects")
    table.add_row("Mastered", f"{progress.mastered_words}/{progress.total_words} ({progress.mastered_percent:.0f}%)")
    table.add_row("Practicing", str(progress.practicing_words))
    table.add_row("Not started", str(progress.new_words))
    table.add_row("Turnarounds", str(progress.turnaround_count))
    table.add_row("Current streak", f"{progress.current_streak} days")
    table.add_row("Longest streak", f"{progress.longest_streak} days")
    console.print(table)


@app.command("set-size")
def set_size(
    subject: str = typer.Argument(..., help="Subject code"),
    size: int = typer.Argument(..., help="Words per session"),
) -> None:
    """Change how many words new sessions draw."""
    store = _store()
    service = _service()
    profile = _load_profile(store, service)
    _require_subject(profile, subject)

    stored = service.set_session_size(profile, subject, size)
    store.save(profile)
    console.print(f"[green]{service.registry.display_name(subject)} session size: {stored}[/green]")


@app.command("set-level")
def set_level(
    subject: str = typer.Argument(..., help="Subject code"),
    level: int = typer.Argument(..., help="Unlocked complexity level"),
) -> None:
    """Override the unlocked complexity level."""
    store = _store()
    service = _service()
    profile = _load_profile(store, service)
    _require_subject(profile, subject)

    stored = service.set_complexity_level(profile, subject, level)
    store.save(profile)
    console.print(f"[green]{service.registry.display_name(subject)} level: {stored}[/green]")


@app.command()
def select(subjects: list[str] = typer.Argument(..., help="Subject codes to practice")) -> None:
    """Choose which subjects the learner practices."""
    store = _store()
    service = _service()
    profile = _load_profile(store, service)

    selected = service.set_subject_selection(profile, subjects)
    store.save(profile)
    if selected:
        console.print(f"[green]Selected:[/green] {', '.join(selected)}")
    else:
        console.print("[yellow]No known subjects selected[/yellow]")


def main() -> None:
    """CLI entry point."""
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        level=get_settings().log_level,
        format="<level>{message}</level>",
    )

    app()


if __name__ == "__main__":
    main()
