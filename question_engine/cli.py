"""
qengine - inspect the question-style engine from the terminal.

Commands:
    qengine overview <exam>       - Profile, target mix, and template inheritance
    qengine distribution <exam>   - Simulate a session and show distribution health
    qengine patterns <exam>       - Recommended styles as a session progresses
    qengine performance           - Preload templates and show cache metrics
    qengine validate "<question>" - Validate a question against a style
"""
from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import get_settings
from question_engine.core.errors import ProfileLookupError
from question_engine.core.logging import configure_logging
from question_engine.distribution.counts import StyleCounts
from question_engine.distribution.tracker import generate_session_id
from question_engine.engine import QuestionStyleEngine
from question_engine.profiles.models import STYLE_PRIORITY, QuestionStyle
from question_engine.validation.validator import Severity

console = Console()

app = typer.Typer(
    name="qengine",
    help="Adaptive question-style distribution and validation engine",
    no_args_is_help=True,
)

SEVERITY_STYLES = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "dim",
}

# Counts a fresh objective is shown after in `patterns`
PATTERN_STEPS: list[tuple[str, dict[str, int]]] = [
    ("first question", {}),
    ("after 1 direct", {"direct": 1}),
    ("after 1 direct + 1 scenario", {"direct": 1, "scenario": 1}),
]


def _get_engine() -> QuestionStyleEngine:
    return QuestionStyleEngine.create()


def _fail(message: str) -> None:
    rprint(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)


def _format_bar(percent: float, width: int = 20) -> str:
    filled = int(round(percent / 100 * width))
    return "#" * filled + "-" * (width - filled)


def _health_color(score: int) -> str:
    if score >= 85:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Adaptive question-style distribution and validation engine."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


@app.command("overview")
def overview(exam_id: Annotated[str, typer.Argument(help="Exam profile id, e.g. cfa-l1")]) -> None:
    """Show an exam profile, its target style mix, and its template family."""
    engine = _get_engine()
    try:
        profile = engine.registry.get(exam_id)
    except ProfileLookupError as e:
        _fail(str(e))

    target = engine.selector.resolver.for_exam(exam_id)
    tree = engine.cache.get_inheritance_tree(exam_id)

    header = Text()
    header.append(f"{profile.name}", style="bold")
    header.append(f"  ({profile.provider})\n" if profile.provider else "\n")
    header.append(
        f"{profile.constraints.total_questions} questions, {profile.constraints.time_minutes} min, "
        f"{profile.constraints.option_count} options, pass {profile.constraints.passing_score:g}%\n"
    )
    header.append("Target mix: ", style="cyan")
    header.append(", ".join(f"{style} {pct:g}%" for style, pct in target.as_percentages().items()))
    console.print(Panel(header, title=f"[bold]{exam_id}[/bold]", border_style="blue"))

    table = Table(title="Objectives")
    table.add_column("Objective", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Level")
    table.add_column("Difficulty")
    table.add_column("Forbidden styles")
    for objective in profile.objectives:
        table.add_row(
            objective.id,
            f"{objective.weight:g}%",
            objective.level.value,
            objective.difficulty.value,
            ", ".join(sorted(s.value for s in objective.forbidden_styles)) or "-",
        )
    console.print(table)

    family = tree.family_name or "standalone"
    rprint(f"\n[bold]Template family:[/bold] {family} [dim]({tree.family_key})[/dim]")
    if tree.member_exam_ids:
        rprint(f"  Members: {', '.join(tree.member_exam_ids)}")
    for item in tree.inherited_customizations:
        rprint(f"  - {item}")


@app.command("distribution")
def distribution(
    exam_id: Annotated[str, typer.Argument(help="Exam profile id")],
    per_objective: Annotated[int, typer.Option("--per-objective", "-n", min=1, help="Questions per objective")] = 10,
    objectives: Annotated[int, typer.Option("--objectives", "-k", min=1, help="Number of objectives to simulate")] = 3,
) -> None:
    """Simulate select + record for a session and report distribution health."""
    engine = _get_engine()
    try:
        profile = engine.registry.get(exam_id)
    except ProfileLookupError as e:
        _fail(str(e))

    session_id = generate_session_id()
    for objective in profile.objectives[:objectives]:
        for _ in range(per_objective):
            decision = engine.next_style(session_id, exam_id, objective.id, with_template=False)
            engine.record(session_id, exam_id, objective.id, decision.style)

    summary = engine.summary(session_id)
    health = engine.health(session_id, exam_id)
    if summary is None:
        rprint("[yellow]No questions simulated[/yellow]")
        return

    table = Table(title=f"Style distribution - {summary.total_questions} questions")
    table.add_column("Style", style="cyan")
    table.add_column("Observed", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("")
    for style in STYLE_PRIORITY:
        observed = summary.percentages[style]
        table.add_row(style.value, f"{observed:.1f}%", f"{summary.target[style]:.1f}%", _format_bar(observed))
    console.print(table)

    per_obj = Table(title="Per objective")
    per_obj.add_column("Objective", style="cyan")
    for style in STYLE_PRIORITY:
        per_obj.add_column(style.value, justify="right")
    for bucket in summary.objectives:
        per_obj.add_row(bucket.objective_id, *(str(bucket.counts.get(style)) for style in STYLE_PRIORITY))
    console.print(per_obj)

    color = _health_color(health.overall_health)
    rprint(f"\n[bold]Health:[/bold] [{color}]{health.overall_health}/100[/{color}]")
    for recommendation in health.recommendations:
        rprint(f"  [yellow]-[/yellow] {recommendation}")


@app.command("patterns")
def patterns(
    exam_id: Annotated[str, typer.Argument(help="Exam profile id")],
    objectives: Annotated[int, typer.Option("--objectives", "-k", min=1, help="Number of objectives to show")] = 3,
) -> None:
    """Show which style each objective would get as a session progresses."""
    engine = _get_engine()
    try:
        profile = engine.registry.get(exam_id)
    except ProfileLookupError as e:
        _fail(str(e))

    table = Table(title=f"Recommended styles - {exam_id}")
    table.add_column("Objective", style="cyan")
    table.add_column("Level")
    for label, _ in PATTERN_STEPS:
        table.add_column(label)

    for objective in profile.objectives[:objectives]:
        picks = [
            engine.selector.select_style(exam_id, objective, StyleCounts.from_mapping(counts), index).value
            for index, (_, counts) in enumerate(PATTERN_STEPS)
        ]
        table.add_row(objective.id, f"{objective.level.value}/{objective.difficulty.value}", *picks)
    console.print(table)


@app.command("performance")
def performance(
    exam_id: Annotated[str, typer.Option("--exam", "-e", help="Exam to preload")] = "cfa-l1",
) -> None:
    """Preload an exam's templates and print cache metrics."""
    engine = _get_engine()
    try:
        profile = engine.registry.get(exam_id)
    except ProfileLookupError as e:
        _fail(str(e))

    created = engine.cache.preload_exam_templates(profile)
    for objective in profile.objectives:
        engine.cache.get_optimized_template(exam_id, QuestionStyle.DIRECT, objective)

    metrics = engine.cache.get_performance_metrics()
    rprint(f"Preloaded [bold]{created}[/bold] templates for {exam_id}")

    table = Table(title="Template cache")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Cache size", str(metrics.cache_size))
    table.add_row("Hits", str(metrics.hits))
    table.add_row("Misses", str(metrics.misses))
    table.add_row("Hit rate", f"{metrics.hit_rate:.1f}%")
    table.add_row("Synthesized", str(metrics.synthesized))
    console.print(table)

    for key in metrics.most_used_templates:
        rprint(f"  [dim]{key}[/dim]")
    for recommendation in metrics.recommendations:
        rprint(f"  [yellow]-[/yellow] {recommendation}")


@app.command("validate")
def validate(
    question: Annotated[str, typer.Argument(help="Question text")],
    style: Annotated[QuestionStyle, typer.Option("--style", "-s", help="Intended style")] = QuestionStyle.DIRECT,
    exam_id: Annotated[str, typer.Option("--exam", "-e", help="Exam profile id")] = "cfa-l1",
    objective_id: Annotated[Optional[str], typer.Option("--objective", "-o", help="Objective id")] = None,
    options: Annotated[Optional[list[str]], typer.Option("--option", help="Answer option (repeatable)")] = None,
    correct: Annotated[Optional[int], typer.Option("--correct", help="Index of the correct option")] = None,
) -> None:
    """Validate a question against its intended style."""
    engine = _get_engine()
    payload = {"question": question, "options": options or [], "correct": correct}
    try:
        verdict = engine.validate(payload, style, exam_id, objective_id)
    except ProfileLookupError as e:
        _fail(str(e))

    color = "green" if verdict.is_valid else "red"
    status = "VALID" if verdict.is_valid else "INVALID"
    console.print(Panel(
        Text(question),
        title=f"[{color}]{status}[/{color}] {style.value} - score {verdict.score}/100",
        border_style=color,
    ))

    if verdict.issues:
        table = Table(title="Issues")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Issue")
        table.add_column("Suggestion", style="green")
        for issue, suggestion in zip(verdict.issues, verdict.suggestions):
            sev = SEVERITY_STYLES[issue.severity]
            table.add_row(f"[{sev}]{issue.severity.value}[/{sev}]", issue.category.value, issue.description, suggestion)
        console.print(table)


def main() -> None:
    """Entry point for the qengine console script."""
    app()


if __name__ == "__main__":
    main()
