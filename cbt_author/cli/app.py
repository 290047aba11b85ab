"""Typer CLI application for exam authoring."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from cbt_author import __version__
from cbt_author.api.auth import AuthContext
from cbt_author.api.client import CBTClient
from cbt_author.api.errors import SubmissionError
from cbt_author.config.logging_config import configure_logging
from cbt_author.config.settings import get_settings
from cbt_author.export.docx_generator import export_exam_with_separate_answers, export_to_docx
from cbt_author.graph.workflow import run_plan
from cbt_author.models.exam import ExamReview, PresentationType, QuestionType
from cbt_author.models.plan import ExamPlan
from cbt_author.workflow.authoring import ExamAuthoringWorkflow
from cbt_author.workflow.forms import FormState, QuestionForm
from cbt_author.workflow.presenter import DisplayError, ErrorPresenter, Severity
from cbt_author.workflow.sequencer import Step, StepSequencer
from cbt_author.workflow.serialization import resolve_timezone

app = typer.Typer(
    name="cbt-author",
    help="Create exams on the school CBT service",
    add_completion=False,
)

console = Console()


def _client() -> CBTClient:
    return CBTClient.from_settings(get_settings())


def _new_workflow() -> ExamAuthoringWorkflow:
    settings = get_settings()
    return ExamAuthoringWorkflow(_client(), tz=resolve_timezone(settings.timezone))


@app.command()
def login(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Account password"
    ),
) -> None:
    """Sign in and store the token for later commands."""
    settings = get_settings()
    client = CBTClient(settings.api_base_url, timeout=settings.request_timeout)
    try:
        user = client.login(email, password)
    except SubmissionError as e:
        display_error(ErrorPresenter().present(e))
        raise typer.Exit(code=1)

    path = AuthContext(token=user.token).save(settings.token_file)
    console.print(f"[green]✓[/green] Signed in as {user.first_name} {user.last_name} ({user.role})")
    console.print(f"  Token saved to {path}")
    if user.must_change_password:
        console.print("[yellow]Your password must be changed before the account can be used.[/yellow]")


@app.command()
def logout() -> None:
    """Remove the stored token."""
    if AuthContext.clear(get_settings().token_file):
        console.print("[green]✓[/green] Signed out.")
    else:
        console.print("No stored token.")


@app.command()
def campuses() -> None:
    """List campuses."""
    try:
        records = _client().get_campuses()
    except SubmissionError as e:
        display_error(ErrorPresenter().present(e))
        raise typer.Exit(code=1)

    table = Table(title="Campuses", border_style="cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("City", style="white")
    table.add_column("Students", justify="right")
    table.add_column("Teachers", justify="right")
    for campus in records:
        table.add_row(
            campus.id, campus.name, campus.city, str(campus.student_count), str(campus.teacher_count)
        )
    console.print(table)


@app.command()
def classes() -> None:
    """List classes with their arms."""
    try:
        records = _client().get_classes_with_arms()
    except SubmissionError as e:
        display_error(ErrorPresenter().present(e))
        raise typer.Exit(code=1)

    table = Table(title="Classes", border_style="cyan")
    table.add_column("Class ID", style="cyan")
    table.add_column("Class", style="white")
    table.add_column("Campus", style="white")
    table.add_column("Arms (id: name)", style="white")
    for school_class in records:
        arms = ", ".join(f"{arm.arm_id}: {arm.arm_name}" for arm in school_class.arms)
        table.add_row(
            school_class.class_id, school_class.class_name, school_class.campus_name or "", arms
        )
    console.print(table)


@app.command()
def teachers(
    class_id: str = typer.Option(..., "--class-id", "-c", help="Class to list teachers for"),
) -> None:
    """List teachers assigned to a class."""
    try:
        records = _client().get_teachers_by_class(class_id)
    except SubmissionError as e:
        display_error(ErrorPresenter().present(e))
        raise typer.Exit(code=1)

    table = Table(title="Teachers", border_style="cyan")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Email", style="white")
    table.add_column("Subjects", style="white")
    for teacher in records:
        table.add_row(teacher.teacher_id, teacher.full_name, teacher.email or "", ", ".join(teacher.subjects))
    console.print(table)


@app.command()
def create(
    plan_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Exam plan (JSON)"
    ),
    export: bool = typer.Option(
        False, "--export/--no-export", help="Export the created exam to DOCX"
    ),
    output: str = typer.Option("exam", "--output", "-o", help="Base name for exported files"),
) -> None:
    """
    Create a whole exam from a plan file.

    Example:
        cbt-author create first_term.json --export -o first_term
    """
    try:
        plan = ExamPlan.model_validate_json(plan_file.read_text(encoding="utf-8"))
    except PydanticValidationError as e:
        console.print(f"[red]Error:[/red] Invalid exam plan ({plan_file})", style="bold")
        for item in e.errors():
            location = ".".join(str(part) for part in item["loc"])
            console.print(f"  • {location}: {item['msg']}")
        raise typer.Exit(code=1)

    workflow = _new_workflow()
    if not workflow.load_classes():
        # Names are only cosmetic here; the ids in the plan are what get sent
        console.print("[yellow]Could not load class names; continuing with ids only.[/yellow]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(
            f"[cyan]Creating {len(plan.papers)} paper(s), {plan.total_questions} question(s)...",
            total=None,
        )
        final_state = run_plan(plan, workflow)
        progress.update(task, description="[green]Done")

    display_steps(workflow.sequencer)

    if final_state.get("error") is not None:
        display_error(final_state["error"])
        raise typer.Exit(code=1)

    review = final_state["review"]
    display_review(review)
    if export:
        _export(review, output, separate_answers=True)


@app.command()
def wizard(
    export: bool = typer.Option(
        False, "--export/--no-export", help="Export the created exam to DOCX"
    ),
    output: str = typer.Option("exam", "--output", "-o", help="Base name for exported files"),
) -> None:
    """Create an exam interactively, step by step."""
    workflow = _new_workflow()
    if not workflow.load_classes():
        display_error(workflow.error_slot.current)
        raise typer.Exit(code=1)

    # Step 1
    display_steps(workflow.sequencer)
    display_classes(workflow)
    while workflow.current_step == Step.SESSION_ENTRY:
        prompt_session(workflow)
        if not workflow.submit_session():
            _handle_failure(workflow)
    session = workflow.created_session
    console.print(f"\n[green]✓[/green] Exam \"{session.title}\" created ({session.class_name} {session.arm_name})")

    # Step 2
    display_steps(workflow.sequencer)
    while workflow.current_step == Step.PAPER_ENTRY:
        number = len(workflow.added_papers) + 1
        console.print(f"\n[bold]Paper {number} of {session.number_of_papers}[/bold]")
        prompt_form(workflow.paper_form, PAPER_PROMPTS)
        if workflow.submit_paper():
            paper = workflow.added_papers[-1]
            console.print(f"[green]✓[/green] Paper \"{paper.subject_name}\" added")
        else:
            _handle_failure(workflow)

    # Step 3
    display_steps(workflow.sequencer)
    for paper in workflow.added_papers:
        form = workflow.select_paper(paper.id)
        console.print(f"\n[bold]Questions for {paper.subject_name}[/bold] ({paper.presentation_type.label})")
        while typer.confirm("Add a question?", default=True):
            prompt_question(form)
            if workflow.submit_question():
                console.print(f"[green]✓[/green] Question added ({len(workflow.added_questions)} so far)")
            else:
                _handle_failure(workflow)
    workflow.finish_questions()

    # Step 4
    display_steps(workflow.sequencer)
    review = workflow.review()
    display_review(review)
    if export:
        _export(review, output, separate_answers=True)


@app.command()
def info() -> None:
    """Display information about the authoring client."""
    settings = get_settings()
    info_text = f"""
[bold cyan]CBT Exam Author[/bold cyan]
Version: {__version__}

[bold]Authoring steps:[/bold]
  1. Create Exam Session - class, arm, time window, pass mark
  2. Add Exam Papers - one per subject
  3. Add Questions - multiple choice, true/false, short answer, essay
  4. Review & Finalize - summary and DOCX export

[bold]Service:[/bold] {settings.api_base_url}
[bold]Token file:[/bold] {settings.token_file}
    """
    console.print(Panel(info_text, title="CBT Author Info", border_style="cyan"))


# Prompts

SESSION_PROMPTS = [
    ("title", "Exam title"),
    ("description", "Description"),
    ("number_of_papers", "Number of papers"),
    ("total_duration_in_minutes", "Total duration (minutes)"),
    ("pass_mark", "Pass mark (%)"),
    ("start_time", "Start (YYYY-MM-DDTHH:MM, local time)"),
    ("end_time", "End (YYYY-MM-DDTHH:MM, local time)"),
    ("question_type", "Question type (1 MC, 2 T/F, 3 Short, 4 Essay)"),
    ("total_points", "Total points"),
]

PAPER_PROMPTS = [
    ("subject_name", "Subject"),
    ("pass_mark_for_this_paper", "Pass mark (%)"),
    ("total_time_for_this_paper_in_minutes", "Time for this paper (minutes)"),
    (
        "presentation_type",
        "Presentation (1 QuestionPreview, 2 SubjectPreview, 3 MultipleSubjects, 4 Randomized)",
    ),
]


def prompt_form(form: FormState, prompts: list[tuple[str, str]]) -> None:
    """Ask for each field, offering what the form already holds."""
    for name, label in prompts:
        current = form[name]
        value = typer.prompt(label, default="" if current is None else str(current), show_default=True)
        form.set_field(name, value)
        if name == "presentation_type" and form[name] == PresentationType.QUESTION_PREVIEW:
            form.set_field(
                "default_time_per_question_in_minutes",
                typer.prompt(
                    "Time per question (minutes)",
                    default=str(form["default_time_per_question_in_minutes"]),
                ),
            )


def prompt_session(workflow: ExamAuthoringWorkflow) -> None:
    form = workflow.session_form
    form.set_field("class_id", typer.prompt("Class ID", default=form["class_id"] or None))
    arms = workflow.arms_for_selected_class()
    if arms:
        console.print("Arms: " + ", ".join(f"{arm.arm_id} ({arm.arm_name})" for arm in arms))
    form.set_field("arm_id", typer.prompt("Arm ID", default=form["arm_id"] or None))
    prompt_form(form, SESSION_PROMPTS)


def prompt_question(form: QuestionForm) -> None:
    form.set_field(
        "question_type",
        typer.prompt(
            "Question type (1 MC, 2 T/F, 3 Short, 4 Essay)", default=str(form["question_type"])
        ),
    )
    form.set_field("question_text", typer.prompt("Question", default=form["question_text"] or None))
    question_type = form.question_type
    if question_type == QuestionType.MULTIPLE_CHOICE:
        for key in ("a", "b", "c", "d"):
            name = f"option_{key}"
            form.set_field(name, typer.prompt(f"Option {key.upper()}", default=form[name] or None))
        answer_label = "Correct option (A/B/C/D)"
    elif question_type == QuestionType.TRUE_FALSE:
        answer_label = "Correct answer (TRUE/FALSE)"
    else:
        answer_label = "Expected answer"
    answer = typer.prompt(answer_label, default=form["correct_answer"] or None)
    if question_type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
        answer = answer.strip().upper()
    form.set_field("correct_answer", answer)
    form.set_field("points", typer.prompt("Points", default=str(form["points"])))
    if form.times_each_question:
        form.set_field(
            "time_in_minutes", typer.prompt("Time (minutes)", default=str(form["time_in_minutes"]))
        )


def _handle_failure(workflow: ExamAuthoringWorkflow) -> None:
    """Show the error until dismissed; the entered values stay in the form."""
    display_error(workflow.error_slot.current)
    if not typer.confirm("Dismiss and edit the form?", default=True):
        raise typer.Exit(code=1)
    workflow.error_slot.dismiss()


def _export(review: ExamReview, output: str, separate_answers: bool) -> None:
    output_dir = get_settings().output_dir
    console.print("\n[cyan]Exporting to DOCX...[/cyan]")
    try:
        if separate_answers:
            questions_file, answers_file = export_exam_with_separate_answers(
                review, output, output_dir=output_dir
            )
            console.print("\n[green]✓[/green] Exam exported successfully!")
            console.print(f"  Questions: {questions_file}")
            console.print(f"  Answers:   {answers_file}")
        else:
            output_file = export_to_docx(review, f"{output}.docx", output_dir=output_dir)
            console.print(f"\n[green]✓[/green] Exam exported to: {output_file}")
    except OSError as e:
        console.print(f"\n[red]Error during export:[/red] {e}", style="bold")
        raise typer.Exit(code=1)


# Display


def display_error(error: Optional[DisplayError]) -> None:
    """Render an error panel next to the form."""
    if error is None:
        return
    color = "yellow" if error.severity == Severity.WARNING else "red"
    body = error.message
    if error.suggestion:
        body += f"\n\n[bold]Suggestion:[/bold] {error.suggestion}"
    console.print(Panel(body, title=error.title, border_style=color))


def display_steps(sequencer: StepSequencer) -> None:
    """Display the step indicator."""
    parts = []
    for step in sequencer.steps:
        if step.completed:
            parts.append(f"[green]✓ {step.title}[/green]")
        elif step.step == sequencer.current_step:
            parts.append(f"[bold yellow]{step.step}. {step.title}[/bold yellow]")
        else:
            parts.append(f"[dim]{step.step}. {step.title}[/dim]")
    console.print()
    console.print("  →  ".join(parts))


def display_classes(workflow: ExamAuthoringWorkflow) -> None:
    table = Table(title="Classes", border_style="cyan")
    table.add_column("Class ID", style="cyan")
    table.add_column("Class", style="white")
    table.add_column("Arms", style="white")
    for school_class in workflow.classes:
        table.add_row(
            school_class.class_id,
            school_class.class_name,
            ", ".join(arm.arm_name for arm in school_class.arms),
        )
    console.print(table)


def display_review(review: ExamReview) -> None:
    """Display a summary of the created exam."""
    console.print("\n[bold green]Exam Created Successfully![/bold green]")

    table = Table(title="Exam Summary", border_style="green")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Title", review.session.title)
    table.add_row("Exam Session ID", review.session.id)
    if review.session.class_name:
        table.add_row("Class", f"{review.session.class_name} {review.session.arm_name}".strip())
    table.add_row("Papers", str(len(review.papers)))
    table.add_row("Questions", str(review.total_questions))
    table.add_row("Total Points", str(review.total_points))
    console.print()
    console.print(table)

    papers_table = Table(title="Papers", border_style="cyan")
    papers_table.add_column("Subject", style="cyan")
    papers_table.add_column("Mode", style="white")
    papers_table.add_column("Minutes", justify="right")
    papers_table.add_column("Questions", justify="right")
    for paper in review.papers:
        papers_table.add_row(
            paper.subject_name,
            paper.presentation_type.label,
            str(paper.total_time_for_this_paper_in_minutes),
            str(len(review.questions_for(paper.id))),
        )
    console.print()
    console.print(papers_table)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and responses"),
) -> None:
    """
    CBT Exam Author - create exam sessions, papers and questions.
    """
    configure_logging("DEBUG" if verbose else get_settings().log_level)


if __name__ == "__main__":
    app()
