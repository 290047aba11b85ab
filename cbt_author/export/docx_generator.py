"""DOCX export of an authored exam for the review step."""

from datetime import datetime
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from cbt_author.models.exam import ExamPaper, ExamReview, Question, QuestionType

HEADING_COLOR = RGBColor(0, 51, 102)
MUTED_COLOR = RGBColor(128, 128, 128)
CORRECT_COLOR = RGBColor(0, 128, 0)


def ensure_output_directory(output_dir: str = "output") -> Path:
    """
    Ensure the output directory exists.

    Args:
        output_dir: Directory path to create

    Returns:
        Path object for the output directory
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def generate_timestamped_filename(base_name: str, extension: str = "docx") -> str:
    """
    Generate a filename with timestamp.

    Args:
        base_name: Base name for the file; any directory part is dropped
        extension: File extension (without dot)

    Returns:
        Filename with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{Path(base_name).name}_{timestamp}.{extension}"


def export_to_docx(
    review: ExamReview,
    output_path: str,
    include_answers: bool = False,
    use_output_dir: bool = True,
    output_dir: str = "output",
) -> str:
    """
    Export an authored exam as a printable question paper.

    Args:
        review: What the authoring run created
        output_path: Target path; only its stem is used when use_output_dir is True
        include_answers: Mark correct answers and append an answer key
        use_output_dir: Save into output_dir under a timestamped name
        output_dir: Directory to save files in

    Returns:
        Path to the created DOCX file
    """
    if use_output_dir:
        output_dir_path = ensure_output_directory(output_dir)
        output_path = str(output_dir_path / generate_timestamped_filename(Path(output_path).stem))

    doc = Document()
    setup_document_styles(doc)

    session = review.session
    title = doc.add_heading(session.title, level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    if session.class_name:
        class_para = doc.add_paragraph(f"{session.class_name} {session.arm_name}".strip())
        class_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        class_para.runs[0].italic = True

    info_para = doc.add_paragraph()
    info_para.add_run(f"Papers: {len(review.papers)}").bold = True
    info_para.add_run("  |  ")
    info_para.add_run(f"Questions: {review.total_questions}").bold = True
    info_para.add_run("  |  ")
    info_para.add_run(f"Total Points: {review.total_points}").bold = True
    info_para.alignment = WD_ALIGN_PARAGRAPH.CENTER

    date_para = doc.add_paragraph(f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    date_para.runs[0].font.size = Pt(9)
    date_para.runs[0].font.color.rgb = MUTED_COLOR

    for number, paper in enumerate(review.papers, 1):
        doc.add_page_break()
        add_paper_to_document(
            doc, number, paper, review.questions_for(paper.id), include_answers
        )

    if include_answers:
        doc.add_page_break()
        add_answer_key(doc, review)

    doc.save(output_path)
    return output_path


def setup_document_styles(doc: Document) -> None:
    """
    Set up document-wide styles.

    Args:
        doc: Document to configure
    """
    font = doc.styles["Normal"].font
    font.name = "Calibri"
    font.size = Pt(11)

    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


def add_paper_to_document(
    doc: Document,
    number: int,
    paper: ExamPaper,
    questions: list[Question],
    include_answers: bool = False,
) -> None:
    """
    Add one exam paper and its questions.

    Args:
        doc: Document to add to
        number: Paper sequence number
        paper: The paper
        questions: Questions added to this paper
        include_answers: Mark correct answers
    """
    heading = doc.add_heading(f"Paper {number}: {paper.subject_name}", level=1)
    heading.runs[0].font.color.rgb = HEADING_COLOR

    info_para = doc.add_paragraph()
    info_para.add_run(f"Time: {paper.total_time_for_this_paper_in_minutes} minutes").italic = True
    info_para.add_run("  |  ")
    info_para.add_run(f"Pass mark: {paper.pass_mark_for_this_paper}%").italic = True
    info_para.add_run("  |  ")
    info_para.add_run(f"Mode: {paper.presentation_type.label}").italic = True

    if not questions:
        empty = doc.add_paragraph("No questions were added to this paper.")
        empty.runs[0].italic = True
        return

    doc.add_paragraph()

    for i, question in enumerate(questions, 1):
        q_para = doc.add_paragraph()
        q_run = q_para.add_run(f"Q{i}. ")
        q_run.bold = True
        q_run.font.size = Pt(12)
        q_para.add_run(question.question_text)

        meta = f"  {question.question_type.label}  |  {question.points} points"
        if question.time_in_minutes:
            meta += f"  |  {question.time_in_minutes} min"
        meta_run = doc.add_paragraph().add_run(meta)
        meta_run.font.size = Pt(9)
        meta_run.italic = True

        if question.question_type == QuestionType.MULTIPLE_CHOICE:
            for key, text in question.options.items():
                opt_para = doc.add_paragraph(f"   {key}. {text}")
                opt_para.paragraph_format.left_indent = Inches(0.5)
                if include_answers and key == question.correct_answer:
                    opt_para.runs[0].bold = True
                    opt_para.runs[0].font.color.rgb = CORRECT_COLOR
        elif question.question_type == QuestionType.TRUE_FALSE:
            for key in ("TRUE", "FALSE"):
                opt_para = doc.add_paragraph(f"   {key.capitalize()}")
                opt_para.paragraph_format.left_indent = Inches(0.5)
                if include_answers and key == question.correct_answer:
                    opt_para.runs[0].bold = True
                    opt_para.runs[0].font.color.rgb = CORRECT_COLOR
        else:
            lines = 8 if question.question_type == QuestionType.ESSAY else 2
            for _ in range(lines):
                doc.add_paragraph("_" * 70)

        doc.add_paragraph()


def answer_text(question: Question) -> str:
    """Correct answer as shown in the answer key."""
    if question.question_type == QuestionType.MULTIPLE_CHOICE:
        return f"{question.correct_answer} - {question.options[question.correct_answer]}"
    return question.correct_answer


def add_answer_key(doc: Document, review: ExamReview) -> None:
    """
    Add an answer key section, one table per paper.

    Args:
        doc: Document to add to
        review: The authored exam
    """
    header = doc.add_heading("Answer Key", level=1)
    header.alignment = WD_ALIGN_PARAGRAPH.CENTER
    header.runs[0].font.color.rgb = HEADING_COLOR

    for number, paper in enumerate(review.papers, 1):
        doc.add_heading(f"Paper {number}: {paper.subject_name}", level=2)

        table = doc.add_table(rows=1, cols=3)
        table.style = "Light Grid Accent 1"

        header_cells = table.rows[0].cells
        header_cells[0].text = "Q#"
        header_cells[1].text = "Answer"
        header_cells[2].text = "Points"
        for cell in header_cells:
            for paragraph in cell.paragraphs:
                for run in paragraph.runs:
                    run.bold = True

        for i, question in enumerate(review.questions_for(paper.id), 1):
            row_cells = table.add_row().cells
            row_cells[0].text = str(i)
            row_cells[1].text = answer_text(question)
            row_cells[2].text = str(question.points)

        doc.add_paragraph()


def generate_answer_key(review: ExamReview, output_path: str) -> str:
    """
    Generate a separate answer key document.

    Args:
        review: The authored exam
        output_path: Path where the answer key should be saved

    Returns:
        Path to the created answer key file
    """
    doc = Document()
    setup_document_styles(doc)

    title = doc.add_heading(f"{review.session.title} - Answer Key", level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    add_answer_key(doc, review)
    doc.save(output_path)
    return output_path


def export_exam_with_separate_answers(
    review: ExamReview, base_path: str, output_dir: str = "output"
) -> tuple[str, str]:
    """
    Export the question paper and the answer key as two files.

    Args:
        review: The authored exam
        base_path: Base name for output files (without extension)
        output_dir: Directory to save files in

    Returns:
        Tuple of (questions_path, answers_path)
    """
    output_path = ensure_output_directory(output_dir)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base_name = Path(base_path).name

    questions_path = str(output_path / f"{base_name}_questions_{timestamp}.docx")
    answers_path = str(output_path / f"{base_name}_answers_{timestamp}.docx")

    export_to_docx(review, questions_path, include_answers=False, use_output_dir=False)
    generate_answer_key(review, answers_path)

    return questions_path, answers_path
