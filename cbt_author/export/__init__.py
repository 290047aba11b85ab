"""Export of authored exams to documents."""

from .docx_generator import (
    export_exam_with_separate_answers,
    export_to_docx,
    generate_answer_key,
)

__all__ = ["export_to_docx", "generate_answer_key", "export_exam_with_separate_answers"]
