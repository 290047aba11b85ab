"""Graph nodes, one per authoring step."""

from .papers import add_exam_paper
from .questions import add_paper_questions
from .review import finalize_review
from .session import create_exam_session

__all__ = [
    "create_exam_session",
    "add_exam_paper",
    "add_paper_questions",
    "finalize_review",
]
