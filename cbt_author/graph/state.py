"""State carried through the batch authoring graph."""

from typing import Optional, TypedDict

from cbt_author.models.exam import ExamReview
from cbt_author.models.plan import ExamPlan
from cbt_author.workflow.authoring import ExamAuthoringWorkflow
from cbt_author.workflow.presenter import DisplayError


class AuthoringState(TypedDict):
    """
    Graph state for authoring one ``ExamPlan``.

    ``workflow`` is the live authoring run the nodes drive; the remaining
    keys record progress so the routing functions can decide where to go.
    """

    plan: ExamPlan
    workflow: ExamAuthoringWorkflow
    session_id: Optional[str]
    paper_index: int
    paper_ids: list[str]
    question_ids: list[str]
    failed_step: Optional[int]
    error: Optional[DisplayError]
    review: Optional[ExamReview]


def create_initial_state(plan: ExamPlan, workflow: ExamAuthoringWorkflow) -> AuthoringState:
    """
    Create the starting state for a plan.

    Args:
        plan: The exam to author
        workflow: A fresh authoring run bound to a client

    Returns:
        AuthoringState with nothing created yet
    """
    return {
        "plan": plan,
        "workflow": workflow,
        "session_id": None,
        "paper_index": 0,
        "paper_ids": [],
        "question_ids": [],
        "failed_step": None,
        "error": None,
        "review": None,
    }
