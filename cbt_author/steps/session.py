"""Session step - creates the exam session described by the plan."""

from typing import Any

from cbt_author.graph.state import AuthoringState
from cbt_author.workflow.sequencer import Step


def create_exam_session(state: AuthoringState) -> dict[str, Any]:
    """
    Fill the session form from the plan and submit it.

    Args:
        state: Current authoring state containing plan and workflow

    Returns:
        Dictionary with session_id on success, or failed_step and error
    """
    workflow = state["workflow"]
    workflow.session_form.update(state["plan"].session.model_dump())

    if not workflow.submit_session():
        return {"failed_step": Step.SESSION_ENTRY, "error": workflow.error_slot.current}

    return {"session_id": workflow.created_session.id}
