"""Paper step - adds the plan's papers to the session, one per pass."""

from typing import Any

from cbt_author.graph.state import AuthoringState
from cbt_author.workflow.sequencer import Step


def add_exam_paper(state: AuthoringState) -> dict[str, Any]:
    """
    Submit the next paper of the plan.

    The graph calls this once per paper; the workflow moves to the question
    step by itself when the last one is added.

    Args:
        state: Current authoring state

    Returns:
        Dictionary with the advanced paper_index and paper_ids, or failure info
    """
    workflow = state["workflow"]
    index = state["paper_index"]
    paper_plan = state["plan"].papers[index]

    workflow.paper_form.update(paper_plan.model_dump(exclude={"questions"}))

    if not workflow.submit_paper():
        return {"failed_step": Step.PAPER_ENTRY, "error": workflow.error_slot.current}

    return {
        "paper_index": index + 1,
        "paper_ids": state["paper_ids"] + [workflow.added_papers[-1].id],
    }
