"""Question step - adds every planned question to its paper."""

from typing import Any

from cbt_author.graph.state import AuthoringState
from cbt_author.workflow.sequencer import Step


def add_paper_questions(state: AuthoringState) -> dict[str, Any]:
    """
    Submit the questions of each paper, in plan order.

    Stops at the first question the service or the form checks reject;
    questions added before that stay added.

    Args:
        state: Current authoring state with paper_ids filled in

    Returns:
        Dictionary with question_ids, plus failure info if a question failed
    """
    workflow = state["workflow"]
    question_ids = list(state["question_ids"])

    for paper_id, paper_plan in zip(state["paper_ids"], state["plan"].papers):
        form = workflow.select_paper(paper_id)
        for question_plan in paper_plan.questions:
            form.update(question_plan.model_dump())
            if not workflow.submit_question():
                return {
                    "question_ids": question_ids,
                    "failed_step": Step.QUESTION_ENTRY,
                    "error": workflow.error_slot.current,
                }
            question_ids.append(workflow.added_questions[-1].id)

    workflow.finish_questions()
    return {"question_ids": question_ids}
