"""LangGraph workflow definition for batch exam authoring."""

from typing import Literal

from langgraph.graph import END, StateGraph

from cbt_author.graph.state import AuthoringState, create_initial_state
from cbt_author.models.plan import ExamPlan
from cbt_author.steps.papers import add_exam_paper
from cbt_author.steps.questions import add_paper_questions
from cbt_author.steps.review import finalize_review
from cbt_author.steps.session import create_exam_session
from cbt_author.workflow.authoring import ExamAuthoringWorkflow
from cbt_author.workflow.sequencer import Step


def after_session(state: AuthoringState) -> Literal["paper", "end"]:
    """
    Route after the session step.

    Args:
        state: Current authoring state

    Returns:
        "paper" once the session exists, "end" if it could not be created
    """
    if state.get("failed_step") is not None or not state.get("session_id"):
        return "end"
    return "paper"


def after_paper(state: AuthoringState) -> Literal["paper", "questions", "end"]:
    """
    Route after adding a paper.

    The workflow stays in the paper step until the session's number of
    papers has been added, so the step it is in decides the loop.

    Args:
        state: Current authoring state

    Returns:
        Next node to execute
    """
    if state.get("failed_step") is not None:
        return "end"
    if state["workflow"].current_step == Step.PAPER_ENTRY:
        return "paper"
    return "questions"


def after_questions(state: AuthoringState) -> Literal["finalize", "end"]:
    """Route to finalize unless a question failed."""
    if state.get("failed_step") is not None:
        return "end"
    return "finalize"


def create_authoring_workflow() -> StateGraph:
    """
    Create the LangGraph workflow for authoring one exam plan.

    The workflow follows this structure:
    1. Session - Creates the exam session
    2. Paper - Adds one paper (loops until all papers are added)
    3. Questions - Adds every question to its paper
    4. Finalize - Collects what was created for review

    Any failure routes straight to END with the error in the state.

    Returns:
        StateGraph ready to compile
    """
    workflow = StateGraph(AuthoringState)

    # Add nodes for each step
    workflow.add_node("session", create_exam_session)
    workflow.add_node("paper", add_exam_paper)
    workflow.add_node("questions", add_paper_questions)
    workflow.add_node("finalize", finalize_review)

    # Start -> Session
    workflow.set_entry_point("session")

    # Session -> Conditional (paper or end)
    workflow.add_conditional_edges(
        "session",
        after_session,
        {
            "paper": "paper",
            "end": END,
        },
    )

    # Paper -> Conditional (next paper, questions, or end)
    workflow.add_conditional_edges(
        "paper",
        after_paper,
        {
            "paper": "paper",  # Loop for the next paper
            "questions": "questions",
            "end": END,
        },
    )

    # Questions -> Conditional (finalize or end)
    workflow.add_conditional_edges(
        "questions",
        after_questions,
        {
            "finalize": "finalize",
            "end": END,
        },
    )

    # Finalize -> End
    workflow.add_edge("finalize", END)

    return workflow


def compile_workflow():
    """
    Compile the workflow and return it ready for execution.

    Returns:
        Compiled workflow
    """
    workflow = create_authoring_workflow()
    return workflow.compile()


def run_plan(plan: ExamPlan, workflow: ExamAuthoringWorkflow) -> AuthoringState:
    """
    Author a whole exam plan.

    Args:
        plan: The exam to create
        workflow: A fresh authoring run bound to a client

    Returns:
        Final state; ``review`` is set on success, ``failed_step`` and
        ``error`` otherwise
    """
    graph = compile_workflow()
    # One graph step per paper plus the fixed nodes
    limit = len(plan.papers) + 10
    return graph.invoke(create_initial_state(plan, workflow), {"recursion_limit": limit})
