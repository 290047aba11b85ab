"""LangGraph workflow and state management."""

# Note: Avoid importing workflow here to prevent circular imports
# Import directly from modules as needed:
# from cbt_author.graph.state import AuthoringState, create_initial_state
# from cbt_author.graph.workflow import compile_workflow, create_authoring_workflow

__all__ = [
    "AuthoringState",
    "create_initial_state",
    "compile_workflow",
    "create_authoring_workflow",
]
