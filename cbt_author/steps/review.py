"""Review step - collects what the run created."""

from typing import Any

from cbt_author.graph.state import AuthoringState


def finalize_review(state: AuthoringState) -> dict[str, Any]:
    """Snapshot the authored exam for display and export."""
    return {"review": state["workflow"].review()}
