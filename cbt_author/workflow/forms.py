"""In-progress values for the form of the active authoring step."""

import re
from typing import Any, Optional

from cbt_author.models.exam import PresentationType, QuestionType

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

DEFAULT_TIME_PER_QUESTION = 2
# Held by the paper form when the presentation type has no per-question timer
NO_TIME_PER_QUESTION = 0


def coerce_int(value: Any) -> int:
    """
    Read the leading integer of a form value, 0 when there is none.

    ``"12"`` -> 12, ``"7 minutes"`` -> 7, ``"2.5"`` -> 2, ``""`` -> 0.
    """
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value)) if value is not None else None
    return int(match.group(1)) if match else 0


class FormState:
    """
    A flat record of field values with change handling.

    Subclasses declare their fields and defaults; ``set_field`` merges one
    value in, coercing numeric fields and applying dependent resets.
    """

    numeric_fields: frozenset[str] = frozenset()

    def __init__(self, **overrides: Any) -> None:
        self._fixed = dict(overrides)
        self.values: dict[str, Any] = {}
        self.reset()

    def defaults(self) -> dict[str, Any]:
        raise NotImplementedError

    def reset(self) -> None:
        """Back to defaults, keeping the values the form was opened with."""
        self.values = {**self.defaults(), **self._fixed}

    def set_field(self, name: str, value: Any) -> dict[str, Any]:
        """
        Merge one field into the form.

        Args:
            name: Field name
            value: Raw value as entered

        Returns:
            The form values after the change

        Raises:
            KeyError: If the form has no such field
        """
        if name not in self.values:
            raise KeyError(f"{type(self).__name__} has no field {name!r}")
        if name in self.numeric_fields:
            value = coerce_int(value)
        previous = self.values[name]
        self.values = {**self.values, name: value}
        if value != previous:
            self.on_change(name, value)
        return self.values

    def update(self, values: dict[str, Any]) -> dict[str, Any]:
        """Set several fields in the order given."""
        for name, value in values.items():
            if value is not None:
                self.set_field(name, value)
        return self.values

    def on_change(self, name: str, value: Any) -> None:
        """Hook for dependent-field resets."""

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def snapshot(self) -> dict[str, Any]:
        return dict(self.values)


class SessionForm(FormState):
    """Step 1: exam session details."""

    numeric_fields = frozenset(
        {"number_of_papers", "total_duration_in_minutes", "pass_mark", "question_type", "total_points"}
    )

    def defaults(self) -> dict[str, Any]:
        return {
            "title": "",
            "description": "",
            "class_id": "",
            "arm_id": "",
            "number_of_papers": 1,
            "total_duration_in_minutes": 90,
            "pass_mark": 60,
            "start_time": "",
            "end_time": "",
            "question_type": int(QuestionType.MULTIPLE_CHOICE),
            "total_points": 0,
        }

    def on_change(self, name: str, value: Any) -> None:
        # Arms belong to a class
        if name == "class_id":
            self.values["arm_id"] = ""


class PaperForm(FormState):
    """Step 2: one exam paper."""

    numeric_fields = frozenset(
        {
            "pass_mark_for_this_paper",
            "total_time_for_this_paper_in_minutes",
            "presentation_type",
            "default_time_per_question_in_minutes",
        }
    )

    def defaults(self) -> dict[str, Any]:
        return {
            "subject_name": "",
            "pass_mark_for_this_paper": 60,
            "total_time_for_this_paper_in_minutes": 60,
            "presentation_type": int(PresentationType.QUESTION_PREVIEW),
            "default_time_per_question_in_minutes": DEFAULT_TIME_PER_QUESTION,
        }

    def on_change(self, name: str, value: Any) -> None:
        if name == "presentation_type":
            if value == PresentationType.QUESTION_PREVIEW:
                self.values["default_time_per_question_in_minutes"] = DEFAULT_TIME_PER_QUESTION
            else:
                self.values["default_time_per_question_in_minutes"] = NO_TIME_PER_QUESTION


class QuestionForm(FormState):
    """Step 3: one question for a selected paper.

    The parent paper's presentation type decides whether the question
    carries its own time limit.
    """

    numeric_fields = frozenset({"question_type", "points", "time_in_minutes"})

    def __init__(
        self,
        exam_paper_id: str = "",
        presentation_type: PresentationType = PresentationType.QUESTION_PREVIEW,
    ) -> None:
        self.presentation_type = PresentationType(presentation_type)
        super().__init__(exam_paper_id=exam_paper_id)

    @property
    def times_each_question(self) -> bool:
        return self.presentation_type == PresentationType.QUESTION_PREVIEW

    def defaults(self) -> dict[str, Any]:
        return {
            "exam_paper_id": "",
            "question_text": "",
            "question_type": int(QuestionType.MULTIPLE_CHOICE),
            "option_a": "",
            "option_b": "",
            "option_c": "",
            "option_d": "",
            "correct_answer": "",
            "points": 5,
            "time_in_minutes": DEFAULT_TIME_PER_QUESTION if self.times_each_question else None,
        }

    def on_change(self, name: str, value: Any) -> None:
        # Answers from one question type make no sense for another
        if name == "question_type":
            for field in ("option_a", "option_b", "option_c", "option_d", "correct_answer"):
                self.values[field] = ""
            if self.times_each_question:
                self.values["time_in_minutes"] = DEFAULT_TIME_PER_QUESTION

    @property
    def question_type(self) -> Optional[QuestionType]:
        try:
            return QuestionType(self.values["question_type"])
        except ValueError:
            return None
