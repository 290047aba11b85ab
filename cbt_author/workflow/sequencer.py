"""Forward-only progression through the four authoring steps."""

from enum import IntEnum

from cbt_author.models.exam import ExamPaper, Question, WorkflowStep


class Step(IntEnum):
    """Authoring steps, in order."""

    SESSION_ENTRY = 1
    PAPER_ENTRY = 2
    QUESTION_ENTRY = 3
    REVIEW = 4


STEP_DEFINITIONS = [
    (Step.SESSION_ENTRY, "Create Exam Session", "Set up basic exam details"),
    (Step.PAPER_ENTRY, "Add Exam Papers", "Add subject papers to your exam"),
    (Step.QUESTION_ENTRY, "Add Questions", "Add questions to each paper"),
    (Step.REVIEW, "Review & Finalize", "Review and finalize your exam"),
]


class StepSequencer:
    """
    Tracks the active step and which steps are done.

    Also owns the papers and questions added so far, so that ``reset()``
    discards everything the run accumulated in one place.
    """

    def __init__(self) -> None:
        self.current_step = Step.SESSION_ENTRY
        self.steps: list[WorkflowStep] = []
        self.added_papers: list[ExamPaper] = []
        self.added_questions: list[Question] = []
        self.reset()

    def advance(self) -> Step:
        """
        Complete the active step and move to the next one.

        The review step is terminal: advancing from it only re-marks it
        complete.

        Returns:
            The new active step
        """
        self.steps[self.current_step - 1].completed = True
        if self.current_step < Step.REVIEW:
            self.current_step = Step(self.current_step + 1)
        return self.current_step

    def reset(self) -> None:
        """Back to step 1 with nothing completed and nothing added."""
        self.current_step = Step.SESSION_ENTRY
        self.steps = [
            WorkflowStep(step=step, title=title, description=description)
            for step, title, description in STEP_DEFINITIONS
        ]
        self.added_papers = []
        self.added_questions = []

    @property
    def current(self) -> WorkflowStep:
        return self.steps[self.current_step - 1]

    @property
    def is_finished(self) -> bool:
        return self.current_step == Step.REVIEW

    def is_completed(self, step: Step) -> bool:
        return self.steps[step - 1].completed
