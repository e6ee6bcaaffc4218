"""Quiz-taking session.

States: ``Active(i, answered=False)`` -> ``Active(i, answered=True)`` ->
``Active(i + 1, answered=False)`` ... -> ``Complete``. ``restart`` returns to
``Active(0, answered=False)`` from anywhere. Calls that are not valid in the
current state are no-ops.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from src.core.models import OPTION_COUNT, QuizQuestion
from src.core.scoring import compute_quiz_percentage

logger = logging.getLogger(__name__)

# Called with (correct_count, total_questions) when a pass is completed
CompletionCallback = Callable[[int, int], None]


class QuizSession:
    """Answering and scoring state over an ordered question collection."""

    def __init__(
        self,
        questions: Iterable[QuizQuestion],
        on_complete: CompletionCallback | None = None,
    ) -> None:
        self._questions: list[QuizQuestion] = list(questions)
        self._on_complete = on_complete
        self.current_index = 0
        self.correct_count = 0
        self.answered = False
        self.is_complete = False
        self.selected_index: int | None = None
        self.last_answer_correct: bool | None = None

    @property
    def questions(self) -> tuple[QuizQuestion, ...]:
        return tuple(self._questions)

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def is_empty(self) -> bool:
        """No questions: a distinct no-content state with no score."""
        return not self._questions

    @property
    def current_question(self) -> QuizQuestion | None:
        if self.is_empty or self.is_complete:
            return None
        return self._questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return not self.is_empty and self.current_index == self.total - 1

    @property
    def percentage(self) -> int:
        return compute_quiz_percentage(self.correct_count, self.total)

    @property
    def progress_percentage(self) -> int:
        """How far through the quiz the user is, for a progress bar."""
        if self.is_empty:
            return 0
        if self.is_complete:
            return 100
        return 100 * self.current_index // self.total

    @property
    def position(self) -> str:
        if self.is_empty:
            return "No questions"
        return f"Question {self.current_index + 1} of {self.total}"

    def select(self, index: int) -> bool:
        """Choose an option before submitting; locked once answered.

        Returns:
            Whether the selection was recorded
        """
        if not 0 <= index < OPTION_COUNT:
            raise ValueError(f"Option index must be in [0, {OPTION_COUNT}), got {index}")
        if self.current_question is None or self.answered:
            return False
        self.selected_index = index
        return True

    def submit_answer(self, selected_index: int | None = None) -> bool | None:
        """Commit the selected option for the current question.

        Args:
            selected_index: Option to submit; defaults to the current selection

        Returns:
            Whether the answer was correct, or None if the submission was
            ignored (already answered, nothing selected, empty or complete)
        """
        if self.current_question is None or self.answered:
            return None

        if selected_index is not None and not self.select(selected_index):
            return None
        if self.selected_index is None:
            return None

        question = self.current_question
        is_correct = question.is_correct(self.selected_index)
        self.answered = True
        self.last_answer_correct = is_correct
        if is_correct:
            self.correct_count += 1

        logger.debug(
            f"Question {question.id} answered "
            f"{'correctly' if is_correct else 'incorrectly'}"
        )
        return is_correct

    def advance(self) -> bool:
        """Move past an answered question, completing the quiz after the last.

        Returns:
            Whether the session moved
        """
        if self.is_empty or self.is_complete or not self.answered:
            return False

        if self.is_last_question:
            self.is_complete = True
            logger.info(f"Quiz complete: {self.correct_count}/{self.total}")
            if self._on_complete is not None:
                self._on_complete(self.correct_count, self.total)
            return True

        self.current_index += 1
        self.answered = False
        self.selected_index = None
        self.last_answer_correct = None
        return True

    def restart(self) -> None:
        self.current_index = 0
        self.correct_count = 0
        self.answered = False
        self.is_complete = False
        self.selected_index = None
        self.last_answer_correct = None
