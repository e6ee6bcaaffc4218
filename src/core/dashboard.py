"""Dashboard statistics derived from a user's study material."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from src.core.models import Flashcard, Strength
from src.core.scoring import compute_pass_percentage, pass_status

DEFAULT_TARGET_PERCENTAGE = 80
DEFAULT_MINUTES_PER_CARD = 2
NOT_APPLICABLE = "N/A"


def cards_needed_for(pass_percentage: int, target_percentage: int = DEFAULT_TARGET_PERCENTAGE) -> int:
    """Linear estimate of cards still to master before reaching the target."""
    return max(0, math.ceil((target_percentage - pass_percentage) * 2))


@dataclass
class DashboardStats:
    """View-model for the dashboard."""

    flashcards_studied: int = 0
    quizzes_completed: int = 0
    important_points: int = 0
    weak_cards: int = 0
    study_minutes: int = 0
    streak_days: int = 0
    pass_percentage: int = 0
    target_percentage: int = DEFAULT_TARGET_PERCENTAGE

    @property
    def has_data(self) -> bool:
        return self.flashcards_studied > 0

    @property
    def pass_display(self) -> str:
        """Pass percentage for display; "N/A" rather than 0% without data."""
        if not self.has_data:
            return NOT_APPLICABLE
        return f"{self.pass_percentage}%"

    @property
    def status(self) -> str:
        if not self.has_data:
            return NOT_APPLICABLE
        return pass_status(self.pass_percentage)

    @property
    def below_target(self) -> bool:
        return self.pass_percentage < self.target_percentage

    @property
    def next_action(self) -> str:
        """Where "start studying" leads: review cards if any, else add notes."""
        return "flashcards" if self.has_data else "notes"

    def cards_needed_for(self, target_percentage: int | None = None) -> int:
        target = self.target_percentage if target_percentage is None else target_percentage
        return cards_needed_for(self.pass_percentage, target)


def build_dashboard(
    cards: Sequence[Flashcard],
    quiz_count: int = 0,
    point_count: int = 0,
    target_percentage: int = DEFAULT_TARGET_PERCENTAGE,
    minutes_per_card: int = DEFAULT_MINUTES_PER_CARD,
) -> DashboardStats:
    """Compose dashboard statistics from the flashcard collection.

    Args:
        cards: The user's flashcards
        quiz_count: Number of quiz questions the user owns
        point_count: Number of important points the user owns
        target_percentage: Pass percentage the user is aiming for
        minutes_per_card: Study time heuristic per flashcard

    Returns:
        Dashboard statistics
    """
    studied = len(cards)
    return DashboardStats(
        flashcards_studied=studied,
        quizzes_completed=quiz_count,
        important_points=point_count,
        weak_cards=sum(1 for card in cards if card.strength == Strength.WEAK),
        study_minutes=studied * minutes_per_card,
        # Placeholder until daily activity is recorded
        streak_days=1 if studied > 0 else 0,
        pass_percentage=compute_pass_percentage(cards),
        target_percentage=target_percentage,
    )
