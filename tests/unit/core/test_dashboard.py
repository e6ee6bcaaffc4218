"""Tests for dashboard statistics."""

from __future__ import annotations

from src.core.dashboard import (
    NOT_APPLICABLE,
    DashboardStats,
    build_dashboard,
    cards_needed_for,
)
from src.core.models import Flashcard, Strength


class TestCardsNeeded:
    """Test the linear cards-to-target estimate."""

    def test_below_target(self) -> None:
        assert cards_needed_for(67) == 26
        assert cards_needed_for(0) == 160

    def test_at_or_above_target(self) -> None:
        assert cards_needed_for(80) == 0
        assert cards_needed_for(95) == 0

    def test_custom_target(self) -> None:
        assert cards_needed_for(50, target_percentage=60) == 20


class TestBuildDashboard:
    """Test composing stats from collections."""

    def test_no_flashcards(self) -> None:
        stats = build_dashboard([], quiz_count=3, point_count=2)

        assert stats.has_data is False
        assert stats.pass_display == NOT_APPLICABLE
        assert stats.status == NOT_APPLICABLE
        assert stats.next_action == "notes"
        assert stats.streak_days == 0
        assert stats.study_minutes == 0
        assert stats.quizzes_completed == 3
        assert stats.important_points == 2

    def test_with_flashcards(self, sample_flashcards: list[Flashcard]) -> None:
        stats = build_dashboard(sample_flashcards, quiz_count=5, point_count=4)

        assert stats.has_data is True
        assert stats.flashcards_studied == 5
        assert stats.weak_cards == 2
        assert stats.study_minutes == 10
        assert stats.streak_days == 1
        assert stats.pass_percentage == 40
        assert stats.pass_display == "40%"
        assert stats.status == "Getting There"
        assert stats.next_action == "flashcards"
        assert stats.below_target is True
        assert stats.cards_needed_for() == 80

    def test_settings_overrides(self, sample_flashcards: list[Flashcard]) -> None:
        stats = build_dashboard(
            sample_flashcards, target_percentage=50, minutes_per_card=3
        )

        assert stats.study_minutes == 15
        assert stats.target_percentage == 50
        assert stats.cards_needed_for() == 20

    def test_all_strong_is_ready(self) -> None:
        cards = [Flashcard(str(i), "q", "a", Strength.STRONG) for i in range(4)]

        stats = build_dashboard(cards)

        assert stats.pass_percentage == 100
        assert stats.below_target is False
        assert stats.cards_needed_for() == 0


class TestDashboardStats:
    """Test the view-model defaults."""

    def test_defaults_have_no_data(self) -> None:
        stats = DashboardStats()

        assert stats.has_data is False
        assert stats.target_percentage == 80
        assert stats.pass_display == "N/A"
