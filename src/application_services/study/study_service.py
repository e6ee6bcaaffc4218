"""Application service owning one user's study material.

Keeps the in-memory flashcard, quiz and important-point collections in step
with the record store, merges freshly generated content into them, and hands
out review sessions and dashboard statistics.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from src.core.dashboard import DashboardStats, build_dashboard
from src.core.database import DatabaseManager
from src.core.flashcard_session import FlashcardSession
from src.core.models import Flashcard, QuizQuestion, Strength
from src.core.quiz_session import QuizSession
from src.core.settings import Settings, get_settings
from src.domain.content.events.content_events import ContentMergedEvent
from src.domain.content.models.analysis_models import AnalysisRequest, AnalysisResult
from src.domain.content.services.analyze_notes import AnalyzeNotes
from src.domain.learning.events.study_events import (
    FlashcardGradedEvent,
    UserDataDeletedEvent,
)
from src.domain.shared.services import PersistenceError
from src.infrastructure.messaging.event_bus import DomainEvent, EventBus

logger = logging.getLogger(__name__)


@dataclass
class MergeSummary:
    """What was added to the collections by one analysis."""

    flashcards_added: int
    quizzes_added: int
    points_added: int
    summary: str = ""


class StudyService:
    """Owns a user's collections and coordinates persistence around them."""

    def __init__(
        self,
        db_manager: DatabaseManager,
        event_bus: EventBus,
        user_id: str,
        analyze_notes: AnalyzeNotes | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            db_manager: Record store adapter
            event_bus: Bus for study activity events
            user_id: Identity all records are scoped to
            analyze_notes: Notes analysis service, created lazily if omitted
            settings: Application settings
        """
        self.db_manager = db_manager
        self.event_bus = event_bus
        self.user_id = user_id
        self.settings = settings or get_settings()
        self._analyze_notes = analyze_notes

        self.flashcards: list[Flashcard] = []
        self.quizzes: list[QuizQuestion] = []
        self.important_points: list[str] = []

    @property
    def analyze_notes(self) -> AnalyzeNotes:
        if self._analyze_notes is None:
            self._analyze_notes = AnalyzeNotes(self.event_bus, settings=self.settings)
        return self._analyze_notes

    def load(self) -> None:
        """Replace the in-memory collections with the stored records."""
        flashcards = self.db_manager.get_flashcards(self.user_id)
        quizzes = self.db_manager.get_quizzes(self.user_id)
        points = self.db_manager.get_important_points(self.user_id)

        self.flashcards, self.quizzes, self.important_points = flashcards, quizzes, points
        logger.info(
            f"Loaded {len(flashcards)} flashcards, {len(quizzes)} quizzes and "
            f"{len(points)} important points for user {self.user_id}"
        )

    async def generate_from_notes(self, request: AnalysisRequest) -> MergeSummary:
        """Analyze notes and merge the generated material.

        Raises:
            InputError: Nothing to analyze
            ServiceError: Analysis failed; nothing is merged
            PersistenceError: Saving failed; collections are unchanged
        """
        result = await self.analyze_notes.call(request)
        return await self.merge_content(result)

    async def merge_content(self, result: AnalysisResult) -> MergeSummary:
        """Persist generated content, then append it to the collections.

        The three record sets are written in one transaction, so a failure
        leaves both the store and the in-memory collections untouched.
        """
        flashcards, quizzes, points = self.db_manager.save_generated_content(
            self.user_id,
            result.flashcards,
            result.quizzes,
            result.important_points,
        )

        self.flashcards.extend(flashcards)
        self.quizzes.extend(quizzes)
        self.important_points.extend(points)

        await self._publish(
            ContentMergedEvent(
                user_id=self.user_id,
                flashcards_added=len(flashcards),
                quizzes_added=len(quizzes),
                points_added=len(points),
            )
        )
        return MergeSummary(
            flashcards_added=len(flashcards),
            quizzes_added=len(quizzes),
            points_added=len(points),
            summary=result.summary,
        )

    async def grade_flashcard(self, card_id: str, strength: Strength | str) -> Flashcard:
        """Persist a grade and only then apply it in memory.

        Raises:
            PersistenceError: Unknown card or failed write; memory unchanged
        """
        card = self._find_flashcard(card_id)
        new_strength = Strength(strength)
        self.db_manager.update_flashcard_strength(self.user_id, card_id, new_strength)

        previous = card.strength
        card.strength = new_strength
        await self._publish(
            FlashcardGradedEvent(
                user_id=self.user_id,
                card_id=card_id,
                previous_strength=previous.value,
                new_strength=new_strength.value,
            )
        )
        return card

    def start_flashcard_session(self, rng: random.Random | None = None) -> FlashcardSession:
        """Review session over the user's flashcards; grades are written through."""
        return FlashcardSession(self.flashcards, on_grade=self._persist_grade, rng=rng)

    def start_quiz_session(self) -> QuizSession:
        return QuizSession(self.quizzes, on_complete=self._log_quiz_completion)

    def dashboard(self) -> DashboardStats:
        return build_dashboard(
            self.flashcards,
            quiz_count=len(self.quizzes),
            point_count=len(self.important_points),
            target_percentage=self.settings.target_percentage,
            minutes_per_card=self.settings.minutes_per_card,
        )

    async def delete_all_data(self) -> dict[str, int]:
        """Remove every record set for the user.

        The store deletes all three sets atomically; the collections are only
        cleared after it reports success.
        """
        deleted = self.db_manager.delete_all_data(self.user_id)

        self.flashcards.clear()
        self.quizzes.clear()
        self.important_points.clear()

        await self._publish(
            UserDataDeletedEvent(
                user_id=self.user_id,
                flashcards_deleted=deleted.get("flashcards", 0),
                quizzes_deleted=deleted.get("quizzes", 0),
                points_deleted=deleted.get("important_points", 0),
            )
        )
        return deleted

    def _persist_grade(self, card: Flashcard, previous: Strength) -> None:
        """Write-through callback used by flashcard sessions."""
        self.db_manager.update_flashcard_strength(self.user_id, card.id, card.strength)
        logger.debug(f"Saved grade {previous.value} -> {card.strength.value} for {card.id}")

    def _log_quiz_completion(self, correct_count: int, total: int) -> None:
        logger.info(f"User {self.user_id} finished a quiz: {correct_count}/{total}")

    def _find_flashcard(self, card_id: str) -> Flashcard:
        for card in self.flashcards:
            if card.id == card_id:
                return card
        raise PersistenceError(f"Flashcard {card_id} not found", operation="update_flashcard")

    async def _publish(self, event: DomainEvent) -> None:
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish event {type(event).__name__}: {e}")
