"""Domain events for the content context."""

from __future__ import annotations

from dataclasses import dataclass

from src.infrastructure.messaging.event_bus import DomainEvent


@dataclass
class NotesAnalyzedEvent(DomainEvent):
    """Event raised when notes are turned into study material."""

    flashcard_count: int
    quiz_count: int
    point_count: int
    image_count: int
    pdf_count: int
    generation_time_ms: int

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class ContentGenerationFailedEvent(DomainEvent):
    """Event raised when notes analysis fails."""

    error_code: str
    error_message: str

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class ContentMergedEvent(DomainEvent):
    """Event raised when generated content is saved into a user's collections."""

    user_id: str
    flashcards_added: int
    quizzes_added: int
    points_added: int

    def __post_init__(self) -> None:
        super().__init__()
