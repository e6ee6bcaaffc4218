"""Learning context domain events."""

from __future__ import annotations

from dataclasses import dataclass

from src.infrastructure.messaging.event_bus import DomainEvent


@dataclass
class FlashcardGradedEvent(DomainEvent):
    """Event emitted when a flashcard's strength is changed and saved."""

    user_id: str
    card_id: str
    previous_strength: str
    new_strength: str

    def __post_init__(self) -> None:
        super().__init__()


@dataclass
class UserDataDeletedEvent(DomainEvent):
    """Event emitted after all of a user's study material is removed."""

    user_id: str
    flashcards_deleted: int
    quizzes_deleted: int
    points_deleted: int

    def __post_init__(self) -> None:
        super().__init__()
