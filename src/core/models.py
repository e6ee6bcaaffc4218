"""Core data models for the Prepass study engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase

OPTION_COUNT = 4


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Strength(str, Enum):
    """Self-assessed mastery grade of a flashcard."""

    WEAK = "weak"
    OKAY = "okay"
    STRONG = "strong"


def new_id() -> str:
    """Return a fresh opaque record identifier."""
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


# SQLAlchemy models for database
class FlashcardRecord(Base):
    """Persisted flashcard owned by a user."""

    __tablename__ = "flashcards"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(100), nullable=False)
    seq = Column(Integer, nullable=False, default=0)  # insertion order per user
    front = Column(Text, nullable=False)
    back = Column(Text, nullable=False)
    strength = Column(String(10), nullable=False, default=Strength.WEAK.value)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("idx_flashcards_user", "user_id"),)


class QuizRecord(Base):
    """Persisted multiple-choice question owned by a user."""

    __tablename__ = "quizzes"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(100), nullable=False)
    seq = Column(Integer, nullable=False, default=0)  # insertion order per user
    question = Column(Text, nullable=False)
    options = Column(Text, nullable=False)  # JSON serialized list of 4 strings
    correct_index = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow)

    __table_args__ = (Index("idx_quizzes_user", "user_id"),)


class ImportantPointRecord(Base):
    """Persisted exam-relevant fact owned by a user."""

    __tablename__ = "important_points"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(100), nullable=False)
    seq = Column(Integer, nullable=False, default=0)  # insertion order per user
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow)

    __table_args__ = (Index("idx_important_points_user", "user_id"),)


# Dataclasses for business logic
@dataclass
class Flashcard:
    """A question/answer card with its mastery grade."""

    id: str
    front: str
    back: str
    strength: Strength = Strength.WEAK

    def __post_init__(self) -> None:
        if not self.front.strip() or not self.back.strip():
            raise ValueError("Flashcard front and back must be non-empty")
        # Raises ValueError for anything outside the three grades
        self.strength = Strength(self.strength)


@dataclass(frozen=True)
class QuizQuestion:
    """A four-option multiple-choice question with one correct option."""

    id: str
    question: str
    options: tuple[str, ...]
    correct_index: int

    def __post_init__(self) -> None:
        if not self.question.strip():
            raise ValueError("Quiz question text must be non-empty")
        object.__setattr__(self, "options", tuple(self.options))
        if len(self.options) != OPTION_COUNT:
            raise ValueError(
                f"Quiz question must have exactly {OPTION_COUNT} options, "
                f"got {len(self.options)}"
            )
        if not 0 <= self.correct_index < OPTION_COUNT:
            raise ValueError(
                f"correct_index {self.correct_index} out of range "
                f"[0, {OPTION_COUNT})"
            )

    def is_correct(self, selected_index: int) -> bool:
        """Whether the selected option is the correct one."""
        return selected_index == self.correct_index

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]
