"""Database management for the per-user study material record sets."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.models import (
    Base,
    Flashcard,
    FlashcardRecord,
    ImportantPointRecord,
    QuizQuestion,
    QuizRecord,
    Strength,
)
from src.domain.content.models.analysis_models import GeneratedFlashcard, GeneratedQuiz
from src.domain.shared.services import PersistenceError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Persistence adapter for flashcards, quizzes and important points.

    Every operation is scoped to a user id and runs in its own transaction.
    SQLAlchemy failures surface as ``PersistenceError``.
    """

    def __init__(self, db_path: str | Path = "data/prepass.db") -> None:
        """Initialize database manager.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection: Any, _: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._create_tables()

    def _create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialized at {self.db_path}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session that commits on success.

        Yields:
            Database session.

        Raises:
            PersistenceError: If the database rejects the work; nothing is
                committed in that case.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database operation failed: {e}")
            raise PersistenceError(f"Database operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Creation

    def add_flashcards(
        self, user_id: str, flashcards: Iterable[GeneratedFlashcard]
    ) -> list[Flashcard]:
        """Store generated flashcards for a user, all starting as weak.

        Returns:
            The created flashcards with their assigned ids.
        """
        with self.get_session() as session:
            created = self._insert_flashcards(session, user_id, flashcards)

        logger.info(f"Saved {len(created)} flashcards for user {user_id}")
        return created

    def add_quizzes(
        self, user_id: str, quizzes: Iterable[GeneratedQuiz]
    ) -> list[QuizQuestion]:
        """Store generated quiz questions for a user.

        Returns:
            The created questions with their assigned ids.
        """
        with self.get_session() as session:
            created = self._insert_quizzes(session, user_id, quizzes)

        logger.info(f"Saved {len(created)} quiz questions for user {user_id}")
        return created

    def add_important_points(self, user_id: str, points: Iterable[str]) -> list[str]:
        """Store important points for a user."""
        with self.get_session() as session:
            created = self._insert_points(session, user_id, points)

        logger.info(f"Saved {len(created)} important points for user {user_id}")
        return created

    def save_generated_content(
        self,
        user_id: str,
        flashcards: Iterable[GeneratedFlashcard],
        quizzes: Iterable[GeneratedQuiz],
        points: Iterable[str],
    ) -> tuple[list[Flashcard], list[QuizQuestion], list[str]]:
        """Store one analysis result in a single transaction.

        Returns:
            Created flashcards, quiz questions and important points.
        """
        with self.get_session() as session:
            created = (
                self._insert_flashcards(session, user_id, flashcards),
                self._insert_quizzes(session, user_id, quizzes),
                self._insert_points(session, user_id, points),
            )

        logger.info(
            f"Saved generated content for user {user_id}: "
            f"{len(created[0])} flashcards, {len(created[1])} quizzes, "
            f"{len(created[2])} points"
        )
        return created

    def _insert_flashcards(
        self, session: Session, user_id: str, flashcards: Iterable[GeneratedFlashcard]
    ) -> list[Flashcard]:
        start = self._next_seq(session, FlashcardRecord, user_id)
        records = [
            FlashcardRecord(
                user_id=user_id,
                seq=start + offset,
                front=item.front,
                back=item.back,
                strength=Strength.WEAK.value,
            )
            for offset, item in enumerate(flashcards)
        ]
        session.add_all(records)
        session.flush()
        return [self._to_flashcard(record) for record in records]

    def _insert_quizzes(
        self, session: Session, user_id: str, quizzes: Iterable[GeneratedQuiz]
    ) -> list[QuizQuestion]:
        start = self._next_seq(session, QuizRecord, user_id)
        records = [
            QuizRecord(
                user_id=user_id,
                seq=start + offset,
                question=item.question,
                options=json.dumps(item.options),
                correct_index=item.correct_index,
            )
            for offset, item in enumerate(quizzes)
        ]
        session.add_all(records)
        session.flush()
        return [self._to_quiz(record) for record in records]

    def _insert_points(
        self, session: Session, user_id: str, points: Iterable[str]
    ) -> list[str]:
        contents = list(points)
        start = self._next_seq(session, ImportantPointRecord, user_id)
        session.add_all(
            ImportantPointRecord(user_id=user_id, seq=start + offset, content=content)
            for offset, content in enumerate(contents)
        )
        session.flush()
        return contents

    # Retrieval

    def get_flashcards(self, user_id: str) -> list[Flashcard]:
        with self.get_session() as session:
            records = (
                session.query(FlashcardRecord)
                .filter(FlashcardRecord.user_id == user_id)
                .order_by(FlashcardRecord.seq)
                .all()
            )
            return [self._to_flashcard(record) for record in records]

    def get_quizzes(self, user_id: str) -> list[QuizQuestion]:
        with self.get_session() as session:
            records = (
                session.query(QuizRecord)
                .filter(QuizRecord.user_id == user_id)
                .order_by(QuizRecord.seq)
                .all()
            )
            return [self._to_quiz(record) for record in records]

    def get_important_points(self, user_id: str) -> list[str]:
        with self.get_session() as session:
            records = (
                session.query(ImportantPointRecord)
                .filter(ImportantPointRecord.user_id == user_id)
                .order_by(ImportantPointRecord.seq)
                .all()
            )
            return [record.content for record in records]

    def count_records(self, user_id: str) -> dict[str, int]:
        """Number of flashcards, quizzes and important points a user owns."""
        with self.get_session() as session:
            return {
                model.__tablename__: session.query(func.count(model.id))
                .filter(model.user_id == user_id)
                .scalar()
                for model in (FlashcardRecord, QuizRecord, ImportantPointRecord)
            }

    # Updates

    def update_flashcard_strength(
        self, user_id: str, card_id: str, strength: Strength
    ) -> None:
        """Persist a new strength for one of the user's flashcards.

        Raises:
            PersistenceError: If the card does not exist for this user or the
                write fails.
        """
        with self.get_session() as session:
            record = (
                session.query(FlashcardRecord)
                .filter(
                    FlashcardRecord.id == card_id,
                    FlashcardRecord.user_id == user_id,
                )
                .first()
            )
            if record is None:
                raise PersistenceError(
                    f"Flashcard {card_id} not found", operation="update_flashcard"
                )
            record.strength = Strength(strength).value

        logger.debug(f"Updated flashcard {card_id} strength to {strength}")

    # Deletion

    def delete_all_data(self, user_id: str) -> dict[str, int]:
        """Delete all three record sets for a user in a single transaction.

        Either everything is deleted or, on failure, nothing is and a
        PersistenceError is raised.

        Returns:
            Number of deleted rows per table.
        """
        deleted: dict[str, int] = {}
        with self.get_session() as session:
            for model in (FlashcardRecord, QuizRecord, ImportantPointRecord):
                deleted[model.__tablename__] = (
                    session.query(model)
                    .filter(model.user_id == user_id)
                    .delete(synchronize_session=False)
                )

        logger.info(f"Deleted all study data for user {user_id}: {deleted}")
        return deleted

    # Helpers

    @staticmethod
    def _next_seq(session: Session, model: type[Base], user_id: str) -> int:
        """First free insertion-order number for a user's records."""
        current = (
            session.query(func.max(model.seq)).filter(model.user_id == user_id).scalar()
        )
        return 0 if current is None else current + 1

    @staticmethod
    def _to_flashcard(record: FlashcardRecord) -> Flashcard:
        try:
            return Flashcard(
                id=record.id,
                front=record.front,
                back=record.back,
                strength=Strength(record.strength),
            )
        except ValueError as e:
            raise PersistenceError(
                f"Corrupt flashcard record {record.id}: {e}", operation="read"
            ) from e

    @staticmethod
    def _to_quiz(record: QuizRecord) -> QuizQuestion:
        try:
            return QuizQuestion(
                id=record.id,
                question=record.question,
                options=tuple(json.loads(record.options)),
                correct_index=record.correct_index,
            )
        except (ValueError, TypeError) as e:
            raise PersistenceError(
                f"Corrupt quiz record {record.id}: {e}", operation="read"
            ) from e
