"""Core module for the Prepass study progress engine."""

from src.core.dashboard import DashboardStats, build_dashboard, cards_needed_for
from src.core.database import DatabaseManager
from src.core.flashcard_session import FlashcardSession
from src.core.models import Flashcard, QuizQuestion, Strength
from src.core.quiz_session import QuizSession
from src.core.scoring import (
    compute_pass_percentage,
    compute_quiz_percentage,
    pass_status,
    strength_breakdown,
)

__all__ = [
    # Persistence
    "DatabaseManager",
    # Entities
    "Flashcard",
    "QuizQuestion",
    "Strength",
    # Scoring
    "compute_pass_percentage",
    "compute_quiz_percentage",
    "pass_status",
    "strength_breakdown",
    # Sessions
    "FlashcardSession",
    "QuizSession",
    # Dashboard
    "DashboardStats",
    "build_dashboard",
    "cards_needed_for",
]
