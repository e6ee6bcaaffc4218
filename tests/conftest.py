"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the project root importable so ``src.*`` resolves without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.database import DatabaseManager  # noqa: E402
from src.core.models import Flashcard, QuizQuestion, Strength  # noqa: E402
from src.domain.content.models.analysis_models import AnalysisResult  # noqa: E402


@pytest.fixture
def db_manager(tmp_path: Path) -> DatabaseManager:
    """Database manager backed by a temporary SQLite file."""
    return DatabaseManager(tmp_path / "prepass.db")


@pytest.fixture
def sample_flashcards() -> list[Flashcard]:
    """Five cards with mixed strengths."""
    return [
        Flashcard("fc-1", "What is Photosynthesis?", "Light to chemical energy", Strength.WEAK),
        Flashcard("fc-2", "Photosynthesis equation", "6CO2 + 6H2O -> C6H12O6 + 6O2", Strength.OKAY),
        Flashcard("fc-3", "Where does it occur?", "In chloroplasts", Strength.STRONG),
        Flashcard("fc-4", "Newton's First Law", "Law of inertia", Strength.WEAK),
        Flashcard("fc-5", "What is F = ma?", "Newton's Second Law", Strength.OKAY),
    ]


@pytest.fixture
def sample_quizzes() -> list[QuizQuestion]:
    """Five questions whose correct option is index 2 except the third (1)."""
    return [
        QuizQuestion("q-1", "Primary product of photosynthesis?", ("Oxygen", "CO2", "Glucose", "Water"), 2),
        QuizQuestion("q-2", "Where do light reactions happen?", ("Stroma", "Cytoplasm", "Thylakoid", "Cell wall"), 2),
        QuizQuestion("q-3", "Double the force?", ("Halves", "Doubles", "Mass doubles", "Constant"), 1),
        QuizQuestion("q-4", "Gas released by photosynthesis?", ("Nitrogen", "CO2", "Oxygen", "Hydrogen"), 2),
        QuizQuestion("q-5", "SI unit of force?", ("Joule", "Watt", "Newton", "Pascal"), 2),
    ]


@pytest.fixture
def analysis_payload() -> dict:
    """A well-formed payload as returned by the AI service."""
    return {
        "flashcards": [
            {"front": "What is mitosis?", "back": "Cell division into two identical cells"},
            {"front": "What is meiosis?", "back": "Division producing four gametes"},
        ],
        "quizzes": [
            {
                "question": "How many cells does mitosis produce?",
                "options": ["1", "2", "3", "4"],
                "correctIndex": 1,
            }
        ],
        "importantPoints": ["Mitosis keeps chromosome count", "Meiosis halves it"],
        "summary": "Cell division basics.",
    }


@pytest.fixture
def analysis_result(analysis_payload: dict) -> AnalysisResult:
    return AnalysisResult.model_validate(analysis_payload)
