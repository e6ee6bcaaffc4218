"""Tests for the prepass command line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from src.cli.prepass import cli
from src.core.database import DatabaseManager
from src.core.models import Strength
from src.domain.content.models.analysis_models import AnalysisResult
from src.domain.shared.services import PersistenceError, RateLimitError


GEMINI_ENV = {"GEMINI_API_KEY": "test-key", "USE_VERTEX_AI": "false"}


class TestPrepassCLI:
    """Test the prepass command group."""

    @pytest.fixture
    def runner(self) -> CliRunner:
        return CliRunner()

    @pytest.fixture
    def db_path(self, tmp_path: Path) -> Path:
        return tmp_path / "prepass.db"

    @pytest.fixture
    def seeded_db(self, db_path: Path, analysis_result: AnalysisResult) -> DatabaseManager:
        db_manager = DatabaseManager(db_path)
        db_manager.save_generated_content(
            "alice",
            analysis_result.flashcards,
            analysis_result.quizzes,
            analysis_result.important_points,
        )
        return db_manager

    def invoke(
        self,
        runner: CliRunner,
        db_path: Path,
        *args: str,
        input: str | None = None,
        env: dict[str, str] | None = None,
    ):
        return runner.invoke(
            cli, ["--db", str(db_path), "--user", "alice", *args], input=input, env=env
        )

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "prepass, version 0.1.0" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("analyze", "dashboard", "flashcards", "quiz", "points", "reset"):
            assert command in result.output

    def test_dashboard_without_data(self, runner: CliRunner, db_path: Path) -> None:
        result = self.invoke(runner, db_path, "dashboard")

        assert result.exit_code == 0
        assert "Pass probability: N/A" in result.output
        assert "prepass analyze" in result.output

    def test_dashboard_with_data(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        result = self.invoke(runner, db_path, "dashboard")

        assert result.exit_code == 0
        assert "0%" in result.output
        assert "Master about 160 more cards" in result.output
        assert "Today's Essentials" in result.output

    def test_points(self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager) -> None:
        result = self.invoke(runner, db_path, "points")

        assert result.exit_code == 0
        assert "Mitosis keeps chromosome count" in result.output
        assert "Meiosis halves it" in result.output

    def test_points_empty(self, runner: CliRunner, db_path: Path) -> None:
        result = self.invoke(runner, db_path, "points")
        assert "No important points yet" in result.output

    def test_analyze_without_content(self, runner: CliRunner, db_path: Path) -> None:
        result = self.invoke(runner, db_path, "analyze")

        assert result.exit_code == 1
        assert "Please provide notes, images or PDFs." in result.output

    @patch("src.domain.content.services.analyze_notes.GeminiClient")
    def test_analyze_text(
        self,
        mock_client_cls: Mock,
        runner: CliRunner,
        db_path: Path,
        analysis_payload: dict,
    ) -> None:
        mock_client_cls.return_value.generate_json_response.return_value = analysis_payload

        result = self.invoke(runner, db_path, "analyze", "--text", "Mitosis notes", env=GEMINI_ENV)

        assert result.exit_code == 0, result.output
        assert "Added 2 flashcards, 1 quiz questions and 2 important points" in result.output
        assert "Cell division basics." in result.output
        assert len(DatabaseManager(db_path).get_flashcards("alice")) == 2

    @patch("src.domain.content.services.analyze_notes.GeminiClient")
    def test_analyze_reports_service_error(
        self, mock_client_cls: Mock, runner: CliRunner, db_path: Path
    ) -> None:
        mock_client_cls.return_value.generate_json_response.side_effect = RateLimitError()

        result = self.invoke(runner, db_path, "analyze", "--text", "Mitosis notes", env=GEMINI_ENV)

        assert result.exit_code == 1
        assert "Rate limit exceeded" in result.output
        assert DatabaseManager(db_path).get_flashcards("alice") == []

    def test_analyze_without_ai_config(self, runner: CliRunner, db_path: Path) -> None:
        result = self.invoke(
            runner,
            db_path,
            "analyze",
            "--text",
            "Mitosis notes",
            env={"GEMINI_API_KEY": "", "USE_VERTEX_AI": "false"},
        )

        assert result.exit_code == 1
        assert "AI service is not configured" in result.output

    def test_analyze_text_file_not_utf8(self, runner: CliRunner, db_path: Path, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_bytes(b"caf\xe9 notes")

        result = self.invoke(runner, db_path, "analyze", "--text-file", str(notes), env=GEMINI_ENV)

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "Could not read notes.txt as UTF-8 text" in result.output

    @patch("src.domain.content.services.analyze_notes.GeminiClient")
    def test_analyze_text_file(
        self,
        mock_client_cls: Mock,
        runner: CliRunner,
        db_path: Path,
        tmp_path: Path,
        analysis_payload: dict,
    ) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("Mitosis produces two cells", encoding="utf-8")
        mock_client_cls.return_value.generate_json_response.return_value = analysis_payload

        result = self.invoke(runner, db_path, "analyze", "--text-file", str(notes), env=GEMINI_ENV)

        assert result.exit_code == 0, result.output
        parts = mock_client_cls.return_value.generate_json_response.call_args.args[0]
        assert "Mitosis produces two cells" in parts[0].text

    def test_analyze_skips_invalid_files(self, runner: CliRunner, db_path: Path, tmp_path: Path) -> None:
        bad = tmp_path / "notes.txt"
        bad.write_text("plain text")

        result = self.invoke(runner, db_path, "analyze", str(bad))

        assert result.exit_code == 1
        assert "only images and PDFs are supported" in result.output

    def test_flashcards_grade_and_quit(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        result = self.invoke(runner, db_path, "flashcards", input="f\n3\nn\nq\n")

        assert result.exit_code == 0, result.output
        assert "Card 1 of 2" in result.output
        assert "Card 2 of 2" in result.output
        strengths = [card.strength for card in seeded_db.get_flashcards("alice")]
        assert strengths == [Strength.STRONG, Strength.WEAK]

    def test_flashcards_grade_failure_keeps_reviewing(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        with patch(
            "src.core.database.DatabaseManager.update_flashcard_strength",
            side_effect=PersistenceError("Database operation failed"),
        ):
            result = self.invoke(runner, db_path, "flashcards", input="2\nn\nq\n")

        assert result.exit_code == 0, result.output
        assert "Failed to update flashcard" in result.output
        assert "Card 2 of 2" in result.output

    def test_flashcards_empty(self, runner: CliRunner, db_path: Path) -> None:
        result = self.invoke(runner, db_path, "flashcards")
        assert "No flashcards yet" in result.output

    def test_quiz(self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager) -> None:
        result = self.invoke(runner, db_path, "quiz", input="b\nn\n")

        assert result.exit_code == 0, result.output
        assert "Correct!" in result.output
        assert "You scored 1 out of 1" in result.output

    def test_quiz_wrong_answer_then_retry(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        result = self.invoke(runner, db_path, "quiz", input="A\ny\nB\nn\n")

        assert result.exit_code == 0, result.output
        assert "Incorrect. Answer: B. 2" in result.output
        assert "You scored 0 out of 1" in result.output
        assert "You scored 1 out of 1" in result.output

    def test_reset_with_confirmation(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        result = self.invoke(runner, db_path, "reset", input="y\n")

        assert result.exit_code == 0
        assert "All data deleted successfully" in result.output
        assert seeded_db.count_records("alice") == {
            "flashcards": 0,
            "quizzes": 0,
            "important_points": 0,
        }

    def test_reset_cancelled(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        result = self.invoke(runner, db_path, "reset", input="n\n")

        assert "Reset cancelled" in result.output
        assert seeded_db.count_records("alice")["flashcards"] == 2

    def test_reset_failure(
        self, runner: CliRunner, db_path: Path, seeded_db: DatabaseManager
    ) -> None:
        with patch(
            "src.core.database.DatabaseManager.delete_all_data",
            side_effect=PersistenceError("Database operation failed"),
        ):
            result = self.invoke(runner, db_path, "reset", "--yes")

        assert result.exit_code == 1
        assert "Database operation failed" in result.output
