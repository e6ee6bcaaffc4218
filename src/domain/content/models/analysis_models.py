"""Models for the notes-analysis request and its generated content.

The AI response is an untrusted payload: it is validated with pydantic before
any flashcard or quiz is created from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

OPTION_COUNT = 4


class GeneratedFlashcard(BaseModel):
    """A flashcard as produced by the analysis service."""

    model_config = ConfigDict(str_strip_whitespace=True)

    front: str = Field(..., min_length=1, description="Question or prompt")
    back: str = Field(..., min_length=1, description="Answer")


class GeneratedQuiz(BaseModel):
    """A multiple-choice question as produced by the analysis service."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    question: str = Field(..., min_length=1, description="Question text")
    options: list[str] = Field(
        ...,
        description="Answer options",
        min_length=OPTION_COUNT,
        max_length=OPTION_COUNT,
    )
    correct_index: int = Field(
        ..., alias="correctIndex", strict=True, description="Index of correct option"
    )

    @field_validator("correct_index")
    @classmethod
    def correct_index_in_range(cls, v: int) -> int:
        """Ensure the correct index points at one of the options."""
        if not 0 <= v < OPTION_COUNT:
            raise ValueError(f"correctIndex must be in [0, {OPTION_COUNT})")
        return v


class AnalysisResult(BaseModel):
    """Validated study material generated from a set of notes."""

    model_config = ConfigDict(populate_by_name=True)

    flashcards: list[GeneratedFlashcard] = Field(default_factory=list)
    quizzes: list[GeneratedQuiz] = Field(default_factory=list)
    important_points: list[str] = Field(
        default_factory=list, alias="importantPoints"
    )
    summary: str = ""

    @field_validator("important_points")
    @classmethod
    def drop_blank_points(cls, v: list[str]) -> list[str]:
        return [point.strip() for point in v if point.strip()]

    @property
    def is_empty(self) -> bool:
        return not (self.flashcards or self.quizzes or self.important_points)


@dataclass
class EncodedFile:
    """An uploaded file, base64 encoded for the analysis request."""

    filename: str
    mime_type: str
    data: str  # base64
    size_bytes: int = 0


@dataclass
class AnalysisRequest:
    """Notes to analyze: free text and/or encoded images and PDFs."""

    text: str | None = None
    images: list[EncodedFile] = field(default_factory=list)
    pdfs: list[EncodedFile] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_content(self) -> bool:
        return self.has_text or bool(self.images) or bool(self.pdfs)

    def describe(self) -> dict[str, Any]:
        """Summary of the request for logging."""
        return {
            "has_text": self.has_text,
            "images": len(self.images),
            "pdfs": len(self.pdfs),
        }
