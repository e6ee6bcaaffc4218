"""Domain service turning study notes into flashcards, quizzes and key points."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any

import pydantic
from google.genai import types

from src.core.settings import Settings, get_settings
from src.domain.content.events.content_events import (
    ContentGenerationFailedEvent,
    NotesAnalyzedEvent,
)
from src.domain.content.models.analysis_models import AnalysisRequest, AnalysisResult
from src.domain.shared.services import (
    DomainService,
    InputError,
    ServiceError,
    log_domain_operation,
)
from src.infrastructure.external.gemini_client import GeminiClient
from src.infrastructure.messaging.event_bus import EventBus

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert educational content analyzer. Your task is to analyze study notes and generate high-quality learning materials.

When analyzing notes (from text, images or PDFs), you must:
1. Extract ALL key concepts, definitions, formulas, dates, and important facts
2. Generate flashcards with clear question-answer pairs
3. Create quiz questions (MCQs with exactly 4 options)
4. Identify the most exam-likely important points

Return ONLY valid JSON with this exact structure:
{{
  "flashcards": [
    {{"front": "question text", "back": "answer text"}}
  ],
  "quizzes": [
    {{"question": "question text", "options": ["option1", "option2", "option3", "option4"], "correctIndex": 0}}
  ],
  "importantPoints": ["point 1", "point 2"],
  "summary": "Brief 2-3 sentence summary of the content"
}}

Generate at least {min_flashcards} flashcards and {min_quizzes} quizzes from the content. Make them challenging but fair."""

FILE_INSTRUCTION = (
    "Analyze the attached study notes. Extract all text (use OCR for images), "
    "then generate flashcards, quiz questions, and identify important "
    "exam-likely points. Return ONLY valid JSON."
)
TEXT_INSTRUCTION = (
    "Analyze these study notes and generate flashcards, quiz questions, and "
    "identify important exam-likely points. Return ONLY valid JSON."
)


def parse_analysis_payload(payload: dict[str, Any]) -> AnalysisResult:
    """Validate a raw analysis payload.

    Raises:
        ServiceError: The payload carries an explicit error, is malformed, or
            contains no study material. Nothing partial is returned.
    """
    if payload.get("error"):
        raise ServiceError(str(payload["error"]))

    try:
        result = AnalysisResult.model_validate(payload)
    except pydantic.ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.error(f"Malformed analysis payload: {fields}")
        raise ServiceError(
            f"AI response was malformed ({', '.join(fields)})", "MALFORMED_PAYLOAD"
        ) from e

    if result.is_empty:
        raise ServiceError("AI response contained no study material", "EMPTY_PAYLOAD")
    return result


class AnalyzeNotes(DomainService[AnalysisRequest, AnalysisResult]):
    """Generate study material from notes with the Gemini model."""

    def __init__(
        self,
        event_bus: EventBus,
        client: GeminiClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(event_bus)
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient(self.settings)
        return self._client

    @log_domain_operation
    async def call(self, request: AnalysisRequest) -> AnalysisResult:
        """Analyze the notes in ``request``.

        Raises:
            InputError: Neither text nor files were supplied; no call is made
            ServiceError: The AI call failed or returned an unusable payload
        """
        if not request.has_content:
            raise InputError("No content provided")

        logger.info(f"Analyzing notes: {request.describe()}")
        start_time = time.time()

        try:
            parts = self._build_parts(request)
            system_prompt = SYSTEM_PROMPT.format(
                min_flashcards=self.settings.min_flashcards,
                min_quizzes=self.settings.min_quizzes,
            )
            payload = await asyncio.to_thread(
                self.client.generate_json_response, parts, system_prompt
            )
            result = parse_analysis_payload(payload)
        except ServiceError as e:
            await self._publish_event(
                ContentGenerationFailedEvent(
                    error_code=e.error_code or "SERVICE_ERROR",
                    error_message=e.user_message,
                )
            )
            raise

        self._warn_if_sparse(result)
        await self._publish_event(
            NotesAnalyzedEvent(
                flashcard_count=len(result.flashcards),
                quiz_count=len(result.quizzes),
                point_count=len(result.important_points),
                image_count=len(request.images),
                pdf_count=len(request.pdfs),
                generation_time_ms=int((time.time() - start_time) * 1000),
            )
        )
        return result

    def _build_parts(self, request: AnalysisRequest) -> list[types.Part]:
        """Build the user message: instructions, notes text, then files."""
        has_files = bool(request.images or request.pdfs)
        instruction = FILE_INSTRUCTION if has_files else TEXT_INSTRUCTION
        if request.has_text:
            instruction += f"\n\nNotes:\n{request.text}"

        parts = [types.Part.from_text(text=instruction)]
        for encoded in [*request.images, *request.pdfs]:
            try:
                data = base64.b64decode(encoded.data, validate=True)
            except ValueError as e:
                raise ServiceError(
                    f"{encoded.filename} could not be decoded", "ENCODING_ERROR"
                ) from e
            parts.append(types.Part.from_bytes(data=data, mime_type=encoded.mime_type))
        return parts

    def _warn_if_sparse(self, result: AnalysisResult) -> None:
        if len(result.flashcards) < self.settings.min_flashcards:
            logger.warning(
                f"Expected at least {self.settings.min_flashcards} flashcards, "
                f"got {len(result.flashcards)}"
            )
        if len(result.quizzes) < self.settings.min_quizzes:
            logger.warning(
                f"Expected at least {self.settings.min_quizzes} quizzes, "
                f"got {len(result.quizzes)}"
            )
