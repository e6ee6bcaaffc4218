"""Gemini client wrapper for generating study material as JSON."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from google import genai
from google.genai import errors, types

from src.core.settings import Settings, get_settings
from src.domain.shared.services import (
    QuotaExceededError,
    RateLimitError,
    ServiceError,
)

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("quota", "credit", "billing")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block from a model response."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _is_overloaded(error: Exception) -> bool:
    message = str(error).lower()
    return "overloaded" in message or "unavailable" in message


def _translate_api_error(error: errors.APIError) -> ServiceError:
    """Map an API error onto the service error the user should see."""
    message = str(error).lower()
    if error.code == 402 or (
        error.code == 429 and any(marker in message for marker in QUOTA_MARKERS)
    ):
        return QuotaExceededError()
    if error.code == 429:
        return RateLimitError()
    return ServiceError(f"AI service error: {error.code}")


class GeminiClient:
    """Thin wrapper around the Google Gemini client."""

    def __init__(self, settings: Settings | None = None):
        if settings is None:
            settings = get_settings()

        self.settings = settings
        self.project_id = settings.gcp_project_id
        self.region = settings.gcp_region
        self.model_id = settings.gemini_model
        self.use_vertex_ai = settings.use_vertex_ai

        if self.use_vertex_ai:
            if not self.project_id:
                raise ServiceError("GCP_PROJECT_ID is required for Vertex AI")

            self.client = genai.Client(
                vertexai=True,
                project=self.project_id,
                location=self.region,
            )
        else:
            self.api_key = settings.gemini_api_key
            if not self.api_key:
                raise ServiceError("AI service is not configured")

            self.client = genai.Client(api_key=self.api_key)

        logger.info(f"Initialized Gemini client with model: {self.model_id}")

    def generate_json_response(
        self,
        parts: list[types.Part],
        system_instruction: str | None = None,
        max_output_tokens: int = 8192,
        temperature: float = 0.3,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ) -> dict[str, Any]:
        """Generate a structured JSON response from multimodal parts.

        Args:
            parts: Text, image and PDF parts making up the user message
            system_instruction: Instructions describing the expected JSON
            max_output_tokens: Output token ceiling
            temperature: Sampling temperature
            max_retries: Attempts before giving up on overload or bad JSON
            retry_delay: Initial delay between attempts, doubled each retry

        Returns:
            The parsed JSON object

        Raises:
            RateLimitError: The service is throttling requests
            QuotaExceededError: The account ran out of credits
            ServiceError: Any other failure, including unparseable output
        """
        contents = [types.Content(role="user", parts=parts)]
        generate_config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            response_mime_type="application/json",
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

        for attempt in range(max_retries):
            logger.debug(f"Generating JSON (attempt {attempt + 1}/{max_retries})")
            try:
                response = self.client.models.generate_content(
                    model=self.model_id,
                    contents=contents,
                    config=generate_config,
                )
            except errors.APIError as e:
                if _is_overloaded(e) and attempt < max_retries - 1:
                    logger.warning(f"API overloaded, retrying in {retry_delay}s...")
                    time.sleep(retry_delay)
                    retry_delay *= 2
                    continue
                logger.error(f"AI gateway error: {e.code} {e}")
                raise _translate_api_error(e) from e

            response_text = strip_code_fences(response.text or "")
            if not response_text:
                raise ServiceError("No content in AI response")

            try:
                parsed = json.loads(response_text)
            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse JSON response: {e}")
                logger.debug(f"Raw content: {response_text[:500]}")
                if attempt < max_retries - 1:
                    continue
                raise ServiceError("Failed to parse AI response as JSON") from e

            if not isinstance(parsed, dict):
                raise ServiceError("AI response is not a JSON object")
            logger.debug(f"JSON response length: {len(response_text)}")
            return parsed

        raise ServiceError("Failed to generate a response after all retries")
