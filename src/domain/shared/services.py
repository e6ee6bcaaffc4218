"""Domain service base class and the Prepass error taxonomy.

Each domain service wraps one business operation behind an async ``call``
and reports outcomes as domain events. Failures are raised as
``PrepassError`` subclasses and turned into user-facing messages by the CLI.
"""

from __future__ import annotations

import functools
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from src.infrastructure.messaging.event_bus import DomainEvent, EventBus

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
ResultT = TypeVar("ResultT")


class PrepassError(Exception):
    """Base exception for all Prepass failures."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialize error.

        Args:
            message: What went wrong, suitable for showing to the user
            error_code: Stable machine-readable code, e.g. ``RATE_LIMITED``
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    @property
    def user_message(self) -> str:
        """Text to show the user; falls back to a generic message."""
        return self.message or self.default_message


class InputError(PrepassError):
    """No content was supplied to the analysis flow."""

    def __init__(self, message: str = "Please provide notes, images or PDFs.") -> None:
        super().__init__(message, "INPUT_ERROR")


class ValidationError(PrepassError):
    """A single uploaded file failed a type or size constraint."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR")
        # Path of the rejected file
        self.field = field


class ServiceError(PrepassError):
    """The notes-analysis call failed or returned an unusable payload."""

    default_message = "Failed to analyze notes. Please try again."

    def __init__(self, message: str = "", error_code: str = "SERVICE_ERROR") -> None:
        super().__init__(message, error_code)


class RateLimitError(ServiceError):
    """The AI service is throttling requests."""

    def __init__(
        self, message: str = "Rate limit exceeded. Please try again in a moment."
    ) -> None:
        super().__init__(message, "RATE_LIMITED")


class QuotaExceededError(ServiceError):
    """The AI service account has run out of credits."""

    def __init__(
        self, message: str = "AI credits exhausted. Please add more credits."
    ) -> None:
        super().__init__(message, "QUOTA_EXCEEDED")


class PersistenceError(PrepassError):
    """A create, update or delete against the record store failed."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message, "PERSISTENCE_ERROR")
        self.operation = operation


class DomainService(ABC, Generic[RequestT, ResultT]):
    """One business operation exposed as ``await service.call(request)``.

    Subclasses are named verb + noun (``AnalyzeNotes``).
    """

    def __init__(self, event_bus: EventBus) -> None:
        self.event_bus = event_bus
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def call(self, request: RequestT) -> ResultT:
        """Run the operation.

        Raises:
            PrepassError: The operation could not be completed
        """

    async def _publish_event(self, event: DomainEvent) -> None:
        """Publish ``event``; a broken bus is logged, never raised."""
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            self.logger.error(f"Failed to publish event {event.event_name}: {e}")


def log_domain_operation(
    func: Callable[..., Awaitable[Any]],
) -> Callable[..., Awaitable[Any]]:
    """Log duration and outcome of a domain service ``call``.

    Expected failures (``PrepassError``) are logged as warnings with their
    error code; anything else is logged as an error. Both are re-raised.
    """

    @functools.wraps(func)
    async def wrapper(self: Any, request: Any) -> Any:
        name = f"{self.__class__.__name__}.call"
        describe = getattr(request, "describe", None)
        self.logger.info(f"Starting {name} {describe() if callable(describe) else ''}".rstrip())

        start = time.perf_counter()
        try:
            result = await func(self, request)
        except PrepassError as e:
            self.logger.warning(
                f"{name} failed after {time.perf_counter() - start:.3f}s "
                f"[{e.error_code}]: {e.user_message}"
            )
            raise
        except Exception as e:
            self.logger.error(f"{name} crashed after {time.perf_counter() - start:.3f}s: {e}")
            raise

        self.logger.info(f"Completed {name} in {time.perf_counter() - start:.3f}s")
        return result

    return wrapper
