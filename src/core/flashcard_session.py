"""Flashcard review session.

The session walks an ordered set of flashcards, lets the user grade the
current card and navigate with wrap-around. It works on the caller's card
objects (so grades are visible to the owner) but keeps its own ordering, so
shuffling never reorders the owner's collection.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable

from src.core.models import Flashcard, Strength
from src.core.scoring import compute_pass_percentage

logger = logging.getLogger(__name__)

# Called with the graded card and its strength before the change
GradeCallback = Callable[[Flashcard, Strength], None]


class FlashcardSession:
    """Navigation and grading state over a flashcard collection."""

    def __init__(
        self,
        cards: Iterable[Flashcard],
        on_grade: GradeCallback | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            cards: Flashcards to review, in presentation order
            on_grade: Persists a grade change; may raise PersistenceError
            rng: Random source used by shuffle
        """
        self._cards: list[Flashcard] = list(cards)
        self._on_grade = on_grade
        self._rng = rng or random.Random()
        self.current_index = 0
        self.is_flipped = False

    @property
    def cards(self) -> tuple[Flashcard, ...]:
        return tuple(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    @property
    def current_card(self) -> Flashcard | None:
        if self.is_empty:
            return None
        return self._cards[self.current_index]

    @property
    def position(self) -> str:
        """Human readable position, e.g. ``Card 2 of 5``."""
        if self.is_empty:
            return "No cards"
        return f"Card {self.current_index + 1} of {len(self._cards)}"

    @property
    def pass_percentage(self) -> int:
        return compute_pass_percentage(self._cards)

    def sync(self, cards: Iterable[Flashcard]) -> None:
        """Replace the card set after the owner's collection changed."""
        self._cards = list(cards)
        if self.current_index >= len(self._cards):
            self.current_index = 0
        self.is_flipped = False

    def grade_current(self, strength: Strength | str) -> Flashcard | None:
        """Set the strength of the current card and notify the owner.

        The in-memory grade is applied first. If the owner callback raises
        (normally a PersistenceError), the grade is rolled back and the error
        re-raised; the session stays navigable either way.

        Returns:
            The graded card, or None when the session is empty
        """
        card = self.current_card
        if card is None:
            return None

        new_strength = Strength(strength)
        previous = card.strength
        card.strength = new_strength

        if self._on_grade is not None:
            try:
                self._on_grade(card, previous)
            except Exception:
                card.strength = previous
                logger.warning(
                    f"Rolled back grade of card {card.id} to {previous.value}"
                )
                raise

        logger.debug(f"Graded card {card.id}: {previous.value} -> {new_strength.value}")
        return card

    def next(self) -> None:
        if self.is_empty:
            return
        self.current_index = (self.current_index + 1) % len(self._cards)
        self.is_flipped = False

    def previous(self) -> None:
        if self.is_empty:
            return
        self.current_index = (self.current_index - 1 + len(self._cards)) % len(
            self._cards
        )
        self.is_flipped = False

    def shuffle(self) -> None:
        """Uniformly permute the cards and go back to the first one."""
        # random.shuffle is a Fisher-Yates shuffle
        self._rng.shuffle(self._cards)
        self.current_index = 0
        self.is_flipped = False

    def restart(self) -> None:
        """Go back to the first card without touching grades."""
        self.current_index = 0
        self.is_flipped = False

    def flip(self) -> bool:
        """Toggle between the front and back of the current card."""
        if self.is_empty:
            return False
        self.is_flipped = not self.is_flipped
        return self.is_flipped
