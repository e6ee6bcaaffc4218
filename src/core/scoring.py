"""Pass-probability scoring.

Flashcards are weighted by strength (strong = 1, okay = 0.5, weak = 0) and
the result is expressed as a whole percentage. Rounding is half-up and done
in integer arithmetic so that, e.g., 62.5 always becomes 63.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from src.core.models import Flashcard, Strength

# Points per card, scaled by 100 to stay in integers
STRENGTH_POINTS = {
    Strength.WEAK: 0,
    Strength.OKAY: 50,
    Strength.STRONG: 100,
}

# (upper bound exclusive, label)
PASS_STATUS_LEVELS = (
    (40, "Needs Work"),
    (70, "Getting There"),
    (85, "Almost Ready"),
)
READY_STATUS = "Ready to Pass!"


def _round_half_up(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` to the nearest int, halves up."""
    return (2 * numerator + denominator) // (2 * denominator)


def strength_breakdown(cards: Iterable[Flashcard]) -> dict[Strength, int]:
    """Count cards per strength, including zero counts."""
    counts = Counter(card.strength for card in cards)
    return {strength: counts.get(strength, 0) for strength in Strength}


def compute_pass_percentage(cards: Iterable[Flashcard]) -> int:
    """Confidence percentage (0-100) derived from flashcard strengths.

    An empty collection yields 0; callers must use a separate ``has_data``
    flag to tell "no data" apart from "0% confidence".
    """
    breakdown = strength_breakdown(cards)
    total = sum(breakdown.values())
    if total == 0:
        return 0

    points = sum(STRENGTH_POINTS[strength] * n for strength, n in breakdown.items())
    return _round_half_up(points, total)


def compute_quiz_percentage(correct_count: int, total: int) -> int:
    """Share of correctly answered questions as a whole percentage."""
    if total == 0:
        return 0
    if total < 0 or not 0 <= correct_count <= total:
        raise ValueError(
            f"correct_count must be within [0, total], got {correct_count}/{total}"
        )
    return _round_half_up(100 * correct_count, total)


def pass_status(percentage: int) -> str:
    """Readiness label shown next to a pass meter."""
    for upper_bound, label in PASS_STATUS_LEVELS:
        if percentage < upper_bound:
            return label
    return READY_STATUS
