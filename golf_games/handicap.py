from __future__ import annotations

from collections.abc import Mapping, Sequence
import math
from typing import Optional

from .models import NO_SCORE, HoleDefinition, ScoringInputError


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _check_stroke_index(stroke_index: int, hole_count: int) -> None:
    if hole_count < 1:
        raise ScoringInputError(f"hole_count must be positive, got {hole_count}.")
    if not 1 <= stroke_index <= hole_count:
        raise ScoringInputError(
            f"Stroke index {stroke_index} outside 1..{hole_count}."
        )


def strokes_for_hole(
    stroke_index: int,
    handicap_differential: float,
    hole_count: int = 18,
) -> int:
    """Number of handicap strokes that move on a hole.

    One stroke when ``stroke_index <= round(|differential|)``, plus one more for
    every full pass of ``hole_count`` beyond the first. The sign of the
    differential is ignored here; see :func:`stroke_adjustment`.
    """
    _check_stroke_index(stroke_index, hole_count)
    if handicap_differential is None or not math.isfinite(handicap_differential):
        raise ScoringInputError(f"Invalid handicap differential: {handicap_differential!r}.")

    pool = _round_half_up(abs(handicap_differential))
    if pool < stroke_index:
        return 0
    return (pool - stroke_index) // hole_count + 1


def stroke_adjustment(
    stroke_index: int,
    handicap: Optional[float],
    hole_count: int = 18,
) -> int:
    """Signed strokes to subtract from gross. Plus handicaps give strokes back."""
    if handicap is None:
        return 0
    strokes = strokes_for_hole(stroke_index, handicap, hole_count)
    return -strokes if handicap < 0 else strokes


def net_score(
    gross: Optional[int],
    stroke_index: int,
    handicap: Optional[float],
    hole_count: int = 18,
) -> Optional[int]:
    if gross is None or gross == NO_SCORE:
        return gross
    return gross - stroke_adjustment(stroke_index, handicap, hole_count)


def match_differentials(handicaps: Mapping[str, Optional[float]]) -> dict[str, float]:
    """Everyone plays off the lowest handicap in the group."""
    known = [value for value in handicaps.values() if value is not None]
    if not known:
        return {key: 0.0 for key in handicaps}
    low = min(known)
    return {
        key: (float(value) - low if value is not None else 0.0)
        for key, value in handicaps.items()
    }


def validate_course(holes: Sequence[HoleDefinition]) -> None:
    if not holes:
        raise ScoringInputError("A game needs at least one hole.")

    numbers = [hole.hole_number for hole in holes]
    if len(set(numbers)) != len(numbers):
        raise ScoringInputError("Duplicate hole numbers in course definition.")

    indexes = [hole.stroke_index for hole in holes]
    if len(set(indexes)) != len(indexes):
        raise ScoringInputError("Stroke indices must be unique within a round.")

    if len(holes) == 18 and sorted(indexes) != list(range(1, 19)):
        raise ScoringInputError("Stroke indices for 18 holes must be a permutation of 1..18.")


def allocation_hole_count(holes: Sequence[HoleDefinition]) -> int:
    """9-hole sets indexed 1..9 wrap every 9 strokes, anything else every 18."""
    count = len(holes)
    if all(hole.stroke_index <= count for hole in holes):
        return count
    return 18
