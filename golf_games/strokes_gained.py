from __future__ import annotations

import logging
import math
from typing import Optional

from .baseline import GREEN, BaselineTable, load_default_baseline, normalize_lie
from .models import ScoringInputError, ShotCategory, ShotRecord, ShotType

logger = logging.getLogger(__name__)

# A ball hit out of bounds costs the stroke plus one penalty stroke and is
# replayed from the same spot.
OUT_OF_BOUNDS_PENALTY = 1.0


def _check_distance(name: str, value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        raise ScoringInputError(f"{name} must be a finite number, got {value!r}.")
    if value < 0:
        raise ScoringInputError(f"{name} cannot be negative, got {value}.")
    return float(value)


def category_for_shot(shot_type: ShotType) -> ShotCategory:
    return "putting" if shot_type == "putt" else "long_game"


class StrokesGainedCalculator:
    def __init__(self, table: Optional[BaselineTable] = None):
        self._table = table or load_default_baseline()

    @property
    def table(self) -> BaselineTable:
        return self._table

    def expected(self, category: ShotCategory, distance: float, lie: Optional[str]) -> float:
        """Expected strokes to hole out from the start of a shot.

        Long game shots never start on the putting curve: a ``green`` start lie
        is read as fairway. Ends on the green are handled by the caller.
        """
        if category == "putting":
            return self._table.expected_putting(distance)
        if category == "long_game":
            normalized = normalize_lie(lie)
            return self._table.expected_long_game(distance, "fairway" if normalized == GREEN else normalized)
        raise ScoringInputError(f"Unknown shot category: {category!r}.")

    def calculate_strokes_gained(
        self,
        category: ShotCategory,
        start_distance: float,
        start_lie: Optional[str],
        holed: bool,
        end_lie: Optional[str] = None,
        end_distance: Optional[float] = None,
    ) -> float:
        """Strokes gained for one shot: ``E(start) - (1 + E(end))``."""
        start = _check_distance("start_distance", start_distance)
        if holed and end_distance:
            raise ScoringInputError("A holed shot cannot have an end distance.")
        if start == 0:
            logger.debug("Shot starts at the hole, strokes gained is 0.")
            return 0.0

        expected_start = self.expected(category, start, start_lie)
        if holed:
            return expected_start - 1.0

        end = _check_distance("end_distance", end_distance)
        if end_lie is None:
            if category != "putting":
                raise ScoringInputError("end_lie is required for a shot that was not holed.")
            end_lie = GREEN
        if normalize_lie(end_lie) == GREEN:
            expected_end = self._table.expected_putting(end)
        else:
            expected_end = self._table.expected_long_game(end, end_lie)
        return expected_start - (1.0 + expected_end)

    def calculate_out_of_bounds(
        self,
        category: ShotCategory,
        start_distance: float,
        start_lie: Optional[str],
    ) -> float:
        start = _check_distance("start_distance", start_distance)
        if start == 0:
            return 0.0
        expected_start = self.expected(category, start, start_lie)
        return expected_start - (1.0 + expected_start + OUT_OF_BOUNDS_PENALTY)

    def record_shot(
        self,
        shot_type: ShotType,
        start_distance: float,
        start_lie: Optional[str],
        holed: bool = False,
        end_distance: Optional[float] = None,
        end_lie: Optional[str] = None,
        is_out_of_bounds: bool = False,
    ) -> ShotRecord:
        category = category_for_shot(shot_type)
        lie = GREEN if shot_type == "putt" else (start_lie or "fairway")
        if is_out_of_bounds:
            value = self.calculate_out_of_bounds(category, start_distance, lie)
            return ShotRecord(
                type=shot_type,
                start_distance=start_distance,
                start_lie=lie,
                end_distance=start_distance,
                end_lie=lie,
                strokes_gained=value,
                is_out_of_bounds=True,
            )

        value = self.calculate_strokes_gained(
            category,
            start_distance,
            lie,
            holed,
            end_lie=end_lie,
            end_distance=end_distance,
        )
        return ShotRecord(
            type=shot_type,
            start_distance=start_distance,
            start_lie=lie,
            holed=holed,
            end_distance=None if holed else end_distance,
            end_lie=None if holed else (end_lie or (GREEN if shot_type == "putt" else None)),
            strokes_gained=value,
        )
