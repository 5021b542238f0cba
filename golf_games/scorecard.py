from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
import logging
from typing import Optional

from .handicap import allocation_hole_count, net_score, validate_course
from .models import NO_SCORE, HoleDefinition, HoleScoreEntry, ScoringInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoredHole:
    hole: HoleDefinition
    gross: Mapping[str, Optional[int]]
    net: Mapping[str, Optional[int]]

    @property
    def hole_number(self) -> int:
        return self.hole.hole_number

    @property
    def par(self) -> int:
        return self.hole.par

    @property
    def is_complete(self) -> bool:
        return all(value is not None for value in self.gross.values())


class Scorecard:
    """Course holes joined with the score log for a fixed set of participants.

    Entries are applied in order, so a later entry for the same hole replaces an
    earlier one.
    """

    def __init__(
        self,
        holes: Sequence[HoleDefinition],
        entries: Sequence[HoleScoreEntry],
        handicaps: Mapping[str, Optional[float]],
        use_handicaps: bool = False,
    ):
        validate_course(holes)
        self._holes = sorted(holes, key=lambda hole: hole.hole_number)
        self._handicaps = dict(handicaps)
        self._use_handicaps = use_handicaps
        self._allocation_count = allocation_hole_count(self._holes)

        known_holes = {hole.hole_number for hole in self._holes}
        latest: dict[int, HoleScoreEntry] = {}
        for entry in entries:
            if entry.hole_number not in known_holes:
                raise ScoringInputError(
                    f"Score entry for hole {entry.hole_number} is not on this course."
                )
            unknown = set(entry.scores) - set(self._handicaps)
            if unknown:
                raise ScoringInputError(
                    f"Unknown participants on hole {entry.hole_number}: {sorted(unknown)}."
                )
            if entry.hole_number in latest:
                logger.debug("Hole %s entered twice, keeping latest entry.", entry.hole_number)
            latest[entry.hole_number] = entry
        self._entries = latest

    @property
    def holes(self) -> list[HoleDefinition]:
        return list(self._holes)

    @property
    def hole_count(self) -> int:
        return len(self._holes)

    @property
    def participant_ids(self) -> list[str]:
        return list(self._handicaps)

    def __iter__(self) -> Iterator[ScoredHole]:
        for hole in self._holes:
            entry = self._entries.get(hole.hole_number)
            raw = entry.scores if entry is not None else {}
            gross = {pid: raw.get(pid) for pid in self._handicaps}
            net = {
                pid: (
                    net_score(
                        score,
                        hole.stroke_index,
                        self._handicaps[pid],
                        self._allocation_count,
                    )
                    if self._use_handicaps
                    else score
                )
                for pid, score in gross.items()
            }
            yield ScoredHole(hole=hole, gross=gross, net=net)


def best_of(
    values: Mapping[str, Optional[int]],
    participant_ids: Sequence[str],
) -> tuple[Optional[int], Optional[str]]:
    """Lowest counting score among ``participant_ids`` and who made it."""
    best: Optional[int] = None
    counting: Optional[str] = None
    for pid in participant_ids:
        value = values.get(pid)
        if value is None or value == NO_SCORE:
            continue
        if best is None or value < best:
            best = value
            counting = pid
    return best, counting


def compare_sides(a: Optional[int], b: Optional[int]) -> int:
    """1 if side A wins, -1 if side B wins, 0 if halved. ``None`` is a side with no ball."""
    if a is None and b is None:
        return 0
    if b is None:
        return 1
    if a is None:
        return -1
    if a < b:
        return 1
    if b < a:
        return -1
    return 0
