from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math
from typing import Optional

from .models import (
    NO_SCORE,
    CopenhagenGame,
    CopenhagenHoleResult,
    CopenhagenResult,
    PressRequest,
    PressResult,
    ScoringInputError,
)
from .scorecard import Scorecard

logger = logging.getLogger(__name__)

# Points by finishing position (best first) for each ranking pattern.
COPENHAGEN_PAYOUTS: dict[str, tuple[int, int, int]] = {
    "sweep": (6, 0, 0),
    "distinct": (4, 2, 0),
    "tie_first": (3, 3, 0),
    "tie_second": (4, 1, 1),
    "all_tied": (2, 2, 2),
}


@dataclass(frozen=True)
class HolePoints:
    points: tuple[int, int, int]
    pattern: str
    sweep_winner: Optional[int] = None

    @property
    def is_sweep(self) -> bool:
        return self.pattern == "sweep"


def ranking_pattern(
    scores: Sequence[float],
    par: int,
    sweep_margin: int = 1,
    sweep_requires_birdie: bool = True,
) -> tuple[str, list[int]]:
    """Classify three scores and return the pattern plus player order, best first."""
    order = sorted(range(3), key=lambda index: scores[index])
    low, mid, high = (scores[index] for index in order)

    if (
        math.isfinite(low)
        and low < mid
        and mid - low >= sweep_margin
        and high - low >= sweep_margin
        and (not sweep_requires_birdie or low <= par - 1)
    ):
        return "sweep", order
    if low == mid == high:
        return "all_tied", order
    if low == mid:
        return "tie_first", order
    if mid == high:
        return "tie_second", order
    return "distinct", order


def copenhagen_points(
    scores: Sequence[Optional[int]],
    par: int,
    sweep_margin: int = 1,
    sweep_requires_birdie: bool = True,
) -> HolePoints:
    if len(scores) != 3:
        raise ScoringInputError(f"Copenhagen needs exactly 3 scores, got {len(scores)}.")
    values = [
        math.inf if score is None or score == NO_SCORE else float(score) for score in scores
    ]
    pattern, order = ranking_pattern(values, par, sweep_margin, sweep_requires_birdie)
    payout = COPENHAGEN_PAYOUTS[pattern]
    points = [0, 0, 0]
    for position, index in enumerate(order):
        points[index] = payout[position]
    return HolePoints(
        points=(points[0], points[1], points[2]),
        pattern=pattern,
        sweep_winner=order[0] + 1 if pattern == "sweep" else None,
    )


def normalize_points(totals: Sequence[int]) -> list[int]:
    """Subtract the lowest total so the trailing player shows 0 (10-5-5 -> 5-0-0)."""
    low = min(totals)
    return [value - low for value in totals]


def point_differentials(totals: Sequence[int]) -> list[float]:
    average = sum(totals) / len(totals)
    return [value - average for value in totals]


def _leader_indexes(totals: Sequence[int]) -> list[int]:
    best = max(totals)
    if best == 0:
        return []
    return [index + 1 for index, value in enumerate(totals) if value == best]


def _press_id(press: PressRequest, position: int) -> str:
    return press.id or f"press-{position}"


def score_copenhagen(game: CopenhagenGame) -> CopenhagenResult:
    player_ids = [player.player_id for player in game.players]
    if len(set(player_ids)) != 3:
        raise ScoringInputError("Copenhagen needs three distinct players.")

    handicaps = {player.player_id: player.handicap for player in game.players}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)
    last_hole = max(hole.hole_number for hole in card.holes)

    press_ids = [_press_id(press, position) for position, press in enumerate(game.presses, start=1)]
    if len(set(press_ids)) != len(press_ids):
        raise ScoringInputError("Press ids must be unique.")
    for press in game.presses:
        if press.start_hole >= last_hole:
            raise ScoringInputError(
                f"A press started after hole {press.start_hole} has no holes left to play."
            )

    totals = [0, 0, 0]
    press_totals = {press_id: [0, 0, 0] for press_id in press_ids}
    totals_after: dict[int, list[int]] = {0: [0, 0, 0]}
    holes: list[CopenhagenHoleResult] = []
    played = 0
    sweeps = 0

    for scored in card:
        gross = [scored.gross[pid] for pid in player_ids]
        net = [scored.net[pid] for pid in player_ids]
        press_points: dict[str, list[int]] = {}

        if not scored.is_complete:
            points = [0, 0, 0]
            hole_points: Optional[HolePoints] = None
        else:
            hole_points = copenhagen_points(
                net, scored.par, game.sweep_margin, game.sweep_requires_birdie
            )
            points = list(hole_points.points)
            played += 1
            if hole_points.is_sweep:
                sweeps += 1
                logger.debug("Sweep on hole %s by player %s.", scored.hole_number, hole_points.sweep_winner)
            for press, press_id in zip(game.presses, press_ids):
                if scored.hole_number > press.start_hole:
                    press_points[press_id] = list(points)
                    press_totals[press_id] = [
                        total + value for total, value in zip(press_totals[press_id], points)
                    ]

        totals = [total + value for total, value in zip(totals, points)]
        totals_after[scored.hole_number] = list(totals)
        holes.append(
            CopenhagenHoleResult(
                hole_number=scored.hole_number,
                par=scored.par,
                gross=gross,
                net=net,
                is_resolved=hole_points is not None,
                points=points,
                is_sweep=bool(hole_points and hole_points.is_sweep),
                sweep_winner=hole_points.sweep_winner if hole_points else None,
                running_totals=list(totals),
                press_points=press_points,
            )
        )

    is_complete = played == card.hole_count
    if game.press_requires_trailing:
        for press in game.presses:
            standing = _standing_after(totals_after, press.start_hole)
            if standing[press.initiating_player_index - 1] >= max(standing):
                raise ScoringInputError(
                    f"Player {press.initiating_player_index} is not trailing after hole "
                    f"{press.start_hole} and cannot press."
                )

    presses = [
        PressResult(
            id=press_id,
            start_hole=press.start_hole,
            initiating_player_index=press.initiating_player_index,
            is_active=not is_complete,
            points=press_totals[press_id],
            leader_indexes=_leader_indexes(press_totals[press_id]),
        )
        for press, press_id in zip(game.presses, press_ids)
    ]
    return CopenhagenResult(
        player_ids=player_ids,
        holes=holes,
        total_points=totals,
        normalized_points=normalize_points(totals),
        differentials=point_differentials(totals),
        presses=presses,
        sweeps=sweeps,
        holes_played=played,
        is_complete=is_complete,
        leader_ids=[player_ids[index - 1] for index in _leader_indexes(totals)],
    )


def _standing_after(totals_after: dict[int, list[int]], hole_number: int) -> list[int]:
    eligible = [number for number in totals_after if number <= hole_number]
    return totals_after[max(eligible)]
