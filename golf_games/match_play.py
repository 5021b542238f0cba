from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Union

from .handicap import match_differentials
from .models import (
    BestBallGame,
    MatchOutcome,
    MatchPlayGame,
    MatchPlayHoleResult,
    MatchPlayResult,
    PlayerRef,
    ScoringInputError,
    SideSummary,
)
from .scorecard import Scorecard, best_of, compare_sides

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Side:
    side_id: str
    name: str
    players: tuple[PlayerRef, ...]

    @property
    def player_ids(self) -> list[str]:
        return [player.player_id for player in self.players]

    def summary(self) -> SideSummary:
        return SideSummary(side_id=self.side_id, name=self.name, player_ids=self.player_ids)


def is_decided(match_status: int, holes_remaining: int) -> bool:
    return abs(match_status) > holes_remaining


def is_dormie(match_status: int, holes_remaining: int) -> bool:
    return match_status != 0 and abs(match_status) == holes_remaining


def format_status(match_status: int, holes_remaining: int, decided: bool = False) -> str:
    """Match status from side A's point of view: ``AS``, ``2 UP``, ``3 DOWN``."""
    if match_status == 0:
        return "AS"
    text = f"{abs(match_status)} {'UP' if match_status > 0 else 'DOWN'}"
    if decided and holes_remaining > 0:
        return f"{text} with {holes_remaining} to play"
    return text


def final_result(match_status: int, holes_remaining: int) -> str:
    """Scorecard style result: ``3 & 2``, ``1 UP``, ``All Square``."""
    if match_status == 0:
        return "All Square"
    lead = abs(match_status)
    if holes_remaining > 0:
        return f"{lead} & {holes_remaining}"
    return f"{lead} UP"


def _outcomes(match_status: int) -> tuple[MatchOutcome, MatchOutcome]:
    if match_status > 0:
        return "WIN", "LOSS"
    if match_status < 0:
        return "LOSS", "WIN"
    return "TIE", "TIE"


def _sides(game: Union[MatchPlayGame, BestBallGame]) -> tuple[_Side, _Side]:
    if isinstance(game, MatchPlayGame):
        a, b = game.players
        return (
            _Side(side_id=a.player_id, name=a.name, players=(a,)),
            _Side(side_id=b.player_id, name=b.name, players=(b,)),
        )

    team_a, team_b = game.teams
    for team in (team_a, team_b):
        if not team.players:
            raise ScoringInputError(f"Team {team.name!r} has no players.")
    return (
        _Side(side_id=team_a.team_id, name=team_a.name, players=tuple(team_a.players)),
        _Side(side_id=team_b.team_id, name=team_b.name, players=tuple(team_b.players)),
    )


def score_match(game: Union[MatchPlayGame, BestBallGame]) -> MatchPlayResult:
    side_a, side_b = _sides(game)
    all_players = [*side_a.players, *side_b.players]
    player_ids = [player.player_id for player in all_players]
    if len(set(player_ids)) != len(player_ids):
        raise ScoringInputError("A player cannot appear on both sides of a match.")

    handicaps = {player.player_id: player.handicap for player in all_players}
    if game.use_handicaps and game.allocation == "difference":
        handicaps = match_differentials(handicaps)
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)

    total_holes = card.hole_count
    status = 0
    played = 0
    decided_on: Optional[int] = None
    decided_remaining = 0
    holes: list[MatchPlayHoleResult] = []
    history: list[int] = []

    for scored in card:
        base = dict(
            hole_number=scored.hole_number,
            par=scored.par,
            gross=dict(scored.gross),
            net=dict(scored.net),
        )
        if not scored.is_complete:
            holes.append(
                MatchPlayHoleResult(
                    **base,
                    match_status_after=status,
                    holes_remaining_after=total_holes - played,
                    status_text=format_status(
                        status,
                        decided_remaining if decided_on is not None else total_holes - played,
                        decided_on is not None,
                    ),
                )
            )
            history.append(status)
            continue

        a_score, a_counting = best_of(scored.net, side_a.player_ids)
        b_score, b_counting = best_of(scored.net, side_b.player_ids)
        result = compare_sides(a_score, b_score)
        played += 1
        counts = decided_on is None
        if counts:
            status += result
        remaining = total_holes - played
        if counts and is_decided(status, remaining):
            decided_on = scored.hole_number
            decided_remaining = remaining
            logger.debug("Match decided on hole %s at %s.", scored.hole_number, status)

        holes.append(
            MatchPlayHoleResult(
                **base,
                side_a_score=a_score,
                side_b_score=b_score,
                side_a_counting=a_counting,
                side_b_counting=b_counting,
                hole_result=result,
                counts=counts,
                match_status_after=status,
                holes_remaining_after=remaining,
                status_text=format_status(
                    status,
                    decided_remaining if decided_on is not None else remaining,
                    decided_on is not None,
                ),
            )
        )
        history.append(status)

    remaining = total_holes - played
    decided = decided_on is not None
    finished = decided or remaining == 0
    text_remaining = decided_remaining if decided else remaining
    outcome_a: Optional[MatchOutcome] = None
    outcome_b: Optional[MatchOutcome] = None
    winner: Optional[str] = None
    if finished:
        outcome_a, outcome_b = _outcomes(status)
        if status > 0:
            winner = side_a.side_id
        elif status < 0:
            winner = side_b.side_id

    return MatchPlayResult(
        format=game.format,
        side_a=side_a.summary(),
        side_b=side_b.summary(),
        holes=holes,
        match_status=status,
        holes_played=played,
        holes_remaining=remaining,
        is_decided=decided,
        decided_on_hole=decided_on,
        is_dormie=not decided and is_dormie(status, remaining),
        is_finished=finished,
        status_text=format_status(status, text_remaining, decided),
        final_result=final_result(status, text_remaining) if finished else None,
        outcome_a=outcome_a,
        outcome_b=outcome_b,
        winner_side_id=winner,
        status_history=history,
    )
