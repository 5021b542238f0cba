from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
import math
from typing import Optional

from .aggregator import leaders
from .models import (
    NO_SCORE,
    ScoringInputError,
    ScrambleGame,
    ScrambleResult,
    SideSummary,
    StrokePlayGame,
    StrokePlayHoleResult,
    StrokePlayResult,
    StrokePlayStanding,
    TeamRef,
    UmbriagoGame,
    UmbriagoHoleInput,
    UmbriagoHoleResult,
    UmbriagoResult,
    UmbriagoRollResult,
)
from .scorecard import ScoredHole, Scorecard

logger = logging.getLogger(__name__)

UMBRIAGO_POINTS_PER_STROKE = 8


# ---------------------------------------------------------------------------
# Stroke play and scramble
# ---------------------------------------------------------------------------


def _counts(score: Optional[int]) -> bool:
    return score is not None and score != NO_SCORE


def assign_positions(values: Sequence[Optional[int]]) -> list[Optional[str]]:
    """Leaderboard positions for already sorted to-par values: ``1``, ``T2``, ``T2``, ``4``.

    ``None`` (nothing completed yet) gets no position.
    """
    positions: list[Optional[str]] = []
    for value in values:
        if value is None:
            positions.append(None)
            continue
        first = values.index(value)
        tied = values.count(value) > 1
        positions.append(f"T{first + 1}" if tied else str(first + 1))
    return positions


def _stroke_standings(
    card: Scorecard,
    names: Mapping[str, str],
    use_net: bool,
) -> tuple[list[StrokePlayHoleResult], list[StrokePlayStanding], int]:
    holes: list[StrokePlayHoleResult] = []
    standings = {
        pid: StrokePlayStanding(participant_id=pid, name=names[pid]) for pid in card.participant_ids
    }
    played = 0
    for scored in card:
        holes.append(
            StrokePlayHoleResult(
                hole_number=scored.hole_number,
                par=scored.par,
                gross=dict(scored.gross),
                net=dict(scored.net),
                is_resolved=scored.is_complete,
            )
        )
        if scored.is_complete:
            played += 1
        for pid, standing in standings.items():
            gross = scored.gross[pid]
            if gross is None:
                continue
            if gross == NO_SCORE:
                standing.incomplete_holes.append(scored.hole_number)
                continue
            net = scored.net[pid]
            standing.holes_completed += 1
            standing.gross_total += gross
            standing.net_total += net
            standing.to_par += (net if use_net else gross) - scored.par

    ordered = sorted(
        standings.values(),
        key=lambda standing: (
            standing.holes_completed == 0,
            standing.to_par,
            -standing.holes_completed,
        ),
    )
    positions = assign_positions(
        [standing.to_par if standing.holes_completed else None for standing in ordered]
    )
    for standing, position in zip(ordered, positions):
        standing.position = position
    return holes, ordered, played


def score_stroke_play(game: StrokePlayGame) -> StrokePlayResult:
    ids = [player.player_id for player in game.players]
    if len(set(ids)) != len(ids):
        raise ScoringInputError("Duplicate player ids in stroke play game.")

    handicaps = {player.player_id: player.handicap for player in game.players}
    names = {player.player_id: player.name for player in game.players}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)
    holes, standings, played = _stroke_standings(card, names, use_net=game.use_handicaps)
    return StrokePlayResult(
        scoring_type="net" if game.use_handicaps else "gross",
        holes=holes,
        standings=standings,
        holes_played=played,
        is_complete=played == card.hole_count,
        leader_ids=[standing.participant_id for standing in standings if standing.position in ("1", "T1")],
    )


def score_scramble(game: ScrambleGame) -> ScrambleResult:
    ids = [team.team_id for team in game.teams]
    if len(set(ids)) != len(ids):
        raise ScoringInputError("Duplicate team ids in scramble game.")

    use_net = game.scoring_type == "net"
    handicaps = {team.team_id: team.handicap for team in game.teams}
    names = {team.team_id: team.name for team in game.teams}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=use_net)
    holes, standings, played = _stroke_standings(card, names, use_net=use_net)
    return ScrambleResult(
        scoring_type=game.scoring_type,
        holes=holes,
        standings=standings,
        holes_played=played,
        is_complete=played == card.hole_count,
        leader_ids=[standing.participant_id for standing in standings if standing.position in ("1", "T1")],
    )


# ---------------------------------------------------------------------------
# Umbriago
# ---------------------------------------------------------------------------


def team_low_winner(team_scores: Mapping[str, Sequence[Optional[int]]]) -> Optional[str]:
    """Lowest combined team score. A team with a player who did not finish cannot win it."""
    totals: dict[str, Optional[int]] = {}
    for team_id, scores in team_scores.items():
        totals[team_id] = sum(scores) if all(_counts(score) for score in scores) else None

    finished = {team_id: total for team_id, total in totals.items() if total is not None}
    if not finished:
        return None
    if len(finished) == 1:
        return next(iter(finished))
    low = min(finished.values())
    holders = [team_id for team_id, total in finished.items() if total == low]
    return holders[0] if len(holders) == 1 else None


def individual_low_winner(team_scores: Mapping[str, Sequence[Optional[int]]]) -> Optional[str]:
    """Team holding the single lowest individual score; shared between teams is no winner."""
    best: dict[str, int] = {}
    for team_id, scores in team_scores.items():
        counting = [score for score in scores if score is not None and score > 0]
        if counting:
            best[team_id] = min(counting)
    if not best:
        return None
    low = min(best.values())
    holders = [team_id for team_id, value in best.items() if value == low]
    return holders[0] if len(holders) == 1 else None


def birdie_counts(team_scores: Mapping[str, Sequence[Optional[int]]], par: int) -> dict[str, int]:
    return {
        team_id: sum(1 for score in scores if _counts(score) and score < par)
        for team_id, scores in team_scores.items()
    }


def _strokes_under_par(scores: Sequence[Optional[int]], par: int) -> int:
    return sum(max(0, par - score) for score in scores if _counts(score))


def umbriago_hole_points(
    team_scores: Mapping[str, Sequence[Optional[int]]],
    par: int,
    closest_to_pin: Optional[str] = None,
    multiplier: int = 1,
) -> tuple[dict[str, int], dict]:
    """Points for one hole plus the category breakdown.

    Each of team low, individual low and closest to the pin is worth a point, and
    every birdie or better adds one more. Winning all three categories with at least
    one birdie is an umbriago, worth 8 points per net stroke under par instead.
    """
    team_low = team_low_winner(team_scores)
    individual_low = individual_low_winner(team_scores)
    birdies = birdie_counts(team_scores, par)

    points = {team_id: birdies[team_id] for team_id in team_scores}
    for winner in (team_low, individual_low, closest_to_pin):
        if winner is not None:
            points[winner] += 1

    umbriago_team: Optional[str] = None
    for team_id in team_scores:
        if team_low == individual_low == closest_to_pin == team_id and birdies[team_id] > 0:
            umbriago_team = team_id

    if umbriago_team is not None:
        under_par = {team_id: _strokes_under_par(scores, par) for team_id, scores in team_scores.items()}
        others = sum(value for team_id, value in under_par.items() if team_id != umbriago_team)
        points = {team_id: 0 for team_id in team_scores}
        points[umbriago_team] = (under_par[umbriago_team] - others) * UMBRIAGO_POINTS_PER_STROKE

    points = {team_id: value * multiplier for team_id, value in points.items()}
    categories = dict(
        team_low_winner=team_low,
        individual_low_winner=individual_low,
        closest_to_pin_winner=closest_to_pin,
        birdies=birdies,
        is_umbriago=umbriago_team is not None,
    )
    return points, categories


def apply_roll(totals: Mapping[str, int], stake: float) -> tuple[dict[str, int], float]:
    """Halve the point difference (rounded up) for the leader, reset the trailer, double the stake."""
    values = list(totals.values())
    difference = abs(values[0] - values[1])
    halved = math.ceil(difference / 2)
    leader = max(totals, key=lambda team_id: totals[team_id])
    after = {team_id: 0 for team_id in totals}
    if difference:
        after[leader] = halved
    return after, stake * 2


def umbriago_payout(
    totals: Mapping[str, int],
    stake_per_point: float,
    payout_mode: str = "difference",
) -> tuple[Optional[str], float]:
    team_ids = list(totals)
    a, b = (totals[team_id] for team_id in team_ids)
    if a == b:
        return None, 0.0
    winner = team_ids[0] if a > b else team_ids[1]
    if payout_mode == "total":
        return winner, max(a, b) * stake_per_point
    return winner, abs(a - b) * stake_per_point


def _umbriago_teams(teams: Sequence[TeamRef]) -> None:
    seen: set[str] = set()
    for team in teams:
        if len(team.players) != 2:
            raise ScoringInputError(f"Umbriago team {team.name!r} needs exactly two players.")
        for player in team.players:
            if player.player_id in seen:
                raise ScoringInputError(f"Player {player.player_id!r} is on both teams.")
            seen.add(player.player_id)
    if teams[0].team_id == teams[1].team_id:
        raise ScoringInputError("Umbriago teams need distinct ids.")


def _team_scores(scored: ScoredHole, teams: Sequence[TeamRef]) -> dict[str, list[Optional[int]]]:
    return {
        team.team_id: [scored.net[player.player_id] for player in team.players] for team in teams
    }


def score_umbriago(game: UmbriagoGame) -> UmbriagoResult:
    _umbriago_teams(game.teams)
    team_ids = [team.team_id for team in game.teams]
    players = [player for team in game.teams for player in team.players]
    handicaps = {player.player_id: player.handicap for player in players}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)

    inputs: dict[int, UmbriagoHoleInput] = {}
    for hole_input in game.hole_inputs:
        if hole_input.closest_to_pin is not None and hole_input.closest_to_pin not in team_ids:
            raise ScoringInputError(
                f"Unknown team {hole_input.closest_to_pin!r} for closest to the pin "
                f"on hole {hole_input.hole_number}."
            )
        inputs[hole_input.hole_number] = hole_input

    rolls_by_hole: dict[int, list[str]] = {}
    for roll in game.rolls:
        if roll.team_id not in team_ids:
            raise ScoringInputError(f"Unknown team {roll.team_id!r} in roll on hole {roll.hole_number}.")
        rolls_by_hole.setdefault(roll.hole_number, []).append(roll.team_id)

    totals = {team_id: 0 for team_id in team_ids}
    stake = game.stake_per_point
    holes: list[UmbriagoHoleResult] = []
    roll_results: list[UmbriagoRollResult] = []
    played = 0

    for scored in card:
        hole_input = inputs.get(scored.hole_number)
        multiplier = hole_input.multiplier if hole_input else 1
        row = dict(
            hole_number=scored.hole_number,
            par=scored.par,
            scores=dict(scored.net),
            multiplier=multiplier,
        )
        if scored.is_complete:
            played += 1
            points, categories = umbriago_hole_points(
                _team_scores(scored, game.teams),
                scored.par,
                hole_input.closest_to_pin if hole_input else None,
                multiplier,
            )
            if categories["is_umbriago"]:
                logger.debug("Umbriago on hole %s: %s.", scored.hole_number, points)
            totals = {team_id: totals[team_id] + points[team_id] for team_id in team_ids}
            holes.append(
                UmbriagoHoleResult(
                    **row,
                    **categories,
                    is_resolved=True,
                    team_points=points,
                    running_totals=dict(totals),
                )
            )
        else:
            holes.append(
                UmbriagoHoleResult(
                    **row,
                    is_resolved=False,
                    team_points={team_id: 0 for team_id in team_ids},
                    running_totals=dict(totals),
                )
            )

        for team_id in rolls_by_hole.get(scored.hole_number, []):
            before = dict(totals)
            totals, stake = apply_roll(totals, stake)
            roll_results.append(
                UmbriagoRollResult(
                    team_id=team_id,
                    hole_number=scored.hole_number,
                    points_before=before,
                    points_after=dict(totals),
                    stake_after=stake,
                )
            )

    winner, payout = umbriago_payout(totals, stake, game.payout_mode)
    is_complete = played == card.hole_count
    return UmbriagoResult(
        teams=[
            SideSummary(
                side_id=team.team_id,
                name=team.name,
                player_ids=[player.player_id for player in team.players],
            )
            for team in game.teams
        ],
        holes=holes,
        total_points=totals,
        rolls=roll_results,
        stake_per_point=stake,
        winner_team_id=winner if is_complete else None,
        payout=payout if is_complete else 0.0,
        holes_played=played,
        is_complete=is_complete,
        leader_ids=leaders(totals) if any(totals.values()) else [],
    )

