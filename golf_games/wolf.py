from __future__ import annotations

import logging
from typing import Literal

from .aggregator import leaders, running_totals
from .models import (
    ScoringInputError,
    WolfGame,
    WolfHoleDecision,
    WolfHoleResult,
    WolfResult,
)
from .scorecard import Scorecard, best_of, compare_sides

logger = logging.getLogger(__name__)

WolfPosition = Literal["first", "last"]


def wolf_index_for_hole(hole_number: int, player_count: int, wolf_position: WolfPosition = "first") -> int:
    """0-based index of the wolf in tee order.

    ``first``: the wolf tees off first, so hole 1 is player 1.
    ``last``: the wolf tees off last, so hole 1 is the last player, hole 2 player 1.
    """
    if player_count < 1:
        raise ScoringInputError("Wolf needs at least one player.")
    if wolf_position == "last":
        return (hole_number - 2 + player_count) % player_count
    return (hole_number - 1) % player_count


def _decisions_by_hole(game: WolfGame, player_ids: list[str]) -> dict[int, WolfHoleDecision]:
    decisions: dict[int, WolfHoleDecision] = {}
    for decision in game.decisions:
        for key in (decision.wolf_id, decision.partner_id):
            if key is not None and key not in player_ids:
                raise ScoringInputError(
                    f"Unknown player {key!r} in wolf decision for hole {decision.hole_number}."
                )
        decisions[decision.hole_number] = decision
    return decisions


def score_wolf(game: WolfGame) -> WolfResult:
    player_ids = [player.player_id for player in game.players]
    if len(set(player_ids)) != len(player_ids):
        raise ScoringInputError("Duplicate player ids in wolf game.")

    handicaps = {player.player_id: player.handicap for player in game.players}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)
    decisions = _decisions_by_hole(game, player_ids)
    player_count = len(player_ids)

    rows: list[dict] = []
    hole_points: list[dict[str, int]] = []
    played = 0
    for scored in card:
        decision = decisions.get(scored.hole_number)
        rotation_wolf = player_ids[
            wolf_index_for_hole(scored.hole_number, player_count, game.wolf_position)
        ]
        wolf_id = decision.wolf_id if decision and decision.wolf_id else rotation_wolf
        partner_id = decision.partner_id if decision else None
        if partner_id == wolf_id:
            raise ScoringInputError(f"The wolf cannot partner themselves on hole {scored.hole_number}.")
        multiplier = decision.multiplier if decision else 1
        points = {pid: 0 for pid in player_ids}
        row = dict(
            hole_number=scored.hole_number,
            par=scored.par,
            wolf_id=wolf_id,
            partner_id=partner_id,
            scores=dict(scored.net),
            multiplier=multiplier,
        )

        if decision is None or not scored.is_complete:
            rows.append(dict(row, is_resolved=False, play=None, winning_side=None))
            hole_points.append(points)
            continue

        played += 1
        play = "partner" if partner_id else "lone"
        wolf_side = [wolf_id] + ([partner_id] if partner_id else [])
        opponents = [pid for pid in player_ids if pid not in wolf_side]
        wolf_best, _ = best_of(scored.net, wolf_side)
        opponents_best, _ = best_of(scored.net, opponents)
        comparison = compare_sides(wolf_best, opponents_best)
        outcome = {1: "win", -1: "loss", 0: "tie"}[comparison]
        winning_side = {1: "wolf", -1: "opponents", 0: "tie"}[comparison]

        payout = game.points_table.lookup(play, outcome, len(opponents))
        points[wolf_id] = payout.wolf * multiplier
        if partner_id:
            points[partner_id] = payout.partner * multiplier
        for pid in opponents:
            points[pid] = payout.opponent * multiplier
        logger.debug("Hole %s wolf %s %s %s.", scored.hole_number, wolf_id, play, outcome)

        rows.append(dict(row, is_resolved=True, play=play, winning_side=winning_side))
        hole_points.append(points)

    totals_by_hole = running_totals(hole_points, player_ids)
    holes = [
        WolfHoleResult(**row, hole_points=points, running_totals=totals)
        for row, points, totals in zip(rows, hole_points, totals_by_hole)
    ]
    final: dict[str, int] = totals_by_hole[-1] if totals_by_hole else {pid: 0 for pid in player_ids}
    return WolfResult(
        holes=holes,
        total_points=final,
        holes_played=played,
        is_complete=played == card.hole_count,
        leader_ids=leaders(final) if played else [],
    )


def wolf_for_hole(game: WolfGame, hole_number: int) -> str:
    player_ids = [player.player_id for player in game.players]
    for decision in game.decisions:
        if decision.hole_number == hole_number and decision.wolf_id:
            return decision.wolf_id
    return player_ids[wolf_index_for_hole(hole_number, len(player_ids), game.wolf_position)]

