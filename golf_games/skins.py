from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from typing import Optional

from .models import (
    NO_SCORE,
    PlayerRef,
    ScoringInputError,
    SkinsGame,
    SkinsHoleResult,
    SkinsLeaderboardEntry,
    SkinsResult,
)
from .scorecard import Scorecard

logger = logging.getLogger(__name__)


def hole_winner(scores: Mapping[str, Optional[int]]) -> Optional[str]:
    """The single player holding the strict lowest score, if there is one."""
    counting = {pid: score for pid, score in scores.items() if score is not None and score != NO_SCORE}
    if not counting:
        return None
    low = min(counting.values())
    holders = [pid for pid, score in counting.items() if score == low]
    return holders[0] if len(holders) == 1 else None


def skins_leaderboard(
    players: Sequence[PlayerRef],
    holes: Sequence[SkinsHoleResult],
    skin_value: float,
) -> list[SkinsLeaderboardEntry]:
    won: dict[str, int] = {player.player_id: 0 for player in players}
    holes_won: dict[str, list[int]] = {player.player_id: [] for player in players}
    for hole in holes:
        if hole.winner_id is None:
            continue
        won[hole.winner_id] += hole.skins_won
        holes_won[hole.winner_id].append(hole.hole_number)

    entries = [
        SkinsLeaderboardEntry(
            player_id=player.player_id,
            name=player.name,
            skins_won=won[player.player_id],
            total_value=won[player.player_id] * skin_value,
            holes_won=holes_won[player.player_id],
        )
        for player in players
    ]
    return sorted(entries, key=lambda entry: entry.skins_won, reverse=True)


def score_skins(game: SkinsGame) -> SkinsResult:
    ids = [player.player_id for player in game.players]
    if len(set(ids)) != len(ids):
        raise ScoringInputError("Duplicate player ids in skins game.")

    handicaps = {player.player_id: player.handicap for player in game.players}
    card = Scorecard(game.holes, game.scores, handicaps, use_handicaps=game.use_handicaps)

    carryover = 0
    forfeited = 0
    played = 0
    holes: list[SkinsHoleResult] = []
    for scored in card:
        available = 1 + carryover
        scores = dict(scored.net)
        if not scored.is_complete:
            # Not yet played: no award and no carryover either way.
            holes.append(
                SkinsHoleResult(
                    hole_number=scored.hole_number,
                    par=scored.par,
                    scores=scores,
                    is_resolved=False,
                    skins_available=available,
                )
            )
            continue

        played += 1
        winner = hole_winner(scores)
        if winner is not None:
            holes.append(
                SkinsHoleResult(
                    hole_number=scored.hole_number,
                    par=scored.par,
                    scores=scores,
                    is_resolved=True,
                    skins_available=available,
                    winner_id=winner,
                    skins_won=available,
                )
            )
            carryover = 0
            continue

        if game.carryover_enabled:
            carryover += 1
            logger.debug("Hole %s tied, %s skins carry over.", scored.hole_number, carryover)
        else:
            forfeited += 1
        holes.append(
            SkinsHoleResult(
                hole_number=scored.hole_number,
                par=scored.par,
                scores=scores,
                is_resolved=True,
                skins_available=available,
                is_carryover=game.carryover_enabled,
                is_forfeited=not game.carryover_enabled,
            )
        )

    leaderboard = skins_leaderboard(game.players, holes, game.skin_value)
    awarded = sum(entry.skins_won for entry in leaderboard)
    top = leaderboard[0].skins_won if leaderboard else 0
    return SkinsResult(
        holes=holes,
        leaderboard=leaderboard,
        total_skins_awarded=awarded,
        final_carryover=carryover,
        skins_forfeited=forfeited,
        holes_played=played,
        is_complete=played == card.hole_count,
        leader_ids=[entry.player_id for entry in leaderboard if top > 0 and entry.skins_won == top],
    )
