from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Optional

import numpy as np

from .baseline import GREEN, normalize_lie
from .models import (
    CategoryStrokesGained,
    CopenhagenResult,
    DistanceBandStat,
    GameSummary,
    MatchPlayResult,
    ProStatsRound,
    ShotRecord,
    SkinsResult,
    StrokePlayResult,
    StrokesGainedRollup,
    UmbriagoResult,
    WolfResult,
)

PUTTING_BAND_EDGES_M: tuple[float, ...] = (1, 2, 4, 6, 8, 10, 14, 18)
LONG_GAME_BAND_EDGES_M: tuple[float, ...] = (40, 80, 120, 160, 200)
TEE_SHOT_MIN_DISTANCE_M = 200.0
SHORT_GAME_MAX_DISTANCE_M = 40.0

_CATEGORIES = ("off_the_tee", "approach", "short_game", "putting", "other", "scoring")


def cumulative(values: Sequence[Optional[float]]) -> list[float]:
    if not values:
        return []
    filled = np.asarray([0.0 if value is None else value for value in values], dtype=np.float64)
    return [float(value) for value in np.cumsum(filled)]


def running_totals(
    hole_points: Sequence[Mapping[str, int]],
    participant_ids: Sequence[str],
) -> list[dict[str, int]]:
    """Per-hole cumulative totals, one dict per hole."""
    if not hole_points:
        return []
    matrix = np.asarray(
        [[row.get(pid, 0) for pid in participant_ids] for row in hole_points],
        dtype=np.int64,
    )
    sums = np.cumsum(matrix, axis=0)
    return [
        {pid: int(sums[row, col]) for col, pid in enumerate(participant_ids)}
        for row in range(sums.shape[0])
    ]


def leaders(totals: Mapping[str, float], higher_is_better: bool = True) -> list[str]:
    if not totals:
        return []
    best = max(totals.values()) if higher_is_better else min(totals.values())
    return [pid for pid, value in totals.items() if value == best]


def summarize(result) -> GameSummary:
    """Format-independent view of a scored game for leaderboards and charts."""
    totals: dict[str, float]
    series: dict[str, list[float]]

    if isinstance(result, MatchPlayResult):
        totals = {
            result.side_a.side_id: float(result.match_status),
            result.side_b.side_id: float(-result.match_status),
        }
        series = {"match_status": [float(value) for value in result.status_history]}
        return GameSummary(
            format=result.format,
            holes_total=len(result.holes),
            holes_played=result.holes_played,
            is_complete=result.is_finished,
            leader_ids=[result.winner_side_id] if result.winner_side_id else [],
            totals=totals,
            series=series,
        )

    if isinstance(result, SkinsResult):
        totals = {entry.player_id: float(entry.skins_won) for entry in result.leaderboard}
        series = {
            entry.player_id: cumulative(
                [
                    hole.skins_won if hole.winner_id == entry.player_id else 0
                    for hole in result.holes
                ]
            )
            for entry in result.leaderboard
        }
    elif isinstance(result, WolfResult):
        totals = {pid: float(value) for pid, value in result.total_points.items()}
        series = {
            pid: [float(hole.running_totals[pid]) for hole in result.holes]
            for pid in result.total_points
        }
    elif isinstance(result, CopenhagenResult):
        totals = {
            pid: float(points) for pid, points in zip(result.player_ids, result.total_points)
        }
        series = {
            pid: [float(hole.running_totals[index]) for hole in result.holes]
            for index, pid in enumerate(result.player_ids)
        }
    elif isinstance(result, UmbriagoResult):
        totals = {tid: float(value) for tid, value in result.total_points.items()}
        series = {
            tid: [float(hole.running_totals.get(tid, 0)) for hole in result.holes]
            for tid in result.total_points
        }
    elif isinstance(result, StrokePlayResult):
        use_net = result.scoring_type == "net"
        totals = {
            standing.participant_id: float(standing.to_par) for standing in result.standings
        }
        series = {}
        for standing in result.standings:
            pid = standing.participant_id
            series[pid] = cumulative(
                [
                    _to_par(hole.net[pid] if use_net else hole.gross[pid], hole.par)
                    for hole in result.holes
                ]
            )
    else:
        raise TypeError(f"Unsupported result type: {type(result).__name__}")

    return GameSummary(
        format=result.format,
        holes_total=len(result.holes),
        holes_played=result.holes_played,
        is_complete=result.is_complete,
        leader_ids=list(result.leader_ids),
        totals=totals,
        series=series,
    )


def _to_par(score: Optional[int], par: int) -> Optional[int]:
    if score is None or score < 0:
        return None
    return score - par


# ---------------------------------------------------------------------------
# Strokes gained rollups
# ---------------------------------------------------------------------------


def categorize_shot(shot: ShotRecord, index_in_hole: int) -> str:
    if shot.category is not None:
        return shot.category
    if shot.type == "putt" or normalize_lie(shot.start_lie) == GREEN:
        return "putting"
    if index_in_hole == 0 and shot.start_distance >= TEE_SHOT_MIN_DISTANCE_M:
        return "off_the_tee"
    if shot.start_distance >= SHORT_GAME_MAX_DISTANCE_M:
        return "approach"
    if shot.start_distance > 0:
        return "short_game"
    return "other"


def distance_band(distance: float, edges: Sequence[float]) -> str:
    lower = 0.0
    for edge in edges:
        if distance < edge:
            return f"{lower:g}-{edge:g}m"
        lower = edge
    return f"{lower:g}m+"


def _band_lower(band: str) -> float:
    return float(band.split("-")[0].rstrip("m+"))


def is_complete_round(round_: ProStatsRound) -> bool:
    played = {hole.hole_number for hole in round_.holes if hole.shots}
    return len(played) >= round_.hole_count


def rollup_strokes_gained(rounds: Sequence[ProStatsRound]) -> StrokesGainedRollup:
    """Strokes gained per round by category, plus per-shot averages by distance band.

    Per-round figures divide by the number of complete rounds and only use those
    rounds, so partial 9-of-18 cards do not drag the average. Band averages are per
    shot and use every recorded shot.
    """
    category_sums: dict[str, float] = defaultdict(float)
    band_sums: dict[tuple[str, str, Optional[str]], list[float]] = defaultdict(list)
    complete_rounds = 0

    for round_ in rounds:
        complete = is_complete_round(round_)
        if complete:
            complete_rounds += 1
        for hole in round_.holes:
            for index, shot in enumerate(hole.shots):
                category = categorize_shot(shot, index)
                if complete:
                    category_sums[category] += shot.strokes_gained

                if category == "putting":
                    key = ("putting", distance_band(shot.start_distance, PUTTING_BAND_EDGES_M), None)
                else:
                    lie = normalize_lie(shot.start_lie) if category == "approach" else None
                    key = (
                        "long_game",
                        distance_band(shot.start_distance, LONG_GAME_BAND_EDGES_M),
                        lie,
                    )
                band_sums[key].append(shot.strokes_gained)

    if complete_rounds > 0:
        per_round_values = {
            category: category_sums.get(category, 0.0) / complete_rounds
            for category in _CATEGORIES
        }
        per_round = CategoryStrokesGained(
            total=sum(category_sums.values()) / complete_rounds,
            off_the_tee=per_round_values["off_the_tee"],
            approach=per_round_values["approach"],
            short_game=per_round_values["short_game"],
            putting=per_round_values["putting"],
            other=per_round_values["other"] if category_sums.get("other") else None,
            scoring=per_round_values["scoring"] if category_sums.get("scoring") else None,
        )
    else:
        per_round = CategoryStrokesGained()

    bands = [
        DistanceBandStat(
            category=category,
            band=band,
            lie=lie,
            shots=len(values),
            total=float(np.sum(values)),
            average=float(np.mean(values)),
        )
        for (category, band, lie), values in sorted(
            band_sums.items(),
            key=lambda item: (item[0][0], _band_lower(item[0][1]), item[0][2] or ""),
        )
    ]
    return StrokesGainedRollup(
        rounds_total=len(rounds),
        complete_rounds=complete_rounds,
        per_round=per_round,
        bands=bands,
    )
