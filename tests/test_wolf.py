from __future__ import annotations

import pytest

from golf_games.models import (
    HoleDefinition,
    HoleScoreEntry,
    PlayerRef,
    ScoringInputError,
    WolfGame,
    WolfHoleDecision,
    WolfPayout,
    WolfPointsRule,
    WolfPointsTable,
)
from golf_games.wolf import score_wolf, wolf_for_hole, wolf_index_for_hole

PLAYERS = [PlayerRef(player_id=f"p{n}", name=f"Player {n}") for n in range(1, 5)]


def _course(count: int = 18) -> list[HoleDefinition]:
    return [HoleDefinition(hole_number=n, par=4, stroke_index=n) for n in range(1, count + 1)]


def _scores(hole_number: int, p1: int, p2: int, p3: int, p4: int) -> HoleScoreEntry:
    return HoleScoreEntry(hole_number=hole_number, scores={"p1": p1, "p2": p2, "p3": p3, "p4": p4})


def test_wolf_rotation() -> None:
    assert wolf_index_for_hole(1, 4) == 0
    assert wolf_index_for_hole(5, 4) == 0
    assert wolf_index_for_hole(6, 4) == 1
    assert wolf_index_for_hole(1, 4, "last") == 3
    assert wolf_index_for_hole(2, 4, "last") == 0


def test_lone_wolf_win_on_hole_five_updates_every_player() -> None:
    game = WolfGame(
        holes=_course(5),
        players=PLAYERS,
        scores=[_scores(5, 3, 4, 5, 5)],
        decisions=[WolfHoleDecision(hole_number=5)],
    )
    assert wolf_for_hole(game, 5) == "p1"
    result = score_wolf(game)
    hole = result.holes[4]
    assert hole.wolf_id == "p1"
    assert hole.play == "lone"
    assert hole.winning_side == "wolf"
    assert hole.hole_points == {"p1": 3, "p2": 0, "p3": 0, "p4": 0}
    assert result.total_points == {"p1": 3, "p2": 0, "p3": 0, "p4": 0}
    assert result.leader_ids == ["p1"]
    assert result.holes_played == 1


def test_points_table_is_data() -> None:
    table = WolfPointsTable(
        rules=[
            WolfPointsRule(play="lone", outcome="win", opponents=3, payout=WolfPayout(wolf=6, opponent=-2)),
            WolfPointsRule(play="lone", outcome="win", payout=WolfPayout(wolf=1)),
        ]
    )
    game = WolfGame(
        holes=_course(5),
        players=PLAYERS,
        scores=[_scores(5, 3, 4, 5, 5)],
        decisions=[WolfHoleDecision(hole_number=5)],
        points_table=table,
    )
    result = score_wolf(game)
    assert result.total_points == {"p1": 6, "p2": -2, "p3": -2, "p4": -2}
    assert table.lookup("lone", "win", 2).wolf == 1
    assert table.lookup("partner", "tie", 2) == WolfPayout()


def test_partnered_wolf_loss_with_multiplier() -> None:
    game = WolfGame(
        holes=_course(),
        players=PLAYERS,
        scores=[_scores(2, 5, 5, 5, 4)],
        decisions=[WolfHoleDecision(hole_number=2, partner_id="p3", multiplier=2)],
    )
    hole = score_wolf(game).holes[1]
    assert hole.wolf_id == "p2"
    assert hole.play == "partner"
    assert hole.winning_side == "opponents"
    assert hole.hole_points == {"p1": 2, "p2": 0, "p3": 0, "p4": 2}


def test_tied_hole_scores_nothing() -> None:
    game = WolfGame(
        holes=_course(),
        players=PLAYERS,
        scores=[_scores(1, 4, 4, 5, 5)],
        decisions=[WolfHoleDecision(hole_number=1, partner_id="p3")],
    )
    hole = score_wolf(game).holes[0]
    assert hole.winning_side == "tie"
    assert set(hole.hole_points.values()) == {0}


def test_hole_without_decision_is_unresolved() -> None:
    game = WolfGame(holes=_course(), players=PLAYERS, scores=[_scores(1, 3, 4, 5, 5)])
    result = score_wolf(game)
    assert not result.holes[0].is_resolved
    assert result.holes_played == 0
    assert result.leader_ids == []


def test_running_totals_accumulate() -> None:
    game = WolfGame(
        holes=_course(),
        players=PLAYERS,
        scores=[_scores(1, 3, 4, 5, 5), _scores(2, 4, 3, 4, 4)],
        decisions=[WolfHoleDecision(hole_number=1), WolfHoleDecision(hole_number=2)],
    )
    result = score_wolf(game)
    assert result.holes[0].running_totals == {"p1": 3, "p2": 0, "p3": 0, "p4": 0}
    assert result.holes[1].running_totals == {"p1": 3, "p2": 3, "p3": 0, "p4": 0}


def test_unknown_partner_is_rejected() -> None:
    game = WolfGame(
        holes=_course(),
        players=PLAYERS,
        decisions=[WolfHoleDecision(hole_number=1, partner_id="ghost")],
    )
    with pytest.raises(ScoringInputError):
        score_wolf(game)
