from __future__ import annotations

import pytest

from golf_games.aggregator import (
    LONG_GAME_BAND_EDGES_M,
    PUTTING_BAND_EDGES_M,
    categorize_shot,
    cumulative,
    distance_band,
    leaders,
    rollup_strokes_gained,
    running_totals,
    summarize,
)
from golf_games.match_play import score_match
from golf_games.models import (
    HoleDefinition,
    HoleScoreEntry,
    MatchPlayGame,
    PlayerRef,
    ProStatsHole,
    ProStatsRound,
    ShotRecord,
    SkinsGame,
    StrokePlayGame,
)
from golf_games.skins import score_skins
from golf_games.team_games import score_stroke_play


def _course(count: int = 18) -> list[HoleDefinition]:
    return [HoleDefinition(hole_number=n, par=4, stroke_index=n) for n in range(1, count + 1)]


PLAYERS = [PlayerRef(player_id="a", name="Ann"), PlayerRef(player_id="b", name="Ben")]


def test_cumulative_and_running_totals() -> None:
    assert cumulative([1, None, 2]) == [1.0, 1.0, 3.0]
    assert cumulative([]) == []
    totals = running_totals([{"a": 1}, {"a": 2, "b": 3}], ["a", "b"])
    assert totals == [{"a": 1, "b": 0}, {"a": 3, "b": 3}]


def test_leaders() -> None:
    assert leaders({"a": 3, "b": 3, "c": 1}) == ["a", "b"]
    assert leaders({"a": 70, "b": 72}, higher_is_better=False) == ["a"]
    assert leaders({}) == []


def test_summarize_match_play_series() -> None:
    scores = [HoleScoreEntry(hole_number=n, scores={"a": 3, "b": 4}) for n in (1, 2)]
    summary = summarize(score_match(MatchPlayGame(holes=_course(), players=PLAYERS, scores=scores)))
    assert summary.series["match_status"][:2] == [1.0, 2.0]
    assert summary.totals == {"a": 2.0, "b": -2.0}
    assert summary.holes_total == 18
    assert not summary.is_complete


def test_summarize_skins_series() -> None:
    scores = [
        HoleScoreEntry(hole_number=1, scores={"a": 4, "b": 4}),
        HoleScoreEntry(hole_number=2, scores={"a": 3, "b": 4}),
    ]
    summary = summarize(score_skins(SkinsGame(holes=_course(2), players=PLAYERS, scores=scores)))
    assert summary.series["a"] == [0.0, 2.0]
    assert summary.totals == {"a": 2.0, "b": 0.0}
    assert summary.leader_ids == ["a"]
    assert summary.is_complete


def test_summarize_stroke_play_tracks_to_par() -> None:
    scores = [
        HoleScoreEntry(hole_number=1, scores={"a": 3, "b": 5}),
        HoleScoreEntry(hole_number=2, scores={"a": 4, "b": 4}),
    ]
    summary = summarize(score_stroke_play(StrokePlayGame(holes=_course(2), players=PLAYERS, scores=scores)))
    assert summary.series["a"] == [-1.0, -1.0]
    assert summary.series["b"] == [1.0, 1.0]
    assert summary.totals["a"] == -1.0


def test_summarize_rejects_unknown_results() -> None:
    with pytest.raises(TypeError):
        summarize(object())


def test_shot_categories() -> None:
    putt = ShotRecord(type="putt", start_distance=3, start_lie="green")
    drive = ShotRecord(type="tee", start_distance=250, start_lie="tee", end_distance=140, end_lie="fairway")
    approach = ShotRecord(type="approach", start_distance=140, end_distance=5, end_lie="green")
    chip = ShotRecord(type="approach", start_distance=20, start_lie="rough", end_distance=1, end_lie="green")
    assert categorize_shot(putt, 2) == "putting"
    assert categorize_shot(drive, 0) == "off_the_tee"
    assert categorize_shot(approach, 1) == "approach"
    assert categorize_shot(approach, 0) == "approach"
    assert categorize_shot(chip, 2) == "short_game"


def test_distance_bands() -> None:
    assert distance_band(0.5, PUTTING_BAND_EDGES_M) == "0-1m"
    assert distance_band(3, PUTTING_BAND_EDGES_M) == "2-4m"
    assert distance_band(20, PUTTING_BAND_EDGES_M) == "18m+"
    assert distance_band(130, LONG_GAME_BAND_EDGES_M) == "120-160m"


def test_rollup_averages_over_complete_rounds_only() -> None:
    complete = ProStatsRound(
        round_id="r1",
        hole_count=1,
        holes=[
            ProStatsHole(
                hole_number=1,
                shots=[
                    ShotRecord(
                        type="approach",
                        start_distance=150,
                        start_lie="fairway",
                        end_distance=3,
                        end_lie="green",
                        strokes_gained=-0.3,
                    ),
                    ShotRecord(type="putt", start_distance=3, start_lie="green", holed=True, strokes_gained=0.2),
                ],
            )
        ],
    )
    partial = ProStatsRound(
        round_id="r2",
        hole_count=2,
        holes=[
            ProStatsHole(
                hole_number=1,
                shots=[ShotRecord(type="putt", start_distance=3, start_lie="green", holed=True, strokes_gained=0.4)],
            )
        ],
    )
    rollup = rollup_strokes_gained([complete, partial])
    assert rollup.rounds_total == 2
    assert rollup.complete_rounds == 1
    assert rollup.per_round.putting == pytest.approx(0.2)
    assert rollup.per_round.approach == pytest.approx(-0.3)
    assert rollup.per_round.total == pytest.approx(-0.1)
    assert rollup.per_round.other is None

    putting = [band for band in rollup.bands if band.category == "putting"]
    assert len(putting) == 1
    assert putting[0].band == "2-4m"
    assert putting[0].shots == 2
    assert putting[0].average == pytest.approx(0.3)

    long_game = [band for band in rollup.bands if band.category == "long_game"]
    assert long_game[0].band == "120-160m"
    assert long_game[0].lie == "fairway"


def test_rollup_without_complete_rounds() -> None:
    rollup = rollup_strokes_gained([ProStatsRound(round_id="empty")])
    assert rollup.complete_rounds == 0
    assert rollup.per_round.total is None
    assert rollup.bands == []
