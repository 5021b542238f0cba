from __future__ import annotations

import pytest

from golf_games.baseline import BaselineTable
from golf_games.models import ScoringInputError
from golf_games.strokes_gained import StrokesGainedCalculator, category_for_shot

PUTTING_CSV = "distance_ft,green\n1,1.0\n10,1.6\n20,1.9\n40,2.1\n"
LONG_GAME_CSV = (
    "distance_yds,tee,fairway,rough,sand,recovery\n"
    "10,,2.2,2.4,2.5,3.1\n"
    "100,2.9,2.8,3.0,3.2,3.3\n"
    "300,3.7,3.8,3.9,4.0,3.9\n"
)


def _calculator() -> StrokesGainedCalculator:
    return StrokesGainedCalculator(BaselineTable.from_csv(PUTTING_CSV, LONG_GAME_CSV))


def test_holed_putt_gains_expected_minus_the_stroke() -> None:
    calc = _calculator()
    expected = calc.table.expected_putting(6)
    assert calc.calculate_strokes_gained("putting", 6, "green", True) == pytest.approx(expected - 1)


def test_putt_left_short_charges_the_remaining_putt() -> None:
    calc = _calculator()
    table = calc.table
    value = calc.calculate_strokes_gained("putting", 6, None, False, end_lie="green", end_distance=1)
    assert value == pytest.approx(table.expected_putting(6) - 1 - table.expected_putting(1))

    implicit_green = calc.calculate_strokes_gained("putting", 6, None, False, end_distance=1)
    assert implicit_green == pytest.approx(value)


def test_shot_ending_where_it_started_loses_one() -> None:
    calc = _calculator()
    assert calc.calculate_strokes_gained("putting", 4, "green", False, "green", 4) == pytest.approx(-1.0)
    assert calc.calculate_strokes_gained("long_game", 120, "rough", False, "rough", 120) == pytest.approx(-1.0)


def test_putting_ignores_start_lie() -> None:
    calc = _calculator()
    a = calc.calculate_strokes_gained("putting", 6, "green", True)
    b = calc.calculate_strokes_gained("putting", 6, "sand", True)
    assert a == b


def test_approach_onto_green_uses_putting_curve() -> None:
    calc = _calculator()
    table = calc.table
    value = calc.calculate_strokes_gained("long_game", 140, "fairway", False, "green", 3)
    assert value == pytest.approx(
        table.expected_long_game(140, "fairway") - 1 - table.expected_putting(3)
    )


def test_zero_start_distance_is_zero() -> None:
    assert _calculator().calculate_strokes_gained("long_game", 0, "fairway", True) == 0.0


def test_invalid_distances_are_rejected() -> None:
    calc = _calculator()
    with pytest.raises(ScoringInputError):
        calc.calculate_strokes_gained("putting", -1, "green", True)
    with pytest.raises(ScoringInputError):
        calc.calculate_strokes_gained("long_game", 100, "fairway", False, "rough", -5)
    with pytest.raises(ScoringInputError):
        calc.calculate_strokes_gained("long_game", 100, "fairway", False, "rough", None)
    with pytest.raises(ScoringInputError):
        calc.calculate_strokes_gained("long_game", 100, "fairway", False, None, 20)
    with pytest.raises(ScoringInputError):
        calc.calculate_strokes_gained("putting", 5, "green", True, end_distance=1)


def test_unknown_lie_falls_back_to_fairway() -> None:
    calc = _calculator()
    unknown = calc.calculate_strokes_gained("long_game", 120, "hardpan", False, "green", 2)
    fairway = calc.calculate_strokes_gained("long_game", 120, "fairway", False, "green", 2)
    assert unknown == pytest.approx(fairway)


def test_out_of_bounds_costs_two() -> None:
    calc = _calculator()
    assert calc.calculate_out_of_bounds("long_game", 230, "tee") == pytest.approx(-2.0)

    record = calc.record_shot("tee", 230, "tee", is_out_of_bounds=True)
    assert record.is_out_of_bounds
    assert record.end_distance == 230
    assert record.strokes_gained == pytest.approx(-2.0)


def test_record_shot_builds_shot_record() -> None:
    calc = _calculator()
    putt = calc.record_shot("putt", 6, "fringe", holed=True)
    assert category_for_shot("putt") == "putting"
    assert putt.start_lie == "green"
    assert putt.end_distance is None and putt.end_lie is None
    assert putt.strokes_gained == pytest.approx(calc.table.expected_putting(6) - 1)

    approach = calc.record_shot("approach", 140, "rough", end_distance=8, end_lie="green")
    assert approach.end_lie == "green"
    assert approach.strokes_gained == pytest.approx(
        calc.table.expected_long_game(140, "rough") - 1 - calc.table.expected_putting(8)
    )


def test_long_game_from_green_start_lie_uses_fairway_curve() -> None:
    calc = _calculator()
    from_green = calc.calculate_strokes_gained("long_game", 30, "green", False, "green", 2)
    from_fairway = calc.calculate_strokes_gained("long_game", 30, "fairway", False, "green", 2)
    assert from_green == pytest.approx(from_fairway)
    assert calc.expected("long_game", 30, "green") != pytest.approx(calc.table.expected_putting(30))
