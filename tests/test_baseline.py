from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from golf_games.baseline import (
    METERS_TO_FEET,
    METERS_TO_YARDS,
    BaselineClient,
    BaselineDataError,
    BaselineTable,
    fetch_baseline,
    load_default_baseline,
    normalize_lie,
    parse_long_game_csv,
    parse_putting_csv,
)
from golf_games.config import Settings

PUTTING_CSV = "distance_ft,green\n1,1.0\nabc,2.0\n3,\n10,2.0\n"
LONG_GAME_CSV = (
    "distance_yds,tee,fairway,rough,sand,recovery\n"
    "10,,2.0,2.2,2.4,3.0\n"
    "100,3.0,2.8,3.0,3.2,3.4\n"
    "200,3.2,3.2,3.4,3.6,3.6\n"
)


def _table() -> BaselineTable:
    return BaselineTable.from_csv(PUTTING_CSV, LONG_GAME_CSV)


def test_csv_parsers_skip_header_and_malformed_rows() -> None:
    putting = parse_putting_csv(PUTTING_CSV)
    assert [row.distance_ft for row in putting] == [1.0, 10.0]

    long_game = parse_long_game_csv(LONG_GAME_CSV)
    assert len(long_game) == 3
    assert "tee" not in long_game[0].values
    assert long_game[1].values["tee"] == 3.0


def test_interpolates_linearly_between_rows() -> None:
    table = _table()
    assert table.expected_putting(5.5 / METERS_TO_FEET) == pytest.approx(1.5)
    assert table.expected_long_game(150 / METERS_TO_YARDS, "fairway") == pytest.approx(3.0)
    assert table.expected_long_game(150 / METERS_TO_YARDS, "rough") == pytest.approx(3.2)


def test_clamps_at_table_edges() -> None:
    table = _table()
    assert table.expected_putting(100.0) == pytest.approx(2.0)
    assert table.expected_long_game(1000.0, "fairway") == pytest.approx(3.2)
    assert table.expected_putting(0) == 0.0


def test_tee_curve_borrows_fairway_below_tee_range() -> None:
    table = _table()
    assert table.expected_long_game(10 / METERS_TO_YARDS, "tee") == pytest.approx(2.0)
    assert table.expected_long_game(100 / METERS_TO_YARDS, "tee") == pytest.approx(3.0)


def test_unknown_lie_uses_fairway_with_warning(caplog) -> None:
    table = _table()
    with caplog.at_level(logging.WARNING, logger="golf_games.baseline"):
        value = table.expected_long_game(150 / METERS_TO_YARDS, "cart path")
    assert value == pytest.approx(table.expected_long_game(150 / METERS_TO_YARDS, "fairway"))
    assert "cart path" in caplog.text


def test_lie_aliases() -> None:
    assert normalize_lie("Bunker") == "sand"
    assert normalize_lie("green") == "green"
    assert normalize_lie(None) == "fairway"


def test_empty_putting_table_is_rejected() -> None:
    with pytest.raises(BaselineDataError):
        BaselineTable.from_csv("distance_ft,green\n", LONG_GAME_CSV)


def test_packaged_baseline_loads() -> None:
    table = load_default_baseline()
    assert table.lies[0] == "green"
    assert {"tee", "fairway", "rough", "sand", "recovery"} <= set(table.lies)
    assert table.expected_putting(1) < table.expected_putting(6) < table.expected_putting(20)
    assert table.expected_long_game(150, "rough") > table.expected_long_game(150, "fairway")


def _client(handler) -> BaselineClient:
    settings = Settings(
        putting_baseline_url="https://baseline.test/putting.csv",
        long_game_baseline_url="https://baseline.test/long_game.csv",
    )
    client = BaselineClient(settings)
    client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client


def test_client_fetches_both_tables() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("putting.csv"):
            return httpx.Response(200, text=PUTTING_CSV)
        return httpx.Response(200, text=LONG_GAME_CSV)

    async def run() -> BaselineTable:
        async with _client(handler) as client:
            return await client.fetch_table()

    table = asyncio.run(run())
    assert table.expected_putting(5.5 / METERS_TO_FEET) == pytest.approx(1.5)


def test_client_wraps_http_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down")

    async def run() -> None:
        async with _client(handler) as client:
            await client.fetch_table()

    with pytest.raises(BaselineDataError):
        asyncio.run(run())


def test_client_requires_both_urls() -> None:
    settings = Settings(putting_baseline_url=None, long_game_baseline_url=None)
    with pytest.raises(BaselineDataError):
        asyncio.run(fetch_baseline(settings))
