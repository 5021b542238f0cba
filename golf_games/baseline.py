from __future__ import annotations

from collections.abc import Mapping, Sequence
import csv
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
import io
import logging
from typing import Optional

import httpx
import numpy as np

from .config import Settings

logger = logging.getLogger(__name__)

# Reference tables are tabulated in feet (putting) and yards (long game);
# shot distances arrive in meters.
METERS_TO_FEET = 3.28084
METERS_TO_YARDS = 1.09361

GREEN = "green"
LONG_GAME_LIES = ("tee", "fairway", "rough", "sand", "recovery")
_LIE_ALIASES = {
    "bunker": "sand",
    "trap": "sand",
    "teebox": "tee",
    "tee_box": "tee",
    "putting_green": GREEN,
}

_PUTTING_RESOURCE = "putting_baseline.csv"
_LONG_GAME_RESOURCE = "long_game_baseline.csv"


class BaselineDataError(RuntimeError):
    pass


@dataclass(frozen=True)
class PuttingBaselineRow:
    distance_ft: float
    expected_strokes: float


@dataclass(frozen=True)
class LongGameBaselineRow:
    distance_yds: float
    values: Mapping[str, float]


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _data_rows(text: str) -> list[list[str]]:
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    return rows[1:]


def parse_putting_csv(text: str) -> list[PuttingBaselineRow]:
    rows: list[PuttingBaselineRow] = []
    for row in _data_rows(text):
        distance = _parse_float(row[0] if row else None)
        expected = _parse_float(row[1] if len(row) > 1 else None)
        if distance is None or expected is None:
            continue
        rows.append(PuttingBaselineRow(distance_ft=distance, expected_strokes=expected))
    return rows


def parse_long_game_csv(text: str) -> list[LongGameBaselineRow]:
    rows: list[LongGameBaselineRow] = []
    for row in _data_rows(text):
        distance = _parse_float(row[0] if row else None)
        if distance is None:
            continue
        values: dict[str, float] = {}
        for offset, lie in enumerate(LONG_GAME_LIES, start=1):
            value = _parse_float(row[offset] if len(row) > offset else None)
            if value is not None:
                values[lie] = value
        rows.append(LongGameBaselineRow(distance_yds=distance, values=values))
    return rows


def normalize_lie(lie: Optional[str]) -> str:
    """Map a lie label onto a tabulated curve.

    Unknown labels resolve to the fairway curve rather than failing.
    """
    value = (lie or "").strip().lower()
    value = _LIE_ALIASES.get(value, value)
    if value == GREEN or value in LONG_GAME_LIES:
        return value
    if value:
        logger.warning("Unrecognized lie %r, using fairway baseline.", lie)
    return "fairway"


@dataclass(frozen=True)
class _Curve:
    distances: np.ndarray
    expected: np.ndarray

    @classmethod
    def build(cls, points: Sequence[tuple[float, float]]) -> "_Curve":
        ordered = sorted(points)
        distances = np.asarray([point[0] for point in ordered], dtype=np.float64)
        expected = np.asarray([point[1] for point in ordered], dtype=np.float64)
        distances.setflags(write=False)
        expected.setflags(write=False)
        return cls(distances=distances, expected=expected)

    def at(self, distance: float) -> float:
        if distance <= 0:
            return 0.0
        # np.interp holds the edge values outside the tabulated range.
        return float(np.interp(distance, self.distances, self.expected))


class BaselineTable:
    """Expected strokes to hole out, by distance (meters) and lie."""

    def __init__(self, putting: _Curve, long_game: Mapping[str, _Curve]):
        self._putting = putting
        self._long_game = dict(long_game)

    @classmethod
    def from_rows(
        cls,
        putting_rows: Sequence[PuttingBaselineRow],
        long_game_rows: Sequence[LongGameBaselineRow],
    ) -> "BaselineTable":
        if not putting_rows:
            raise BaselineDataError("Putting baseline table is empty.")
        putting = _Curve.build([(row.distance_ft, row.expected_strokes) for row in putting_rows])

        curves: dict[str, _Curve] = {}
        for lie in LONG_GAME_LIES:
            points = []
            for row in long_game_rows:
                value = row.values.get(lie)
                if value is None and lie == "tee":
                    # Tee and fairway share a curve family below the tabulated tee range.
                    value = row.values.get("fairway")
                if value is not None:
                    points.append((row.distance_yds, value))
            if points:
                curves[lie] = _Curve.build(points)

        if "fairway" not in curves:
            raise BaselineDataError("Long game baseline table has no fairway column.")
        return cls(putting=putting, long_game=curves)

    @classmethod
    def from_csv(cls, putting_csv: str, long_game_csv: str) -> "BaselineTable":
        return cls.from_rows(parse_putting_csv(putting_csv), parse_long_game_csv(long_game_csv))

    @property
    def lies(self) -> list[str]:
        return [GREEN, *self._long_game]

    def expected_putting(self, distance_m: float) -> float:
        return self._putting.at(distance_m * METERS_TO_FEET)

    def expected_long_game(self, distance_m: float, lie: Optional[str]) -> float:
        normalized = normalize_lie(lie)
        if normalized == GREEN:
            return self.expected_putting(distance_m)
        curve = self._long_game.get(normalized)
        if curve is None:
            logger.warning("No %s column in baseline, using fairway.", normalized)
            curve = self._long_game["fairway"]
        return curve.at(distance_m * METERS_TO_YARDS)


def _read_resource(name: str) -> str:
    return resources.files("golf_games").joinpath("data", name).read_text(encoding="utf-8")


@lru_cache
def load_default_baseline() -> BaselineTable:
    return BaselineTable.from_csv(
        _read_resource(_PUTTING_RESOURCE),
        _read_resource(_LONG_GAME_RESOURCE),
    )


class BaselineClient:
    """Downloads the two reference CSVs from a baseline-data provider."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    async def __aenter__(self) -> "BaselineClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_text(self, url: str) -> str:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BaselineDataError(
                f"Baseline request failed ({exc.response.status_code}) for {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BaselineDataError(f"Baseline request failed for {url}: {exc}") from exc
        return response.text

    async def fetch_table(self) -> BaselineTable:
        putting_url = self._settings.putting_baseline_url
        long_game_url = self._settings.long_game_baseline_url
        if not putting_url or not long_game_url:
            raise BaselineDataError(
                "Both GOLF_GAMES_PUTTING_BASELINE_URL and "
                "GOLF_GAMES_LONG_GAME_BASELINE_URL must be configured."
            )
        putting_csv = await self._get_text(putting_url)
        long_game_csv = await self._get_text(long_game_url)
        table = BaselineTable.from_csv(putting_csv, long_game_csv)
        logger.info("Loaded baseline tables from %s and %s.", putting_url, long_game_url)
        return table


async def fetch_baseline(settings: Settings) -> BaselineTable:
    async with BaselineClient(settings) as client:
        return await client.fetch_table()
