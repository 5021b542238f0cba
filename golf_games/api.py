from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException, Path
import uvicorn

from .baseline import BaselineClient, BaselineDataError
from .config import get_settings
from .engine import evaluate_game, parse_game
from .models import (
    GameSummary,
    HoleScoreEntry,
    ProStatsRound,
    ScoringOutcome,
    ShotRecord,
    ShotRequest,
    StrokesGainedRollup,
)
from .service import ScoringService
from .store import GameNotFoundError, HoleLogStore

_settings = get_settings()
_store = HoleLogStore(_settings.database_path)
_baseline_client: Optional[BaselineClient] = (
    BaselineClient(_settings)
    if _settings.putting_baseline_url and _settings.long_game_baseline_url
    else None
)
_service = ScoringService(_store, baseline_client=_baseline_client)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        yield
    finally:
        if _baseline_client is not None:
            await _baseline_client.aclose()


app = FastAPI(
    title="Golf Games",
    version="0.1.0",
    description="Hole-by-hole scoring for golf betting games and strokes gained.",
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/games/score", response_model=ScoringOutcome)
async def score_game(payload: dict[str, Any] = Body(...)) -> ScoringOutcome:
    return evaluate_game(payload)


@app.put("/games/{game_id}")
async def save_game(game_id: str, payload: dict[str, Any] = Body(...)) -> Any:
    try:
        return await _service.save_game(game_id, parse_game(payload))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.put("/games/{game_id}/holes/{hole_number}")
async def record_hole(
    game_id: str,
    hole_number: int = Path(..., ge=1, le=18),
    scores: dict[str, Optional[int]] = Body(...),
) -> Any:
    try:
        entry = HoleScoreEntry(hole_number=hole_number, scores=scores)
        return await _service.record_hole(game_id, entry)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/games/{game_id}/result")
async def game_result(game_id: str) -> Any:
    try:
        return await _service.recompute(game_id)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/games/{game_id}/summary", response_model=GameSummary)
async def game_summary(game_id: str) -> GameSummary:
    try:
        return await _service.summary(game_id)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/strokes-gained", response_model=ShotRecord)
async def strokes_gained(shot: ShotRequest) -> ShotRecord:
    try:
        return await _service.evaluate_shot(shot)
    except BaselineDataError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/strokes-gained/rollup", response_model=StrokesGainedRollup)
async def strokes_gained_rollup(rounds: list[ProStatsRound]) -> StrokesGainedRollup:
    return await _service.rollup(rounds)


def run() -> None:
    logging.basicConfig(level=_settings.log_level.upper())
    uvicorn.run("golf_games.api:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":
    run()
