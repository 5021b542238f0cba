from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from .copenhagen import score_copenhagen
from .match_play import score_match
from .models import GameRequest, ScoringOutcome
from .skins import score_skins
from .team_games import score_scramble, score_stroke_play, score_umbriago
from .wolf import score_wolf

logger = logging.getLogger(__name__)

_ENGINES: dict[str, Callable[[Any], Any]] = {
    "stroke_play": score_stroke_play,
    "match_play": score_match,
    "best_ball": score_match,
    "skins": score_skins,
    "wolf": score_wolf,
    "copenhagen": score_copenhagen,
    "scramble": score_scramble,
    "umbriago": score_umbriago,
}

_GAME_ADAPTER: TypeAdapter[GameRequest] = TypeAdapter(GameRequest)


def parse_game(payload: Any) -> GameRequest:
    """Validate a raw mapping (or JSON string) into the matching game request."""
    if isinstance(payload, (str, bytes)):
        return _GAME_ADAPTER.validate_json(payload)
    return _GAME_ADAPTER.validate_python(payload)


def score_game(request: GameRequest):
    """Recompute the full result of a game from its hole log."""
    engine = _ENGINES.get(request.format)
    if engine is None:
        raise ValueError(f"Unsupported game format: {request.format}")
    return engine(request)


def evaluate_game(payload: Any) -> ScoringOutcome:
    """Like ``score_game`` but reports invalid input as an error outcome instead of raising."""
    try:
        request = payload if isinstance(payload, BaseModel) else parse_game(payload)
        return ScoringOutcome(ok=True, result=score_game(request))
    except ValidationError as exc:
        logger.info("Rejected game payload with %s validation errors.", exc.error_count())
        return ScoringOutcome(ok=False, error=str(exc))
    except ValueError as exc:
        logger.info("Rejected game: %s", exc)
        return ScoringOutcome(ok=False, error=str(exc))
