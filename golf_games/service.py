from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from typing import Optional

from .aggregator import rollup_strokes_gained, summarize
from .baseline import BaselineClient
from .engine import score_game
from .models import (
    GameRequest,
    GameSummary,
    HoleScoreEntry,
    ProStatsRound,
    ScoringInputError,
    ShotRecord,
    ShotRequest,
    StrokesGainedRollup,
)
from .store import HoleLogStore
from .strokes_gained import StrokesGainedCalculator

logger = logging.getLogger(__name__)


class ScoringService:
    """Stores hole logs and recomputes full game results from them on demand.

    Nothing derived is cached: every result comes from one pass over the stored
    log, so re-running a recompute gives the same answer.
    """

    def __init__(
        self,
        store: HoleLogStore,
        calculator: Optional[StrokesGainedCalculator] = None,
        baseline_client: Optional[BaselineClient] = None,
    ):
        self._store = store
        self._calculator = calculator
        self._baseline_client = baseline_client
        self._baseline_lock = asyncio.Lock()

    async def calculator(self) -> StrokesGainedCalculator:
        """Remote baseline tables when a client is configured, packaged tables otherwise."""
        if self._calculator is not None:
            return self._calculator
        async with self._baseline_lock:
            if self._calculator is None:
                if self._baseline_client is not None:
                    table = await self._baseline_client.fetch_table()
                    self._calculator = StrokesGainedCalculator(table)
                else:
                    self._calculator = StrokesGainedCalculator()
                logger.info("Strokes gained baseline ready (%s lies).", len(self._calculator.table.lies))
        return self._calculator

    async def save_game(self, game_id: str, game: GameRequest):
        """Store a game definition and score it against the full hole log.

        Re-saving an existing game keeps its recorded holes, so the new course and
        roster must still fit them. A definition that does not is rejected before
        anything is written.
        """
        stored = self._store.hole_log(game_id)
        candidate = game.model_copy(update={"scores": [*stored, *game.scores]})
        try:
            result = score_game(candidate)
        except ScoringInputError as exc:
            if not stored:
                raise
            raise ScoringInputError(
                f"Game {game_id} already has {len(stored)} recorded holes that do not fit "
                f"the new definition: {exc}"
            ) from exc
        self._store.save_game(game_id, game)
        return result

    async def record_hole(self, game_id: str, entry: HoleScoreEntry):
        game = self._store.load_game(game_id)
        candidate = game.model_copy(update={"scores": [*game.scores, entry]})
        score_game(candidate)
        self._store.record_hole(game_id, entry)
        logger.info("Recorded hole %s for game %s.", entry.hole_number, game_id)
        return await self.recompute(game_id)

    async def recompute(self, game_id: str):
        return score_game(self._store.load_game(game_id))

    async def summary(self, game_id: str) -> GameSummary:
        return summarize(await self.recompute(game_id))

    async def evaluate_shot(self, shot: ShotRequest) -> ShotRecord:
        calculator = await self.calculator()
        return calculator.record_shot(
            shot.type,
            shot.start_distance,
            shot.start_lie,
            holed=shot.holed,
            end_distance=shot.end_distance,
            end_lie=shot.end_lie,
            is_out_of_bounds=shot.is_out_of_bounds,
        )

    async def rollup(self, rounds: Sequence[ProStatsRound]) -> StrokesGainedRollup:
        return rollup_strokes_gained(rounds)
