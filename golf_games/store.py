from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import sqlite3
import threading
from typing import Optional

from .engine import parse_game
from .models import GameRequest, HoleScoreEntry

logger = logging.getLogger(__name__)


class GameNotFoundError(LookupError):
    pass


class HoleLogStore:
    """Game definitions plus an ordered hole log, last write wins per (game, hole)."""

    def __init__(self, database_path: str):
        self._database_path = Path(database_path).expanduser()
        self._database_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._initialize()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._database_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _initialize(self) -> None:
        with self._lock, self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS games (
                  game_id TEXT PRIMARY KEY,
                  format TEXT NOT NULL,
                  payload TEXT NOT NULL,
                  created_at TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS game_holes (
                  game_id TEXT NOT NULL,
                  hole_number INTEGER NOT NULL,
                  scores TEXT NOT NULL,
                  updated_at TEXT NOT NULL,
                  PRIMARY KEY (game_id, hole_number),
                  FOREIGN KEY (game_id) REFERENCES games(game_id) ON DELETE CASCADE
                );
                """
            )
            conn.commit()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def save_game(self, game_id: str, game: GameRequest) -> None:
        """Store the game definition. Scores carried in the payload seed the hole log."""
        now = self._now()
        definition = game.model_dump(mode="json", exclude={"scores"})
        definition["game_id"] = game_id
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO games (game_id, format, payload, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(game_id) DO UPDATE SET
                  format = excluded.format,
                  payload = excluded.payload,
                  updated_at = excluded.updated_at
                """,
                (game_id, game.format, json.dumps(definition), now, now),
            )
            if game.scores:
                conn.executemany(
                    """
                    INSERT INTO game_holes (game_id, hole_number, scores, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(game_id, hole_number) DO UPDATE SET
                      scores = excluded.scores,
                      updated_at = excluded.updated_at
                    """,
                    [
                        (game_id, entry.hole_number, json.dumps(entry.scores), now)
                        for entry in game.scores
                    ],
                )
            conn.commit()
        logger.info("Saved %s game %s.", game.format, game_id)

    def record_hole(self, game_id: str, entry: HoleScoreEntry) -> None:
        with self._lock, self._connect() as conn:
            exists = conn.execute("SELECT 1 FROM games WHERE game_id = ?", (game_id,)).fetchone()
            if exists is None:
                raise GameNotFoundError(f"Unknown game: {game_id}")
            conn.execute(
                """
                INSERT INTO game_holes (game_id, hole_number, scores, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(game_id, hole_number) DO UPDATE SET
                  scores = excluded.scores,
                  updated_at = excluded.updated_at
                """,
                (game_id, entry.hole_number, json.dumps(entry.scores), self._now()),
            )
            conn.commit()

    def hole_log(self, game_id: str) -> list[HoleScoreEntry]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                """
                SELECT hole_number, scores
                FROM game_holes
                WHERE game_id = ?
                ORDER BY hole_number
                """,
                (game_id,),
            ).fetchall()
        return [
            HoleScoreEntry(hole_number=int(row["hole_number"]), scores=json.loads(row["scores"]))
            for row in rows
        ]

    def load_game(self, game_id: str) -> GameRequest:
        """The stored definition joined with the current hole log."""
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT payload FROM games WHERE game_id = ?", (game_id,)).fetchone()
        if row is None:
            raise GameNotFoundError(f"Unknown game: {game_id}")
        payload = json.loads(row["payload"])
        payload["scores"] = [entry.model_dump() for entry in self.hole_log(game_id)]
        return parse_game(payload)

    def list_games(self, format: Optional[str] = None) -> list[str]:
        sql = "SELECT game_id FROM games"
        params: tuple[str, ...] = ()
        if format:
            sql += " WHERE format = ?"
            params = (format,)
        sql += " ORDER BY created_at"
        with self._lock, self._connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [str(row["game_id"]) for row in rows]

    def delete_game(self, game_id: str) -> bool:
        with self._lock, self._connect() as conn:
            cursor = conn.execute("DELETE FROM games WHERE game_id = ?", (game_id,))
            conn.commit()
        return cursor.rowcount > 0
