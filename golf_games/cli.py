from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .aggregator import summarize
from .baseline import BaselineDataError, fetch_baseline
from .config import get_settings
from .engine import parse_game, score_game
from .models import MatchPlayResult, ScoringInputError, ShotRequest
from .strokes_gained import StrokesGainedCalculator


def _run_score_command(path: str) -> None:
    game = parse_game(Path(path).read_text(encoding="utf-8"))
    result = score_game(game)
    summary = summarize(result)

    print(
        f"\nFormat: {summary.format} | holes played {summary.holes_played}/{summary.holes_total}"
        f"{'' if summary.is_complete else ' (in progress)'}"
    )
    if isinstance(result, MatchPlayResult):
        print(f"{'Hole':<6} {'Par':<4} Status")
        print("-" * 30)
        for hole in result.holes:
            print(f"{hole.hole_number:<6} {hole.par:<4} {hole.status_text}")
        print(f"\n{result.side_a.name} vs {result.side_b.name}: {result.final_result or result.status_text}")
        return

    columns = list(summary.series)
    print(f"{'Hole':<6} " + " ".join(f"{column[:10]:>10}" for column in columns))
    print("-" * (7 + 11 * len(columns)))
    for row, hole in enumerate(result.holes):
        cells = []
        for column in columns:
            value = summary.series[column][row]
            cells.append(f"{value:>10g}" if hole.is_resolved else f"{'-':>10}")
        print(f"{hole.hole_number:<6} " + " ".join(cells))
    print("-" * (7 + 11 * len(columns)))
    print(f"{'Total':<6} " + " ".join(f"{summary.totals[column]:>10g}" for column in columns))
    if summary.leader_ids:
        print(f"Leader: {', '.join(summary.leader_ids)}")


async def _run_sg_command(args: argparse.Namespace) -> None:
    settings = get_settings()
    shot = ShotRequest(
        type=args.type,
        start_distance=args.start,
        start_lie=args.lie,
        holed=args.holed,
        end_distance=args.end,
        end_lie=args.end_lie,
        is_out_of_bounds=args.out_of_bounds,
    )
    if settings.putting_baseline_url and settings.long_game_baseline_url:
        calculator = StrokesGainedCalculator(await fetch_baseline(settings))
    else:
        calculator = StrokesGainedCalculator()

    record = calculator.record_shot(
        shot.type,
        shot.start_distance,
        shot.start_lie,
        holed=shot.holed,
        end_distance=shot.end_distance,
        end_lie=shot.end_lie,
        is_out_of_bounds=shot.is_out_of_bounds,
    )
    end = "holed" if record.holed else f"{record.end_distance:g}m ({record.end_lie})"
    print(f"{record.type} from {record.start_distance:g}m ({record.start_lie}) -> {end}")
    print(f"Strokes gained: {record.strokes_gained:+.3f}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Golf betting game scorer and strokes gained calculator.")
    sub = parser.add_subparsers(dest="command", required=True)

    score_parser = sub.add_parser("score", help="Recompute a game from a JSON file")
    score_parser.add_argument("path")

    sg_parser = sub.add_parser("sg", help="Strokes gained for one shot")
    sg_parser.add_argument("--type", choices=("tee", "approach", "putt"), default="approach")
    sg_parser.add_argument("--start", type=float, required=True, help="Start distance in meters")
    sg_parser.add_argument("--lie", default="fairway")
    sg_parser.add_argument("--end", type=float, default=None, help="End distance in meters")
    sg_parser.add_argument("--end-lie", default=None)
    sg_parser.add_argument("--holed", action="store_true")
    sg_parser.add_argument("--out-of-bounds", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(level=get_settings().log_level.upper())
    try:
        if args.command == "score":
            _run_score_command(args.path)
            return
        if args.command == "sg":
            asyncio.run(_run_sg_command(args))
            return
        parser.error(f"Unsupported command: {args.command}")
    except BaselineDataError as exc:
        print(f"Baseline data error: {exc}")
    except (ScoringInputError, ValidationError) as exc:
        print(f"Invalid input: {exc}")


if __name__ == "__main__":
    main()
