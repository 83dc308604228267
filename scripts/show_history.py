from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from noirnote import config
from noirnote.config import Settings
from noirnote.domain.identity import require_player
from noirnote.runtime import build_runtime, configure_logging
from noirnote.util.time import format_duration


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a player's submissions, newest first.")
    parser.add_argument("--player", type=str, default=None)
    parser.add_argument("--case-id", type=str, default=None)
    parser.add_argument("--limit", type=int, default=config.HISTORY_LIMIT)
    parser.add_argument("--db", type=str, default=None)
    args = parser.parse_args()

    settings = Settings.load()
    if args.player:
        settings.player_id = args.player
    if args.db:
        settings.db_path = Path(args.db)
    configure_logging(settings)
    runtime = build_runtime(settings)
    player = require_player(runtime.identity, "show history")

    records = runtime.ledger.history(player.id, args.case_id, limit=args.limit, descending=True)
    print(f"History for {player.id} ({len(records)} submissions)")
    for record in records:
        result = "win " if record.is_win else "loss"
        points = record.score if record.score is not None else "-"
        print(
            f"{record.finished_at_ms:>14} {record.case_id:<12} {result} "
            f"{format_duration(record.duration_ms):>8} | attempt {record.attempts} | score {points}"
        )


if __name__ == "__main__":
    main()
