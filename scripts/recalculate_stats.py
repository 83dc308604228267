from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from noirnote.config import Settings
from noirnote.domain.identity import require_player
from noirnote.runtime import build_runtime, configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Rebuild a player's stats and rankings from their results.")
    parser.add_argument("--player", type=str, default=None)
    parser.add_argument("--db", type=str, default=None)
    args = parser.parse_args()

    settings = Settings.load()
    if args.player:
        settings.player_id = args.player
    if args.db:
        settings.db_path = Path(args.db)
    configure_logging(settings)
    runtime = build_runtime(settings)
    player = require_player(runtime.identity, "recalculate stats")

    stats = runtime.pipeline.repair(player)
    runtime.gateway.flush()
    print(f"Player: {player.id}")
    print(f"Total score: {stats.total_score}")
    print(f"Solved cases: {stats.solved_cases}")
    print(f"Average time (ms): {stats.average_time_ms}")
    print(f"Total attempts: {stats.total_attempts}")
    if runtime.gateway.pending:
        print(f"{runtime.gateway.pending} write(s) still queued.")


if __name__ == "__main__":
    main()
