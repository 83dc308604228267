from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from noirnote import config
from noirnote.config import Settings
from noirnote.persistence.keys import GLOBAL_SCOPE
from noirnote.runtime import build_runtime, configure_logging
from noirnote.util.time import format_duration


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a leaderboard.")
    parser.add_argument("--scope", type=str, default=GLOBAL_SCOPE, help="'global' or a case id.")
    parser.add_argument("--limit", type=int, default=config.LEADERBOARD_LIMIT)
    parser.add_argument("--db", type=str, default=None)
    args = parser.parse_args()

    settings = Settings.load()
    if args.db:
        settings.db_path = Path(args.db)
    configure_logging(settings)
    runtime = build_runtime(settings)

    entries = runtime.reconciler.ranking(args.scope, limit=args.limit)
    print(f"Leaderboard: {args.scope} ({len(entries)} entries)")
    for entry in entries:
        if args.scope == GLOBAL_SCOPE:
            detail = f"{entry.solved_cases or 0} solved"
        else:
            detail = f"{format_duration(entry.duration_ms or 0)} in {entry.attempts or 0} attempt(s)"
        print(f"{entry.rank:>3}. {entry.display_name:<24} {entry.score:>6} | {detail}")


if __name__ == "__main__":
    main()
