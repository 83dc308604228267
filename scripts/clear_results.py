from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from noirnote.config import Settings
from noirnote.domain.errors import StoreUnavailable
from noirnote.domain.identity import require_player
from noirnote.persistence.keys import stats_key
from noirnote.runtime import build_runtime, configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Delete every stored result for one player.")
    parser.add_argument("--player", type=str, default=None)
    parser.add_argument("--db", type=str, default=None)
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")
    args = parser.parse_args()

    settings = Settings.load()
    if args.player:
        settings.player_id = args.player
    if args.db:
        settings.db_path = Path(args.db)
    configure_logging(settings)
    runtime = build_runtime(settings)
    player = require_player(runtime.identity, "clear results")

    if not args.yes:
        answer = input(f"Permanently delete all results for {player.id}? [y/N] ").strip().lower()
        if answer != "y":
            print("Aborted.")
            return
    dropped = runtime.gateway.discard_pending()
    try:
        deleted = runtime.ledger.clear(player.id)
    except StoreUnavailable as exc:
        print(f"Store unreachable, nothing was deleted: {exc}")
        sys.exit(1)
    runtime.gateway.delete(stats_key(player.id))
    runtime.gateway.flush()
    print(f"Deleted {deleted} result(s); dropped {dropped} unsent write(s).")


if __name__ == "__main__":
    main()
