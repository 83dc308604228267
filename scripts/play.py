from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from noirnote.config import Settings
from noirnote.domain.models import Player
from noirnote.runtime import build_runtime, configure_logging
from noirnote.ui.app import CaseApp


def main() -> None:
    parser = argparse.ArgumentParser(description="Play a case in the terminal.")
    parser.add_argument("--case-id", type=str, default="case-001")
    parser.add_argument("--player", type=str, default=None, help="Player id to play as.")
    parser.add_argument("--name", type=str, default=None, help="Leaderboard display name.")
    parser.add_argument("--settings", type=str, default=None, help="Settings YAML path.")
    parser.add_argument("--db", type=str, default=None, help="SQLite database path.")
    args = parser.parse_args()

    settings = Settings.load(Path(args.settings) if args.settings else None)
    if args.db:
        settings.db_path = Path(args.db)
    configure_logging(settings)
    player_id = args.player or settings.player_id
    if not player_id:
        parser.error("a player id is required (--player or settings player_id)")
    player = Player(id=player_id, display_name=args.name or settings.display_name)
    runtime = build_runtime(settings, player=player)
    CaseApp(runtime, args.case_id).run()


if __name__ == "__main__":
    main()
