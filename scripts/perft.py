#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding src/ to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from pentago.engine.game import STARTPOS, Game, Phase
from pentago.engine.perft import perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Count turn sequences from a position")
    parser.add_argument(
        "--position", type=str, default=STARTPOS, help="Position string (default: empty board)"
    )
    parser.add_argument("--depth", type=int, default=1, help="Perft depth (default: 1)")
    args = parser.parse_args()

    game = Game.from_position(args.position)
    if game.phase != Phase.PLACE:
        raise SystemExit("perft needs a position in the place phase")
    start = time.perf_counter()
    nodes = perft(game.board, args.depth, game.current_player)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
