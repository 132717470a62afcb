from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import uvicorn

from pentago.ai.config import AIConfig
from pentago.ai.service import PentagoAI, play_game
from pentago.engine.board import BLACK, WHITE
from pentago.protocol.engine.loop import run_engine


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pentago", description="Pentago heuristic engine")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    sub.add_parser("engine", help="Speak the line protocol on stdin/stdout")

    selfplay = sub.add_parser("selfplay", help="Play AI against AI and print the results")
    selfplay.add_argument("--games", type=int, default=1)
    selfplay.add_argument("--seed", type=int, default=None)
    selfplay.add_argument(
        "--difficulty", choices=("easy", "medium", "hard"), default="medium"
    )
    return parser


def selfplay(games: int, seed: Optional[int], difficulty: str) -> List[dict]:
    config = AIConfig.for_difficulty(difficulty)
    results = []
    for i in range(games):
        game_seed = None if seed is None else seed + i
        black = PentagoAI(player=BLACK, config=config, seed=game_seed)
        white = PentagoAI(
            player=WHITE, config=config, seed=None if game_seed is None else game_seed + 10_000
        )
        game = play_game(black, white)
        results.append(
            {
                "game": i + 1,
                "result": game.state.value,
                "actions": len(game.actions),
                "moves": game.move_history(),
            }
        )
        logger.info("selfplay game finished", extra={"game": i + 1, "result": game.state.value})
    return results


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=os.environ.get("PENTAGO_LOG_LEVEL", "INFO").upper())

    if args.command == "serve":
        uvicorn.run(
            "pentago.protocol.http.app:create_app", factory=True, host=args.host, port=args.port
        )
    elif args.command == "engine":
        run_engine()
    elif args.command == "selfplay":
        if args.games < 1:
            raise SystemExit("--games must be >= 1")
        results = selfplay(args.games, args.seed, args.difficulty)
        json.dump(results, sys.stdout, indent=2)
        sys.stdout.write("\n")


if __name__ == "__main__":
    main()
