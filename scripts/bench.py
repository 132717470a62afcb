#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import subprocess
import sys
import time
from typing import Any, Dict, List, Optional

# Ensure src/ is importable when running directly
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from pentago.ai.config import AIConfig
from pentago.ai.service import Decision, PentagoAI, play_ai_turn
from pentago.engine.board import BLACK, WHITE
from pentago.engine.game import Game


def _git_info() -> Dict[str, Optional[str]]:
    def run(cmd: List[str]) -> Optional[str]:
        try:
            out = subprocess.check_output(cmd, cwd=REPO_ROOT, stderr=subprocess.DEVNULL)
            return out.decode().strip()
        except (OSError, subprocess.CalledProcessError):
            return None

    return {
        "commit": run(["git", "rev-parse", "HEAD"]),
        "describe": run(["git", "describe", "--dirty", "--tags", "--always"]),
    }


def bench_game(black: PentagoAI, white: PentagoAI) -> Dict[str, Any]:
    """Play one AI-vs-AI game and collect per-decision statistics."""
    decisions: List[Decision] = []
    game = Game.new()
    for ai in (black, white):
        ai.reset_turn_counter()
    start = time.perf_counter()
    while not game.is_over():
        ai = black if game.current_player == BLACK else white
        play_ai_turn(ai, game, decisions.append)
    elapsed_ms = int((time.perf_counter() - start) * 1000)

    placements = [d for d in decisions if d.kind == "place"]
    rotations = [d for d in decisions if d.kind == "rotate"]
    states: Dict[str, int] = {}
    for d in placements:
        if d.state is not None:
            states[d.state.value] = states.get(d.state.value, 0) + 1

    def avg(values: List[int]) -> float:
        return round(sum(values) / len(values), 2) if values else 0.0

    return {
        "result": game.state.value,
        "actions": len(game.actions),
        "moves": game.move_history(),
        "time_ms": elapsed_ms,
        "decisions": len(decisions),
        "avg_place_ms": avg([d.time_ms for d in placements]),
        "avg_rotate_ms": avg([d.time_ms for d in rotations]),
        "avg_simulations": avg([d.simulations for d in decisions]),
        "states": states,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark the AI through self-play")
    parser.add_argument("--games", type=int, default=4, help="Number of games to play")
    parser.add_argument("--seed", type=int, default=1, help="Base seed; game i uses seed+i")
    parser.add_argument(
        "--difficulty", choices=("easy", "medium", "hard"), default="medium"
    )
    parser.add_argument(
        "--white-difficulty", choices=("easy", "medium", "hard"), default=None,
        help="Difficulty for White (defaults to --difficulty)",
    )
    parser.add_argument("--out", type=str, default=None, help="Write JSON results to file path")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    parser.add_argument(
        "--progress", action="store_true", help="Print per-game progress to stderr"
    )
    args = parser.parse_args()

    black_cfg = AIConfig.for_difficulty(args.difficulty)
    white_cfg = AIConfig.for_difficulty(args.white_difficulty or args.difficulty)

    results: List[Dict[str, Any]] = []
    t0 = time.perf_counter()
    for i in range(max(1, args.games)):
        if args.progress:
            sys.stderr.write(f"[{i + 1}/{args.games}] playing...\n")
            sys.stderr.flush()
        black = PentagoAI(player=BLACK, config=black_cfg, seed=args.seed + i)
        white = PentagoAI(player=WHITE, config=white_cfg, seed=args.seed + i + 10_000)
        res = bench_game(black, white)
        results.append(res)
        if args.progress:
            sys.stderr.write(
                f"    result={res['result']} actions={res['actions']} time={res['time_ms']}ms\n"
            )
            sys.stderr.flush()

    dt_ms = int((time.perf_counter() - t0) * 1000)
    tally: Dict[str, int] = {}
    for r in results:
        tally[r["result"]] = tally.get(r["result"], 0) + 1

    payload = {
        "meta": {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
            "git": _git_info(),
            "config": {
                "games": len(results),
                "seed": args.seed,
                "black_difficulty": black_cfg.difficulty.value,
                "white_difficulty": white_cfg.difficulty.value,
            },
        },
        "results": results,
        "summary": {
            "total_time_ms": dt_ms,
            "results": tally,
            "avg_simulations": round(
                sum(r["avg_simulations"] for r in results) / max(1, len(results)), 2
            ),
        },
    }

    if args.out:
        out_path = args.out
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2 if args.pretty else None)
        print(out_path)
    else:
        print(json.dumps(payload, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
