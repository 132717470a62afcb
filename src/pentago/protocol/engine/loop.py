from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ...ai.config import AIConfig, Difficulty
from ...ai.service import Decision, PentagoAI, play_ai_turn
from ...engine.game import Game
from ...engine.move import cell_to_str, parse_turn


logger = logging.getLogger(__name__)

Writer = Callable[[str], None]

MAX_SEED = 2**31 - 1


@dataclass
class GoResult:
    played: str
    decisions: List[Decision]


class EngineProtocol:
    """Line protocol adapter around the AI.

    Notes:
    - Core remains pure; I/O is isolated here.
    - Commands: pentago, isready, setoption, newgame, position, go, stop, quit.
    - ``go`` decides on a worker thread with its own AI instance and game
      copy; the session game and AI are never touched by the worker.
    """

    def __init__(self) -> None:
        self.game: Game = Game.new()
        self.difficulty: Difficulty = Difficulty.MEDIUM
        self.seed: Optional[int] = None
        self.defense_first: bool = True
        self.ai = self._new_ai()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._result_lock = threading.Lock()
        self._last_result: Optional[GoResult] = None
        self._running = False
        self._gen = 0  # generation id to invalidate stale workers

    def _new_ai(self) -> PentagoAI:
        config = AIConfig(difficulty=self.difficulty, defense_first=self.defense_first)
        return PentagoAI(player=self.game.current_player, config=config, seed=self.seed)

    # ---- Command handlers ----
    def cmd_pentago(self, write: Writer) -> None:
        write("id name pentago_engine")
        write("id author pentago developers")
        write("option name Difficulty type combo default medium var easy var medium var hard")
        write(f"option name Seed type spin default 0 min 0 max {MAX_SEED}")
        write("option name DefenseFirst type check default true")
        write("pentagook")

    def cmd_isready(self, write: Writer) -> None:
        write("readyok")

    def cmd_newgame(self) -> None:
        self._cancel_running()
        self.game = Game.new()
        self.ai = self._new_ai()

    def cmd_position(self, args: List[str]) -> None:
        # position [startpos | <rows> <b|w> <place|rotate>] [moves t1 t2 ...]
        if not args:
            return
        idx = 0
        if args[0] == "startpos":
            game = Game.new()
            idx = 1
        else:
            tokens: List[str] = []
            while idx < len(args) and args[idx] != "moves":
                tokens.append(args[idx])
                idx += 1
            try:
                game = Game.from_position(" ".join(tokens))
            except ValueError as e:
                logger.info("ignoring invalid position", extra={"reason": str(e)})
                return
        if idx < len(args) and args[idx] == "moves":
            for text in args[idx + 1 :]:
                try:
                    game.play_turn(parse_turn(text))
                except ValueError as e:
                    # Stop at the first bad turn; earlier turns stay applied
                    logger.info("ignoring invalid turn", extra={"turn": text, "reason": str(e)})
                    break
        self._cancel_running()
        self.game = game

    def cmd_setoption(self, args: List[str]) -> None:
        # setoption name <name> [value <value>]
        if not args:
            return
        i = 1 if args[0] == "name" else 0
        name_tokens: List[str] = []
        while i < len(args) and args[i] != "value":
            name_tokens.append(args[i])
            i += 1
        value = " ".join(args[i + 1 :]).strip() if i < len(args) else ""
        name = " ".join(name_tokens).strip().lower()
        if name == "difficulty":
            try:
                self.difficulty = Difficulty(value.lower())
            except ValueError:
                return
        elif name == "seed":
            try:
                seed = int(value)
            except ValueError:
                return
            self.seed = min(MAX_SEED, seed) if seed > 0 else None
        elif name == "defensefirst":
            if value.lower() not in ("true", "false"):
                return
            self.defense_first = value.lower() == "true"
        else:
            return
        self.ai = self._new_ai()

    def cmd_go(self, write: Writer) -> None:
        self._cancel_running()
        self._stop_event.clear()
        with self._result_lock:
            self._last_result = None
        if self.game.is_over():
            write("bestmove (none)")
            return
        # The worker plays on a copy; the protocol game only changes via `position`
        game = Game.from_position(self.game.to_position())
        # Each worker owns its AI; stale workers may still be deciding
        ai = PentagoAI(
            player=game.current_player,
            config=self.ai.config,
            seed=self.ai.rng.randrange(MAX_SEED),
        )
        ai.sync_turn_counter(game.board)
        self._running = True
        self._gen += 1
        gen = self._gen

        def worker() -> None:
            decisions: List[Decision] = []
            try:
                played = play_ai_turn(ai, game, decisions.append)
            except ValueError as e:
                logger.warning("engine decision failed", extra={"reason": str(e)})
                if gen == self._gen:
                    write("bestmove (none)")
                    self._running = False
                return
            if gen != self._gen:
                # Superseded by a later command
                return
            result = GoResult(played, decisions)
            with self._result_lock:
                self._last_result = result
            self._running = False
            if self._stop_event.is_set():
                return
            self._emit_info(result, write)
            write(f"bestmove {played}")

        self._thread = threading.Thread(target=worker, name="pentago-go", daemon=True)
        self._thread.start()

    def cmd_stop(self, write: Writer) -> None:
        # Signal stop; emit the best known turn immediately
        self._stop_event.set()
        self._gen += 1
        with self._result_lock:
            res = self._last_result
        if res is not None:
            write(f"bestmove {res.played}")
            return
        placements = self.game.legal_placements()
        if placements:
            write(f"bestmove {cell_to_str(placements[0])}/0ccw")
        elif self.game.legal_rotations():
            write(f"bestmove {self.game.legal_rotations()[0].to_notation()}")
        else:
            write("bestmove (none)")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the running worker; returns False if it is still busy."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # ---- Utilities ----
    def _emit_info(self, res: GoResult, write: Writer) -> None:
        nodes = sum(d.simulations for d in res.decisions)
        time_ms = sum(d.time_ms for d in res.decisions)
        states = [d.state.value for d in res.decisions if d.state is not None]
        state = states[0] if states else "rotation"
        score = res.decisions[-1].score if res.decisions else 0
        write(f"info state {state} nodes {nodes} time {time_ms} score {score}")

    def _cancel_running(self) -> None:
        if self._running:
            self._stop_event.set()
            self._gen += 1


def _default_writer(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def run_engine(lines: Optional[Iterable[str]] = None, write: Writer = _default_writer) -> None:
    eng = EngineProtocol()
    for raw in lines if lines is not None else sys.stdin:
        line = raw.strip()
        if not line:
            continue
        parts = line.split()
        cmd, args = parts[0], parts[1:]

        if cmd == "pentago":
            eng.cmd_pentago(write)
        elif cmd == "isready":
            eng.cmd_isready(write)
        elif cmd == "setoption":
            eng.cmd_setoption(args)
        elif cmd == "newgame":
            eng.cmd_newgame()
        elif cmd == "position":
            eng.cmd_position(args)
        elif cmd == "go":
            eng.cmd_go(write)
        elif cmd == "stop":
            eng.cmd_stop(write)
        elif cmd == "quit":
            break
        # Unknown commands are ignored
    eng.wait()
