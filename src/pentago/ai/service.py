from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from pentago.ai.config import AIConfig
from pentago.ai.context import DecisionContext
from pentago.ai.moves import NoMoveAvailableError, select_placement
from pentago.ai.rotations import select_rotation
from pentago.ai.state import AIState, select_state
from pentago.engine.board import PLAYERS, WHITE, BitBoard, cell_coords
from pentago.engine.game import Game, Phase
from pentago.engine.move import cell_to_str


logger = logging.getLogger(__name__)

__all__ = ["Decision", "NoMoveAvailableError", "PentagoAI", "play_ai_turn", "play_game"]


@dataclass
class Decision:
    """Record of the most recent AI decision.

    Attributes:
        kind (str): ``"place"`` or ``"rotate"``.
        state (Optional[AIState]): Controller state for placements.
        cell (Optional[int]): Chosen cell for placements.
        rotation (Optional[str]): Chosen rotation in notation for rotations.
        score (int): Score of the chosen candidate.
        simulations (int): Boards simulated while deciding.
        time_ms (int): Wall time spent deciding.
        turn (int): Turn counter at decision time.
    """

    kind: str
    state: Optional[AIState]
    cell: Optional[int]
    rotation: Optional[str]
    score: int
    simulations: int
    time_ms: int
    turn: int

    def result(self) -> str:
        if self.cell is not None:
            return cell_to_str(self.cell)
        return self.rotation or ""


class PentagoAI:
    """Heuristic Pentago player.

    Decisions depend only on the board snapshot, the player, the turn counter
    and the injected random generator; the caller's board is never mutated.
    """

    def __init__(
        self,
        player: int = WHITE,
        config: Optional[AIConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.set_player(player)
        self.config = config or AIConfig()
        self.rng = rng if rng is not None else random.Random(seed)
        self.turn_count = 0
        self.board: Optional[BitBoard] = None
        self.last_decision: Optional[Decision] = None

    def set_player(self, player: int) -> None:
        if player not in PLAYERS:
            raise ValueError(f"invalid player: {player}")
        self.player = player

    def attach_board(self, board: BitBoard) -> None:
        self.board = board.copy()

    def reset_turn_counter(self) -> None:
        self.turn_count = 0

    def sync_turn_counter(self, board: BitBoard) -> None:
        """Set the turn counter from the number of own pieces on ``board``."""
        self.turn_count = board.count(self.player)

    def _snapshot(self, board: Optional[BitBoard]) -> BitBoard:
        if board is None:
            board = self.board
        if board is None:
            raise ValueError("no board attached")
        return board.copy()

    def choose_move(self, board: Optional[BitBoard] = None) -> Tuple[int, int]:
        """Choose the cell to place on.

        Args:
            board (Optional[BitBoard]): Board to decide on; the attached board
                is used when omitted.

        Returns:
            Tuple[int, int]: ``(row, col)`` of an empty cell.

        Raises:
            NoMoveAvailableError: If the board has no empty cell.
        """
        snapshot = self._snapshot(board)
        if snapshot.is_full():
            raise NoMoveAvailableError("no empty cell to place on")
        self.turn_count += 1
        start = time.perf_counter()
        ctx = DecisionContext.create(snapshot, self.player, self.config, self.rng, self.turn_count)
        state = select_state(ctx)
        candidate = select_placement(ctx, state)
        self.last_decision = Decision(
            kind="place",
            state=state,
            cell=candidate.cell,
            rotation=None,
            score=candidate.score,
            simulations=ctx.simulations,
            time_ms=int((time.perf_counter() - start) * 1000),
            turn=self.turn_count,
        )
        self._log(self.last_decision)
        return cell_coords(candidate.cell)

    def choose_rotation(self, board: Optional[BitBoard] = None) -> Tuple[int, bool]:
        """Choose ``(quadrant, clockwise)`` for the board after this turn's placement."""
        snapshot = self._snapshot(board)
        start = time.perf_counter()
        ctx = DecisionContext.create(snapshot, self.player, self.config, self.rng, self.turn_count)
        candidate = select_rotation(ctx)
        self.last_decision = Decision(
            kind="rotate",
            state=None,
            cell=None,
            rotation=candidate.rotation.to_notation(),
            score=candidate.score,
            simulations=ctx.simulations,
            time_ms=int((time.perf_counter() - start) * 1000),
            turn=self.turn_count,
        )
        self._log(self.last_decision)
        return candidate.rotation.quadrant, candidate.rotation.clockwise

    def _log(self, decision: Decision) -> None:
        logger.debug(
            "ai decision",
            extra={
                "player": self.player,
                "kind": decision.kind,
                "state": decision.state.value if decision.state else None,
                "result": decision.result(),
                "score": decision.score,
                "simulations": decision.simulations,
                "time_ms": decision.time_ms,
                "turn": decision.turn,
            },
        )


def play_ai_turn(
    ai: PentagoAI, game: Game, on_decision: Optional[Callable[[Decision], None]] = None
) -> str:
    """Let ``ai`` finish the current turn of ``game``.

    Plays the pending placement (if any) and then the rotation, unless the
    placement already ended the game.
    ``on_decision`` is called with every decision record of the turn.

    Returns:
        str: The played actions in notation, e.g. ``"c3/1ccw"``; a lone cell
        when the placement won, a lone rotation when only the rotation was due.

    Raises:
        ValueError: If the game is over or it is not the AI's turn.
    """
    if game.is_over():
        raise ValueError("game is over")
    if game.current_player != ai.player:
        raise ValueError("it is not the AI's turn")
    played = []
    if game.phase == Phase.PLACE:
        row, col = ai.choose_move(game.board)
        _report(ai, on_decision)
        game.place(row, col)
        played.append(game.actions[-1])
        if game.is_over():
            return played[0]
    quadrant, clockwise = ai.choose_rotation(game.board)
    _report(ai, on_decision)
    game.rotate(quadrant, clockwise)
    played.append(game.actions[-1])
    return "/".join(played)


def _report(ai: PentagoAI, on_decision: Optional[Callable[[Decision], None]]) -> None:
    if on_decision is not None and ai.last_decision is not None:
        on_decision(ai.last_decision)


def play_game(black: PentagoAI, white: PentagoAI, game: Optional[Game] = None) -> Game:
    """Play AI against AI until the game ends and return the finished game."""
    if black.player == white.player:
        raise ValueError("both AIs play the same color")
    game = game or Game.new()
    for ai in (black, white):
        ai.reset_turn_counter()
    while not game.is_over():
        ai = black if game.current_player == black.player else white
        play_ai_turn(ai, game)
    return game
