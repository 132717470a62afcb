from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .board import BLACK, WHITE, BitBoard, cell_coords, cell_index, in_bounds, opponent
from .move import ALL_ROTATIONS, Rotation, Turn, cell_to_str


STARTPOS = "....../....../....../....../....../...... b place"


class GameState(str, Enum):
    IN_PROGRESS = "in_progress"
    BLACK_WINS = "black_wins"
    WHITE_WINS = "white_wins"
    DRAW = "draw"


class Phase(str, Enum):
    PLACE = "place"
    ROTATE = "rotate"


def win_state(player: int) -> GameState:
    return GameState.BLACK_WINS if player == BLACK else GameState.WHITE_WINS


def adjudicate(board: BitBoard) -> GameState:
    """Result of a board reached after a rotation.

    Black's line is checked before White's, so a rotation that completes
    lines for both players counts as a Black win. A full board without a
    line is a draw.
    """
    if board.has_winning_line(BLACK):
        return GameState.BLACK_WINS
    if board.has_winning_line(WHITE):
        return GameState.WHITE_WINS
    if board.is_full():
        return GameState.DRAW
    return GameState.IN_PROGRESS


# (board, current_player, phase, state, last_move, last_rotation)
_Snapshot = Tuple[BitBoard, int, Phase, GameState, Optional[int], Optional[Rotation]]


@dataclass
class Game:
    """Game wrapper around a board with turn bookkeeping.

    Responsibility: alternate players, enforce place-then-rotate phases,
    declare wins and draws, and support undo.
    """

    board: BitBoard = field(default_factory=BitBoard)
    current_player: int = BLACK
    phase: Phase = Phase.PLACE
    state: GameState = GameState.IN_PROGRESS
    last_move: Optional[int] = None
    last_rotation: Optional[Rotation] = None
    actions: List[str] = field(default_factory=list)
    _history: List[_Snapshot] = field(default_factory=list, repr=False)

    @classmethod
    def new(cls) -> "Game":
        return cls()

    @classmethod
    def from_position(cls, position: str) -> "Game":
        """Create a game from ``<board> <b|w> <place|rotate>``.

        Raises:
            ValueError: If any of the three fields is malformed.
        """
        if not position or not isinstance(position, str):
            raise ValueError("position must be a non-empty string")
        parts = position.strip().split()
        if len(parts) != 3:
            raise ValueError("position must have 3 fields")
        rows, side, phase = parts
        board = BitBoard.from_position(rows)
        if side not in ("b", "w"):
            raise ValueError("side to move must be 'b' or 'w'")
        try:
            phase_value = Phase(phase)
        except ValueError as e:
            raise ValueError("phase must be 'place' or 'rotate'") from e
        state = adjudicate(board)
        # A full board still owes its pending rotation
        if state == GameState.DRAW and phase_value == Phase.ROTATE:
            state = GameState.IN_PROGRESS
        return cls(
            board=board,
            current_player=BLACK if side == "b" else WHITE,
            phase=phase_value,
            state=state,
        )

    def to_position(self) -> str:
        side = "b" if self.current_player == BLACK else "w"
        return f"{self.board.to_position()} {side} {self.phase.value}"

    def is_over(self) -> bool:
        return self.state != GameState.IN_PROGRESS

    def winner(self) -> Optional[int]:
        if self.state == GameState.BLACK_WINS:
            return BLACK
        if self.state == GameState.WHITE_WINS:
            return WHITE
        return None

    def legal_placements(self) -> List[int]:
        if self.is_over() or self.phase != Phase.PLACE:
            return []
        return self.board.empty_cells()

    def legal_rotations(self) -> List[Rotation]:
        if self.is_over() or self.phase != Phase.ROTATE:
            return []
        return list(ALL_ROTATIONS)

    def place(self, row: int, col: int) -> None:
        """Place the current player's piece and move to the rotate phase.

        A placement that already completes five in a row ends the game.

        Raises:
            ValueError: If the game is over, a rotation is pending, or the
                cell is invalid or occupied.
        """
        if self.is_over():
            raise ValueError("game is over")
        if self.phase != Phase.PLACE:
            raise ValueError("a rotation is pending")
        if not in_bounds(row, col):
            raise ValueError(f"invalid cell: ({row}, {col})")
        cell = cell_index(row, col)
        snapshot = self._snapshot()
        self.board.place(cell, self.current_player)
        self._history.append(snapshot)
        self.last_move = cell
        self.actions.append(cell_to_str(cell))
        if self.board.has_winning_line(self.current_player):
            self.state = win_state(self.current_player)
            return
        self.phase = Phase.ROTATE

    def rotate(self, quadrant: int, clockwise: bool) -> None:
        """Rotate a quadrant, adjudicate, and pass the turn.

        Raises:
            ValueError: If the game is over, no placement was made yet this
                turn, or the quadrant is invalid.
        """
        if self.is_over():
            raise ValueError("game is over")
        if self.phase != Phase.ROTATE:
            raise ValueError("a placement is pending")
        if quadrant not in range(4):
            raise ValueError(f"invalid quadrant: {quadrant}")
        self._history.append(self._snapshot())
        rotation = Rotation(quadrant, bool(clockwise))
        self.board.rotate_quadrant(quadrant, rotation.clockwise)
        self.last_rotation = rotation
        self.actions.append(rotation.to_notation())
        self.state = adjudicate(self.board)
        self.phase = Phase.PLACE
        if self.state == GameState.IN_PROGRESS:
            self.current_player = opponent(self.current_player)

    def play_turn(self, turn: Turn) -> None:
        row, col = cell_coords(turn.cell)
        self.place(row, col)
        if not self.is_over():
            self.rotate(turn.rotation.quadrant, turn.rotation.clockwise)

    def undo(self) -> None:
        if not self._history:
            raise ValueError("no moves to undo")
        board, player, phase, state, last_move, last_rotation = self._history.pop()
        self.board = board
        self.current_player = player
        self.phase = phase
        self.state = state
        self.last_move = last_move
        self.last_rotation = last_rotation
        self.actions.pop()

    def move_history(self) -> List[str]:
        return list(self.actions)

    def _snapshot(self) -> _Snapshot:
        return (
            self.board.copy(),
            self.current_player,
            self.phase,
            self.state,
            self.last_move,
            self.last_rotation,
        )
