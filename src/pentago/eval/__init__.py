"""Threat scanning and evaluation heuristics.

Pure, deterministic, and side-effect free.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Final, Iterable, List, Optional, Sequence, Tuple

from pentago.engine.board import (
    BOARD_SIZE,
    DIRECTIONS,
    EMPTY,
    LINE_MASKS,
    WIN_LENGTH,
    BitBoard,
    cell_coords,
    cell_index,
    in_bounds,
    opponent,
)
from pentago.eval.tables import CENTER_SQUARES


# Base scores by run length
LINE_2_SCORE: Final = 10
LINE_3_SCORE: Final = 100
LINE_4_SCORE: Final = 1000
LINE_5_SCORE: Final = 100_000

# Multipliers
OWN_THREAT_BONUS: Final = 1.2
DOUBLE_OPEN_FACTOR: Final = 2.0
OPEN_END_STEP: Final = 0.2
CENTRAL_DIAGONAL_BONUS: Final = 1.3

FORK_BONUS: Final = 50


class Direction(IntEnum):
    ROW = 0
    COLUMN = 1
    DIAGONAL = 2
    ANTI_DIAGONAL = 3

    @property
    def delta(self) -> Tuple[int, int]:
        return DIRECTIONS[self.value]


@dataclass
class Threat:
    """One candidate winning line for one player.

    Attributes:
        player (int): Owner of the pieces in the line.
        count (int): Number of the owner's pieces in the scanned window.
        direction (Direction): Line direction.
        positions (List[int]): Occupied cells of the owner.
        open_ends (List[int]): Empty cells that complete or extend the line;
            cells inside the window come first, flanking cells after.
        score (int): Heuristic value, see :func:`score_threat`.
    """

    player: int
    count: int
    direction: Direction
    positions: List[int] = field(default_factory=list)
    open_ends: List[int] = field(default_factory=list)
    score: int = 0

    @property
    def is_open(self) -> bool:
        return bool(self.open_ends)

    @property
    def is_double_open(self) -> bool:
        return len(self.open_ends) >= 2


@dataclass(frozen=True)
class _Window:
    direction: Direction
    cells: Tuple[int, ...]
    before: Optional[int]
    after: Optional[int]

    @property
    def extended(self) -> Tuple[int, ...]:
        head = (self.before,) if self.before is not None else ()
        tail = (self.after,) if self.after is not None else ()
        return head + self.cells + tail


def _build_windows() -> Tuple[_Window, ...]:
    windows: List[_Window] = []
    for direction in Direction:
        dr, dc = direction.delta
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                if not in_bounds(row + (WIN_LENGTH - 1) * dr, col + (WIN_LENGTH - 1) * dc):
                    continue
                cells = tuple(cell_index(row + i * dr, col + i * dc) for i in range(WIN_LENGTH))
                before: Optional[int] = None
                after: Optional[int] = None
                if in_bounds(row - dr, col - dc):
                    before = cell_index(row - dr, col - dc)
                end_r, end_c = row + WIN_LENGTH * dr, col + WIN_LENGTH * dc
                if in_bounds(end_r, end_c):
                    after = cell_index(end_r, end_c)
                windows.append(_Window(direction, cells, before, after))
    return tuple(windows)


# Every length-5 window, direction by direction, row-major starts
WINDOWS: Final = _build_windows()


def _piece(board: BitBoard, cell: int) -> int:
    row, col = cell_coords(cell)
    return board.piece_at(row, col)


def scan_threats(board: BitBoard, ai_player: int) -> List[Threat]:
    """Enumerate and score every threat on ``board``.

    A window qualifies for a player when it holds at least two of the
    player's pieces and none of the opponent's. The same window widened by
    its in-bounds neighbors is scanned as well; such detections with three
    or more pieces are merged into an overlapping threat of the same player
    and direction (keeping the higher score) or added as new threats. Widened
    detections count at most four pieces.

    Args:
        board (BitBoard): Board to scan; never mutated.
        ai_player (int): Player the scores are computed for (own threats get
            a bonus).

    Returns:
        List[Threat]: Scored threats of both players in scan order.
    """
    threats: List[Threat] = []
    for window in WINDOWS:
        pieces = [_piece(board, c) for c in window.cells]
        empties = [c for c, p in zip(window.cells, pieces) if p == EMPTY]
        for flank in (window.before, window.after):
            if flank is not None and _piece(board, flank) == EMPTY:
                empties.append(flank)
        for player in (0, 1):
            own = [c for c, p in zip(window.cells, pieces) if p == player]
            if len(own) >= 2 and opponent(player) not in pieces:
                threat = Threat(player, len(own), window.direction, own, list(empties))
                threat.score = score_threat(threat, ai_player)
                threats.append(threat)

        ext_cells = window.extended
        if len(ext_cells) == len(window.cells):
            continue
        ext_pieces = [_piece(board, c) for c in ext_cells]
        for player in (0, 1):
            own = [c for c, p in zip(ext_cells, ext_pieces) if p == player]
            if len(own) < 3 or opponent(player) in ext_pieces:
                continue
            ext_empties = [c for c, p in zip(ext_cells, ext_pieces) if p == EMPTY]
            # Six cells can hold five pieces with a gap; that is no line yet
            count = min(len(own), WIN_LENGTH - 1)
            ext = Threat(player, count, window.direction, own, ext_empties)
            ext.score = score_threat(ext, ai_player)
            _merge(threats, ext)
    return threats


def _merge(threats: List[Threat], ext: Threat) -> None:
    for existing in threats:
        if (
            existing.player == ext.player
            and existing.direction == ext.direction
            and _significant_overlap(existing.positions, ext.positions)
        ):
            if ext.score > existing.score:
                existing.count = ext.count
                existing.positions = list(ext.positions)
                existing.open_ends = list(ext.open_ends)
                existing.score = ext.score
            return
    threats.append(ext)


def _significant_overlap(a: Sequence[int], b: Sequence[int]) -> bool:
    shared = len(set(a) & set(b))
    return shared > 0 and shared * 2 >= min(len(a), len(b))


def score_threat(threat: Threat, ai_player: int) -> int:
    """Score a threat.

    Base by run length (2 -> 10, 3 -> 100, 4 -> 1000, 5 -> 100000), doubled
    with two or more open ends, otherwise scaled by 1 + 0.2 per open end;
    20% more for the AI's own threats and 30% more for diagonals through the
    center block. A single 4-run with an opening always outranks any 3-run.
    """
    if threat.count >= WIN_LENGTH:
        base = LINE_5_SCORE
    elif threat.count == 4:
        base = LINE_4_SCORE
    elif threat.count == 3:
        base = LINE_3_SCORE
    elif threat.count == 2:
        base = LINE_2_SCORE
    else:
        return 0
    score = float(base)
    if threat.player == ai_player:
        score *= OWN_THREAT_BONUS
    if len(threat.open_ends) >= 2:
        score *= DOUBLE_OPEN_FACTOR
    else:
        score *= 1 + OPEN_END_STEP * len(threat.open_ends)
    if threat.direction in (Direction.DIAGONAL, Direction.ANTI_DIAGONAL) and _near_center(
        threat.positions
    ):
        score *= CENTRAL_DIAGONAL_BONUS
    return int(score)


def _near_center(cells: Iterable[int]) -> bool:
    return any(c in CENTER_SQUARES for c in cells)


def threat_balance(threats: Iterable[Threat], player: int) -> int:
    """Sum of the player's threat scores minus the opponent's."""
    total = 0
    for t in threats:
        total += t.score if t.player == player else -t.score
    return total


def winning_placements(board: BitBoard, player: int) -> List[int]:
    """Empty cells where a single placement completes five in a row."""
    bits = board.bits(player)
    cells: List[int] = []
    for cell in board.empty_cells():
        placed = bits | (1 << cell)
        if _completes_line(placed, cell):
            cells.append(cell)
    return cells


def _completes_line(bits: int, cell: int) -> bool:
    for mask in LINE_MASKS:
        if (mask >> cell) & 1 and bits & mask == mask:
            return True
    return False


def fork_potential(board: BitBoard, cell: int, player: int) -> int:
    """Bonus for the number of directions a placement turns into live 3-runs.

    A direction counts when some length-5 window through ``cell`` would hold
    at least three of the player's pieces, at least two empty cells and no
    opposing piece after the placement.
    """
    row, col = cell_coords(cell)
    directions = 0
    for dr, dc in DIRECTIONS:
        for offset in range(-(WIN_LENGTH - 1), 1):
            own = 0
            empty = 0
            blocked = False
            for j in range(WIN_LENGTH):
                r = row + (offset + j) * dr
                c = col + (offset + j) * dc
                if not in_bounds(r, c):
                    blocked = True
                    break
                if (r, c) == (row, col):
                    own += 1
                    continue
                piece = board.piece_at(r, c)
                if piece == player:
                    own += 1
                elif piece == EMPTY:
                    empty += 1
                else:
                    blocked = True
                    break
            if not blocked and own >= 3 and empty >= 2:
                directions += 1
                break
    return directions * FORK_BONUS


def count_in_cells(board: BitBoard, cells: Iterable[int], player: int) -> Tuple[int, int, int]:
    """Return ``(own, opponent, empty)`` counts over ``cells``."""
    own = opp = empty = 0
    for cell in cells:
        piece = _piece(board, cell)
        if piece == player:
            own += 1
        elif piece == EMPTY:
            empty += 1
        else:
            opp += 1
    return own, opp, empty


def evaluate_pattern(
    board: BitBoard,
    pattern: Sequence[int],
    player: int,
    own_weight: int = 20,
    empty_weight: int = 5,
) -> int:
    """Progress of ``player`` on a strategic pattern.

    Zero when the opponent already holds more than a third of the pattern.
    """
    own, opp, empty = count_in_cells(board, pattern, player)
    if opp > len(pattern) // 3:
        return 0
    score = own * own_weight + empty * empty_weight
    if own > 1:
        score += own * 10
    return score


def count_adjacent(board: BitBoard, cell: int, player: int) -> int:
    row, col = cell_coords(cell)
    total = 0
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            r, c = row + dr, col + dc
            if in_bounds(r, c) and board.piece_at(r, c) == player:
                total += 1
    return total
