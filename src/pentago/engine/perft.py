from __future__ import annotations

from .board import BLACK, BitBoard, opponent
from .game import GameState, adjudicate
from .move import ALL_ROTATIONS


def perft(board: BitBoard, depth: int, player: int = BLACK) -> int:
    """Count turn sequences of length `depth` starting with `player` to move.

    Definition:
    - depth == 0 returns 1 (the current node).
    - a turn is one placement followed by one of the 8 rotations; a
      placement that already wins, or a rotation that ends the game, is a
      leaf and counts once.
    - depth 1 from the empty board is 36 * 8 = 288.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    nodes = 0
    for cell in board.empty_cells():
        placed = board.copy()
        placed.place(cell, player)
        if placed.has_winning_line(player):
            nodes += 1
            continue
        for rotation in ALL_ROTATIONS:
            child = placed.copy()
            child.rotate_quadrant(rotation.quadrant, rotation.clockwise)
            if adjudicate(child) != GameState.IN_PROGRESS:
                nodes += 1
            else:
                nodes += perft(child, depth - 1, opponent(player))
    return nodes
