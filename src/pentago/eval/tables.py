"""Static position data: weights, cell groups and strategic patterns."""

from __future__ import annotations

from typing import Dict, Final, Tuple

from pentago.engine.board import cell_coords, cell_index


CENTER_SCORE: Final = 8
CORNER_SCORE: Final = 5
EDGE_SCORE: Final = 2

# Center 2x2 = CENTER_SCORE + 2, quadrant centers = CENTER_SCORE,
# inter-quadrant connectors on the rim = EDGE_SCORE + 2, the remaining
# inner cells int(6 - distance from the board center).
POSITION_WEIGHTS: Final = (
    (5, 2, 4, 4, 2, 5),
    (2, 8, 4, 4, 8, 2),
    (4, 4, 10, 10, 4, 4),
    (4, 4, 10, 10, 4, 4),
    (2, 8, 4, 4, 8, 2),
    (5, 2, 4, 4, 2, 5),
)


def _cells(coords: Tuple[Tuple[int, int], ...]) -> Tuple[int, ...]:
    return tuple(cell_index(r, c) for r, c in coords)


def weight(cell: int) -> int:
    row, col = cell_coords(cell)
    return POSITION_WEIGHTS[row][col]


CENTER_SQUARES: Final = _cells(((2, 2), (2, 3), (3, 2), (3, 3)))

# Center block, quadrant centers, then the ring around the center
CENTER_POSITIONS: Final = _cells(
    (
        (2, 2), (2, 3), (3, 2), (3, 3),
        (1, 1), (1, 4), (4, 1), (4, 4),
        (1, 2), (1, 3), (2, 1), (3, 1), (4, 2), (4, 3), (2, 4), (3, 4),
    )
)

CORNER_POSITIONS: Final = _cells(((0, 0), (0, 5), (5, 0), (5, 5)))

NEAR_CORNER_POSITIONS: Final = _cells(
    (
        (0, 1), (1, 0), (1, 1), (0, 4), (1, 5), (1, 4),
        (4, 0), (5, 1), (4, 1), (4, 5), (5, 4), (4, 4),
    )
)

# Rim cells joining two quadrants
EDGE_POSITIONS: Final = _cells(
    ((0, 2), (0, 3), (2, 0), (3, 0), (2, 5), (3, 5), (5, 2), (5, 3))
)

# Quadrant centers and the center block
IMPORTANT_AREAS: Final = _cells(
    ((1, 1), (1, 4), (4, 1), (4, 4), (2, 2), (2, 3), (3, 2), (3, 3))
)

STRATEGIC_PATTERNS: Dict[str, Tuple[int, ...]] = {
    "main_diagonal": _cells(((0, 0), (1, 1), (2, 2), (3, 3), (4, 4), (5, 5))),
    "anti_diagonal": _cells(((0, 5), (1, 4), (2, 3), (3, 2), (4, 1), (5, 0))),
    "x_pattern": _cells(
        ((1, 1), (2, 2), (3, 3), (4, 4), (1, 4), (2, 3), (3, 2), (4, 1))
    ),
}
