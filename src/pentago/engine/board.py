from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Final, List, Tuple


BOARD_SIZE: Final = 6
QUADRANT_SIZE: Final = 3
WIN_LENGTH: Final = 5
NUM_CELLS: Final = BOARD_SIZE * BOARD_SIZE
FULL_MASK: Final = (1 << NUM_CELLS) - 1

# Cell contents / player ids
EMPTY, BLACK, WHITE = -1, 0, 1
PLAYERS: Final = (BLACK, WHITE)
PIECE_TO_CHAR = {
    EMPTY: ".",
    BLACK: "b",
    WHITE: "w",
}
CHAR_TO_PIECE = {v: k for k, v in PIECE_TO_CHAR.items()}

# (row delta, col delta): row, column, diagonal, anti-diagonal
DIRECTIONS: Final = ((0, 1), (1, 0), (1, 1), (1, -1))

EMPTY_POSITION = "/".join(["." * BOARD_SIZE] * BOARD_SIZE)


class IllegalPlacementError(ValueError):
    """Raised when a piece is placed on an occupied or invalid cell."""


def cell_index(row: int, col: int) -> int:
    return row * BOARD_SIZE + col


def cell_coords(cell: int) -> Tuple[int, int]:
    return divmod(cell, BOARD_SIZE)


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def opponent(player: int) -> int:
    return 1 - player


def quadrant_of(row: int, col: int) -> int:
    return (row // QUADRANT_SIZE) * 2 + (col // QUADRANT_SIZE)


def quadrant_origin(quadrant: int) -> Tuple[int, int]:
    return (quadrant // 2) * QUADRANT_SIZE, (quadrant % 2) * QUADRANT_SIZE


def _line_masks() -> Tuple[int, ...]:
    masks: List[int] = []
    for dr, dc in DIRECTIONS:
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                end_r = row + (WIN_LENGTH - 1) * dr
                end_c = col + (WIN_LENGTH - 1) * dc
                if not in_bounds(end_r, end_c):
                    continue
                mask = 0
                for i in range(WIN_LENGTH):
                    mask |= 1 << cell_index(row + i * dr, col + i * dc)
                masks.append(mask)
    return tuple(masks)


def _quadrant_mask(quadrant: int) -> int:
    r0, c0 = quadrant_origin(quadrant)
    mask = 0
    for r in range(QUADRANT_SIZE):
        for c in range(QUADRANT_SIZE):
            mask |= 1 << cell_index(r0 + r, c0 + c)
    return mask


def _rotation_map(quadrant: int, clockwise: bool) -> Tuple[Tuple[int, int], ...]:
    # (source bit, destination bit) for each of the 9 quadrant cells
    r0, c0 = quadrant_origin(quadrant)
    pairs: List[Tuple[int, int]] = []
    for r in range(QUADRANT_SIZE):
        for c in range(QUADRANT_SIZE):
            if clockwise:
                new_r, new_c = c, 2 - r
            else:
                new_r, new_c = 2 - c, r
            pairs.append((cell_index(r0 + r, c0 + c), cell_index(r0 + new_r, c0 + new_c)))
    return tuple(pairs)


# All 32 five-in-a-row masks
LINE_MASKS: Final = _line_masks()
QUADRANT_MASKS: Final = tuple(_quadrant_mask(q) for q in range(4))
ROTATION_MAPS: Dict[Tuple[int, bool], Tuple[Tuple[int, int], ...]] = {
    (q, cw): _rotation_map(q, cw) for q in range(4) for cw in (False, True)
}


def _rotate_bits(bits: int, quadrant: int, clockwise: bool) -> int:
    out = bits & ~QUADRANT_MASKS[quadrant]
    for src, dst in ROTATION_MAPS[(quadrant, clockwise)]:
        if (bits >> src) & 1:
            out |= 1 << dst
    return out


@dataclass
class BitBoard:
    """Pentago board stored as two 36-bit occupancy masks.

    Notes:
    - Cell (row, col) maps to bit ``row * 6 + col``; row 0 is the top row.
    - Quadrants are numbered 0..3 in row-major order of the 3x3 blocks.
    - ``black & white == 0`` holds at all times.
    """

    black: int = 0
    white: int = 0

    @classmethod
    def from_position(cls, position: str) -> "BitBoard":
        """Create a board from its position string.

        Args:
            position (str): Six rows of ``.``/``b``/``w`` joined by ``/``,
                top row first.

        Returns:
            BitBoard: Board holding the described pieces.

        Raises:
            ValueError: If the string does not describe exactly 6x6 cells or
                contains an unknown piece character.
        """
        if not position or not isinstance(position, str):
            raise ValueError("position must be a non-empty string")
        rows = position.strip().split("/")
        if len(rows) != BOARD_SIZE:
            raise ValueError("position must have 6 rows")
        board = cls()
        for row, text in enumerate(rows):
            if len(text) != BOARD_SIZE:
                raise ValueError(f"row {row + 1} must have 6 cells")
            for col, ch in enumerate(text.lower()):
                if ch not in CHAR_TO_PIECE:
                    raise ValueError(f"invalid piece in position: {ch!r}")
                piece = CHAR_TO_PIECE[ch]
                if piece != EMPTY:
                    board.place(cell_index(row, col), piece)
        return board

    def to_position(self) -> str:
        rows = []
        for row in range(BOARD_SIZE):
            rows.append(
                "".join(PIECE_TO_CHAR[self.piece_at(row, col)] for col in range(BOARD_SIZE))
            )
        return "/".join(rows)

    def copy(self) -> "BitBoard":
        return BitBoard(self.black, self.white)

    @property
    def occupied(self) -> int:
        return self.black | self.white

    def bits(self, player: int) -> int:
        return self.black if player == BLACK else self.white

    def is_empty(self, cell: int) -> bool:
        return (self.occupied >> cell) & 1 == 0

    def place(self, cell: int, player: int) -> None:
        """Put a piece of ``player`` on ``cell``.

        Raises:
            IllegalPlacementError: If the cell is outside the board, already
                occupied, or ``player`` is not BLACK/WHITE.
        """
        if not 0 <= cell < NUM_CELLS:
            raise IllegalPlacementError(f"cell out of range: {cell}")
        if player not in PLAYERS:
            raise IllegalPlacementError(f"invalid player: {player}")
        if not self.is_empty(cell):
            raise IllegalPlacementError(f"cell {cell} is already occupied")
        if player == BLACK:
            self.black |= 1 << cell
        else:
            self.white |= 1 << cell

    def piece_at(self, row: int, col: int) -> int:
        cell = cell_index(row, col)
        if (self.black >> cell) & 1:
            return BLACK
        if (self.white >> cell) & 1:
            return WHITE
        return EMPTY

    def rotate_quadrant(self, quadrant: int, clockwise: bool) -> None:
        """Rotate one 3x3 quadrant by 90 degrees in place.

        The rotation permutes the nine quadrant cells: clockwise maps local
        ``(r, c)`` to ``(c, 2 - r)``, counter-clockwise to ``(2 - c, r)``.
        """
        if quadrant not in range(4):
            raise ValueError(f"invalid quadrant: {quadrant}")
        self.black = _rotate_bits(self.black, quadrant, bool(clockwise))
        self.white = _rotate_bits(self.white, quadrant, bool(clockwise))

    def has_winning_line(self, player: int) -> bool:
        bits = self.bits(player)
        for mask in LINE_MASKS:
            if bits & mask == mask:
                return True
        return False

    def is_full(self) -> bool:
        return self.occupied & FULL_MASK == FULL_MASK

    def empty_cells(self) -> List[int]:
        occ = self.occupied
        return [cell for cell in range(NUM_CELLS) if not (occ >> cell) & 1]

    def count(self, player: int) -> int:
        return self.bits(player).bit_count()

    def pieces_in_quadrant(self, quadrant: int, player: int | None = None) -> int:
        bits = self.occupied if player is None else self.bits(player)
        return (bits & QUADRANT_MASKS[quadrant]).bit_count()

    def __str__(self) -> str:
        lines = []
        for row in range(BOARD_SIZE):
            if row == QUADRANT_SIZE:
                lines.append("------+------")
            cells = [PIECE_TO_CHAR[self.piece_at(row, col)] for col in range(BOARD_SIZE)]
            lines.append(" ".join(cells[:3]) + " | " + " ".join(cells[3:]))
        return "\n".join(lines)
