from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .board import BOARD_SIZE, NUM_CELLS, cell_coords, cell_index


COLUMNS = "abcdef"


@dataclass(frozen=True)
class Rotation:
    """Quarter turn of one quadrant.

    Attributes:
        quadrant (int): Quadrant index 0..3 (0 | 1 on top, 2 | 3 below).
        clockwise (bool): Direction of the turn.
    """

    quadrant: int
    clockwise: bool

    def to_notation(self) -> str:
        """Serialize the rotation, e.g. ``"2cw"`` or ``"0ccw"``."""
        return f"{self.quadrant}{'cw' if self.clockwise else 'ccw'}"


# Enumeration order used by every rotation scan: quadrant first, then
# counter-clockwise before clockwise.
ALL_ROTATIONS: Tuple[Rotation, ...] = tuple(
    Rotation(q, cw) for q in range(4) for cw in (False, True)
)


@dataclass(frozen=True)
class Turn:
    """A full Pentago turn: one placement followed by one rotation."""

    cell: int
    rotation: Rotation

    def to_notation(self) -> str:
        """Serialize the turn, e.g. ``"c3/1ccw"``."""
        return cell_to_str(self.cell) + "/" + self.rotation.to_notation()


def parse_turn(text: str) -> Turn:
    """Parse a turn written as ``<cell>/<rotation>``.

    Raises:
        ValueError: If either half is malformed.
    """
    parts = text.strip().split("/")
    if len(parts) != 2:
        raise ValueError(f"invalid turn: {text!r}")
    return Turn(str_to_cell(parts[0]), parse_rotation(parts[1]))


def parse_rotation(text: str) -> Rotation:
    """Parse ``<quadrant><cw|ccw>`` into a :class:`Rotation`.

    Raises:
        ValueError: If the quadrant is not 0..3 or the direction is unknown.
    """
    s = text.strip().lower()
    if len(s) < 3 or s[0] not in "0123":
        raise ValueError(f"invalid rotation: {text!r}")
    direction = s[1:]
    if direction not in ("cw", "ccw"):
        raise ValueError(f"invalid rotation direction: {text!r}")
    return Rotation(int(s[0]), direction == "cw")


def str_to_cell(s: str) -> int:
    """Convert notation such as ``"c4"`` into a cell index.

    The letter selects the column (``a``..``f``), the digit the row, with
    row ``1`` at the top of the board.

    Raises:
        ValueError: If ``s`` is not a valid cell.
    """
    s = s.strip().lower()
    if len(s) != 2 or s[0] not in COLUMNS or s[1] < "1" or s[1] > str(BOARD_SIZE):
        raise ValueError(f"invalid cell: {s!r}")
    col = COLUMNS.index(s[0])
    row = int(s[1]) - 1
    return cell_index(row, col)


def cell_to_str(cell: int) -> str:
    """Convert a cell index into notation.

    Raises:
        ValueError: If ``cell`` is outside 0..35.
    """
    if cell < 0 or cell >= NUM_CELLS:
        raise ValueError(f"invalid cell index: {cell}")
    row, col = cell_coords(cell)
    return COLUMNS[col] + str(row + 1)
