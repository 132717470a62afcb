from __future__ import annotations

import pytest

from pentago.engine.board import BLACK, WHITE, BitBoard, cell_index
from pentago.engine.game import STARTPOS, Game, GameState, Phase, adjudicate
from pentago.engine.move import parse_turn


FULL_NO_LINES = "bbwwbb/wwbbww/bbwwbb/wwbbww/bbwwbb/wwbbww"


def test_new_game_starts_with_black_placing() -> None:
    g = Game.new()
    assert g.current_player == BLACK
    assert g.phase == Phase.PLACE
    assert g.state == GameState.IN_PROGRESS
    assert g.to_position() == STARTPOS
    assert len(g.legal_placements()) == 36
    assert g.legal_rotations() == []


def test_place_then_rotate_passes_the_turn() -> None:
    g = Game.new()
    g.place(2, 2)
    assert g.phase == Phase.ROTATE
    assert g.current_player == BLACK
    assert g.legal_placements() == []
    assert len(g.legal_rotations()) == 8
    with pytest.raises(ValueError):
        g.place(0, 0)
    g.rotate(1, False)
    assert g.phase == Phase.PLACE
    assert g.current_player == WHITE
    assert g.last_move == cell_index(2, 2)
    assert g.move_history() == ["c3", "1ccw"]


def test_rotate_before_place_raises() -> None:
    g = Game.new()
    with pytest.raises(ValueError):
        g.rotate(0, True)


def test_invalid_or_occupied_placement_raises() -> None:
    g = Game.new()
    with pytest.raises(ValueError):
        g.place(6, 0)
    g.place(0, 0)
    g.rotate(3, True)
    with pytest.raises(ValueError):
        g.place(0, 0)
    assert g.current_player == WHITE


def test_placement_completing_a_line_wins_immediately() -> None:
    g = Game.from_position("bbbb../....../....../wwww../....../...... b place")
    g.place(0, 4)
    assert g.state == GameState.BLACK_WINS
    assert g.winner() == BLACK
    assert g.is_over()
    assert g.legal_rotations() == []
    with pytest.raises(ValueError):
        g.rotate(0, True)


def test_rotation_completing_a_line_wins() -> None:
    # Rotating quadrant 0 clockwise moves a1 to c1 and a2 to b1
    g = Game.from_position("w..www/w...../....../....../....../bb.... w place")
    g.place(5, 5)
    g.rotate(0, True)
    assert g.state == GameState.WHITE_WINS
    assert g.current_player == WHITE


def test_both_lines_after_rotation_favors_black() -> None:
    b = BitBoard.from_position("bbbbb./....../....../....../....../wwwww.")
    assert adjudicate(b) == GameState.BLACK_WINS


def test_full_board_without_line_is_a_draw() -> None:
    g = Game.from_position(FULL_NO_LINES + " b place")
    assert g.state == GameState.DRAW
    assert g.winner() is None
    # A full board still owes the pending rotation
    pending = Game.from_position(FULL_NO_LINES + " w rotate")
    assert pending.state == GameState.IN_PROGRESS
    assert len(pending.legal_rotations()) == 8


def test_play_turn_applies_placement_and_rotation() -> None:
    g = Game.new()
    g.play_turn(parse_turn("c3/1ccw"))
    assert g.board.piece_at(2, 2) == BLACK
    assert g.current_player == WHITE
    assert g.last_rotation is not None and g.last_rotation.to_notation() == "1ccw"


def test_undo_restores_each_action() -> None:
    g = Game.new()
    g.place(1, 1)
    g.rotate(0, True)
    after_turn = g.to_position()
    g.place(4, 4)
    g.undo()
    assert g.to_position() == after_turn
    g.undo()
    assert g.phase == Phase.ROTATE
    assert g.board.piece_at(1, 1) == BLACK
    g.undo()
    assert g.to_position() == STARTPOS
    assert g.move_history() == []
    with pytest.raises(ValueError):
        g.undo()


def test_undo_reopens_a_finished_game() -> None:
    g = Game.from_position("bbbb../....../....../wwww../....../...... b place")
    g.place(0, 4)
    g.undo()
    assert g.state == GameState.IN_PROGRESS
    assert g.phase == Phase.PLACE


@pytest.mark.parametrize(
    "position",
    [
        "",
        "....../....../....../....../....../......",
        "....../....../....../....../....../...... x place",
        "....../....../....../....../....../...... b spin",
    ],
)
def test_from_position_rejects_malformed_input(position: str) -> None:
    with pytest.raises(ValueError):
        Game.from_position(position)
