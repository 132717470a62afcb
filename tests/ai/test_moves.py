from __future__ import annotations

import random

import pytest

from pentago.ai.config import AIConfig
from pentago.ai.context import DecisionContext
from pentago.ai.moves import (
    WIN_SCORE,
    NoMoveAvailableError,
    _creates_danger,
    center_move,
    corner_move,
    defensive_move,
    look_ahead_move,
    offensive_move,
    pattern_move,
    select_placement,
)
from pentago.ai.state import AIState
from pentago.engine.board import WHITE, BitBoard
from pentago.eval.tables import CENTER_SQUARES, CORNER_POSITIONS, STRATEGIC_PATTERNS


FULL_NO_LINES = "bbwwbb/wwbbww/bbwwbb/wwbbww/bbwwbb/wwbbww"


def _ctx(position: str, turn: int = 5, seed: int = 0) -> DecisionContext:
    return DecisionContext.create(
        BitBoard.from_position(position), WHITE, AIConfig(), random.Random(seed), turn
    )


@pytest.mark.parametrize("state", list(AIState))
def test_immediate_win_is_always_taken(state: AIState) -> None:
    ctx = _ctx("wwww../....../....../....../....../bbbb..")
    choice = select_placement(ctx, state)
    assert choice.cell == 4
    assert choice.score == WIN_SCORE


@pytest.mark.parametrize("state", list(AIState))
def test_opponent_immediate_win_is_always_blocked(state: AIState) -> None:
    ctx = _ctx("bbbb../....../....../....../....../w.w...")
    assert select_placement(ctx, state).cell == 4


def test_full_board_raises() -> None:
    ctx = _ctx(FULL_NO_LINES)
    with pytest.raises(NoMoveAvailableError):
        select_placement(ctx, AIState.OFFENSE)


def test_offense_extends_an_open_three() -> None:
    ctx = _ctx("....../....../.www../....../....../......")
    choice = offensive_move(ctx)
    assert choice is not None
    assert choice.cell in (12, 16, 17)


def test_defense_blocks_an_open_three() -> None:
    ctx = _ctx("....../....../.bbb../....../....../......")
    choice = defensive_move(ctx)
    assert choice is not None
    assert choice.cell in (12, 16, 17)
    assert select_placement(ctx, AIState.DEFENSE).cell in (12, 16, 17)


def test_center_move_on_empty_board() -> None:
    choice = center_move(_ctx("....../....../....../....../....../......", turn=1))
    assert choice is not None
    assert choice.cell in CENTER_SQUARES


def test_corner_move_prefers_corners() -> None:
    choice = corner_move(_ctx("....../....../....../....../....../......", turn=2))
    assert choice is not None
    assert choice.cell in CORNER_POSITIONS


def test_corner_next_to_own_diagonal_piece() -> None:
    choice = corner_move(_ctx("....../....../....../....../....w./......", turn=2))
    assert choice is not None
    assert choice.cell == 35


def test_pattern_move_stays_on_a_pattern() -> None:
    ctx = _ctx("w...../.w..../....../....../....../......")
    choice = pattern_move(ctx)
    assert choice is not None
    assert ctx.board.is_empty(choice.cell)
    assert any(choice.cell in p for p in STRATEGIC_PATTERNS.values())


def test_look_ahead_simulates_on_copies() -> None:
    position = "b...w./.w..../..b.../....../....w./b....."
    ctx = _ctx(position, turn=10)
    choice = look_ahead_move(ctx)
    assert choice is not None
    assert ctx.board.is_empty(choice.cell)
    assert ctx.simulations >= len(ctx.empty_cells()) * 8
    assert ctx.board.to_position() == position


@pytest.mark.parametrize("state", list(AIState))
def test_every_strategy_returns_an_empty_cell(state: AIState) -> None:
    ctx = _ctx("b...w./.w..../..b.../...w../....b./b....w", turn=9)
    choice = select_placement(ctx, state)
    assert ctx.board.is_empty(choice.cell)


@pytest.mark.parametrize(
    "position, blocks",
    [
        ("....../....../..bbb./....../....../......", (12, 13, 17)),
        ("bbb.../....../....../....../....../......", (3, 4, 5)),
        ("b...../b...../b...../....../....../......", (18, 24, 30)),
    ],
)
def test_defense_answers_the_open_three(position: str, blocks: tuple) -> None:
    for seed in range(5):
        choice = defensive_move(_ctx(position, seed=seed))
        assert choice is not None
        assert choice.cell in blocks


def test_existing_threats_do_not_make_every_cell_dangerous() -> None:
    ctx = _ctx("....../....../.bbb../....../....../......")
    assert not _creates_danger(ctx, 0)
    assert not _creates_danger(ctx, 35)
    assert _creates_danger(ctx, 16)


def test_defense_preempts_a_new_open_three() -> None:
    for seed in range(5):
        choice = defensive_move(_ctx("....../....../..bb../....../....../......", seed=seed))
        assert choice is not None
        assert choice.cell in (12, 13, 16, 17)


def test_equal_corners_are_shuffled_across_seeds() -> None:
    empty = "....../....../....../....../....../......"
    picks = set()
    for seed in range(20):
        choice = corner_move(_ctx(empty, turn=2, seed=seed))
        assert choice is not None
        picks.add(choice.cell)
    assert picks <= set(CORNER_POSITIONS)
    assert len(picks) > 1
