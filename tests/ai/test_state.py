from __future__ import annotations

import random

from pentago.ai.config import AIConfig, Difficulty
from pentago.ai.context import DecisionContext
from pentago.ai.state import AIState, select_state
from pentago.engine.board import WHITE, BitBoard


class _AlwaysLow(random.Random):
    def random(self) -> float:
        return 0.0


def _ctx(position: str, turn: int, config: AIConfig | None = None, rng=None) -> DecisionContext:
    return DecisionContext.create(
        BitBoard.from_position(position),
        WHITE,
        config or AIConfig(),
        rng or random.Random(0),
        turn,
    )


def test_own_open_four_means_offense() -> None:
    ctx = _ctx("wwww../....../....../....../....../bbb...", 6)
    assert select_state(ctx) == AIState.OFFENSE


def test_opponent_open_three_means_defense() -> None:
    ctx = _ctx("bbb.../....../....../....../....../......", 5)
    assert select_state(ctx) == AIState.DEFENSE


def test_defense_first_ordering() -> None:
    position = "bbb.../....../....../....../....../www..."
    assert select_state(_ctx(position, 6)) == AIState.DEFENSE
    cfg = AIConfig(defense_first=False)
    assert select_state(_ctx(position, 6, cfg)) == AIState.OFFENSE


def test_opponent_four_is_defended_even_when_attacking_first() -> None:
    cfg = AIConfig(defense_first=False)
    ctx = _ctx("bbbb../....../....../....../....../www...", 6, cfg)
    assert select_state(ctx) == AIState.DEFENSE


def test_opening_prefers_center_then_corners() -> None:
    assert select_state(_ctx("....../....../....../....../....../......", 1)) == (
        AIState.CONTROL_CENTER
    )
    taken = "....../....../..bw../..wb../....../......"
    assert select_state(_ctx(taken, 2)) == AIState.CONTROL_CORNERS


def test_pattern_opportunity_after_opening() -> None:
    ctx = _ctx("w...../.w..../....../....../....../......", 5)
    assert select_state(ctx) == AIState.BUILD_PATTERN


def test_own_three_means_offense_without_pattern() -> None:
    ctx = _ctx("....../....../....../....../....../www...", 5)
    assert select_state(ctx) == AIState.OFFENSE


def test_late_game_rotation_control_and_look_ahead() -> None:
    position = "..w.../....../....../....../....../...b.."
    easy = AIConfig(difficulty=Difficulty.EASY)
    assert select_state(_ctx(position, 10, easy, _AlwaysLow())) == AIState.CONTROL_ROTATION
    hard = AIConfig(difficulty=Difficulty.HARD)
    assert select_state(_ctx(position, 10, hard, _AlwaysLow())) == AIState.LOOK_AHEAD


def test_quiet_midgame_picks_center_or_corners() -> None:
    position = "..w.../....../....../....../....../...b.."
    for seed in range(5):
        state = select_state(_ctx(position, 5, rng=random.Random(seed)))
        assert state in (AIState.CONTROL_CENTER, AIState.CONTROL_CORNERS)
