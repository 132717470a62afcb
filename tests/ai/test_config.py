from __future__ import annotations

import random

import pytest

from pentago.ai.config import AIConfig, Difficulty
from pentago.ai.context import MoveCandidate, rank_candidates, sort_candidates


def test_for_difficulty() -> None:
    cfg = AIConfig.for_difficulty(" HARD ")
    assert cfg.difficulty == Difficulty.HARD
    assert cfg.look_ahead_probability == 0.6
    assert AIConfig.for_difficulty("easy").look_ahead_probability == 0.0
    with pytest.raises(ValueError):
        AIConfig.for_difficulty("nightmare")


def test_with_options_returns_a_new_config() -> None:
    cfg = AIConfig()
    relaxed = cfg.with_options(defense_first=False)
    assert cfg.defense_first is True
    assert relaxed.defense_first is False
    assert relaxed.difficulty == cfg.difficulty


def test_sort_is_stable_and_descending() -> None:
    ranked = sort_candidates(
        [MoveCandidate(1, 5), MoveCandidate(2, 9), MoveCandidate(3, 5), MoveCandidate(4, 9)]
    )
    assert [c.cell for c in ranked] == [2, 4, 1, 3]


class _AlwaysSwap(random.Random):
    def random(self) -> float:
        return 0.0


def test_rank_candidates_swaps_near_ties_only() -> None:
    candidates = [MoveCandidate(1, 50), MoveCandidate(2, 100), MoveCandidate(3, 95)]
    ranked = rank_candidates(candidates, _AlwaysSwap(), threshold=20)
    assert [c.cell for c in ranked] == [3, 2, 1]
    exact = rank_candidates(candidates, _AlwaysSwap(), threshold=0)
    assert [c.cell for c in exact] == [2, 3, 1]
