from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Probability of switching CONTROL_ROTATION turns to the one-ply look-ahead
LOOK_AHEAD_PROBABILITY: Dict[Difficulty, float] = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 0.3,
    Difficulty.HARD: 0.6,
}


@dataclass(frozen=True)
class AIConfig:
    """Tunable knobs of the heuristic player.

    Attributes:
        difficulty (Difficulty): Scales how often the look-ahead strategy is used.
        opening_turns (int): Turns during which center/corner control is preferred.
        rotation_control_turn (int): Turn from which rotation leverage is played for.
        tie_threshold (int): Candidates closer than this are shuffled pairwise.
        defense_first (bool): Block opponent 3-runs before extending own 3-runs.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    opening_turns: int = 3
    rotation_control_turn: int = 8
    tie_threshold: int = 20
    defense_first: bool = True

    @property
    def look_ahead_probability(self) -> float:
        return LOOK_AHEAD_PROBABILITY[self.difficulty]

    @classmethod
    def for_difficulty(cls, name: str) -> "AIConfig":
        try:
            difficulty = Difficulty(str(name).strip().lower())
        except ValueError as e:
            raise ValueError(f"unknown difficulty: {name!r}") from e
        return cls(difficulty=difficulty)

    def with_options(self, **changes: object) -> "AIConfig":
        return replace(self, **changes)  # type: ignore[arg-type]
