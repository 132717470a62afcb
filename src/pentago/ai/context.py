from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pentago.ai.config import AIConfig
from pentago.engine.board import BitBoard, opponent
from pentago.engine.move import Rotation
from pentago.eval import Threat, scan_threats


@dataclass
class MoveCandidate:
    cell: int
    score: int


@dataclass
class RotationCandidate:
    rotation: Rotation
    score: int


@dataclass
class DecisionContext:
    """Per-decision snapshot shared by the state controller and selectors.

    The board is a private copy taken when the decision starts; every
    simulation runs on further copies, so nothing here reaches back into
    the caller's board. ``threats`` is the one scan of the snapshot reused by
    all scorers.
    """

    board: BitBoard
    player: int
    config: AIConfig
    rng: random.Random
    turn: int = 0
    threats: List[Threat] = field(default_factory=list)
    simulations: int = 0
    _placed: Dict[Tuple[int, int], BitBoard] = field(default_factory=dict, repr=False)
    _scans: Dict[Tuple[int, int], List[Threat]] = field(default_factory=dict, repr=False)
    _offense: Dict[int, int] = field(default_factory=dict, repr=False)

    @classmethod
    def create(
        cls,
        board: BitBoard,
        player: int,
        config: AIConfig,
        rng: random.Random,
        turn: int = 0,
    ) -> "DecisionContext":
        snapshot = board.copy()
        return cls(
            board=snapshot,
            player=player,
            config=config,
            rng=rng,
            turn=turn,
            threats=scan_threats(snapshot, player),
        )

    @property
    def opponent(self) -> int:
        return opponent(self.player)

    def own_threats(self, min_count: int = 2) -> List[Threat]:
        return [t for t in self.threats if t.player == self.player and t.count >= min_count]

    def opponent_threats(self, min_count: int = 2) -> List[Threat]:
        return [t for t in self.threats if t.player == self.opponent and t.count >= min_count]

    def empty_cells(self) -> List[int]:
        return self.board.empty_cells()

    def clone(self, board: Optional[BitBoard] = None) -> BitBoard:
        self.simulations += 1
        return (board or self.board).copy()

    def after_placement(self, cell: int, player: int) -> BitBoard:
        """Board after ``player`` places on ``cell``; cached, do not mutate."""
        key = (cell, player)
        board = self._placed.get(key)
        if board is None:
            board = self.clone()
            board.place(cell, player)
            self._placed[key] = board
        return board

    def after_rotation(self, rotation: Rotation, board: Optional[BitBoard] = None) -> BitBoard:
        rotated = self.clone(board)
        rotated.rotate_quadrant(rotation.quadrant, rotation.clockwise)
        return rotated

    def scan(self, board: BitBoard) -> List[Threat]:
        return scan_threats(board, self.player)

    def scan_after_placement(self, cell: int, player: int) -> List[Threat]:
        key = (cell, player)
        threats = self._scans.get(key)
        if threats is None:
            threats = self.scan(self.after_placement(cell, player))
            self._scans[key] = threats
        return threats

    def wins_with(self, cell: int, player: int) -> bool:
        return self.after_placement(cell, player).has_winning_line(player)

    def cached_offense(self, cell: int) -> Optional[int]:
        return self._offense.get(cell)

    def remember_offense(self, cell: int, value: int) -> None:
        self._offense[cell] = value


def sort_candidates(candidates: List[MoveCandidate]) -> List[MoveCandidate]:
    """Descending by score; equal scores keep their enumeration order."""
    return sorted(candidates, key=lambda c: -c.score)


def rank_candidates(
    candidates: List[MoveCandidate], rng: random.Random, threshold: int
) -> List[MoveCandidate]:
    """Sort candidates and shuffle near-ties.

    After sorting, each adjacent pair whose scores differ by less than
    ``threshold`` is swapped with probability 1/2, walking once from the top.
    """
    ranked = sort_candidates(candidates)
    for i in range(len(ranked) - 1):
        if abs(ranked[i].score - ranked[i + 1].score) < threshold and rng.random() < 0.5:
            ranked[i], ranked[i + 1] = ranked[i + 1], ranked[i]
    return ranked
