"""Placement strategies, one per controller state.

Every strategy returns ``None`` when it has nothing to offer; the dispatcher
then falls back to the generic strategic scorer.
"""

from __future__ import annotations

from typing import Callable, Dict, Final, List, Optional

from pentago.ai.context import DecisionContext, MoveCandidate, rank_candidates, sort_candidates
from pentago.ai.state import AIState
from pentago.engine.board import (
    BOARD_SIZE,
    cell_coords,
    quadrant_of,
)
from pentago.engine.game import GameState, adjudicate, win_state
from pentago.engine.move import ALL_ROTATIONS
from pentago.eval import (
    count_adjacent,
    evaluate_pattern,
    fork_potential,
    threat_balance,
    winning_placements,
)
from pentago.eval.tables import (
    CENTER_POSITIONS,
    CORNER_POSITIONS,
    EDGE_POSITIONS,
    NEAR_CORNER_POSITIONS,
    STRATEGIC_PATTERNS,
    weight,
)


BLOCK_SCORE: Final = 150
PREEMPTIVE_BLOCK_SCORE: Final = 500
WIN_SCORE: Final = 100_000

# Severity of an opponent threat by run length
DEFENSE_TIERS: Final = {4: 4000, 3: 300, 2: 20}

MoveStrategy = Callable[[DecisionContext], Optional[MoveCandidate]]


class NoMoveAvailableError(ValueError):
    """Raised when a placement is requested on a board without empty cells."""


# --- shared scorers ---


def offensive_value(ctx: DecisionContext, cell: int) -> int:
    """Position weight + half of every own threat the cell extends + fork potential."""
    cached = ctx.cached_offense(cell)
    if cached is not None:
        return cached
    value = weight(cell)
    for t in ctx.threats:
        if t.player == ctx.player and cell in t.open_ends:
            value += t.score // 2
    value += fork_potential(ctx.board, cell, ctx.player)
    ctx.remember_offense(cell, value)
    return value


def defensive_value(ctx: DecisionContext, cell: int) -> int:
    score = float(BLOCK_SCORE)
    blocked = 0
    for t in ctx.threats:
        if t.player == ctx.opponent and cell in t.open_ends:
            score += t.count * 50
            blocked += 1
    if blocked > 1:
        score *= 1.0 + 0.5 * (blocked - 1)
    return int(score) + offensive_value(ctx, cell) // 3


def pattern_membership(cell: int) -> int:
    return sum(15 for pattern in STRATEGIC_PATTERNS.values() if cell in pattern)


def strategic_score(ctx: DecisionContext, cell: int) -> int:
    score = weight(cell) * 2
    score += offensive_value(ctx, cell)
    score += defensive_value(ctx, cell) // 2
    score += pattern_membership(cell)
    score += count_adjacent(ctx.board, cell, ctx.player) * 10
    score += ctx.rng.randrange(5)
    return score


def _ranked(
    ctx: DecisionContext, scorer: Callable[[DecisionContext, int], int]
) -> List[MoveCandidate]:
    candidates = [MoveCandidate(cell, scorer(ctx, cell)) for cell in ctx.empty_cells()]
    return rank_candidates(candidates, ctx.rng, ctx.config.tie_threshold)


def _best(
    ctx: DecisionContext, scorer: Callable[[DecisionContext, int], int]
) -> Optional[MoveCandidate]:
    ranked = _ranked(ctx, scorer)
    return ranked[0] if ranked else None


# --- guard ---


def critical_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    """Immediate own win first, otherwise the block of an opponent's immediate win."""
    wins = winning_placements(ctx.board, ctx.player)
    if wins:
        return MoveCandidate(wins[0], WIN_SCORE)
    threats = winning_placements(ctx.board, ctx.opponent)
    if threats:
        return MoveCandidate(threats[0], WIN_SCORE // 2)
    return None


# --- strategies ---


def strategic_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    return _best(ctx, strategic_score)


def offensive_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    for t in ctx.own_threats(4):
        for cell in t.open_ends:
            if ctx.wins_with(cell, ctx.player):
                return MoveCandidate(cell, WIN_SCORE)

    open_moves: List[MoveCandidate] = []
    for t in ctx.own_threats(3):
        if not t.is_double_open:
            continue
        for cell in t.open_ends:
            score = t.score * 2
            if ctx.wins_with(cell, ctx.player):
                score *= 10
            open_moves.append(MoveCandidate(cell, score))
    if open_moves:
        return rank_candidates(open_moves, ctx.rng, ctx.config.tie_threshold)[0]

    for t in ctx.opponent_threats(4):
        if t.open_ends:
            return MoveCandidate(t.open_ends[0], DEFENSE_TIERS[4])
    for t in ctx.opponent_threats(3):
        if t.is_double_open:
            return MoveCandidate(t.open_ends[0], DEFENSE_TIERS[3])

    reinforce: List[MoveCandidate] = []
    for t in ctx.own_threats(2):
        for cell in t.open_ends:
            reinforce.append(MoveCandidate(cell, offensive_value(ctx, cell)))
    if reinforce:
        return rank_candidates(reinforce, ctx.rng, ctx.config.tie_threshold)[0]
    return None


def _creates_danger(ctx: DecisionContext, cell: int) -> bool:
    """Whether an opponent piece on ``cell`` would start a new open 3-run or 4-run."""
    for t in ctx.scan_after_placement(cell, ctx.opponent):
        if t.player != ctx.opponent or cell not in t.positions:
            continue
        if (t.count >= 3 and t.is_double_open) or (t.count >= 4 and t.is_open):
            return True
    return False


def defensive_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    blocks = winning_placements(ctx.board, ctx.opponent)
    if blocks:
        return MoveCandidate(blocks[0], WIN_SCORE // 2)

    candidates: List[MoveCandidate] = []
    urgent = False
    for t in ctx.opponent_threats():
        if not t.is_open:
            continue
        urgent = urgent or t.count >= 3
        base = DEFENSE_TIERS[min(t.count, 4)]
        for cell in t.open_ends:
            score = float(base)
            remaining = ctx.scan_after_placement(cell, ctx.player)
            still_there = any(
                r.player == ctx.opponent and r.count >= t.count and r.direction == t.direction
                for r in remaining
            )
            if not still_there:
                score *= 1.5
            score += offensive_value(ctx, cell) / 3
            candidates.append(MoveCandidate(cell, int(score)))

    # Existing 3-runs and 4-runs are answered before new ones are pre-empted
    if not urgent:
        for cell in ctx.empty_cells():
            if _creates_danger(ctx, cell):
                candidates.append(MoveCandidate(cell, PREEMPTIVE_BLOCK_SCORE))

    if candidates:
        return rank_candidates(candidates, ctx.rng, ctx.config.tie_threshold)[0]
    return hybrid_move(ctx)


def hybrid_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    def score(c: DecisionContext, cell: int) -> int:
        return (defensive_value(c, cell) + offensive_value(c, cell)) // 2 + weight(cell)

    return _best(ctx, score)


def center_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    free = [c for c in CENTER_POSITIONS if ctx.board.is_empty(c)]
    if not free:
        return None
    top = max(weight(c) for c in free)
    ties = [c for c in free if weight(c) == top]
    return MoveCandidate(ctx.rng.choice(ties), top)


def corner_score(ctx: DecisionContext, cell: int) -> int:
    row, col = cell_coords(cell)
    score = weight(cell)
    if cell in CORNER_POSITIONS:
        score += 10
        diag_row = 1 if row == 0 else BOARD_SIZE - 2
        diag_col = 1 if col == 0 else BOARD_SIZE - 2
        if ctx.board.piece_at(diag_row, diag_col) == ctx.player:
            score += 20
    score += count_adjacent(ctx.board, cell, ctx.player) * 15
    return score


def corner_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    candidates = [
        MoveCandidate(c, corner_score(ctx, c))
        for c in CORNER_POSITIONS + NEAR_CORNER_POSITIONS + EDGE_POSITIONS
        if ctx.board.is_empty(c)
    ]
    if not candidates:
        return None
    return rank_candidates(candidates, ctx.rng, ctx.config.tie_threshold)[0]


def pattern_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    candidates: List[MoveCandidate] = []
    for pattern in STRATEGIC_PATTERNS.values():
        pattern_score = evaluate_pattern(ctx.board, pattern, ctx.player)
        if pattern_score <= 0:
            continue
        for cell in pattern:
            if ctx.board.is_empty(cell):
                score = pattern_score + weight(cell) + offensive_value(ctx, cell) // 2
                candidates.append(MoveCandidate(cell, score))
    if not candidates:
        return None
    ranked = sort_candidates(candidates)
    if len(ranked) >= 3 and ctx.rng.randrange(10) < 3:
        return ranked[ctx.rng.randrange(3)]
    return ranked[0]


def rotation_control_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    def score(c: DecisionContext, cell: int) -> int:
        row, col = cell_coords(cell)
        return strategic_score(c, cell) + 5 * c.board.pieces_in_quadrant(quadrant_of(row, col))

    return _best(ctx, score)


def look_ahead_move(ctx: DecisionContext) -> Optional[MoveCandidate]:
    """One ply: each placement is judged by its best rotation follow-up."""
    own_win = win_state(ctx.player)
    candidates: List[MoveCandidate] = []
    for cell in ctx.empty_cells():
        placed = ctx.after_placement(cell, ctx.player)
        if placed.has_winning_line(ctx.player):
            return MoveCandidate(cell, WIN_SCORE)
        scores: List[int] = []
        for rotation in ALL_ROTATIONS:
            rotated = ctx.after_rotation(rotation, placed)
            state = adjudicate(rotated)
            if state == own_win:
                scores.append(WIN_SCORE)
            elif state == GameState.IN_PROGRESS:
                scores.append(threat_balance(ctx.scan(rotated), ctx.player))
            elif state == GameState.DRAW:
                scores.append(0)
            else:
                scores.append(-WIN_SCORE)
        candidates.append(MoveCandidate(cell, max(scores)))
    if not candidates:
        return None
    return rank_candidates(candidates, ctx.rng, ctx.config.tie_threshold)[0]


STRATEGIES: Dict[AIState, MoveStrategy] = {
    AIState.OFFENSE: offensive_move,
    AIState.DEFENSE: defensive_move,
    AIState.CONTROL_CENTER: center_move,
    AIState.CONTROL_CORNERS: corner_move,
    AIState.BUILD_PATTERN: pattern_move,
    AIState.CONTROL_ROTATION: rotation_control_move,
    AIState.LOOK_AHEAD: look_ahead_move,
}


def select_placement(ctx: DecisionContext, state: AIState) -> MoveCandidate:
    """Run the critical guard, then the strategy for ``state``.

    Raises:
        NoMoveAvailableError: If the board has no empty cell.
    """
    if not ctx.empty_cells():
        raise NoMoveAvailableError("no empty cell to place on")
    critical = critical_move(ctx)
    if critical is not None:
        return critical
    candidate = STRATEGIES[state](ctx)
    if candidate is not None and ctx.board.is_empty(candidate.cell):
        return candidate
    return _ranked(ctx, strategic_score)[0]
