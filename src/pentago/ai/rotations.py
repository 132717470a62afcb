from __future__ import annotations

from typing import Final, List, Optional, Tuple

from pentago.ai.context import DecisionContext, RotationCandidate
from pentago.engine.board import BitBoard, cell_coords, quadrant_of
from pentago.engine.game import GameState, adjudicate, win_state
from pentago.engine.move import ALL_ROTATIONS, Rotation
from pentago.eval import Threat, count_in_cells, evaluate_pattern, winning_placements
from pentago.eval.tables import CENTER_SQUARES, IMPORTANT_AREAS, STRATEGIC_PATTERNS


WIN_SCORE: Final = 100_000
BLOCK_SCORE: Final = 10_000
FOUR_BUILD_SCORE: Final = 5_000

# Per-threat weights after a rotation (3-run, 4-run)
OWN_THREAT_WEIGHTS: Final = (100, 500)
OPP_THREAT_WEIGHTS: Final = (150, 600)
GAINED_THREAT_BONUS: Final = 80
REMOVED_THREAT_BONUS: Final = 100
OPEN_LINE_WEIGHT: Final = 15
CENTER_DISRUPTION_BONUS: Final = 70
IMPORTANT_AREA_WEIGHT: Final = 25
GIFTED_WIN_PENALTY: Final = 2000

_Outcome = Tuple[Rotation, BitBoard, GameState]


def select_rotation(ctx: DecisionContext) -> RotationCandidate:
    """Pick the rotation for the current board; always returns a rotation.

    Order: an immediately winning rotation, then (when the opponent threatens
    an immediate win) a rotation that takes that win away, then one that
    builds a new open 4-run, then the best strategic rotation. Rotations that hand the opponent the game are never
    chosen unless every rotation does.
    """
    own_win = win_state(ctx.player)
    opp_win = win_state(ctx.opponent)
    outcomes: List[_Outcome] = []
    for rotation in ALL_ROTATIONS:
        rotated = ctx.after_rotation(rotation)
        outcomes.append((rotation, rotated, adjudicate(rotated)))

    for rotation, _, state in outcomes:
        if state == own_win:
            return RotationCandidate(rotation, WIN_SCORE)

    safe = [o for o in outcomes if o[2] != opp_win]
    if not safe:
        return fallback_rotation(ctx)

    if winning_placements(ctx.board, ctx.opponent):
        blocking = blocking_rotation(ctx, safe)
        if blocking is not None:
            return blocking

    building = four_building_rotation(ctx, safe)
    if building is not None:
        return building

    scored = [
        RotationCandidate(rotation, score_rotation(ctx, rotation, rotated))
        for rotation, rotated, _ in safe
    ]
    return max(scored, key=lambda c: c.score)


def blocking_rotation(ctx: DecisionContext, safe: List[_Outcome]) -> Optional[RotationCandidate]:
    """First safe rotation after which the opponent has no winning placement.

    If none removes every winning placement, the safe rotation leaving the
    fewest opponent 4-runs is returned.
    """
    fewest: Optional[Tuple[int, Rotation]] = None
    for rotation, rotated, state in safe:
        if state != GameState.IN_PROGRESS or not winning_placements(rotated, ctx.opponent):
            return RotationCandidate(rotation, BLOCK_SCORE)
        fours = sum(
            1 for t in ctx.scan(rotated) if t.player == ctx.opponent and t.count >= 4
        )
        if fewest is None or fours < fewest[0]:
            fewest = (fours, rotation)
    if fewest is None:
        return None
    return RotationCandidate(fewest[1], -fewest[0])


def _open_fours(threats: List[Threat], player: int) -> int:
    return sum(1 for t in threats if t.player == player and t.count >= 4 and t.is_open)


def four_building_rotation(
    ctx: DecisionContext, safe: List[_Outcome]
) -> Optional[RotationCandidate]:
    """First safe rotation that adds an own open 4-run without gifting a win."""
    before = _open_fours(ctx.threats, ctx.player)
    for rotation, rotated, state in safe:
        if state != GameState.IN_PROGRESS:
            continue
        if _open_fours(ctx.scan(rotated), ctx.player) <= before:
            continue
        if winning_placements(rotated, ctx.opponent):
            continue
        return RotationCandidate(rotation, FOUR_BUILD_SCORE)
    return None


def _strong(threats: List[Threat], player: int) -> int:
    return sum(1 for t in threats if t.player == player and t.count >= 3)


def score_rotation(ctx: DecisionContext, rotation: Rotation, rotated: BitBoard) -> int:
    """Heuristic value of the board after ``rotation`` for the AI."""
    after = ctx.scan(rotated)
    score = 0
    own_open = 0
    opp_open = 0
    for t in after:
        if t.count < 3:
            continue
        four = t.count >= 4
        ends = len(t.open_ends) * (3 if four else 1)
        if t.player == ctx.player:
            score += OWN_THREAT_WEIGHTS[four]
            own_open += ends
        else:
            score -= OPP_THREAT_WEIGHTS[four]
            opp_open += ends

    own_before = _strong(ctx.threats, ctx.player)
    opp_before = _strong(ctx.threats, ctx.opponent)
    own_after = _strong(after, ctx.player)
    opp_after = _strong(after, ctx.opponent)
    if own_after > own_before:
        score += (own_after - own_before) * GAINED_THREAT_BONUS
    if opp_after < opp_before:
        score += (opp_before - opp_after) * REMOVED_THREAT_BONUS

    score += (own_open - opp_open) * OPEN_LINE_WEIGHT

    for pattern in STRATEGIC_PATTERNS.values():
        score += evaluate_pattern(rotated, pattern, ctx.player, own_weight=15, empty_weight=3)

    if disrupts_center(ctx, rotation.quadrant):
        score += CENTER_DISRUPTION_BONUS

    score += important_area_score(ctx, rotated, rotation.quadrant)

    if winning_placements(rotated, ctx.opponent):
        score -= GIFTED_WIN_PENALTY

    score += ctx.rng.randrange(20)
    return score


def disrupts_center(ctx: DecisionContext, quadrant: int) -> bool:
    """Opponent leads the center block and the rotation moves its piece out."""
    own, opp, _ = count_in_cells(ctx.board, CENTER_SQUARES, ctx.player)
    if opp <= own:
        return False
    for cell in CENTER_SQUARES:
        row, col = cell_coords(cell)
        if quadrant_of(row, col) == quadrant:
            return ctx.board.piece_at(row, col) == ctx.opponent
    return False


def important_area_score(ctx: DecisionContext, rotated: BitBoard, quadrant: int) -> int:
    score = 0
    for cell in IMPORTANT_AREAS:
        row, col = cell_coords(cell)
        if quadrant_of(row, col) != quadrant:
            continue
        piece = rotated.piece_at(row, col)
        if piece == ctx.player:
            score += IMPORTANT_AREA_WEIGHT
        elif piece == ctx.opponent:
            score -= IMPORTANT_AREA_WEIGHT
    return score


def fallback_rotation(ctx: DecisionContext) -> RotationCandidate:
    """Weighted random rotation, favoring quadrants the opponent dominates."""
    weights = []
    for q in range(4):
        own = ctx.board.pieces_in_quadrant(q, ctx.player)
        opp = ctx.board.pieces_in_quadrant(q, ctx.opponent)
        weights.append(1 + max(0, opp - own))
    quadrant = ctx.rng.choices(range(4), weights=weights)[0]
    clockwise = ctx.rng.random() < 0.5
    return RotationCandidate(Rotation(quadrant, clockwise), 0)
