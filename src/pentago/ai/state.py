from __future__ import annotations

from enum import Enum

from pentago.ai.context import DecisionContext
from pentago.eval import count_in_cells
from pentago.eval.tables import CENTER_SQUARES, STRATEGIC_PATTERNS


class AIState(str, Enum):
    OFFENSE = "offense"
    DEFENSE = "defense"
    CONTROL_CENTER = "control_center"
    CONTROL_CORNERS = "control_corners"
    BUILD_PATTERN = "build_pattern"
    CONTROL_ROTATION = "control_rotation"
    LOOK_AHEAD = "look_ahead"


def select_state(ctx: DecisionContext) -> AIState:
    """Pick the strategy for this turn; the first matching rule wins.

    1. Own 4-run with an open end -> OFFENSE.
    2. Opponent 3-run with an open end, or any opponent 4-run -> DEFENSE.
    3. Opening turns -> CONTROL_CENTER while a central cell is free,
       otherwise CONTROL_CORNERS.
    4. A strategic pattern worth building -> BUILD_PATTERN.
    5. Any own 3-run -> OFFENSE.
    6. Late game -> LOOK_AHEAD (difficulty-scaled chance) or CONTROL_ROTATION.
    7. Otherwise a coin flip between CONTROL_CENTER and CONTROL_CORNERS.

    With ``defense_first`` disabled an own double-open 3-run is played for
    ahead of rule 2 unless the opponent already has a 4-run.
    """
    own = ctx.own_threats()
    opp = ctx.opponent_threats()
    cfg = ctx.config

    if any(t.count >= 4 and t.is_open for t in own):
        return AIState.OFFENSE
    if not cfg.defense_first:
        opp_four = any(t.count >= 4 for t in opp)
        if not opp_four and any(t.count >= 3 and t.is_double_open for t in own):
            return AIState.OFFENSE
    if any((t.count >= 3 and t.is_open) or t.count >= 4 for t in opp):
        return AIState.DEFENSE
    if ctx.turn <= cfg.opening_turns:
        if any(ctx.board.is_empty(c) for c in CENTER_SQUARES):
            return AIState.CONTROL_CENTER
        return AIState.CONTROL_CORNERS
    if has_pattern_opportunity(ctx):
        return AIState.BUILD_PATTERN
    if any(t.count >= 3 for t in own):
        return AIState.OFFENSE
    if ctx.turn >= cfg.rotation_control_turn:
        prob = cfg.look_ahead_probability
        if prob > 0 and ctx.rng.random() < prob:
            return AIState.LOOK_AHEAD
        return AIState.CONTROL_ROTATION
    return ctx.rng.choice((AIState.CONTROL_CENTER, AIState.CONTROL_CORNERS))


def has_pattern_opportunity(ctx: DecisionContext) -> bool:
    for pattern in STRATEGIC_PATTERNS.values():
        own, opp, empty = count_in_cells(ctx.board, pattern, ctx.player)
        if own >= 2 and opp <= len(pattern) // 4 and empty > 0:
            return True
    return False
