from __future__ import annotations

from collections.abc import Sequence

from .actions import (
    AssignBlockAction,
    ConfirmBlocksAction,
    ContinueAction,
    DrawAction,
    PlayCreatureAction,
    PlayShapeAction,
    ResolveBattleAction,
    SelectBlockerAction,
    ToggleAttackerAction,
)
from .match import can_creature_block, can_play_creature
from .state import GameState, Side
from .turns import step
from .types import CreatureCard, ShapeCard


def compute_blocks(state: GameState, attacker_uids: Sequence[str]) -> dict[str, str]:
    """Pick blocks for the defending side of `state`.

    For each attacker in order, the first unused, untapped, fly-legal creature
    that beats it outright (or ties it while being fast) is committed. Blocks
    that would only trade the blocker away are never made.
    """
    attacking = state.side(state.current_turn)
    defending = state.side(state.defender)
    blockers = [c for c in defending.battlefield if c.is_creature and not c.tapped]

    blocks: dict[str, str] = {}
    used: set[str] = set()
    for a_uid in attacker_uids:
        attacker = attacking.find_on_battlefield(a_uid)
        if attacker is None or not attacker.is_creature:
            continue
        a_str = attacker.effective_strength
        for b in blockers:
            if b.uid in used or not can_creature_block(b.creature, attacker.creature):
                continue
            b_str = b.effective_strength
            if b_str > a_str or (b_str == a_str and b.creature.has("fast")):
                blocks[a_uid] = b.uid
                used.add(b.uid)
                break
    return blocks


def take_turn(state: GameState, side: Side = "ai") -> GameState:
    """Play `side`'s turn from its draw phase up to declaring attackers.

    Uses only `step`, so every move is one a human could make. The returned
    state is either in the defender's blocking phase or already the other
    side's turn.
    """
    res = step(state, DrawAction(side=side))
    if not res.ok:
        return state
    s = res.state
    if s.game_over:
        return s

    for inst in s.side(side).hand:
        if isinstance(inst.card, ShapeCard):
            s = step(s, PlayShapeAction(side=side, uid=inst.uid)).state
            break
    s = step(s, ContinueAction(side=side)).state

    creatures = [c for c in s.side(side).hand if isinstance(c.card, CreatureCard)]
    creatures = sorted(creatures, key=lambda c: c.creature.cost, reverse=True)
    for inst in creatures:
        if can_play_creature(inst.creature, s.side(side)):
            s = step(s, PlayCreatureAction(side=side, uid=inst.uid)).state
    s = step(s, ContinueAction(side=side)).state

    for c in s.side(side).battlefield:
        if c.can_attack and not c.tapped:
            s = step(s, ToggleAttackerAction(side=side, uid=c.uid)).state

    return step(s, ResolveBattleAction(side=side)).state


def submit_blocks(state: GameState) -> GameState:
    """Block for the defender with `compute_blocks`, then confirm."""
    if state.phase != "blocking":
        return state
    side = state.defender
    s = state
    for a_uid, b_uid in compute_blocks(state, state.ai_attackers).items():
        s = step(s, SelectBlockerAction(side=side, uid=b_uid)).state
        s = step(s, AssignBlockAction(side=side, attacker_uid=a_uid)).state
    return step(s, ConfirmBlocksAction(side=side)).state
