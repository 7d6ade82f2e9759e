"""Combat resolution for a declared attack.

The attacking side is always ``state.current_turn``. Attackers are processed
in declaration order; deaths, taps and heart damage are applied once the
whole pass is done.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace

from .match import can_creature_block, guard_creatures
from .state import CardInstance, CombatEvent, CombatResult, GameConfig, GameState, PlayerState

SHIELD_NAME = "Shield"


def resolve_fight(attacker: CardInstance, blocker: CardInstance, config: GameConfig) -> CombatEvent:
    a_card = attacker.creature
    b_card = blocker.creature
    a_str = attacker.effective_strength
    b_str = blocker.effective_strength

    result: CombatResult
    heart_damage = 0
    if a_str > b_str:
        result = "attacker_wins"
        if a_card.has("big"):
            heart_damage = config.trample_damage
    elif a_str < b_str:
        result = "blocker_wins"
    elif a_card.has("fast"):
        result = "attacker_wins"
    elif b_card.has("fast"):
        result = "blocker_wins"
    else:
        result = "tie"

    return CombatEvent(
        attacker_uid=attacker.uid,
        blocker_uid=blocker.uid,
        attacker_name=a_card.name,
        blocker_name=b_card.name,
        result=result,
        heart_damage=heart_damage,
    )


def _legal_blocker(defender: PlayerState, attacker: CardInstance, blocker_uid: str) -> CardInstance | None:
    blocker = defender.find_on_battlefield(blocker_uid)
    if blocker is None or not blocker.is_creature or blocker.tapped:
        return None
    if not can_creature_block(blocker.creature, attacker.creature):
        return None
    return blocker


def _bury(ps: PlayerState, dead: set[str]) -> PlayerState:
    if not dead:
        return ps
    buried = tuple(c for c in ps.battlefield if c.uid in dead)
    return replace(
        ps,
        battlefield=tuple(c for c in ps.battlefield if c.uid not in dead),
        discard=ps.discard + buried,
    )


def resolve_combat(
    state: GameState,
    attacker_uids: Sequence[str],
    block_assignments: Mapping[str, str],
) -> tuple[GameState, list[CombatEvent]]:
    """Resolve every declared attacker against the defending side.

    Returns the new state and the combat events in resolution order. Unknown,
    tapped or repeated attackers are skipped; an illegal block assignment
    counts as no block.
    """
    if state.game_over:
        return state, []

    cfg = state.config
    attacking_side = state.current_turn
    defending_side = state.defender
    attacker = state.side(attacking_side)
    defender = state.side(defending_side)

    events: list[CombatEvent] = []
    dead_attackers: set[str] = set()
    dead_blockers: set[str] = set()
    attacked: list[str] = []
    used_blockers: set[str] = set()
    shielded = defender.shielded
    heart_damage = 0

    blocks: dict[str, CardInstance] = {}
    for a_uid in attacker_uids:
        a_inst = attacker.find_on_battlefield(a_uid)
        b_uid = block_assignments.get(a_uid)
        if a_inst is None or not a_inst.is_creature or a_inst.tapped or b_uid is None or a_uid in blocks:
            continue
        if b_uid in used_blockers:
            continue
        legal = _legal_blocker(defender, a_inst, b_uid)
        if legal is not None:
            blocks[a_uid] = legal
            used_blockers.add(b_uid)

    guard_pool = guard_creatures(defender.battlefield)

    for a_uid in attacker_uids:
        a_inst = attacker.find_on_battlefield(a_uid)
        if a_inst is None or not a_inst.is_creature or a_inst.tapped or a_uid in attacked:
            continue
        attacked.append(a_uid)

        blocker = blocks.get(a_uid)
        if blocker is None and not a_inst.creature.has("fly"):
            for g in guard_pool:
                if g.uid in used_blockers or g.uid in dead_blockers:
                    continue
                used_blockers.add(g.uid)
                blocker = g
                break

        if blocker is not None:
            event = resolve_fight(a_inst, blocker, cfg)
            if event.result == "attacker_wins":
                dead_blockers.add(blocker.uid)
            elif event.result == "blocker_wins":
                dead_attackers.add(a_uid)
            else:
                dead_attackers.add(a_uid)
                dead_blockers.add(blocker.uid)
        elif shielded:
            shielded = False
            event = CombatEvent(
                attacker_uid=a_uid,
                blocker_uid=None,
                attacker_name=a_inst.creature.name,
                blocker_name=SHIELD_NAME,
                result="blocker_wins",
                heart_damage=0,
            )
        else:
            event = CombatEvent(
                attacker_uid=a_uid,
                blocker_uid=None,
                attacker_name=a_inst.creature.name,
                blocker_name=None,
                result="unblocked",
                heart_damage=cfg.unblocked_damage,
            )
        heart_damage += event.heart_damage
        events.append(event)

    attacker = _bury(attacker, dead_attackers)
    attacker = replace(
        attacker,
        battlefield=tuple(replace(c, tapped=True) if c.uid in attacked else c for c in attacker.battlefield),
    )
    defender = _bury(defender, dead_blockers)
    defender = replace(defender, shielded=shielded, hearts=max(0, defender.hearts - heart_damage))

    new_state = state.with_side(attacking_side, attacker).with_side(defending_side, defender)
    new_state = replace(new_state, combat_log=tuple(events))
    if defender.hearts <= 0:
        new_state = replace(new_state, game_over=True, winner=attacking_side)
    return new_state, events
