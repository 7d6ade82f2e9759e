from __future__ import annotations

import random
from dataclasses import replace
from typing import Sequence

from .resources import can_afford, spend_shapes
from .state import CardInstance, GameConfig, GameState, PlayerState, Side, empty_used_shapes
from .types import CardDatabase, CreatureCard, ItemCard, ShapeCard


def _shuffle(rng: random.Random, items: list[CardInstance]) -> None:
    rng.shuffle(items)


def build_deck_instances(
    cards: CardDatabase, card_ids: Sequence[str], side: Side, rng: random.Random
) -> list[CardInstance]:
    instances: list[CardInstance] = []
    for n, card_id in enumerate(card_ids):
        if card_id not in cards.cards:
            raise ValueError(f"Unknown card id in {side} deck: {card_id}")
        instances.append(CardInstance(uid=f"{side}-{n}-{card_id}", card=cards.get(card_id)))
    _shuffle(rng, instances)
    return instances


def init_game(
    cards: CardDatabase,
    player_deck_ids: Sequence[str],
    ai_deck_ids: Sequence[str],
    rng: random.Random | None = None,
    config: GameConfig | None = None,
) -> GameState:
    """Build the opening state: shuffled decks, starting hands dealt.

    Pass a seeded `rng` to get a reproducible deal.
    """
    cfg = config or GameConfig()
    rng = rng or random.Random()
    p_deck = build_deck_instances(cards, player_deck_ids, "player", rng)
    a_deck = build_deck_instances(cards, ai_deck_ids, "ai", rng)
    hand = cfg.starting_hand

    player = PlayerState(hearts=cfg.starting_hearts, hand=tuple(p_deck[:hand]), deck=tuple(p_deck[hand:]))
    ai = PlayerState(hearts=cfg.starting_hearts, hand=tuple(a_deck[:hand]), deck=tuple(a_deck[hand:]))
    return GameState(player=player, ai=ai, config=cfg, message="Your turn! Draw a card.")


def can_play_creature(creature: CreatureCard, ps: PlayerState) -> bool:
    return can_afford(creature, ps.shape_zone, ps.used_shapes)


def can_creature_block(blocker: CreatureCard, attacker: CreatureCard) -> bool:
    """Only fly creatures can block a fly attacker."""
    if attacker.has("fly") and not blocker.has("fly"):
        return False
    return True


def guard_creatures(battlefield: Sequence[CardInstance]) -> list[CardInstance]:
    return [c for c in battlefield if c.is_creature and c.creature.has("guard") and not c.tapped]


def draw_card(state: GameState, who: Side) -> GameState:
    if state.game_over:
        return state
    ps = state.side(who)
    if not ps.deck:
        return state
    drawn, *rest = ps.deck
    return state.with_side(who, replace(ps, hand=ps.hand + (drawn,), deck=tuple(rest)))


def untap_all(state: GameState, who: Side) -> GameState:
    """Start-of-turn reset: untap, make attack-eligible, drop boosts and spent shapes."""
    if state.game_over:
        return state
    ps = state.side(who)
    battlefield = tuple(
        replace(c, tapped=False, can_attack=True, strength_boost=None) for c in ps.battlefield
    )
    return state.with_side(who, replace(ps, battlefield=battlefield, used_shapes=empty_used_shapes()))


def _without(zone: tuple[CardInstance, ...], uid: str) -> tuple[CardInstance, ...]:
    return tuple(c for c in zone if c.uid != uid)


def play_shape(state: GameState, who: Side, uid: str) -> GameState:
    if state.game_over:
        return state
    ps = state.side(who)
    inst = ps.find_in_hand(uid)
    if inst is None or not isinstance(inst.card, ShapeCard):
        return state
    return state.with_side(
        who, replace(ps, hand=_without(ps.hand, uid), shape_zone=ps.shape_zone + (inst.card,))
    )


def play_creature(state: GameState, who: Side, uid: str) -> GameState:
    if state.game_over:
        return state
    ps = state.side(who)
    inst = ps.find_in_hand(uid)
    if inst is None or not isinstance(inst.card, CreatureCard):
        return state
    creature = inst.card
    if not can_play_creature(creature, ps):
        return state

    played = replace(inst, tapped=False, can_attack=creature.has("fast"))
    return state.with_side(
        who,
        replace(
            ps,
            hand=_without(ps.hand, uid),
            used_shapes=spend_shapes(ps.shape_zone, ps.used_shapes, creature.shape, creature.cost),
            battlefield=ps.battlefield + (played,),
        ),
    )


def play_item(state: GameState, who: Side, uid: str, target_uid: str | None = None) -> GameState:
    """Consume an item from hand and apply its effect.

    Boost and swap need one of the player's own creatures as target; without
    a valid one the call is a no-op and the item stays in hand.
    """
    if state.game_over:
        return state
    ps = state.side(who)
    inst = ps.find_in_hand(uid)
    if inst is None or not isinstance(inst.card, ItemCard):
        return state
    item = inst.card
    target = ps.find_on_battlefield(target_uid) if target_uid is not None else None
    if item.needs_target and target is None:
        return state

    cfg = state.config
    ps = replace(ps, hand=_without(ps.hand, uid), discard=ps.discard + (inst,))

    if item.effect == "shield":
        ps = replace(ps, shielded=True)
    elif item.effect == "heal":
        ps = replace(ps, hearts=min(cfg.max_hearts, ps.hearts + cfg.heal_amount))
    elif item.effect == "boost":
        assert target is not None
        boosted = replace(target, strength_boost=(target.strength_boost or 0) + cfg.boost_amount)
        ps = replace(ps, battlefield=tuple(boosted if c.uid == target.uid else c for c in ps.battlefield))
    elif item.effect == "swap":
        assert target is not None
        returned = replace(target, tapped=False, can_attack=False, strength_boost=None)
        ps = replace(ps, battlefield=_without(ps.battlefield, target.uid), hand=ps.hand + (returned,))

    return state.with_side(who, ps)
