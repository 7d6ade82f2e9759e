from __future__ import annotations

import random
from dataclasses import replace

import pytest

from shapetcg.engine.actions import (
    AssignBlockAction,
    ChooseItemTargetAction,
    ConfirmBlocksAction,
    ContinueAction,
    DrawAction,
    PlayCreatureAction,
    PlayItemAction,
    PlayShapeAction,
    RemoveBlockAction,
    ResolveBattleAction,
    SelectBlockerAction,
    ToggleAttackerAction,
)
from shapetcg.engine.match import init_game
from shapetcg.engine.state import CardInstance, GameState, PlayerState
from shapetcg.engine.turns import step
from shapetcg.engine.types import CardDatabase
from shapetcg.paths import get_paths
from shapetcg.services.content import ContentService


def _content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


def _load_cards() -> CardDatabase:
    return _content().load_cards_db()


def _inst(cards: CardDatabase, card_id: str, uid: str, **kw: object) -> CardInstance:
    return CardInstance(uid=uid, card=cards.get(card_id), **kw)  # type: ignore[arg-type]


def _state(
    cards: CardDatabase,
    phase: str = "play",
    hand: tuple[CardInstance, ...] = (),
    shapes: tuple[str, ...] = (),
    battlefield: tuple[CardInstance, ...] = (),
    hearts: int = 10,
) -> GameState:
    player = PlayerState(
        hearts=hearts,
        hand=hand,
        shape_zone=tuple(cards.get(s) for s in shapes),  # type: ignore[misc]
        battlefield=battlefield,
    )
    return GameState(player=player, ai=PlayerState(hearts=10), phase=phase)  # type: ignore[arg-type]


def test_init_game_deals_starting_hands() -> None:
    content = _content()
    cards = content.load_cards_db()
    decks = content.load_decks(cards)
    sky = decks["sky-pack"].card_ids
    stomp = decks["stomp-pack"].card_ids

    state = init_game(cards, sky, stomp, rng=random.Random(7))

    assert len(state.player.hand) == 5
    assert len(state.ai.hand) == 5
    assert len(state.player.deck) == len(sky) - 5
    assert len(state.ai.deck) == len(stomp) - 5
    assert state.player.hearts == 10 and state.ai.hearts == 10
    assert state.current_turn == "player"
    assert state.phase == "draw"
    assert state.turn_number == 1

    uids = [c.uid for ps in (state.player, state.ai) for c in ps.hand + ps.deck]
    assert len(uids) == len(set(uids))


def test_init_game_is_reproducible_with_seed() -> None:
    cards = _load_cards()
    deck = ["fly-bug", "big-pig", "fast-ant", "grd-worm", "shape-star", "shape-diamond", "item-heal"] * 3
    a = init_game(cards, deck, deck, rng=random.Random(42))
    b = init_game(cards, deck, deck, rng=random.Random(42))
    assert [c.uid for c in a.player.hand + a.player.deck] == [c.uid for c in b.player.hand + b.player.deck]
    assert [c.uid for c in a.ai.hand + a.ai.deck] == [c.uid for c in b.ai.hand + b.ai.deck]


def test_init_game_rejects_unknown_card_ids() -> None:
    cards = _load_cards()
    with pytest.raises(ValueError):
        init_game(cards, ["no-such-card"], ["fly-bug"])


def test_draw_phase_resets_board_and_advances() -> None:
    cards = _load_cards()
    worn = _inst(cards, "big-yak", "yak", tapped=True, can_attack=False, strength_boost=2)
    state = _state(cards, phase="draw", battlefield=(worn,), shapes=("shape-square",))
    state = replace(
        state,
        player=replace(
            state.player,
            deck=(_inst(cards, "big-pig", "pig"),),
            used_shapes={"circle": 0, "square": 1, "triangle": 0, "star": 0, "diamond": 0},
        ),
    )

    res = step(state, DrawAction(side="player"))
    assert res.ok
    s = res.state
    assert [c.uid for c in s.player.hand] == ["pig"]
    assert s.player.deck == ()
    yak = s.player.battlefield[0]
    assert not yak.tapped and yak.can_attack and yak.strength_boost is None
    assert all(v == 0 for v in s.player.used_shapes.values())
    assert s.phase == "shape"

    again = step(s, DrawAction(side="player"))
    assert not again.ok
    assert again.state is s


def test_draw_from_empty_deck_is_not_an_error() -> None:
    cards = _load_cards()
    state = _state(cards, phase="draw")
    res = step(state, DrawAction(side="player"))
    assert res.ok
    assert res.state.player.hand == ()
    assert res.state.phase == "shape"


def test_any_number_of_shapes_then_explicit_continue() -> None:
    cards = _load_cards()
    hand = (_inst(cards, "shape-circle", "s1"), _inst(cards, "shape-diamond", "s2"))
    state = _state(cards, phase="shape", hand=hand)

    s = step(state, PlayShapeAction(side="player", uid="s1")).state
    s = step(s, PlayShapeAction(side="player", uid="s2")).state
    assert s.phase == "shape"
    assert [c.shape for c in s.player.shape_zone] == ["circle", "diamond"]
    assert s.player.hand == ()

    s = step(s, ContinueAction(side="player")).state
    assert s.phase == "play"


def test_creatures_only_in_play_phase() -> None:
    cards = _load_cards()
    state = _state(cards, phase="shape", hand=(_inst(cards, "grd-cat", "cat"),), shapes=("shape-circle",))
    res = step(state, PlayCreatureAction(side="player", uid="cat"))
    assert not res.ok
    assert res.state is state


def test_unaffordable_creature_is_rejected() -> None:
    cards = _load_cards()
    state = _state(cards, hand=(_inst(cards, "grd-dog", "dog"),), shapes=("shape-circle",))
    res = step(state, PlayCreatureAction(side="player", uid="dog"))
    assert not res.ok
    assert res.error == "Not enough shapes!"
    assert res.state is state


def test_wildcard_pays_remaining_cost() -> None:
    cards = _load_cards()
    state = _state(cards, hand=(_inst(cards, "grd-dog", "dog"),), shapes=("shape-circle", "shape-diamond"))
    res = step(state, PlayCreatureAction(side="player", uid="dog"))
    assert res.ok
    assert res.state.player.used_shapes["circle"] == 1
    assert res.state.player.used_shapes["diamond"] == 1


def test_only_fast_creatures_attack_the_turn_they_enter() -> None:
    cards = _load_cards()
    hand = (_inst(cards, "fast-fox", "fox"), _inst(cards, "grd-cat", "cat"))
    state = _state(cards, hand=hand, shapes=("shape-triangle", "shape-circle"))

    s = step(state, PlayCreatureAction(side="player", uid="fox")).state
    s = step(s, PlayCreatureAction(side="player", uid="cat")).state
    fox = s.player.find_on_battlefield("fox")
    cat = s.player.find_on_battlefield("cat")
    assert fox is not None and fox.can_attack
    assert cat is not None and not cat.can_attack

    s = step(s, ContinueAction(side="player")).state
    assert s.phase == "battle"
    assert not step(s, ToggleAttackerAction(side="player", uid="cat")).ok
    s = step(s, ToggleAttackerAction(side="player", uid="fox")).state
    assert s.selected_attackers == ("fox",)
    s = step(s, ToggleAttackerAction(side="player", uid="fox")).state
    assert s.selected_attackers == ()


def test_shield_and_heal_items() -> None:
    cards = _load_cards()
    hand = (_inst(cards, "item-shield", "shield"), _inst(cards, "item-heal", "heal"))
    state = _state(cards, hand=hand, hearts=7)

    s = step(state, PlayItemAction(side="player", uid="shield")).state
    assert s.player.shielded
    s = step(s, PlayItemAction(side="player", uid="heal")).state
    assert s.player.hearts == 8
    assert s.message == "Healed 1 heart!"
    assert [c.uid for c in s.player.discard] == ["shield", "heal"]

    full = _state(cards, hand=(_inst(cards, "item-heal", "heal"),), hearts=10)
    assert step(full, PlayItemAction(side="player", uid="heal")).state.player.hearts == 10


def test_boost_waits_for_a_target() -> None:
    cards = _load_cards()
    yak = _inst(cards, "big-yak", "yak", can_attack=True)
    state = _state(cards, hand=(_inst(cards, "item-boost", "boost"),), battlefield=(yak,))

    s = step(state, PlayItemAction(side="player", uid="boost")).state
    assert s.pending_item == "boost"
    assert s.player.find_in_hand("boost") is not None

    assert not step(s, ChooseItemTargetAction(side="player", target_uid="nobody")).ok

    s = step(s, ChooseItemTargetAction(side="player", target_uid="yak")).state
    assert s.pending_item is None
    assert s.player.find_in_hand("boost") is None
    boosted = s.player.find_on_battlefield("yak")
    assert boosted is not None and boosted.effective_strength == 6


def test_pending_boost_survives_other_items() -> None:
    cards = _load_cards()
    yak = _inst(cards, "big-yak", "yak", can_attack=True)
    hand = (_inst(cards, "item-boost", "boost"), _inst(cards, "item-shield", "shield"))
    state = _state(cards, hand=hand, battlefield=(yak,))

    s = step(state, PlayItemAction(side="player", uid="boost")).state
    s = step(s, PlayItemAction(side="player", uid="shield")).state
    assert s.player.shielded
    assert s.message == "Shield activated! Blocks 1 damage."
    assert s.pending_item == "boost"

    res = step(s, ChooseItemTargetAction(side="player", target_uid="yak"))
    assert res.ok
    assert res.state.pending_item is None
    assert res.state.message == "Creature boosted +2 power!"
    boosted = res.state.player.find_on_battlefield("yak")
    assert boosted is not None and boosted.effective_strength == 6


def test_swap_returns_creature_to_hand() -> None:
    cards = _load_cards()
    yak = _inst(cards, "big-yak", "yak", tapped=True, can_attack=True, strength_boost=2)
    state = _state(cards, hand=(_inst(cards, "item-swap", "swap"),), battlefield=(yak,))

    s = step(state, PlayItemAction(side="player", uid="swap", target_uid="yak")).state
    assert s.player.battlefield == ()
    back = s.player.find_in_hand("yak")
    assert back is not None
    assert not back.tapped and not back.can_attack and back.strength_boost is None


def test_human_battle_uses_ai_blocks_and_passes_turn() -> None:
    cards = _load_cards()
    state = _state(cards, phase="battle", battlefield=(_inst(cards, "fast-fox", "fox", can_attack=True),))
    state = replace(state, ai=PlayerState(hearts=10, battlefield=(_inst(cards, "grd-dog", "dog"),)))

    s = step(state, ToggleAttackerAction(side="player", uid="fox")).state
    res = step(s, ResolveBattleAction(side="player"))
    assert res.ok
    assert [e.result for e in res.events] == ["blocker_wins"]
    s = res.state
    assert s.ai_block_assignments == {"fox": "dog"}
    assert s.player.battlefield == ()
    assert s.current_turn == "ai"
    assert s.phase == "draw"
    assert s.turn_number == 2


def test_ai_attack_goes_through_blocking_phase() -> None:
    cards = _load_cards()
    ai_side = PlayerState(
        hearts=10,
        battlefield=(
            _inst(cards, "fly-owl", "owl", can_attack=True),
            _inst(cards, "big-yak", "yak", can_attack=True),
        ),
    )
    player_side = PlayerState(
        hearts=10,
        battlefield=(_inst(cards, "grd-dog", "dog"), _inst(cards, "fly-hawk", "hawk")),
    )
    state = GameState(player=player_side, ai=ai_side, current_turn="ai", phase="battle", turn_number=4)

    s = step(state, ToggleAttackerAction(side="ai", uid="owl")).state
    s = step(s, ToggleAttackerAction(side="ai", uid="yak")).state
    s = step(s, ResolveBattleAction(side="ai")).state
    assert s.phase == "blocking"
    assert s.ai_attackers == ("owl", "yak")

    assert not step(s, DrawAction(side="ai")).ok

    s = step(s, SelectBlockerAction(side="player", uid="dog")).state
    res = step(s, AssignBlockAction(side="player", attacker_uid="owl"))
    assert not res.ok
    assert res.error == "Only Fly creatures can block Fly attackers!"
    assert res.state.selected_blocker is None
    assert res.state.player_block_assignments == s.player_block_assignments
    s = step(res.state, SelectBlockerAction(side="player", uid="dog")).state
    s = step(s, AssignBlockAction(side="player", attacker_uid="yak")).state
    s = step(s, SelectBlockerAction(side="player", uid="hawk")).state
    s = step(s, AssignBlockAction(side="player", attacker_uid="owl")).state
    assert s.player_block_assignments == {"yak": "dog", "owl": "hawk"}

    s = step(s, RemoveBlockAction(side="player", attacker_uid="yak")).state
    assert s.player_block_assignments == {"owl": "hawk"}

    res = step(s, ConfirmBlocksAction(side="player"))
    assert res.ok
    # owl loses to hawk; yak is left unblocked and the dog guard intercepts it
    assert [(e.attacker_uid, e.blocker_uid, e.result) for e in res.events] == [
        ("owl", "hawk", "blocker_wins"),
        ("yak", "dog", "tie"),
    ]
    s = res.state
    assert s.player.hearts == 10
    assert s.ai.battlefield == ()
    assert [c.uid for c in s.player.battlefield] == ["hawk"]
    assert s.current_turn == "player"
    assert s.phase == "draw"
    assert s.turn_number == 5


def test_selecting_assigned_blocker_removes_its_block() -> None:
    cards = _load_cards()
    state = GameState(
        player=PlayerState(hearts=10, battlefield=(_inst(cards, "grd-dog", "dog"),)),
        ai=PlayerState(hearts=10, battlefield=(_inst(cards, "big-yak", "yak", can_attack=True),)),
        current_turn="ai",
        phase="blocking",
        ai_attackers=("yak",),
    )
    s = step(state, SelectBlockerAction(side="player", uid="dog")).state
    s = step(s, AssignBlockAction(side="player", attacker_uid="yak")).state
    assert s.player_block_assignments == {"yak": "dog"}
    s = step(s, SelectBlockerAction(side="player", uid="dog")).state
    assert s.player_block_assignments == {}
    assert s.selected_blocker is None


def test_ai_without_attackers_passes_turn_directly() -> None:
    cards = _load_cards()
    state = _state(cards, phase="battle")
    state = replace(state, current_turn="ai", turn_number=2)
    s = step(state, ResolveBattleAction(side="ai")).state
    assert s.current_turn == "player"
    assert s.phase == "draw"
    assert s.turn_number == 3


def test_wrong_side_and_finished_games_are_rejected() -> None:
    cards = _load_cards()
    state = _state(cards, phase="draw")
    res = step(state, DrawAction(side="ai"))
    assert not res.ok
    assert res.error == "Not your turn."
    assert not step(state, ConfirmBlocksAction(side="ai")).ok

    over = replace(state, game_over=True, winner="ai")
    for action in (DrawAction(side="player"), ContinueAction(side="player"), ResolveBattleAction(side="player")):
        res = step(over, action)
        assert not res.ok
        assert res.state is over
