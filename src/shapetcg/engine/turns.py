"""Phase sequencing for the active player and the defender's blocking step.

Every transition goes through `step`, which checks legality first and returns
the unchanged board with an error message when the action is not allowed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .actions import (
    Action,
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
from .combat import resolve_combat
from .match import (
    can_creature_block,
    can_play_creature,
    draw_card,
    play_creature,
    play_item,
    play_shape,
    untap_all,
)
from .state import CombatEvent, GameState, Side, opponent
from .types import CreatureCard, ItemCard, ShapeCard

# The side whose blocks come from a person rather than the opponent policy.
HUMAN_SIDE: Side = "player"

PHASE_MESSAGES: dict[str, str] = {
    "draw": "Draw a card!",
    "shape": "Play a shape card!",
    "play": "Play your creatures!",
    "battle": "Choose attackers!",
    "blocking": "AI is attacking! Pick a creature, then an attacker to block it!",
}

ITEM_MESSAGES: dict[str, str] = {
    "shield": "Shield activated! Blocks 1 damage.",
    "heal": "Healed 1 heart!",
    "boost": "Creature boosted +2 power!",
    "swap": "Creature returned to hand!",
}


@dataclass
class StepResult:
    state: GameState
    ok: bool
    events: list[CombatEvent] = field(default_factory=list)
    error: str | None = None


def _reject(state: GameState, msg: str) -> StepResult:
    return StepResult(state=state, ok=False, error=msg)


def _reject_with(state: GameState, msg: str, **changes: object) -> StepResult:
    # A rejection that still resets UI selection fields; the board is untouched.
    return StepResult(state=replace(state, message=msg, **changes), ok=False, error=msg)  # type: ignore[arg-type]


def _accept(state: GameState, events: list[CombatEvent] | None = None) -> StepResult:
    return StepResult(state=state, ok=True, events=events or [])


def pass_turn(state: GameState) -> GameState:
    """Hand the turn to the other side, starting at its draw phase."""
    if state.game_over:
        return state
    nxt = opponent(state.current_turn)
    return replace(
        state,
        current_turn=nxt,
        phase="draw",
        turn_number=state.turn_number + 1,
        selected_attackers=(),
        ai_attackers=(),
        player_block_assignments={},
        selected_blocker=None,
        pending_item=None,
        message="Your turn! Draw a card." if nxt == HUMAN_SIDE else "AI is thinking...",
    )


def _finish_combat(state: GameState) -> GameState:
    if state.game_over:
        msg = "You win! Great job!" if state.winner == HUMAN_SIDE else "Good try! Play again?"
        return replace(state, message=msg)
    return pass_turn(state)


def _draw(state: GameState, action: DrawAction) -> StepResult:
    if state.phase != "draw":
        return _reject(state, "You already drew this turn.")
    s = draw_card(state, action.side)
    s = untap_all(s, action.side)
    return _accept(replace(s, phase="shape", message=PHASE_MESSAGES["shape"]))


def _continue(state: GameState, action: ContinueAction) -> StepResult:
    if state.phase == "shape":
        return _accept(replace(state, phase="play", message=PHASE_MESSAGES["play"]))
    if state.phase == "play":
        return _accept(replace(state, phase="battle", pending_item=None, message=PHASE_MESSAGES["battle"]))
    return _reject(state, "Nothing to continue to.")


def _play_shape(state: GameState, action: PlayShapeAction) -> StepResult:
    if state.phase != "shape":
        return _reject(state, "Shapes are played in the shape phase.")
    inst = state.side(action.side).find_in_hand(action.uid)
    if inst is None or not isinstance(inst.card, ShapeCard):
        return _reject(state, "That is not a shape card in your hand.")
    return _accept(play_shape(state, action.side, action.uid))


def _play_creature(state: GameState, action: PlayCreatureAction) -> StepResult:
    if state.phase != "play":
        return _reject(state, "Creatures are played in the play phase.")
    ps = state.side(action.side)
    inst = ps.find_in_hand(action.uid)
    if inst is None or not isinstance(inst.card, CreatureCard):
        return _reject(state, "That is not a creature in your hand.")
    if not can_play_creature(inst.card, ps):
        return _reject(state, "Not enough shapes!")
    s = play_creature(state, action.side, action.uid)
    return _accept(replace(s, message="Play more creatures or go to battle!"))


def _apply_item(state: GameState, side: Side, uid: str, target_uid: str | None) -> StepResult:
    s = play_item(state, side, uid, target_uid)
    if s is state:
        return _reject(state, "Select a creature on your field first!")
    inst = state.side(side).find_in_hand(uid)
    effect = inst.card.effect if inst is not None and isinstance(inst.card, ItemCard) else ""
    pending = None if uid == state.pending_item else state.pending_item
    return _accept(replace(s, pending_item=pending, message=ITEM_MESSAGES.get(effect, "Item played!")))


def _play_item(state: GameState, action: PlayItemAction) -> StepResult:
    if state.phase != "play":
        return _reject(state, "Items are played in the play phase.")
    inst = state.side(action.side).find_in_hand(action.uid)
    if inst is None or not isinstance(inst.card, ItemCard):
        return _reject(state, "That is not an item in your hand.")
    if inst.card.needs_target and action.target_uid is None:
        return _accept(replace(state, pending_item=action.uid, message="Select a creature on your field first!"))
    return _apply_item(state, action.side, action.uid, action.target_uid)


def _choose_item_target(state: GameState, action: ChooseItemTargetAction) -> StepResult:
    if state.phase != "play" or state.pending_item is None:
        return _reject(state, "No item is waiting for a target.")
    return _apply_item(state, action.side, state.pending_item, action.target_uid)


def _toggle_attacker(state: GameState, action: ToggleAttackerAction) -> StepResult:
    if state.phase != "battle":
        return _reject(state, "Attackers are chosen in the battle phase.")
    inst = state.side(action.side).find_on_battlefield(action.uid)
    if inst is None or not inst.can_attack or inst.tapped:
        return _reject(state, "That creature can't attack right now.")
    if action.uid in state.selected_attackers:
        selected = tuple(u for u in state.selected_attackers if u != action.uid)
    else:
        selected = state.selected_attackers + (action.uid,)
    return _accept(replace(state, selected_attackers=selected))


def _resolve_battle(state: GameState, action: ResolveBattleAction) -> StepResult:
    if state.phase != "battle":
        return _reject(state, "Not in the battle phase.")
    attackers = state.selected_attackers

    if state.defender == HUMAN_SIDE:
        if not attackers:
            return _accept(pass_turn(state))
        return _accept(
            replace(
                state,
                phase="blocking",
                ai_attackers=attackers,
                selected_attackers=(),
                player_block_assignments={},
                selected_blocker=None,
                message=PHASE_MESSAGES["blocking"],
            )
        )

    from .ai import compute_blocks

    blocks = compute_blocks(state, attackers)
    s, events = resolve_combat(state, attackers, blocks)
    s = replace(s, selected_attackers=(), ai_block_assignments=blocks)
    return _accept(_finish_combat(s), events)


def _select_blocker(state: GameState, action: SelectBlockerAction) -> StepResult:
    inst = state.side(action.side).find_on_battlefield(action.uid)
    if inst is None or not inst.is_creature or inst.tapped:
        return _reject(state, "That creature can't block.")

    for a_uid, b_uid in state.player_block_assignments.items():
        if b_uid == action.uid:
            updated = {k: v for k, v in state.player_block_assignments.items() if k != a_uid}
            return _accept(
                replace(
                    state,
                    player_block_assignments=updated,
                    selected_blocker=None,
                    message="Block removed! Pick another creature to block, or confirm.",
                )
            )

    if state.selected_blocker == action.uid:
        return _accept(replace(state, selected_blocker=None, message="Deselected. Pick a creature to block with."))
    return _accept(replace(state, selected_blocker=action.uid, message="Now pick an attacker to block!"))


def _assign_block(state: GameState, action: AssignBlockAction) -> StepResult:
    if state.selected_blocker is None:
        return _reject(state, "Pick one of your creatures first.")
    if action.attacker_uid not in state.ai_attackers:
        return _reject(state, "That creature isn't attacking.")
    blocker = state.side(action.side).find_on_battlefield(state.selected_blocker)
    attacker = state.side(state.current_turn).find_on_battlefield(action.attacker_uid)
    if blocker is None or attacker is None or not blocker.is_creature or not attacker.is_creature:
        return _reject(state, "That block isn't possible.")
    if not can_creature_block(blocker.creature, attacker.creature):
        return _reject_with(state, "Only Fly creatures can block Fly attackers!", selected_blocker=None)

    updated = dict(state.player_block_assignments)
    updated[action.attacker_uid] = blocker.uid
    return _accept(
        replace(
            state,
            player_block_assignments=updated,
            selected_blocker=None,
            message="Blocked! Pick more creatures to block, or confirm.",
        )
    )


def _remove_block(state: GameState, action: RemoveBlockAction) -> StepResult:
    if action.attacker_uid not in state.player_block_assignments:
        return _reject(state, "That attacker isn't blocked.")
    updated = {k: v for k, v in state.player_block_assignments.items() if k != action.attacker_uid}
    return _accept(replace(state, player_block_assignments=updated))


def _confirm_blocks(state: GameState, action: ConfirmBlocksAction) -> StepResult:
    s, events = resolve_combat(state, state.ai_attackers, state.player_block_assignments)
    return _accept(_finish_combat(s), events)


def _is_blocking_action(action: Action) -> bool:
    return isinstance(
        action, (SelectBlockerAction, AssignBlockAction, RemoveBlockAction, ConfirmBlocksAction)
    )


def step(state: GameState, action: Action) -> StepResult:
    """Apply a single action, returning the next state.

    Illegal actions never raise: the result carries the unchanged state,
    ``ok=False`` and an advisory message.
    """
    if state.game_over:
        return _reject(state, "Game is already over.")

    if _is_blocking_action(action):
        if state.phase != "blocking":
            return _reject(state, "Not in the blocking phase.")
        if action.side != state.defender:
            return _reject(state, "Only the defending player can block.")
    else:
        if action.side != state.current_turn:
            return _reject(state, "Not your turn.")
        if state.phase == "blocking":
            return _reject(state, "Waiting for blocks.")

    if isinstance(action, DrawAction):
        return _draw(state, action)
    if isinstance(action, ContinueAction):
        return _continue(state, action)
    if isinstance(action, PlayShapeAction):
        return _play_shape(state, action)
    if isinstance(action, PlayCreatureAction):
        return _play_creature(state, action)
    if isinstance(action, PlayItemAction):
        return _play_item(state, action)
    if isinstance(action, ChooseItemTargetAction):
        return _choose_item_target(state, action)
    if isinstance(action, ToggleAttackerAction):
        return _toggle_attacker(state, action)
    if isinstance(action, ResolveBattleAction):
        return _resolve_battle(state, action)
    if isinstance(action, SelectBlockerAction):
        return _select_blocker(state, action)
    if isinstance(action, AssignBlockAction):
        return _assign_block(state, action)
    if isinstance(action, RemoveBlockAction):
        return _remove_block(state, action)
    if isinstance(action, ConfirmBlocksAction):
        return _confirm_blocks(state, action)
    return _reject(state, "Unknown action.")
