"""Deterministic, headless rules engine for ShapeTCG.

IMPORTANT: This package performs no I/O; every operation maps a GameState to a new one.
"""

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
    init_game,
    play_creature,
    play_item,
    play_shape,
    untap_all,
)
from .state import CardInstance, CombatEvent, GameConfig, GameState, PlayerState
from .turns import StepResult, step
from .types import Ability, CardType, ItemEffect, Rarity, Shape

__all__ = [
    "Ability",
    "Action",
    "AssignBlockAction",
    "CardInstance",
    "CardType",
    "ChooseItemTargetAction",
    "CombatEvent",
    "ConfirmBlocksAction",
    "ContinueAction",
    "DrawAction",
    "GameConfig",
    "GameState",
    "ItemEffect",
    "PlayCreatureAction",
    "PlayItemAction",
    "PlayShapeAction",
    "PlayerState",
    "Rarity",
    "RemoveBlockAction",
    "ResolveBattleAction",
    "SelectBlockerAction",
    "Shape",
    "StepResult",
    "ToggleAttackerAction",
    "can_creature_block",
    "can_play_creature",
    "draw_card",
    "init_game",
    "play_creature",
    "play_item",
    "play_shape",
    "resolve_combat",
    "step",
    "untap_all",
]
