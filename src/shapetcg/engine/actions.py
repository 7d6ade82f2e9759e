from __future__ import annotations

from dataclasses import dataclass

from .state import Side


@dataclass(frozen=True)
class DrawAction:
    side: Side


@dataclass(frozen=True)
class PlayShapeAction:
    side: Side
    uid: str


@dataclass(frozen=True)
class PlayCreatureAction:
    side: Side
    uid: str


@dataclass(frozen=True)
class PlayItemAction:
    side: Side
    uid: str
    target_uid: str | None = None


@dataclass(frozen=True)
class ChooseItemTargetAction:
    side: Side
    target_uid: str


@dataclass(frozen=True)
class ContinueAction:
    """Move from shape to play, or from play to battle."""

    side: Side


@dataclass(frozen=True)
class ToggleAttackerAction:
    side: Side
    uid: str


@dataclass(frozen=True)
class ResolveBattleAction:
    side: Side


@dataclass(frozen=True)
class SelectBlockerAction:
    side: Side
    uid: str


@dataclass(frozen=True)
class AssignBlockAction:
    side: Side
    attacker_uid: str


@dataclass(frozen=True)
class RemoveBlockAction:
    side: Side
    attacker_uid: str


@dataclass(frozen=True)
class ConfirmBlocksAction:
    side: Side


Action = (
    DrawAction
    | PlayShapeAction
    | PlayCreatureAction
    | PlayItemAction
    | ChooseItemTargetAction
    | ContinueAction
    | ToggleAttackerAction
    | ResolveBattleAction
    | SelectBlockerAction
    | AssignBlockAction
    | RemoveBlockAction
    | ConfirmBlocksAction
)
