from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal

from .types import SHAPES, Card, CreatureCard, Shape, ShapeCard

Side = Literal["player", "ai"]
Phase = Literal["draw", "shape", "play", "battle", "blocking"]
CombatResult = Literal["attacker_wins", "blocker_wins", "tie", "unblocked"]


def opponent(side: Side) -> Side:
    return "ai" if side == "player" else "player"


def empty_used_shapes() -> dict[Shape, int]:
    return {s: 0 for s in SHAPES}


@dataclass(frozen=True)
class GameConfig:
    starting_hearts: int = 10
    max_hearts: int = 10
    starting_hand: int = 5
    unblocked_damage: int = 1
    trample_damage: int = 1
    heal_amount: int = 1
    boost_amount: int = 2


@dataclass(frozen=True)
class CardInstance:
    uid: str
    card: Card
    tapped: bool = False
    can_attack: bool = False
    strength_boost: int | None = None

    @property
    def is_creature(self) -> bool:
        return isinstance(self.card, CreatureCard)

    @property
    def creature(self) -> CreatureCard:
        assert isinstance(self.card, CreatureCard)
        return self.card

    @property
    def effective_strength(self) -> int:
        if not isinstance(self.card, CreatureCard):
            return 0
        return self.card.strength + (self.strength_boost or 0)


@dataclass(frozen=True)
class PlayerState:
    hearts: int
    hand: tuple[CardInstance, ...] = ()
    battlefield: tuple[CardInstance, ...] = ()
    shape_zone: tuple[ShapeCard, ...] = ()
    used_shapes: dict[Shape, int] = field(default_factory=empty_used_shapes)
    deck: tuple[CardInstance, ...] = ()
    discard: tuple[CardInstance, ...] = ()
    shielded: bool = False

    def find_in_hand(self, uid: str) -> CardInstance | None:
        for inst in self.hand:
            if inst.uid == uid:
                return inst
        return None

    def find_on_battlefield(self, uid: str) -> CardInstance | None:
        for inst in self.battlefield:
            if inst.uid == uid:
                return inst
        return None


@dataclass(frozen=True)
class CombatEvent:
    attacker_uid: str
    blocker_uid: str | None
    attacker_name: str
    blocker_name: str | None
    result: CombatResult
    heart_damage: int


@dataclass(frozen=True)
class GameState:
    player: PlayerState
    ai: PlayerState
    config: GameConfig = field(default_factory=GameConfig)
    current_turn: Side = "player"
    phase: Phase = "draw"
    turn_number: int = 1
    game_over: bool = False
    winner: Side | None = None
    selected_attackers: tuple[str, ...] = ()
    ai_attackers: tuple[str, ...] = ()
    ai_block_assignments: dict[str, str] = field(default_factory=dict)
    player_block_assignments: dict[str, str] = field(default_factory=dict)
    selected_blocker: str | None = None
    pending_item: str | None = None
    combat_log: tuple[CombatEvent, ...] = ()
    message: str = ""

    def side(self, who: Side) -> PlayerState:
        return self.player if who == "player" else self.ai

    def with_side(self, who: Side, ps: PlayerState) -> GameState:
        if who == "player":
            return replace(self, player=ps)
        return replace(self, ai=ps)

    @property
    def defender(self) -> Side:
        return opponent(self.current_turn)
