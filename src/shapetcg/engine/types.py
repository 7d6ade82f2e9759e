from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CardType = Literal["creature", "shape", "item"]
Rarity = Literal["common", "uncommon", "rare", "mythic"]
Shape = Literal["circle", "square", "triangle", "star", "diamond"]
Ability = Literal["fast", "big", "fly", "guard", "none"]
ItemEffect = Literal["shield", "heal", "boost", "swap"]

SHAPES: tuple[Shape, ...] = ("circle", "square", "triangle", "star", "diamond")

# A diamond pays for any other shape's cost.
WILDCARD_SHAPE: Shape = "diamond"

TARGETED_EFFECTS: frozenset[ItemEffect] = frozenset({"boost", "swap"})


@dataclass(frozen=True)
class CreatureCard:
    id: str
    name: str
    strength: int
    cost: int
    shape: Shape
    ability: Ability
    rarity: Rarity = "common"
    type: Literal["creature"] = "creature"

    def has(self, ability: Ability) -> bool:
        return self.ability == ability


@dataclass(frozen=True)
class ShapeCard:
    id: str
    name: str
    shape: Shape
    rarity: Rarity = "common"
    type: Literal["shape"] = "shape"


@dataclass(frozen=True)
class ItemCard:
    id: str
    name: str
    effect: ItemEffect
    description: str = ""
    rarity: Rarity = "common"
    type: Literal["item"] = "item"

    @property
    def needs_target(self) -> bool:
        return self.effect in TARGETED_EFFECTS


Card = CreatureCard | ShapeCard | ItemCard


@dataclass(frozen=True)
class CardDatabase:
    """Immutable card catalog used by the engine."""

    cards: dict[str, Card]

    def get(self, card_id: str) -> Card:
        return self.cards[card_id]


@dataclass(frozen=True)
class DeckDefinition:
    id: str
    name: str
    description: str
    card_ids: tuple[str, ...]
