from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from shapetcg.engine.types import (
    Card,
    CardDatabase,
    CreatureCard,
    DeckDefinition,
    ItemCard,
    ShapeCard,
)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def _load_schema(path: Path) -> object:
    return _load_json(path)


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _parse_card(raw: Mapping[str, object]) -> Card:
    ctype = _require_str(raw, "type")
    card_id = _require_str(raw, "id")
    name = _require_str(raw, "name")
    rarity = _require_str(raw, "rarity")
    # schema restricts the literal values below
    if ctype == "creature":
        return CreatureCard(
            id=card_id,
            name=name,
            strength=_require_int(raw, "strength"),
            cost=_require_int(raw, "cost"),
            shape=_require_str(raw, "shape"),  # type: ignore[arg-type]
            ability=_require_str(raw, "ability"),  # type: ignore[arg-type]
            rarity=rarity,  # type: ignore[arg-type]
        )
    if ctype == "shape":
        return ShapeCard(
            id=card_id,
            name=name,
            shape=_require_str(raw, "shape"),  # type: ignore[arg-type]
            rarity=rarity,  # type: ignore[arg-type]
        )
    if ctype == "item":
        return ItemCard(
            id=card_id,
            name=name,
            effect=_require_str(raw, "effect"),  # type: ignore[arg-type]
            description=_require_str(raw, "description"),
            rarity=rarity,  # type: ignore[arg-type]
        )
    raise ContentError(f"Unknown card type: {ctype}")


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_cards_db(self) -> CardDatabase:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_schema(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        cards: dict[str, Card] = {}
        for item in _require_list(raw, "cards"):
            if not isinstance(item, dict):
                continue
            card = _parse_card(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card
        return CardDatabase(cards=cards)

    def load_decks(self, cards: CardDatabase | None = None) -> dict[str, DeckDefinition]:
        """Load the starter decks, checking every card id against `cards` when given."""
        path = self._data_dir / "decks.json"
        raw = _load_json(path)
        schema = _load_schema(self._schema_dir / "decks.schema.json")
        validate_json(raw, schema, context=str(path))

        if not isinstance(raw, dict):
            raise ContentError("decks.json must be an object")
        decks: dict[str, DeckDefinition] = {}
        for d in _require_list(raw, "decks"):
            if not isinstance(d, dict):
                continue
            card_ids: list[str] = []
            for entry in _require_list(d, "cards"):
                if not isinstance(entry, dict):
                    continue
                card_ids.extend([_require_str(entry, "card_id")] * _require_int(entry, "count"))
            deck = DeckDefinition(
                id=_require_str(d, "id"),
                name=_require_str(d, "name"),
                description=_require_str(d, "description"),
                card_ids=tuple(card_ids),
            )
            if cards is not None:
                missing = sorted({cid for cid in deck.card_ids if cid not in cards.cards})
                if missing:
                    raise ContentError(f"Deck {deck.id} references unknown cards: {', '.join(missing)}")
            decks[deck.id] = deck
        return decks

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        cards = self.load_cards_db()
        _ = self.load_decks(cards)
