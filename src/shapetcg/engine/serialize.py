from __future__ import annotations

from dataclasses import asdict

from .state import CardInstance, CombatEvent, GameState, PlayerState


def _instance_to_dict(c: CardInstance) -> dict[str, object]:
    return {
        "uid": c.uid,
        "card_id": c.card.id,
        "tapped": c.tapped,
        "can_attack": c.can_attack,
        "strength_boost": c.strength_boost,
    }


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "hearts": p.hearts,
        "hand": [_instance_to_dict(c) for c in p.hand],
        "battlefield": [_instance_to_dict(c) for c in p.battlefield],
        "shape_zone": [s.id for s in p.shape_zone],
        "used_shapes": dict(p.used_shapes),
        "deck": [c.uid for c in p.deck],
        "discard": [c.uid for c in p.discard],
        "shielded": p.shielded,
    }


def event_to_dict(e: CombatEvent) -> dict[str, object]:
    return asdict(e)


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    return {
        "current_turn": state.current_turn,
        "phase": state.phase,
        "turn_number": state.turn_number,
        "game_over": state.game_over,
        "winner": state.winner,
        "player": _player_to_dict(state.player),
        "ai": _player_to_dict(state.ai),
        "selected_attackers": list(state.selected_attackers),
        "ai_attackers": list(state.ai_attackers),
        "ai_block_assignments": dict(state.ai_block_assignments),
        "player_block_assignments": dict(state.player_block_assignments),
        "selected_blocker": state.selected_blocker,
        "pending_item": state.pending_item,
        "combat_log": [event_to_dict(e) for e in state.combat_log],
        "message": state.message,
    }
