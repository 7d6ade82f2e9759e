from __future__ import annotations

import random
from dataclasses import replace
from typing import Sequence

from shapetcg.engine.actions import Action
from shapetcg.engine.ai import submit_blocks, take_turn
from shapetcg.engine.match import init_game
from shapetcg.engine.serialize import event_to_dict, snapshot
from shapetcg.engine.state import GameConfig, GameState
from shapetcg.engine.turns import HUMAN_SIDE, StepResult, step
from shapetcg.engine.types import CardDatabase
from shapetcg.services.telemetry import TelemetryService


class GameSession:
    """Holds the one live GameState and threads actions through the engine.

    Opponent replies are not triggered automatically: the consumer calls
    `run_ai_turn` when it is ready, which is where any pacing delay belongs.
    """

    def __init__(self, state: GameState, telemetry: TelemetryService | None = None) -> None:
        self._state = state
        self._telemetry = telemetry

    @classmethod
    def start(
        cls,
        cards: CardDatabase,
        player_deck: Sequence[str],
        ai_deck: Sequence[str],
        seed: int | None = None,
        config: GameConfig | None = None,
        telemetry: TelemetryService | None = None,
    ) -> "GameSession":
        rng = random.Random(seed)
        state = init_game(cards, player_deck, ai_deck, rng=rng, config=config)
        session = cls(state, telemetry=telemetry)
        session._log("game_started", {"seed": seed, "player_deck": len(player_deck), "ai_deck": len(ai_deck)})
        return session

    @property
    def state(self) -> GameState:
        return self._state

    def _log(self, event_type: str, payload: dict[str, object]) -> None:
        if self._telemetry is not None:
            self._telemetry.log(event_type, payload)

    def _commit(self, before: GameState, after: GameState) -> None:
        self._state = after
        if after.combat_log and after.combat_log is not before.combat_log:
            self._log(
                "combat",
                {
                    "attacker": before.current_turn,
                    "turn": before.turn_number,
                    "events": [event_to_dict(e) for e in after.combat_log],
                },
            )
        if after.game_over and not before.game_over:
            self._log("game_over", {"winner": after.winner, "turn": after.turn_number})

    def apply(self, action: Action) -> StepResult:
        before = self._state
        res = step(before, action)
        self._log(
            "action",
            {"action": type(action).__name__, "side": action.side, "ok": res.ok, "error": res.error},
        )
        if res.ok:
            self._commit(before, res.state)
        elif res.error:
            # Rejections leave the board untouched; only advisory fields change.
            self._state = replace(res.state, message=res.error)
        return res

    def run_ai_turn(self) -> GameState:
        before = self._state
        if before.game_over or before.current_turn == HUMAN_SIDE or before.phase != "draw":
            return before
        self._commit(before, take_turn(before, before.current_turn))
        return self._state

    def autoplay_turn(self) -> GameState:
        """Play the human's turn with the opponent's own procedure."""
        before = self._state
        if before.game_over or before.current_turn != HUMAN_SIDE or before.phase != "draw":
            return before
        self._commit(before, take_turn(before, HUMAN_SIDE))
        return self._state

    def auto_block(self) -> GameState:
        before = self._state
        if before.phase != "blocking":
            return before
        self._commit(before, submit_blocks(before))
        return self._state

    def snapshot(self) -> dict[str, object]:
        return snapshot(self._state)
