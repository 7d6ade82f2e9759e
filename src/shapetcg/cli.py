from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

from shapetcg.paths import get_paths
from shapetcg.services.content import ContentError, ContentService
from shapetcg.services.telemetry import TelemetryService
from shapetcg.session import GameSession


def _simulate(args: argparse.Namespace, content: ContentService, userdata_dir: Path) -> int:
    cards = content.load_cards_db()
    decks = content.load_decks(cards)
    for deck_id in (args.player_deck, args.ai_deck):
        if deck_id not in decks:
            print(f"Unknown deck: {deck_id} (choose from {', '.join(sorted(decks))})", file=sys.stderr)
            return 2

    telemetry: TelemetryService | None = None
    game_id = uuid.uuid4().hex
    if args.telemetry:
        telemetry = TelemetryService(Path(args.telemetry), game_id=game_id)
    elif args.log:
        telemetry = TelemetryService(userdata_dir / "telemetry.jsonl", game_id=game_id)
    session = GameSession.start(
        cards,
        decks[args.player_deck].card_ids,
        decks[args.ai_deck].card_ids,
        seed=args.seed,
        telemetry=telemetry,
    )

    while not session.state.game_over and session.state.turn_number <= args.turns:
        before = session.state
        if before.current_turn == "player":
            session.autoplay_turn()
        else:
            session.run_ai_turn()
            session.auto_block()
        after = session.state
        if after.combat_log and after.combat_log is not before.combat_log:
            print(f"Turn {before.turn_number} ({before.current_turn} attacks):")
            for ev in after.combat_log:
                vs = ev.blocker_name or "the defender"
                print(f"  {ev.attacker_name} vs {vs}: {ev.result} ({ev.heart_damage} heart damage)")

    st = session.state
    print(f"Hearts: player {st.player.hearts}, ai {st.ai.hearts}")
    print(f"Winner: {st.winner}" if st.game_over else f"No winner after {args.turns} turns.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="shapetcg")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Play an autopiloted game between two starter decks")
    sim.add_argument("--player-deck", default="sky-pack")
    sim.add_argument("--ai-deck", default="stomp-pack")
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--turns", type=int, default=200)
    sim.add_argument("--telemetry", default=None, help="Path of a JSON-lines telemetry file")
    sim.add_argument("--log", action="store_true", help="Write telemetry to userdata/telemetry.jsonl")

    sub.add_parser("validate", help="Validate card and deck content")

    args = parser.parse_args(argv)
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)

    try:
        if args.command == "validate":
            content.validate_all()
            print("Content OK.")
            return 0
        return _simulate(args, content, paths.userdata_dir)
    except ContentError as e:
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
