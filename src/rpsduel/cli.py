from __future__ import annotations

import argparse
import asyncio
import logging
import random
import time
from pathlib import Path

from rpsduel.engine import (
    AdvanceAction,
    InvalidComposition,
    MatchState,
    PlayCardAction,
    RestartAction,
    new_match,
    step,
)
from rpsduel.engine.serialize import snapshot
from rpsduel.engine.types import COMPOSITION_KEYS
from rpsduel.logging_utils import setup_logging
from rpsduel.paths import get_paths
from rpsduel.relay.server import serve
from rpsduel.services.settings import SettingsError, SettingsService, apply_overrides, validate

log = logging.getLogger("rpsduel.cli")


def _render(state: MatchState) -> str:
    snap = snapshot(state)
    me = snap["self"]
    opp = snap["opponent"]
    assert isinstance(me, dict) and isinstance(opp, dict)
    opp_hand = " ".join(c or "??" for c in opp["hand"])  # type: ignore[union-attr]
    lines = [
        f"Opponent ({opp['hand_size']} in hand, {opp['deck_count']} in deck): {opp_hand}",
        f"Score: you {me['score']} - {opp['score']} opponent",
        f"Your deck: {me['deck_count']} cards",
        "Your hand: " + "  ".join(f"[{i}] {c}" for i, c in enumerate(me["hand"])),  # type: ignore[arg-type]
    ]
    return "\n".join(lines)


def _final_text(state: MatchState) -> str:
    if state.draw:
        return "Game over: it's a draw!"
    return "Game over: you win!" if state.winner == 0 else "Game over: the bot wins!"


OVERRIDE_KEYS = ("handSize", "openHand") + tuple(key for key, _kind in COMPOSITION_KEYS)


def _override(raw: str) -> tuple[str, str]:
    """argparse type for `--set key=value`."""
    key, sep, value = raw.partition("=")
    if not sep or key not in OVERRIDE_KEYS:
        raise argparse.ArgumentTypeError("expected key=value with key in " + ", ".join(OVERRIDE_KEYS))
    return key, value


def play_bot(
    settings_path: Path | None,
    seed: int | None,
    overrides: list[tuple[str, str]] | None = None,
) -> int:
    paths = get_paths()
    service = SettingsService(settings_path or paths.settings_file, paths.data_dir, paths.schema_dir)
    try:
        settings = apply_overrides(service.load(), dict(overrides or []))
        validate(settings)
    except (SettingsError, InvalidComposition) as e:
        print(f"Error: {e} Please configure settings.")
        return 1

    state = new_match(settings.to_match_config("bot"), seed if seed is not None else random.randrange(2**31))
    while True:
        print(_render(state))
        if state.is_over:
            print(_final_text(state))
            answer = input("Play again? [y/N] ").strip().lower()
            if answer != "y":
                return 0
            step(state, RestartAction())
            continue
        raw = input("Pick a card index (q to quit): ").strip()
        if raw == "q":
            return 0
        try:
            index = int(raw)
        except ValueError:
            continue
        hand = state.players[0].hand
        if not 0 <= index < len(hand) or hand[index] is None:
            continue
        result = step(state, PlayCardAction(hand_index=index, kind=hand[index]))  # type: ignore[arg-type]
        if not result.ok:
            print(result.error)
            continue
        if state.last_round is not None:
            r = state.last_round
            print(f"You played {r.self_card}, bot played {r.opponent_card}: {r.text}")
        time.sleep(state.config.reveal_seconds)
        step(state, AdvanceAction())


def main() -> int:
    parser = argparse.ArgumentParser(prog="rpsduel")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="run the PvP room relay")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=8765)

    p_bot = sub.add_parser("bot", help="play against the bot in the terminal")
    p_bot.add_argument("--settings", type=Path, default=None)
    p_bot.add_argument("--seed", type=int, default=None)
    p_bot.add_argument("--set", dest="overrides", type=_override, action="append", default=[], metavar="KEY=VALUE")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.command == "serve":
        try:
            asyncio.run(serve(args.host, args.port))
        except KeyboardInterrupt:
            log.info("Shutting down...")
        return 0
    return play_bot(args.settings, args.seed, args.overrides)


if __name__ == "__main__":
    raise SystemExit(main())
