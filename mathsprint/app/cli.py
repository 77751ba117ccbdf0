from __future__ import annotations

"""Terminal front end for mathsprint."""

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import __version__
from ..analytics.summary import config_summary, export_ndjson
from ..config.config import initial_configuration, load_config, validate_config
from ..errors import MathSprintError
from ..results.leaderboard import aggregate, config_key, format_leaderboard
from ..stats.scoring import Outcome, format_summary
from ..storage.store import JsonFileBlobStore, RecordStore
from ..util.randomness import make_rng
from .session_machine import RoundSettings, Screen, SessionMachine
from .timers import ThreadingScheduler

logger = logging.getLogger(__name__)

QUIT_WORDS = {"q", "quit", "exit"}


def _open_store(cfg: Dict[str, Any]) -> RecordStore:
    hist = cfg["history"]
    store = RecordStore(JsonFileBlobStore(hist["path"]), key=hist["key"], cap=hist["cap"])
    store.load()
    return store


def _play(machine: SessionMachine, scheduler: ThreadingScheduler) -> int:
    with scheduler.lock:
        machine.start()
    print(f"Round started: {config_key(machine.config)}. Type 'q' to abandon.")
    while True:
        with scheduler.lock:
            if machine.screen is not Screen.PLAYING or machine.problem is None:
                break
            question = machine.problem.question
            left = machine.time_left
        try:
            raw = input(f"[{left:>2}s] {question} = ")
        except (EOFError, KeyboardInterrupt):
            raw = "q"
        with scheduler.lock:
            if machine.screen is not Screen.PLAYING:
                # Time ran out while waiting for input
                break
            if raw.strip().lower() in QUIT_WORDS:
                machine.abandon()
                print("\nRound abandoned; nothing was saved.")
                return 1
            outcome = machine.submit(raw)
        if outcome is Outcome.CORRECT:
            print("Correct!")
        elif outcome is Outcome.INCORRECT:
            print("Incorrect.")
        elif outcome is Outcome.IGNORED:
            print("Please enter a whole number.")
        while True:
            with scheduler.lock:
                if not machine.is_locked or machine.screen is not Screen.PLAYING:
                    break
            time.sleep(0.01)

    print("\nTime's up!")
    summary = machine.summary()
    if summary is not None:
        print(format_summary(summary))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="mathsprint", description="Timed mental arithmetic drill")
    p.add_argument("--version", action="version", version=f"mathsprint {__version__}")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("play", help="Play one timed round")
    pp.add_argument(
        "--toggle",
        action="append",
        default=[],
        metavar="FLAG",
        help="Flip a flag from the configured defaults (add, sub, mul, div, negatives, doubleDigits)",
    )
    pp.add_argument("--seconds", type=int, default=None)
    pp.add_argument("--seed", type=int, default=None)
    pp.add_argument("--explain", action="store_true")

    hp = sub.add_parser("history", help="Show leaderboards per configuration")
    hp.add_argument("--clear", action="store_true", help="Delete all stored games")

    sub.add_parser("stats", help="Summary table per configuration")

    ep = sub.add_parser("export", help="Export game history as NDJSON")
    ep.add_argument("out", type=Path)

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        cfg = validate_config(load_config(args.config))
    except MathSprintError as e:
        logger.error("%s", e)
        return 2
    store = _open_store(cfg)

    if args.cmd == "play":
        if args.explain:
            from .explain import enable as explain_enable
            explain_enable(True)
        if args.seconds is not None:
            cfg["round"]["seconds"] = max(1, int(args.seconds))
        scheduler = ThreadingScheduler()
        machine = SessionMachine(
            store,
            scheduler,
            settings=RoundSettings.from_config(cfg),
            config=initial_configuration(cfg),
            rng=make_rng(args.seed),
        )
        for flag in args.toggle:
            try:
                machine.toggle(flag)
            except ValueError as e:
                logger.error("%s", e)
                return 2
        return _play(machine, scheduler)

    if args.cmd == "history":
        if args.clear:
            store.clear()
            print("History cleared.")
            return 0
        print(format_leaderboard(aggregate(store.list(), cfg["leaderboard"]["top_n"])))
        return 0

    if args.cmd == "stats":
        table = config_summary(store.list())
        if table.empty:
            print("No games played yet.")
        else:
            print(table.to_string(index=False))
        return 0

    if args.cmd == "export":
        export_ndjson(store.list(), args.out)
        print(f"Wrote {len(store.list())} games to {args.out}")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
