"""
Guessword CLI - Command-line interface for the game.

Usage:
    guessword words                            List the vocabulary
    guessword simulate --actions ccsc          Play a scripted round on a virtual clock
    guessword play                             Play a round in the terminal
    guessword serve                            Run the API server
"""

import argparse
import asyncio
import sys
from collections import Counter

from pydantic import ValidationError

from .config import LOG_LEVEL, RoundConfig
from .logging_config import setup_logging
from .session import Haptics


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Guessword - Word-guessing party game",
        prog="guessword",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help="DEBUG, INFO, WARNING, ERROR")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Words command
    subparsers.add_parser("words", help="List the vocabulary")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a scripted round")
    simulate_parser.add_argument(
        "--actions", default="",
        help="One letter per word: c = correct, s = skip (e.g. ccsc)",
    )
    simulate_parser.add_argument("--seed", type=int, default=None, help="Word shuffle seed")
    simulate_parser.add_argument("--countdown", type=int, default=None, help="Round length in seconds")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a round in the terminal")
    play_parser.add_argument("--countdown", type=int, default=None, help="Round length in seconds")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "words":
        cmd_words(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _round_config(args) -> RoundConfig:
    try:
        config = RoundConfig.from_env()
        if args.countdown is not None:
            config = RoundConfig(
                countdown_seconds=args.countdown,
                tick_seconds=config.tick_seconds,
                panic_seconds=max(0, min(config.panic_seconds, args.countdown)),
            )
    except ValidationError as e:
        problems = "; ".join(err["msg"] for err in e.errors())
        print(f"Error: invalid round configuration: {problems}")
        sys.exit(1)
    return config


def cmd_words(args):
    """List the vocabulary."""
    from .engine_core.vocabulary import WORDS

    for word in WORDS:
        print(word)
    print(f"\n{len(WORDS)} words")


def cmd_simulate(args):
    """Play a scripted round on a virtual clock."""
    from .engine_core.timer import ManualScheduler
    from .engine_core.round_engine import RoundEngine
    from .session import GameLoop, RecordingHaptics
    import random

    actions = args.actions.lower()
    unknown = set(actions) - {"c", "s"}
    if unknown:
        print(f"Error: unknown actions: {''.join(sorted(unknown))} (use c or s)")
        sys.exit(1)

    config = _round_config(args)
    scheduler = ManualScheduler()
    engine = RoundEngine(scheduler, config=config, rng=random.Random(args.seed))
    haptics = RecordingHaptics()
    loop = GameLoop(engine, haptics=haptics)

    loop.begin()
    print(f"Round started: {engine.remaining_text.value}, first word: {engine.word.value}")

    for action in actions:
        if action == "c":
            loop.correct()
            label = "correct"
        else:
            loop.skip()
            label = "skip"
        print(f"  {label:<7} -> score {engine.score.value}, next word: {engine.word.value}")

    scheduler.advance(config.countdown_seconds)
    loop.close()

    print(f"Time's up! Final score: {loop.result.final_score}")
    counts = Counter(buzz.value for buzz in haptics.drain())
    summary = ", ".join(f"{name} x{count}" for name, count in sorted(counts.items()))
    print(f"Buzzes: {summary}")


class TerminalHaptics(Haptics):
    """Prints buzzes and rings the terminal bell."""

    def vibrate(self, buzz):
        print(f"\a  *bzz* ({buzz.value})")


def cmd_play(args):
    """Play a round in the terminal."""
    config = _round_config(args)
    print(f"Guess the word! {config.countdown_seconds} seconds.")
    print("Type c + Enter for correct, s + Enter to skip, q + Enter to quit.\n")
    try:
        asyncio.run(_play(config))
    except KeyboardInterrupt:
        print("\nBye!")


async def _play(config: RoundConfig):
    from .engine_core.timer import AsyncioScheduler
    from .engine_core.round_engine import RoundEngine
    from .session import GameLoop, LoopState

    engine = RoundEngine(AsyncioScheduler(), config=config)
    loop = GameLoop(engine, haptics=TerminalHaptics())
    round_over = asyncio.Event()
    engine.round_over.observe(lambda ticket: round_over.set() if ticket.value else None)

    aio_loop = asyncio.get_running_loop()
    loop.begin()
    try:
        while True:
            print(f"[{engine.remaining_text.value}] score {engine.score.value} | word: {engine.word.value}")
            read = aio_loop.run_in_executor(None, sys.stdin.readline)
            finished = asyncio.ensure_future(round_over.wait())
            await asyncio.wait({read, finished}, return_when=asyncio.FIRST_COMPLETED)

            if loop.state is LoopState.SCORE:
                print(f"\nTime's up! Final score: {loop.result.final_score}")
                print("Press Enter to exit.")
                await read
                break
            finished.cancel()

            line = read.result()
            command = line.strip().lower()
            if not line or command == "q":
                break
            if command == "c":
                loop.correct()
            elif command == "s":
                loop.skip()
            else:
                print("Use c, s or q.")
    finally:
        loop.close()


def cmd_serve(args):
    """Run the API server."""
    import uvicorn

    uvicorn.run("guessword.api.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
