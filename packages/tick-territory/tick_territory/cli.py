"""tick-territory: watch domains fight over a terminal grid.

Run a random setup, a scenario file, or one built interactively:

  tick-territory --width 60 --height 24 --domains 6 --seed 7
  tick-territory --scenario maps/arena.txt --tps 10
  tick-territory --wizard --save-scenario maps/mine.txt

In ``--step`` mode the simulation waits for Enter before every tick;
typing ``x`` quits. Otherwise Ctrl-C stops the run.
"""
from __future__ import annotations

import argparse
import os
import random
import sys
from typing import Sequence

import structlog
from rich.console import Console

from tick_territory.engine import Engine, StopReason
from tick_territory.log import configure_logging
from tick_territory.render import TerminalRenderer
from tick_territory.scenario import (
    MIN_SIDE,
    Scenario,
    load_scenario,
    random_scenario,
    run_wizard,
    save_scenario,
)
from tick_territory.signals import Signal
from tick_territory.types import ScenarioError
from tick_territory.world import World

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_SCENARIO = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tick-territory",
        description="Terminal territorial spreading simulation",
    )
    source = p.add_mutually_exclusive_group()
    source.add_argument("--scenario", metavar="FILE", help="Load a scenario file")
    source.add_argument("--wizard", action="store_true", help="Build a scenario interactively")
    p.add_argument("--width", type=int, default=40, help="Grid columns (5-200, default: 40)")
    p.add_argument("--height", type=int, default=20, help="Grid rows (5-100, default: 20)")
    p.add_argument("--domains", type=int, default=4, help="Domain count (1-26, default: 4)")
    p.add_argument("--seed", type=int, default=None, help="Random seed (default: random)")
    p.add_argument("--tps", type=int, default=5, help="Ticks per second (1-60, default: 5)")
    p.add_argument("--max-ticks", type=int, default=None, metavar="N",
                   help="Stop after N ticks")
    p.add_argument("--step", action="store_true", help="Wait for Enter before each tick")
    p.add_argument("--save-scenario", metavar="FILE", default=None,
                   help="Write the scenario in use to FILE")
    p.add_argument("--no-color", action="store_true", help="Disable colored output")
    p.add_argument("--no-clear", action="store_true", help="Do not clear between frames")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    p.add_argument("--log-json", action="store_true", help="JSON log lines on stderr")
    args = p.parse_args(argv)
    args.width = max(5, min(200, args.width))
    args.height = max(5, min(100, args.height))
    args.domains = max(1, min(26, args.domains))
    args.tps = max(1, min(60, args.tps))
    return args


def build_scenario(args: argparse.Namespace, rng: random.Random) -> Scenario:
    if args.scenario:
        return load_scenario(args.scenario)
    if args.wizard:
        return run_wizard(rng=rng)
    return random_scenario(args.width, args.height, args.domains, rng)


def _log_signal(signal: Signal) -> None:
    log.debug("signal", name=signal.name, tick=signal.tick, **signal.data)


def _prompt() -> str | None:
    try:
        return input("Enter input (x to quit): ")
    except EOFError:
        return "x"


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)

    seed = args.seed if args.seed is not None else int.from_bytes(os.urandom(8))
    setup_rng = random.Random(seed)

    try:
        scenario = build_scenario(args, setup_rng)
    except ScenarioError as exc:
        print(f"tick-territory: invalid scenario: {exc}", file=sys.stderr)
        return EXIT_BAD_SCENARIO
    except OSError as exc:
        print(f"tick-territory: cannot read scenario: {exc}", file=sys.stderr)
        return EXIT_BAD_SCENARIO
    except EOFError:
        print("tick-territory: setup cancelled", file=sys.stderr)
        return EXIT_FAILED

    if args.save_scenario:
        try:
            save_scenario(scenario, args.save_scenario)
        except OSError as exc:
            print(f"tick-territory: cannot write scenario: {exc}", file=sys.stderr)
            return EXIT_FAILED

    world = World(
        scenario.dimensions, scenario.positions, scenario.layout, seed=seed
    )
    console = Console(no_color=args.no_color, highlight=False)
    renderer = TerminalRenderer(console, clear=not args.no_clear)
    world.on_render(renderer)
    world.signals.subscribe("*", _log_signal)
    log.info(
        "run_started",
        seed=seed,
        width=scenario.dimensions.width,
        height=scenario.dimensions.height,
        domains=len(scenario.positions),
    )
    renderer(world)

    engine = Engine(
        world,
        tps=None if args.step else args.tps,
        poll=_prompt if args.step else None,
    )
    reason = engine.run(max_ticks=args.max_ticks)

    if reason is StopReason.WINNER:
        winner = world.winner()
        console.print(f"{winner.name} wins after {world.tick_number} ticks (seed {seed}).")
    else:
        console.print(f"Stopped after {world.tick_number} ticks (seed {seed}).")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
