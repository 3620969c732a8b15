from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from simlite.engine import Scheduler
from simlite.errors import SimulationError
from simlite.event_sink import InMemoryEventSink
from simlite.reporting import render_text_report
from simlite.scenario import build_scenario
from simlite.stream_io import (
    InputFormatError,
    Scenario,
    dump_trace,
    load_scenario,
    load_trace,
    parse_scenario,
)

logger = logging.getLogger("simlite")


def _demo_scenario() -> Scenario:
    # two customers share one desk; the clerk frees it every 2 time units
    return parse_scenario(
        {
            "resources": [{"name": "desk", "capacity": 1}],
            "processes": [
                {"name": "alice", "steps": [{"request": "desk"}, {"timeout": 3}]},
                {"name": "bob", "steps": [{"request": "desk"}, {"timeout": 1}]},
                {
                    "name": "clerk",
                    "steps": [
                        {"timeout": 2},
                        {"release": "desk"},
                        {"timeout": 2},
                        {"release": "desk"},
                    ],
                },
            ],
        }
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _cmd_run(args: argparse.Namespace) -> int:
    chosen = sum(1 for v in [bool(args.demo), bool(args.scenario), bool(args.input)] if v)
    if chosen != 1:
        print("ERROR: choose exactly one of --demo, --scenario, or --input.", file=sys.stderr)
        return 2

    _configure_logging(str(args.log_level))

    if args.input:
        try:
            records = load_trace(Path(str(args.input)))
        except InputFormatError as e:
            print(f"ERROR: invalid trace stream: {e}", file=sys.stderr)
            return 2
        sys.stdout.write(render_text_report(records))
        return 0

    if args.scenario:
        try:
            scenario = load_scenario(Path(str(args.scenario)))
        except InputFormatError as e:
            print(f"ERROR: invalid scenario: {e}", file=sys.stderr)
            return 2
    else:
        scenario = _demo_scenario()

    sink = InMemoryEventSink()
    scheduler = Scheduler(event_sink=sink)
    build_scenario(scenario, scheduler)

    # run() has no horizon; --max-steps is a safety cap for open-ended scenarios.
    max_steps = int(args.max_steps)
    steps = 0
    try:
        while scheduler.peek() is not None and steps < max_steps:
            scheduler.step()
            steps += 1
    except SimulationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.events_out:
        out_path = Path(str(args.events_out))
        out_path.write_text(json.dumps(dump_trace(sink.records), indent=2), encoding="utf-8")
        logger.info("wrote %d trace records to %s", len(sink.records), out_path)

    sys.stdout.write(render_text_report(sink.records))
    if scheduler.peek() is not None:
        print(f"Stopped at t={scheduler.now} after {steps} steps (--max-steps reached, {len(scheduler)} queued)")
    else:
        print(f"Finished at t={scheduler.now} after {steps} steps")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="simlite",
        description=(
            "simlite discrete-event simulator.\n"
            "\n"
            "Runs a scenario on a virtual clock and prints what fired at each instant."
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a scenario and print the trace grouped by simulated time.")
    run.add_argument("--demo", action="store_true", help="Run the built-in two-customer demo.")
    run.add_argument("--scenario", type=str, help="Run a scenario JSON file.")
    run.add_argument("--input", type=str, help="Render an existing trace JSON file.")
    run.add_argument("--max-steps", type=int, default=10000, help="Safety cap: max events to fire.")
    run.add_argument("--events-out", type=str, default=None, help="Write the trace as JSON to this path.")
    run.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for engine diagnostics (stderr).",
    )
    run.set_defaults(func=_cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
