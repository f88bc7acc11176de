#!/usr/bin/env python3
"""
Banker's Algorithm Resource Manager
Command-line entry point.

Replays JSON scenarios through a ResourceManager, or drives one
interactively from a simple command loop. Neither mode makes allocation
decisions itself; both only call the manager's public operations.
"""

import argparse
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO

from banker.algorithms.avoidance import RequestResult
from banker.analysis.metrics import ManagerMetrics
from banker.errors import ResourceManagerError
from banker.manager import ResourceManager
from banker.utils.logger import ManagerLogger
from banker.utils.scenario_loader import (
    ScenarioLoadError,
    get_scenario_description,
    load_scenario,
)


DEFAULT_KINDS = ['A=10', 'B=10', 'C=10']


@dataclass
class ReplayResult:
    """Outcome of replaying one scenario."""
    manager: Optional[ResourceManager]
    results: List[RequestResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.manager is not None and not self.errors


def run_scenario(scenario_path: str, logger: ManagerLogger) -> ReplayResult:
    """
    Replay a scenario file event by event.

    Contract errors raised by an event are logged and replay continues with
    the next event, so one bad line does not hide later decisions.

    Args:
        scenario_path: Path to scenario JSON file
        logger: Logger instance

    Returns:
        ReplayResult with the manager, every request decision and any errors
    """
    try:
        pool, events = load_scenario(scenario_path)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        return ReplayResult(manager=None, errors=[str(e)])

    manager = ResourceManager(pool, logger=logger)
    replay = ReplayResult(manager=manager)

    logger.log(f"\n{'='*60}")
    logger.log("SCENARIO START")
    logger.log(f"Scenario: {scenario_path}")
    description = get_scenario_description(scenario_path)
    if description:
        logger.log(f"Description: {description}")
    logger.log(f"Resource kinds: {', '.join(f'{k.name}={k.total}' for k in pool)}")
    logger.log(f"{'='*60}\n")

    for index, event in enumerate(events):
        try:
            _apply_event(manager, event, replay)
        except ResourceManagerError as e:
            message = f"Event {index} ({event['type']} {event['process']}): {e}"
            logger.log(message, "error")
            replay.errors.append(message)
        logger.log_system_state(manager.describe())

    logger.log(f"\n{'='*60}")
    logger.log("SCENARIO COMPLETE")
    logger.log(f"{'='*60}")
    logger.log(manager.describe())
    logger.log(ManagerMetrics.collect(manager.event_log, manager.snapshot()).display())
    return replay


def _apply_event(manager: ResourceManager, event: Dict, replay: ReplayResult) -> None:
    event_type = event['type']
    process_id = event['process']

    if event_type == 'register':
        manager.register(process_id, event['max_demand'])
    elif event_type == 'request':
        replay.results.append(manager.request(process_id, event['amounts']))
    elif event_type == 'release':
        manager.release(process_id)


def parse_kinds(definitions: List[str]) -> Dict[str, int]:
    """
    Parse NAME=TOTAL kind definitions.

    Raises:
        ValueError: If a definition is malformed or a name repeats
    """
    totals = {}
    for item in definitions:
        name, sep, total = item.partition('=')
        if not sep or not name:
            raise ValueError(f"Kind must look like NAME=TOTAL: {item!r}")
        if name in totals:
            raise ValueError(f"Kind {name} is defined more than once")
        totals[name] = int(total)
    return totals


def _read_ints(line: str) -> List[int]:
    return [int(token) for token in line.split()]


def run_interactive(
    manager: ResourceManager,
    input_stream: TextIO,
    output: TextIO
) -> None:
    """
    Command loop over an existing manager.

    Commands: N create process, F destroy process, R request units,
    S show state, Q quit. Ends on Q or end of input.
    """
    kinds = manager.list_kinds()

    def say(message: str) -> None:
        print(message, file=output)

    def ask(prompt: str) -> Optional[str]:
        say(prompt)
        line = input_stream.readline()
        if not line:
            return None
        return line.strip()

    while True:
        command = ask("Command: N=create process  F=destroy process  R=request  S=show  Q=quit")
        if command is None:
            break
        command = command.upper()

        if command == 'Q':
            break
        elif command == 'S':
            say(manager.describe())
        elif command in ('N', 'R'):
            process_id = ask("Process name:")
            if not process_id:
                continue
            label = "maximum demand" if command == 'N' else "request"
            line = ask(f"Enter {label} for {', '.join(kinds)} separated by spaces:")
            if line is None:
                break
            try:
                values = _read_ints(line)
            except ValueError:
                say(f"Not a list of integers: {line!r}")
                continue
            try:
                if command == 'N':
                    manager.register(process_id, values)
                    say(f"Process {process_id} created")
                else:
                    result = manager.request(process_id, values)
                    say(f"Request {result}")
            except ResourceManagerError as e:
                say(f"Error: {e}")
        elif command == 'F':
            process_id = ask("Process name:")
            if not process_id:
                continue
            try:
                released = manager.release(process_id)
                say(f"Process {process_id} destroyed, released {released}")
            except ResourceManagerError as e:
                say(f"Error: {e}")
        elif command:
            say(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the resource manager CLI."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm Resource Manager"
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        '--scenario',
        type=str,
        help='Path to scenario JSON file to replay'
    )
    mode.add_argument(
        '--interactive',
        action='store_true',
        help='Run the interactive command loop'
    )
    parser.add_argument(
        '--kinds',
        nargs='+',
        default=DEFAULT_KINDS,
        metavar='NAME=TOTAL',
        help='Resource kinds for interactive mode (default: A=10 B=10 C=10)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )

    args = parser.parse_args(argv)
    logger = ManagerLogger(verbose=args.verbose, log_file=args.log_file)

    try:
        if args.interactive:
            try:
                totals = parse_kinds(args.kinds)
                manager = ResourceManager.with_totals(totals, logger=logger)
            except ValueError as e:
                parser.error(str(e))
            run_interactive(manager, sys.stdin, sys.stdout)
            return 0

        replay = run_scenario(args.scenario, logger)
        return 0 if replay.ok else 1
    finally:
        logger.close()


if __name__ == '__main__':
    sys.exit(main())
