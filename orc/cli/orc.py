"""orc: workshop infrastructure commands.

Usage:
    orc infra plan WORKSHOP_ID
    orc infra apply WORKSHOP_ID [--yes]
    orc workshop close WORKSHOP_ID
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import yaml
from instrukt_ai_logging import get_logger
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm

from orc import __version__
from orc.cli.render import render_actions, render_plan, render_result
from orc.config import OrcConfig, load_orc_config
from orc.core import reconcile
from orc.core.executor import ActionFailedError
from orc.core.probes import ProbeError
from orc.core.tmux_bridge import TmuxCommandError
from orc.logging_config import setup_logging
from orc.registry import Registry, RegistryError

logger = get_logger(__name__)

# Failures reported as a single error line
_REPORTED_ERRORS = (
    RegistryError,
    ProbeError,
    ActionFailedError,
    TmuxCommandError,
    ValidationError,
    yaml.YAMLError,
    OSError,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="orc", description="Workshop infrastructure reconciliation")
    parser.add_argument("--version", action="version", version=f"orc {__version__}")
    parser.add_argument("--log-level", help="Override ORC_LOG_LEVEL (e.g. DEBUG, INFO)")
    parser.add_argument("--config", type=Path, help="Path to orc.yml (default: ~/.orc/orc.yml)")
    commands = parser.add_subparsers(dest="command", required=True)

    infra = commands.add_parser("infra", help="Plan and apply workshop infrastructure")
    infra_commands = infra.add_subparsers(dest="infra_command", required=True)

    plan = infra_commands.add_parser("plan", help="Show what apply would change")
    plan.add_argument("workshop_id")

    apply = infra_commands.add_parser("apply", help="Create missing directories, configs and tmux windows")
    apply.add_argument("workshop_id")
    apply.add_argument("--yes", "-y", action="store_true", help="Apply without confirmation")

    workshop = commands.add_parser("workshop", help="Workshop session commands")
    workshop_commands = workshop.add_subparsers(dest="workshop_command", required=True)
    close = workshop_commands.add_parser("close", help="Kill the workshop's tmux session")
    close.add_argument("workshop_id")

    return parser


def _load_registry(settings: OrcConfig) -> Registry:
    return Registry.load(Path(settings.registry_path))


def _cmd_plan(console: Console, settings: OrcConfig, workshop_id: str) -> int:
    registry = _load_registry(settings)
    plan, apply_plan = reconcile.build_plan(workshop_id, registry, settings)
    render_plan(console, plan, apply_plan)
    return 0


def _cmd_apply(console: Console, settings: OrcConfig, workshop_id: str, assume_yes: bool) -> int:
    registry = _load_registry(settings)
    server = reconcile.server_for_workshop(registry, workshop_id)
    plan, apply_plan = reconcile.build_plan(workshop_id, registry, settings, server)
    render_plan(console, plan, apply_plan)

    if plan.nothing_to_do:
        console.print()
        console.print(server.attach_instructions(apply_plan.session_name))
        return 0

    if not assume_yes and not Confirm.ask("Apply these changes?", console=console, default=False):
        console.print("Aborted.")
        return 0

    result = reconcile.apply(workshop_id, registry, settings, server)
    console.print()
    if result.apply_plan.actions != apply_plan.actions:
        # State moved between plan and apply
        render_actions(console, result.apply_plan)
    render_result(console, result)
    console.print()
    console.print(server.attach_instructions(result.session_name))
    return 0


def _cmd_close(console: Console, settings: OrcConfig, workshop_id: str) -> int:
    registry = _load_registry(settings)
    server = reconcile.server_for_workshop(registry, workshop_id)
    session = reconcile.close_workshop(workshop_id, server)
    if session is None:
        console.print(f"Workshop {workshop_id} is not running.")
    else:
        console.print(f"Closed session {session} for workshop {workshop_id}.")
    return 0


def run(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    console = console or Console()

    try:
        settings = load_orc_config(args.config)
        if args.command == "infra" and args.infra_command == "plan":
            return _cmd_plan(console, settings, args.workshop_id)
        if args.command == "infra" and args.infra_command == "apply":
            return _cmd_apply(console, settings, args.workshop_id, args.yes)
        if args.command == "workshop" and args.workshop_command == "close":
            return _cmd_close(console, settings, args.workshop_id)
    except _REPORTED_ERRORS as exc:
        logger.error("orc %s failed: %s", args.command, exc)
        sys.stderr.write(f"orc error: {exc}\n")
        return 1

    sys.stderr.write("orc error: unsupported command\n")
    return 1


def main() -> None:
    try:
        sys.exit(run())
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
