"""
Warncord command line
=====================

Runs the auto-punishment engine against the configured violation store.

Usage:
    warncord simulate --user 42 --guild 1 --channel 7 --categories 101,104 --reason "slur"
    warncord simulate --user 42 --guild 1 --channel 7 --categories 301 --live
    warncord standing --user 42 --guild 1

``simulate`` follows the configured dry-run setting unless ``--live`` is given.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from warncord.configuration.app_configuration import AppConfig, load_app_config
from warncord.database.violation_store import ViolationStore
from warncord.datatypes.punishment_datatypes import ModerationVerdict, PunishmentInput
from warncord.escalation.account_standing import AccountStandingCalculator
from warncord.escalation.punishment_orchestrator import PunishmentOrchestrator, format_punishment_for_alert
from warncord.util.logger import get_logger

logger = get_logger("main")


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. WARNCORD_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise the repository root (two levels above this package).
    """
    if env_home := os.getenv("WARNCORD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


def load_environment(base_dir: Path) -> AppConfig:
    """Load ``.env`` from ``base_dir`` and the YAML configuration it points to."""
    load_dotenv(dotenv_path=base_dir / ".env")
    config_path = os.getenv("WARNCORD_CONFIG")
    return load_app_config(Path(config_path).resolve() if config_path else None)


def parse_categories(raw: str) -> list[str]:
    """Split "101, 104" into ["101", "104"]."""
    return [part.strip() for part in raw.split(",") if part.strip()]


async def run_simulate(args: argparse.Namespace, app_config: AppConfig) -> int:
    config = app_config.escalation
    if args.live:
        config = dataclasses.replace(config, dry_run=False)

    async with ViolationStore(app_config.database_path) as store:
        orchestrator = PunishmentOrchestrator(store, config)
        result = await orchestrator.process(
            PunishmentInput(
                user_id=args.user,
                guild_id=args.guild,
                channel_id=args.channel,
                content=args.content,
                verdict=ModerationVerdict(categories=parse_categories(args.categories), reason=args.reason),
            )
        )

    if result.error:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    print(format_punishment_for_alert(result))
    return 0


async def run_standing(args: argparse.Namespace, app_config: AppConfig) -> int:
    async with ViolationStore(app_config.database_path) as store:
        violations = await store.list(args.user, args.guild, include_expired=True)

    calculator = AccountStandingCalculator()
    print(calculator.describe(calculator.build_standing_data(violations)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="warncord",
        description="Warncord - automated escalation for AI-flagged messages",
    )
    sub = parser.add_subparsers(dest="command")

    p_sim = sub.add_parser("simulate", help="Evaluate a flagged message")
    p_sim.add_argument("--user", type=int, required=True, help="User ID")
    p_sim.add_argument("--guild", type=int, required=True, help="Guild ID")
    p_sim.add_argument("--channel", type=int, required=True, help="Channel ID")
    p_sim.add_argument("--categories", required=True, help="Comma-separated rule ids, e.g. 101,104")
    p_sim.add_argument("--reason", help="Classifier explanation")
    p_sim.add_argument("--content", default="", help="Message text")
    p_sim.add_argument("--live", action="store_true", help="Issue the violation instead of a dry-run")

    p_standing = sub.add_parser("standing", help="Show a user's account standing")
    p_standing.add_argument("--user", type=int, required=True, help="User ID")
    p_standing.add_argument("--guild", type=int, required=True, help="Guild ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    base_dir = resolve_base_dir()
    os.chdir(base_dir)
    app_config = load_environment(base_dir)

    commands = {
        "simulate": run_simulate,
        "standing": run_standing,
    }

    try:
        return asyncio.run(commands[args.command](args, app_config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    except RuntimeError as exc:
        logger.critical("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
