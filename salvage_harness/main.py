"""
Salvage harness command line.

Usage:
    salvage-harness run --home RUNDIR --seed 42
    salvage-harness run --home RUNDIR --no-salvage
    salvage-harness replay --home RUNDIR --work-dir /tmp/replay
"""

import argparse
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from salvage_harness import __version__
from salvage_harness.config import Settings, SourceType
from salvage_harness.context import HarnessContext
from salvage_harness.driver import SalvageDriver
from salvage_harness.errors import EngineLoadError, HarnessFatalError
from salvage_harness.logging import clear_run_id, get_logger, set_run_id, setup_logging
from salvage_harness.replay import replay

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="salvage-harness",
        description="Exercise a storage engine's salvage path before and after corruption",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--home", type=Path, help="Engine home directory")
    common.add_argument("--source-name", help="Logical data source name")
    common.add_argument(
        "--source-type",
        choices=[t.value for t in SourceType],
        help="Data source layout",
    )
    common.add_argument("--engine", help="Storage engine as 'package.module:attribute'")
    common.add_argument("--engine-config", help="Engine open configuration string")
    common.add_argument("--log-level", help="Logging level")
    common.add_argument("--json-logs", action="store_true", help="Log one JSON object per line")

    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", parents=[common], help="Snapshot, salvage, corrupt, salvage")
    run.add_argument("--seed", type=int, help="Random seed for the corruption window")
    run.add_argument(
        "--no-salvage",
        dest="salvage",
        action="store_false",
        default=None,
        help="Disable salvage testing",
    )

    rep = sub.add_parser("replay", parents=[common], help="Salvage a saved snapshot again")
    rep.add_argument(
        "--work-dir",
        type=Path,
        help="Directory to rebuild the engine home in (default: <home>/SALVAGE.replay)",
    )
    rep.add_argument(
        "--clean",
        action="store_true",
        help="Replay the clean snapshot instead of the corrupted copy",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command line flags applied on top."""
    overrides: dict[str, Any] = {}
    for field in (
        "home",
        "source_name",
        "source_type",
        "engine",
        "engine_config",
        "log_level",
        "seed",
        "salvage",
    ):
        value = getattr(args, field, None)
        if value is not None:
            overrides[field] = value
    return Settings(**overrides)


def run_command(args: argparse.Namespace, context: HarnessContext) -> int:
    if args.command == "replay":
        work_dir = args.work_dir or context.home / "SALVAGE.replay"
        replay(context, work_dir, corrupted=not args.clean)
        return EXIT_OK

    SalvageDriver(context).run()
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValidationError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIG

    setup_logging(level=settings.log_level, json_output=args.json_logs)
    logger.info("Harness settings %s", settings.get_redacted_config())

    # A disabled run touches nothing, not even the engine import
    if args.command == "run" and not settings.salvage:
        logger.info("Salvage testing disabled")
        return EXIT_OK

    try:
        context = HarnessContext.from_settings(settings)
    except EngineLoadError as e:
        logger.error("Cannot load storage engine: %s", e)
        return EXIT_CONFIG

    set_run_id(context.run_id)
    try:
        return run_command(args, context)
    except HarnessFatalError as e:
        logger.critical(
            "%s failed (path=%s, errno=%s): %s",
            e.operation,
            e.path,
            e.errno,
            e.cause,
        )
        logger.critical("Snapshot for replay: %s (seed %d)", context.snapshot_dir, context.seed)
        return EXIT_FATAL
    finally:
        clear_run_id()


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
