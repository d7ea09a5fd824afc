"""Command line interface for backup rotation.

USAGE:
    backup-rotate [options] rotate [--dry-run] [--format text|json]
    backup-rotate [options] list [--format text|json]
    backup-rotate [options] serve [--schedule CRON]

    rotate    rotate all backup files (daily, weekly, monthly, yearly)
    list      list the newest backup per target with its age in seconds
              (host:kind:name:age, "-" when unknown; useful for monitoring)
    serve     rotate on a cron schedule until stopped

OPTIONS:
    -c, --config-json FILE   JSON configuration (BACKUP_DIR and hosts)
    -v, --verbose            echo log output on stderr
    -n, --no-log             disable all log output
    --run-dir DIR            directory for lock files
    --env-file FILE          .env file with BACKUP_ROTATE_* variables

EXIT STATUS:
    0  success, including runs where some artifacts could not be rotated
       and runs skipped because the command is already running
    1  configuration error
    2  every target failed (rotate), any other unrecoverable error, or
       invalid arguments
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from backup_rotate import __version__
from backup_rotate.config import RuntimeConfig
from backup_rotate.exceptions import AlreadyRunningError, BackupRotateError, ConfigurationError
from backup_rotate.logger import DEFAULT_SYSLOG_ADDRESS, Logger, create_logger, parse_level
from backup_rotate.service import (
    EXIT_ALL_FAILED,
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    RotationService,
    exit_code_for,
)


def build_logger(runtime: RuntimeConfig) -> Logger:
    """Logger honouring --verbose/--no-log and the BACKUP_ROTATE_LOG_* options."""
    enabled = not runtime.no_log
    return create_logger(
        level=parse_level(runtime.log_level),
        log_file=runtime.log_file if enabled else "",
        json_format=runtime.log_format == "json",
        console=enabled and runtime.verbose,
        syslog_address=DEFAULT_SYSLOG_ADDRESS if enabled and runtime.syslog else None,
    )


def cmd_rotate(service: RotationService, args: argparse.Namespace) -> int:
    with service.lock("rotate"):
        result = service.rotate(dry_run=args.dry_run)

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        prefix = "[DRY RUN] " if result.dry_run else ""
        print(
            f"{prefix}Targets: {len(result.targets)}, "
            f"promoted: {result.promoted_count}, "
            f"deleted: {result.deleted_count}, "
            f"errors: {len(result.errors)}"
        )
        for error in result.errors:
            print(f"[!!] {error}")

    return exit_code_for(result)


def cmd_list(service: RotationService, args: argparse.Namespace) -> int:
    with service.lock("list"):
        ages = service.list_ages()

    if args.format == "json":
        print(json.dumps([a.to_dict() for a in ages], indent=2))
    else:
        for age in ages:
            print(age.format_line())
    return EXIT_OK


def cmd_serve(service: RotationService, args: argparse.Namespace) -> int:
    service.serve(schedule=args.schedule)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backup-rotate",
        description="Rotate daily, weekly, monthly and yearly backups.",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-c", "--config-json", type=Path, help="configuration of hosts and targets")
    parser.add_argument("-v", "--verbose", action="store_true", help="print log output")
    parser.add_argument("-n", "--no-log", action="store_true", help="do not log anything")
    parser.add_argument("--run-dir", type=Path, help="directory for lock files")
    parser.add_argument("--env-file", type=Path, help=".env file with BACKUP_ROTATE_* variables")

    subparsers = parser.add_subparsers(dest="command", metavar="command", required=True)

    rotate = subparsers.add_parser("rotate", help="rotate all backup files")
    rotate.add_argument("--dry-run", action="store_true", help="only report what would change")
    rotate.add_argument("--format", choices=["text", "json"], default="text")
    rotate.set_defaults(handler=cmd_rotate)

    list_parser = subparsers.add_parser("list", help="list newest backup age per target")
    list_parser.add_argument("--format", choices=["text", "json"], default="text")
    list_parser.set_defaults(handler=cmd_list)

    serve = subparsers.add_parser("serve", help="rotate on a cron schedule")
    serve.add_argument("--schedule", help="cron expression, e.g. '0 3 * * *'")
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        runtime = RuntimeConfig.from_env(env_file=args.env_file).with_overrides(
            config_json=args.config_json,
            run_dir=args.run_dir,
            verbose=args.verbose or None,
            no_log=args.no_log or None,
            schedule=getattr(args, "schedule", None),
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logger = build_logger(runtime)
    logger.info(f"Command ({args.command}) started")

    try:
        service = RotationService.from_runtime(runtime, logger=logger)
        code = args.handler(service, args)
    except AlreadyRunningError as e:
        logger.info(e.message)
        return EXIT_OK
    except ConfigurationError as e:
        logger.error("Configuration error", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except BackupRotateError as e:
        logger.error(f"Command ({args.command}) failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ALL_FAILED

    logger.info(f"Command ({args.command}) completed", exit_code=code)
    return code


if __name__ == "__main__":
    sys.exit(main())
