"""relaynote command-line entry point.

Usage::

    relaynote -c config.yaml --validate-only
    relaynote -c config.yaml demo
    relaynote -c config.yaml settings show
    relaynote -c config.yaml settings set quietHours.enabled true
    relaynote -c config.yaml analytics export
    python -m relaynote -c config.yaml demo
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

log = logging.getLogger(__name__)


def _get_version() -> str:
    from relaynote import __version__

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relaynote",
        description="relaynote: reliable notification delivery engine",
    )
    parser.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Path to the configuration file (YAML or JSON).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration file and exit.",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # demo
    demo_parser = subparsers.add_parser("demo", help="Run a scripted delivery scenario")
    demo_parser.add_argument(
        "--wait",
        type=float,
        default=None,
        metavar="SECONDS",
        help="How long to keep the loop running (default: batch delay + 1s).",
    )

    # settings
    settings_parser = subparsers.add_parser("settings", help="User notification settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Print the stored settings")
    set_parser = settings_sub.add_parser("set", help="Change one setting")
    set_parser.add_argument("key", help="Setting key, e.g. soundEnabled or quietHours.start")
    set_parser.add_argument("value", help="New value (YAML scalar: true, 22:30, high, ...)")

    # analytics
    analytics_parser = subparsers.add_parser("analytics", help="Delivery counters")
    analytics_sub = analytics_parser.add_subparsers(dest="analytics_command")
    analytics_sub.add_parser("show", help="Print the counters as JSON")
    analytics_sub.add_parser("reset", help="Zero every counter")
    analytics_sub.add_parser("export", help="Print the counters in Prometheus text format")

    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    print(f"relaynote: error: {message}", file=sys.stderr)  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Parses arguments, loads config, runs the command."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # -- resolve config path ---
    config_path = Path(args.config)
    if not config_path.is_file():
        _print_error(f"configuration file not found: {config_path}")
        sys.exit(1)

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # -- load & validate config ---
    try:
        from relaynote.config import ConfigValidationError, RelaynoteConfig

        config = RelaynoteConfig(config_file=str(config_path))
    except ConfigValidationError as exc:
        _print_error(str(exc))
        sys.exit(1)
    except Exception as exc:
        if args.debug:
            raise
        _print_error(f"failed to load configuration: {exc}")
        sys.exit(1)

    # -- replace bootstrap logging with structured logging ---
    from relaynote.logging import configure_logging

    configure_logging(config.settings.logging)

    if args.validate_only:
        _print_settings_summary(config, config_path)
        sys.exit(0)

    command = args.command

    try:
        if command == "demo":
            from relaynote.cli.commands.demo import run_demo

            run_demo(config, args)
        elif command == "settings":
            from relaynote.cli.commands.settings import run_settings

            run_settings(config, args)
        elif command == "analytics":
            from relaynote.cli.commands.analytics import run_analytics

            run_analytics(config, args)
        else:
            parser.print_help()
            sys.exit(1)
    except ValueError as exc:
        if args.debug:
            raise
        _print_error(str(exc))
        sys.exit(1)


def _print_settings_summary(config, config_path: Path) -> None:
    """Print a short summary of the loaded configuration."""
    settings = config.settings
    engine = settings.engine
    lines = [
        f"configuration OK: {config_path}",
        f"  storage:  {settings.storage.backend}"
        + (f" ({settings.storage.path})" if settings.storage.path else ""),
        f"  retries:  {engine.max_retries} (base delay {engine.retry_base_delay_ms} ms)",
        f"  batching: {engine.batch_delay_ms} ms, fast {engine.fast_batch_delay_ms} ms"
        + (
            f" for {', '.join(sorted(t.value for t in engine.fast_batch_types))}"
            if engine.fast_batch_types
            else ""
        ),
        f"  hooks:    {len(settings.hooks.registered)} registered",
        f"  logging:  {settings.logging.level} ({settings.logging.format})",
    ]
    print("\n".join(lines))  # noqa: T201
