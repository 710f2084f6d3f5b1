"""Command-line interface for app-catalog."""

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

import yaml
from jinja2 import TemplateError
from pydantic import ValidationError

from app_catalog import __version__
from app_catalog.config import CatalogSettings
from app_catalog.environment import apply_defaults, render_env_file, write_env_file
from app_catalog.exceptions import AppNotFoundError, RepositoryUnavailableError
from app_catalog.ports import check_ports, is_port_available
from app_catalog.repository import AppRepository
from app_catalog.validator import ValidationResult, validate_configuration
from schemas.app import AppDefinition

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_REPOSITORY_ERROR = 3
EXIT_TEMPLATE_ERROR = 4

logger = logging.getLogger(__name__)


def list_command(repository: AppRepository, args: argparse.Namespace) -> int:
    if args.category:
        apps = repository.get_by_category(args.category)
    else:
        apps = repository.get_all()

    _print_app_table(apps)
    return EXIT_SUCCESS


def show_command(repository: AppRepository, args: argparse.Namespace) -> int:
    app = _require_app(repository, args.app_id)
    print(app.model_dump_json(by_alias=True, exclude_none=True, indent=2))
    return EXIT_SUCCESS


def search_command(repository: AppRepository, args: argparse.Namespace) -> int:
    apps = repository.search(args.query)
    if not apps:
        print(f"No apps match '{args.query}'")
        return EXIT_SUCCESS

    _print_app_table(apps)
    return EXIT_SUCCESS


def categories_command(repository: AppRepository, args: argparse.Namespace) -> int:
    for category in repository.categories():
        print(category)
    return EXIT_SUCCESS


def validate_command(repository: AppRepository, args: argparse.Namespace) -> int:
    """Validate configuration values for an app.

    Values come from --config (JSON or YAML mapping) and KEY=VALUE pairs,
    with pairs taking precedence.
    """
    app = _require_app(repository, args.app_id)
    config = collect_config(args)

    result = validate_configuration(app.configuration.fields, config)

    if not result.valid:
        _print_errors(app, result)
        return EXIT_VALIDATION_ERROR

    print(f"Configuration for {app.id} is valid")

    if args.check_ports:
        return _report_ports(check_ports(app.ports, timeout=args.timeout))

    return EXIT_SUCCESS


def check_port_command(repository: AppRepository, args: argparse.Namespace) -> int:
    """Probe explicit port numbers and/or the ports of an app."""
    results: dict[int, bool] = {}

    if args.app:
        app = _require_app(repository, args.app)
        results.update(check_ports(app.ports, timeout=args.timeout))

    for port in args.ports:
        results[port] = is_port_available(port, timeout=args.timeout)

    if not results:
        print("ERROR: No ports to check", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    return _report_ports(results)


def env_command(repository: AppRepository, args: argparse.Namespace) -> int:
    """Render the runtime environment of an app as a dotenv file."""
    app = _require_app(repository, args.app_id)
    config = apply_defaults(app.configuration.fields, collect_config(args))

    result = validate_configuration(app.configuration.fields, config)
    if not result.valid:
        _print_errors(app, result)
        return EXIT_VALIDATION_ERROR

    content = render_env_file(app, config)

    if args.output:
        output_path = Path(args.output).resolve()
        write_env_file(content, output_path)
        logger.info(f"Wrote environment file: {output_path}")
    else:
        sys.stdout.write(content)

    return EXIT_SUCCESS


COMMANDS = {
    "list": list_command,
    "show": show_command,
    "search": search_command,
    "categories": categories_command,
    "validate": validate_command,
    "check-port": check_port_command,
    "env": env_command,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args)

    try:
        settings = CatalogSettings()
        repository_path = (
            Path(args.repository) if args.repository else settings.repository_path
        )
        if args.timeout is None:
            args.timeout = settings.probe_timeout

        repository = AppRepository(repository_path)
        return COMMANDS[args.command](repository, args)

    except RepositoryUnavailableError as e:
        logger.error(str(e))
        print(f"\nERROR: {e}\n", file=sys.stderr)
        return EXIT_REPOSITORY_ERROR

    except AppNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND

    except ValidationError as e:
        logger.error("Invalid settings:")
        print(str(e), file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    except TemplateError as e:
        logger.error(f"Template rendering failed: {e}")
        print("\nERROR: Template rendering failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        if args.debug:
            traceback.print_exc()
        return EXIT_TEMPLATE_ERROR


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser with one subcommand per catalog operation.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="app-catalog",
        description="Browse app templates and validate their configuration",
    )

    parser.add_argument(
        "-r",
        "--repository",
        metavar="DIR",
        help="Directory containing app definitions "
        "(default: $APP_CATALOG_REPOSITORY_PATH or ./apps/repository)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Port probe timeout (default: $APP_CATALOG_PROBE_TIMEOUT or 1.0)",
    )

    # Verbosity options
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (show progress details)",
    )
    verbosity_group.add_argument(
        "--debug", action="store_true", help="Debug output (show all details)"
    )
    verbosity_group.add_argument(
        "-q", "--quiet", action="store_true", help="Quiet mode (errors only)"
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    list_parser = subparsers.add_parser("list", help="List all apps")
    list_parser.add_argument(
        "-c", "--category", help="Only list apps in this category"
    )

    show_parser = subparsers.add_parser("show", help="Show an app definition")
    show_parser.add_argument("app_id", metavar="APP_ID")

    search_parser = subparsers.add_parser(
        "search", help="Search apps by name, description or tag"
    )
    search_parser.add_argument("query", metavar="QUERY")

    subparsers.add_parser("categories", help="List app categories")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate configuration values for an app"
    )
    _add_config_arguments(validate_parser)
    validate_parser.add_argument(
        "--check-ports",
        action="store_true",
        help="Also check that the app's host ports are free",
    )

    port_parser = subparsers.add_parser(
        "check-port", help="Check whether local TCP ports are free"
    )
    port_parser.add_argument("ports", metavar="PORT", type=int, nargs="*")
    port_parser.add_argument(
        "-a", "--app", metavar="APP_ID", help="Check the ports declared by an app"
    )

    env_parser = subparsers.add_parser(
        "env", help="Render the runtime environment of an app"
    )
    _add_config_arguments(env_parser)
    env_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Write to FILE instead of standard output",
    )

    return parser


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("app_id", metavar="APP_ID")
    parser.add_argument(
        "values",
        metavar="KEY=VALUE",
        nargs="*",
        help="Configuration value (repeatable)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="JSON or YAML file with configuration values",
    )


def setup_logging(args: argparse.Namespace) -> None:
    """Configure logging based on command-line arguments.

    Args:
        args: Parsed command-line arguments
    """
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def collect_config(args: argparse.Namespace) -> dict[str, Any]:
    """Merge --config file values with KEY=VALUE pairs.

    Raises:
        ValueError: If a pair or the config file is malformed
    """
    config: dict[str, Any] = {}
    if args.config:
        config.update(load_config_file(Path(args.config)))
    config.update(parse_assignments(args.values))
    return config


def parse_assignments(pairs: list[str]) -> dict[str, str]:
    """Parse KEY=VALUE strings into a dict.

    Raises:
        ValueError: If a pair has no '=' or an empty key
    """
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        values[key] = value
    return values


def load_config_file(path: Path) -> dict[str, Any]:
    """Load configuration values from a JSON or YAML mapping.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not a mapping or not valid JSON/YAML
    """
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")

    return data


def _require_app(repository: AppRepository, app_id: str) -> AppDefinition:
    app = repository.get_by_id(app_id)
    if app is None:
        raise AppNotFoundError(app_id)
    return app


def _print_app_table(apps: list[AppDefinition]) -> None:
    for app in apps:
        metadata = app.metadata
        print(f"{metadata.id:<24} {metadata.category:<16} {metadata.name}")


def _print_errors(app: AppDefinition, result: ValidationResult) -> None:
    print(f"Configuration for {app.id} is invalid:", file=sys.stderr)
    for error in result.errors:
        print(f"  - {error.field}: {error.message}", file=sys.stderr)


def _report_ports(results: dict[int, bool]) -> int:
    for port, available in results.items():
        print(f"{port}: {'available' if available else 'in use'}")

    if all(results.values()):
        return EXIT_SUCCESS
    return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
