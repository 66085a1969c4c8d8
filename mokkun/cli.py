"""Command-line interface for mokkun configuration and table previews."""

from __future__ import annotations

import argparse
import os
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .grid.controller import GridController
    from .models import DataTableConfig


RANGE_SEPARATOR = ".."


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser with the ``config``, ``init`` and ``grid`` subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="mokkun",
        description="mokkun data table tools",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show or export configuration",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )
    config_group.add_argument(
        "--toml",
        action="store_true",
        help="Export configuration as TOML",
    )
    config_group.add_argument(
        "--env",
        action="store_true",
        help="Export configuration as environment variables",
    )
    config_group.add_argument(
        "--sources",
        action="store_true",
        help="Show configuration file sources",
    )
    config_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a mokkun.toml configuration file",
    )
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Overwrite existing configuration file",
    )
    init_parser.add_argument(
        "--path",
        "-p",
        type=str,
        default="mokkun.toml",
        help="Path for configuration file (default: mokkun.toml)",
    )

    # grid command
    grid_parser = subparsers.add_parser(
        "grid",
        help="Preview a data table definition",
    )
    grid_parser.add_argument(
        "definition",
        type=str,
        help="YAML or JSON file declaring a data_table field",
    )
    grid_parser.add_argument(
        "--table",
        "-t",
        type=str,
        default=None,
        help="Table id when the file declares several",
    )
    grid_parser.add_argument(
        "--sort",
        "-s",
        type=str,
        default=None,
        metavar="COLUMN[:asc|desc]",
        help="Sort by a column",
    )
    grid_parser.add_argument(
        "--filter",
        "-F",
        action="append",
        default=[],
        metavar="FILTER=VALUE",
        help="Apply a filter; ranges are written LOW..HIGH (repeatable)",
    )
    grid_parser.add_argument(
        "--page",
        type=int,
        default=None,
        help="1-based page number",
    )
    grid_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Rows per page",
    )
    grid_parser.add_argument(
        "--collapse-all",
        action="store_true",
        help="Collapse every group",
    )
    grid_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the view projection as JSON",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the main CLI entry point.

    Returns
    -------
    int
        Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    from .config import get_settings
    from .log import enable_debug, set_format, set_level

    settings = get_settings()
    set_level(settings.log.level)
    set_format(settings.log.format)
    if args.debug:
        enable_debug()

    if args.command == "config":
        return handle_config(args)
    if args.command == "init":
        return handle_init(args)
    if args.command == "grid":
        return handle_grid(args)
    parser.print_help()
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """Handle the config command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import MokkunSettings

    if args.sources:
        return show_config_sources()

    settings = MokkunSettings()

    if args.toml:
        output = settings.to_toml()
    elif args.env:
        output = settings.to_env()
    else:
        output = settings.show()

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Configuration written to {args.output}")
    else:
        print(output)

    return 0


def handle_init(args: argparse.Namespace) -> int:
    """Handle the init command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import MokkunSettings

    path = Path(args.path)

    if path.exists() and not args.force:
        print(f"Error: {path} already exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    settings = MokkunSettings()
    toml_content = settings.to_toml()

    header = """# mokkun Configuration File
#
# Environment variables can override any setting:
#   MOKKUN_GRID__PAGE_SIZE=25
#   MOKKUN_GRID__PAGE_SIZE_OPTIONS=10,20,50
#   MOKKUN_FORMAT__CURRENCY=USD
#   MOKKUN_LOG__LEVEL=DEBUG
#
# Use nested keys with __ (double underscore) delimiter.

"""
    path.write_text(header + toml_content, encoding="utf-8")
    print(f"Created {path}")

    return 0


def show_config_sources() -> int:
    """Show configuration file sources and their status.

    Returns
    -------
    int
        Exit code.
    """
    sources = [
        ("Built-in defaults", "", True),
        ("pyproject.toml [tool.mokkun]", "pyproject.toml", None),
        ("./mokkun.toml", "mokkun.toml", None),
        ("~/.config/mokkun/config.toml", "~/.config/mokkun/config.toml", None),
        ("MOKKUN_CONFIG_FILE", os.environ.get("MOKKUN_CONFIG_FILE", ""), None),
        ("Environment variables", "MOKKUN_* vars", None),
    ]

    print("Configuration Sources (in order of precedence):\n")
    print(f"{'Source':<40} {'Status':<15} {'Path'}")
    print("-" * 80)

    for name, path_str, forced_status in sources:
        if forced_status is True:
            status = "✓ Active"
            path_display = ""
        elif name == "Environment variables":
            mokkun_vars = [
                k for k in os.environ if k.startswith("MOKKUN_") and k != "MOKKUN_CONFIG_FILE"
            ]
            if mokkun_vars:
                status = f"✓ {len(mokkun_vars)} vars"
                path_display = ", ".join(mokkun_vars[:3])
                if len(mokkun_vars) > 3:
                    path_display += "..."
            else:
                status = "✗ No vars"
                path_display = ""
        elif not path_str:
            status = "✗ Not set"
            path_display = ""
        else:
            path = Path(path_str).expanduser()
            status = "✓ Found" if path.exists() else "✗ Not found"
            path_display = str(path)

        print(f"{name:<40} {status:<15} {path_display}")

    print("\nNote: Later sources override earlier ones.")
    return 0


def parse_sort(text: str) -> tuple[str, str | None]:
    """Split ``COLUMN[:asc|desc]``.

    Raises
    ------
    ValueError
        If the direction is not ``asc`` or ``desc``.
    """
    column, _, direction = text.partition(":")
    if not direction:
        return column, None
    direction = direction.lower()
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort direction '{direction}' (expected asc or desc)")
    return column, direction


def parse_filters(items: list[str], config: DataTableConfig) -> dict[str, Any]:
    """Turn ``FILTER=VALUE`` arguments into filter values.

    Range filters take ``LOW..HIGH`` where either side may be empty.

    Raises
    ------
    ValueError
        If an item has no ``=``.
    """
    kinds = {field.id: field.type for field in config.filter_fields}
    values: dict[str, Any] = {}
    for item in items:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid filter '{item}' (expected FILTER=VALUE)")
        kind = kinds.get(key)
        if kind in ("number_range", "date_range") and RANGE_SEPARATOR in raw:
            low, _, high = raw.partition(RANGE_SEPARATOR)
            names = ("min", "max") if kind == "number_range" else ("start", "end")
            values[key] = {names[0]: low.strip() or None, names[1]: high.strip() or None}
        else:
            values[key] = raw
    return values


def drive_grid(controller: GridController, args: argparse.Namespace) -> None:
    """Replay the command line options as intents."""
    from .grid.intents import (
        CollapseAllGroups,
        FilterApply,
        PageChange,
        PageSizeChange,
        SortRequest,
    )

    if args.filter:
        controller.dispatch(FilterApply(values=parse_filters(args.filter, controller.config)))
    if args.sort:
        column, direction = parse_sort(args.sort)
        controller.dispatch(SortRequest(column_id=column, direction=direction))
    if args.page_size is not None:
        controller.dispatch(PageSizeChange(page_size=args.page_size))
    if args.page is not None:
        controller.dispatch(PageChange(page=args.page - 1))
    if args.collapse_all:
        controller.dispatch(CollapseAllGroups())


def handle_grid(args: argparse.Namespace) -> int:
    """Handle the grid command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .exceptions import MokkunException
    from .grid.controller import GridController
    from .grid.view import render_text
    from .loader import load_table_definition

    try:
        config = load_table_definition(args.definition, table_id=args.table)
        controller = GridController(config)
        drive_grid(controller, args)
    except (MokkunException, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    view = controller.view()
    if args.json:
        print(view.model_dump_json(indent=2))
    else:
        print(render_text(view))
    return 0


if __name__ == "__main__":
    sys.exit(main())
