"""
cli.py

Responsibility: CLI entrypoint for monoinit.

Parses arguments, loads configuration, configures logging and hands over to
`pipeline.init`. Exit status: 0 on success, 1 when a pipeline stage failed,
2 for configuration errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from monoinit.config import ConfigError, ToolKind, load_config
from monoinit.pipeline import init
from monoinit.summary import render_summary

logger = logging.getLogger(__name__)


def _configure_logging(level_name: str, *, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", level=level)


def init_cmd(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("%s", e)
        return 2

    config = config.with_overrides(tool=ToolKind(args.tool) if args.tool else None)
    app_path = Path(args.app_path).resolve()
    app_name = args.name or app_path.name
    template = args.template
    # Local template paths are given relative to where the command was run.
    if template and template.startswith((".", "~")):
        template = str(Path(template).expanduser().resolve())

    result = init(
        app_path,
        app_name,
        template,
        verbose=bool(args.verbose),
        original_directory=args.original_directory,
        config=config,
    )
    stream = sys.stdout if result.ok else sys.stderr
    print(render_summary(result, workspace_tool=config.workspace_tool), file=stream)
    return 0 if result.ok else 1


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="monoinit",
        description="Bootstrap a freshly created app from a template and turn it into a lerna workspace",
    )
    p.add_argument("app_path", help="Path to the freshly created app directory")
    p.add_argument("--name", default=None, help="Application name (default: directory name)")
    p.add_argument(
        "--template",
        default=None,
        help="Template package specifier or local template directory (relative to the current directory)",
    )
    p.add_argument("--verbose", action="store_true", help="Pass --verbose to npm and log debug output")
    p.add_argument(
        "--original-directory",
        default=None,
        help="Directory the user started from (only affects the suggested `cd` command)",
    )
    p.add_argument("--config", default=None, help="YAML configuration file")
    p.add_argument("--use-yarn", dest="tool", action="store_const", const="yarn", default=None, help="Force yarn")
    p.add_argument("--use-npm", dest="tool", action="store_const", const="npm", help="Force npm")
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    p.set_defaults(func=init_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level, verbose=bool(args.verbose))
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
