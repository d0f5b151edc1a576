from __future__ import annotations

import argparse
import sys

from direnv_reload import __version__
from direnv_reload.deps import Deps
from direnv_reload.errors import ConfigError, ProjectDirMissingError
from direnv_reload.logging import apply_logging_policy, get_logger
from direnv_reload.model import CLIArgs
from direnv_reload.plan import build_plan, render_config, render_plan_summary, resolver_for
from direnv_reload.runner import execute_plan

logger = get_logger(__name__)


def parse_args(argv: list[str]) -> CLIArgs:
    p = argparse.ArgumentParser(
        prog="direnv-reload",
        description="Force direnv to rebuild its cache for a project and resync profile timestamps.",
    )
    p.add_argument("--version", action="version", version=f"direnv-reload {__version__}")

    p.add_argument("project_dir", nargs="?", help="Project directory (default: from config, else cwd)")
    p.add_argument("--config", dest="config_path", metavar="PATH", default=None)
    p.add_argument("--direnv", dest="direnv_executable", metavar="PATH", default=None)

    p.add_argument("--plan", dest="plan_only", action="store_true", help="Print plan only")
    p.add_argument(
        "-c",
        "--show-config",
        dest="show_config",
        action="store_true",
        help="Print resolved configuration with sources",
    )

    v = p.add_mutually_exclusive_group()
    v.add_argument("-q", "--quiet", dest="verbosity", action="store_const", const="quiet")
    v.add_argument("-n", "--normal", dest="verbosity", action="store_const", const="normal")
    v.add_argument("-v", "--verbose", dest="verbosity", action="store_const", const="verbose")
    v.add_argument("-d", "--debug", dest="verbosity", action="store_const", const="debug")
    v.add_argument(
        "--verbosity",
        dest="verbosity",
        choices=["debug", "verbose", "normal", "quiet"],
        default=None,
    )

    ns = p.parse_args(argv)

    return CLIArgs(
        project_dir=str(ns.project_dir) if ns.project_dir is not None else None,
        config_path=str(ns.config_path) if ns.config_path is not None else None,
        direnv_executable=str(ns.direnv_executable) if ns.direnv_executable is not None else None,
        verbosity=str(ns.verbosity) if ns.verbosity is not None else None,
        plan_only=bool(ns.plan_only),
        show_config=bool(ns.show_config),
    )


def main(argv: list[str] | None = None, deps: Deps | None = None) -> int:
    cli = parse_args(sys.argv[1:] if argv is None else argv)
    resolver = resolver_for(cli)

    try:
        apply_logging_policy(resolver.resolve_logging_policy())
        if cli.show_config:
            sys.stdout.write(render_config(resolver))
            return 0
        plan = build_plan(cli, resolver)
    except ConfigError as e:
        logger.error(str(e))
        return e.exit_code

    if cli.plan_only:
        sys.stdout.write(render_plan_summary(plan))
        return 0

    result = execute_plan(plan, deps=deps)
    if isinstance(result.error, ProjectDirMissingError):
        for line in result.error.diagnostic_lines():
            print(line)
    elif result.error is not None:
        logger.error(str(result.error))

    return result.exit_code
