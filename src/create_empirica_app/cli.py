"""Command line interface for create-empirica-app."""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from typing import Sequence

from . import __version__
from .config import ProjectRequest, ScaffoldSettings
from .errors import ScaffoldError, ToolchainInstallFailure
from .orchestrator import Orchestrator, ScaffoldResult
from .process import CommandRunner

PROG = "create-empirica-app"

_VERSION_COMMANDS = {
    "Node": ["node", "--version"],
    "npm": ["npm", "--version"],
    "Yarn": ["yarn", "--version"],
    "Meteor": ["meteor", "--version"],
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Create a new Empirica experiment app",
        epilog="Only <project-directory> is required.",
    )
    parser.add_argument("project_directory", nargs="?", metavar="project-directory")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="print additional logs")
    parser.add_argument("--info", action="store_true", help="print environment debug info")
    parser.add_argument(
        "--use-npm",
        action="store_true",
        help="install dependencies with the system npm instead of Meteor's bundled npm",
    )
    parser.add_argument("--internal-testing-template", help=argparse.SUPPRESS)
    return parser


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("create_empirica_app")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def environment_info(runner: CommandRunner) -> dict[str, str]:
    """Collect the versions that matter when reporting a bug."""

    info = {
        "OS": platform.platform(),
        "CPU": platform.machine() or "Unknown",
        "Python": platform.python_version(),
    }
    for label, command in _VERSION_COMMANDS.items():
        output = runner.output(command) if runner.which(command[0]) else None
        info[label] = output.strip().splitlines()[0] if output and output.strip() else "Not Found"
    return info


def _print_environment_info(runner: CommandRunner) -> None:
    print("\nEnvironment Info:")
    for label, value in environment_info(runner).items():
        print(f"  {label}: {value}")
    print()


def _print_missing_project() -> None:
    sys.stderr.write(
        "Please specify the project directory:\n"
        f"  {PROG} <project-directory>\n\n"
        "For example:\n"
        f"  {PROG} my-empirica-app\n\n"
        f"Run {PROG} --help to see all options.\n"
    )


def _print_success(result: ScaffoldResult) -> None:
    request = result.request
    print()
    print(f"Success! Created {request.name} at {request.absolute_root}.")
    print()
    print("Inside that directory, you can run the meteor command to start the development server.")
    print()
    print("We suggest that you begin by typing:")
    print()
    print(f"  cd {request.name}")
    print("  meteor")
    print()
    print("Happy experimenting!")


def _report_failure(error: ScaffoldError) -> None:
    logger = logging.getLogger("create_empirica_app")
    logger.error("%s", error)
    if isinstance(error, ToolchainInstallFailure) and error.hint:
        logger.error("%s", error.hint)
    if error.stage:
        logger.debug("Aborted during %s.", error.stage)


def main(
    argv: Sequence[str] | None = None,
    *,
    runner: CommandRunner | None = None,
    settings: ScaffoldSettings | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    runner = runner or CommandRunner()

    if args.info:
        _print_environment_info(runner)
        return 0

    if args.project_directory is None:
        _print_missing_project()
        return 1

    try:
        request = ProjectRequest.from_cli(
            args.project_directory,
            template_id=args.internal_testing_template,
            use_alternate_package_manager=args.use_npm,
            verbose=args.verbose,
        )
        orchestrator = Orchestrator(runner, settings or ScaffoldSettings.from_env())
        result = orchestrator.run(request)
    except ScaffoldError as exc:
        _report_failure(exc)
        return 1

    _print_success(result)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
