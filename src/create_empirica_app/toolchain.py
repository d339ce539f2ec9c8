"""Checks for the external runtime the generated app depends on."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .config import ScaffoldSettings
from .errors import CwdMismatch, ToolchainInstallFailure
from .process import CommandRunner

__all__ = ["check_npm_can_read_cwd", "ensure_meteor", "is_windows"]


LOGGER = logging.getLogger(__name__)

WINDOWS_INSTALLER_URL = "https://install.meteor.com/windows"
_NPM_CWD_PREFIX = "; cwd = "

_AUTORUN_REMEDIATION = (
    "On Windows, this can usually be fixed by running:\n\n"
    '  reg delete "HKCU\\Software\\Microsoft\\Command Processor" /v AutoRun /f\n'
    '  reg delete "HKLM\\Software\\Microsoft\\Command Processor" /v AutoRun /f\n\n'
    "Try to run the above two lines in the terminal.\n"
    "To learn more about this problem, read: "
    "https://blogs.msdn.microsoft.com/oldnewthing/20071121-00/?p=24433/"
)


def is_windows() -> bool:
    return sys.platform == "win32"


def ensure_meteor(runner: CommandRunner, settings: ScaffoldSettings, *, windows: bool | None = None) -> bool:
    """Make sure ``meteor`` is on ``PATH``, installing it when possible.

    Returns ``True`` when an installation was performed.
    """

    if runner.which("meteor"):
        LOGGER.debug("Meteor found at %s", runner.which("meteor"))
        return False

    if is_windows() if windows is None else windows:
        raise ToolchainInstallFailure(
            "Meteor is missing and is a required dependency.",
            hint=f"To install Meteor on Windows, download the installer from:\n\n  {WINDOWS_INSTALLER_URL}",
        )

    LOGGER.info("Installing the Meteor dependency.")
    returncode = runner.run(f"curl {settings.meteor_installer_url} | sh", shell=True)
    if returncode != 0:
        raise ToolchainInstallFailure(
            "Meteor failed to install!",
            hint=f"Install it manually with: curl {settings.meteor_installer_url} | sh",
        )
    return True


def check_npm_can_read_cwd(runner: CommandRunner, cwd: Path, *, windows: bool | None = None) -> None:
    """Raise :class:`CwdMismatch` when a spawned npm runs in another directory.

    ``npm config list`` reports the directory it started in. When npm cannot
    be spawned or the line is missing, the check is skipped.
    """

    output = runner.output(["npm", "config", "list"], cwd=cwd)
    if output is None:
        return

    line = next((line for line in output.splitlines() if line.startswith(_NPM_CWD_PREFIX)), None)
    if line is None:
        return

    npm_cwd = line[len(_NPM_CWD_PREFIX):].strip()
    if npm_cwd == str(cwd):
        return

    hint = _AUTORUN_REMEDIATION if (is_windows() if windows is None else windows) else ""
    raise CwdMismatch(cwd, npm_cwd, hint=hint)
