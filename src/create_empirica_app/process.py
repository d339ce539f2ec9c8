"""External command execution and package manager descriptions."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

__all__ = ["CommandRunner", "METEOR_NPM", "PackageManager", "SYSTEM_NPM", "select_package_manager"]


LOGGER = logging.getLogger(__name__)


class CommandRunner:
    """Run external commands for the scaffolding stages.

    Commands run to completion before the caller continues. Tests replace
    this class with a recording fake.
    """

    def which(self, command: str) -> str | None:
        return shutil.which(command)

    def run(self, args: Sequence[str] | str, *, cwd: Path | None = None, shell: bool = False) -> int:
        """Run ``args`` with inherited standard streams and return its exit status."""

        LOGGER.debug("Running %s (cwd=%s)", args if shell else " ".join(args), cwd or ".")
        try:
            completed = subprocess.run(args, cwd=cwd, shell=shell, check=False)
        except OSError as exc:
            LOGGER.debug("Could not start %s: %s", args, exc)
            return 127
        return completed.returncode

    def output(self, args: Sequence[str], *, cwd: Path | None = None) -> str | None:
        """Return the captured stdout of ``args`` or ``None`` when it fails."""

        try:
            completed = subprocess.run(
                list(args),
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError:
            return None
        if completed.returncode != 0:
            return None
        return completed.stdout


@dataclass(frozen=True, slots=True)
class PackageManager:
    """How dependencies of the generated app are installed.

    Attributes
    ----------
    install_command:
        Command run inside the new project.
    normalizes_ranges:
        Whether runtime dependency pins are widened to caret ranges first.
    registry_host:
        Host probed before installing, or ``None`` when the manager can work
        from its own cache and the probe is skipped.
    offline_flag:
        Appended to the install command when the registry is unreachable.
    """

    name: str
    install_command: tuple[str, ...]
    normalizes_ranges: bool
    registry_host: str | None = None
    offline_flag: str | None = None

    def command(self, *, online: bool = True) -> list[str]:
        command = list(self.install_command)
        if not online and self.offline_flag:
            command.append(self.offline_flag)
        return command


METEOR_NPM = PackageManager(
    name="meteor npm",
    install_command=("meteor", "npm", "install"),
    normalizes_ranges=True,
)

SYSTEM_NPM = PackageManager(
    name="npm",
    install_command=("npm", "install"),
    normalizes_ranges=False,
    registry_host="registry.npmjs.org",
    offline_flag="--prefer-offline",
)


def select_package_manager(use_alternate: bool) -> PackageManager:
    return SYSTEM_NPM if use_alternate else METEOR_NPM
