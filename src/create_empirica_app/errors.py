"""Exception types raised while scaffolding a project."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ScaffoldError(RuntimeError):
    """Base class for every failure the scaffolding engine reports.

    ``stage`` is filled in by the orchestrator with the name of the stage that
    was running when the error surfaced.
    """

    fatal = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.stage: str | None = None


class InvalidProjectName(ScaffoldError):
    """Raised before any filesystem mutation when the name breaks npm rules."""

    def __init__(self, name: str, violations: Sequence[str]) -> None:
        self.name = name
        self.violations = list(violations)
        details = "".join(f"\n  *  {violation}" for violation in self.violations)
        super().__init__(f'Could not create a project called "{name}":{details}')


class DirectoryConflict(ScaffoldError):
    """Raised when the destination holds entries the tool did not expect."""

    def __init__(self, root: Path, conflicts: Sequence[str], *, message: str | None = None) -> None:
        self.root = root
        self.conflicts = list(conflicts)
        super().__init__(
            message or f"The directory {root} contains files that could conflict: {', '.join(self.conflicts)}"
        )


class ToolchainInstallFailure(ScaffoldError):
    """Raised when the Meteor runtime is missing and cannot be installed."""

    def __init__(self, message: str, *, hint: str = "") -> None:
        self.hint = hint
        super().__init__(message)


class RenderFailure(ScaffoldError):
    """Raised when a template file cannot be read, transformed or written."""

    def __init__(self, message: str, *, source: Path | None = None) -> None:
        self.source = source
        super().__init__(message)


class MissingDependency(ScaffoldError):
    """Raised when a manifest entry that must be patched is absent."""

    def __init__(self, package: str, manifest: Path | None = None) -> None:
        self.package = package
        self.manifest = manifest
        location = f" in {manifest}" if manifest is not None else ""
        super().__init__(f"Unable to find {package}{location}")


class ManifestError(ScaffoldError):
    """Raised when the generated manifest cannot be read or parsed."""

    def __init__(self, manifest: Path, reason: str) -> None:
        self.manifest = manifest
        super().__init__(f"Could not read {manifest}: {reason}")


class PatchError(ScaffoldError):
    """Raised when a caret range would not parse; the original pin is kept."""

    fatal = False

    def __init__(self, package: str, version: str, patched: str) -> None:
        self.package = package
        self.version = version
        self.patched = patched
        super().__init__(
            f"Unable to patch {package} dependency version because version {version} "
            f"will become invalid {patched}"
        )


class DependencyInstallFailure(ScaffoldError):
    """Raised when the package manager install command exits non-zero."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = list(command)
        self.returncode = returncode
        super().__init__(
            f"Could not pull NPM dependencies: '{' '.join(self.command)}' exited with {returncode}"
        )


class CwdMismatch(ScaffoldError):
    """Raised when a spawned npm process observes a different working directory."""

    fatal = False

    def __init__(self, expected: Path, observed: str, *, hint: str = "") -> None:
        self.expected = expected
        self.observed = observed
        self.hint = hint
        super().__init__(
            "Could not start an npm process in the right directory.\n\n"
            f"The current directory is: {expected}\n"
            f"However, a newly started npm process runs in: {observed}\n\n"
            "This is probably caused by a misconfigured system terminal shell."
        )


__all__ = [
    "CwdMismatch",
    "DependencyInstallFailure",
    "DirectoryConflict",
    "InvalidProjectName",
    "ManifestError",
    "MissingDependency",
    "PatchError",
    "RenderFailure",
    "ScaffoldError",
    "ToolchainInstallFailure",
]
