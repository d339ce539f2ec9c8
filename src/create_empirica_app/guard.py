"""Pre-flight classification of the destination directory."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .errors import DirectoryConflict, RenderFailure

__all__ = [
    "ALLOWED_ENTRIES",
    "DirectoryConflictReport",
    "ERROR_LOG_PREFIXES",
    "OWNERSHIP_MARKER",
    "assess_directory",
    "claim_ownership",
    "describe_conflicts",
    "release_ownership",
]


LOGGER = logging.getLogger(__name__)

# Entries commonly created by version control, IDEs or a repository host.
ALLOWED_ENTRIES = frozenset(
    {
        ".DS_Store",
        "Thumbs.db",
        ".git",
        ".gitignore",
        ".idea",
        "README.md",
        "LICENSE",
        "web.iml",
        ".hg",
        ".hgignore",
        ".hgcheck",
        ".npmignore",
        "mkdocs.yml",
        "docs",
        ".travis.yml",
        ".gitlab-ci.yml",
        ".gitattributes",
    }
)

# Logs a failed dependency install leaves behind, e.g. npm-debug.log.12345.
ERROR_LOG_PREFIXES = ("npm-debug.log", "yarn-error.log", "yarn-debug.log")

# Present while a run is in flight; a leftover marker means the previous run failed.
OWNERSHIP_MARKER = ".create-empirica-app"


@dataclass(slots=True)
class DirectoryConflictReport:
    """Result of :func:`assess_directory`.

    Attributes
    ----------
    conflicts:
        Entries that block scaffolding into the directory.
    stale_artifacts:
        Error logs from a previous run that were deleted during the check.
    resumable:
        Entries left by an earlier failed run of this tool. They would be
        conflicts if the ownership marker were absent.
    preserved:
        Allowed entries that belong to the user. On resume they are read
        from the ownership marker instead of the directory listing.
    owned:
        Whether the ownership marker was found.
    """

    root: Path
    conflicts: list[str] = field(default_factory=list)
    stale_artifacts: list[str] = field(default_factory=list)
    resumable: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)
    owned: bool = False

    @property
    def safe(self) -> bool:
        return not self.conflicts


def _is_stale_artifact(entry: str) -> bool:
    return any(entry.startswith(prefix) for prefix in ERROR_LOG_PREFIXES)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _read_preserved(marker: Path) -> list[str]:
    try:
        text = marker.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DirectoryConflict(marker.parent, [OWNERSHIP_MARKER], message=f"Could not read {marker}: {exc}") from exc
    return [line.strip() for line in text.splitlines() if line.strip() and not line.startswith("#")]


def _scan(root_path: Path, report: DirectoryConflictReport) -> list[str]:
    remaining: list[str] = []
    for entry in sorted(child.name for child in root_path.iterdir()):
        if _is_stale_artifact(entry):
            _remove(root_path / entry)
            report.stale_artifacts.append(entry)
            LOGGER.debug("Removed %s left by a previous installation", entry)
            continue
        if entry == OWNERSHIP_MARKER:
            report.owned = True
            continue
        if entry in ALLOWED_ENTRIES:
            report.preserved.append(entry)
        else:
            remaining.append(entry)
    return remaining


def assess_directory(root: str | Path) -> DirectoryConflictReport:
    """Decide whether a new project may be written into ``root``.

    The directory is created when missing. Stale error logs are removed
    whatever the verdict, and nothing else is ever touched. A path that
    cannot be created or listed is reported as a :class:`DirectoryConflict`.
    """

    root_path = Path(root)
    if root_path.exists() and not root_path.is_dir():
        raise DirectoryConflict(
            root_path, [root_path.name], message=f"{root_path} already exists and is not a directory."
        )

    report = DirectoryConflictReport(root=root_path)
    try:
        root_path.mkdir(parents=True, exist_ok=True)
        remaining = _scan(root_path, report)
    except OSError as exc:
        raise DirectoryConflict(root_path, [], message=f"Could not prepare {root_path}: {exc}") from exc

    if report.owned:
        report.preserved = _read_preserved(root_path / OWNERSHIP_MARKER)
        report.resumable = remaining
    else:
        report.conflicts = remaining
    return report


def describe_conflicts(name: str, report: DirectoryConflictReport) -> str:
    """Format operator instructions for an unsafe directory."""

    lines = [f"The directory {name} contains files that could conflict:", ""]
    lines.extend(f"  {entry}" for entry in report.conflicts)
    lines.extend(["", "Either try using a new directory name, or remove the files listed above."])
    return "\n".join(lines)


def claim_ownership(root: str | Path, preserved: Iterable[str] = ()) -> Path:
    """Write the ownership marker so a failed run can be resumed safely.

    ``preserved`` names the entries that were present before the first run;
    they are listed in the marker and never overwritten on resume.
    """

    marker = Path(root) / OWNERSHIP_MARKER
    lines = [
        "# This directory is being created by create-empirica-app.",
        "# If a previous run failed, run the same command again to resume.",
        "# The entries below were here before and are never overwritten.",
        *sorted(preserved),
    ]
    try:
        marker.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as exc:
        raise RenderFailure(f"could not write {marker}: {exc}", source=marker) from exc
    return marker


def release_ownership(root: str | Path) -> None:
    marker = Path(root) / OWNERSHIP_MARKER
    try:
        marker.unlink(missing_ok=True)
    except OSError as exc:
        LOGGER.warning("Could not remove %s: %s", marker, exc)
