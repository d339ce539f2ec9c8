"""Ordered rename rules mapping template paths to destination paths."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Pattern, Sequence

__all__ = [
    "DEFAULT_RENAME_RULES",
    "RENDER_SUFFIX",
    "RenameRule",
    "apply_rename_rules",
]


# Files whose destination ends with this suffix are rendered, then the suffix is dropped.
RENDER_SUFFIX = ".hbs"


@dataclass(frozen=True, slots=True)
class RenameRule:
    """Rewrite a file's basename when ``matcher`` applies.

    A string matcher must equal the basename and replaces it entirely. A
    compiled pattern is searched in the basename and its first match is
    substituted with ``replacement``.
    """

    matcher: str | Pattern[str]
    replacement: str

    def matches(self, basename: str) -> bool:
        if isinstance(self.matcher, str):
            return basename == self.matcher
        return self.matcher.search(basename) is not None

    def apply(self, basename: str) -> str:
        if isinstance(self.matcher, str):
            return self.replacement
        return self.matcher.sub(self.replacement, basename, count=1)


def apply_rename_rules(relative_path: str | PurePosixPath, rules: Sequence[RenameRule]) -> PurePosixPath:
    """Return ``relative_path`` with the first matching rule applied to its basename."""

    path = PurePosixPath(relative_path)
    for rule in rules:
        if rule.matches(path.name):
            return path.with_name(rule.apply(path.name))
    return path


def _mark_for_rendering(extension: str) -> RenameRule:
    return RenameRule(re.compile(rf"\.{extension}$"), f".{extension}{RENDER_SUFFIX}")


# Exact names come first; the extension rules below would otherwise shadow them.
DEFAULT_RENAME_RULES: tuple[RenameRule, ...] = (
    # npm publishes .gitignore files as .npmignore, so templates ship them renamed.
    RenameRule(".gitignore.template", ".gitignore"),
    RenameRule(".babelrc.template", ".babelrc"),
    RenameRule(".eslintrc.js", ".eslintrc.js"),
    _mark_for_rendering("md"),
    _mark_for_rendering("json"),
    _mark_for_rendering("webmanifest"),
    _mark_for_rendering("html"),
    _mark_for_rendering("css"),
    _mark_for_rendering("js"),
    _mark_for_rendering("jsx"),
    _mark_for_rendering("ts"),
)
