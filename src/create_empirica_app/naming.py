"""Project name validation and normalisation helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import quote

__all__ = [
    "NameValidation",
    "RESERVED_DEPENDENCY_NAMES",
    "humanize_app_name",
    "validate_project_name",
]


_SEPARATORS = re.compile(r"[\s\-]+")
_WORD_SEPARATORS = re.compile(r"[\s_\-]+")
_SCOPED_NAME = re.compile(r"^@([^/]+)/(.+)$")
_SPECIAL_CHARACTERS = re.compile(r"[~'!()*]")

MAX_NAME_LENGTH = 214

# A dependency with the same name as the app would shadow it in node_modules.
RESERVED_DEPENDENCY_NAMES = ("react", "react-dom", "react-scripts")

_BLACKLISTED_NAMES = frozenset({"node_modules", "favicon.ico"})

_NODE_CORE_MODULES = frozenset(
    {
        "assert",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "module",
        "net",
        "os",
        "path",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "worker_threads",
        "zlib",
    }
)


@dataclass(slots=True)
class NameValidation:
    """Outcome of :func:`validate_project_name`.

    ``errors`` make a name invalid for any package. ``warnings`` cover rules
    that npm only enforces for new packages, so both disqualify a new app.
    """

    name: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors and not self.warnings

    @property
    def violations(self) -> list[str]:
        return [*self.errors, *self.warnings]


def _collapse_whitespace(value: str) -> str:
    return _SEPARATORS.sub(" ", value).strip()


def _is_url_safe(value: str) -> bool:
    return quote(value, safe="~'!()*") == value


def humanize_app_name(name: str) -> str:
    """Return a title-cased display name, e.g. ``demo-app`` -> ``Demo App``."""

    collapsed = _collapse_whitespace(name)
    words = [word for word in _WORD_SEPARATORS.split(collapsed) if word]
    if not words:
        return "App"
    return " ".join(word[0].upper() + word[1:].lower() for word in words)


def validate_project_name(name: str) -> NameValidation:
    """Check ``name`` against the npm rules for new package names."""

    result = NameValidation(name=name)
    errors = result.errors
    warnings = result.warnings

    if not name:
        errors.append("name length must be greater than zero")
        return result

    if name.startswith("."):
        errors.append("name cannot start with a period")
    if name.startswith("_"):
        errors.append("name cannot start with an underscore")
    if name.strip() != name:
        errors.append("name cannot contain leading or trailing spaces")

    if name.lower() in _BLACKLISTED_NAMES:
        errors.append(f"{name} is a blacklisted name")
    if name.lower() in _NODE_CORE_MODULES:
        errors.append(f"{name} is a core module name")

    if not _is_url_safe(name):
        scoped = _SCOPED_NAME.match(name)
        if scoped is None or not (_is_url_safe(scoped.group(1)) and _is_url_safe(scoped.group(2))):
            errors.append("name can only contain URL-friendly characters")

    if len(name) > MAX_NAME_LENGTH:
        warnings.append(f"name can no longer contain more than {MAX_NAME_LENGTH} characters")
    if name.lower() != name:
        warnings.append("name can no longer contain capital letters")
    if _SPECIAL_CHARACTERS.search(name.split("/")[-1]):
        warnings.append("name can no longer contain special characters (\"~'!()*\")")

    return result
