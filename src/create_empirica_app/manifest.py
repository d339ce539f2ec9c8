"""Widen exact dependency pins in a generated ``package.json`` into caret ranges."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

from .errors import ManifestError, MissingDependency, PatchError

__all__ = [
    "COMPANION_DEPENDENCIES",
    "RUNTIME_DEPENDENCIES",
    "is_valid_range",
    "make_caret_range",
    "patch_manifest",
    "runtime_dependencies_to_patch",
]


LOGGER = logging.getLogger(__name__)

# The primary runtime dependency must be present; companions are patched when listed.
RUNTIME_DEPENDENCIES = ("react",)
COMPANION_DEPENDENCIES = ("react-dom",)

_IDENTIFIER = r"[0-9A-Za-z-]+"
_QUALIFIER = rf"(?:-?{_IDENTIFIER}(?:\.{_IDENTIFIER})*)?(?:\+{_IDENTIFIER}(?:\.{_IDENTIFIER})*)?"
_XR = r"(?:[xX*]|0|[1-9][0-9]*)"
_PARTIAL = rf"v?{_XR}(?:\.{_XR}(?:\.{_XR}{_QUALIFIER})?)?"
_SIMPLE = rf"(?:(?:<=|>=|<|>|=|~>?|\^)\s*)?{_PARTIAL}"
_HYPHEN = rf"{_PARTIAL}\s+-\s+{_PARTIAL}"
_RANGE = re.compile(rf"^(?:{_HYPHEN}|{_SIMPLE}(?:\s+{_SIMPLE})*|[xX*]?)$")


def is_valid_range(expression: str) -> bool:
    """Return whether ``expression`` parses as a node-semver range."""

    return all(_RANGE.match(part.strip()) for part in expression.split("||"))


def make_caret_range(dependencies: MutableMapping[str, Any], name: str) -> str:
    """Rewrite ``dependencies[name]`` as ``^<version>`` in place and return it.

    When the caret form would not parse, the original version is kept and a
    :class:`PatchError` is logged.
    """

    version = dependencies.get(name)
    if version is None:
        raise MissingDependency(name)

    patched = f"^{version}"
    if not isinstance(version, str) or not version.strip() or not is_valid_range(patched):
        LOGGER.warning("%s", PatchError(name, str(version), patched))
        patched = version

    dependencies[name] = patched
    return patched


def runtime_dependencies_to_patch(dependencies: Mapping[str, Any]) -> list[str]:
    """Return the required runtime dependencies plus the companions ``dependencies`` lists."""

    return [*RUNTIME_DEPENDENCIES, *(name for name in COMPANION_DEPENDENCIES if name in dependencies)]


def _load_manifest(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"invalid JSON ({exc})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(path, str(exc)) from exc


def patch_manifest(path: str | Path, package_names: Sequence[str] | None = None) -> dict[str, Any]:
    """Patch ``package_names`` in the manifest at ``path``.

    Without ``package_names`` the runtime dependencies and every listed
    companion are patched. The file is rewritten once, after every entry was
    processed, preserving key order and ending with a newline. A
    :class:`MissingDependency` or :class:`ManifestError` leaves the file
    untouched.
    """

    manifest_path = Path(path)
    manifest = _load_manifest(manifest_path)

    dependencies = manifest.get("dependencies") if isinstance(manifest, dict) else None
    if not isinstance(dependencies, dict):
        raise MissingDependency("dependencies", manifest_path)

    if package_names is None:
        package_names = runtime_dependencies_to_patch(dependencies)
    for name in package_names:
        if name not in dependencies:
            raise MissingDependency(name, manifest_path)

    for name in package_names:
        make_caret_range(dependencies, name)
        LOGGER.debug("Set %s to %s", name, dependencies[name])

    try:
        manifest_path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ManifestError(manifest_path, str(exc)) from exc
    return manifest
