"""Copy a template tree into a new project, renaming and rendering files."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Collection, Iterator, Mapping, Sequence

from .config import RenderConfig
from .errors import RenderFailure
from .rename import DEFAULT_RENAME_RULES, RENDER_SUFFIX, RenameRule, apply_rename_rules
from .template import TemplateRenderer, TemplateRenderingError

__all__ = ["IGNORED_PATHS", "PlannedFile", "TemplateScaffolder"]


LOGGER = logging.getLogger(__name__)

# Local build output and installed dependencies never belong in a new project.
IGNORED_PATHS: tuple[tuple[str, ...], ...] = (
    (".meteor", "local"),
    ("node_modules",),
)


@dataclass(frozen=True, slots=True)
class PlannedFile:
    """A template file and the path it is written to."""

    source: Path
    destination: PurePosixPath
    render: bool


def _is_ignored(relative: PurePosixPath) -> bool:
    parts = relative.parts
    return any(parts[: len(prefix)] == prefix for prefix in IGNORED_PATHS)


def _iter_template_files(template_root: Path) -> Iterator[tuple[Path, PurePosixPath]]:
    for source in sorted(template_root.rglob("*")):
        relative = PurePosixPath(source.relative_to(template_root).as_posix())
        if _is_ignored(relative) or not source.is_file():
            continue
        yield source, relative


@dataclass(slots=True)
class TemplateScaffolder:
    """Materialise a template tree inside a destination directory."""

    renderer: TemplateRenderer

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def plan(self, template_root: str | Path, rename_rules: Sequence[RenameRule]) -> list[PlannedFile]:
        """Compute every destination path, rejecting collisions."""

        template_path = Path(template_root)
        if not template_path.is_dir():
            raise RenderFailure(f"template directory {template_path} does not exist", source=template_path)

        planned: list[PlannedFile] = []
        claimed: dict[PurePosixPath, Path] = {}
        for source, relative in _iter_template_files(template_path):
            destination = apply_rename_rules(relative, rename_rules)
            render = destination.name.endswith(RENDER_SUFFIX)
            if render:
                destination = destination.with_name(destination.name[: -len(RENDER_SUFFIX)])

            if destination in claimed:
                raise RenderFailure(
                    f"{claimed[destination]} and {source} both render to {destination}",
                    source=source,
                )
            claimed[destination] = source
            planned.append(PlannedFile(source=source, destination=destination, render=render))
        return planned

    def render(
        self,
        template_root: str | Path,
        dest_root: str | Path,
        config: RenderConfig,
        rename_rules: Sequence[RenameRule] = DEFAULT_RENAME_RULES,
        *,
        overwrite: bool = False,
        preserve: Collection[str] = (),
    ) -> list[Path]:
        """Render ``template_root`` into ``dest_root`` and return the written paths.

        Existing files are only replaced when ``overwrite`` is set, and never
        below a top-level entry named in ``preserve``. The first
        failing file aborts the render with :class:`RenderFailure`; files
        written before the failure are left on disk.
        """

        target_path = Path(dest_root).expanduser().resolve()
        planned = self.plan(template_root, rename_rules)
        context = config.context()

        written: list[Path] = []
        for item in planned:
            destination = target_path.joinpath(*item.destination.parts)
            if destination.exists() and (not overwrite or item.destination.parts[0] in preserve):
                LOGGER.warning("Keeping existing %s, it was not created by this tool", item.destination)
                continue
            try:
                self._write(item, destination, context)
            except TemplateRenderingError as exc:
                raise RenderFailure(f"could not render {item.source}: {exc}", source=item.source) from exc
            except (OSError, UnicodeDecodeError) as exc:
                raise RenderFailure(f"could not write {destination}: {exc}", source=item.source) from exc
            LOGGER.debug("Wrote %s", item.destination)
            written.append(destination)
        return written

    def _write(self, item: PlannedFile, destination: Path, context: Mapping[str, Any]) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if item.render:
            text = item.source.read_text(encoding="utf-8")
            rendered = self.renderer.render_string(text, context, missing="error")
            destination.write_bytes(rendered.encode("utf-8"))
        else:
            destination.write_bytes(item.source.read_bytes())
        shutil.copymode(item.source, destination)
