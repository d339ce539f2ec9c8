"""Sequence the scaffolding stages for a single project request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from .config import ProjectRequest, RenderConfig, ScaffoldSettings
from .errors import CwdMismatch, DependencyInstallFailure, DirectoryConflict, ScaffoldError
from .guard import DirectoryConflictReport, assess_directory, claim_ownership, describe_conflicts, release_ownership
from .manifest import patch_manifest
from .network import check_if_online
from .process import CommandRunner, PackageManager, select_package_manager
from .rename import DEFAULT_RENAME_RULES
from .scaffold import TemplateScaffolder
from .toolchain import check_npm_can_read_cwd, ensure_meteor

__all__ = ["Orchestrator", "ScaffoldResult", "Stage"]


LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


class Stage(str, Enum):
    """States of a scaffolding run, in execution order."""

    PREFLIGHT_TOOLCHAIN = "preflight-toolchain"
    DIRECTORY_CHECK = "directory-check"
    RENDER = "render"
    MANIFEST_PATCH = "manifest-patch"
    DEPENDENCY_INSTALL = "dependency-install"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class ScaffoldResult:
    """Record of a run that reached :attr:`Stage.DONE`."""

    request: ProjectRequest
    package_manager: PackageManager
    stages: list[Stage] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    installed_toolchain: bool = False
    resumed: bool = False
    online: bool = True

    @property
    def final_stage(self) -> Stage | None:
        return self.stages[-1] if self.stages else None


OnlineCheck = Callable[[PackageManager, CommandRunner, float], bool]


def _default_online_check(manager: PackageManager, runner: CommandRunner, timeout: float) -> bool:
    return check_if_online(manager, runner, timeout=timeout)


class Orchestrator:
    """Run every stage in order; the first fatal error stops the run.

    Errors propagate as :class:`ScaffoldError` with ``stage`` set. Deciding the
    process exit status is left to the caller.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        settings: ScaffoldSettings | None = None,
        scaffolder: TemplateScaffolder | None = None,
        *,
        online_check: OnlineCheck | None = None,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.settings = settings or ScaffoldSettings()
        self.scaffolder = scaffolder or TemplateScaffolder()
        self.online_check = online_check or _default_online_check
        self._stage: Stage | None = None

    def run(self, request: ProjectRequest, *, render_config: RenderConfig | None = None) -> ScaffoldResult:
        result = ScaffoldResult(
            request=request,
            package_manager=select_package_manager(request.use_alternate_package_manager),
        )
        config = render_config or RenderConfig.from_request(request)

        try:
            self._enter(result, Stage.PREFLIGHT_TOOLCHAIN)
            result.installed_toolchain = ensure_meteor(self.runner, self.settings)

            self._enter(result, Stage.DIRECTORY_CHECK)
            report = self._check_directory(request)
            result.resumed = report.owned

            self._enter(result, Stage.RENDER)
            self._render(request, config, report, result)

            if self._needs_manifest_patch(request, result.package_manager):
                self._enter(result, Stage.MANIFEST_PATCH)
                patch_manifest(request.absolute_root / MANIFEST_NAME)

            self._enter(result, Stage.DEPENDENCY_INSTALL)
            result.online = self._install_dependencies(request, result.package_manager)
        except ScaffoldError as exc:
            exc.stage = self._stage.value if self._stage else None
            result.stages.append(Stage.FAILED)
            LOGGER.debug("Run failed during %s", exc.stage)
            raise

        release_ownership(request.absolute_root)
        self._enter(result, Stage.DONE)
        return result

    def _enter(self, result: ScaffoldResult, stage: Stage) -> None:
        self._stage = stage
        result.stages.append(stage)
        LOGGER.debug("Entering %s", stage.value)

    def _check_directory(self, request: ProjectRequest) -> DirectoryConflictReport:
        report = assess_directory(request.absolute_root)
        if not report.safe:
            raise DirectoryConflict(
                request.absolute_root, report.conflicts, message=describe_conflicts(request.name, report)
            )
        if report.owned:
            LOGGER.info("Resuming a previous run in %s.", request.absolute_root)
        return report

    def _render(
        self,
        request: ProjectRequest,
        config: RenderConfig,
        report: DirectoryConflictReport,
        result: ScaffoldResult,
    ) -> None:
        template_path = self.settings.template_path(request.template_id)
        LOGGER.info("Creating a new Empirica app in %s.", request.absolute_root)
        if request.verbose:
            LOGGER.info("Using template %s.", template_path)

        if not report.owned:
            claim_ownership(request.absolute_root, report.preserved)
        result.written = self.scaffolder.render(
            template_path,
            request.absolute_root,
            config,
            DEFAULT_RENAME_RULES,
            overwrite=report.owned,
            preserve=report.preserved,
        )

    def _needs_manifest_patch(self, request: ProjectRequest, manager: PackageManager) -> bool:
        if not manager.normalizes_ranges:
            return False
        if not (request.absolute_root / MANIFEST_NAME).is_file():
            LOGGER.debug("No %s rendered; skipping version range patch", MANIFEST_NAME)
            return False
        return True

    def _install_dependencies(self, request: ProjectRequest, manager: PackageManager) -> bool:
        try:
            check_npm_can_read_cwd(self.runner, request.absolute_root)
        except CwdMismatch as exc:
            LOGGER.warning("%s", exc)
            if exc.hint:
                LOGGER.warning("%s", exc.hint)

        online = self.online_check(manager, self.runner, self.settings.probe_timeout)
        if not online:
            LOGGER.warning("You appear to be offline. Falling back to the local cache.")

        LOGGER.info("Installing dependencies with %s.", manager.name)
        command = manager.command(online=online)
        returncode = self.runner.run(command, cwd=request.absolute_root)
        if returncode != 0:
            raise DependencyInstallFailure(command, returncode)
        return online
