"""Configuration objects shared by the orchestrator, renderer and CLI."""

from __future__ import annotations

import os
import secrets
import string
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .errors import InvalidProjectName
from .naming import RESERVED_DEPENDENCY_NAMES, humanize_app_name, validate_project_name

__all__ = ["ProjectRequest", "RenderConfig", "ScaffoldSettings", "DEFAULT_TEMPLATE"]


DEFAULT_TEMPLATE = "basic"
SECRET_LENGTH = 13
_SECRET_ALPHABET = string.ascii_lowercase + string.digits

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class ProjectRequest(BaseModel):
    """Validated description of the project the operator asked for.

    Built once from CLI input and passed unchanged through every stage.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1, description="Package name, the basename of the destination.")
    absolute_root: Path = Field(..., description="Absolute path of the destination directory.")
    template_id: str = Field(default=DEFAULT_TEMPLATE, description="Template tree to render.")
    use_alternate_package_manager: bool = Field(
        default=False, description="Install dependencies with the system npm instead of Meteor's."
    )
    verbose: bool = Field(default=False, description="Emit additional diagnostics.")

    @classmethod
    def from_cli(
        cls,
        project_directory: str,
        *,
        cwd: str | Path | None = None,
        template_id: str | None = None,
        use_alternate_package_manager: bool = False,
        verbose: bool = False,
    ) -> "ProjectRequest":
        """Resolve ``project_directory`` and validate its basename.

        Raises
        ------
        InvalidProjectName
            When the basename breaks the npm naming rules or collides with a
            runtime dependency of the generated app.
        """

        base = Path(cwd) if cwd is not None else Path.cwd()
        root = (base / project_directory).expanduser().resolve()
        name = root.name

        validation = validate_project_name(name)
        if not validation.valid:
            raise InvalidProjectName(name, validation.violations)
        if name in RESERVED_DEPENDENCY_NAMES:
            raise InvalidProjectName(
                name,
                [
                    "a dependency with the same name exists; the following names are not allowed: "
                    + ", ".join(sorted(RESERVED_DEPENDENCY_NAMES))
                ],
            )

        return cls(
            name=name,
            absolute_root=root,
            template_id=template_id or DEFAULT_TEMPLATE,
            use_alternate_package_manager=use_alternate_package_manager,
            verbose=verbose,
        )


def _generate_secret(length: int = SECRET_LENGTH) -> str:
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))


class RenderConfig(BaseModel):
    """Values substituted into the template tree."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    app_name: str
    admin_password: str

    @classmethod
    def from_request(cls, request: ProjectRequest, *, admin_password: str | None = None) -> "RenderConfig":
        return cls(
            name=request.name,
            app_name=humanize_app_name(request.name),
            admin_password=admin_password or _generate_secret(),
        )

    def context(self) -> Mapping[str, Any]:
        """Return the placeholder namespace used by the template files."""

        return {
            "name": self.name,
            "appName": self.app_name,
            "adminPassword": self.admin_password,
        }


class ScaffoldSettings(BaseModel):
    """Tool-level settings with environment overrides.

    Recognised variables (all optional):
        CREATE_EMPIRICA_APP_TEMPLATES_DIR, CREATE_EMPIRICA_APP_PROBE_TIMEOUT,
        CREATE_EMPIRICA_APP_METEOR_INSTALLER.
    """

    model_config = ConfigDict(frozen=True)

    templates_dir: Path = Field(default=_TEMPLATES_DIR)
    probe_timeout: float = Field(default=10.0, gt=0, description="DNS probe timeout in seconds")
    meteor_installer_url: str = Field(default="https://install.meteor.com/")

    def template_path(self, template_id: str) -> Path:
        """Resolve a bundled template name, or pass a filesystem path through."""

        candidate = Path(template_id).expanduser()
        if candidate.is_absolute() or len(candidate.parts) > 1:
            return candidate
        return self.templates_dir / template_id

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ScaffoldSettings":
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}
        if env.get("CREATE_EMPIRICA_APP_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(env["CREATE_EMPIRICA_APP_TEMPLATES_DIR"])
        if env.get("CREATE_EMPIRICA_APP_PROBE_TIMEOUT"):
            kwargs["probe_timeout"] = float(env["CREATE_EMPIRICA_APP_PROBE_TIMEOUT"])
        if env.get("CREATE_EMPIRICA_APP_METEOR_INSTALLER"):
            kwargs["meteor_installer_url"] = env["CREATE_EMPIRICA_APP_METEOR_INSTALLER"]
        return cls(**kwargs)
