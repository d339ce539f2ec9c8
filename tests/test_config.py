from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from create_empirica_app.config import ProjectRequest, RenderConfig, ScaffoldSettings
from create_empirica_app.errors import InvalidProjectName


def test_from_cli_resolves_root_and_name(tmp_path: Path):
    request = ProjectRequest.from_cli("apps/demo-app", cwd=tmp_path)
    assert request.name == "demo-app"
    assert request.absolute_root == (tmp_path / "apps" / "demo-app").resolve()
    assert request.template_id == "basic"
    assert request.use_alternate_package_manager is False


def test_from_cli_rejects_invalid_names(tmp_path: Path):
    with pytest.raises(InvalidProjectName) as excinfo:
        ProjectRequest.from_cli("My App", cwd=tmp_path)
    assert "name can no longer contain capital letters" in excinfo.value.violations
    assert not (tmp_path / "My App").exists()


@pytest.mark.parametrize("name", ["react", "react-dom", "react-scripts"])
def test_from_cli_rejects_dependency_names(tmp_path: Path, name: str):
    with pytest.raises(InvalidProjectName):
        ProjectRequest.from_cli(name, cwd=tmp_path)


def test_project_request_is_immutable(tmp_path: Path):
    request = ProjectRequest.from_cli("demo-app", cwd=tmp_path)
    with pytest.raises(ValidationError):
        request.name = "other"


def test_render_config_context():
    request = ProjectRequest(name="demo-app", absolute_root=Path("/tmp/demo-app"))
    config = RenderConfig.from_request(request, admin_password="secret")
    assert config.context() == {
        "name": "demo-app",
        "appName": "Demo App",
        "adminPassword": "secret",
    }


def test_render_config_generates_random_secret():
    request = ProjectRequest(name="demo-app", absolute_root=Path("/tmp/demo-app"))
    first = RenderConfig.from_request(request).admin_password
    second = RenderConfig.from_request(request).admin_password
    assert len(first) == 13
    assert first.isalnum() and first == first.lower()
    assert first != second


def test_settings_from_env(tmp_path: Path):
    settings = ScaffoldSettings.from_env(
        {
            "CREATE_EMPIRICA_APP_TEMPLATES_DIR": str(tmp_path),
            "CREATE_EMPIRICA_APP_PROBE_TIMEOUT": "2.5",
        }
    )
    assert settings.templates_dir == tmp_path
    assert settings.probe_timeout == 2.5
    assert settings.template_path("basic") == tmp_path / "basic"


def test_settings_template_path_accepts_directories(tmp_path: Path):
    settings = ScaffoldSettings()
    custom = tmp_path / "custom-template"
    assert settings.template_path(str(custom)) == custom
    assert (settings.template_path("basic") / "package.json").is_file()
