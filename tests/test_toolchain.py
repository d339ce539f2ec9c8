from __future__ import annotations

from pathlib import Path

import pytest

from create_empirica_app.config import ScaffoldSettings
from create_empirica_app.errors import CwdMismatch, ToolchainInstallFailure
from create_empirica_app.toolchain import check_npm_can_read_cwd, ensure_meteor

INSTALL = "curl https://install.meteor.com/ | sh"


def test_present_meteor_is_left_alone(runner):
    assert ensure_meteor(runner, ScaffoldSettings()) is False
    assert runner.calls == []


def test_missing_meteor_is_installed(make_runner):
    runner = make_runner(available=())
    assert ensure_meteor(runner, ScaffoldSettings(), windows=False) is True
    assert runner.calls == [(INSTALL, None, True)]


def test_failed_install_raises(make_runner):
    runner = make_runner(available=(), returncodes={INSTALL: 1})
    with pytest.raises(ToolchainInstallFailure, match="failed to install"):
        ensure_meteor(runner, ScaffoldSettings(), windows=False)


def test_windows_points_to_installer(make_runner):
    runner = make_runner(available=())
    with pytest.raises(ToolchainInstallFailure) as excinfo:
        ensure_meteor(runner, ScaffoldSettings(), windows=True)
    assert "install.meteor.com/windows" in excinfo.value.hint
    assert runner.calls == []


def test_cwd_check_passes_when_npm_agrees(make_runner, tmp_path: Path):
    runner = make_runner(outputs={"npm config list": f'; userconfig = ~/.npmrc\n; cwd = {tmp_path}\n'})
    check_npm_can_read_cwd(runner, tmp_path, windows=False)


def test_cwd_check_reports_mismatch(make_runner, tmp_path: Path):
    runner = make_runner(outputs={"npm config list": "; cwd = C:\\Windows\\System32\n"})
    with pytest.raises(CwdMismatch) as excinfo:
        check_npm_can_read_cwd(runner, tmp_path, windows=True)
    assert excinfo.value.observed == "C:\\Windows\\System32"
    assert "AutoRun" in excinfo.value.hint
    assert excinfo.value.fatal is False


@pytest.mark.parametrize("outputs", [{}, {"npm config list": "; node bin location = /usr/bin/node\n"}])
def test_cwd_check_skips_without_information(make_runner, tmp_path: Path, outputs):
    check_npm_can_read_cwd(make_runner(outputs=outputs), tmp_path)
