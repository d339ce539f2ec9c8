from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from create_empirica_app.process import CommandRunner  # noqa: E402


class FakeRunner(CommandRunner):
    """Record commands instead of spawning processes."""

    def __init__(
        self,
        *,
        available: Iterable[str] = ("meteor", "npm"),
        returncodes: Mapping[str, int] | None = None,
        outputs: Mapping[str, str] | None = None,
    ) -> None:
        self.available = set(available)
        self.returncodes = dict(returncodes or {})
        self.outputs = dict(outputs or {})
        self.calls: list[tuple[str, Path | None, bool]] = []

    def which(self, command: str) -> str | None:
        return f"/usr/local/bin/{command}" if command in self.available else None

    def run(self, args: Sequence[str] | str, *, cwd: Path | None = None, shell: bool = False) -> int:
        key = args if isinstance(args, str) else " ".join(args)
        self.calls.append((key, cwd, shell))
        return self.returncodes.get(key, 0)

    def output(self, args: Sequence[str], *, cwd: Path | None = None) -> str | None:
        key = " ".join(args)
        self.calls.append((key, cwd, False))
        return self.outputs.get(key)

    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner


@pytest.fixture()
def write_tree() -> Callable[[Path, Mapping[str, str]], Path]:
    """Write ``{relative path: content}`` below ``root``."""

    def _write(root: Path, files: Mapping[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write


@pytest.fixture()
def templates_dir(tmp_path: Path, write_tree) -> Path:
    """A templates directory holding a single-manifest ``basic`` template."""

    root = tmp_path / "templates"
    manifest = {"name": "{{name}}", "dependencies": {"react": "16.4.0"}}
    write_tree(root / "basic", {"package.json": json.dumps(manifest, indent=2) + "\n"})
    return root
