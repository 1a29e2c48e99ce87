from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

# A fresh directory: no enclosing git or Mercurial repository.
NO_REPO_PROBES: dict[tuple[str, ...], int] = {
    ("git", "rev-parse"): 128,
    ("hg",): 255,
}


class FakeRunner:
    """CommandRunner that records invocations and answers with scripted exit statuses."""

    def __init__(
        self,
        statuses: dict[tuple[str, ...], int] | None = None,
        on_run: Callable[[str, list[str], Path], None] | None = None,
    ) -> None:
        self.statuses = {**NO_REPO_PROBES, **(statuses or {})}
        self.on_run = on_run
        self.calls: list[tuple[str, list[str], Path]] = []

    def run(self, command: str, args: list[str], *, cwd: Path, quiet: bool = False) -> int:
        del quiet
        self.calls.append((command, list(args), Path(cwd)))
        argv = (command, *args)
        for prefix, status in self.statuses.items():
            if argv[: len(prefix)] == prefix:
                return status
        if self.on_run is not None:
            self.on_run(command, list(args), Path(cwd))
        return 0

    @property
    def commands(self) -> list[str]:
        return [" ".join([command, *args]) for command, args, _cwd in self.calls]

    def ran(self, prefix: str) -> bool:
        return any(c.startswith(prefix) for c in self.commands)


def create_git_dir(command: str, args: list[str], cwd: Path) -> None:
    if command == "git" and args[:1] == ["init"]:
        (cwd / ".git").mkdir(exist_ok=True)
        (cwd / ".git" / "HEAD").write_text("ref: refs/heads/main\n")


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    def _make(statuses: dict[tuple[str, ...], int] | None = None, **kwargs) -> FakeRunner:
        kwargs.setdefault("on_run", create_git_dir)
        return FakeRunner(statuses, **kwargs)

    return _make


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """A freshly created app as the outer CLI leaves it, before the template is applied."""
    d = tmp_path / "my-app"
    write_json(
        d / "package.json",
        {
            "name": "my-app",
            "version": "0.1.0",
            "private": True,
            "dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0", "react-scripts": "5.0.1"},
        },
    )
    (d / "node_modules" / ".bin").mkdir(parents=True)
    (d / "package-lock.json").write_text("{}\n")
    return d


@pytest.fixture
def template_pkg(app_dir: Path) -> Path:
    """A monorepo template installed under the app's node_modules."""
    root = app_dir / "node_modules" / "cra-template-mono"
    write_json(root / "package.json", {"name": "cra-template-mono", "version": "1.0.0"})
    write_json(
        root / "template.json",
        {
            "package": {
                "dependencies": {"left-pad": "1.0.0"},
                "scripts": {"lint": "npm run eslint"},
                "jest": {"testEnvironment": "jsdom"},
                "name": "ignored-name",
            },
            "packages": {
                "client": {"dependencies": {"axios": "^1.0.0"}},
                "api": {"dependencies": {"express": "^4.0.0"}, "devDependencies": {"nodemon": "^3.0.0"}},
            },
        },
    )
    tree = root / "template"
    (tree / "client" / "src").mkdir(parents=True)
    (tree / "client" / "src" / "index.js").write_text("console.log('hi');\n")
    (tree / "api").mkdir()
    (tree / "api" / "gitignore").write_text("dist\n")
    (tree / "README.md").write_text("Run `npm start` then `npm run build`.\n")
    (tree / "gitignore").write_text("node_modules\n")
    return root
