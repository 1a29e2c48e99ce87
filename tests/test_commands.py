"""Tests for package manager invocations."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeRunner
from monoinit.commands import (
    COMMAND_NOT_FOUND,
    InstallFailedError,
    SubprocessRunner,
    UninstallFailedError,
    build_install_plan,
    install,
    plan_for,
    uninstall_template,
    wants_typescript,
)
from monoinit.config import ToolKind

REACT = {"dependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"}}


def test_npm_plan_with_template_and_missing_framework() -> None:
    template = {"dependencies": {"left-pad": "1.0.0"}, "devDependencies": {"typescript": "^5.0.0"}}

    plan = build_install_plan(ToolKind.NPM, template, {}, verbose=True)

    assert plan is not None
    assert plan.command == "npm"
    assert plan.argv() == ["install", "--save", "--verbose", "left-pad@1.0.0", "typescript@^5.0.0", "react", "react-dom"]


def test_yarn_plan_vocabulary() -> None:
    plan = build_install_plan(ToolKind.YARN, {"dependencies": {"left-pad": "1.0.0"}}, REACT, verbose=True)

    assert plan is not None
    assert plan.command == "yarnpkg"
    assert plan.argv() == ["add", "left-pad@1.0.0"]


def test_no_plan_when_nothing_to_install() -> None:
    assert build_install_plan(ToolKind.NPM, {}, REACT) is None


def test_no_plan_without_template_when_framework_present() -> None:
    assert build_install_plan(ToolKind.NPM, {"dependencies": {"a": "1"}}, REACT, template_supplied=False) is None


def test_dev_plan() -> None:
    assert plan_for(ToolKind.NPM, ["lerna"], dev=True).argv() == ["install", "--save-dev", "lerna"]
    assert plan_for(ToolKind.NPM, ["lerna"], dev=True, verbose=True).argv() == [
        "install",
        "--save-dev",
        "--verbose",
        "lerna",
    ]
    assert plan_for(ToolKind.YARN, ["lerna"], dev=True).argv() == ["add", "--dev", "lerna"]


def test_wants_typescript() -> None:
    assert wants_typescript(plan_for(ToolKind.NPM, ["@types/react@^18", "react"]))
    assert not wants_typescript(plan_for(ToolKind.NPM, ["react"]))
    assert not wants_typescript(None)


def test_install_failure_raises(tmp_path: Path) -> None:
    runner = FakeRunner({("npm", "install"): 1})
    with pytest.raises(InstallFailedError, match="npm install --save react"):
        install(runner, plan_for(ToolKind.NPM, ["react"]), cwd=tmp_path)


def test_uninstall_uses_tool_vocabulary(tmp_path: Path) -> None:
    runner = FakeRunner()
    uninstall_template(runner, ToolKind.YARN, "cra-template", cwd=tmp_path)
    uninstall_template(runner, ToolKind.NPM, "cra-template", cwd=tmp_path)
    assert runner.commands == ["yarnpkg remove cra-template", "npm uninstall cra-template"]


def test_uninstall_failure_raises(tmp_path: Path) -> None:
    runner = FakeRunner({("npm", "uninstall"): 1})
    with pytest.raises(UninstallFailedError):
        uninstall_template(runner, ToolKind.NPM, "cra-template", cwd=tmp_path)


def test_subprocess_runner_missing_executable(tmp_path: Path) -> None:
    status = SubprocessRunner().run("monoinit-no-such-tool", ["--version"], cwd=tmp_path, quiet=True)
    assert status == COMMAND_NOT_FOUND
