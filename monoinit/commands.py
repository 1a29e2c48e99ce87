"""
commands.py

Responsibility: Run the external package manager.

Every external invocation goes through a `CommandRunner`, so the pipeline's branching can be
exercised with a fake runner. The only feedback from a command is its exit status.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol

from monoinit.config import ToolKind
from monoinit.manifest import Manifest, is_framework_installed

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


class CommandError(RuntimeError):
    pass


class InstallFailedError(CommandError):
    pass


class UninstallFailedError(CommandError):
    pass


class CommandRunner(Protocol):
    def run(self, command: str, args: list[str], *, cwd: Path, quiet: bool = False) -> int: ...


class SubprocessRunner:
    """
    Blocking runner with inherited stdio (or discarded output when `quiet`).
    There is no timeout: a hung tool hangs the pipeline.
    """

    def run(self, command: str, args: list[str], *, cwd: Path, quiet: bool = False) -> int:
        stream: Any = subprocess.DEVNULL if quiet else None
        logger.debug("+ (%s) %s %s", cwd, command, " ".join(args))
        try:
            proc = subprocess.run([command, *args], cwd=str(cwd), stdout=stream, stderr=stream, check=False)
        except FileNotFoundError:
            logger.debug("Command not found: %s", command)
            return COMMAND_NOT_FOUND
        return proc.returncode


@dataclass(frozen=True)
class InstallPlan:
    tool: ToolKind
    verb: str
    flags: tuple[str, ...] = ()
    specifiers: tuple[str, ...] = ()

    @property
    def command(self) -> str:
        return self.tool.command

    def argv(self) -> list[str]:
        return [self.verb, *self.flags, *self.specifiers]

    def describe(self) -> str:
        return " ".join([self.command, *self.argv()])


def install_vocabulary(tool: ToolKind, *, verbose: bool = False, dev: bool = False) -> tuple[str, tuple[str, ...]]:
    """Return (verb, flags) for adding packages with `tool`."""
    if tool is ToolKind.YARN:
        return "add", ("--dev",) if dev else ()
    flags = ["--save-dev" if dev else "--save"]
    if verbose:
        flags.append("--verbose")
    return "install", tuple(flags)


def remove_verb(tool: ToolKind) -> str:
    return "remove" if tool is ToolKind.YARN else "uninstall"


def plan_for(tool: ToolKind, specifiers: Iterable[str], *, verbose: bool = False, dev: bool = False) -> InstallPlan:
    verb, flags = install_vocabulary(tool, verbose=verbose, dev=dev)
    return InstallPlan(tool=tool, verb=verb, flags=flags, specifiers=tuple(specifiers))


def build_install_plan(
    tool: ToolKind,
    template_package: Manifest,
    app_manifest: Manifest,
    *,
    framework_packages: Iterable[str] = ("react", "react-dom"),
    verbose: bool = False,
    template_supplied: bool = True,
) -> InstallPlan | None:
    """
    Template dependencies (runtime then dev) as `name@version`, plus the bare framework
    packages when the app manifest lacks them. None when there is nothing to install.
    """
    framework_packages = tuple(framework_packages)
    declared = {
        **(template_package.get("dependencies") or {}),
        **(template_package.get("devDependencies") or {}),
    }
    specifiers = [f"{name}@{version}" for name, version in declared.items()]

    framework_missing = not is_framework_installed(app_manifest, framework_packages)
    if framework_missing:
        specifiers.extend(framework_packages)

    if not specifiers or not (framework_missing or template_supplied):
        return None
    return plan_for(tool, specifiers, verbose=verbose)


def wants_typescript(plan: InstallPlan | None) -> bool:
    return plan is not None and any("typescript" in spec for spec in plan.specifiers)


def install(runner: CommandRunner, plan: InstallPlan, *, cwd: Path) -> None:
    logger.info("Installing template dependencies using %s...", plan.command)
    status = runner.run(plan.command, plan.argv(), cwd=cwd)
    if status != 0:
        raise InstallFailedError(f"`{plan.describe()}` failed (exit status {status})")


def uninstall_template(runner: CommandRunner, tool: ToolKind, template_name: str, *, cwd: Path) -> None:
    logger.info("Removing template package using %s...", tool.command)
    args = [remove_verb(tool), template_name]
    status = runner.run(tool.command, args, cwd=cwd)
    if status != 0:
        raise UninstallFailedError(f"`{tool.command} {' '.join(args)}` failed (exit status {status})")
