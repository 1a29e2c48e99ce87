"""
workspace.py

Responsibility: Turn a freshly scaffolded single-package app into a lerna workspace.

Steps, in order:
1) move the generated `package.json` into the client package; drop regenerable
   install artifacts (`node_modules`, lockfile) from the root
2) write one manifest per package declared in `template.json` `packages`
3) write the root orchestration manifest and `lerna.json`
4) install lerna as a root dev dependency, then bootstrap every package

Nothing is rolled back when a step fails, and a rerun over a partially restructured
directory is not supported.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from monoinit.commands import CommandError, CommandRunner, plan_for
from monoinit.config import Config, ToolKind
from monoinit.descriptor import PackageSpec, TemplateDescriptor
from monoinit.manifest import MANIFEST_NAME, Manifest, read_manifest, write_manifest

logger = logging.getLogger(__name__)

WORKSPACE_VERSION = "0.1.0"
WORKSPACE_CONFIG_NAME = "lerna.json"

ROOT_FILES_TO_MOVE = (MANIFEST_NAME,)

# `bootstrap` maps to `lerna bootstrap`; `start` to `lerna run start`.
TOOL_SCRIPTS = ("bootstrap",)
TOOL_RUN_SCRIPTS = ("start",)


class WorkspaceError(RuntimeError):
    pass


class ClientDirMissingError(WorkspaceError):
    pass


class WorkspaceToolInstallFailedError(CommandError):
    pass


class BootstrapFailedError(CommandError):
    pass


@dataclass(frozen=True)
class WorkspaceResult:
    client_dir: Path
    packages: tuple[str, ...]
    generated_manifests: tuple[str, ...]


def default_package_manifest(name: str) -> Manifest:
    return {"name": name, "version": WORKSPACE_VERSION, "private": True, "scripts": {}}


def root_manifest(app_name: str, workspace_tool: str = "lerna") -> Manifest:
    scripts = {name: f"{workspace_tool} {name}" for name in TOOL_SCRIPTS}
    scripts.update({name: f"{workspace_tool} run {name}" for name in TOOL_RUN_SCRIPTS})
    return {"name": app_name, "version": WORKSPACE_VERSION, "private": True, "scripts": scripts}


def workspace_config(package_names: list[str]) -> Manifest:
    return {"version": WORKSPACE_VERSION, "packages": list(package_names)}


def relocate_client(app_path: Path, client_dir: Path, tool: ToolKind) -> None:
    for name in ROOT_FILES_TO_MOVE:
        source = app_path / name
        if source.exists():
            shutil.move(str(source), str(client_dir / name))

    for name in ("node_modules", tool.lockfile):
        target = app_path / name
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()


def setup_package(app_path: Path, name: str, spec: PackageSpec) -> bool:
    """
    Write the manifest for one declared package. Returns True when it was generated
    from scratch rather than loaded from the template.
    """
    logger.info("Setting up package %s", name)
    package_root = app_path / name
    manifest_path = package_root / MANIFEST_NAME

    generated = not manifest_path.exists()
    if generated:
        logger.info("\tNo package.json found ...generating one")
        manifest = default_package_manifest(name)
    else:
        manifest = read_manifest(manifest_path)
        manifest["name"] = name

    gitignore = package_root / "gitignore"
    if gitignore.exists():
        logger.info("\tgitignore file found ...renaming to .gitignore")
        shutil.move(str(gitignore), str(package_root / ".gitignore"))

    manifest["dependencies"] = {**(manifest.get("dependencies") or {}), **spec.dependencies}
    manifest["devDependencies"] = {**(manifest.get("devDependencies") or {}), **spec.dev_dependencies}
    write_manifest(manifest_path, manifest)
    return generated


def restructure(
    runner: CommandRunner,
    app_path: str | Path,
    app_name: str,
    descriptor: TemplateDescriptor,
    tool: ToolKind,
    config: Config | None = None,
) -> WorkspaceResult:
    config = config or Config()
    app_path = Path(app_path)
    client_dir = app_path / config.client_dir

    if not client_dir.is_dir():
        raise ClientDirMissingError(
            f"{config.client_dir}/ folder not found. Maybe you are not using the correct template?"
        )

    logger.info("Moving client to /%s", config.client_dir)
    relocate_client(app_path, client_dir, tool)

    names = descriptor.package_names
    generated = [name for name in names if setup_package(app_path, name, descriptor.packages[name])]

    logger.info("Setting up orchestration tools...")
    write_manifest(app_path / MANIFEST_NAME, root_manifest(app_name, config.workspace_tool))
    write_manifest(app_path / WORKSPACE_CONFIG_NAME, workspace_config(names))

    plan = plan_for(tool, [config.workspace_tool], verbose=config.verbose, dev=True)
    status = runner.run(plan.command, plan.argv(), cwd=app_path)
    if status != 0:
        raise WorkspaceToolInstallFailedError(f"`{plan.describe()}` failed (exit status {status})")

    logger.info("Bootstrapping packages with %s", config.workspace_tool)
    status = runner.run(tool.command, ["run", "bootstrap"], cwd=app_path)
    if status != 0:
        raise BootstrapFailedError(f"`{tool.command} run bootstrap` failed (exit status {status})")

    logger.info("Monorepo setup complete!")
    return WorkspaceResult(client_dir=client_dir, packages=tuple(names), generated_manifests=tuple(generated))
