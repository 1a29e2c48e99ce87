"""
pipeline.py

Responsibility: Drive the bootstrap pipeline for a freshly created app.

High-level flow:
1) Locate the template package and load `template.json`
2) Merge the template's `package` section into the app manifest
3) Copy the template tree into the app, initialize git
4) Install template + framework dependencies, remove the template package
5) Commit the baseline
6) Restructure the app into a lerna workspace

Stage failures are logged and returned as an `InitResult`; nothing in the taxonomy
below escapes `init()` as an exception. The directory is left in whatever state the
completed stages produced.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from monoinit.commands import (
    CommandRunner,
    InstallFailedError,
    SubprocessRunner,
    UninstallFailedError,
    build_install_plan,
    install,
    uninstall_template,
    wants_typescript,
)
from monoinit.config import Config, ToolKind
from monoinit.descriptor import DescriptorError, TemplateNotFoundError, load_descriptor, locate_template
from monoinit.manifest import (
    MANIFEST_NAME,
    KeyPolicy,
    ManifestError,
    apply_app_defaults,
    merge,
    read_manifest,
    write_manifest,
)
from monoinit.renderer import TemplateMissingError, materialize
from monoinit.typescript import verify_typescript_setup
from monoinit.vcs import VCSState, try_commit, try_init
from monoinit.workspace import (
    BootstrapFailedError,
    ClientDirMissingError,
    WorkspaceResult,
    WorkspaceToolInstallFailedError,
    restructure,
)

logger = logging.getLogger(__name__)


class FailureKind(str, enum.Enum):
    TEMPLATE_NOT_PROVIDED = "template_not_provided"
    TEMPLATE_NOT_FOUND = "template_not_found"
    DESCRIPTOR_INVALID = "descriptor_invalid"
    MANIFEST_INVALID = "manifest_invalid"
    TEMPLATE_MISSING = "template_missing"
    INSTALL_FAILED = "install_failed"
    UNINSTALL_FAILED = "uninstall_failed"
    CLIENT_DIR_MISSING = "client_dir_missing"
    WORKSPACE_TOOL_INSTALL_FAILED = "workspace_tool_install_failed"
    BOOTSTRAP_FAILED = "bootstrap_failed"


@dataclass(frozen=True)
class InitResult:
    app_path: Path
    app_name: str
    tool: ToolKind
    cd_path: str
    ok: bool = True
    failure: FailureKind | None = None
    message: str = ""
    vcs_state: VCSState = VCSState.NO_REPO
    readme_renamed: bool = False
    workspace: WorkspaceResult | None = None


_TEMPLATE_NOT_PROVIDED = (
    "A template was not provided. This is likely because you're using an outdated version of create-react-app. "
    "Please note that global installs of create-react-app are no longer supported. "
    "You can fix this by running `npm uninstall -g create-react-app` or `yarn global remove create-react-app` "
    "before using create-react-app again."
)


def cd_path_for(app_path: Path, app_name: str, original_directory: str | Path | None) -> str:
    """The shortest way to `cd` into the app from where the user started."""
    if original_directory is not None and Path(original_directory) / app_name == app_path:
        return app_name
    return str(app_path)


def _failed(result: InitResult, kind: FailureKind, err: Exception | str) -> InitResult:
    logger.error("%s", err)
    return replace(result, ok=False, failure=kind, message=str(err))


def init(
    app_path: str | Path,
    app_name: str,
    template_name: str | None,
    *,
    verbose: bool = False,
    original_directory: str | Path | None = None,
    runner: CommandRunner | None = None,
    config: Config | None = None,
    policy: KeyPolicy | None = None,
) -> InitResult:
    config = (config or Config()).with_overrides(verbose=verbose or None)
    runner = runner or SubprocessRunner()
    app_path = Path(app_path)
    tool = config.resolve_tool(app_path)

    result = InitResult(
        app_path=app_path,
        app_name=app_name,
        tool=tool,
        cd_path=cd_path_for(app_path, app_name, original_directory),
    )

    if not template_name:
        return _failed(result, FailureKind.TEMPLATE_NOT_PROVIDED, _TEMPLATE_NOT_PROVIDED)

    try:
        location = locate_template(template_name, app_path)
    except TemplateNotFoundError as e:
        return _failed(result, FailureKind.TEMPLATE_NOT_FOUND, e)

    template_path = location.path

    try:
        descriptor = load_descriptor(template_path, legacy_precedence=config.legacy_precedence)
    except DescriptorError as e:
        return _failed(result, FailureKind.DESCRIPTOR_INVALID, e)

    try:
        app_manifest = apply_app_defaults(read_manifest(app_path / MANIFEST_NAME, default={"name": app_name}), config)
        write_manifest(app_path / MANIFEST_NAME, merge(app_manifest, descriptor.package, policy, tool))
    except ManifestError as e:
        return _failed(result, FailureKind.MANIFEST_INVALID, e)

    try:
        rendered = materialize(template_path=template_path, destination_dir=app_path, tool=tool)
    except TemplateMissingError as e:
        return _failed(result, FailureKind.TEMPLATE_MISSING, e)
    result = replace(result, readme_renamed=rendered.readme_renamed)

    vcs_state = try_init(runner, app_path)
    result = replace(result, vcs_state=vcs_state)

    # Framework presence is judged on the app's own manifest, not the merged one.
    plan = build_install_plan(
        tool,
        descriptor.package,
        app_manifest,
        framework_packages=config.framework_packages,
        verbose=config.verbose,
        template_supplied=True,
    )
    if plan is not None:
        try:
            install(runner, plan, cwd=app_path)
        except InstallFailedError as e:
            return _failed(result, FailureKind.INSTALL_FAILED, e)

    if wants_typescript(plan):
        verify_typescript_setup(app_path)

    # A local template directory was never added as a dependency.
    if location.installed:
        try:
            uninstall_template(runner, tool, template_name, cwd=app_path)
        except UninstallFailedError as e:
            return _failed(result, FailureKind.UNINSTALL_FAILED, e)

    if vcs_state is VCSState.INITIALIZED:
        result = replace(result, vcs_state=try_commit(runner, app_path, config.commit_message))

    try:
        workspace = restructure(runner, app_path, app_name, descriptor, tool, config)
    except ClientDirMissingError as e:
        return _failed(result, FailureKind.CLIENT_DIR_MISSING, e)
    except WorkspaceToolInstallFailedError as e:
        return _failed(result, FailureKind.WORKSPACE_TOOL_INSTALL_FAILED, e)
    except BootstrapFailedError as e:
        return _failed(result, FailureKind.BOOTSTRAP_FAILED, e)
    except ManifestError as e:
        return _failed(result, FailureKind.MANIFEST_INVALID, e)

    return replace(result, workspace=workspace)
