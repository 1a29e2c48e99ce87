"""
manifest.py

Responsibility: Read, write and merge `package.json` manifests.

`merge()` is a pure transform: it never touches the filesystem and never mutates its
inputs. Callers persist the result with `write_manifest()`.
"""

from __future__ import annotations

import copy
import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from monoinit.config import Config, ToolKind

Manifest = dict[str, Any]

MANIFEST_NAME = "package.json"

_NPM_COMMAND_RE = re.compile(r"(npm run |npm )")


class ManifestError(ValueError):
    pass


IGNORED_KEYS = frozenset(
    {
        "name",
        "version",
        "description",
        "keywords",
        "bugs",
        "license",
        "author",
        "contributors",
        "files",
        "browser",
        "bin",
        "man",
        "directories",
        "repository",
        "peerDependencies",
        "bundledDependencies",
        "optionalDependencies",
        "engineStrict",
        "os",
        "cpu",
        "preferGlobal",
        "private",
        "publishConfig",
    }
)

MERGED_KEYS = frozenset({"dependencies", "scripts"})


@dataclass(frozen=True)
class KeyPolicy:
    """
    How template manifest keys are applied to the app manifest.

    - ignored: never copied from the template
    - merged: app map overlaid with template entries (template wins)
    - anything else present in the template replaces the app value
    """

    ignored: frozenset[str] = IGNORED_KEYS
    merged: frozenset[str] = MERGED_KEYS

    def __post_init__(self) -> None:
        overlap = self.ignored & self.merged
        if overlap:
            raise ValueError(f"Keys cannot be both ignored and merged: {', '.join(sorted(overlap))}")

    def replaced_keys(self, template_manifest: Manifest) -> list[str]:
        return [k for k in template_manifest if k not in self.ignored and k not in self.merged]


def rewrite_npm_commands(text: str, tool: ToolKind, *, count: int = 0) -> str:
    """
    Replace `npm run ` / `npm ` with `yarn ` when yarn is in use.

    Purely textual; `count=0` replaces every occurrence.
    """
    if tool is not ToolKind.YARN:
        return text
    return _NPM_COMMAND_RE.sub("yarn ", text, count=count)


def merge(
    app_manifest: Manifest,
    template_manifest: Manifest,
    policy: KeyPolicy | None = None,
    tool: ToolKind = ToolKind.NPM,
) -> Manifest:
    policy = policy or KeyPolicy()
    result = copy.deepcopy(app_manifest)
    template = copy.deepcopy(template_manifest)

    for key in sorted(policy.merged):
        base = result.get(key) or {}
        overlay = template.get(key) or {}
        if not isinstance(base, dict) or not isinstance(overlay, dict):
            raise ManifestError(f"`{key}` must be an object/mapping in both manifests.")
        result[key] = {**base, **overlay}

    if isinstance(result.get("scripts"), dict):
        # Only the first command prefix in each script is rewritten.
        result["scripts"] = {
            name: rewrite_npm_commands(value, tool, count=1) if isinstance(value, str) else value
            for name, value in result["scripts"].items()
        }

    for key in policy.replaced_keys(template):
        result[key] = template[key]

    return result


def apply_app_defaults(app_manifest: Manifest, config: Config) -> Manifest:
    """
    Seed framework defaults into the app manifest before template merging.

    Default scripts sit underneath any scripts the app already declares; the template can
    still override or replace everything set here.
    """
    result = copy.deepcopy(app_manifest)
    result["dependencies"] = result.get("dependencies") or {}
    result["scripts"] = {**config.default_scripts, **(result.get("scripts") or {})}
    for key, value in config.app_defaults.items():
        result[key] = copy.deepcopy(value)
    return result


def is_framework_installed(manifest: Manifest, packages: Iterable[str]) -> bool:
    dependencies = manifest.get("dependencies") or {}
    return all(name in dependencies for name in packages)


def read_manifest(path: str | Path, default: Manifest | None = None) -> Manifest:
    """
    Load a manifest from disk. When the file is missing, return a copy of `default`
    (or raise if no default was given).
    """
    p = Path(path)
    if not p.exists():
        if default is None:
            raise ManifestError(f"Manifest does not exist: {p}")
        return copy.deepcopy(default)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest is not valid JSON: {p}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest must be a JSON object: {p}")
    return data


def write_manifest(path: str | Path, manifest: Manifest) -> None:
    """Whole-file overwrite, two-space indent, trailing platform newline."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(manifest, indent=2) + os.linesep, encoding="utf-8", newline="")
