"""
descriptor.py

Responsibility: Locate a template package and parse its `template.json` into a
canonical, typed `TemplateDescriptor`.

Optional and deprecated fields are resolved once here, so downstream stages never
inspect the raw JSON shape:
- `package` (preferred) sub-manifest
- root-level `dependencies` / `scripts` (deprecated, folded into `package`)
- `packages` table for the workspace layout
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DESCRIPTOR_NAME = "template.json"

LEGACY_KEYS = ("dependencies", "scripts")

_LEGACY_WARNING = (
    "Root-level `dependencies` and `scripts` keys in `template.json` are deprecated. "
    "This template should be updated to use the new `package` key. "
    "For more information, visit https://cra.link/templates"
)


class DescriptorError(ValueError):
    pass


class TemplateNotFoundError(DescriptorError):
    pass


@dataclass(frozen=True)
class PackageSpec:
    """Dependencies a template declares for one workspace sub-package."""

    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TemplateDescriptor:
    package: dict[str, Any] = field(default_factory=dict)
    packages: dict[str, PackageSpec] = field(default_factory=dict)
    used_legacy_keys: bool = False

    @property
    def package_names(self) -> list[str]:
        return list(self.packages)


def _string_map(raw: Any, where: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DescriptorError(f"`{where}` must be an object/mapping when provided.")
    return {str(k): str(v) for k, v in raw.items()}


def _parse_packages(raw: Any) -> dict[str, PackageSpec]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise DescriptorError("`packages` must be an object/mapping when provided.")
    out: dict[str, PackageSpec] = {}
    for name, entry in raw.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise DescriptorError(f"`packages.{name}` must be an object/mapping.")
        out[str(name)] = PackageSpec(
            dependencies=_string_map(entry.get("dependencies"), f"packages.{name}.dependencies"),
            dev_dependencies=_string_map(entry.get("devDependencies"), f"packages.{name}.devDependencies"),
        )
    return out


def descriptor_from_mapping(data: dict[str, Any], *, legacy_precedence: str = "nested") -> TemplateDescriptor:
    """
    Canonicalize a raw `template.json` mapping.

    With `legacy_precedence="nested"` a key present both at the root and under `package`
    keeps the nested value; `"legacy"` lets the root-level value overwrite it.
    """
    package = data.get("package") or {}
    if not isinstance(package, dict):
        raise DescriptorError("`package` must be an object/mapping when provided.")
    package = dict(package)

    used_legacy = any(key in data for key in LEGACY_KEYS)
    if used_legacy:
        logger.warning(_LEGACY_WARNING)
        for key in LEGACY_KEYS:
            value = data.get(key)
            if not value:
                continue
            if not isinstance(value, dict):
                raise DescriptorError(f"`{key}` must be an object/mapping when provided.")
            if legacy_precedence == "legacy" or key not in package:
                package[key] = dict(value)

    return TemplateDescriptor(
        package=package,
        packages=_parse_packages(data.get("packages")),
        used_legacy_keys=used_legacy,
    )


def load_descriptor(template_path: str | Path, *, legacy_precedence: str = "nested") -> TemplateDescriptor:
    """
    Load `template.json` from a template package directory. A template without a
    descriptor is valid and yields an empty descriptor.
    """
    path = Path(template_path) / DESCRIPTOR_NAME
    if not path.exists():
        return TemplateDescriptor()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DescriptorError(f"Template descriptor is not valid JSON: {path}") from e
    if not isinstance(data, dict):
        raise DescriptorError(f"Template descriptor must be a JSON object: {path}")
    return descriptor_from_mapping(data, legacy_precedence=legacy_precedence)


@dataclass(frozen=True)
class TemplateLocation:
    path: Path
    # False for a local template directory that was never added as a dependency.
    installed: bool = True


def locate_template(template_name: str, app_path: str | Path) -> TemplateLocation:
    """
    Resolve a template package directory the way node resolves `<name>/package.json`:
    walk from `app_path` upwards looking in each `node_modules`. An existing directory
    path is accepted as-is (local templates); a relative one is taken relative to `app_path`.
    """
    direct = Path(template_name).expanduser()
    if direct.is_absolute() or template_name.startswith("."):
        candidate = direct if direct.is_absolute() else (Path(app_path) / direct)
        if candidate.is_dir():
            return TemplateLocation(candidate.resolve(), installed=False)

    start = Path(app_path).resolve()
    for base in (start, *start.parents):
        candidate = base / "node_modules" / template_name
        if (candidate / "package.json").exists():
            return TemplateLocation(candidate)
    raise TemplateNotFoundError(f"Cannot resolve template package {template_name!r} from {start}")
