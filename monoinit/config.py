"""
config.py

Responsibility: Load scaffolding configuration into a deterministic, typed model.

Configuration comes from (lowest to highest precedence):
- built-in defaults,
- an optional YAML file (`--config`),
- CLI overrides applied by `cli.py` via `Config.with_overrides`.

The package manager in use is modelled as an explicit `ToolKind` value that is
resolved once and passed to every component, instead of being read from ambient state.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    pass


class ToolKind(str, enum.Enum):
    """Package manager vocabulary used for install/uninstall and script rewriting."""

    NPM = "npm"
    YARN = "yarn"

    @property
    def command(self) -> str:
        # yarn is invoked through `yarnpkg` to avoid clashing with Hadoop's `yarn`.
        return "yarnpkg" if self is ToolKind.YARN else "npm"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def lockfile(self) -> str:
        return "yarn.lock" if self is ToolKind.YARN else "package-lock.json"

    @classmethod
    def detect(cls, app_path: str | Path) -> "ToolKind":
        """Yarn is in use when the freshly created app already carries a `yarn.lock`."""
        return cls.YARN if (Path(app_path) / "yarn.lock").exists() else cls.NPM


LEGACY_PRECEDENCE_CHOICES = ("nested", "legacy")

DEFAULT_SCRIPTS: dict[str, str] = {
    "start": "react-scripts start",
    "build": "react-scripts build",
    "test": "react-scripts test",
    "eject": "react-scripts eject",
}

DEFAULT_APP_KEYS: dict[str, Any] = {
    "eslintConfig": {"extends": "react-app"},
    "browserslist": {
        "production": [">0.2%", "not dead", "not op_mini all"],
        "development": [
            "last 1 chrome version",
            "last 1 firefox version",
            "last 1 safari version",
        ],
    },
}


@dataclass(frozen=True)
class Config:
    """Scaffolding configuration shared by every pipeline stage."""

    tool: ToolKind | None = None
    verbose: bool = False
    commit_message: str = "Initialize project using Create React App"
    client_dir: str = "client"
    workspace_tool: str = "lerna"
    framework_packages: tuple[str, ...] = ("react", "react-dom")
    default_scripts: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SCRIPTS))
    app_defaults: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_APP_KEYS))
    legacy_precedence: str = "nested"

    def resolve_tool(self, app_path: str | Path) -> ToolKind:
        return self.tool if self.tool is not None else ToolKind.detect(app_path)

    def with_overrides(self, **overrides: Any) -> "Config":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _parse_tool(raw: Any) -> ToolKind | None:
    if raw is None:
        return None
    try:
        return ToolKind(str(raw).strip().lower())
    except ValueError as e:
        raise ConfigError(f"`tool` must be one of: npm, yarn (got {raw!r})") from e


def _expect_mapping(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigError(f"`{key}` must be an object/mapping when provided.")
    return value


def config_from_mapping(data: dict[str, Any]) -> Config:
    """Validate a raw mapping (e.g. parsed YAML) into a `Config`."""
    known = {
        "tool",
        "verbose",
        "commit_message",
        "client_dir",
        "workspace_tool",
        "framework_packages",
        "default_scripts",
        "app_defaults",
        "legacy_precedence",
    }
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    defaults = Config()
    changes: dict[str, Any] = {"tool": _parse_tool(data.get("tool"))}

    if "verbose" in data:
        changes["verbose"] = bool(data["verbose"])

    for key in ("commit_message", "client_dir", "workspace_tool"):
        if data.get(key) is not None:
            value = str(data[key]).strip()
            if not value:
                raise ConfigError(f"`{key}` must not be empty.")
            changes[key] = value

    framework = data.get("framework_packages")
    if framework is not None:
        if not isinstance(framework, list) or not all(isinstance(x, str) for x in framework):
            raise ConfigError("`framework_packages` must be a list of package names.")
        changes["framework_packages"] = tuple(framework)

    scripts = _expect_mapping(data, "default_scripts")
    if scripts is not None:
        changes["default_scripts"] = {str(k): str(v) for k, v in scripts.items()}

    app_defaults = _expect_mapping(data, "app_defaults")
    if app_defaults is not None:
        changes["app_defaults"] = dict(app_defaults)

    precedence = data.get("legacy_precedence")
    if precedence is not None:
        if precedence not in LEGACY_PRECEDENCE_CHOICES:
            raise ConfigError(
                f"`legacy_precedence` must be one of: {', '.join(LEGACY_PRECEDENCE_CHOICES)} (got {precedence!r})"
            )
        changes["legacy_precedence"] = precedence

    return replace(defaults, **changes)


def load_config(config_path: str | Path | None) -> Config:
    """
    Load a YAML configuration file. A missing `config_path` (None) yields the defaults.
    """
    if config_path is None:
        return Config()
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")
    return config_from_mapping(data)
