"""Tests for manifest merging and I/O."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from monoinit.config import Config, ToolKind
from monoinit.manifest import (
    KeyPolicy,
    ManifestError,
    apply_app_defaults,
    is_framework_installed,
    merge,
    read_manifest,
    rewrite_npm_commands,
    write_manifest,
)


class TestMerge:
    def test_yarn_scenario(self) -> None:
        app = {"dependencies": {}, "scripts": {}}
        template = {"dependencies": {"left-pad": "1.0.0"}, "scripts": {"test": "npm run jest"}}

        result = merge(app, template, KeyPolicy(), ToolKind.YARN)

        assert result["dependencies"]["left-pad"] == "1.0.0"
        assert result["scripts"]["test"] == "yarn jest"

    def test_ignored_keys_keep_app_value(self) -> None:
        app = {"name": "my-app", "private": True}
        template = {"name": "cra-template", "private": False, "license": "MIT"}

        result = merge(app, template)

        assert result["name"] == "my-app"
        assert result["private"] is True
        assert "license" not in result

    def test_custom_ignored_key(self) -> None:
        policy = KeyPolicy(ignored=frozenset({"jest"}))
        result = merge({"jest": {"a": 1}}, {"jest": {"b": 2}, "name": "x"}, policy)
        assert result["jest"] == {"a": 1}
        # name is no longer in the ignored set, so it is replaced
        assert result["name"] == "x"

    def test_dependency_union_template_wins(self) -> None:
        app = {"dependencies": {"react": "^17.0.0", "lodash": "4.0.0"}}
        template = {"dependencies": {"react": "^18.2.0", "left-pad": "1.0.0"}}

        result = merge(app, template)

        assert result["dependencies"] == {"react": "^18.2.0", "lodash": "4.0.0", "left-pad": "1.0.0"}

    def test_other_keys_replace_wholesale(self) -> None:
        app = {"eslintConfig": {"extends": "react-app", "rules": {"x": 1}}}
        template = {"eslintConfig": {"extends": "airbnb"}, "proxy": "http://localhost:4000"}

        result = merge(app, template)

        assert result["eslintConfig"] == {"extends": "airbnb"}
        assert result["proxy"] == "http://localhost:4000"

    def test_npm_scripts_untouched(self) -> None:
        result = merge({"scripts": {"a": "npm run build"}}, {}, tool=ToolKind.NPM)
        assert result["scripts"]["a"] == "npm run build"

    def test_yarn_rewrites_only_first_command(self) -> None:
        app = {"scripts": {"ci": "npm run lint && npm test", "start": "npm start"}}
        result = merge(app, {}, tool=ToolKind.YARN)
        assert result["scripts"] == {"ci": "yarn lint && npm test", "start": "yarn start"}

    def test_inputs_not_mutated(self) -> None:
        app = {"dependencies": {"a": "1"}, "scripts": {}}
        template = {"dependencies": {"b": "2"}}
        merge(app, template)
        assert app == {"dependencies": {"a": "1"}, "scripts": {}}
        assert template == {"dependencies": {"b": "2"}}

    def test_merged_key_must_be_mapping(self) -> None:
        with pytest.raises(ManifestError):
            merge({"dependencies": ["react"]}, {"dependencies": {"a": "1"}})


def test_policy_sets_must_be_disjoint() -> None:
    with pytest.raises(ValueError):
        KeyPolicy(ignored=frozenset({"scripts"}), merged=frozenset({"scripts"}))


def test_replaced_keys() -> None:
    policy = KeyPolicy()
    assert policy.replaced_keys({"name": "x", "scripts": {}, "jest": {}, "proxy": ""}) == ["jest", "proxy"]


def test_rewrite_npm_commands_all_occurrences() -> None:
    text = "npm start, then npm run build"
    assert rewrite_npm_commands(text, ToolKind.YARN) == "yarn start, then yarn build"
    assert rewrite_npm_commands(text, ToolKind.NPM) == text


def test_apply_app_defaults_keeps_app_scripts() -> None:
    result = apply_app_defaults({"scripts": {"start": "custom start"}}, Config())

    assert result["scripts"]["start"] == "custom start"
    assert result["scripts"]["build"] == "react-scripts build"
    assert result["eslintConfig"] == {"extends": "react-app"}
    assert result["dependencies"] == {}


def test_is_framework_installed() -> None:
    assert is_framework_installed({"dependencies": {"react": "1", "react-dom": "1"}}, ["react", "react-dom"])
    assert not is_framework_installed({"dependencies": {"react": "1"}}, ["react", "react-dom"])
    assert not is_framework_installed({}, ["react"])


class TestManifestIO:
    def test_round_trip(self, tmp_path: Path) -> None:
        data = {"name": "app", "version": "0.1.0", "private": True, "scripts": {"t": "jest"}, "n": [1, None, 2.5]}
        path = tmp_path / "package.json"

        write_manifest(path, data)

        assert read_manifest(path) == data
        assert path.read_bytes().endswith(os.linesep.encode())

    def test_missing_with_default(self, tmp_path: Path) -> None:
        default = {"name": "x"}
        loaded = read_manifest(tmp_path / "missing.json", default=default)
        loaded["name"] = "y"
        assert default == {"name": "x"}

    def test_missing_without_default(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError):
            read_manifest(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{not json")
        with pytest.raises(ManifestError):
            read_manifest(path)
