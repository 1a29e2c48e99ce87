"""
renderer.py

Responsibility: Materialize a template package's `template/` tree into the app directory.

Rules:
- Walk template files in sorted order to ensure deterministic output.
- Copy files byte-for-byte, creating parent directories and preserving permissions.
- Reconcile files the app already had (README, gitignore) after copying.

This module intentionally does NOT know about package managers beyond `ToolKind`,
git, or CLI parsing.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from monoinit.config import ToolKind
from monoinit.manifest import rewrite_npm_commands

logger = logging.getLogger(__name__)

TEMPLATE_DIR_NAME = "template"


class RenderError(RuntimeError):
    pass


class TemplateMissingError(RenderError):
    pass


@dataclass(frozen=True)
class MaterializeResult:
    copied_files: int
    readme_renamed: bool
    gitignore_appended: bool
    readme_rewritten: bool


def _iter_template_files(template_dir: Path) -> list[Path]:
    """
    Return all files under template_dir, in deterministic lexicographic order
    (relative path ordering).
    """
    files: list[Path] = []
    for root, _dirs, filenames in os.walk(template_dir):
        root_path = Path(root)
        for name in filenames:
            files.append(root_path / name)
    files.sort(key=lambda p: str(p.relative_to(template_dir)).replace(os.sep, "/"))
    return files


def _copy_tree(template_dir: Path, destination_dir: Path) -> int:
    copied = 0
    for src_path in _iter_template_files(template_dir):
        dst_path = destination_dir / src_path.relative_to(template_dir)
        dst_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_path, dst_path)
        copied += 1
    return copied


def reconcile_gitignore(root: str | Path) -> bool:
    """
    Turn a copied `gitignore` into `.gitignore`.

    Templates ship the file without the dot so packaging does not rename it to
    `.npmignore`. Returns True when the content was appended to an existing `.gitignore`.
    """
    root = Path(root)
    source = root / "gitignore"
    target = root / ".gitignore"
    if not source.exists():
        return False
    if target.exists():
        with target.open("ab") as fh:
            fh.write(source.read_bytes())
        source.unlink()
        return True
    source.rename(target)
    return False


def rewrite_readme(root: str | Path, tool: ToolKind) -> bool:
    """
    Best-effort: point README commands at yarn. Returns False (and logs) when the
    README cannot be read or written; the npm wording is then left in place.
    """
    if tool is not ToolKind.YARN:
        return False
    readme = Path(root) / "README.md"
    try:
        text = readme.read_text(encoding="utf-8")
        readme.write_text(rewrite_npm_commands(text, tool), encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not update README commands for yarn: %s", e)
        return False
    return True


def materialize(
    *,
    template_path: str | Path,
    destination_dir: str | Path,
    tool: ToolKind = ToolKind.NPM,
) -> MaterializeResult:
    """
    Copy `<template_path>/template/` into destination_dir.

    Raises TemplateMissingError before touching anything if the tree does not exist.
    """
    tpl_dir = Path(template_path).resolve() / TEMPLATE_DIR_NAME
    dst_dir = Path(destination_dir).resolve()

    if not tpl_dir.is_dir():
        raise TemplateMissingError(f"Could not locate supplied template: {tpl_dir}")

    readme = dst_dir / "README.md"
    readme_renamed = readme.exists()
    if readme_renamed:
        readme.rename(dst_dir / "README.old.md")

    copied = _copy_tree(tpl_dir, dst_dir)
    logger.debug("Copied %d template files into %s", copied, dst_dir)

    gitignore_appended = reconcile_gitignore(dst_dir)
    readme_rewritten = rewrite_readme(dst_dir, tool)

    return MaterializeResult(
        copied_files=copied,
        readme_renamed=readme_renamed,
        gitignore_appended=gitignore_appended,
        readme_rewritten=readme_rewritten,
    )
