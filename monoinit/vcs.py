"""
vcs.py

Responsibility: Create the baseline commit for a new app.

An existing git or Mercurial repository is never touched. If the commit fails the
freshly created `.git` directory is removed, so the app never ends up half-initialized.
"""

from __future__ import annotations

import enum
import logging
import shutil
from pathlib import Path

from monoinit.commands import CommandRunner

logger = logging.getLogger(__name__)


class VCSState(str, enum.Enum):
    NO_REPO = "no_repo"
    ALREADY_REPO = "already_repo"
    INITIALIZED = "initialized"
    COMMITTED = "committed"
    COMMIT_FAILED_CLEANED = "commit_failed_cleaned"


def is_in_git_repository(runner: CommandRunner, cwd: Path) -> bool:
    return runner.run("git", ["rev-parse", "--is-inside-work-tree"], cwd=cwd, quiet=True) == 0


def is_in_mercurial_repository(runner: CommandRunner, cwd: Path) -> bool:
    return runner.run("hg", ["--cwd", ".", "root"], cwd=cwd, quiet=True) == 0


def detect(runner: CommandRunner, cwd: Path) -> bool:
    return is_in_git_repository(runner, cwd) or is_in_mercurial_repository(runner, cwd)


def try_init(runner: CommandRunner, cwd: Path) -> VCSState:
    if runner.run("git", ["--version"], cwd=cwd, quiet=True) != 0:
        logger.warning("Git repo not initialized: git is not available")
        return VCSState.NO_REPO
    if detect(runner, cwd):
        logger.debug("Existing repository detected at %s; skipping git init", cwd)
        return VCSState.ALREADY_REPO
    if runner.run("git", ["init"], cwd=cwd, quiet=True) != 0:
        logger.warning("Git repo not initialized: `git init` failed")
        return VCSState.NO_REPO
    logger.info("Initialized a git repository.")
    return VCSState.INITIALIZED


def remove_repository(cwd: Path) -> None:
    git_dir = cwd / ".git"
    try:
        shutil.rmtree(git_dir)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", git_dir, e)


def try_commit(runner: CommandRunner, cwd: Path, message: str) -> VCSState:
    """
    Stage everything and commit. On failure (e.g. no author identity configured) the
    `.git` directory is removed.
    """
    if (
        runner.run("git", ["add", "-A"], cwd=cwd, quiet=True) == 0
        and runner.run("git", ["commit", "-m", message], cwd=cwd, quiet=True) == 0
    ):
        logger.info("Created git commit.")
        return VCSState.COMMITTED

    logger.warning("Git commit not created")
    logger.warning("Removing .git directory...")
    remove_repository(cwd)
    return VCSState.COMMIT_FAILED_CLEANED
