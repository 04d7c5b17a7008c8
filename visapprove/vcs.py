"""Commit and push the updated ledger with git."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence


logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when a git command fails."""


def _git(args: Sequence[str], cwd: Path | None) -> str:
    try:
        completed = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True)
    except OSError as e:
        raise GitError(f"Git operation failed: {e}") from e
    if completed.returncode != 0:
        raise GitError(f"Git operation failed: git {' '.join(args)}: {completed.stderr.strip()}")
    return completed.stdout


def has_changes(cwd: Path | None = None) -> bool:
    """
    Whether the working tree has anything to commit.

    If the status check itself fails, changes are assumed.
    """
    try:
        return bool(_git(["status", "--porcelain"], cwd).strip())
    except GitError as e:
        logger.warning("Failed to check Git status: %s", e)
        return True


def commit_and_push(
    message: str,
    committer_name: str,
    committer_email: str,
    *,
    cwd: Path | None = None,
) -> bool:
    """
    Commit all changes and push them.

    Returns:
        True if a commit was pushed, False if there was nothing to commit

    Raises:
        GitError: If configuring, committing or pushing fails
    """
    logger.info("Setting Git user to %s <%s>", committer_name, committer_email)
    _git(["config", "user.name", committer_name], cwd)
    _git(["config", "user.email", committer_email], cwd)

    if not has_changes(cwd):
        logger.info("No changes to commit")
        return False

    _git(["add", "."], cwd)
    logger.info("Committing changes: %s", message)
    _git(["commit", "-m", message], cwd)
    logger.info("Pushing changes to remote")
    _git(["push"], cwd)
    return True
