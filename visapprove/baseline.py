"""
Baseline synchronization through the external visual-testing executable.

After approvals are recorded, the executable reads the ledger and
promotes approved screenshots to baselines:

    testivai approve --from <approvals.json>

If the executable is not on PATH it is installed globally with npm,
falling back to yarn.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Sequence


logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "testivai"


class BaselineSyncError(RuntimeError):
    """Raised when the external executable is unavailable or fails."""


def _run(args: Sequence[str]) -> subprocess.CompletedProcess[str]:
    logger.info("Executing: %s", " ".join(args))
    return subprocess.run(list(args), capture_output=True, text=True)


def install_executable(executable: str = DEFAULT_EXECUTABLE) -> None:
    """
    Install the executable globally.

    Raises:
        BaselineSyncError: If neither npm nor yarn succeeds
    """
    logger.info("Installing %s...", executable)
    installers = (
        ("npm", "install", "-g", executable),
        ("yarn", "global", "add", executable),
    )
    for args in installers:
        try:
            completed = _run(args)
        except OSError as e:
            logger.warning("%s installation failed: %s", args[0], e)
            continue
        if completed.returncode == 0:
            return
        logger.warning("%s installation failed: %s", args[0], completed.stderr.strip())

    raise BaselineSyncError(f"Failed to install {executable} using npm or yarn")


def ensure_executable(executable: str = DEFAULT_EXECUTABLE) -> None:
    if shutil.which(executable) is None:
        logger.info("%s not found, attempting to install...", executable)
        install_executable(executable)


def sync_baselines(ledger_path: Path, *, executable: str = DEFAULT_EXECUTABLE) -> bool:
    """
    Promote approved artifacts to baselines.

    Returns:
        True on success, False if there is no ledger to sync from

    Raises:
        BaselineSyncError: If the executable cannot be installed or exits non-zero
    """
    if not ledger_path.exists():
        logger.warning("Approvals file not found at %s", ledger_path)
        return False

    ensure_executable(executable)

    try:
        completed = _run([executable, "approve", "--from", str(ledger_path)])
    except OSError as e:
        raise BaselineSyncError(f"{executable} could not be started: {e}") from e

    if completed.returncode != 0:
        raise BaselineSyncError(
            f"{executable} exited with code {completed.returncode}: {completed.stderr.strip()}"
        )

    logger.info("%s approve command executed successfully", executable)
    if completed.stdout.strip():
        logger.info("Output: %s", completed.stdout.strip())
    return True
