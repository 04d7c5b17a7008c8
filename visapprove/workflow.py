"""
End-to-end handling of one review comment.

    comment -> command -> adjudication -> baseline sync -> commit/push

Baseline sync runs only when something was approved. The commit step
runs after every successful adjudication, since metadata changes even
when no file moves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .approvals.engine import AdjudicationResult, ApprovalEngine
from .approvals.ledger import ApprovalMetadata
from .audit_log import log_adjudication
from .baseline import sync_baselines
from .command import Command, CommandKind, parse_comment
from .config import Config
from .vcs import commit_and_push


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Committer:
    name: str
    email: str


@dataclass
class WorkflowOutcome:
    command: Command | None
    result: AdjudicationResult | None = None
    synced: bool = False
    committed: bool = False

    def outputs(self) -> dict[str, Any]:
        """Action outputs: changed files and overall result."""
        result = self.result or AdjudicationResult()
        return {
            "approved-files": list(result.approved_files),
            "rejected-files": list(result.rejected_files),
            "result": "success" if self.command is not None else "skipped",
        }


def engine_for(config: Config) -> ApprovalEngine:
    return ApprovalEngine(
        config.approvals_path,
        report_path=config.report_path,
        diff_dir=config.diff_directory,
        source=config.source,
        image_extensions=config.image_extensions,
    )


def adjudicate(command: Command, metadata: ApprovalMetadata, config: Config) -> AdjudicationResult:
    """
    Apply a parsed command to the configured ledger and record it in the audit log.

    Raises:
        LedgerIOError: If the ledger cannot be written
    """
    engine = engine_for(config)
    if command.kind is CommandKind.APPROVE:
        operation = "approval"
        result = engine.approve(command.targets, metadata)
    else:
        operation = "rejection"
        result = engine.reject(command.targets, metadata)

    try:
        log_adjudication(config.audit_log_path, operation, result, metadata)
    except OSError as e:
        # Ledger is already persisted at this point
        logger.warning("Could not append to audit log %s: %s", config.audit_log_path, e)
    return result


def run_workflow(
    comment: str | None,
    metadata: ApprovalMetadata,
    config: Config,
    *,
    committer: Committer | None = None,
    sync: bool = True,
    commit: bool = True,
    cwd: Path | None = None,
) -> WorkflowOutcome:
    """
    Process one review comment.

    Comments without a command are skipped with no side effects.

    Raises:
        LedgerIOError: If the ledger cannot be written
        BaselineSyncError: If baseline sync fails
        GitError: If committing or pushing fails
    """
    command = parse_comment(comment)
    if command is None:
        logger.info("No valid approval/rejection command found in comment")
        return WorkflowOutcome(command=None)

    logger.info("Detected command: %s", command.describe())
    outcome = WorkflowOutcome(command=command, result=adjudicate(command, metadata, config))

    if sync and outcome.result.approved_files:
        outcome.synced = sync_baselines(config.approvals_path, executable=config.baseline_executable)

    if commit:
        committer = committer or Committer(
            name=metadata.author,
            email=f"{metadata.author}@users.noreply.github.com",
        )
        outcome.committed = commit_and_push(config.commit_message, committer.name, committer.email, cwd=cwd)

    return outcome
