"""
Approval ledger reconciliation.

Each adjudication is one load -> mutate -> save cycle against the ledger
file. Either the full new ledger is written or nothing is.

Approval has two modes:
- selective: only the named files move to approved
- global: every discovered pending file moves to approved, and the
  backlog of new files is drained into approved

Rejection is always selective. Rejecting with no targets still refreshes
the ledger metadata.

Concurrent adjudications against the same ledger file are not
coordinated; the last writer wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from .discovery import DEFAULT_IMAGE_EXTENSIONS, discover_pending
from .ledger import (
    DEFAULT_SOURCE,
    ApprovalMetadata,
    ArtifactLedger,
    LedgerIOError,
    LedgerMeta,
    load_ledger,
    save_ledger,
)


logger = logging.getLogger(__name__)


@dataclass
class AdjudicationResult:
    """Files whose status an adjudication asserted, in processing order."""

    approved_files: list[str] = field(default_factory=list)
    rejected_files: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.approved_files or self.rejected_files)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "approved_files": list(self.approved_files),
            "rejected_files": list(self.rejected_files),
        }


class ApprovalEngine:
    """Applies approve/reject adjudications to one ledger file."""

    def __init__(
        self,
        ledger_path: Path,
        *,
        report_path: Path | None = None,
        diff_dir: Path | None = None,
        source: str = DEFAULT_SOURCE,
        image_extensions: Sequence[str] = DEFAULT_IMAGE_EXTENSIONS,
    ):
        self.ledger_path = ledger_path
        self.report_path = report_path
        self.diff_dir = diff_dir
        self.source = source
        self.image_extensions = tuple(image_extensions)

    def _begin(self, operation: str, metadata: ApprovalMetadata, now: datetime | None) -> ArtifactLedger:
        try:
            self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LedgerIOError(operation, e) from e

        ledger = load_ledger(self.ledger_path)
        # Replaced wholesale, never merged with the previous provenance
        ledger.meta = LedgerMeta.from_metadata(metadata, source=self.source, now=now)
        return ledger

    def _commit(self, operation: str, ledger: ArtifactLedger) -> None:
        try:
            save_ledger(self.ledger_path, ledger)
        except OSError as e:
            raise LedgerIOError(operation, e) from e

    def approve(
        self,
        targets: Sequence[str],
        metadata: ApprovalMetadata,
        *,
        now: datetime | None = None,
    ) -> AdjudicationResult:
        """
        Approve `targets`, or every pending file when `targets` is empty.

        Re-approving an already approved file is reported again but leaves
        the ledger unchanged.

        Raises:
            LedgerIOError: If the ledger cannot be written
        """
        ledger = self._begin("approval", metadata, now)
        result = AdjudicationResult()

        if targets:
            for name in targets:
                ledger.approve(name)
                result.approved_files.append(name)
        else:
            pending = discover_pending(
                self.report_path,
                self.diff_dir,
                image_extensions=self.image_extensions,
            )
            for name in pending:
                ledger.approve(name)
                result.approved_files.append(name)

            for name in ledger.new:
                if ledger.approve(name):
                    result.approved_files.append(name)
            ledger.new.clear()

        self._commit("approval", ledger)
        logger.info("Approved %d file(s) in %s", len(result.approved_files), self.ledger_path)
        return result

    def reject(
        self,
        targets: Sequence[str],
        metadata: ApprovalMetadata,
        *,
        now: datetime | None = None,
    ) -> AdjudicationResult:
        """
        Reject `targets`.

        Raises:
            LedgerIOError: If the ledger cannot be written
        """
        ledger = self._begin("rejection", metadata, now)
        result = AdjudicationResult()

        for name in targets:
            ledger.reject(name)
            result.rejected_files.append(name)

        self._commit("rejection", ledger)
        logger.info("Rejected %d file(s) in %s", len(result.rejected_files), self.ledger_path)
        return result


def apply_approval(
    targets: Sequence[str],
    metadata: ApprovalMetadata,
    ledger_path: Path,
    report_path: Path | None = None,
    diff_dir: Path | None = None,
    *,
    source: str = DEFAULT_SOURCE,
    image_extensions: Sequence[str] = DEFAULT_IMAGE_EXTENSIONS,
    now: datetime | None = None,
) -> AdjudicationResult:
    """Approve files in the ledger at `ledger_path`. See ApprovalEngine.approve."""
    engine = ApprovalEngine(
        ledger_path,
        report_path=report_path,
        diff_dir=diff_dir,
        source=source,
        image_extensions=image_extensions,
    )
    return engine.approve(targets, metadata, now=now)


def apply_rejection(
    targets: Sequence[str],
    metadata: ApprovalMetadata,
    ledger_path: Path,
    report_path: Path | None = None,
    *,
    source: str = DEFAULT_SOURCE,
    now: datetime | None = None,
) -> AdjudicationResult:
    """Reject files in the ledger at `ledger_path`. See ApprovalEngine.reject."""
    engine = ApprovalEngine(ledger_path, report_path=report_path, source=source)
    return engine.reject(targets, metadata, now=now)
