"""
Adjudication audit trail.

The approvals file only keeps the latest provenance; this log keeps every
adjudication as one JSON line so earlier decisions stay attributable:

- Who adjudicated, from which pull request and commit
- Which files were approved or rejected
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .approvals.engine import AdjudicationResult
from .approvals.ledger import ApprovalMetadata


@dataclass
class AuditEntry:
    """A single audit log entry."""
    timestamp: str
    operation: str
    author: str
    approved_files: list[str] = field(default_factory=list)
    rejected_files: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "operation": self.operation,
            "author": self.author,
            "approved_files": self.approved_files,
            "rejected_files": self.rejected_files,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            timestamp=data["timestamp"],
            operation=data["operation"],
            author=data.get("author", ""),
            approved_files=list(data.get("approved_files", [])),
            rejected_files=list(data.get("rejected_files", [])),
            metadata=data.get("metadata", {}),
        )


def log_adjudication(
    log_path: Path,
    operation: str,
    result: AdjudicationResult,
    metadata: ApprovalMetadata,
) -> AuditEntry:
    """
    Append an adjudication to the audit log.

    Args:
        log_path: Path to the audit log file
        operation: "approval" or "rejection"
        result: Files the adjudication approved or rejected
        metadata: Provenance of the adjudication

    Returns:
        The created audit entry
    """
    entry = AuditEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        author=metadata.author,
        approved_files=list(result.approved_files),
        rejected_files=list(result.rejected_files),
        metadata={"pr_url": metadata.pr_url, "commit_sha": metadata.commit_sha},
    )

    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Append as JSON Lines format (one JSON object per line)
    with log_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(entry.to_dict()) + "\n")

    return entry


def read_audit_log(log_path: Path, last_n: int | None = None) -> list[AuditEntry]:
    """
    Read entries from the audit log.

    Args:
        log_path: Path to the audit log file
        last_n: If specified, return only the last N entries

    Returns:
        List of audit entries, oldest first
    """
    if not log_path.exists():
        return []

    entries = []
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(AuditEntry.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError):
                    continue  # Skip malformed lines

    if last_n is not None:
        return entries[-last_n:] if last_n > 0 else []
    return entries


def format_audit_entry(entry: AuditEntry) -> str:
    """Format an audit entry for human-readable display."""
    lines = [f"[{entry.timestamp}] {entry.operation} by {entry.author}"]

    if entry.approved_files:
        lines.append(f"  Approved: {', '.join(entry.approved_files)}")
    if entry.rejected_files:
        lines.append(f"  Rejected: {', '.join(entry.rejected_files)}")

    for key, value in entry.metadata.items():
        lines.append(f"  {key}: {value}")

    return "\n".join(lines)
