"""
Persisted approval ledger.

The ledger records which visual artifacts have been approved or rejected,
which are new and still awaiting adjudication, and which baselines should
be deleted, together with provenance for the most recent adjudication.

On disk it is a single JSON object:

    {
      "approved": ["login.png"],
      "rejected": [],
      "new": [],
      "deleted": [],
      "meta": {"author": "...", "timestamp": "...", ...}
    }

INVARIANT: approved and rejected are disjoint, and no set holds a
filename twice. Both are enforced by ArtifactLedger's mutators, not by
callers.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator


logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "GitHub PR Comment"

SET_FIELDS = ("approved", "rejected", "new", "deleted")

_PULL_SEGMENT = re.compile(r"/pull/[^/]+/?.*$")


class LedgerIOError(RuntimeError):
    """Raised when an adjudication cannot persist the ledger."""

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"Failed to process {operation}: {cause}")
        self.operation = operation
        self.cause = cause


class FileSet:
    """
    Insertion-ordered set of filenames.

    Backed by a dict so membership is O(1) and serialization preserves
    the order in which names were first added.
    """

    def __init__(self, items: Iterable[str] = ()):
        self._items: dict[str, None] = dict.fromkeys(items)

    def add(self, name: str) -> bool:
        """Add a name. Returns True if it was not already present."""
        if name in self._items:
            return False
        self._items[name] = None
        return True

    def discard(self, name: str) -> bool:
        """Remove a name. Returns True if it was present."""
        if name not in self._items:
            return False
        del self._items[name]
        return True

    def clear(self) -> None:
        self._items.clear()

    def to_list(self) -> list[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FileSet):
            return self.to_list() == other.to_list()
        if isinstance(other, list):
            return self.to_list() == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"FileSet({self.to_list()!r})"


@dataclass(frozen=True)
class ApprovalMetadata:
    """Caller-supplied provenance for one adjudication."""

    author: str
    pr_url: str
    commit_sha: str


def derive_commit_url(pr_url: str, commit_sha: str) -> str:
    """
    Derive a commit URL from a pull request URL.

        https://github.com/o/r/pull/12 + abc -> https://github.com/o/r/commit/abc
    """
    if not pr_url:
        return ""
    base = _PULL_SEGMENT.sub("", pr_url.rstrip("/"))
    return f"{base}/commit/{commit_sha}"


@dataclass
class LedgerMeta:
    """Provenance of the most recent adjudication."""

    author: str = ""
    timestamp: str = ""
    source: str = ""
    pr_url: str = ""
    commit_sha: str = ""
    commit_url: str = ""

    @classmethod
    def from_metadata(
        cls,
        metadata: ApprovalMetadata,
        *,
        source: str = DEFAULT_SOURCE,
        now: datetime | None = None,
    ) -> LedgerMeta:
        now = now or datetime.now(timezone.utc)
        return cls(
            author=metadata.author,
            timestamp=now.isoformat(),
            source=source,
            pr_url=metadata.pr_url,
            commit_sha=metadata.commit_sha,
            commit_url=derive_commit_url(metadata.pr_url, metadata.commit_sha),
        )

    def is_empty(self) -> bool:
        return not any(self.to_dict().values())

    def to_dict(self) -> dict[str, str]:
        return {
            "author": self.author,
            "timestamp": self.timestamp,
            "source": self.source,
            "pr_url": self.pr_url,
            "commit_sha": self.commit_sha,
            "commit_url": self.commit_url,
        }

    @classmethod
    def from_dict(cls, data: Any) -> LedgerMeta:
        if not isinstance(data, dict):
            return cls()
        return cls(**{key: str(data.get(key) or "") for key in cls().to_dict()})


@dataclass
class ArtifactLedger:
    """Typed view of the approvals file."""

    approved: FileSet = field(default_factory=FileSet)
    rejected: FileSet = field(default_factory=FileSet)
    new: FileSet = field(default_factory=FileSet)
    deleted: FileSet = field(default_factory=FileSet)
    meta: LedgerMeta = field(default_factory=LedgerMeta)

    def approve(self, name: str) -> bool:
        """Move a name into approved. Returns True if approved changed."""
        self.rejected.discard(name)
        return self.approved.add(name)

    def reject(self, name: str) -> bool:
        """Move a name into rejected. Returns True if rejected changed."""
        self.approved.discard(name)
        return self.rejected.add(name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "approved": self.approved.to_list(),
            "rejected": self.rejected.to_list(),
            "new": self.new.to_list(),
            "deleted": self.deleted.to_list(),
            "meta": {} if self.meta.is_empty() else self.meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArtifactLedger:
        """
        Build a ledger from decoded JSON.

        Duplicates collapse to their first occurrence. A name present in
        both approved and rejected is kept as rejected.
        """
        sets = {name: FileSet(_coerce_names(data.get(name))) for name in SET_FIELDS}
        for name in sets["rejected"]:
            sets["approved"].discard(name)
        return cls(**sets, meta=LedgerMeta.from_dict(data.get("meta")))


def _coerce_names(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def load_ledger(path: Path) -> ArtifactLedger:
    """
    Load the ledger at `path`.

    A missing file yields the empty ledger. An unreadable or malformed
    file is logged and also yields the empty ledger.
    """
    if not path.exists():
        return ArtifactLedger()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not read existing approvals file: %s", e)
        return ArtifactLedger()

    if not isinstance(data, dict):
        logger.warning("Could not read existing approvals file: expected a JSON object in %s", path)
        return ArtifactLedger()

    return ArtifactLedger.from_dict(data)


def save_ledger(path: Path, ledger: ArtifactLedger) -> None:
    """
    Write the ledger to `path`, replacing any previous file atomically.

    Errors propagate to the caller.
    """
    serialized = json.dumps(ledger.to_dict(), indent=2) + "\n"

    # Write atomically (write to temp, then replace)
    temp_path = path.with_name(path.name + ".tmp")
    try:
        temp_path.write_text(serialized, encoding="utf-8")
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
