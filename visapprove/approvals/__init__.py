"""
Approval ledger reconciliation.

This package owns the persisted approvals file and the rules for moving
visual artifacts between its sets:

- Typed ledger with insertion-ordered filename sets
- Discovery of pending artifacts (report first, diff directory second)
- Approve/reject adjudications as a single load -> mutate -> save cycle

Invariants:
- approved and rejected never share a filename
- no set holds a filename twice
- meta always describes the most recent adjudication only
"""

from .discovery import (
    DEFAULT_IMAGE_EXTENSIONS,
    DirectoryDiscovery,
    ReportDiscovery,
    discover_pending,
    first_non_empty,
)
from .engine import AdjudicationResult, ApprovalEngine, apply_approval, apply_rejection
from .ledger import (
    ApprovalMetadata,
    ArtifactLedger,
    FileSet,
    LedgerIOError,
    LedgerMeta,
    derive_commit_url,
    load_ledger,
    save_ledger,
)

__all__ = [
    # Ledger
    "ApprovalMetadata",
    "ArtifactLedger",
    "FileSet",
    "LedgerIOError",
    "LedgerMeta",
    "derive_commit_url",
    "load_ledger",
    "save_ledger",
    # Discovery
    "DEFAULT_IMAGE_EXTENSIONS",
    "DirectoryDiscovery",
    "ReportDiscovery",
    "discover_pending",
    "first_non_empty",
    # Engine
    "AdjudicationResult",
    "ApprovalEngine",
    "apply_approval",
    "apply_rejection",
]
