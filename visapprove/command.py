"""
Review comment parsing.

A review comment carries at most one command, which must open the
comment (after surrounding whitespace is stripped):

    /approve-visuals                      approve every pending artifact
    /approve-visuals login.png a/b.png    approve the named artifacts
    /reject-visuals profile.png           reject the named artifacts

Filenames are opaque: no normalization or existence check happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


APPROVE_PREFIX = "/approve-visuals"
REJECT_PREFIX = "/reject-visuals"


class CommandKind(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass(frozen=True)
class Command:
    """A parsed adjudication request."""

    kind: CommandKind
    targets: tuple[str, ...] = ()

    @property
    def is_global(self) -> bool:
        """True when no explicit targets were named."""
        return not self.targets

    def describe(self) -> str:
        scope = ", ".join(self.targets) if self.targets else "all files"
        return f"{self.kind.value} for {scope}"


_PREFIXES: tuple[tuple[str, CommandKind], ...] = (
    (APPROVE_PREFIX, CommandKind.APPROVE),
    (REJECT_PREFIX, CommandKind.REJECT),
)


def parse_comment(text: str | None) -> Command | None:
    """
    Parse a review comment into a Command.

    Returns None for empty input or text that does not start with one of
    the command prefixes (matched case-sensitively).
    """
    if not text:
        return None

    normalized = text.strip()
    for prefix, kind in _PREFIXES:
        if normalized.startswith(prefix):
            return Command(kind=kind, targets=_extract_targets(normalized[len(prefix):]))
    return None


def _extract_targets(remainder: str) -> tuple[str, ...]:
    # str.split() with no separator drops empty tokens
    return tuple(remainder.strip().split())
