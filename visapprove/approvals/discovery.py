"""
Pending artifact discovery.

When an approval names no files, the pending set is discovered from the
last test run. Sources are tried in order and the first one that yields
anything wins; sources are never combined:

1. Failed tests in the report that reference a diff file
2. Image files in the diff directory

A source that cannot be read logs a warning and yields nothing.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence


logger = logging.getLogger(__name__)

DEFAULT_IMAGE_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg")


class DiscoveryStrategy(Protocol):
    name: str

    def discover(self) -> list[str]:
        """Return candidate filenames, or an empty list for no result."""
        ...


@dataclass(frozen=True)
class ReportDiscovery:
    """Failed-test diff references from a test report."""

    report_path: Path | None
    name: str = "report"

    def discover(self) -> list[str]:
        if self.report_path is None or not self.report_path.exists():
            return []

        try:
            data = json.loads(self.report_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read report file: %s", e)
            return []

        tests = data.get("tests") if isinstance(data, dict) else None
        if not isinstance(tests, list):
            return []

        files: list[str] = []
        for test in tests:
            if not isinstance(test, dict):
                continue
            diff_file = test.get("diffFile")
            if test.get("status") == "failed" and isinstance(diff_file, str) and diff_file:
                files.append(diff_file)
        return files


@dataclass(frozen=True)
class DirectoryDiscovery:
    """Image files found in the diff directory, sorted by file name.

    Entries are returned in name order rather than raw listing order.
    """

    diff_dir: Path | None
    image_extensions: tuple[str, ...] = DEFAULT_IMAGE_EXTENSIONS
    name: str = "directory"

    def discover(self) -> list[str]:
        if self.diff_dir is None or not self.diff_dir.exists():
            return []

        allowed = {ext.lower() for ext in self.image_extensions}
        try:
            # Sorted so listing order does not depend on the filesystem
            entries = sorted(self.diff_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Could not scan diff directory: %s", e)
            return []

        return [str(self.diff_dir / entry.name) for entry in entries if entry.suffix.lower() in allowed]


def first_non_empty(strategies: Sequence[DiscoveryStrategy]) -> list[str]:
    """Run strategies in order; return the deduplicated result of the first that yields anything."""
    for strategy in strategies:
        files = strategy.discover()
        if files:
            logger.debug("Discovered %d pending file(s) from %s", len(files), strategy.name)
            return list(dict.fromkeys(files))
    return []


def discover_pending(
    report_path: Path | None,
    diff_dir: Path | None,
    *,
    image_extensions: Sequence[str] = DEFAULT_IMAGE_EXTENSIONS,
) -> list[str]:
    """Discover the files awaiting approval after a test run."""
    return first_non_empty(
        [
            ReportDiscovery(report_path),
            DirectoryDiscovery(diff_dir, tuple(image_extensions)),
        ]
    )
