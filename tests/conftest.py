"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from visapprove.approvals.ledger import ApprovalMetadata
from visapprove.config import Config


@pytest.fixture
def metadata() -> ApprovalMetadata:
    """Provenance for a reviewer comment on PR 123."""
    return ApprovalMetadata(
        author="testuser",
        pr_url="https://github.com/owner/repo/pull/123",
        commit_sha="abc123def456",
    )


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    """Empty report directory laid out like a test run's output."""
    path = tmp_path / ".testivai" / "visual-regression" / "report"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def config(report_dir: Path) -> Config:
    """Config pointing every path into report_dir."""
    return Config(
        approvals_path=report_dir / "approvals.json",
        report_path=report_dir / "report.json",
        diff_directory=report_dir / "diff",
    )


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))
