from __future__ import annotations

from pathlib import Path

import pytest

from conftest import read_json, write_json
from visapprove import workflow
from visapprove.approvals.engine import AdjudicationResult
from visapprove.approvals.ledger import ApprovalMetadata, LedgerIOError
from visapprove.audit_log import format_audit_entry, read_audit_log
from visapprove.command import Command, CommandKind
from visapprove.config import Config
from visapprove.reporter import pages_url_for, render_summary
from visapprove.workflow import Committer, adjudicate, run_workflow


class Recorder:
    def __init__(self, returns=True):
        self.calls: list[tuple] = []
        self.returns = returns

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.returns


@pytest.fixture
def side_effects(monkeypatch: pytest.MonkeyPatch) -> dict[str, Recorder]:
    recorders = {"sync": Recorder(), "commit": Recorder()}
    monkeypatch.setattr(workflow, "sync_baselines", recorders["sync"])
    monkeypatch.setattr(workflow, "commit_and_push", recorders["commit"])
    return recorders


def test_comment_without_command_has_no_side_effects(
    config: Config, metadata: ApprovalMetadata, side_effects: dict[str, Recorder]
) -> None:
    outcome = run_workflow("Looks good to me", metadata, config)

    assert outcome.command is None
    assert outcome.outputs() == {"approved-files": [], "rejected-files": [], "result": "skipped"}
    assert not config.approvals_path.exists()
    assert side_effects["sync"].calls == []
    assert side_effects["commit"].calls == []


def test_approval_syncs_and_commits(
    config: Config, metadata: ApprovalMetadata, side_effects: dict[str, Recorder]
) -> None:
    outcome = run_workflow("/approve-visuals login.png", metadata, config)

    assert outcome.command == Command(CommandKind.APPROVE, ("login.png",))
    assert outcome.synced is True
    assert outcome.committed is True
    assert outcome.outputs()["approved-files"] == ["login.png"]
    assert read_json(config.approvals_path)["approved"] == ["login.png"]

    assert side_effects["sync"].calls == [((config.approvals_path,), {"executable": "testivai"})]
    (args, kwargs), = side_effects["commit"].calls
    assert args == ("Update visual regression approvals", "testuser", "testuser@users.noreply.github.com")


def test_rejection_commits_without_sync(
    config: Config, metadata: ApprovalMetadata, side_effects: dict[str, Recorder]
) -> None:
    outcome = run_workflow("/reject-visuals profile.png", metadata, config, committer=Committer("bot", "bot@x"))

    assert outcome.result is not None
    assert outcome.result.rejected_files == ["profile.png"]
    assert outcome.synced is False
    assert side_effects["sync"].calls == []
    (args, _), = side_effects["commit"].calls
    assert args[1:] == ("bot", "bot@x")


def test_sync_and_commit_can_be_disabled(
    config: Config, metadata: ApprovalMetadata, side_effects: dict[str, Recorder]
) -> None:
    outcome = run_workflow("/approve-visuals a.png", metadata, config, sync=False, commit=False)

    assert outcome.result is not None
    assert outcome.result.approved_files == ["a.png"]
    assert side_effects["sync"].calls == []
    assert side_effects["commit"].calls == []


def test_ledger_failure_stops_before_side_effects(
    tmp_path: Path, metadata: ApprovalMetadata, side_effects: dict[str, Recorder]
) -> None:
    ledger_dir = tmp_path / "approvals.json"
    ledger_dir.mkdir()
    config = Config(approvals_path=ledger_dir)

    with pytest.raises(LedgerIOError):
        run_workflow("/approve-visuals a.png", metadata, config)

    assert side_effects["sync"].calls == []
    assert side_effects["commit"].calls == []


def test_adjudications_are_audited(config: Config, metadata: ApprovalMetadata) -> None:
    write_json(config.report_path, {"tests": [{"status": "failed", "diffFile": "t1.png"}]})

    adjudicate(Command(CommandKind.APPROVE), metadata, config)
    adjudicate(Command(CommandKind.REJECT, ("t1.png",)), metadata, config)

    entries = read_audit_log(config.audit_log_path)
    assert [e.operation for e in entries] == ["approval", "rejection"]
    assert entries[0].approved_files == ["t1.png"]
    assert entries[1].rejected_files == ["t1.png"]
    assert entries[1].metadata["commit_sha"] == "abc123def456"

    assert [e.operation for e in read_audit_log(config.audit_log_path, last_n=1)] == ["rejection"]
    assert "rejection by testuser" in format_audit_entry(entries[1])
    assert "Rejected: t1.png" in format_audit_entry(entries[1])


def test_audit_log_skips_malformed_lines(tmp_path: Path) -> None:
    log_path = tmp_path / "adjudications.log"
    log_path.write_text(
        '{"timestamp": "t", "operation": "approval", "author": "a"}\nnot json\n[1]\n\n',
        encoding="utf-8",
    )
    entries = read_audit_log(log_path)
    assert len(entries) == 1
    assert entries[0].author == "a"


# -----------------------------------------------------------------------------
# Summary comment
# -----------------------------------------------------------------------------


def test_render_summary_counts_and_instructions() -> None:
    body = render_summary(
        AdjudicationResult(approved_files=["a.png", "b.png"], rejected_files=["c.png"]),
        pages_url=pages_url_for("owner", "repo", 7),
    )

    assert "[View Full Report](https://owner.github.io/repo/pr-7/)" in body
    assert "2 file(s) approved" in body
    assert "1 file(s) rejected" in body
    assert "`/approve-visuals filename.png`" in body
    assert "`/reject-visuals filename.png`" in body


def test_render_summary_without_result() -> None:
    body = render_summary(None)
    assert "### Summary" not in body
    assert "View Full Report" not in body
    assert "`/approve-visuals`" in body


def test_render_summary_with_no_changes() -> None:
    assert "No files changed status" in render_summary(AdjudicationResult())
