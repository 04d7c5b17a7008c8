"""
Tests for the click entry point.

Commands are invoked through CliRunner so option parsing, config
loading and the logging setup run as they do from a shell. stdout and
stderr are checked separately: stdout carries only machine-readable
output.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import read_json, write_json
from visapprove import workflow
from visapprove.cli import cli


OUTPUT_LINE = re.compile(r"^[a-z-]+=")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    for name in ("GITHUB_OUTPUT", "GITHUB_SHA", "GITHUB_EVENT_PATH", "GITHUB_SERVER_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(workflow, "sync_baselines", lambda *a, **k: True)
    monkeypatch.setattr(workflow, "commit_and_push", lambda *a, **k: True)

    # The group callback reconfigures the root logger
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _approve_args(*extra: str) -> list[str]:
    return ["approve", "--author", "alice", "--pr-url", "https://github.com/o/r/pull/1", "--sha", "abc", *extra]


def _event(tmp_path: Path, body: str) -> Path:
    return write_json(
        tmp_path / "event.json",
        {
            "comment": {"body": body, "user": {"login": "alice"}},
            "issue": {"number": 9, "pull_request": {"url": "u"}},
            "repository": {"full_name": "owner/repo"},
        },
    )


# -----------------------------------------------------------------------------
# Machine-readable output
# -----------------------------------------------------------------------------


def test_approve_json_stdout_is_only_json(runner: CliRunner, tmp_path: Path) -> None:
    ledger = tmp_path / "approvals.json"

    result = runner.invoke(cli, _approve_args("--approvals", str(ledger), "--json", "x.png"))

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"approved_files": ["x.png"], "rejected_files": []}
    assert "Approved 1 file(s)" in result.stderr


def test_handle_comment_stdout_is_only_outputs(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(
        cli,
        [
            "handle-comment",
            "--event", str(_event(tmp_path, "/approve-visuals login.png")),
            "--sha", "cafe",
            "--approvals", str(tmp_path / "approvals.json"),
            "--no-sync",
            "--no-commit",
        ],
    )

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines == ['approved-files=["login.png"]', "rejected-files=[]", "result=success"]
    assert all(OUTPUT_LINE.match(line) for line in lines)


def test_handle_comment_appends_to_github_output(runner: CliRunner, tmp_path: Path) -> None:
    gh_output = tmp_path / "gh_output"

    result = runner.invoke(
        cli,
        [
            "handle-comment",
            "--event", str(_event(tmp_path, "/reject-visuals a.png")),
            "--sha", "cafe",
            "--approvals", str(tmp_path / "approvals.json"),
        ],
        env={"GITHUB_OUTPUT": str(gh_output)},
    )

    assert result.exit_code == 0, result.output
    assert gh_output.read_text(encoding="utf-8").splitlines() == [
        "approved-files=[]",
        'rejected-files=["a.png"]',
        "result=success",
    ]


# -----------------------------------------------------------------------------
# Config and path overrides
# -----------------------------------------------------------------------------


def test_missing_config_path_is_a_usage_error(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["--config", str(tmp_path / "absent.toml"), "show"])

    assert result.exit_code == 2
    assert "does not exist" in result.stderr


def test_malformed_config_fails(runner: CliRunner, tmp_path: Path) -> None:
    config_file = tmp_path / "visapprove.toml"
    config_file.write_text("[visapprove\n", encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config_file), "show"])

    assert result.exit_code == 1
    assert "Failed to parse config TOML" in result.stderr


def test_path_overrides_reach_the_engine(runner: CliRunner, tmp_path: Path) -> None:
    report = write_json(tmp_path / "run" / "report.json", {"tests": [{"status": "failed", "diffFile": "t1.png"}]})
    ledger = tmp_path / "custom" / "approvals.json"

    result = runner.invoke(
        cli,
        _approve_args(
            "--approvals", str(ledger),
            "--report", str(report),
            "--diff-dir", str(tmp_path / "run" / "diff"),
            "--json",
        ),
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["approved_files"] == ["t1.png"]
    assert read_json(ledger)["approved"] == ["t1.png"]


def test_override_wins_over_config_file(runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "visapprove.toml").write_text(
        '[visapprove]\napprovals_path = "from-config.json"\n', encoding="utf-8"
    )

    result = runner.invoke(cli, ["reject", "--author", "alice", "--pr-url", "u", "--sha", "abc", "b.png"])
    assert result.exit_code == 0, result.output
    assert read_json(tmp_path / "from-config.json")["rejected"] == ["b.png"]

    override = tmp_path / "override.json"
    result = runner.invoke(
        cli, ["reject", "--author", "alice", "--pr-url", "u", "--sha", "abc", "--approvals", str(override), "c.png"]
    )
    assert result.exit_code == 0, result.output
    assert read_json(override)["rejected"] == ["c.png"]
    assert read_json(tmp_path / "from-config.json")["rejected"] == ["b.png"]
