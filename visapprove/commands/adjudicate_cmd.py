"""Approve/reject CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console
from rich.table import Table

from ..approvals.engine import AdjudicationResult
from ..approvals.ledger import ApprovalMetadata, LedgerIOError
from ..baseline import BaselineSyncError
from ..command import Command, CommandKind
from ..config import Config
from ..event import EventError, load_event
from ..reporter import pages_url_for, render_summary
from ..vcs import GitError
from ..workflow import Committer, adjudicate, run_workflow


def _print_result(console: Console, result: AdjudicationResult) -> None:
    if not result.changed:
        console.print("No files changed status", style="dim")
        return

    table = Table(title="Adjudicated files")
    table.add_column("file", style="cyan")
    table.add_column("status")
    for name in result.approved_files:
        table.add_row(name, "[green]approved[/green]")
    for name in result.rejected_files:
        table.add_row(name, "[red]rejected[/red]")
    console.print(table)


def run_adjudicate(
    config: Config,
    kind: CommandKind,
    files: Sequence[str],
    metadata: ApprovalMetadata,
    *,
    output_json: bool = False,
) -> int:
    """Approve or reject `files` directly, without a review comment.

    Returns:
        Exit code (0 = success, 1 = ledger could not be written)
    """
    err = Console(stderr=True)
    command = Command(kind=kind, targets=tuple(files))
    try:
        result = adjudicate(command, metadata, config)
    except LedgerIOError as e:
        err.print(str(e), style="bold red")
        return 1

    if output_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_result(Console(), result)
    return 0


def _emit_outputs(outputs: dict[str, Any], output_file: Path | None) -> None:
    """Print action outputs as `name=value` lines, appending them to `output_file` too."""
    lines = [
        f"{name}={value if isinstance(value, str) else json.dumps(value)}"
        for name, value in outputs.items()
    ]
    for line in lines:
        print(line)
    if output_file is not None:
        with output_file.open("a", encoding="utf-8") as f:
            f.write("".join(line + "\n" for line in lines))


def run_handle_comment(
    config: Config,
    event_path: Path,
    commit_sha: str,
    *,
    server_url: str = "https://github.com",
    sync: bool = True,
    commit: bool = True,
    summary_out: Path | None = None,
    output_file: Path | None = None,
) -> int:
    """Process a review comment event end to end.

    Prints the action outputs as `name=value` lines and, when
    `output_file` is given (normally $GITHUB_OUTPUT), appends them there.

    Returns:
        Exit code (0 = success or no command, 1 = failure)
    """
    err = Console(stderr=True)
    try:
        event = load_event(event_path, server_url=server_url)
        outcome = run_workflow(
            event.body,
            event.metadata(commit_sha),
            config,
            committer=Committer(name=event.author, email=event.committer_email),
            sync=sync,
            commit=commit,
        )
    except (EventError, LedgerIOError, BaselineSyncError, GitError) as e:
        err.print(f"Action failed: {e}", style="bold red")
        try:
            _emit_outputs({"result": "failure"}, output_file)
        except OSError as write_error:
            err.print(f"Could not write action outputs: {write_error}", style="bold red")
        return 1

    try:
        _emit_outputs(outcome.outputs(), output_file)
    except OSError as e:
        err.print(f"Could not write action outputs: {e}", style="bold red")
        return 1

    if summary_out is not None and outcome.result is not None:
        pages_url = pages_url_for(event.owner, event.repo, event.pr_number)
        try:
            summary_out.parent.mkdir(parents=True, exist_ok=True)
            summary_out.write_text(render_summary(outcome.result, pages_url=pages_url), encoding="utf-8")
        except OSError as e:
            err.print(f"Could not write summary to {summary_out}: {e}", style="bold red")
            return 1
        err.print(f"Summary written to {summary_out}", style="dim")

    return 0
