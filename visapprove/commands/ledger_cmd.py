"""Read-only ledger inspection commands."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table

from ..approvals.ledger import SET_FIELDS, load_ledger
from ..audit_log import format_audit_entry, read_audit_log
from ..config import Config


_SET_STYLES = {
    "approved": "green",
    "rejected": "red",
    "new": "yellow",
    "deleted": "dim",
}


def run_show(config: Config, *, output_json: bool = False) -> int:
    ledger = load_ledger(config.approvals_path)

    if output_json:
        print(json.dumps(ledger.to_dict(), indent=2))
        return 0

    console = Console()
    table = Table(title=str(config.approvals_path))
    table.add_column("set", style="magenta")
    table.add_column("count", justify="right")
    table.add_column("files")
    for name in SET_FIELDS:
        files = getattr(ledger, name).to_list()
        table.add_row(name, str(len(files)), "\n".join(files), style=_SET_STYLES[name] if files else None)
    console.print(table)

    if not ledger.meta.is_empty():
        meta = ledger.meta
        console.print(f"last adjudication: {meta.author} at {meta.timestamp}", style="dim")
        if meta.commit_url:
            console.print(f"  commit: {meta.commit_url}", style="dim")
    return 0


def run_history(config: Config, *, last_n: int | None = None) -> int:
    console = Console()
    entries = read_audit_log(config.audit_log_path, last_n=last_n)
    if not entries:
        console.print("No adjudications recorded", style="dim")
        return 0

    for entry in entries:
        console.print(format_audit_entry(entry), highlight=False)
    return 0
