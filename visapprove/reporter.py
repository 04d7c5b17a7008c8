"""Markdown summary posted back to the review thread."""

from __future__ import annotations

from .approvals.engine import AdjudicationResult
from .command import APPROVE_PREFIX, REJECT_PREFIX


def pages_url_for(owner: str, repo: str, pr_number: int) -> str:
    """URL of the published report for a pull request."""
    return f"https://{owner}.github.io/{repo}/pr-{pr_number}/"


def render_summary(result: AdjudicationResult | None, *, pages_url: str | None = None) -> str:
    lines = ["## Visual Regression Report", ""]

    if pages_url:
        lines += [f"**[View Full Report]({pages_url})**", ""]

    if result is not None:
        lines += ["### Summary", ""]
        if result.approved_files:
            lines.append(f"- ✅ {len(result.approved_files)} file(s) approved")
        if result.rejected_files:
            lines.append(f"- ❌ {len(result.rejected_files)} file(s) rejected")
        if not result.changed:
            lines.append("- No files changed status")
        lines.append("")

    lines += [
        "### How to Approve/Reject Changes",
        "",
        f"- To approve all changes: `{APPROVE_PREFIX}`",
        f"- To approve a specific file: `{APPROVE_PREFIX} filename.png`",
        f"- To reject a specific file: `{REJECT_PREFIX} filename.png`",
        "",
    ]
    return "\n".join(lines)
