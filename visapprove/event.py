"""Review comment event payloads (GitHub `issue_comment` shape)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .approvals.ledger import ApprovalMetadata


class EventError(RuntimeError):
    """Raised when an event payload is not a pull request review comment."""


@dataclass(frozen=True)
class ReviewEvent:
    body: str
    author: str
    owner: str
    repo: str
    pr_number: int
    server_url: str = "https://github.com"

    @property
    def pr_url(self) -> str:
        return f"{self.server_url}/{self.owner}/{self.repo}/pull/{self.pr_number}"

    @property
    def committer_email(self) -> str:
        return f"{self.author}@users.noreply.github.com"

    def metadata(self, commit_sha: str) -> ApprovalMetadata:
        return ApprovalMetadata(author=self.author, pr_url=self.pr_url, commit_sha=commit_sha)

    @classmethod
    def from_payload(cls, payload: dict[str, Any], *, server_url: str = "https://github.com") -> ReviewEvent:
        issue = payload.get("issue")
        comment = payload.get("comment")
        if not isinstance(issue, dict) or not issue.get("pull_request"):
            raise EventError("This action only works on PR comments")
        if not isinstance(comment, dict):
            raise EventError("Event payload has no comment")

        user = comment.get("user") if isinstance(comment.get("user"), dict) else {}
        author = str(user.get("login") or "").strip()
        if not author:
            raise EventError("Comment has no author login")

        repository = payload.get("repository") if isinstance(payload.get("repository"), dict) else {}
        full_name = str(repository.get("full_name") or "")
        owner, _, repo = full_name.partition("/")
        if not owner or not repo:
            raise EventError("Event payload has no repository full_name")

        number = issue.get("number")
        if not isinstance(number, int):
            raise EventError("Event payload has no issue number")

        return cls(
            body=str(comment.get("body") or ""),
            author=author,
            owner=owner,
            repo=repo,
            pr_number=number,
            server_url=server_url.rstrip("/"),
        )


def load_event(path: Path, *, server_url: str = "https://github.com") -> ReviewEvent:
    """
    Read an event payload file.

    Raises:
        EventError: If the file cannot be read or is not a PR comment event
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise EventError(f"Could not read event payload {path}: {e}") from e
    if not isinstance(payload, dict):
        raise EventError(f"Event payload {path} is not a JSON object")
    return ReviewEvent.from_payload(payload, server_url=server_url)
