"""CLI entrypoint for visapprove."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .command import CommandKind
from .config import DEFAULT_CONFIG_FILE, load_config


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
        force=True,
    )


def _path_overrides(f):
    f = click.option(
        "--diff-dir",
        type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
        default=None,
        help="Directory of diff images scanned when the report lists no failures",
    )(f)
    f = click.option(
        "--report",
        "report_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Path to the test report (report.json)",
    )(f)
    f = click.option(
        "--approvals",
        "approvals_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Path to the approvals ledger (approvals.json)",
    )(f)
    return f


def _metadata_options(f):
    f = click.option("--sha", "commit_sha", envvar="GITHUB_SHA", required=True, help="Commit SHA under review")(f)
    f = click.option("--pr-url", required=True, help="Pull request URL")(f)
    f = click.option("--author", required=True, help="Reviewer login")(f)
    return f


@click.group()
@click.version_option(__version__, prog_name="visapprove")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to config file (defaults to ./{DEFAULT_CONFIG_FILE})",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """visapprove - Review-comment sign-off for visual regression artifacts.

    Record approvals and rejections in the approvals ledger, then sync
    baselines and commit the result.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    if config_path is not None and not config_path.exists():
        raise click.BadParameter(f"File '{config_path}' does not exist.", param_hint="--config")
    try:
        ctx.obj["config"] = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _config(ctx: click.Context, **overrides):
    return ctx.obj["config"].with_overrides(**overrides)


@cli.command()
@click.argument("files", nargs=-1)
@_metadata_options
@_path_overrides
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def approve(
    ctx: click.Context,
    files: tuple[str, ...],
    author: str,
    pr_url: str,
    commit_sha: str,
    approvals_path: Path | None,
    report_path: Path | None,
    diff_dir: Path | None,
    output_json: bool,
) -> None:
    """Approve FILES, or every pending artifact when none are given.

    Examples:

        visapprove approve --author alice --pr-url URL --sha abc login.png

        visapprove approve --author alice --pr-url URL --sha abc
    """
    from .approvals.ledger import ApprovalMetadata
    from .commands.adjudicate_cmd import run_adjudicate

    config = _config(ctx, approvals_path=approvals_path, report_path=report_path, diff_directory=diff_dir)
    metadata = ApprovalMetadata(author=author, pr_url=pr_url, commit_sha=commit_sha)
    exit_code = run_adjudicate(config, CommandKind.APPROVE, files, metadata, output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.argument("files", nargs=-1)
@_metadata_options
@click.option(
    "--approvals",
    "approvals_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the approvals ledger (approvals.json)",
)
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def reject(
    ctx: click.Context,
    files: tuple[str, ...],
    author: str,
    pr_url: str,
    commit_sha: str,
    approvals_path: Path | None,
    output_json: bool,
) -> None:
    """Reject FILES.

    Rejecting nothing only refreshes the ledger metadata.
    """
    from .approvals.ledger import ApprovalMetadata
    from .commands.adjudicate_cmd import run_adjudicate

    config = _config(ctx, approvals_path=approvals_path)
    metadata = ApprovalMetadata(author=author, pr_url=pr_url, commit_sha=commit_sha)
    exit_code = run_adjudicate(config, CommandKind.REJECT, files, metadata, output_json=output_json)
    sys.exit(exit_code)


@cli.command("handle-comment")
@click.option(
    "--event",
    "event_path",
    envvar="GITHUB_EVENT_PATH",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the issue_comment event payload (defaults to $GITHUB_EVENT_PATH)",
)
@click.option("--sha", "commit_sha", envvar="GITHUB_SHA", required=True, help="Commit SHA under review")
@click.option(
    "--server-url",
    envvar="GITHUB_SERVER_URL",
    default="https://github.com",
    show_default=True,
    help="Base URL used to build pull request links",
)
@_path_overrides
@click.option("--sync/--no-sync", default=True, show_default=True, help="Run baseline sync after approvals")
@click.option("--commit/--no-commit", default=True, show_default=True, help="Commit and push the ledger")
@click.option(
    "--summary-out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the Markdown summary comment to this file",
)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append the name=value outputs to this file (defaults to $GITHUB_OUTPUT)",
)
@click.pass_context
def handle_comment(
    ctx: click.Context,
    event_path: Path,
    commit_sha: str,
    server_url: str,
    approvals_path: Path | None,
    report_path: Path | None,
    diff_dir: Path | None,
    sync: bool,
    commit: bool,
    summary_out: Path | None,
    github_output: Path | None,
) -> None:
    """Process a pull request comment event.

    Comments that do not start with /approve-visuals or /reject-visuals
    are ignored.
    """
    from .commands.adjudicate_cmd import run_handle_comment

    config = _config(ctx, approvals_path=approvals_path, report_path=report_path, diff_directory=diff_dir)
    exit_code = run_handle_comment(
        config,
        event_path,
        commit_sha,
        server_url=server_url,
        sync=sync,
        commit=commit,
        summary_out=summary_out,
        output_file=github_output,
    )
    sys.exit(exit_code)


@cli.command()
@click.option(
    "--approvals",
    "approvals_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the approvals ledger (approvals.json)",
)
@click.option("--json", "output_json", is_flag=True, help="Output the ledger as JSON")
@click.pass_context
def show(ctx: click.Context, approvals_path: Path | None, output_json: bool) -> None:
    """Show the approvals ledger."""
    from .commands.ledger_cmd import run_show

    exit_code = run_show(_config(ctx, approvals_path=approvals_path), output_json=output_json)
    sys.exit(exit_code)


@cli.command()
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N adjudications")
@click.option(
    "--approvals",
    "approvals_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the approvals ledger (the audit log sits beside it)",
)
@click.pass_context
def history(ctx: click.Context, last_n: int | None, approvals_path: Path | None) -> None:
    """Show past adjudications from the audit log."""
    from .commands.ledger_cmd import run_history

    exit_code = run_history(_config(ctx, approvals_path=approvals_path), last_n=last_n)
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
