"""CLI entry point — command definitions using Click.

Commands:
    pr        Quality gate, issues, hotspots, duplication and coverage of a PR
    metrics   Quality gate, issues and project-wide metrics of a branch
    issues    Unresolved issues of a branch, most severe first
    init      Generate a template config file
"""

import functools
import json
import sys
import warnings
from typing import Any

import click

from sonar_feedback import __version__

DEFAULT_ISSUE_LIMIT = 20


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _info(message: str) -> None:
    """Progress message; kept off stdout when stdout carries JSON."""
    obj = click.get_current_context().obj
    click.echo(message, err=obj["json"])


def _trace(message: str) -> None:
    if click.get_current_context().obj["verbose"]:
        click.echo(f"[verbose] {message}", err=True)


def _make_builder(ctx: click.Context):
    """Load config and return a ready ReportBuilder. Raises ConfigError."""
    from sonar_feedback.client import SonarClient
    from sonar_feedback.config import load
    from sonar_feedback.report import ReportBuilder

    obj = ctx.obj
    config = load(obj["config_path"])
    _trace(f"Connecting to {config.url} (project '{config.project_key}')")

    client = SonarClient(url=config.url, token=config.token)
    return ReportBuilder(client, config, json_mode=obj["json"], trace=_trace)


def _write_json(data: Any, ctx: click.Context) -> None:
    """Write one JSON document to stdout, and best-effort to --output."""
    obj = ctx.obj
    indent = 2 if obj["pretty"] else None
    text = json.dumps(data, indent=indent, ensure_ascii=False) + "\n"

    output_path: str | None = obj["output_path"]
    if output_path:
        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as exc:
            warnings.warn(f"Could not write JSON output to '{output_path}': {exc}", UserWarning)
        else:
            _trace(f"Report written to '{output_path}'")

    click.echo(text, nl=False)


def error_document(exc: Exception) -> dict:
    """``{"error": {message, statusCode, details}}`` for a failed command."""
    from sonar_feedback.client import ApiError

    if isinstance(exc, ApiError):
        return {"error": {
            "message": exc.message,
            "statusCode": exc.status_code,
            "details": exc.details,
        }}
    return {"error": {"message": str(exc), "statusCode": None, "details": None}}


def _handle_errors(func):
    """Decorator that turns any failure into one message and exit status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from sonar_feedback.client import ApiError
        from sonar_feedback.config import ConfigError
        from sonar_feedback.git import GitError

        try:
            return func(*args, **kwargs)
        except (ConfigError, GitError, ApiError) as exc:
            _fail(exc)
        except click.ClickException:
            raise
        except Exception as exc:
            _trace(f"Unexpected {type(exc).__name__}")
            _fail(exc)

    return wrapper


def _fail(exc: Exception) -> None:
    ctx = click.get_current_context()
    if ctx.obj["json"]:
        _write_json(error_document(exc), ctx)
    else:
        click.echo(f"{click.style('Error:', fg='red')} {exc}", err=True)
    sys.exit(1)


def _resolve_pull_request(pr_number: str | None) -> tuple[str, str | None]:
    """Return ``(pr_id, branch)``, auto-detecting the PR from git when needed."""
    from sonar_feedback.git import (
        current_branch,
        current_branch_or_raise,
        detect_pull_request,
        github_token,
        parse_github_remote,
        remote_url,
    )

    if pr_number:
        return pr_number, current_branch()

    _info("Pull request number not specified. Attempting to auto-detect...")
    branch = current_branch_or_raise()
    _info(f"Current branch: {branch}")

    owner, repo = parse_github_remote(remote_url())
    token, source = github_token()
    if source:
        _info(f"Using token from {source}")

    pr_id = detect_pull_request(branch, owner, repo, token)
    _info(click.style(f"Found pull request #{pr_id}", fg="green"))
    return pr_id, branch


def _resolve_branch(branch: str | None) -> str:
    from sonar_feedback.git import current_branch_or_raise

    return branch or current_branch_or_raise()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--json", "json_mode", is_flag=True, default=False,
              help="Output results as a single JSON document.")
@click.option("--output", "output_path", default=None,
              help="Also write the JSON document to a file (enables --json).")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.option("--config", "config_path", default=None,
              help="Path to a YAML config file (default: ./sonar-feedback.yaml if present).")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging on stderr.")
@click.version_option(__version__, prog_name="sonar-feedback")
@click.pass_context
def cli(ctx: click.Context, json_mode: bool, output_path: str | None, pretty: bool,
        config_path: str | None, verbose: bool) -> None:
    """Fetch SonarCloud feedback for a pull request or a branch."""
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_mode or bool(output_path)
    ctx.obj["output_path"] = output_path
    ctx.obj["pretty"] = pretty
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# pr
# ---------------------------------------------------------------------------

@cli.command("pr")
@click.argument("pr_number", required=False)
@click.pass_context
@_handle_errors
def pr_command(ctx: click.Context, pr_number: str | None) -> None:
    """Analysis of pull request PR_NUMBER (auto-detected from git if omitted)."""
    builder = _make_builder(ctx)
    pr_id, branch = _resolve_pull_request(pr_number)

    aggregate = builder.pull_request_report(pr_id, branch=branch)
    if ctx.obj["json"]:
        _write_json(aggregate.to_dict(), ctx)


# ---------------------------------------------------------------------------
# metrics
# ---------------------------------------------------------------------------

@cli.command("metrics")
@click.option("-b", "--branch", default=None,
              help="Branch to analyse (default: current git branch).")
@click.pass_context
@_handle_errors
def metrics_command(ctx: click.Context, branch: str | None) -> None:
    """Quality gate, issues and project-wide metrics of a branch."""
    builder = _make_builder(ctx)
    branch = _resolve_branch(branch)

    aggregate = builder.branch_report(branch)
    if ctx.obj["json"]:
        _write_json(aggregate.to_dict(), ctx)


# ---------------------------------------------------------------------------
# issues
# ---------------------------------------------------------------------------

@cli.command("issues")
@click.option("-b", "--branch", default=None,
              help="Branch to list issues for (default: current git branch).")
@click.option("-l", "--limit", type=click.IntRange(min=1), default=None,
              help=f"Maximum number of issues to list [default: {DEFAULT_ISSUE_LIMIT}].")
@click.option("-a", "--all", "show_all", is_flag=True, default=False,
              help="List every fetched issue.")
@click.pass_context
@_handle_errors
def issues_command(ctx: click.Context, branch: str | None, limit: int | None,
                   show_all: bool) -> None:
    """Unresolved issues of a branch, most severe first."""
    if limit is not None and show_all:
        raise click.UsageError("--limit and --all are mutually exclusive.")

    builder = _make_builder(ctx)
    branch = _resolve_branch(branch)

    listing = builder.issues_report(branch, limit=None if show_all else (limit or DEFAULT_ISSUE_LIMIT))
    if ctx.obj["json"]:
        _write_json(listing.to_dict(), ctx)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--path", "output_path", default="sonar-feedback.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template sonar-feedback.yaml file."""
    from sonar_feedback.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with your project key and organization; keep the token in SONAR_TOKEN.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
